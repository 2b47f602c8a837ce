"""Personalization preferences stored in the user_settings table."""
import logging
from dataclasses import asdict, fields

from study_buddy.db import get_connection
from study_buddy.errors import ValidationError
from study_buddy.models import PersonalizationPrefs

logger = logging.getLogger(__name__)

FLASHCARDS_MIN = 5
FLASHCARDS_MAX = 50

# attribute name -> stored key
KEYS = {
    "depth": "depth",
    "examples": "examples",
    "rigor": "rigor",
    "read_time": "readTime",
    "difficulty": "difficulty",
    "citation_style": "citationStyle",
    "flashcards_count": "flashcardsCount",
}
INT_FIELDS = {"read_time", "flashcards_count"}


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def _coerce(name: str, value):
    if name not in INT_FIELDS:
        value = str(value).strip()
        if not value:
            raise ValidationError(f"{KEYS[name]} cannot be blank")
        return value
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{KEYS[name]} must be a whole number, got {value!r}")
    if name == "flashcards_count":
        return max(FLASHCARDS_MIN, min(FLASHCARDS_MAX, number))
    return max(1, number)


def load_prefs(db_path: str) -> PersonalizationPrefs:
    prefs = PersonalizationPrefs()
    for f in fields(PersonalizationPrefs):
        stored = get_setting(db_path, KEYS[f.name])
        if stored is None:
            continue
        try:
            setattr(prefs, f.name, _coerce(f.name, stored))
        except ValidationError as e:
            logger.warning("Ignoring stored preference: %s", e)
    return prefs


def update_pref(db_path: str, prefs: PersonalizationPrefs, key: str, value) -> PersonalizationPrefs:
    """Change one preference (by attribute or stored key name) and persist it."""
    name = next((attr for attr, stored in KEYS.items() if key in (attr, stored)), None)
    if name is None:
        raise ValidationError(f"Unknown preference: {key}")
    setattr(prefs, name, _coerce(name, value))
    set_setting(db_path, KEYS[name], str(getattr(prefs, name)))
    logger.info("Preference %s set to %s", KEYS[name], getattr(prefs, name))
    return prefs


def save_prefs(db_path: str, prefs: PersonalizationPrefs) -> None:
    for name, value in asdict(prefs).items():
        set_setting(db_path, KEYS[name], str(_coerce(name, value)))


def prefs_to_dict(prefs: PersonalizationPrefs) -> dict:
    return {KEYS[name]: value for name, value in asdict(prefs).items()}


def prefs_from_dict(d: dict) -> PersonalizationPrefs:
    prefs = PersonalizationPrefs()
    for name, stored in KEYS.items():
        if stored in d:
            setattr(prefs, name, _coerce(name, d[stored]))
    return prefs
