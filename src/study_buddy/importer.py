"""Export and import of the full data tree as a JSON document."""
import json
import logging
from datetime import date, datetime
from pathlib import Path

from study_buddy.errors import ParseError, StudyBuddyError
from study_buddy.models import Data, PersonalizationPrefs
from study_buddy.settings import prefs_from_dict, prefs_to_dict, save_prefs

logger = logging.getLogger(__name__)


def default_export_name() -> str:
    return f"study-buddy-backup-{date.today().isoformat()}.json"


def export_data(data: Data, prefs: PersonalizationPrefs, file_path: str) -> dict:
    doc = data.to_dict()
    doc["settings"] = {"personalization": prefs_to_dict(prefs)}
    doc["exportedAt"] = datetime.now().isoformat()
    path = Path(file_path)
    path.write_text(json.dumps(doc, indent=2))
    logger.info("Exported %d course(s) to %s", len(data.courses), path)
    return {"filename": path.name, "courses": len(data.courses)}


def read_import(file_path: str) -> tuple[Data, PersonalizationPrefs | None]:
    """Read an exported document. Raises ParseError if it isn't one."""
    try:
        doc = json.loads(Path(file_path).read_text())
    except ValueError as e:
        raise ParseError(f"Invalid file format: {e}") from e
    if not isinstance(doc, dict) or "courses" not in doc:
        raise ParseError("Invalid file format: missing 'courses'")
    try:
        data = Data.from_dict(doc)
        personalization = (doc.get("settings") or {}).get("personalization")
        prefs = prefs_from_dict(personalization) if personalization else None
    except (KeyError, TypeError, ValueError, StudyBuddyError) as e:
        raise ParseError(f"Invalid file format: {e}") from e
    return data, prefs


def import_data(store, file_path: str) -> tuple[Data, PersonalizationPrefs | None]:
    """Replace stored data (and preferences, if exported) with a file's contents."""
    data, prefs = read_import(file_path)
    store.save(data)
    if prefs is not None:
        save_prefs(store.db_path, prefs)
    logger.info("Imported %d course(s) from %s", len(data.courses), file_path)
    return data, prefs


def clear_all_data(store) -> Data:
    data = Data()
    store.save(data)
    logger.info("Cleared all data")
    return data
