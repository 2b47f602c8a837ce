"""Parse an AI course-structure response into topics.

Two independent strategies are tried in order:

1. Marker grammar. Each line is tokenized into a marker (``TOPIC_START`` or
   ``SUBTOPIC``), its name, and inline ``## KEY: value`` annotations. A small
   builder opens a topic on ``TOPIC_START`` and appends subtopics to the open
   topic on ``SUBTOPIC``.
2. Heading fallback, used only when the marker pass produced nothing: every
   level-2/3 markdown heading becomes a topic (deduplicated by exact name).
"""
import logging
import re
from dataclasses import dataclass, field

from study_buddy.errors import InputEmptyError, ParseError
from study_buddy.models import Subtopic, Topic, generate_id

logger = logging.getLogger(__name__)

MARKERS = ("TOPIC_START", "SUBTOPIC")
HEADING = re.compile(r"^#{2,3}\s+")

DEFAULT_DIFFICULTY = "Medium"
DEFAULT_CATEGORY = "General"


@dataclass
class MarkerToken:
    marker: str
    name: str
    values: dict = field(default_factory=dict)


def _annotation(line: str, key: str) -> str | None:
    match = re.search(rf"{key}:\s*([^#\n]+)", line, re.IGNORECASE)
    return match.group(1).strip() if match else None


def tokenize_line(line: str) -> MarkerToken | None:
    """Turn one structure line into a marker token, or None if it has no marker."""
    line = line.strip()
    for marker in MARKERS:
        if f"{marker}:" not in line:
            continue
        match = re.search(rf"{marker}:\s*(.+?)(?:\s*##|$)", line)
        if not match:
            return None
        values = {}
        for key in ("DIFFICULTY", "CATEGORY", "CONCEPTS"):
            value = _annotation(line, key)
            if value is not None:
                values[key] = value
        return MarkerToken(marker=marker, name=match.group(1).strip(), values=values)
    return None


class StructureBuilder:
    """Accumulates topics from a stream of marker tokens."""

    def __init__(self):
        self.topics = []
        self.current = None

    def feed(self, token: MarkerToken) -> None:
        if token.marker == "TOPIC_START":
            self.current = Topic(
                id=generate_id(),
                name=token.name,
                difficulty=token.values.get("DIFFICULTY") or DEFAULT_DIFFICULTY,
                category=token.values.get("CATEGORY") or DEFAULT_CATEGORY,
            )
            self.topics.append(self.current)
        elif token.marker == "SUBTOPIC" and self.current is not None:
            concepts = token.values.get("CONCEPTS")
            self.current.subtopics.append(Subtopic(
                id=generate_id(),
                name=token.name,
                concepts=[c.strip() for c in concepts.split(",") if c.strip()] if concepts else [],
            ))


def parse_markers(lines: list) -> list:
    builder = StructureBuilder()
    for line in lines:
        token = tokenize_line(line)
        if token is not None:
            builder.feed(token)
    return builder.topics


def parse_headings(lines: list) -> list:
    topics = []
    seen = set()
    for line in lines:
        if not HEADING.match(line):
            continue
        name = line.lstrip("#").strip()
        if name and name not in seen:
            seen.add(name)
            topics.append(Topic(id=generate_id(), name=name))
    return topics


def parse_structure_text(text: str) -> list:
    """Parse a structure response into an ordered list of fresh topics.

    Raises InputEmptyError for blank text and ParseError when neither
    strategy finds any topic.
    """
    if not text or not text.strip():
        raise InputEmptyError("Please paste the AI response")
    lines = text.split("\n")
    try:
        topics = parse_markers(lines) or parse_headings(lines)
    except (re.error, ValueError) as e:
        raise ParseError(f"Failed to parse structure: {e}") from e
    if not topics:
        logger.warning("Structure response contained no TOPIC_START markers or headings")
        raise ParseError(
            "Failed to parse structure. Expected 'TOPIC_START: <name> ## DIFFICULTY: ... ## CATEGORY: ...' "
            "lines or '##' headings."
        )
    return topics
