"""Turn AI responses (and previously stored payloads) into typed content."""
import logging
import re

from study_buddy.errors import InputEmptyError, ParseError, ValidationError
from study_buddy.extract import extract_json_from_text, is_json_document
from study_buddy.models import (
    FLASHCARDS_LEGACY, FLASHCARDS_V1, GENERIC_LEGACY, MD_V1, QUIZ_LEGACY, QUIZ_V1,
    READING_TYPES, READING_V1, Card, FlashcardsContent, MarkdownContent, Question,
    QuizContent, ReadingContent, ReadingSection,
)

logger = logging.getLogger(__name__)

MARKDOWN_HEADING = re.compile(r"^\s{0,3}#{1,6}\s*[^\s#]", re.MULTILINE)
LEGACY_SECTION = re.compile(r"^#{2,3}\s+")


def _as_list(value) -> list:
    return list(value) if isinstance(value, list) else []


def _question_from_item(item: dict, index: int) -> Question | None:
    """Build a question from a quiz_mcq_v1 item, or None if it is unusable.

    Usable means exactly four options and exactly one flagged isCorrect.
    """
    if not isinstance(item, dict):
        return None
    options = item.get("options")
    if not isinstance(options, list) or len(options) != 4 or not all(isinstance(o, dict) for o in options):
        return None
    correct = [i for i, o in enumerate(options) if o.get("isCorrect") is True]
    if len(correct) != 1:
        return None
    return Question(
        id=item.get("id") or index + 1,
        text=item.get("stem") or item.get("text") or item.get("prompt") or "",
        options=[o.get("text", "") for o in options],
        correct_answer=correct[0],
        feedback={i: o.get("feedback") or "" for i, o in enumerate(options)},
        difficulty=item.get("difficulty") or "medium",
        citation_ids=_as_list(item.get("citation_ids")),
    )


def parse_quiz_json(doc) -> QuizContent:
    if not isinstance(doc, dict):
        raise ParseError("Expected a quiz_mcq_v1 JSON block")
    tag = doc.get("schema_version")
    if tag is not None and tag != QUIZ_V1:
        raise ParseError(f"Expected schema_version {QUIZ_V1!r}, got {tag!r}")
    items = doc.get("items", [])
    if not isinstance(items, list) or (tag is None and "items" not in doc):
        raise ParseError("Expected a quiz_mcq_v1 JSON block with an 'items' array")
    questions = []
    for index, item in enumerate(items):
        question = _question_from_item(item, index)
        if question is not None:
            questions.append(question)
    if not questions:
        raise ParseError("Quiz JSON parsed, but no valid items (need 4 options with feedback and one isCorrect)")
    if len(questions) < len(items):
        logger.warning("Dropped %d unusable quiz item(s)", len(items) - len(questions))
    return QuizContent(questions=questions, title=doc.get("title") or "")


def parse_flashcards_json(doc) -> FlashcardsContent:
    if not isinstance(doc, dict):
        raise ParseError("Expected a flashcards_v1 JSON block")
    tag = doc.get("schema_version")
    if tag is not None and tag != FLASHCARDS_V1:
        raise ParseError(f"Expected schema_version {FLASHCARDS_V1!r}, got {tag!r}")
    raw_cards = doc.get("cards", [])
    if not isinstance(raw_cards, list) or (tag is None and "cards" not in doc):
        raise ParseError("Expected a flashcards_v1 JSON block with a 'cards' array")
    cards = []
    for i, c in enumerate(raw_cards):
        if not isinstance(c, dict):
            continue
        cards.append(Card(
            id=str(c.get("id") or f"c{i + 1}"),
            front=c.get("front") or "",
            back=c.get("back") or "",
            tags=_as_list(c.get("tags")),
            citation_ids=_as_list(c.get("citation_ids")),
        ))
    return FlashcardsContent(cards=cards)


def parse_markdown(text: str, content_type: str) -> MarkdownContent:
    if is_json_document(text):
        raise ParseError(
            f"{content_type.capitalize()} content must be plain markdown, not JSON. "
            "Ask the assistant for markdown with '#' headings."
        )
    if not MARKDOWN_HEADING.search(text):
        raise ParseError("Markdown must contain at least one heading line starting with '#'")
    return MarkdownContent(markdown=text.strip())


def parse_content_response(response: str, content_type: str):
    """Parse a freshly pasted response for one content type.

    Quiz and flashcards need their JSON schema; reading types need markdown.
    Raises InputEmptyError, ParseError or ValidationError; never mutates.
    """
    if not response or not response.strip():
        raise InputEmptyError("Please paste the AI response")
    if content_type == "quiz":
        return parse_quiz_json(extract_json_from_text(response))
    if content_type == "flashcards":
        return parse_flashcards_json(extract_json_from_text(response))
    if content_type in READING_TYPES:
        return parse_markdown(response, content_type)
    raise ValidationError(f"Unknown content type: {content_type}")


# Legacy text formats, kept for reading data saved by older versions.

def _clean(s: str) -> str:
    return re.sub(r"\s+", " ", s or "").strip()


def parse_quiz_legacy(response: str) -> QuizContent:
    """Parse ``QUESTION`` blocks with ``A) text ## FEEDBACK: ... ## CORRECT`` options."""
    questions = []
    current = None

    def push_if_valid():
        if current is not None and current.usable:
            questions.append(current)

    for raw in response.split("\n"):
        line = raw.strip()
        if re.match(r"^#{2,3}\s*QUESTION", line, re.IGNORECASE) or re.match(r"^QUESTION[_\s-]?\d+", line, re.IGNORECASE):
            push_if_valid()
            current = Question(id=len(questions) + 1, text="", options=[], correct_answer=None)
            continue
        if current is None:
            continue
        option = re.match(r"^([A-D])\)\s*(.+)$", line)
        if option:
            rest = option.group(2)
            feedback = re.search(r"##\s*FEEDBACK:\s*([^#]*)", rest, re.IGNORECASE)
            idx = len(current.options)
            current.options.append(_clean(rest.split("##")[0]))
            current.feedback[idx] = _clean(feedback.group(1)) if feedback else ""
            if re.search(r"##\s*CORRECT\b", rest, re.IGNORECASE):
                current.correct_answer = idx
            continue
        if not current.text and line and not line.startswith("#") and not line.startswith("```"):
            current.text = _clean(line)
    push_if_valid()
    return QuizContent(questions=questions, schema_version=QUIZ_LEGACY)


def parse_flashcards_legacy(response: str) -> FlashcardsContent:
    """Parse ``**Card N:`` blocks with ``- Front:`` / ``- Back:`` lines."""
    cards = []
    for block in re.split(r"\*\*Card\s*\d+\s*:", response, flags=re.IGNORECASE):
        if not block.strip():
            continue
        front = re.search(r"-\s*Front:\s*(.*?)(?:\n|$)", block, re.IGNORECASE)
        back = re.search(r"-\s*Back:\s*([\s\S]*?)(?:\n\*\*|\Z)", block, re.IGNORECASE)
        front_text = front.group(1).strip() if front else ""
        back_text = back.group(1).strip().rstrip("*").strip() if back else ""
        if front_text and back_text:
            cards.append(Card(id=f"c{len(cards) + 1}", front=front_text, back=back_text))
    return FlashcardsContent(cards=cards, schema_version=FLASHCARDS_LEGACY)


def parse_generic_legacy(response: str) -> ReadingContent:
    """Split text into sections at level-2/3 headings."""
    sections = []
    current = None
    for line in response.split("\n"):
        if LEGACY_SECTION.match(line):
            if current is not None:
                sections.append(current)
            current = ReadingSection(title=line.lstrip("#").strip())
        elif current is not None:
            current.body_markdown += line + "\n"
    if current is not None:
        sections.append(current)
    return ReadingContent(sections=sections, schema_version=GENERIC_LEGACY, content=response)


def _micro_check(item, index: int) -> Question | None:
    options = item.get("options") if isinstance(item, dict) else None
    if isinstance(options, list) and options and isinstance(options[0], dict):
        return _question_from_item({**item, "id": item.get("check_id") or item.get("id")}, index)
    if isinstance(item, dict):
        question = Question.from_dict(item)
        return question if question.usable else None
    return None


def parse_reading_content_v1(doc: dict) -> ReadingContent:
    """Structured reading with sections and embedded micro-check questions."""
    sections = []
    for sec in doc.get("sections") or []:
        if not isinstance(sec, dict):
            continue
        checks = [_micro_check(c, i) for i, c in enumerate(sec.get("micro_checks") or [])]
        sections.append(ReadingSection(
            title=sec.get("title") or "",
            body_markdown=sec.get("body_markdown") or sec.get("content") or "",
            micro_checks=[c for c in checks if c is not None],
            section_id=sec.get("section_id") or "",
            citations=list(sec.get("citations") or []),
        ))
    return ReadingContent(
        sections=sections,
        schema_version=doc.get("schema_version") or READING_V1,
        title=doc.get("title") or "",
        rendered_markdown=doc.get("rendered_markdown") or "",
        content=doc.get("content") or "",
        confidence=doc.get("confidence"),
    )


def _decode_quiz(doc: dict) -> QuizContent:
    questions = [Question.from_dict(q) for q in doc.get("questions") or []]
    return QuizContent(
        questions=[q for q in questions if q.usable],
        schema_version=doc.get("schema_version") or QUIZ_LEGACY,
        title=doc.get("title") or "",
    )


def _decode_flashcards(doc: dict) -> FlashcardsContent:
    return FlashcardsContent(
        cards=[Card.from_dict(c) for c in doc.get("cards") or []],
        schema_version=doc.get("schema_version") or FLASHCARDS_LEGACY,
    )


def _decode_markdown(doc: dict) -> MarkdownContent:
    return MarkdownContent(markdown=doc.get("markdown") or "")


DECODERS = {
    QUIZ_V1: _decode_quiz,
    QUIZ_LEGACY: _decode_quiz,
    FLASHCARDS_V1: _decode_flashcards,
    FLASHCARDS_LEGACY: _decode_flashcards,
    MD_V1: _decode_markdown,
    READING_V1: parse_reading_content_v1,
    GENERIC_LEGACY: parse_reading_content_v1,
}


def _legacy_decoder(content_type: str, doc: dict):
    if content_type == "quiz" or "questions" in doc:
        return _decode_quiz
    if content_type == "flashcards" or "cards" in doc:
        return _decode_flashcards
    if "markdown" in doc:
        return _decode_markdown
    return lambda d: parse_reading_content_v1({**d, "schema_version": GENERIC_LEGACY})


def decode_content(content_type: str, doc: dict):
    """Decode a stored payload by its schema_version tag.

    Payloads without a tag come from older versions and are decoded by shape.
    """
    if not isinstance(doc, dict):
        raise ParseError(f"Stored {content_type} content is not an object")
    tag = doc.get("schema_version")
    if tag is None:
        return _legacy_decoder(content_type, doc)(doc)
    decoder = DECODERS.get(tag)
    if decoder is None:
        raise ParseError(f"Unknown schema_version {tag!r} for {content_type} content")
    return decoder(doc)
