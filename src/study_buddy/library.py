"""Course, topic and content-slot lifecycle over the data tree.

Operations that change the tree persist it through the given store once the
change is complete. Anything that fails to parse or validate raises before
the tree is touched.
"""
import logging
from datetime import datetime

from study_buddy.content import parse_content_response
from study_buddy.errors import InputEmptyError, NotFoundError, ValidationError
from study_buddy.models import (
    CONTENT_TYPES, READING_TYPES, ContentSlot, Course, Data, Topic, generate_id,
)
from study_buddy.reading import missing_sections
from study_buddy.structure import parse_structure_text

logger = logging.getLogger(__name__)


def new_data() -> Data:
    return Data()


def find_course(data: Data, course_id: str) -> Course:
    for course in data.courses:
        if course.id == course_id:
            return course
    raise NotFoundError(f"Course not found: {course_id}")


def find_topic(course: Course, topic_id: str) -> Topic:
    for topic in course.topics:
        if topic.id == topic_id:
            return topic
    raise NotFoundError(f"Topic not found: {topic_id}")


def find_slot(data: Data, course_id: str, topic_id: str, content_type: str) -> ContentSlot:
    if content_type not in CONTENT_TYPES:
        raise ValidationError(f"Unknown content type: {content_type}")
    return find_topic(find_course(data, course_id), topic_id).slots[content_type]


def add_course(store, data: Data, name: str, description: str = "") -> Course:
    name = (name or "").strip()
    if not name:
        raise InputEmptyError("Please enter a course name")
    course = Course(
        id=generate_id(),
        name=name,
        description=(description or "").strip(),
        created_at=datetime.now().isoformat(),
    )
    data.courses.append(course)
    store.save(data)
    logger.info("Created course %s (%s)", course.name, course.id)
    return course


def delete_course(store, data: Data, course_id: str) -> None:
    course = find_course(data, course_id)
    data.courses.remove(course)
    store.save(data)
    logger.info("Deleted course %s with %d topic(s)", course.name, len(course.topics))


def apply_structure(store, data: Data, course_id: str, response: str) -> list:
    """Replace a course's topics with those parsed from a structure response."""
    course = find_course(data, course_id)
    topics = parse_structure_text(response)
    course.topics = topics
    course.structure_analyzed = True
    store.save(data)
    logger.info("Applied structure to %s: %d topic(s)", course.name, len(topics))
    return topics


def _filled_slot(previous: ContentSlot, content, response: str, now: str) -> ContentSlot:
    slot = ContentSlot(
        content_type=previous.content_type,
        status="filled",
        completed=previous.completed,
        content=content,
        raw_response=response,
        last_updated=now,
    )
    if previous.content_type == "quiz":
        slot.attempts = list(previous.attempts)
        slot.best_score = previous.best_score
    if previous.content_type == "flashcards":
        card_ids = {c.id for c in content.cards}
        slot.srs = {cid: s for cid, s in previous.srs.items() if cid in card_ids}
    return slot


def save_content(store, data: Data, course_id: str, topic_id: str, content_type: str,
                 response: str, now: str | None = None) -> list:
    """Parse a pasted response into the topic's slot.

    Returns the reading sections that look missing (advisory, reading types
    only). The slot is left as it was if parsing fails.
    """
    topic = find_topic(find_course(data, course_id), topic_id)
    if content_type not in CONTENT_TYPES:
        raise ValidationError(f"Unknown content type: {content_type}")
    response = (response or "").strip()
    content = parse_content_response(response, content_type)
    previous = topic.slots[content_type]
    topic.slots[content_type] = _filled_slot(previous, content, response, now or datetime.now().isoformat())
    store.save(data)
    logger.info("Saved %s content for topic %s", content_type, topic.name)
    if content_type in READING_TYPES:
        return missing_sections(content.markdown, content_type)
    return []


def edit_source(data: Data, course_id: str, topic_id: str, content_type: str) -> str | None:
    """The raw response a slot was filled from, for re-editing."""
    return find_slot(data, course_id, topic_id, content_type).raw_response


def delete_content(store, data: Data, course_id: str, topic_id: str, content_type: str) -> None:
    topic = find_topic(find_course(data, course_id), topic_id)
    if content_type not in CONTENT_TYPES:
        raise ValidationError(f"Unknown content type: {content_type}")
    topic.slots[content_type] = ContentSlot(content_type=content_type)
    store.save(data)
    logger.info("Deleted %s content for topic %s", content_type, topic.name)


def set_completed(store, data: Data, course_id: str, topic_id: str, content_type: str,
                  completed: bool = True) -> None:
    slot = find_slot(data, course_id, topic_id, content_type)
    if not slot.is_filled:
        raise ValidationError("Only filled content can be marked completed")
    slot.completed = completed
    store.save(data)
