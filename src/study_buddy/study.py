"""Cross-course study queue."""
from dataclasses import dataclass, field
from datetime import date

from study_buddy.flashcards import count_due
from study_buddy.models import Data

QUEUE_LIMIT = 8

CREATE_PRIORITY = 2
REVIEW_PRIORITY = 1


@dataclass
class QueueItem:
    kind: str
    priority: int
    label: str
    course_id: str
    topic_id: str
    content_type: str
    due_cards: int = 0


@dataclass
class StudyQueue:
    items: list = field(default_factory=list)
    nothing_to_do: bool = False


def build_study_queue(data: Data, today: date | None = None, limit: int = QUEUE_LIMIT) -> StudyQueue:
    """Rank pending work across every course.

    Empty slots become "create" items (priority 2); filled flashcard slots
    not yet marked completed become "review" items (priority 1). Sorted by
    priority, then label.
    """
    items = []
    for course in data.courses:
        for topic in course.topics:
            for content_type, slot in topic.slots.items():
                if slot.status == "empty":
                    items.append(QueueItem(
                        kind="content",
                        priority=CREATE_PRIORITY,
                        label=f"{topic.name} • {content_type.capitalize()}",
                        course_id=course.id,
                        topic_id=topic.id,
                        content_type=content_type,
                    ))
            flashcards = topic.slots.get("flashcards")
            if flashcards is not None and flashcards.is_filled and not flashcards.completed:
                items.append(QueueItem(
                    kind="review",
                    priority=REVIEW_PRIORITY,
                    label=f"{topic.name} • Flashcards Review",
                    course_id=course.id,
                    topic_id=topic.id,
                    content_type="flashcards",
                    due_cards=count_due(flashcards, today),
                ))
    if not items:
        return StudyQueue(nothing_to_do=True)
    items.sort(key=lambda it: (it.priority, it.label))
    return StudyQueue(items=items[:limit])
