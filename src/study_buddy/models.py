"""Data classes for the course / topic / content-slot tree."""
import math
import random
import string
import time
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Optional

CONTENT_TYPES = ("summary", "flashcards", "quiz", "explainer", "practice", "review")
READING_TYPES = ("summary", "explainer", "practice", "review")

QUIZ_V1 = "quiz_mcq_v1"
QUIZ_LEGACY = "quiz_mcq_legacy"
FLASHCARDS_V1 = "flashcards_v1"
FLASHCARDS_LEGACY = "flashcards_legacy"
MD_V1 = "md_v1"
READING_V1 = "reading_content_v1"
GENERIC_LEGACY = "generic_legacy"

DEFAULT_EASE = 2.5


def round_half_up(value: float) -> int:
    """Round halves up: 12.5 -> 13, 10.5 -> 11."""
    return math.floor(value + 0.5)


def generate_id() -> str:
    """Millisecond timestamp followed by a short random suffix."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=7))
    return f"{int(time.time() * 1000)}{suffix}"


@dataclass
class Question:
    id: object
    text: str
    options: list
    correct_answer: int
    feedback: dict = field(default_factory=dict)
    difficulty: str = "medium"
    citation_ids: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "type": "multiple_choice",
            "difficulty": self.difficulty,
            "options": list(self.options),
            "correctAnswer": self.correct_answer,
            "feedback": {str(k): v for k, v in self.feedback.items()},
            "citation_ids": list(self.citation_ids),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Question":
        feedback = d.get("feedback")
        return cls(
            id=d.get("id"),
            text=d.get("text", ""),
            options=list(d["options"]) if isinstance(d.get("options"), list) else [],
            correct_answer=d.get("correctAnswer"),
            feedback={int(k): v for k, v in feedback.items()} if isinstance(feedback, dict) else {},
            difficulty=d.get("difficulty", "medium"),
            citation_ids=list(d.get("citation_ids") or []),
        )

    @property
    def usable(self) -> bool:
        return (
            len(self.options) == 4
            and isinstance(self.correct_answer, int)
            and 0 <= self.correct_answer < 4
        )


@dataclass
class Card:
    id: str
    front: str
    back: str
    tags: list = field(default_factory=list)
    citation_ids: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "front": self.front,
            "back": self.back,
            "tags": list(self.tags),
            "citation_ids": list(self.citation_ids),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Card":
        return cls(
            id=str(d.get("id")),
            front=d.get("front", ""),
            back=d.get("back", ""),
            tags=list(d.get("tags") or []),
            citation_ids=list(d.get("citation_ids") or []),
        )


@dataclass
class QuizContent:
    questions: list
    schema_version: str = QUIZ_V1
    title: str = ""

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    def to_dict(self) -> dict:
        return {
            "schema_version": self.schema_version,
            "title": self.title,
            "questions": [q.to_dict() for q in self.questions],
            "totalQuestions": self.total_questions,
        }


@dataclass
class FlashcardsContent:
    cards: list
    schema_version: str = FLASHCARDS_V1

    @property
    def total_cards(self) -> int:
        return len(self.cards)

    def to_dict(self) -> dict:
        return {
            "schema_version": self.schema_version,
            "cards": [c.to_dict() for c in self.cards],
            "totalCards": self.total_cards,
        }


@dataclass
class MarkdownContent:
    markdown: str
    schema_version: str = MD_V1

    def to_dict(self) -> dict:
        return {"schema_version": self.schema_version, "markdown": self.markdown}


@dataclass
class ReadingSection:
    title: str
    body_markdown: str = ""
    micro_checks: list = field(default_factory=list)
    section_id: str = ""
    citations: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "section_id": self.section_id,
            "title": self.title,
            "body_markdown": self.body_markdown,
            "micro_checks": [q.to_dict() for q in self.micro_checks],
            "citations": list(self.citations),
        }


@dataclass
class ReadingContent:
    """Structured reading (reading_content_v1) or heading-split legacy text."""
    sections: list
    schema_version: str = READING_V1
    title: str = ""
    rendered_markdown: str = ""
    content: str = ""
    confidence: Optional[dict] = None

    def to_dict(self) -> dict:
        return {
            "schema_version": self.schema_version,
            "title": self.title,
            "rendered_markdown": self.rendered_markdown,
            "content": self.content,
            "sections": [s.to_dict() for s in self.sections],
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class Attempt:
    score: int
    total: int
    percentage: int
    time_spent: int
    date: str
    answers: tuple = ()

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "total": self.total,
            "percentage": self.percentage,
            "timeSpent": self.time_spent,
            "date": self.date,
            "answers": list(self.answers),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Attempt":
        return cls(
            score=d.get("score", 0),
            total=d.get("total", 0),
            percentage=d.get("percentage", 0),
            time_spent=d.get("timeSpent", 0),
            date=d.get("date", ""),
            answers=tuple(d.get("answers") or ()),
        )


@dataclass(frozen=True)
class CardState:
    due: date
    ease: float = DEFAULT_EASE
    reps: int = 0
    interval: int = 0
    last_grade: Optional[int] = None

    def evolve(self, **changes) -> "CardState":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "ease": self.ease,
            "reps": self.reps,
            "interval": self.interval,
            "due": self.due.isoformat(),
            "lastGrade": self.last_grade,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "CardState":
        return cls(
            due=date.fromisoformat(d["due"][:10]),
            ease=float(d.get("ease", DEFAULT_EASE)),
            reps=int(d.get("reps", 0)),
            interval=int(d.get("interval", 0)),
            last_grade=d.get("lastGrade"),
        )


@dataclass
class ContentSlot:
    content_type: str
    status: str = "empty"
    completed: bool = False
    content: object = None
    raw_response: Optional[str] = None
    last_updated: Optional[str] = None
    # quiz only
    attempts: list = field(default_factory=list)
    best_score: int = 0
    # flashcards only
    srs: dict = field(default_factory=dict)

    @property
    def is_filled(self) -> bool:
        return self.status == "filled" and self.content is not None

    def to_dict(self) -> dict:
        d = {
            "status": self.status,
            "completed": self.completed,
            "content": self.content.to_dict() if self.content is not None else None,
            "rawResponse": self.raw_response,
            "lastUpdated": self.last_updated,
        }
        if self.content_type == "quiz":
            d["attempts"] = [a.to_dict() for a in self.attempts]
            d["bestScore"] = self.best_score
        if self.content_type == "flashcards":
            d["srs"] = {"cards": {cid: s.to_dict() for cid, s in self.srs.items()}}
        return d

    @classmethod
    def from_dict(cls, content_type: str, d: dict) -> "ContentSlot":
        from study_buddy.content import decode_content

        payload = d.get("content")
        srs_cards = (d.get("srs") or {}).get("cards") or {}
        return cls(
            content_type=content_type,
            status=d.get("status", "empty"),
            completed=bool(d.get("completed", False)),
            content=decode_content(content_type, payload) if payload else None,
            raw_response=d.get("rawResponse"),
            last_updated=d.get("lastUpdated"),
            attempts=[Attempt.from_dict(a) for a in d.get("attempts") or []],
            best_score=d.get("bestScore") or 0,
            srs={cid: CardState.from_dict(s) for cid, s in srs_cards.items()},
        )


def empty_slots() -> dict:
    return {t: ContentSlot(content_type=t) for t in CONTENT_TYPES}


@dataclass
class Subtopic:
    id: str
    name: str
    concepts: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "concepts": list(self.concepts)}


@dataclass
class Topic:
    id: str
    name: str
    difficulty: str = "Medium"
    category: str = "General"
    subtopics: list = field(default_factory=list)
    slots: dict = field(default_factory=empty_slots)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "difficulty": self.difficulty,
            "category": self.category,
            "subtopics": [s.to_dict() for s in self.subtopics],
            "contentSlots": {t: s.to_dict() for t, s in self.slots.items()},
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Topic":
        stored = d.get("contentSlots") or {}
        slots = empty_slots()
        for content_type in CONTENT_TYPES:
            if content_type in stored:
                slots[content_type] = ContentSlot.from_dict(content_type, stored[content_type])
        return cls(
            id=str(d["id"]),
            name=d.get("name", ""),
            difficulty=d.get("difficulty", "Medium"),
            category=d.get("category", "General"),
            subtopics=[
                Subtopic(id=str(s.get("id", "")), name=s.get("name", ""), concepts=list(s.get("concepts") or []))
                for s in d.get("subtopics") or []
            ],
            slots=slots,
        )


@dataclass
class Course:
    id: str
    name: str
    description: str = ""
    created_at: str = ""
    structure_analyzed: bool = False
    topics: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "created": self.created_at,
            "structureAnalyzed": self.structure_analyzed,
            "topics": [t.to_dict() for t in self.topics],
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Course":
        return cls(
            id=str(d["id"]),
            name=d.get("name", ""),
            description=d.get("description", ""),
            created_at=d.get("created", ""),
            structure_analyzed=bool(d.get("structureAnalyzed", False)),
            topics=[Topic.from_dict(t) for t in d.get("topics") or []],
        )


@dataclass
class Data:
    courses: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"courses": [c.to_dict() for c in self.courses]}

    @classmethod
    def from_dict(cls, d: dict) -> "Data":
        return cls(courses=[Course.from_dict(c) for c in d.get("courses") or []])


@dataclass
class PersonalizationPrefs:
    depth: str = "standard"
    examples: str = "medium"
    rigor: str = "light"
    read_time: int = 10
    difficulty: str = "Intermediate"
    citation_style: str = "none"
    flashcards_count: int = 18
