"""Prompt templates the learner pastes into an AI assistant."""
import json

from study_buddy.models import FLASHCARDS_V1, QUIZ_V1, PersonalizationPrefs, Topic
from study_buddy.reading import EXPECTED_SECTIONS

QUIZ_ITEM_COUNT = 10

STRUCTURE_PROMPT = """You are an expert academic analyzer. Create a structured breakdown using EXACT markers:

## COURSE_STRUCTURE_START: [Course Name]

### TOPIC_START: [Topic Name] ## DIFFICULTY: [Beginner/Intermediate/Advanced] ## CATEGORY: [Category]
#### SUBTOPIC: [Subtopic Name] ## CONCEPTS: [Key concept 1, Key concept 2]
### TOPIC_END

## COURSE_STRUCTURE_END

Rules:
1) Use the exact markers (TOPIC_START, SUBTOPIC, DIFFICULTY, CATEGORY, CONCEPTS).
2) Be comprehensive and ordered logically.
3) No extra commentary."""

READING_ROLES = {
    "summary": "a compact summary a learner can revise from in one sitting",
    "explainer": "a step-by-step explanation that builds intuition before detail",
    "practice": "a graded problem set; follow every problem with a line starting 'Solution:'",
    "review": "an end-of-topic review connecting this topic to the rest of the course",
}


def structure_prompt() -> str:
    return STRUCTURE_PROMPT


def _quiz_template(topic: Topic) -> dict:
    return {
        "schema_version": QUIZ_V1,
        "topic_id": topic.id,
        "title": f"{topic.name} Quiz",
        "items": [{
            "id": "q1",
            "stem": "Write a clear question stem here...",
            "options": [
                {"text": "Option A", "feedback": "Why A is right/wrong", "isCorrect": False},
                {"text": "Option B", "feedback": "Why B is right/wrong", "isCorrect": True},
                {"text": "Option C", "feedback": "Why C is right/wrong", "isCorrect": False},
                {"text": "Option D", "feedback": "Why D is right/wrong", "isCorrect": False},
            ],
            "difficulty": "medium",
            "citation_ids": [],
        }],
        "metadata": {"count": QUIZ_ITEM_COUNT},
    }


def _flashcards_template(topic: Topic, count: int) -> dict:
    return {
        "schema_version": FLASHCARDS_V1,
        "topic_id": topic.id,
        "cards": [{
            "id": "c1",
            "front": "Prompt question or term...",
            "back": "Concise answer with example.",
            "tags": ["definition"],
            "citation_ids": [],
        }],
        "total": count,
    }


def _json_block(doc: dict) -> str:
    return "```json\n" + json.dumps(doc, indent=2) + "\n```"


def content_prompt(content_type: str, course_name: str, topic: Topic,
                   prefs: PersonalizationPrefs | None = None) -> str:
    """Build the generation prompt for one content slot."""
    prefs = prefs or PersonalizationPrefs()
    heading = f"{course_name} • {topic.name} (difficulty: {topic.difficulty})"

    if content_type == "quiz":
        return (
            f"ROLE: Assessment designer. Create an MCQ-only quiz ({QUIZ_ITEM_COUNT} items) for {heading}.\n"
            f"Every item needs exactly 4 options, each with feedback, and exactly one isCorrect: true.\n\n"
            f"OUTPUT STRICTLY AS A SINGLE FENCED JSON BLOCK:\n{_json_block(_quiz_template(topic))}\n"
            "NO TEXT OUTSIDE THE JSON BLOCK."
        )

    if content_type == "flashcards":
        count = prefs.flashcards_count
        return (
            f"ROLE: Flashcard expert. Create {count} high-quality cards for {heading}.\n\n"
            f"OUTPUT STRICTLY AS A SINGLE FENCED JSON BLOCK:\n{_json_block(_flashcards_template(topic, count))}\n"
            "NO TEXT OUTSIDE THE JSON BLOCK."
        )

    sections = "\n".join(f"## {name}" for name in EXPECTED_SECTIONS.get(content_type, []))
    return (
        f"ROLE: Expert tutor. Write {READING_ROLES.get(content_type, 'reading material')}.\n"
        f"TOPIC: {heading}\n"
        f"PERSONALIZATION: depth={prefs.depth}, examples={prefs.examples}, rigor={prefs.rigor}, "
        f"read_time={prefs.read_time}min, level={prefs.difficulty}, citations={prefs.citation_style}\n\n"
        f"OUTPUT PLAIN MARKDOWN (not JSON) starting with '# {topic.name}' and using these headings:\n"
        f"{sections}"
    )
