import json

import pytest

from study_buddy.db import SqliteStore
from study_buddy.library import add_course, apply_structure


def option(text, correct=False, feedback=""):
    return {"text": text, "feedback": feedback, "isCorrect": correct}


def quiz_item(stem, correct_index=1, n_options=4, item_id=None):
    item = {
        "stem": stem,
        "options": [option(f"opt{i}", i == correct_index, f"fb{i}") for i in range(n_options)],
        "difficulty": "medium",
        "citation_ids": [],
    }
    if item_id is not None:
        item["id"] = item_id
    return item


def quiz_response(items, fenced=True):
    doc = json.dumps({"schema_version": "quiz_mcq_v1", "topic_id": "t1", "title": "Quiz", "items": items})
    return f"Here you go:\n```json\n{doc}\n```\n" if fenced else doc


def flashcards_response(n=3):
    cards = [{"id": f"c{i + 1}", "front": f"front {i + 1}", "back": f"back {i + 1}"} for i in range(n)]
    return "```json\n" + json.dumps({"schema_version": "flashcards_v1", "cards": cards, "total": n}) + "\n```"


STRUCTURE = """## COURSE_STRUCTURE_START: Biology
### TOPIC_START: Cells ## DIFFICULTY: Beginner ## CATEGORY: Foundations
#### SUBTOPIC: Organelles ## CONCEPTS: nucleus, mitochondria, ribosome
### TOPIC_END
### TOPIC_START: Genetics
#### SUBTOPIC: Inheritance ## CONCEPTS: alleles, dominance
### TOPIC_END
## COURSE_STRUCTURE_END
"""


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_study_buddy.db")
    return db_path


@pytest.fixture
def store(tmp_db):
    return SqliteStore(tmp_db)


@pytest.fixture
def structured(store):
    """A store, its data tree, and one course with two parsed topics."""
    data = store.load_or_default()
    course = add_course(store, data, "Biology", "Intro course")
    apply_structure(store, data, course.id, STRUCTURE)
    return store, data, course
