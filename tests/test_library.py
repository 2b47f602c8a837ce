# tests/test_library.py
from datetime import date

import pytest

from study_buddy.errors import InputEmptyError, NotFoundError, ParseError, ValidationError
from study_buddy.library import (
    add_course, apply_structure, delete_content, delete_course, edit_source,
    find_slot, save_content, set_completed,
)
from study_buddy.models import Attempt, CardState, CONTENT_TYPES
from study_buddy.quiz import record_attempt

from conftest import flashcards_response, quiz_item, quiz_response


def test_add_course_persists(store):
    data = store.load_or_default()
    course = add_course(store, data, "  Chemistry ", " Atoms ")
    assert course.name == "Chemistry"
    assert course.description == "Atoms"
    assert not course.structure_analyzed
    reloaded = store.load()
    assert [c.name for c in reloaded.courses] == ["Chemistry"]
    assert reloaded.courses[0].id == course.id


def test_add_course_blank_name_rejected(store):
    data = store.load_or_default()
    with pytest.raises(InputEmptyError):
        add_course(store, data, "   ")
    assert data.courses == []
    assert store.load() is None


def test_course_ids_are_unique(store):
    data = store.load_or_default()
    ids = {add_course(store, data, f"Course {i}").id for i in range(20)}
    assert len(ids) == 20


def test_delete_course(structured):
    store, data, course = structured
    delete_course(store, data, course.id)
    assert store.load().courses == []
    with pytest.raises(NotFoundError):
        delete_course(store, data, course.id)


def test_apply_structure_creates_topics_with_empty_slots(structured):
    store, data, course = structured
    assert course.structure_analyzed
    assert [t.name for t in course.topics] == ["Cells", "Genetics"]
    cells = course.topics[0]
    assert (cells.difficulty, cells.category) == ("Beginner", "Foundations")
    assert set(cells.slots) == set(CONTENT_TYPES)
    assert all(s.status == "empty" for s in cells.slots.values())
    reloaded = store.load().courses[0]
    assert [t.id for t in reloaded.topics] == [t.id for t in course.topics]


def test_failed_structure_keeps_existing_topics(structured):
    store, data, course = structured
    before = [t.id for t in course.topics]
    with pytest.raises(ParseError):
        apply_structure(store, data, course.id, "nothing useful here")
    with pytest.raises(InputEmptyError):
        apply_structure(store, data, course.id, "   ")
    assert [t.id for t in course.topics] == before


def test_unknown_course_and_topic(structured):
    store, data, course = structured
    with pytest.raises(NotFoundError):
        save_content(store, data, "nope", course.topics[0].id, "quiz", quiz_response([quiz_item("Q")]))
    with pytest.raises(NotFoundError):
        find_slot(data, course.id, "nope", "quiz")
    with pytest.raises(ValidationError):
        find_slot(data, course.id, course.topics[0].id, "podcast")


def test_save_quiz_content(structured):
    store, data, course = structured
    topic = course.topics[0]
    response = quiz_response([quiz_item("Q1"), quiz_item("Q2", n_options=3)])
    assert save_content(store, data, course.id, topic.id, "quiz", response, now="2026-03-10T09:00:00") == []
    slot = topic.slots["quiz"]
    assert slot.status == "filled"
    assert slot.content.total_questions == 1
    assert slot.raw_response == response.strip()
    assert slot.last_updated == "2026-03-10T09:00:00"
    assert store.load().courses[0].topics[0].slots["quiz"].content.total_questions == 1


def test_failed_parse_leaves_slot_untouched(structured):
    store, data, course = structured
    topic = course.topics[0]
    save_content(store, data, course.id, topic.id, "quiz", quiz_response([quiz_item("Q1")]))
    before = topic.slots["quiz"]
    with pytest.raises(ParseError):
        save_content(store, data, course.id, topic.id, "quiz", "```json\n{\"items\": []}\n```")
    with pytest.raises(InputEmptyError):
        save_content(store, data, course.id, topic.id, "quiz", "")
    assert topic.slots["quiz"] is before
    assert store.load().courses[0].topics[0].slots["quiz"].content.total_questions == 1


def test_resave_quiz_keeps_attempt_history(structured):
    store, data, course = structured
    topic = course.topics[0]
    save_content(store, data, course.id, topic.id, "quiz", quiz_response([quiz_item("Q1")]))
    record_attempt(topic.slots["quiz"], Attempt(1, 1, 100, 5, "2026-03-10"))
    save_content(store, data, course.id, topic.id, "quiz", quiz_response([quiz_item("New")]))
    slot = topic.slots["quiz"]
    assert slot.content.questions[0].text == "New"
    assert len(slot.attempts) == 1
    assert slot.best_score == 100
    assert slot.completed


def test_resave_flashcards_prunes_schedule(structured):
    store, data, course = structured
    topic = course.topics[0]
    save_content(store, data, course.id, topic.id, "flashcards", flashcards_response(3))
    due = date(2026, 3, 12)
    topic.slots["flashcards"].srs = {"c1": CardState(due=due), "c3": CardState(due=due)}
    save_content(store, data, course.id, topic.id, "flashcards", flashcards_response(2))
    assert set(topic.slots["flashcards"].srs) == {"c1"}


def test_reading_content_returns_missing_sections(structured):
    store, data, course = structured
    topic = course.topics[0]
    md = "# Cells\n## Scope Map\ntext\n## TL;DR\nshort"
    missing = save_content(store, data, course.id, topic.id, "summary", md)
    assert missing == ["Quick Reference", "Self-Check"]
    assert topic.slots["summary"].content.markdown == md


def test_reading_content_rejects_json(structured):
    store, data, course = structured
    topic = course.topics[0]
    with pytest.raises(ParseError, match="markdown"):
        save_content(store, data, course.id, topic.id, "explainer", '{"sections": []}')
    assert topic.slots["explainer"].status == "empty"


def test_edit_source_returns_raw_response(structured):
    store, data, course = structured
    topic = course.topics[0]
    assert edit_source(data, course.id, topic.id, "summary") is None
    save_content(store, data, course.id, topic.id, "summary", "# Cells\n## TL;DR\nx\n")
    assert edit_source(data, course.id, topic.id, "summary") == "# Cells\n## TL;DR\nx"


def test_delete_content_resets_slot(structured):
    store, data, course = structured
    topic = course.topics[0]
    save_content(store, data, course.id, topic.id, "quiz", quiz_response([quiz_item("Q1")]))
    record_attempt(topic.slots["quiz"], Attempt(1, 1, 100, 5, "2026-03-10"))
    delete_content(store, data, course.id, topic.id, "quiz")
    slot = topic.slots["quiz"]
    assert slot.status == "empty"
    assert slot.content is None
    assert slot.attempts == []
    assert not slot.completed
    assert store.load().courses[0].topics[0].slots["quiz"].status == "empty"


def test_set_completed_requires_filled_slot(structured):
    store, data, course = structured
    topic = course.topics[0]
    with pytest.raises(ValidationError):
        set_completed(store, data, course.id, topic.id, "summary")
    save_content(store, data, course.id, topic.id, "summary", "# Cells\n## TL;DR\nx")
    set_completed(store, data, course.id, topic.id, "summary")
    assert store.load().courses[0].topics[0].slots["summary"].completed
    set_completed(store, data, course.id, topic.id, "summary", False)
    assert not topic.slots["summary"].completed
