# tests/test_study.py
from datetime import date, timedelta

from study_buddy.library import save_content, set_completed
from study_buddy.models import CardState, Course, Data, Topic
from study_buddy.study import QUEUE_LIMIT, build_study_queue

from conftest import flashcards_response

TODAY = date(2026, 3, 10)


def test_empty_data_has_nothing_to_do():
    queue = build_study_queue(Data(), TODAY)
    assert queue.nothing_to_do
    assert queue.items == []


def test_fresh_topic_lists_create_items_up_to_limit():
    data = Data(courses=[Course(id="c", name="C", topics=[Topic(id="t", name="Cells")])])
    queue = build_study_queue(data, TODAY)
    assert not queue.nothing_to_do
    assert [i.label for i in queue.items] == [
        "Cells • Explainer", "Cells • Flashcards", "Cells • Practice",
        "Cells • Quiz", "Cells • Review", "Cells • Summary",
    ]
    assert all(i.kind == "content" and i.priority == 2 for i in queue.items)


def test_filled_flashcards_review_comes_first(structured):
    store, data, course = structured
    cells = course.topics[0]
    save_content(store, data, course.id, cells.id, "flashcards", flashcards_response(3))
    data.courses[0].topics = [cells]

    queue = build_study_queue(data, TODAY)
    assert len(queue.items) == 6
    first = queue.items[0]
    assert first.kind == "review"
    assert first.label == "Cells • Flashcards Review"
    assert first.due_cards == 3
    assert "Cells • Flashcards" not in [i.label for i in queue.items]


def test_review_counts_only_due_cards(structured):
    store, data, course = structured
    cells = course.topics[0]
    save_content(store, data, course.id, cells.id, "flashcards", flashcards_response(3))
    cells.slots["flashcards"].srs["c1"] = CardState(due=TODAY + timedelta(days=4))
    queue = build_study_queue(data, TODAY)
    review = [i for i in queue.items if i.kind == "review"]
    assert review[0].due_cards == 2


def test_completed_flashcards_drop_out_of_queue(structured):
    store, data, course = structured
    cells = course.topics[0]
    save_content(store, data, course.id, cells.id, "flashcards", flashcards_response(2))
    set_completed(store, data, course.id, cells.id, "flashcards")
    queue = build_study_queue(data, TODAY)
    assert all(i.kind == "content" for i in queue.items)


def test_queue_is_capped_and_sorted(structured):
    _, data, _ = structured
    queue = build_study_queue(data, TODAY)
    labels = [i.label for i in queue.items]
    assert len(labels) == QUEUE_LIMIT
    assert labels == sorted(labels)
    assert labels[0] == "Cells • Explainer"
    assert labels[-1] == "Genetics • Flashcards"


def test_all_slots_filled_and_completed_is_nothing_to_do():
    topic = Topic(id="t", name="Done")
    for slot in topic.slots.values():
        slot.status = "filled"
        slot.content = object()
        slot.completed = True
    data = Data(courses=[Course(id="c", name="C", topics=[topic])])
    assert build_study_queue(data, TODAY).nothing_to_do
