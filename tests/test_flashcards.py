# tests/test_flashcards.py
from datetime import date, timedelta

import pytest

from study_buddy.errors import SessionStateError, ValidationError
from study_buddy.flashcards import (
    FlashcardSession, count_due, get_or_create_state, grade_card, order_deck, record_grade,
)
from study_buddy.models import Card, CardState, ContentSlot, FlashcardsContent

TODAY = date(2026, 3, 10)


def make_slot(n=3) -> ContentSlot:
    cards = [Card(id=f"c{i + 1}", front=f"f{i + 1}", back=f"b{i + 1}") for i in range(n)]
    return ContentSlot(content_type="flashcards", status="filled", content=FlashcardsContent(cards=cards))


def test_default_state_is_due_today():
    slot = make_slot()
    state = get_or_create_state(slot, "c1", TODAY)
    assert state == CardState(due=TODAY, ease=2.5, reps=0, interval=0, last_grade=None)
    assert slot.srs == {}  # lazily created, not stored until graded


def test_again_on_fresh_card_resets_to_today():
    state = grade_card(CardState(due=TODAY), 1, TODAY)
    assert state.interval == 0
    assert state.reps == 0
    assert state.due == TODAY
    assert state.last_grade == 1


def test_good_three_times_interval_sequence():
    state = CardState(due=TODAY)
    intervals, eases = [], [state.ease]
    for _ in range(3):
        previous_ease = state.ease
        state = grade_card(state, 4, TODAY)
        intervals.append(state.interval)
        eases.append(state.ease)
        assert state.ease >= previous_ease
    assert intervals[:2] == [1, 6]
    assert intervals[2] == round(6 * eases[2])
    assert state.reps == 3
    assert state.due == TODAY + timedelta(days=intervals[2])


def test_again_after_progress_keeps_ease():
    state = grade_card(grade_card(CardState(due=TODAY), 3, TODAY), 1, TODAY)
    assert state.ease == 2.36
    assert state.reps == 0
    assert state.interval == 0


def test_invalid_grade_rejected():
    with pytest.raises(ValidationError):
        grade_card(CardState(due=TODAY), 2, TODAY)


def test_grade_returns_copy_without_mutating():
    original = CardState(due=TODAY)
    grade_card(original, 5, TODAY)
    assert original.reps == 0


def test_record_grade_stores_state():
    slot = make_slot()
    record_grade(slot, "c2", 5, TODAY)
    assert slot.srs["c2"].reps == 1
    assert slot.srs["c2"].due == TODAY + timedelta(days=1)


def test_order_deck_due_first_preserving_order():
    slot = make_slot(4)
    slot.srs["c1"] = CardState(due=TODAY + timedelta(days=3))
    slot.srs["c2"] = CardState(due=TODAY - timedelta(days=1))
    slot.srs["c3"] = CardState(due=TODAY + timedelta(days=1))
    deck = order_deck(slot.content.cards, slot.srs, TODAY)
    assert [c.id for c in deck] == ["c2", "c4", "c1", "c3"]


def test_count_due():
    slot = make_slot(3)
    slot.srs["c1"] = CardState(due=TODAY + timedelta(days=2))
    assert count_due(slot, TODAY) == 2
    assert count_due(ContentSlot(content_type="flashcards"), TODAY) == 0


def test_session_reinserts_again_card_two_ahead():
    slot = make_slot(4)
    session = FlashcardSession(slot, TODAY)
    assert session.current().id == "c1"
    session.grade(1)
    assert [c.id for c in session.queue] == ["c1", "c2", "c1", "c3", "c4"]
    assert session.current().id == "c2"


def test_session_reinsert_clamped_to_deck_end():
    slot = make_slot(2)
    session = FlashcardSession(slot, TODAY)
    session.grade(4)
    session.grade(1)  # index 1, min(3, 2) == 2
    assert [c.id for c in session.queue] == ["c1", "c2", "c2"]
    assert session.current().id == "c2"
    session.grade(4)
    assert session.finished


def test_session_never_skips_due_cards():
    slot = make_slot(3)
    slot.srs["c1"] = CardState(due=TODAY + timedelta(days=5))
    session = FlashcardSession(slot, TODAY)
    seen = []
    while not session.finished:
        seen.append(session.current().id)
        session.grade(4)
    assert seen == ["c2", "c3", "c1"]
    assert session.reviewed == 3


def test_session_does_not_change_card_order_in_slot():
    slot = make_slot(3)
    session = FlashcardSession(slot, TODAY)
    session.grade(1)
    assert [c.id for c in slot.content.cards] == ["c1", "c2", "c3"]


def test_grading_finished_session_raises():
    session = FlashcardSession(make_slot(1), TODAY)
    session.grade(5)
    with pytest.raises(SessionStateError):
        session.grade(5)


def test_session_needs_cards():
    with pytest.raises(ValidationError):
        FlashcardSession(ContentSlot(content_type="flashcards"), TODAY)
