"""Flashcard review scheduling and study sessions."""
import logging
from datetime import date, timedelta

from study_buddy.errors import SessionStateError, ValidationError
from study_buddy.models import CardState, ContentSlot
from study_buddy.sm2 import GRADES, sm2_update

logger = logging.getLogger(__name__)

REINSERT_OFFSET = 2


def get_or_create_state(slot: ContentSlot, card_id: str, today: date | None = None) -> CardState:
    """Current review state for a card; a fresh due-today state if never reviewed."""
    today = today or date.today()
    state = slot.srs.get(card_id)
    return state if state is not None else CardState(due=today)


def grade_card(state: CardState, quality: int, today: date | None = None) -> CardState:
    """Return the card's next state after a review graded ``quality``."""
    if quality not in GRADES:
        raise ValidationError(f"Grade must be one of {sorted(GRADES)}, got {quality!r}")
    today = today or date.today()
    updated = sm2_update(
        quality=quality,
        repetitions=state.reps,
        ease_factor=state.ease,
        interval=state.interval,
    )
    return state.evolve(
        ease=updated["ease_factor"],
        reps=updated["repetitions"],
        interval=updated["interval"],
        due=today + timedelta(days=updated["interval"]),
        last_grade=quality,
    )


def record_grade(slot: ContentSlot, card_id: str, quality: int, today: date | None = None) -> CardState:
    """Grade a card and store its new state in the slot's srs map."""
    new_state = grade_card(get_or_create_state(slot, card_id, today), quality, today)
    slot.srs[card_id] = new_state
    logger.info("Card %s graded %s: next review in %d day(s)", card_id, GRADES[quality], new_state.interval)
    return new_state


def is_due(state: CardState | None, today: date | None = None) -> bool:
    today = today or date.today()
    return state is None or state.due <= today


def order_deck(cards: list, srs: dict, today: date | None = None) -> list:
    """Due cards first, then the rest, keeping original order within each group."""
    due = [c for c in cards if is_due(srs.get(c.id), today)]
    later = [c for c in cards if not is_due(srs.get(c.id), today)]
    return due + later


def count_due(slot: ContentSlot, today: date | None = None) -> int:
    if not slot.is_filled:
        return 0
    return sum(1 for c in slot.content.cards if is_due(slot.srs.get(c.id), today))


class FlashcardSession:
    """One sitting over a flashcard slot.

    Works on its own queue built from the slot's cards; cards graded
    "Again" are reinserted a short distance ahead. The queue is thrown away
    when the session ends; only the slot's srs map is persisted.
    """

    def __init__(self, slot: ContentSlot, today: date | None = None):
        if not slot.is_filled or not slot.content.cards:
            raise ValidationError("No flashcards to study")
        self.slot = slot
        self.today = today or date.today()
        self.queue = order_deck(slot.content.cards, slot.srs, self.today)
        self.index = 0
        self.reviewed = 0

    @property
    def finished(self) -> bool:
        return self.index >= len(self.queue)

    @property
    def remaining(self) -> int:
        return max(0, len(self.queue) - self.index)

    def current(self):
        if self.finished:
            return None
        return self.queue[self.index]

    def grade(self, quality: int) -> CardState:
        card = self.current()
        if card is None:
            raise SessionStateError("Flashcard session is already finished")
        state = record_grade(self.slot, card.id, quality, self.today)
        if quality < 3:
            self.queue.insert(min(self.index + REINSERT_OFFSET, len(self.queue)), card)
        self.index += 1
        self.reviewed += 1
        return state
