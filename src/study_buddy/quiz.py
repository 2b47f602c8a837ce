"""Quiz engine: one attempt at a multiple-choice quiz slot."""
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from study_buddy.errors import SessionStateError, ValidationError
from study_buddy.models import Attempt, ContentSlot, Question, round_half_up

logger = logging.getLogger(__name__)

MASTERY_THRESHOLD = 70


class QuizState(Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


@dataclass
class AnswerFeedback:
    is_correct: bool
    selected: int
    correct_index: int
    message: str


@dataclass
class ReviewRow:
    number: int
    question: Question
    selected: int | None
    is_correct: bool


def questions_for(slot: ContentSlot) -> list:
    if slot.content_type != "quiz" or not slot.is_filled:
        raise ValidationError("This topic has no quiz yet")
    questions = [q for q in slot.content.questions if q.usable]
    if not questions:
        raise ValidationError("Quiz has no usable questions")
    return questions


def score_answers(questions: list, answers: list) -> int:
    return sum(
        1 for q, a in zip(questions, answers)
        if a is not None and a == q.correct_answer
    )


def record_attempt(slot: ContentSlot, attempt: Attempt) -> None:
    """Append an attempt and update best score and mastery.

    Mastery follows the best score ever reached, so a weaker retake never
    clears ``completed``.
    """
    slot.attempts.append(attempt)
    slot.best_score = max(slot.best_score or 0, attempt.percentage)
    slot.last_updated = attempt.date
    if slot.best_score >= MASTERY_THRESHOLD:
        slot.completed = True


def review_attempt(questions: list, attempt: Attempt) -> list:
    rows = []
    for i, q in enumerate(questions):
        selected = attempt.answers[i] if i < len(attempt.answers) else None
        rows.append(ReviewRow(
            number=i + 1,
            question=q,
            selected=selected,
            is_correct=selected is not None and selected == q.correct_answer,
        ))
    return rows


class QuizSession:
    """NOT_STARTED -> IN_PROGRESS(index) -> FINISHED, with retakes."""

    def __init__(self, slot: ContentSlot, clock=time.time):
        self.slot = slot
        self.questions = questions_for(slot)
        self.clock = clock
        self.state = QuizState.NOT_STARTED
        self.index = 0
        self.answers = []
        self.started_at = None
        self.attempt = None

    def _require(self, state: QuizState) -> None:
        if self.state != state:
            raise SessionStateError(f"Quiz is {self.state.value}, expected {state.value}")

    @property
    def current_question(self) -> Question:
        return self.questions[self.index]

    @property
    def answered(self) -> int:
        return sum(1 for a in self.answers if a is not None)

    @property
    def running_score(self) -> int:
        return score_answers(self.questions, self.answers)

    def start(self) -> None:
        self._require(QuizState.NOT_STARTED)
        self.answers = [None] * len(self.questions)
        self.index = 0
        self.started_at = self.clock()
        self.attempt = None
        self.state = QuizState.IN_PROGRESS

    def is_locked(self, index: int | None = None) -> bool:
        index = self.index if index is None else index
        return self.answers[index] is not None

    def submit(self, selected: int | None) -> AnswerFeedback:
        self._require(QuizState.IN_PROGRESS)
        if self.is_locked():
            raise SessionStateError(f"Question {self.index + 1} is already answered")
        if selected is None:
            raise ValidationError("Please select an answer")
        q = self.current_question
        if not 0 <= selected < len(q.options):
            raise ValidationError(f"Answer must be between 1 and {len(q.options)}")
        self.answers[self.index] = selected
        is_correct = selected == q.correct_answer
        parts = ["Correct!" if is_correct else "Incorrect"]
        if q.feedback.get(selected):
            parts.append(q.feedback[selected])
        if not is_correct:
            parts.append(f"Correct answer: {q.options[q.correct_answer]}")
        return AnswerFeedback(
            is_correct=is_correct,
            selected=selected,
            correct_index=q.correct_answer,
            message="\n".join(parts),
        )

    def advance(self) -> Attempt | None:
        """Move to the next question; past the last one the quiz finishes."""
        self._require(QuizState.IN_PROGRESS)
        if self.index < len(self.questions) - 1:
            self.index += 1
            return None
        return self.finish()

    def retreat(self) -> None:
        self._require(QuizState.IN_PROGRESS)
        if self.index > 0:
            self.index -= 1

    def finish(self) -> Attempt:
        self._require(QuizState.IN_PROGRESS)
        total = len(self.questions)
        score = score_answers(self.questions, self.answers)
        self.attempt = Attempt(
            score=score,
            total=total,
            percentage=round_half_up(100 * score / total),
            time_spent=round_half_up(self.clock() - self.started_at),
            date=datetime.now().isoformat(),
            answers=tuple(self.answers),
        )
        record_attempt(self.slot, self.attempt)
        self.state = QuizState.FINISHED
        logger.info(
            "Quiz finished: %d/%d (%d%%), best %d%%",
            score, total, self.attempt.percentage, self.slot.best_score,
        )
        return self.attempt

    def retake(self) -> None:
        self._require(QuizState.FINISHED)
        self.state = QuizState.NOT_STARTED
        self.start()

    def review(self) -> list:
        self._require(QuizState.FINISHED)
        return review_attempt(self.questions, self.attempt)
