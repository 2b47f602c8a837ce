"""Exceptions raised by the study engine."""


class StudyBuddyError(Exception):
    pass


class InputEmptyError(StudyBuddyError):
    """A pasted response or required field was blank."""


class ParseError(StudyBuddyError):
    """Text did not match the marker, JSON or markdown grammar expected."""


class ValidationError(StudyBuddyError):
    """Input had the right shape but was semantically incomplete."""


class SessionStateError(ValidationError):
    """Operation not allowed in a quiz or flashcard session's current state."""


class NotFoundError(StudyBuddyError):
    pass


class StorageError(StudyBuddyError):
    """The persistence layer failed; in-memory state is kept."""
