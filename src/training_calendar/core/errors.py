"""
Error kinds raised by the training-calendar engine.

Idempotent no-ops (double start/pause/resume) are not errors and never
raise.  Everything else surfaces as one of the exceptions below; a failed
operation leaves every entity unchanged.
"""


class TrainingCalendarError(Exception):
    """Base class for all engine errors."""

    pass


class InvalidTransition(TrainingCalendarError):
    """State machine misuse, e.g. pausing an attempt that was never started."""

    pass


class InvalidInput(TrainingCalendarError, ValueError):
    """Out-of-range or malformed input (scoring inputs, RPE, set numbers)."""

    pass


class ValidationError(InvalidInput):
    """Raised when a stored record cannot be deserialized."""

    pass


class AlreadyCompleted(TrainingCalendarError):
    """Mutation attempted on an attempt whose completed_at is set."""

    def __init__(self, attempt_id: str):
        super().__init__(f"Session attempt {attempt_id} is already completed")
        self.attempt_id = attempt_id


class NotFound(TrainingCalendarError, LookupError):
    """Referenced template/attempt/exercise does not exist (or is soft-deleted)."""

    def __init__(self, collection: str, record_id: str):
        super().__init__(f"{collection}: no record with id {record_id!r}")
        self.collection = collection
        self.record_id = record_id


class PermissionDenied(TrainingCalendarError):
    """The acting identity does not own the row it tried to mutate."""

    def __init__(self, collection: str, record_id: str, actor_id: str):
        super().__init__(
            f"{collection}: {actor_id!r} is not allowed to modify {record_id!r}"
        )
        self.collection = collection
        self.record_id = record_id
        self.actor_id = actor_id
