"""Exceptions raised by the gamification core."""


class DayflowError(Exception):
    """Base class for core errors."""


class PersistenceError(DayflowError):
    """
    The document store failed a read or a write.

    The in-memory progression was not changed, so the call can be retried.
    """

    def __init__(self, user_id: str, path: str, message: str = "") -> None:
        self.user_id = user_id
        self.path = path
        super().__init__(
            message or f"Could not save {path} for user {user_id}, please retry"
        )


class InvariantViolation(DayflowError):
    """Progression state is corrupted (programmer error or bad stored data)."""
