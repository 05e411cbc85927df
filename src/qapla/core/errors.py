"""Exceptions shared by the core engine and the persistence layer."""


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


class WorkoutValidationError(ValidationError):
    """Raised when a workout action is rejected (no work entered, nothing to log, ...)."""

    pass
