"""Domain errors raised by the services. Each carries the HTTP status the API answers with."""


class NadFeudError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(NadFeudError):
    """Bad input to an operation. Nothing was changed."""
    status_code = 400


class InvalidTransition(ValidationError):
    """The question is not in a state that allows the requested transition."""


class PermissionDenied(NadFeudError):
    status_code = 403


class NotFound(NadFeudError):
    status_code = 404


class ConcurrencyViolation(NadFeudError):
    """A second ending attempt for a question that is mid-transition or already ended."""
    status_code = 409


class DuplicateAnswer(NadFeudError):
    status_code = 409


class ClassificationFailure(NadFeudError):
    """The grouping classifier failed. The question stays live and ending can be retried."""
    status_code = 502


class ScoreApplicationFailure(NadFeudError):
    """A single user's score increment failed. Collected and logged, never raised to the caller."""

    def __init__(self, user_id: str, points: int, message: str):
        super().__init__(message)
        self.user_id = user_id
        self.points = points
