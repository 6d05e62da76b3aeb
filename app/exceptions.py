"""
Application error taxonomy

Every error carries the HTTP status and error code used when it reaches the
API boundary, plus a short user-facing message.
"""


class QuizMakerError(Exception):
    """Base class for all expected application failures"""

    status_code = 500
    error_code = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailure(QuizMakerError):
    """Bad or missing input"""
    status_code = 400
    error_code = "validation_error"


class NotFound(QuizMakerError):
    """Referenced entity does not exist"""
    status_code = 404
    error_code = "not_found"


class DuplicateFailure(QuizMakerError):
    """Unique constraint collision (someone else created the same row)"""
    status_code = 409
    error_code = "duplicate"


class InvalidTransition(QuizMakerError):
    """Operation not allowed in the session's current state"""
    status_code = 409
    error_code = "invalid_transition"


class SessionBusy(QuizMakerError):
    """Another external call is already in flight for the session"""
    status_code = 409
    error_code = "session_busy"


class GenerationFailure(QuizMakerError):
    """The AI service failed or returned an unusable quiz"""
    status_code = 502
    error_code = "generation_failed"

    DEFAULT_MESSAGE = (
        "Failed to generate quiz. The AI may be experiencing high demand. "
        "Please try again later."
    )

    def __init__(self, message: str = DEFAULT_MESSAGE):
        super().__init__(message)


class PersistenceFailure(QuizMakerError):
    """Store error; the surrounding transaction has been rolled back"""
    status_code = 500
    error_code = "persistence_error"
