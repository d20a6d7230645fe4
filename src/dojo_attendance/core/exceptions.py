class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced schedule, class or student does not exist."""


class ConcurrentUpdateConflict(DomainError):
    """Raised when a stored record changed between read and write.

    The only retryable error: callers must re-read before trying again.
    """


class DataIntegrityWarning(DomainError):
    """Raised when a stored record cannot be parsed or is inconsistent.

    Expansion catches it, logs it and skips the record.
    """

    def __init__(self, message: str, *, record_id: object = None):
        super().__init__(message)
        self.record_id = record_id
