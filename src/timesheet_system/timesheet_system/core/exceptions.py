class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DomainError"
    retryable = False


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "ValidationFailed"


class AuthenticationError(DomainError):
    """Raised when the caller cannot be identified."""

    code = "Unauthenticated"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "Unauthorized"


class NotFoundError(DomainError):
    """Raised when a timesheet, entry or user id is unknown."""

    code = "NotFound"


class InvalidTransitionError(DomainError):
    """Raised when an action is not legal from the current status."""

    code = "InvalidTransition"


class ConflictError(DomainError):
    """Raised when the status changed since the caller last observed it."""

    code = "Conflict"
    retryable = True


class ReadOnlyStateError(DomainError):
    """Raised when entries are edited while the timesheet is not editable."""

    code = "ReadOnlyState"


class StorageUnavailableError(DomainError):
    """Raised when the persistence layer cannot be reached."""

    code = "StorageUnavailable"
    retryable = True
