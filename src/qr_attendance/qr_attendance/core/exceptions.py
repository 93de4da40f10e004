class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced staff member or file does not exist."""


class AttendanceStateError(DomainError):
    """A check-in/check-out/break transition is not allowed from the current state."""


class AlreadyCheckedInError(AttendanceStateError):
    pass


class NoOpenShiftError(AttendanceStateError):
    pass


class AlreadyOnBreakError(AttendanceStateError):
    pass


class NoActiveBreakError(AttendanceStateError):
    pass


class StorageError(Exception):
    """Infrastructure failure in the persistence layer.

    Not a DomainError: it never signals an attendance state conflict.
    """
