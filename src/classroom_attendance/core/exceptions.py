class DomainError(Exception):
    """Base exception for business rule violations."""


class NotFoundError(DomainError):
    """Raised when a referenced session does not exist."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidOtpError(ValidationError):
    """Raised when the submitted OTP does not match the session's current OTP."""


class OtpExpiredError(ValidationError):
    """Raised when the OTP is outside the freshness window."""


class ConflictError(DomainError):
    """Raised when the same student already marked attendance for a session."""


class StoreError(Exception):
    """Raised when the underlying database fails. Carries the driver message."""


class DuplicateEntryError(StoreError):
    """Raised when an insert violates a unique key."""
