class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or no caller is known."""


class AuthorizationError(DomainError):
    """Raised when a write is rejected by the policy layer."""


class ConstraintViolation(DomainError):
    """Raised on a uniqueness or foreign-key violation."""


class BackendUnavailable(DomainError):
    """Raised when the database cannot be reached or the call times out."""
