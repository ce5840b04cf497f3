class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DOMAIN_ERROR"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class NotFoundError(DomainError):
    """Raised when a referenced row does not exist."""

    code = "NOT_FOUND"


class AuthenticationError(DomainError):
    """Raised when login credentials or one-time tokens are invalid."""

    code = "INVALID_CREDENTIALS"


class MailDeliveryError(DomainError):
    """Raised when an OTP, magic link or recovery mail cannot be sent."""

    code = "MAIL_DELIVERY_FAILED"


class PendingApprovalError(AuthenticationError):
    """Raised when a profile exists but an admin has not approved it yet."""

    code = "PENDING_APPROVAL"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "FORBIDDEN"


class BookingLimitExceeded(ValidationError):
    code = "MAX_SUBJECTS"


class DuplicateSubjectError(ValidationError):
    code = "DUPLICATE_SUBJECT"


class AlreadyClaimedError(ValidationError):
    code = "ALREADY_CLAIMED"
