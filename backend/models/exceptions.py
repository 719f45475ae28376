"""
Custom domain exceptions for the application.

These exceptions are raised by the service layer and converted to HTTP exceptions
by centralized exception handlers in main.py, maintaining proper separation of concerns.

The authentication module (auth.py) also uses these domain exceptions to remain
HTTP-agnostic, allowing reuse in non-HTTP contexts (CLI tools, background tasks).

Every exception carries a correlation ID so a reporter or handler can quote it
when something goes wrong without revealing anything else about the request.
"""

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        correlation_id: Unique ID for error tracking (auto-generated if not provided).
    """

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        # Use request correlation ID if available, otherwise generate new one
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    pass


class PermissionDeniedException(DomainException):
    """Raised when a principal lacks required permissions."""

    pass


class ValidationException(DomainException):
    """Raised when input validation fails."""

    pass


class ConflictException(DomainException):
    """Raised when operation conflicts with existing data."""

    pass


class AuthenticationException(DomainException):
    """Raised when authentication fails."""

    pass


class AlreadyExistsException(DomainException):
    """Raised when trying to create a resource that already exists."""

    pass


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    pass


class RateLimitExceededException(DomainException):
    """Raised when rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded. Please try again later.",
        retry_after: int | None = None,
    ):
        super().__init__(message)
        self.retry_after = retry_after


# Specific exceptions for domain entities


class ReportNotFoundException(NotFoundException):
    """Report not found."""

    def __init__(self) -> None:
        super().__init__("Report not found")


class AdminUserNotFoundException(NotFoundException):
    """Admin user not found."""

    def __init__(self) -> None:
        super().__init__("User not found")


class AttachmentNotFoundException(NotFoundException):
    """
    Attachment not found or not visible to the caller.

    Both cases share one message so the response does not reveal whether an
    attachment of another report exists.
    """

    def __init__(self) -> None:
        super().__init__("Attachment not found")


class InvalidCredentialsException(AuthenticationException):
    """Invalid username/password or case code/secret."""

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class InsufficientPermissionsException(PermissionDeniedException):
    """Principal doesn't have sufficient permissions."""

    pass


class AdminUserAlreadyExistsException(AlreadyExistsException):
    """Username or email already taken."""

    def __init__(self) -> None:
        super().__init__("Username or email already taken")


# ============================================================================
# Case handling exceptions
# ============================================================================


class ReportClosedException(BusinessRuleException):
    """Raised when a message is posted to a closed report."""

    def __init__(self) -> None:
        super().__init__("Report is closed; no new messages can be added")


class ConfirmationAlreadySentException(BusinessRuleException):
    """Raised when receipt confirmation is sent a second time."""

    def __init__(self) -> None:
        super().__init__("Confirmation already sent")


class EmptyMessageException(ValidationException):
    """Raised when a message has neither text nor accepted attachments."""

    def __init__(self) -> None:
        super().__init__("Message content or at least one attachment is required")


class InvalidStatusException(ValidationException):
    """Raised when an unknown report status is requested."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid status '{value}'")
        self.value = value


# ============================================================================
# Admin management exceptions
# ============================================================================


class CannotDeleteSuperAdminException(BusinessRuleException):
    """Raised when anyone tries to delete the super admin."""

    def __init__(self) -> None:
        super().__init__("Super admins cannot be deleted")


class CannotDeleteSelfException(ValidationException):
    """Raised when an admin tries to delete its own account."""

    def __init__(self) -> None:
        super().__init__("Cannot delete your own account")
