"""Domain exceptions raised by the service layer.

Each exception carries the HTTP status and a stable machine-readable code so
the app-level handler in ``family_sns.main`` can render it without the
services knowing anything about HTTP.
"""


class DomainError(Exception):
    """Base exception for domain operation failures."""

    status_code = 500
    code = "internal_error"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# =============================================================================
# Taxonomy
# =============================================================================

class ValidationError(DomainError):
    """Malformed or missing input."""

    status_code = 400
    code = "validation_error"
    default_message = "Invalid input"


class ConflictError(DomainError):
    """Uniqueness violation surfaced to the user."""

    # Reported as 400 with a user-facing message, matching the public API.
    status_code = 400
    code = "conflict"
    default_message = "Resource already exists"


class NotFoundError(DomainError):
    """Referenced entity does not exist (or is not visible to the caller)."""

    status_code = 404
    code = "not_found"
    default_message = "Not found"


class AuthorizationError(DomainError):
    """Actor lacks rights over the entity."""

    status_code = 403
    code = "not_authorized"
    default_message = "Not authorized"


class AuthenticationError(DomainError):
    """Missing, invalid or expired credential."""

    status_code = 401
    code = "not_authenticated"
    default_message = "Not authenticated"


class InternalError(DomainError):
    """Store unavailable or unexpected fault."""


# =============================================================================
# Concrete failures
# =============================================================================

class EmptyPost(ValidationError):
    code = "empty_post"
    default_message = "Post must have content or an image"


class EmptyContent(ValidationError):
    code = "empty_content"
    default_message = "Content must not be empty"


class InvalidUpload(ValidationError):
    code = "invalid_upload"
    default_message = "Invalid upload"


class DuplicateEmail(ConflictError):
    code = "duplicate_email"
    default_message = "This email address is already in use"


class FamilyNotFound(NotFoundError):
    code = "family_not_found"
    default_message = "Family not found"


class UserNotFound(NotFoundError):
    code = "user_not_found"
    default_message = "User not found"


class PostNotFound(NotFoundError):
    code = "post_not_found"
    default_message = "Post not found"


class MessageNotFound(NotFoundError):
    code = "message_not_found"
    default_message = "Message not found"


class NotificationNotFound(NotFoundError):
    code = "notification_not_found"
    default_message = "Notification not found"


class NotAuthorized(AuthorizationError):
    pass


class InvalidCredentials(AuthenticationError):
    code = "invalid_credentials"
    default_message = "Invalid email or password"


class InvalidToken(AuthenticationError):
    code = "invalid_token"
    default_message = "Invalid token"
