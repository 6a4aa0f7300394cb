"""
Custom domain exceptions for the application.

These exceptions are raised by the service layer and converted to HTTP
responses by centralized exception handlers in main.py. Every failure the
core can produce belongs to one of four families:

- NotFoundException: a referenced idea, category, comment or user is absent
- PermissionDeniedException: the caller lacks ownership or the moderator
  claim, or the idea is not in a state that permits the action
- InvalidTransitionException: the requested status change is not allowed
- ValidationException: empty/oversized text, malformed category reference,
  out-of-range vote value

AuthenticationException is reserved for the transport layer (unreadable or
expired identity token).
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
    """Raised when the caller may not perform the action."""

    pass


class ValidationException(DomainException):
    """Raised when input validation fails."""

    pass


class ConflictException(DomainException):
    """Raised when an operation conflicts with the current state."""

    pass


class InvalidTransitionException(ConflictException):
    """Raised when an idea cannot move from its current status to the target."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot change idea status from '{current}' to '{target}'")
        self.current = current
        self.target = target


class AuthenticationException(DomainException):
    """Raised when an identity token cannot be read."""

    pass


# Specific exceptions for domain entities


class IdeaNotFoundException(NotFoundException):
    """Idea not found."""

    def __init__(self, idea_id: int) -> None:
        super().__init__(f"Idea with ID {idea_id} not found")
        self.idea_id = idea_id


class CategoryNotFoundException(NotFoundException):
    """Category not found."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Category '{name}' not found")
        self.name = name


class CommentNotFoundException(NotFoundException):
    """Comment not found."""

    pass


class UserNotFoundException(NotFoundException):
    """User not found."""

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User with ID {user_id} not found")
        self.user_id = user_id


class AuthenticationRequiredException(PermissionDeniedException):
    """Raised when an anonymous caller attempts a write."""

    def __init__(self, message: str = "You must be signed in to do this") -> None:
        super().__init__(message)


class ModeratorRequiredException(PermissionDeniedException):
    """Raised when a non-moderator attempts a moderation action."""

    def __init__(self, message: str = "Only moderators can change idea status"):
        super().__init__(message)


class NotIdeaOwnerException(PermissionDeniedException):
    """Raised when a user tries to modify an idea they don't own."""

    def __init__(self, action: str = "modify") -> None:
        super().__init__(f"You can only {action} your own ideas")


class IdeaLockedException(PermissionDeniedException):
    """Raised when an idea's status no longer allows the requested action."""

    def __init__(self, idea_id: int, status: str, action: str) -> None:
        super().__init__(f"Cannot {action} idea {idea_id} while it is '{status}'")
        self.idea_id = idea_id
        self.status = status


class InvalidVoteValueException(ValidationException):
    """Raised when a vote value is outside {-1, 0, 1}."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Vote value must be -1, 0 or 1 (got {value!r})")
        self.value = value


class EmptyCommentException(ValidationException):
    """Raised when a comment is empty after trimming."""

    def __init__(self) -> None:
        super().__init__("Comment cannot be empty")


class TokenExpiredException(AuthenticationException):
    """Raised when an identity token has expired."""

    def __init__(self) -> None:
        super().__init__("Session expired. Please log in again.")
