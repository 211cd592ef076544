"""Domain exceptions for the office workflow application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class OfficeflowException(Exception):
    """Base exception for all office workflow errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body: human message under "error", plus code and details."""
        return {
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ValidationException(OfficeflowException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(OfficeflowException):
    """Raised when the bearer token is missing, invalid or expired."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class MissingActorException(OfficeflowException):
    """Raised when an operation needs an authenticated actor and none is in context."""

    def __init__(self, operation: str | None = None) -> None:
        """Initialize with the operation that required an actor.

        Args:
            operation: Optional name of the operation (e.g. 'log_activity').
        """
        details = {"operation": operation} if operation else {}
        super().__init__("No authenticated actor in context", "MISSING_ACTOR", details)


class AuthorizationException(OfficeflowException):
    """Raised when the actor's role or relationship does not permit the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'task', 'audit_log').
            action: Optional action that was attempted (e.g. 'delegate').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action and message == "Permission denied":
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(OfficeflowException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: int | str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'task', 'user').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class InvalidStateException(OfficeflowException):
    """Raised when an operation is not valid for the entity's current status."""

    def __init__(
        self,
        message: str,
        current_status: str | None = None,
        operation: str | None = None,
    ) -> None:
        """Initialize with message and the status/operation that conflicted.

        Args:
            message: Human-readable description.
            current_status: Status the entity was in.
            operation: Operation that was attempted.
        """
        details: dict[str, Any] = {}
        if current_status is not None:
            details["current_status"] = current_status
        if operation:
            details["operation"] = operation
        super().__init__(message, "INVALID_STATE", details)


class ReviewerNotFoundException(OfficeflowException):
    """Raised when no eligible reviewer exists for a task submitted for review.

    Indicates a directory/configuration problem rather than a user error,
    so it maps to HTTP 500.
    """

    def __init__(self, task_id: int) -> None:
        super().__init__(
            "No eligible reviewer found (no TeamLeader creator, active TeamLeader or active Deputy)",
            "REVIEWER_NOT_FOUND",
            {"task_id": task_id},
        )


class SerializationException(OfficeflowException):
    """Raised when an audit payload (old/new values, metadata) cannot be encoded."""

    def __init__(self, field: str, reason: str) -> None:
        """Initialize with the payload field and encoder error text.

        Args:
            field: Payload field that failed (e.g. 'new_values').
            reason: Encoder error message.
        """
        super().__init__(
            f"Failed to serialize audit {field}: {reason}",
            "SERIALIZATION_ERROR",
            {"field": field},
        )
