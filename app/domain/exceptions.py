"""Domain exceptions for the agencyflow application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class AgencyFlowException(Exception):
    """Base exception for all agencyflow application errors.

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
        """Return the JSON error body used by the API exception handler."""
        body: dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationException(AgencyFlowException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class InvalidSubdomainException(AgencyFlowException):
    """Raised when the subdomain path segment is missing or not a DNS label."""

    def __init__(self, subdomain: str | None) -> None:
        super().__init__(
            "Subdomain is required and must be a valid DNS label",
            "INVALID_SUBDOMAIN",
            {"subdomain": subdomain},
        )


class AgencyNotFoundException(AgencyFlowException):
    """Raised when no active agency is registered under a subdomain."""

    def __init__(self, subdomain: str) -> None:
        """Initialize with the subdomain that did not resolve.

        Args:
            subdomain: The subdomain that was looked up.
        """
        super().__init__(
            "Agency not found",
            "AGENCY_NOT_FOUND",
            {"subdomain": subdomain},
        )


class AgencyAlreadyExistsException(AgencyFlowException):
    """Raised when provisioning an agency whose subdomain is taken."""

    def __init__(self, subdomain: str) -> None:
        super().__init__(
            f"Agency with subdomain '{subdomain}' already exists",
            "AGENCY_ALREADY_EXISTS",
            {"subdomain": subdomain},
        )


class ProvisioningUnauthorizedException(AgencyFlowException):
    """Raised when the provisioning secret header is missing or wrong."""

    def __init__(self) -> None:
        super().__init__("Unauthorized agency provisioning", "AUTHENTICATION_ERROR")


class ProvisioningNotConfiguredException(AgencyFlowException):
    """Raised when agency provisioning is called but no secret is configured."""

    def __init__(self) -> None:
        super().__init__(
            "Agency provisioning is not configured (PROVISIONING_SECRET is not set).",
            "SERVICE_UNAVAILABLE",
        )


class ResourceNotFoundException(AgencyFlowException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'trigger', 'lead').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class DuplicateRecordException(AgencyFlowException):
    """Raised when a unique field (e.g. email within an agency) is already taken."""

    def __init__(self, resource_type: str, field: str) -> None:
        super().__init__(
            f"{resource_type} with this {field} already exists",
            "DUPLICATE_RECORD",
            {"resource_type": resource_type, "field": field},
        )


class InactiveWorkflowException(AgencyFlowException):
    """Raised when executing a workflow that is switched off."""

    def __init__(self, workflow_id: str) -> None:
        super().__init__(
            "Workflow is not active",
            "WORKFLOW_INACTIVE",
            {"workflow_id": workflow_id},
        )


class ActionExecutionException(AgencyFlowException):
    """Raised by an action handler when its single write cannot be performed.

    Captured into the execution log by the automation engine; never reaches the API.
    """

    def __init__(self, action_type: str, reason: str) -> None:
        super().__init__(
            f"{action_type} failed: {reason}",
            "ACTION_FAILED",
            {"action_type": action_type, "reason": reason},
        )


class SqlNotConfiguredException(AgencyFlowException):
    """Raised when an operation requires the database but it is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
