"""Custom exceptions for the workflow sandbox with detailed error information.

Structural defects of a workflow are never raised: the validator reports them
as diagnostics. These exceptions cover the surfaces around the core
(interchange parsing, the automation catalog, timeouts, configuration, API).
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels for categorizing exceptions."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories of errors for better classification."""
    VALIDATION = "validation"
    EXECUTION = "execution"
    CONFIGURATION = "configuration"
    NETWORK = "network"
    RESOURCE = "resource"


class WorkflowSandboxError(Exception):
    """Base exception for all workflow sandbox errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.EXECUTION,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.severity = severity
        self.category = category
        self.details = details or {}
        self.recoverable = recoverable
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging and API responses."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "category": self.category.value,
            "details": self.details,
            "recoverable": self.recoverable,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "exception_type": self.__class__.__name__
        }

    def add_context(self, **kwargs):
        """Add additional context to the exception."""
        self.context.update(kwargs)
        return self

    def add_details(self, **kwargs):
        """Add additional details to the exception."""
        self.details.update(kwargs)
        return self


class WorkflowFormatError(WorkflowSandboxError):
    """Raised when interchange JSON cannot be turned into a workflow graph."""

    def __init__(
        self,
        message: str,
        format_errors: Optional[List[str]] = None,
        source: Optional[str] = None,
        **kwargs
    ):
        super().__init__(
            message,
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.VALIDATION,
            **kwargs
        )
        self.format_errors = format_errors or []
        if source:
            self.add_context(source=source)
        if format_errors:
            self.add_details(format_errors=format_errors)


class AutomationCatalogError(WorkflowSandboxError):
    """Raised when automation catalog operations fail."""

    def __init__(
        self,
        message: str,
        action_id: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs
    ):
        super().__init__(
            message,
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.CONFIGURATION,
            **kwargs
        )
        if action_id:
            self.add_context(action_id=action_id)
        if operation:
            self.add_context(operation=operation)


class AutomationNotFoundError(AutomationCatalogError):
    """Raised when an automation action is not in the catalog."""

    def __init__(self, action_id: str, **kwargs):
        super().__init__(
            f"Automation '{action_id}' not found",
            action_id=action_id,
            operation="get",
            **kwargs
        )


class SimulationTimeoutError(WorkflowSandboxError):
    """Raised when a simulation does not finish within its time budget."""

    def __init__(
        self,
        message: str,
        timeout: Optional[float] = None,
        node_count: Optional[int] = None,
        **kwargs
    ):
        super().__init__(
            message,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.RESOURCE,
            recoverable=True,
            **kwargs
        )
        if timeout is not None:
            self.add_details(timeout=timeout)
        if node_count is not None:
            self.add_context(node_count=node_count)


class ConfigurationError(WorkflowSandboxError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        super().__init__(
            message,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.CONFIGURATION,
            **kwargs
        )
        if config_key:
            self.add_context(config_key=config_key)


class APIError(WorkflowSandboxError):
    """Raised when API operations fail."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        endpoint: Optional[str] = None,
        **kwargs
    ):
        super().__init__(
            message,
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.NETWORK,
            **kwargs
        )
        self.status_code = status_code
        if endpoint:
            self.add_context(endpoint=endpoint)
        self.add_details(status_code=status_code)


def create_error_response(error: WorkflowSandboxError) -> Dict[str, Any]:
    """Create a standardized error response from a WorkflowSandboxError."""
    return {
        "error": error.error_code,
        "message": error.message,
        "details": {
            **error.details,
            "severity": error.severity.value,
            "category": error.category.value,
            "recoverable": error.recoverable,
            "timestamp": error.timestamp.isoformat()
        },
        "context": error.context
    }
