"""Error handling utilities.

This module provides the exception hierarchy for the search refinery. The
processing core is designed to return best-effort results rather than fail a
batch, so most of these errors are raised and caught internally (for example
around enrichment module invocations) and only logged. Configuration errors are
the exception: an explicit, invalid option update is reported to the caller.
"""

from typing import Any


class RefineryError(Exception):
    """Base class for all exceptions raised by the search refinery."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        details: dict[str, Any] | None = None,
    ):
        """Initialize the error with context information.

        Args:
            message: Human-readable error message
            original_error: The original exception that caused this error, if any
            details: Additional structured details about the error
        """
        self.message = message
        self.original_error = original_error
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert the error to a dictionary representation."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
        }

        if self.details:
            result["details"] = self.details

        return result


class ConfigurationError(RefineryError):
    """Error raised when an option update fails validation."""

    def __init__(
        self,
        message: str,
        component: str | None = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if component:
            details["component"] = component
        super().__init__(message, details=details, **kwargs)


# Enrichment-related errors


class EnrichmentError(RefineryError):
    """Base class for failures inside an enrichment module invocation."""

    def __init__(
        self,
        message: str,
        module_id: str | None = None,
        **kwargs,
    ):
        """Initialize an enrichment error.

        Args:
            message: Error message
            module_id: Identifier of the module that failed
            **kwargs: Additional arguments passed to RefineryError
        """
        self.module_id = module_id
        details = kwargs.pop("details", {})
        if module_id:
            details["module_id"] = module_id
        super().__init__(message, details=details, **kwargs)


class ModuleTimeoutError(EnrichmentError):
    """Error raised when a module invocation exceeds the pipeline timeout."""

    def __init__(
        self,
        module_id: str,
        timeout_ms: int,
        operation: str = "process",
        message: str | None = None,
        **kwargs,
    ):
        """Initialize a module timeout error.

        Args:
            module_id: Identifier of the module that timed out
            timeout_ms: The timeout that was exceeded, in milliseconds
            operation: The operation that timed out ('process' or 'process_batch')
            message: Error message (defaults to a standard message)
            **kwargs: Additional arguments passed to EnrichmentError
        """
        self.timeout_ms = timeout_ms
        details = kwargs.pop("details", {})
        details["timeout_ms"] = timeout_ms
        details["operation"] = operation
        message = (
            message
            or f"Module {module_id} {operation} timed out after {timeout_ms}ms"
        )
        super().__init__(message, module_id, details=details, **kwargs)


class ModuleProcessingError(EnrichmentError):
    """Error raised when a module raises while processing results."""

    def __init__(
        self,
        module_id: str,
        operation: str = "process",
        message: str | None = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        details["operation"] = operation
        original = kwargs.get("original_error")
        message = message or f"Module {module_id} {operation} failed: {original}"
        super().__init__(message, module_id, details=details, **kwargs)
