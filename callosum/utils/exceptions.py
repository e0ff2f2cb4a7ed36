"""Custom exception classes for the Callosum orchestration core.

This module provides the root of the exception hierarchy. Specific exception
classes are defined in their respective modules (agents, modes, orchestrator)
and all inherit from CallosumError.
"""

from typing import Any


class CallosumError(Exception):
    """Base exception for all Callosum errors.

    All custom exceptions in this system should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error details
            cause: Optional original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logs and routers."""
        result: dict[str, Any] = {
            "error": self.__class__.__name__,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(CallosumError):
    """Raised when there's a configuration error."""

    pass


class InvalidConfigurationError(ConfigurationError):
    """Raised when a configuration value is invalid."""

    def __init__(self, config_key: str, value: Any, message: str | None = None):
        self.config_key = config_key
        self.value = value
        msg = message or f"Invalid configuration value for {config_key}: {value}"
        super().__init__(msg, details={"config_key": config_key, "value": str(value)})
