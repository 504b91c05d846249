"""
Core exception hierarchy for AI Insights Bot.

Provides standardized exception types with categorization for retry logic.
Collection errors are recovered inside the collectors; dedup store errors are
absorbed by the store; configuration and delivery errors end the run.
"""

from typing import Any, Optional


# =============================================================================
# Base Exceptions
# =============================================================================


class InsightsBotError(Exception):
    """Base exception for all AI Insights Bot errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class RetryableError(InsightsBotError):
    """
    Transient errors that should be retried.

    Examples: Rate limits, timeouts, temporary network issues.
    """

    pass


class PermanentError(InsightsBotError):
    """
    Errors that won't be fixed by retrying.

    Examples: Invalid input, missing required data, authentication failures.
    """

    pass


# =============================================================================
# Collector Errors
# =============================================================================


class CollectorError(InsightsBotError):
    """Base exception for collector errors."""

    def __init__(
        self,
        collector_type: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        self.collector_type = collector_type
        super().__init__(f"[{collector_type}] {message}", details)


class CollectorRateLimitError(CollectorError, RetryableError):
    """Raised when a collector hits rate limits."""

    pass


class CollectorTimeoutError(CollectorError, RetryableError):
    """Raised when a collector operation times out."""

    pass


class CollectorAuthError(CollectorError, PermanentError):
    """Raised when collector authentication fails."""

    pass


class CollectorNotFoundError(CollectorError, PermanentError):
    """Raised when requested resource is not found."""

    pass


class CollectorUnavailableError(CollectorError, RetryableError):
    """Raised when collector service is temporarily unavailable."""

    pass


# =============================================================================
# Deduplication Store Errors
# =============================================================================


class DedupStoreError(RetryableError):
    """Raised when the dedup store backend cannot serve a lookup or write."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        self.operation = operation
        super().__init__(f"[dedup:{operation}] {message}", details)


# =============================================================================
# Delivery Errors
# =============================================================================


class DeliveryError(InsightsBotError):
    """Raised when posting a message to the chat channel fails.

    Unlike collection errors this is never swallowed: it ends the run so the
    trigger can alert or retry.
    """

    def __init__(
        self,
        channel: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        self.channel = channel
        super().__init__(f"[{channel}] {message}", details)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(PermanentError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        self.config_key = config_key
        details = {"config_key": config_key} if config_key else None
        super().__init__(message, details)


class InitializationError(PermanentError):
    """Raised when a service cannot be created at startup."""

    def __init__(
        self,
        component: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        self.component = component
        super().__init__(f"[{component}] {message}", details)
