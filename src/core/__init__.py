"""
Core infrastructure modules for AI Insights Bot.

Provides common utilities used across the application:
- exceptions: Standardized exception hierarchy
- throttle: Fixed-delay iteration for rate-limited APIs
- http: Shared HTTP status handling and retries for collectors
- container: Dependency injection container (import from src.core.container)
"""

from src.core.exceptions import (
    InsightsBotError,
    RetryableError,
    PermanentError,
    CollectorError,
    CollectorRateLimitError,
    CollectorTimeoutError,
    CollectorAuthError,
    CollectorNotFoundError,
    CollectorUnavailableError,
    DedupStoreError,
    DeliveryError,
    ConfigurationError,
    InitializationError,
)

from src.core.throttle import ThrottledSequence

__all__ = [
    # Exceptions
    "InsightsBotError",
    "RetryableError",
    "PermanentError",
    "CollectorError",
    "CollectorRateLimitError",
    "CollectorTimeoutError",
    "CollectorAuthError",
    "CollectorNotFoundError",
    "CollectorUnavailableError",
    "DedupStoreError",
    "DeliveryError",
    "ConfigurationError",
    "InitializationError",
    # Throttling
    "ThrottledSequence",
]
