"""
Shared kernel: exception hierarchy and async helpers used across layers.
"""

from __future__ import annotations

from .async_utils import CircuitBreaker, timeout_with_fallback
from .exceptions import (
    APIError,
    ConfigurationError,
    DataError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    InvalidParameterError,
    NetworkError,
    NotFoundError,
    ParseError,
    RateLimitError,
    ServiceUnavailableError,
    StoreError,
    StoreUnavailableError,
    ValidationError,
    VetResourcesError,
    is_retryable_error,
)

__all__ = [
    # Exceptions
    "VetResourcesError",
    "ErrorContext",
    "ErrorSeverity",
    "ErrorCategory",
    "APIError",
    "RateLimitError",
    "NetworkError",
    "ServiceUnavailableError",
    "StoreError",
    "StoreUnavailableError",
    "ValidationError",
    "InvalidParameterError",
    "DataError",
    "NotFoundError",
    "ParseError",
    "ConfigurationError",
    "is_retryable_error",
    # Async utilities
    "CircuitBreaker",
    "timeout_with_fallback",
]
