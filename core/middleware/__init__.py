"""
Core middleware package.

- Error handling with a uniform JSON envelope and sanitised messages
- Structured request logging with PII masking
"""

from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    classify_exception,
    sanitize_error_message,
    setup_error_handlers,
)
from core.middleware.logging import (
    StructuredFormatter,
    StructuredLoggingMiddleware,
    mask_sensitive_data,
    setup_logging,
)

__all__ = [
    # Error handling
    "ErrorHandlingMiddleware",
    "classify_exception",
    "sanitize_error_message",
    "setup_error_handlers",
    # Logging
    "StructuredFormatter",
    "StructuredLoggingMiddleware",
    "mask_sensitive_data",
    "setup_logging",
]
