"""
Service runtime layer for vaultgate.

This package provides the shared error model:
- ServiceError: Standardized errors with retry semantics
- DependencyTimeoutError: A collaborator exceeded its request-scoped timeout
"""

from .errors import (
    DependencyTimeoutError,
    ErrorCode,
    RetryableError,
    ServiceError,
)

__all__ = [
    "ServiceError",
    "RetryableError",
    "DependencyTimeoutError",
    "ErrorCode",
]
