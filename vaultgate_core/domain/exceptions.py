"""
Standard exceptions for vaultgate.

This module defines the hierarchy of exceptions used across the platform.
Policy denials are normally returned as decisions, not raised; the
authorization errors below are raised by caller-side enforcement when a
decision is acted upon. Collaborator errors are retryable ServiceErrors
carrying an error code.
"""

from vaultgate_core.runtime.errors import ErrorCode, RetryableError


class VaultgateError(Exception):
    """Base exception for all vaultgate errors."""
    pass


class AuthorizationError(VaultgateError):
    """Base exception for authorization errors."""
    pass


class AuthorizationDeniedError(AuthorizationError):
    """Raised by enforcement when a decision denies the operation."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class StepUpRequiredError(AuthorizationError):
    """Raised when a decision requires step-up auth the caller has not completed."""
    pass


class AuditWriteError(RetryableError):
    """Error while appending an audit record."""

    def __init__(self, message_debug: str, cause: Exception | None = None):
        super().__init__(
            code=ErrorCode.AUDIT_UNAVAILABLE,
            message_safe="Audit store unavailable",
            message_debug=message_debug,
            cause=cause,
        )


class SubjectLookupError(RetryableError):
    """Error while loading a subject snapshot."""

    def __init__(self, message_debug: str, cause: Exception | None = None):
        super().__init__(
            code=ErrorCode.SUBJECT_STORE_UNAVAILABLE,
            message_safe="Subject store unavailable",
            message_debug=message_debug,
            cause=cause,
        )
