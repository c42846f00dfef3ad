"""
Standardized error model with retry semantics.

Collaborator failures are raised as ServiceError subclasses that carry an
error code and say whether the failure is transient. The authorization
engine never retries a decision itself; the orchestrator records the code,
the retry classification and the debug id in the fail-closed audit record
so a caller knows whether re-submitting the request may succeed.
"""

from __future__ import annotations

import uuid


class ErrorCode:
    """Error codes for collaborator failures."""

    TIMEOUT = "TIMEOUT"
    AUDIT_UNAVAILABLE = "AUDIT_UNAVAILABLE"
    SUBJECT_STORE_UNAVAILABLE = "SUBJECT_STORE_UNAVAILABLE"


class ServiceError(Exception):
    """Standardized service error with retry classification.

    Attributes:
        code: Error code for programmatic handling.
        message_safe: Safe message for logging and the audit trail.
        message_debug: Optional detailed message (driver errors, ids).
        retryable: Whether re-submitting the request may succeed.
        cause: Optional underlying exception.
        debug_id: Short identifier correlating logs and audit records.
    """

    def __init__(
        self,
        code: str,
        message_safe: str,
        message_debug: str | None = None,
        retryable: bool = False,
        cause: Exception | None = None,
        debug_id: str | None = None,
    ):
        super().__init__(message_safe)
        self.code = code
        self.message_safe = message_safe
        self.message_debug = message_debug
        self.retryable = retryable
        self.cause = cause
        self.debug_id = debug_id or str(uuid.uuid4())[:8]

    def __str__(self) -> str:
        return f"[{self.code}] {self.message_safe}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, "
            f"message_safe={self.message_safe!r}, "
            f"retryable={self.retryable}, "
            f"debug_id={self.debug_id!r})"
        )


class RetryableError(ServiceError):
    """A transient collaborator failure: timeouts, an unreachable database."""

    def __init__(
        self,
        code: str,
        message_safe: str,
        message_debug: str | None = None,
        cause: Exception | None = None,
        debug_id: str | None = None,
    ):
        super().__init__(
            code=code,
            message_safe=message_safe,
            message_debug=message_debug,
            retryable=True,
            cause=cause,
            debug_id=debug_id,
        )


class DependencyTimeoutError(RetryableError):
    """A collaborator (audit sink, subject store) did not answer in time."""

    def __init__(self, dependency: str, timeout_seconds: float):
        super().__init__(
            code=ErrorCode.TIMEOUT,
            message_safe=f"{dependency} did not respond within {timeout_seconds}s",
        )
        self.dependency = dependency
        self.timeout_seconds = timeout_seconds
