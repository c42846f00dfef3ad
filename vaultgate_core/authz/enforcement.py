"""
Caller-side enforcement of a decision.

The engine only declares session obligations. Before invoking a protected
operation the caller compares them with what the session has already
established (a completed second factor) and rejects the call if unmet.
"""

from __future__ import annotations

from vaultgate_core.domain.decisions import AuthDecision
from vaultgate_core.domain.exceptions import AuthorizationDeniedError, StepUpRequiredError

STEP_UP_REQUIRED_MESSAGE = "Multi-factor authentication required"


def enforce_session_requirements(decision: AuthDecision, step_up_verified: bool) -> AuthDecision:
    """Raise unless the decision may be acted upon by this session.

    Args:
        decision: The decision returned by the orchestrator.
        step_up_verified: Whether the session already completed step-up/re-auth.

    Returns:
        The same decision, for chaining.

    Raises:
        AuthorizationDeniedError: The decision denies the operation.
        StepUpRequiredError: Step-up or re-auth is required and not established.
    """
    if not decision.allowed:
        raise AuthorizationDeniedError(decision.reason)
    if decision.session_requirements.requires_verification and not step_up_verified:
        raise StepUpRequiredError(STEP_UP_REQUIRED_MESSAGE)
    return decision
