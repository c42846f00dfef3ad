"""
Unit tests for caller-side enforcement of decisions.
"""

import pytest

from vaultgate_core.authz.enforcement import STEP_UP_REQUIRED_MESSAGE, enforce_session_requirements
from vaultgate_core.domain.decisions import AuthDecision, Recommendation, RiskAssessment, SessionRequirements
from vaultgate_core.domain.exceptions import AuthorizationDeniedError, StepUpRequiredError


def decision(allowed=True, **session) -> AuthDecision:
    return AuthDecision(
        allowed=allowed,
        reason="Authorization granted" if allowed else "Role client lacks approve access to audit",
        risk_assessment=RiskAssessment(score=0, recommendation=Recommendation.ALLOW),
        session_requirements=SessionRequirements(**session),
    )


class TestEnforceSessionRequirements:
    def test_denied_decision_raises_with_reason(self):
        with pytest.raises(AuthorizationDeniedError) as exc_info:
            enforce_session_requirements(decision(allowed=False), step_up_verified=True)

        assert exc_info.value.reason == "Role client lacks approve access to audit"

    def test_step_up_required_and_missing(self):
        with pytest.raises(StepUpRequiredError, match=STEP_UP_REQUIRED_MESSAGE):
            enforce_session_requirements(decision(require_step_up=True), step_up_verified=False)

    def test_reauth_required_and_missing(self):
        with pytest.raises(StepUpRequiredError):
            enforce_session_requirements(decision(require_reauth=True), step_up_verified=False)

    def test_step_up_satisfied(self):
        granted = decision(require_step_up=True, require_reauth=True)

        assert enforce_session_requirements(granted, step_up_verified=True) is granted

    def test_no_obligations(self):
        granted = decision()

        assert enforce_session_requirements(granted, step_up_verified=False) is granted
