"""
Decision merging.

Combines the stage outputs under a fixed precedence:
1. A role, contextual or dynamic-rule failure denies, citing every failing
   stage. Risk and session results are still attached for diagnostics.
2. Otherwise the risk recommendation decides: DENY denies, CHALLENGE grants
   with escalated session requirements, MONITOR and ALLOW grant unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass

from vaultgate_core.domain.audit import AuditEventKind
from vaultgate_core.domain.decisions import (
    AuthDecision,
    CheckResult,
    ContextCheckResult,
    MonitoringLevel,
    Recommendation,
    RiskAssessment,
    SessionRequirements,
)


@dataclass(frozen=True)
class StageOutcomes:
    """Everything the stages produced for one request."""

    role: CheckResult
    context: ContextCheckResult
    risk: RiskAssessment
    session: SessionRequirements
    dynamic: CheckResult


class DecisionMerger:
    def merge(self, outcomes: StageOutcomes) -> tuple[AuthDecision, AuditEventKind]:
        """
        Merge stage outcomes into the final decision.

        Returns:
            The decision and the audit event kind that records it.
        """
        checks = (outcomes.role, outcomes.context, outcomes.dynamic)
        failed = [check for check in checks if not check.allowed]
        restrictions = outcomes.context.restrictions

        if failed:
            decision = AuthDecision(
                allowed=False,
                reason="; ".join(check.reason for check in failed if check.reason),
                risk_assessment=outcomes.risk,
                session_requirements=outcomes.session,
                additional_checks=restrictions,
            )
            return decision, self._policy_failure_kind(outcomes)

        recommendation = outcomes.risk.recommendation

        if recommendation == Recommendation.DENY:
            decision = AuthDecision(
                allowed=False,
                reason=f"High risk operation denied (score: {outcomes.risk.score})",
                risk_assessment=outcomes.risk,
                session_requirements=outcomes.session,
                additional_checks=restrictions,
            )
            return decision, AuditEventKind.ACCESS_DENIED

        if recommendation == Recommendation.CHALLENGE:
            # Overrides the derived monitoring level even when it was STRICT
            escalated = outcomes.session.model_copy(
                update={
                    "require_step_up": True,
                    "require_reauth": True,
                    "monitoring_level": MonitoringLevel.ENHANCED,
                }
            )
            decision = AuthDecision(
                allowed=True,
                reason="Access granted with additional security requirements",
                risk_assessment=outcomes.risk,
                session_requirements=escalated,
                additional_checks=restrictions,
            )
            return decision, AuditEventKind.ACCESS_GRANTED

        decision = AuthDecision(
            allowed=True,
            reason="Authorization granted",
            risk_assessment=outcomes.risk,
            session_requirements=outcomes.session,
            additional_checks=restrictions,
        )
        return decision, AuditEventKind.ACCESS_GRANTED

    @staticmethod
    def _policy_failure_kind(outcomes: StageOutcomes) -> AuditEventKind:
        if not outcomes.role.allowed:
            return AuditEventKind.ROLE_CHECK_FAILED
        if not outcomes.context.allowed:
            return AuditEventKind.CONTEXT_CHECK_FAILED
        return AuditEventKind.ACCESS_DENIED
