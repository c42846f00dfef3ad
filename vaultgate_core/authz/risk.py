"""
Risk scoring.

A purely additive point model: every rule contributes its points
independently of the others, so adding a risk factor can never lower the
total. The score is unbounded above and is mapped to a recommendation by
ordered thresholds (DENY, CHALLENGE, MONITOR, else ALLOW).
"""

from __future__ import annotations

from datetime import datetime

from vaultgate_core.authz.network import OriginMatcher
from vaultgate_core.authz.policy import AuthorizationPolicy, RiskPolicy
from vaultgate_core.domain.auth import AuthRequestContext
from vaultgate_core.domain.decisions import Recommendation, RiskAssessment

HIGH_FREQUENCY = "high_frequency_operations"
HIGH_RISK_OPERATION = "high_risk_operation"
LARGE_TRANSACTION = "large_transaction_amount"
UNUSUAL_TIME = "unusual_time_access"
SUSPICIOUS_IP = "suspicious_ip_address"
INCOMPLETE_KYC = "incomplete_kyc"


def recommend(score: int, risk: RiskPolicy) -> Recommendation:
    """Map a score to a recommendation; the first matching threshold wins."""
    if score >= risk.deny_threshold:
        return Recommendation.DENY
    if score >= risk.challenge_threshold:
        return Recommendation.CHALLENGE
    if score >= risk.monitor_threshold:
        return Recommendation.MONITOR
    return Recommendation.ALLOW


class RiskScorer:
    def __init__(self, policy: AuthorizationPolicy):
        self.policy = policy
        self._suspicious = OriginMatcher(policy.suspicious_origins)

    def factors(
        self,
        context: AuthRequestContext,
        now: datetime,
        recent_activity_count: int,
    ) -> list[tuple[str, int]]:
        """Return (tag, points) for every rule that fires, in rule order."""
        risk = self.policy.risk
        fired: list[tuple[str, int]] = []

        if recent_activity_count > risk.high_frequency_threshold:
            fired.append((HIGH_FREQUENCY, risk.high_frequency_points))

        if self.policy.is_high_risk(context.action):
            fired.append((HIGH_RISK_OPERATION, risk.high_risk_action_points))

        amount = context.amount
        if amount is not None and amount > risk.large_amount_threshold:
            fired.append((LARGE_TRANSACTION, risk.large_amount_points))

        if not self.policy.is_business_hour(now.hour):
            fired.append((UNUSUAL_TIME, risk.unusual_time_points))

        if self._suspicious.matches(context.metadata.origin_address):
            fired.append((SUSPICIOUS_IP, risk.suspicious_origin_points))

        if not context.subject.kyc_approved:
            fired.append((INCOMPLETE_KYC, risk.incomplete_kyc_points))

        return fired

    def score(
        self,
        context: AuthRequestContext,
        now: datetime,
        recent_activity_count: int,
    ) -> RiskAssessment:
        """
        Score a request.

        Args:
            context: The request being authorized.
            now: Current time in the policy's timezone.
            recent_activity_count: Subject's audit records in the frequency window.

        Returns:
            RiskAssessment with score, contributing tags and recommendation.
        """
        fired = self.factors(context, now, recent_activity_count)
        total = sum(points for _, points in fired)
        return RiskAssessment(
            score=total,
            factors=tuple(tag for tag, _ in fired),
            recommendation=recommend(total, self.policy.risk),
        )
