"""
Contextual access check: time of day, network origin, device trust.

Every violated dimension is reported; the check never stops at the first
restriction.
"""

from __future__ import annotations

from datetime import datetime

from vaultgate_core.authz.network import OriginMatcher
from vaultgate_core.authz.policy import AuthorizationPolicy
from vaultgate_core.domain.auth import AuthRequestContext
from vaultgate_core.domain.decisions import ContextCheckResult

BLOCKED_ORIGIN_RESTRICTION = "Access from suspicious IP address"
UNRECOGNIZED_DEVICE_RESTRICTION = "Access from unrecognized device"


def _clock_label(hour: int) -> str:
    if hour in (0, 24):
        return "12 AM"
    if hour == 12:
        return "12 PM"
    return f"{hour} AM" if hour < 12 else f"{hour - 12} PM"


class ContextualCheck:
    def __init__(self, policy: AuthorizationPolicy):
        self.policy = policy
        self._blocked = OriginMatcher(policy.blocked_origins)
        self.night_hours_restriction = (
            "Banking operations restricted during night hours "
            f"({_clock_label(policy.business_hours_start)} - {_clock_label(policy.business_hours_end)})"
        )

    def evaluate(self, context: AuthRequestContext, now: datetime) -> ContextCheckResult:
        """
        Evaluate the contextual restrictions for a request.

        Args:
            context: The request being authorized (subject must be present).
            now: Current time in the policy's timezone.

        Returns:
            ContextCheckResult listing every triggered restriction.
        """
        subject = context.subject
        metadata = context.metadata
        restrictions: list[str] = []

        if self.policy.is_hour_restricted(subject.role) and not self.policy.is_business_hour(now.hour):
            restrictions.append(self.night_hours_restriction)

        if self._blocked.matches(metadata.origin_address):
            restrictions.append(BLOCKED_ORIGIN_RESTRICTION)

        fingerprint = metadata.device_fingerprint
        if fingerprint and fingerprint not in subject.trusted_devices:
            restrictions.append(UNRECOGNIZED_DEVICE_RESTRICTION)

        return ContextCheckResult(
            allowed=not restrictions,
            reason="; ".join(restrictions) if restrictions else "All contextual checks passed",
            restrictions=tuple(restrictions),
        )
