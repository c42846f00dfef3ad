"""
Dynamic security rules.

Cross-cutting veto rules evaluated in order; the first rule that fails
decides and the rest are skipped.
"""

from __future__ import annotations

from datetime import date
from typing import Callable

from vaultgate_core.authz.policy import AuthorizationPolicy
from vaultgate_core.domain.auth import AuthRequestContext
from vaultgate_core.domain.decisions import CheckResult

MULTIPLE_FAILED_LOGINS = "multiple_failed_login_attempts"

PASSED = CheckResult(allowed=True, reason="All dynamic security rules passed")


class DynamicRuleEngine:
    def __init__(self, policy: AuthorizationPolicy):
        self.policy = policy
        self._rules: list[Callable[[AuthRequestContext, date, int], CheckResult | None]] = [
            self._suspicious_patterns,
            self._unverified_large_transfer,
            self._holiday_restriction,
        ]

    def evaluate(
        self,
        context: AuthRequestContext,
        today: date,
        failed_login_count: int,
    ) -> CheckResult:
        """
        Apply the veto rules.

        Args:
            context: The request being authorized.
            today: Current date in the policy's timezone.
            failed_login_count: Subject's LOGIN_FAILED records in the rule window.

        Returns:
            The first failing rule's result, or a passing result.
        """
        for rule in self._rules:
            verdict = rule(context, today, failed_login_count)
            if verdict is not None:
                return verdict
        return PASSED

    def _suspicious_patterns(
        self, context: AuthRequestContext, today: date, failed_login_count: int
    ) -> CheckResult | None:
        patterns = []
        if failed_login_count > self.policy.rules.failed_login_threshold:
            patterns.append(MULTIPLE_FAILED_LOGINS)
        if patterns:
            return CheckResult(
                allowed=False,
                reason=f"Suspicious patterns detected: {', '.join(patterns)}",
            )
        return None

    def _unverified_large_transfer(
        self, context: AuthRequestContext, today: date, failed_login_count: int
    ) -> CheckResult | None:
        rules = self.policy.rules
        amount = context.amount
        if (
            context.action == rules.unverified_transfer_action
            and amount is not None
            and amount > rules.unverified_transfer_limit
            and not context.subject.kyc_approved
        ):
            return CheckResult(allowed=False, reason="Large transfers require KYC approval")
        return None

    def _holiday_restriction(
        self, context: AuthRequestContext, today: date, failed_login_count: int
    ) -> CheckResult | None:
        rules = self.policy.rules
        if (
            today in self.policy.holidays
            and context.subject.role in rules.holiday_restricted_roles
            and context.action in rules.holiday_restricted_actions
        ):
            return CheckResult(allowed=False, reason="Banking operations limited during holidays")
        return None
