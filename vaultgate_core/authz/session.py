"""
Session requirement derivation.

Rules stack: each one can raise the monitoring level or add an obligation,
none can lower the monitoring level set by an earlier rule. The session cap
follows the last rule that sets one, so a privileged role's one-hour cap
replaces the sensitive-action half-hour cap.
"""

from __future__ import annotations

from vaultgate_core.authz.policy import AuthorizationPolicy
from vaultgate_core.domain.auth import AuthRequestContext
from vaultgate_core.domain.decisions import MonitoringLevel, SessionRequirements


class SessionPolicyDeriver:
    def __init__(self, policy: AuthorizationPolicy):
        self.policy = policy

    def derive(self, context: AuthRequestContext) -> SessionRequirements:
        session = self.policy.session
        step_up = False
        reauth = False
        max_duration: int | None = None
        level = MonitoringLevel.STANDARD

        if self.policy.is_high_risk(context.action):
            step_up = True
            max_duration = session.sensitive_action_max_session_seconds
            level = level.at_least(MonitoringLevel.ENHANCED)

        if context.subject.role in self.policy.privileged_roles:
            step_up = True
            max_duration = session.privileged_role_max_session_seconds
            level = level.at_least(MonitoringLevel.STRICT)

        amount = context.amount
        if amount is not None and amount > session.reauth_amount_threshold:
            reauth = True
            level = level.at_least(MonitoringLevel.STRICT)

        return SessionRequirements(
            require_step_up=step_up,
            require_reauth=reauth,
            max_session_duration_seconds=max_duration,
            monitoring_level=level,
        )
