"""
Authorization policy.

AuthorizationPolicy is the engine's static configuration: the permission
matrix, denylists, holiday calendar, high-risk actions and every numeric
threshold used by the stages. It is built once at process start (from
settings or from a JSON file) and passed by reference into the
orchestrator; nothing in the engine mutates it.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from vaultgate_core.config import Settings
from vaultgate_core.domain.auth import Role

WILDCARD = "*"

DEFAULT_PERMISSIONS: dict[str, dict[str, list[str]]] = {
    Role.CLIENT.value: {
        "banking/accounts": ["read", "create"],
        "banking/transactions": ["read", "create", "transfer", "withdraw"],
        "profile": ["read", "update"],
        "dashboard": ["read"],
        "orchestration": ["status"],
    },
    Role.ACCOUNT_MANAGER.value: {
        "banking/accounts": ["read", "create", "update", "approve"],
        "banking/transactions": ["read", "create", "approve"],
        "customer": ["read", "update"],
        "reports": ["read"],
        "dashboard": ["read"],
        "orchestration": ["status"],
    },
    Role.COMPLIANCE_OFFICER.value: {
        "banking/accounts": ["read", "suspend", "investigate"],
        "banking/transactions": ["read", "investigate", "flag"],
        "audit": ["read", "export"],
        "compliance": ["read", "update"],
        "reports": ["read", "export"],
        "dashboard": ["read"],
        "orchestration": ["status"],
    },
    Role.AUDITOR.value: {
        "audit": ["read", "export"],
        "reports": ["read"],
        "dashboard": ["read"],
        "orchestration": ["status"],
    },
    Role.BANK_ADMIN.value: {
        WILDCARD: [WILDCARD],
    },
}


class RiskPolicy(BaseModel):
    """Weights and thresholds of the additive risk model."""

    high_frequency_threshold: int = 50
    high_frequency_window_seconds: int = 3600
    large_amount_threshold: float = 100_000

    high_frequency_points: int = 30
    high_risk_action_points: int = 20
    large_amount_points: int = 25
    unusual_time_points: int = 15
    suspicious_origin_points: int = 40
    incomplete_kyc_points: int = 20

    deny_threshold: int = 70
    challenge_threshold: int = 50
    monitor_threshold: int = 30

    model_config = ConfigDict(frozen=True)


class SessionPolicy(BaseModel):
    """Inputs of session requirement derivation."""

    sensitive_action_max_session_seconds: int = 30 * 60
    privileged_role_max_session_seconds: int = 60 * 60
    reauth_amount_threshold: float = 50_000

    model_config = ConfigDict(frozen=True)


class RulePolicy(BaseModel):
    """Inputs of the dynamic veto rules."""

    failed_login_threshold: int = 5
    failed_login_window_seconds: int = 30 * 60
    unverified_transfer_action: str = "transfer"
    unverified_transfer_limit: float = 10_000
    holiday_restricted_roles: frozenset[str] = frozenset({Role.CLIENT.value})
    holiday_restricted_actions: frozenset[str] = frozenset({"transfer", "withdraw"})

    model_config = ConfigDict(frozen=True)


class AuthorizationPolicy(BaseModel):
    """Complete static configuration of the authorization engine."""

    permissions: dict[str, dict[str, frozenset[str]]] = Field(
        default_factory=lambda: {
            role: {resource: frozenset(actions) for resource, actions in grants.items()}
            for role, grants in DEFAULT_PERMISSIONS.items()
        }
    )
    admin_role: str = Role.BANK_ADMIN.value
    privileged_roles: frozenset[str] = frozenset(
        {Role.BANK_ADMIN.value, Role.COMPLIANCE_OFFICER.value}
    )
    # None restricts every role outside privileged_roles
    hour_restricted_roles: frozenset[str] | None = None
    high_risk_actions: frozenset[str] = frozenset({"transfer", "withdraw", "delete", "admin"})

    # Entries are IP addresses, CIDR networks or literal strings
    blocked_origins: tuple[str, ...] = ("192.168.1.100", "10.0.0.50")
    suspicious_origins: tuple[str, ...] = ("192.168.1.100",)

    holidays: frozenset[date] = frozenset()
    timezone: str = "UTC"
    business_hours_start: int = Field(6, ge=0, le=23)
    business_hours_end: int = Field(22, ge=1, le=24)

    dependency_timeout_seconds: float = Field(2.0, gt=0)

    risk: RiskPolicy = Field(default_factory=RiskPolicy)
    session: SessionPolicy = Field(default_factory=SessionPolicy)
    rules: RulePolicy = Field(default_factory=RulePolicy)

    model_config = ConfigDict(frozen=True)

    def is_business_hour(self, hour: int) -> bool:
        """True if hour falls in [business_hours_start, business_hours_end)."""
        return self.business_hours_start <= hour < self.business_hours_end

    def is_hour_restricted(self, role: str) -> bool:
        """True if role may only act during business hours."""
        if self.hour_restricted_roles is None:
            return role not in self.privileged_roles
        return role in self.hour_restricted_roles

    def is_high_risk(self, action: str | None) -> bool:
        return action in self.high_risk_actions

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthorizationPolicy":
        """Build the policy from environment settings.

        If AUTHZ_POLICY_FILE is set the file replaces the defaults entirely.
        """
        if settings.AUTHZ_POLICY_FILE:
            return cls.from_file(settings.AUTHZ_POLICY_FILE)

        return cls(
            timezone=settings.AUTHZ_TIMEZONE,
            dependency_timeout_seconds=settings.AUTHZ_DEPENDENCY_TIMEOUT_SECONDS,
            blocked_origins=tuple(settings.AUTHZ_BLOCKED_ORIGINS),
            suspicious_origins=tuple(settings.AUTHZ_SUSPICIOUS_ORIGINS),
            holidays=frozenset(date.fromisoformat(day) for day in settings.AUTHZ_HOLIDAYS),
            high_risk_actions=frozenset(settings.AUTHZ_HIGH_RISK_ACTIONS),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "AuthorizationPolicy":
        """Load a policy from a JSON document with the same shape as this model."""
        policy = cls.model_validate_json(Path(path).read_text(encoding="utf-8"))
        logger.info(
            f"Loaded authorization policy from {path} "
            f"({len(policy.permissions)} roles, {len(policy.holidays)} holidays)"
        )
        return policy
