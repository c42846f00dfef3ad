"""
Authorization decision models.

An AuthDecision is the single output of the orchestration pipeline. It is
immutable and carries no timestamps or generated ids, so two evaluations
of the same inputs compare equal.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Recommendation(str, Enum):
    """Categorical outcome of risk scoring."""

    ALLOW = "ALLOW"
    MONITOR = "MONITOR"
    CHALLENGE = "CHALLENGE"
    DENY = "DENY"


class MonitoringLevel(str, Enum):
    """Session monitoring intensity, ordered STANDARD < ENHANCED < STRICT."""

    STANDARD = "STANDARD"
    ENHANCED = "ENHANCED"
    STRICT = "STRICT"

    @property
    def rank(self) -> int:
        return _MONITORING_RANK[self]

    def at_least(self, other: "MonitoringLevel") -> "MonitoringLevel":
        """Return the stronger of self and other."""
        return self if self.rank >= other.rank else other


_MONITORING_RANK = {
    MonitoringLevel.STANDARD: 0,
    MonitoringLevel.ENHANCED: 1,
    MonitoringLevel.STRICT: 2,
}


class RiskAssessment(BaseModel):
    """Additive risk score with the tags that contributed to it."""

    score: int = Field(ge=0)
    factors: tuple[str, ...] = ()
    recommendation: Recommendation

    model_config = ConfigDict(frozen=True)


class SessionRequirements(BaseModel):
    """Obligations the caller must enforce on the session."""

    require_step_up: bool = False
    require_reauth: bool = False
    max_session_duration_seconds: int | None = None
    monitoring_level: MonitoringLevel = MonitoringLevel.STANDARD

    model_config = ConfigDict(frozen=True)

    @property
    def requires_verification(self) -> bool:
        """True if the caller must have completed a second factor."""
        return self.require_step_up or self.require_reauth


class AuthDecision(BaseModel):
    """Final verdict of the authorization pipeline."""

    allowed: bool
    reason: str
    risk_assessment: RiskAssessment
    session_requirements: SessionRequirements = Field(default_factory=SessionRequirements)
    additional_checks: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)

    @classmethod
    def fail_closed(cls, reason: str, factor: str) -> "AuthDecision":
        """Deny with the maximum risk score, tagged with a single factor."""
        return cls(
            allowed=False,
            reason=reason,
            risk_assessment=RiskAssessment(
                score=100,
                factors=(factor,),
                recommendation=Recommendation.DENY,
            ),
        )


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a pass/fail stage (role check, dynamic rules)."""

    allowed: bool
    reason: str


@dataclass(frozen=True)
class ContextCheckResult:
    """Outcome of the contextual check with every violated restriction."""

    allowed: bool
    reason: str
    restrictions: tuple[str, ...] = ()
