"""
Pydantic schemas for the authorization module.

Decisions are returned as vaultgate_core.domain.decisions.AuthDecision;
this module only adds request models and endpoint-specific responses.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from vaultgate_core.domain.auth import RiskLevel
from vaultgate_core.domain.decisions import AuthDecision, MonitoringLevel


class EvaluateRequest(BaseModel):
    """Request model for a service-to-service authorization evaluation."""

    subject_id: Optional[str] = None
    resource: Optional[str] = None
    action: Optional[str] = None
    declared_risk_level: RiskLevel = RiskLevel.LOW
    metadata: dict[str, Any] = Field(default_factory=dict)


class AuthorizationStatusResponse(BaseModel):
    """Response model for the caller's current authorization status."""

    subject_id: str
    risk_score: int
    risk_factors: list[str]
    monitoring_level: MonitoringLevel
    decision: AuthDecision


class HighRiskOperationRequest(BaseModel):
    """Payload of the high-risk demo operation."""

    amount: Optional[float] = None
    description: Optional[str] = None


class HighRiskOperationResponse(BaseModel):
    message: str
    data: HighRiskOperationRequest
    decision: AuthDecision
