"""
Authorization module routes.

This module provides the API endpoints for the authorization engine:
- Service-to-service evaluation of an authorization request
- The caller's current authorization status
- A protected high-risk operation demonstrating route protection
"""

from fastapi import APIRouter, Body, Depends, Request

from app.authz.dependencies import AuthorizedRequest, require_authorization
from app.authz.factory import get_orchestrator
from app.authz.schemas import (
    AuthorizationStatusResponse,
    EvaluateRequest,
    HighRiskOperationRequest,
    HighRiskOperationResponse,
)
from vaultgate_core.authz import AuthorizationOrchestrator
from vaultgate_core.config import settings
from vaultgate_core.domain.auth import RiskLevel
from vaultgate_core.domain.decisions import AuthDecision
from vaultgate_core.infrastructure.rate_limiter import limiter

router = APIRouter(tags=["authz"])

orchestration_router = APIRouter(tags=["orchestration"])


# ==============================================================================
# EVALUATION ENDPOINT
# ==============================================================================


@router.post(
    "/evaluate",
    response_model=AuthDecision,
    summary="Evaluate an authorization request",
)
@limiter.limit(settings.EVALUATE_RATE_LIMIT)
async def evaluate(
    request: Request,
    evaluate_request: EvaluateRequest = Body(...),
    orchestrator: AuthorizationOrchestrator = Depends(get_orchestrator),
):
    """
    Run an authorization request through the orchestration pipeline.

    Always answers 200 with a decision; denials are decisions with
    allowed=false, never HTTP errors.
    """
    return await orchestrator.evaluate_subject(
        subject_id=evaluate_request.subject_id,
        resource=evaluate_request.resource,
        action=evaluate_request.action,
        declared_risk_level=evaluate_request.declared_risk_level,
        metadata=evaluate_request.metadata,
        request_id=request.headers.get("X-Request-Id"),
    )


# ==============================================================================
# PROTECTED ENDPOINTS
# ==============================================================================


@orchestration_router.get(
    "/status",
    response_model=AuthorizationStatusResponse,
    summary="Get the caller's authorization status",
)
async def get_authorization_status(
    authorized: AuthorizedRequest = Depends(require_authorization("orchestration", "status")),
):
    decision = authorized.decision
    return AuthorizationStatusResponse(
        subject_id=authorized.subject_id,
        risk_score=decision.risk_assessment.score,
        risk_factors=list(decision.risk_assessment.factors),
        monitoring_level=decision.session_requirements.monitoring_level,
        decision=decision,
    )


@orchestration_router.post(
    "/demo/high-risk",
    response_model=HighRiskOperationResponse,
    summary="Run a high-risk operation behind orchestrated authorization",
)
async def high_risk_operation(
    data: HighRiskOperationRequest = Body(...),
    authorized: AuthorizedRequest = Depends(
        require_authorization("banking/transactions", "transfer", RiskLevel.HIGH)
    ),
):
    return HighRiskOperationResponse(
        message="High-risk operation executed",
        data=data,
        decision=authorized.decision,
    )
