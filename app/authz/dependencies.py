"""
FastAPI dependencies for orchestrated authorization.

Provides dependency injection for:
- Building an authorization context from the incoming request
- Protecting a route with require_authorization(resource, action)

The decision is handed to the route handler as a return value; nothing is
stashed on request.state.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from fastapi import Depends, HTTPException, Request
from loguru import logger

from app.authz.factory import get_orchestrator
from vaultgate_core.authz import AuthorizationOrchestrator, enforce_session_requirements
from vaultgate_core.domain.auth import RiskLevel
from vaultgate_core.domain.decisions import AuthDecision
from vaultgate_core.domain.exceptions import AuthorizationDeniedError, StepUpRequiredError
from vaultgate_core.infrastructure.rate_limiter import client_address

SUBJECT_HEADER = "X-Subject-Id"
STEP_UP_HEADER = "X-MFA-Verified"


@dataclass(frozen=True)
class AuthorizedRequest:
    """What a protected handler receives once authorization passed."""

    subject_id: str
    decision: AuthDecision


async def _body_amount(request: Request) -> Any:
    if request.method not in ("POST", "PUT", "PATCH"):
        return None
    if "application/json" not in request.headers.get("content-type", ""):
        return None
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return body.get("amount") if isinstance(body, dict) else None


async def build_request_metadata(request: Request) -> dict[str, Any]:
    """Collect the request signals the engine consumes."""
    amount = request.query_params.get("amount")
    if amount is None:
        amount = await _body_amount(request)

    return {
        "origin_address": client_address(request),
        "user_agent": request.headers.get("user-agent"),
        "device_fingerprint": request.headers.get("X-Device-Fingerprint"),
        "session_id": request.headers.get("X-Session-Id"),
        "amount": amount,
        "method": request.method,
        "endpoint": request.url.path,
    }


def require_authorization(resource: str, action: str, risk_level: RiskLevel = RiskLevel.LOW):
    """Dependency factory to protect a route with the authorization engine.

    Usage:
        @router.post("/transfers")
        async def transfer(
            authorized: AuthorizedRequest = Depends(
                require_authorization("banking/transactions", "transfer", RiskLevel.HIGH)
            ),
        ):
            ...

    The subject id comes from the X-Subject-Id header set by the upstream
    authenticating gateway. A completed second factor is signalled with
    X-MFA-Verified: true.

    Args:
        resource: Protected resource identifier.
        action: Operation identifier.
        risk_level: Declared risk hint recorded with the evaluation.

    Returns:
        A dependency function that yields an AuthorizedRequest.
    """

    async def _authorize(
        request: Request,
        orchestrator: AuthorizationOrchestrator = Depends(get_orchestrator),
    ) -> AuthorizedRequest:
        subject_id = request.headers.get(SUBJECT_HEADER)
        if not subject_id:
            raise HTTPException(status_code=401, detail="Not authenticated")

        decision = await orchestrator.evaluate_subject(
            subject_id=subject_id,
            resource=resource,
            action=action,
            declared_risk_level=risk_level,
            metadata=await build_request_metadata(request),
            request_id=request.headers.get("X-Request-Id"),
        )

        step_up_verified = request.headers.get(STEP_UP_HEADER, "").lower() == "true"
        try:
            enforce_session_requirements(decision, step_up_verified)
        except AuthorizationDeniedError as e:
            raise HTTPException(status_code=403, detail=e.reason)
        except StepUpRequiredError as e:
            logger.info(f"Step-up required for subject {subject_id} on {resource}:{action}")
            raise HTTPException(status_code=403, detail=str(e))

        return AuthorizedRequest(subject_id=subject_id, decision=decision)

    return _authorize
