"""
Tests for the authorization HTTP surface.

The orchestrator dependency is overridden with one wired to in-memory
collaborators and a fixed clock, so no database is needed.
"""

import pytest
from fastapi.testclient import TestClient

from app.authz.factory import get_orchestrator
from app.main import app
from vaultgate_core.config import settings


@pytest.fixture
def test_client(make_orchestrator):
    app.dependency_overrides[get_orchestrator] = lambda: make_orchestrator()
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


class TestHealth:
    def test_health_endpoint_returns_ok(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["service"] == "vaultgate"


class TestEvaluateEndpoint:
    """Tests for POST /authz/evaluate."""

    def test_granted_decision(self, test_client, audit_sink):
        response = test_client.post(
            "/authz/evaluate",
            json={"subject_id": "client-1", "resource": "banking/accounts", "action": "read"},
            headers={"X-Request-Id": "req-7"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["allowed"] is True
        assert body["reason"] == "Authorization granted"
        assert body["risk_assessment"]["recommendation"] == "ALLOW"
        assert audit_sink.records[0].metadata["request_id"] == "req-7"

    def test_denial_is_a_decision_not_an_error(self, test_client):
        response = test_client.post(
            "/authz/evaluate",
            json={
                "subject_id": "client-2",
                "resource": "banking/transactions",
                "action": "transfer",
                "metadata": {"amount": 150000},
            },
        )

        assert response.status_code == 200
        assert response.json()["allowed"] is False
        assert response.json()["reason"] == "Large transfers require KYC approval"

    def test_missing_fields_fail_closed(self, test_client):
        response = test_client.post("/authz/evaluate", json={"subject_id": "client-1"})

        assert response.status_code == 200
        assert response.json()["allowed"] is False
        assert response.json()["risk_assessment"]["factors"] == ["invalid_request"]

    def test_camel_case_metadata(self, test_client):
        response = test_client.post(
            "/authz/evaluate",
            json={
                "subject_id": "client-1",
                "resource": "banking/accounts",
                "action": "read",
                "metadata": {"deviceFingerprint": "unknown-laptop"},
            },
        )

        assert response.json()["additional_checks"] == ["Access from unrecognized device"]


class TestAuthorizationStatus:
    """Tests for GET /orchestration/status."""

    def test_requires_subject_header(self, test_client):
        response = test_client.get("/orchestration/status")

        assert response.status_code == 401

    def test_status_for_client(self, test_client):
        response = test_client.get("/orchestration/status", headers={"X-Subject-Id": "client-1"})

        assert response.status_code == 200
        body = response.json()
        assert body["subject_id"] == "client-1"
        assert body["risk_score"] == 0
        assert body["monitoring_level"] == "STANDARD"

    def test_privileged_role_needs_step_up(self, test_client):
        response = test_client.get("/orchestration/status", headers={"X-Subject-Id": "officer-1"})

        assert response.status_code == 403
        assert response.json()["detail"] == "Multi-factor authentication required"

    def test_privileged_role_with_step_up(self, test_client):
        response = test_client.get(
            "/orchestration/status",
            headers={"X-Subject-Id": "officer-1", "X-MFA-Verified": "true"},
        )

        assert response.status_code == 200
        assert response.json()["monitoring_level"] == "STRICT"

    def test_unknown_subject_is_forbidden(self, test_client):
        response = test_client.get("/orchestration/status", headers={"X-Subject-Id": "ghost"})

        assert response.status_code == 403
        assert "unknown subject" in response.json()["detail"]


class TestHighRiskOperation:
    """Tests for POST /orchestration/demo/high-risk."""

    def test_unverified_large_transfer_denied(self, test_client):
        response = test_client.post(
            "/orchestration/demo/high-risk",
            json={"amount": 150000, "description": "wire"},
            headers={"X-Subject-Id": "client-2", "X-MFA-Verified": "true"},
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Large transfers require KYC approval"

    def test_verified_transfer_requires_step_up(self, test_client):
        response = test_client.post(
            "/orchestration/demo/high-risk",
            json={"amount": 150000},
            headers={"X-Subject-Id": "client-1"},
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Multi-factor authentication required"

    def test_verified_transfer_with_step_up(self, test_client):
        response = test_client.post(
            "/orchestration/demo/high-risk",
            json={"amount": 150000, "description": "wire"},
            headers={"X-Subject-Id": "client-1", "X-MFA-Verified": "true"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["data"] == {"amount": 150000.0, "description": "wire"}
        assert body["decision"]["risk_assessment"]["score"] == 45
        assert body["decision"]["session_requirements"]["require_reauth"] is True

    def test_blocked_origin_from_forwarded_header(self, test_client):
        response = test_client.post(
            "/orchestration/demo/high-risk",
            json={"amount": 10},
            headers={
                "X-Subject-Id": "client-1",
                "X-MFA-Verified": "true",
                "X-Forwarded-For": "10.0.0.50, 172.16.0.1",
            },
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Access from suspicious IP address"


class TestRateLimiting:
    """The evaluate endpoint is limited per client address."""

    def test_evaluate_is_limited_per_forwarded_address(self, test_client):
        limit = int(settings.EVALUATE_RATE_LIMIT.split("/")[0])
        body = {"subject_id": "client-1", "resource": "banking/accounts", "action": "read"}

        statuses = [
            test_client.post(
                "/authz/evaluate", json=body, headers={"X-Forwarded-For": "198.51.100.77"}
            ).status_code
            for _ in range(limit + 1)
        ]

        assert statuses[0] == 200
        assert statuses[-1] == 429

        other = test_client.post(
            "/authz/evaluate", json=body, headers={"X-Forwarded-For": "198.51.100.78"}
        )
        assert other.status_code == 200
