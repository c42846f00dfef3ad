"""
Shared fixtures for the vaultgate test suite.

Every engine test runs against a fixed clock so time-of-day and holiday
rules are deterministic.
"""

from datetime import date, datetime
from unittest.mock import MagicMock

import pytest

from tests.fakes import BUSINESS_HOURS, fixed_clock
from vaultgate_core.audit.memory import InMemoryAuditSink
from vaultgate_core.authz.orchestrator import AuthorizationOrchestrator
from vaultgate_core.authz.policy import AuthorizationPolicy
from vaultgate_core.domain.auth import KycStatus, Role, Subject
from vaultgate_core.subjects.memory import InMemorySubjectStore


@pytest.fixture
def policy():
    """Default policy with one holiday on the calendar."""
    return AuthorizationPolicy(holidays=frozenset({date(2025, 12, 25)}))


@pytest.fixture
def verified_client():
    return Subject(
        id="client-1",
        role=Role.CLIENT,
        kyc_status=KycStatus.APPROVED,
        two_factor_enabled=True,
        trusted_devices=frozenset({"device-trusted"}),
    )


@pytest.fixture
def unverified_client():
    return Subject(id="client-2", role=Role.CLIENT, kyc_status=KycStatus.IN_PROGRESS)


@pytest.fixture
def compliance_officer():
    return Subject(id="officer-1", role=Role.COMPLIANCE_OFFICER, kyc_status=KycStatus.APPROVED)


@pytest.fixture
def bank_admin():
    return Subject(id="admin-1", role=Role.BANK_ADMIN, kyc_status=KycStatus.APPROVED)


@pytest.fixture
def audit_sink():
    return InMemoryAuditSink()


@pytest.fixture
def subject_store(verified_client, unverified_client, compliance_officer, bank_admin):
    return InMemorySubjectStore([verified_client, unverified_client, compliance_officer, bank_admin])


@pytest.fixture
def make_orchestrator(policy, audit_sink, subject_store):
    """Build an orchestrator with in-memory collaborators and a fixed clock."""

    def _make(now: datetime = BUSINESS_HOURS, **overrides) -> AuthorizationOrchestrator:
        return AuthorizationOrchestrator(
            policy=overrides.get("policy", policy),
            audit_sink=overrides.get("audit_sink", audit_sink),
            subject_store=overrides.get("subject_store", subject_store),
            clock=fixed_clock(now),
        )

    return _make


@pytest.fixture
def mock_postgres(monkeypatch):
    """Patch get_db_connection in the postgres adapters with a MagicMock connection."""
    cursor = MagicMock()
    conn = MagicMock()
    conn.cursor.return_value = cursor
    conn.__enter__.return_value = conn
    conn.__exit__.return_value = False

    factory = MagicMock(return_value=conn)
    monkeypatch.setattr("vaultgate_core.audit.postgres.get_db_connection", factory)
    monkeypatch.setattr("vaultgate_core.subjects.postgres.get_db_connection", factory)
    return {"conn": conn, "cursor": cursor, "factory": factory}
