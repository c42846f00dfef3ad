"""
Unit tests for the authorization domain models.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from vaultgate_core.domain.auth import AuthRequestContext, KycStatus, RequestMetadata, Role, Subject
from vaultgate_core.domain.decisions import AuthDecision, Recommendation


class TestSubject:
    def test_enum_fields_are_normalized(self):
        subject = Subject(id="c-1", role=Role.CLIENT, kyc_status=KycStatus.APPROVED)

        assert subject.role == "client"
        assert type(subject.role) is str
        assert subject.kyc_approved is True

    def test_trusted_devices_become_frozenset(self):
        subject = Subject(id="c-1", role="client", trusted_devices=["a", "b", "a"])

        assert subject.trusted_devices == frozenset({"a", "b"})

    def test_default_kyc_is_not_approved(self):
        assert Subject(id="c-1", role="client").kyc_approved is False


class TestRequestMetadata:
    def test_accepts_camel_case_names(self):
        metadata = RequestMetadata.model_validate(
            {"originAddress": "203.0.113.7", "userAgent": "curl/8", "deviceFingerprint": "fp", "sessionId": "s"}
        )

        assert metadata.origin_address == "203.0.113.7"
        assert metadata.user_agent == "curl/8"
        assert metadata.device_fingerprint == "fp"
        assert metadata.session_id == "s"

    @pytest.mark.parametrize("raw,expected", [("1500.50", 1500.5), (200, 200.0), ("abc", None), ("", None), (True, None)])
    def test_amount_coercion(self, raw, expected):
        assert RequestMetadata(amount=raw).amount == expected

    def test_timestamp_is_stringified(self):
        moment = datetime(2025, 6, 10, 10, 0, tzinfo=timezone.utc)

        assert RequestMetadata(timestamp=moment).timestamp == moment.isoformat()

    def test_extra_keys_are_kept_in_snapshot(self):
        metadata = RequestMetadata.model_validate({"originAddress": "203.0.113.7", "channel": "mobile"})

        assert metadata.snapshot() == {"origin_address": "203.0.113.7", "channel": "mobile"}

    def test_wrong_type_is_rejected(self):
        with pytest.raises(ValidationError):
            RequestMetadata.model_validate({"originAddress": {"ip": "1.2.3.4"}})

    def test_metadata_is_immutable(self):
        metadata = RequestMetadata()

        with pytest.raises(ValidationError):
            metadata.amount = 5


class TestAuthRequestContext:
    def test_missing_fields(self):
        context = AuthRequestContext(subject=None, resource="", action="read")

        assert context.missing_fields() == ["subject", "resource"]

    def test_request_ids_are_unique(self):
        subject = Subject(id="c-1", role="client")

        first = AuthRequestContext(subject=subject, resource="profile", action="read")
        second = AuthRequestContext(subject=subject, resource="profile", action="read")

        assert first.request_id != second.request_id

    def test_mapping_metadata_is_validated(self):
        context = AuthRequestContext(
            subject=None, resource="profile", action="read", metadata={"originAddress": "203.0.113.7", "amount": "12.5"}
        )

        assert isinstance(context.metadata, RequestMetadata)
        assert context.metadata.origin_address == "203.0.113.7"
        assert context.amount == 12.5
        assert context.metadata_errors == 0

    def test_none_metadata_becomes_empty(self):
        context = AuthRequestContext(subject=None, resource="profile", action="read", metadata=None)

        assert context.metadata == RequestMetadata()

    def test_malformed_metadata_is_counted(self):
        context = AuthRequestContext(
            subject=None, resource="profile", action="read", metadata={"sessionId": {"nested": True}}
        )

        assert context.metadata == RequestMetadata()
        assert context.metadata_errors == 1

    def test_non_mapping_metadata_is_counted(self):
        context = AuthRequestContext(subject=None, resource="profile", action="read", metadata="not-a-mapping")

        assert context.metadata_errors == 1


class TestAuthDecision:
    def test_fail_closed(self):
        decision = AuthDecision.fail_closed("Internal authorization error", "system_error")

        assert decision.allowed is False
        assert decision.risk_assessment.score == 100
        assert decision.risk_assessment.factors == ("system_error",)
        assert decision.risk_assessment.recommendation is Recommendation.DENY
        assert decision.additional_checks == ()

    def test_decision_is_immutable(self):
        decision = AuthDecision.fail_closed("denied", "invalid_request")

        with pytest.raises(ValidationError):
            decision.allowed = True
