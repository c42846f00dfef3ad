"""
Authorization request domain models.

This module defines the inputs of the authorization engine:
- Role, KycStatus, RiskLevel: enumerations shared with the identity store
- Subject: read-only snapshot of the identity performing an action
- RequestMetadata: optional request signals (origin, device, amount, ...)
- AuthRequestContext: one evaluation's immutable input
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class Role(str, Enum):
    """Banking roles known to the permission matrix."""

    BANK_ADMIN = "bank_admin"
    ACCOUNT_MANAGER = "account_manager"
    COMPLIANCE_OFFICER = "compliance_officer"
    AUDITOR = "auditor"
    CLIENT = "client"


class KycStatus(str, Enum):
    """Know-your-customer verification state of a subject."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"


class RiskLevel(str, Enum):
    """Caller-declared risk hint. Recorded, never used for scoring."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


def enum_value(value: Any) -> Any:
    """Return the plain value of an Enum member, or the value unchanged."""
    return value.value if isinstance(value, Enum) else value


@dataclass(frozen=True)
class Subject:
    """Identity snapshot supplied by the subject store.

    role and kyc_status are normalized to their plain string values so they
    compare and hash the same way as the strings in the policy.
    """

    id: str
    role: str
    kyc_status: str = KycStatus.NOT_STARTED.value
    two_factor_enabled: bool = False
    trusted_devices: frozenset[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "role", enum_value(self.role))
        object.__setattr__(self, "kyc_status", enum_value(self.kyc_status))
        object.__setattr__(self, "trusted_devices", frozenset(self.trusted_devices))

    @property
    def kyc_approved(self) -> bool:
        return self.kyc_status == KycStatus.APPROVED.value


class RequestMetadata(BaseModel):
    """
    Optional request signals.

    Accepts both snake_case names and the camelCase wire names
    (originAddress, userAgent, deviceFingerprint, sessionId). Unknown keys are
    kept as extras. Malformed amounts are dropped rather than rejected, so a
    bad signal only removes that signal from the evaluation.
    """

    origin_address: str | None = Field(None, alias="originAddress")
    user_agent: str | None = Field(None, alias="userAgent")
    device_fingerprint: str | None = Field(None, alias="deviceFingerprint")
    session_id: str | None = Field(None, alias="sessionId")
    amount: float | None = None
    timestamp: str | None = None

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> float | None:
        if value is None or value == "" or isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> str | None:
        if value is None:
            return None
        if hasattr(value, "isoformat"):
            return value.isoformat()
        return str(value)

    def snapshot(self) -> dict[str, Any]:
        """Metadata as a JSON-safe dict for audit records (set keys only)."""
        return self.model_dump(mode="json", exclude_none=True)


@dataclass(frozen=True)
class AuthRequestContext:
    """Input of one authorization evaluation.

    subject, resource and action may be None only to represent a malformed
    request; the orchestrator denies such requests without running any stage.
    metadata may be given as a plain mapping; it is validated into
    RequestMetadata here. Metadata that fails validation is replaced by an
    empty RequestMetadata and counted in metadata_errors, which the
    orchestrator treats as an invalid request.
    """

    subject: Subject | None
    resource: str | None
    action: str | None
    declared_risk_level: RiskLevel = RiskLevel.LOW
    metadata: RequestMetadata | Mapping[str, Any] | None = field(default_factory=RequestMetadata)
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    metadata_errors: int = field(default=0, init=False, compare=False)

    def __post_init__(self):
        if isinstance(self.metadata, RequestMetadata):
            return
        raw = self.metadata if self.metadata is not None else {}
        try:
            metadata = RequestMetadata.model_validate(dict(raw) if isinstance(raw, Mapping) else raw)
        except ValidationError as e:
            metadata = RequestMetadata()
            object.__setattr__(self, "metadata_errors", e.error_count())
        object.__setattr__(self, "metadata", metadata)

    @property
    def subject_id(self) -> str | None:
        return self.subject.id if self.subject else None

    @property
    def amount(self) -> float | None:
        return self.metadata.amount

    def missing_fields(self) -> list[str]:
        """Names of required fields that are absent or blank."""
        missing = []
        if self.subject is None or not self.subject.id:
            missing.append("subject")
        if not self.resource:
            missing.append("resource")
        if not self.action:
            missing.append("action")
        return missing
