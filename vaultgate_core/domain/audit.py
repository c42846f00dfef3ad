"""
Audit trail domain models.

The authorization engine appends one AuditRecord per evaluation and reads
the trail back only through windowed counts.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class AuditEventKind(str, Enum):
    """Types of auditable events."""

    # Written by the authorization engine
    ROLE_CHECK_FAILED = "ROLE_CHECK_FAILED"
    CONTEXT_CHECK_FAILED = "CONTEXT_CHECK_FAILED"
    ACCESS_GRANTED = "ACCESS_GRANTED"
    ACCESS_DENIED = "ACCESS_DENIED"
    ORCHESTRATION_ERROR = "ORCHESTRATION_ERROR"

    # Written by the login flow, read by the suspicious-pattern rule
    LOGIN = "LOGIN"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"


class AuditRecord(BaseModel):
    """
    Append-only audit trail entry.

    resource_type is always "authorization" for records written by the
    engine; resource_id is the protected resource being evaluated.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))

    # Who
    subject_id: str | None = None

    # What happened
    kind: AuditEventKind
    detail: str

    # What was affected
    resource_type: str = "authorization"
    resource_id: str | None = None

    # When
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Structured snapshot (request metadata, decision, stage)
    metadata: dict[str, Any] = Field(default_factory=dict)
