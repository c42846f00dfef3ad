"""
Authorization engine collaborator protocols.

The engine depends only on these interfaces; concrete adapters live in
vaultgate_core.audit and vaultgate_core.subjects.
"""

from __future__ import annotations

from datetime import datetime
from typing import Collection, Protocol, runtime_checkable

from vaultgate_core.domain.audit import AuditEventKind, AuditRecord
from vaultgate_core.domain.auth import Subject


@runtime_checkable
class AuditSink(Protocol):
    """Append-only audit store with windowed counts."""

    async def append(self, record: AuditRecord) -> None:
        """Append a record. Raises on failure."""
        ...

    async def count_since(
        self,
        subject_id: str,
        kinds: Collection[AuditEventKind] | None,
        since: datetime,
    ) -> int:
        """Count the subject's records newer than `since`, optionally filtered by kind."""
        ...


@runtime_checkable
class SubjectStore(Protocol):
    """Read-only identity lookup."""

    async def get_subject(self, subject_id: str) -> Subject | None:
        """Return the subject snapshot, or None if the id is unknown."""
        ...
