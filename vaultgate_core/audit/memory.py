"""
In-memory audit sink for tests and local development.

Note: Does not persist across restarts.
"""

from __future__ import annotations

from datetime import datetime
from typing import Collection

from vaultgate_core.domain.audit import AuditEventKind, AuditRecord


class InMemoryAuditSink:
    """Audit sink backed by a list."""

    def __init__(self, records: list[AuditRecord] | None = None):
        self.records: list[AuditRecord] = list(records or [])

    async def append(self, record: AuditRecord) -> None:
        """Append a record."""
        self.records.append(record)

    async def count_since(
        self,
        subject_id: str,
        kinds: Collection[AuditEventKind] | None,
        since: datetime,
    ) -> int:
        """Count the subject's records newer than `since`."""
        return sum(
            1
            for record in self.records
            if record.subject_id == subject_id
            and record.timestamp > since
            and (kinds is None or record.kind in kinds)
        )

    def of_kind(self, kind: AuditEventKind) -> list[AuditRecord]:
        return [record for record in self.records if record.kind == kind]

    def clear(self) -> None:
        """Clear all records."""
        self.records.clear()
