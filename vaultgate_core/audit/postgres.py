"""
PostgreSQL audit sink.

Stores authorization audit records with tamper-evident hash chaining: every
row carries the hash of the previous row, and its own hash covers its
canonical JSON plus that previous hash. The schema is managed by
scripts/init-db.sql.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
from datetime import datetime
from typing import Any, Collection

from loguru import logger
from psycopg.types.json import Jsonb

from vaultgate_core.domain.audit import AuditEventKind, AuditRecord
from vaultgate_core.domain.exceptions import AuditWriteError
from vaultgate_core.infrastructure.postgres import get_db_connection


def compute_record_hash(record_data: dict[str, Any], previous_hash: str | None) -> str:
    """
    Compute SHA-256 of the record data chained to the previous hash.

    Uses canonical JSON serialization (sorted keys) for deterministic hashing.
    """
    canonical = json.dumps(record_data, sort_keys=True, default=str)
    return hashlib.sha256(((previous_hash or "") + canonical).encode()).hexdigest()


class PostgresAuditSink:
    """
    Hash-chained audit sink on PostgreSQL.

    psycopg is used synchronously; calls run in a worker thread so the event
    loop is never blocked.
    """

    def __init__(self, dsn: str | None = None):
        """
        Args:
            dsn: PostgreSQL connection string. Defaults to settings.POSTGRES_DSN.
        """
        self.dsn = dsn

    async def append(self, record: AuditRecord) -> None:
        """Append a record. Raises AuditWriteError on failure."""
        await asyncio.to_thread(self._append_sync, record)

    async def count_since(
        self,
        subject_id: str,
        kinds: Collection[AuditEventKind] | None,
        since: datetime,
    ) -> int:
        """Count the subject's records newer than `since`."""
        return await asyncio.to_thread(self._count_since_sync, subject_id, kinds, since)

    def _record_data(self, record: AuditRecord) -> dict[str, Any]:
        return {
            "id": record.id,
            "subject_id": record.subject_id,
            "kind": record.kind.value,
            "detail": record.detail,
            "resource_type": record.resource_type,
            "resource_id": record.resource_id,
            "timestamp": record.timestamp.isoformat(),
            "metadata": record.metadata,
        }

    def _append_sync(self, record: AuditRecord) -> None:
        try:
            with get_db_connection(self.dsn) as conn:
                cursor = conn.cursor()

                # Lock the chain head so concurrent appends serialize
                cursor.execute(
                    """
                    SELECT record_hash
                    FROM audit_records
                    ORDER BY sequence_number DESC
                    LIMIT 1
                    FOR UPDATE
                    """
                )
                row = cursor.fetchone()
                previous_hash = row[0] if row else None
                record_hash = compute_record_hash(self._record_data(record), previous_hash)

                cursor.execute(
                    """
                    INSERT INTO audit_records
                    (id, subject_id, kind, detail, resource_type, resource_id,
                     timestamp, metadata, previous_hash, record_hash)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    (
                        record.id,
                        record.subject_id,
                        record.kind.value,
                        record.detail,
                        record.resource_type,
                        record.resource_id,
                        record.timestamp,
                        Jsonb(record.metadata),
                        previous_hash,
                        record_hash,
                    ),
                )
                conn.commit()
        except Exception as e:
            raise AuditWriteError(f"Failed to write audit record {record.id}: {e}", cause=e) from e

        logger.debug(f"Audit record: {record.kind.value} - {record.detail}")

    def _count_since_sync(
        self,
        subject_id: str,
        kinds: Collection[AuditEventKind] | None,
        since: datetime,
    ) -> int:
        query = """
            SELECT COUNT(*)
            FROM audit_records
            WHERE subject_id = %s AND timestamp > %s
        """
        params: list[Any] = [subject_id, since]

        if kinds:
            query += " AND kind = ANY(%s)"
            params.append([kind.value for kind in kinds])

        with get_db_connection(self.dsn) as conn:
            cursor = conn.cursor()
            cursor.execute(query, tuple(params))
            row = cursor.fetchone()
            return int(row[0]) if row else 0
