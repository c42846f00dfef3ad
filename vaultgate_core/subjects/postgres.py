"""
PostgreSQL subject store.

Reads the identity snapshot the engine needs from the users table owned by
the identity service. Read-only: this module never writes.
"""

from __future__ import annotations

import asyncio
from typing import Any

from vaultgate_core.domain.auth import Subject
from vaultgate_core.domain.exceptions import SubjectLookupError
from vaultgate_core.infrastructure.postgres import get_db_connection


class PostgresSubjectStore:
    def __init__(self, dsn: str | None = None):
        self.dsn = dsn

    async def get_subject(self, subject_id: str) -> Subject | None:
        """Return the subject snapshot, or None if no active user has this id."""
        return await asyncio.to_thread(self._get_subject_sync, subject_id)

    def _get_subject_sync(self, subject_id: str) -> Subject | None:
        try:
            with get_db_connection(self.dsn) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    SELECT id, role, kyc_status, two_factor_enabled, metadata
                    FROM users
                    WHERE id = %s AND is_active = TRUE
                    """,
                    (subject_id,),
                )
                row = cursor.fetchone()
        except Exception as e:
            raise SubjectLookupError(f"Failed to load subject {subject_id}: {e}", cause=e) from e

        if not row:
            return None
        return self._row_to_subject(row)

    @staticmethod
    def _row_to_subject(row: tuple[Any, ...]) -> Subject:
        user_id, role, kyc_status, two_factor_enabled, metadata = row
        trusted = (metadata or {}).get("trusted_devices") or (metadata or {}).get("trustedDevices") or []
        return Subject(
            id=str(user_id),
            role=role,
            kyc_status=kyc_status,
            two_factor_enabled=bool(two_factor_enabled),
            trusted_devices=frozenset(trusted),
        )
