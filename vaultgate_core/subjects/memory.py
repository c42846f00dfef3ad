"""
In-memory subject store for tests and local development.
"""

from __future__ import annotations

from typing import Iterable

from vaultgate_core.domain.auth import Subject


class InMemorySubjectStore:
    """Subject store backed by a dict keyed by subject id."""

    def __init__(self, subjects: Iterable[Subject] = ()):
        self._subjects: dict[str, Subject] = {subject.id: subject for subject in subjects}

    async def get_subject(self, subject_id: str) -> Subject | None:
        return self._subjects.get(subject_id)

    def add(self, subject: Subject) -> None:
        self._subjects[subject.id] = subject
