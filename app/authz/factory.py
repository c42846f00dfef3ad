"""
Authorization module factory.

This module provides factory functions that build the engine and its
collaborators once per process, selected by configuration.
"""

from __future__ import annotations

from functools import lru_cache

from loguru import logger

from vaultgate_core.audit.memory import InMemoryAuditSink
from vaultgate_core.audit.postgres import PostgresAuditSink
from vaultgate_core.authz import AuditSink, AuthorizationOrchestrator, AuthorizationPolicy, SubjectStore
from vaultgate_core.config import settings
from vaultgate_core.subjects.memory import InMemorySubjectStore
from vaultgate_core.subjects.postgres import PostgresSubjectStore


@lru_cache()
def get_policy() -> AuthorizationPolicy:
    """Get the authorization policy, built once from settings."""
    return AuthorizationPolicy.from_settings(settings)


@lru_cache()
def get_audit_sink() -> AuditSink:
    """Get the audit sink for the configured backend."""
    if settings.AUDIT_BACKEND == "postgres":
        return PostgresAuditSink()
    logger.warning("Using in-memory audit sink; audit records are not persisted")
    return InMemoryAuditSink()


@lru_cache()
def get_subject_store() -> SubjectStore:
    """Get the subject store for the configured backend."""
    if settings.SUBJECT_BACKEND == "postgres":
        return PostgresSubjectStore()
    logger.warning("Using in-memory subject store; no subjects are registered")
    return InMemorySubjectStore()


@lru_cache()
def get_orchestrator() -> AuthorizationOrchestrator:
    """Get the authorization orchestrator wired to the configured collaborators."""
    return AuthorizationOrchestrator(
        policy=get_policy(),
        audit_sink=get_audit_sink(),
        subject_store=get_subject_store(),
    )
