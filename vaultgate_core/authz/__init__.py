"""
Authorization orchestration engine.

Runs every authorization request through role, contextual, risk, session
and dynamic-rule stages and merges them into one AuthDecision.
"""

from vaultgate_core.authz.enforcement import enforce_session_requirements
from vaultgate_core.authz.orchestrator import AuthorizationOrchestrator
from vaultgate_core.authz.policy import AuthorizationPolicy
from vaultgate_core.authz.protocols import AuditSink, SubjectStore

__all__ = [
    "AuthorizationOrchestrator",
    "AuthorizationPolicy",
    "AuditSink",
    "SubjectStore",
    "enforce_session_requirements",
]
