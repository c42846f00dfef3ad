"""
Role-based access check.

The permission matrix is plain nested data: role -> resource -> actions.
Lookup falls back from the exact resource to the role's wildcard resource,
and within the matched entry from the exact action to the wildcard action.
"""

from __future__ import annotations

from typing import Mapping

from vaultgate_core.authz.policy import WILDCARD, AuthorizationPolicy
from vaultgate_core.domain.auth import enum_value
from vaultgate_core.domain.decisions import CheckResult


class PermissionMatrix:
    """Read-only view over a role -> resource -> actions mapping."""

    def __init__(self, grants: Mapping[str, Mapping[str, frozenset[str]]], admin_role: str):
        self._grants = grants
        self.admin_role = admin_role

    @classmethod
    def from_policy(cls, policy: AuthorizationPolicy) -> "PermissionMatrix":
        return cls(policy.permissions, policy.admin_role)

    def actions_for(self, role: str, resource: str) -> frozenset[str] | None:
        """Return the action set matching (role, resource), or None if ungranted."""
        role_grants = self._grants.get(role)
        if not role_grants:
            return None
        if resource in role_grants:
            return role_grants[resource]
        return role_grants.get(WILDCARD)

    def allows(self, role: str, resource: str, action: str) -> bool:
        if role == self.admin_role:
            return True
        actions = self.actions_for(role, resource)
        if actions is None:
            return False
        return action in actions or WILDCARD in actions


class RoleCheck:
    """Evaluates the permission matrix for a request. No side effects."""

    def __init__(self, matrix: PermissionMatrix):
        self.matrix = matrix

    def evaluate(self, role: str, resource: str, action: str) -> CheckResult:
        role = enum_value(role)
        if self.matrix.allows(role, resource, action):
            return CheckResult(
                allowed=True,
                reason=f"Role {role} has {action} access to {resource}",
            )
        return CheckResult(
            allowed=False,
            reason=f"Role {role} lacks {action} access to {resource}",
        )
