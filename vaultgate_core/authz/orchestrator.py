"""
Authorization orchestrator.

The single entry point of the engine. Runs the stages over an immutable
request snapshot, merges their outputs and records the outcome in the audit
trail. evaluate() never raises: malformed input, policy denials and
collaborator failures all come back as AuthDecision values, and any
internal error produces a fail-closed denial.

Collaborator calls are the only suspension points. Each one is bounded by
the policy's dependency timeout; audit appends are shielded so that a
cancelled caller does not abort an in-flight write.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, TypeVar
from zoneinfo import ZoneInfo

from loguru import logger
from opentelemetry import metrics, trace

from vaultgate_core.authz.contextual import ContextualCheck
from vaultgate_core.authz.merger import DecisionMerger, StageOutcomes
from vaultgate_core.authz.permissions import PermissionMatrix, RoleCheck
from vaultgate_core.authz.policy import AuthorizationPolicy
from vaultgate_core.authz.protocols import AuditSink, SubjectStore
from vaultgate_core.authz.risk import RiskScorer
from vaultgate_core.authz.rules import DynamicRuleEngine
from vaultgate_core.authz.session import SessionPolicyDeriver
from vaultgate_core.domain.audit import AuditEventKind, AuditRecord
from vaultgate_core.domain.auth import AuthRequestContext, RequestMetadata, RiskLevel, enum_value
from vaultgate_core.domain.decisions import AuthDecision
from vaultgate_core.domain.exceptions import SubjectLookupError
from vaultgate_core.runtime.errors import DependencyTimeoutError, ServiceError

T = TypeVar("T")

INTERNAL_ERROR_REASON = "Internal authorization error"

tracer = trace.get_tracer(__name__)
meter = metrics.get_meter(__name__)
decision_counter = meter.create_counter(
    "authz_decisions_total",
    description="Authorization decisions by outcome and audit event kind",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthorizationOrchestrator:
    """
    Runs the authorization pipeline.

    Usage:
        orchestrator = AuthorizationOrchestrator(policy, audit_sink, subject_store)
        decision = await orchestrator.evaluate(context)
        if not decision.allowed:
            ...
    """

    def __init__(
        self,
        policy: AuthorizationPolicy,
        audit_sink: AuditSink,
        subject_store: SubjectStore | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Args:
            policy: Static engine configuration.
            audit_sink: Append-only audit store, also queried for windowed counts.
            subject_store: Identity lookup used by evaluate_subject().
            clock: Returns the current time (timezone-aware).
        """
        self.policy = policy
        self.audit_sink = audit_sink
        self.subject_store = subject_store
        self._clock = clock
        self._tz = ZoneInfo(policy.timezone)

        self.role_check = RoleCheck(PermissionMatrix.from_policy(policy))
        self.contextual_check = ContextualCheck(policy)
        self.risk_scorer = RiskScorer(policy)
        self.session_deriver = SessionPolicyDeriver(policy)
        self.rule_engine = DynamicRuleEngine(policy)
        self.merger = DecisionMerger()

    async def evaluate(self, context: AuthRequestContext) -> AuthDecision:
        """Evaluate one authorization request. Never raises."""
        rid = context.request_id
        with tracer.start_as_current_span("authz.evaluate") as span:
            span.set_attribute("authz.resource", context.resource or "")
            span.set_attribute("authz.action", context.action or "")

            missing = context.missing_fields()
            if missing:
                return await self._reject_invalid(
                    context,
                    f"Invalid authorization request: missing {', '.join(missing)}",
                )
            if context.metadata_errors:
                return await self._reject_invalid(
                    context,
                    f"Invalid authorization request: malformed metadata ({context.metadata_errors} errors)",
                )

            subject = context.subject
            span.set_attribute("authz.subject_id", subject.id)
            logger.info(
                f"[{rid}] Orchestrating authorization for subject {subject.id} "
                f"on {context.resource}:{context.action}"
            )

            stage = "clock"
            try:
                now = self._clock().astimezone(self._tz)

                stage = "audit_counts"
                recent_activity, failed_logins = await self._fetch_counts(subject.id, now)

                stage = "role_check"
                role = self.role_check.evaluate(subject.role, context.resource, context.action)

                stage = "contextual_check"
                contextual = self.contextual_check.evaluate(context, now)

                stage = "risk_scoring"
                risk = self.risk_scorer.score(context, now, recent_activity)

                stage = "session_constraints"
                session = self.session_deriver.derive(context)

                stage = "dynamic_rules"
                dynamic = self.rule_engine.evaluate(context, now.date(), failed_logins)

                stage = "merge"
                decision, kind = self.merger.merge(
                    StageOutcomes(
                        role=role,
                        context=contextual,
                        risk=risk,
                        session=session,
                        dynamic=dynamic,
                    )
                )
            except Exception as e:
                span.record_exception(e)
                return await self._fail_closed(context, subject.id, stage, e)

            span.set_attribute("authz.allowed", decision.allowed)
            span.set_attribute("authz.risk_score", decision.risk_assessment.score)
            self._log_decision(context, decision, kind)
            await self._emit(
                lambda: AuditRecord(
                    subject_id=subject.id,
                    kind=kind,
                    detail=decision.reason,
                    resource_id=context.resource,
                    timestamp=now,
                    metadata=self._audit_metadata(context, kind, decision=decision),
                )
            )
            return decision

    async def evaluate_subject(
        self,
        subject_id: str | None,
        resource: str | None,
        action: str | None,
        declared_risk_level: RiskLevel = RiskLevel.LOW,
        metadata: RequestMetadata | dict[str, Any] | None = None,
        request_id: str | None = None,
    ) -> AuthDecision:
        """Load the subject snapshot from the subject store, then evaluate. Never raises."""
        extra = {"request_id": request_id} if request_id else {}
        context = AuthRequestContext(
            subject=None,
            resource=resource,
            action=action,
            declared_risk_level=declared_risk_level,
            metadata=metadata,
            **extra,
        )
        if context.metadata_errors:
            return await self._reject_invalid(
                context,
                f"Invalid authorization request: malformed metadata ({context.metadata_errors} errors)",
                subject_id=subject_id,
            )
        if not subject_id:
            return await self.evaluate(context)

        try:
            if self.subject_store is None:
                raise SubjectLookupError("No subject store configured")
            subject = await self._bounded(self.subject_store.get_subject(subject_id), "subject store")
        except Exception as e:
            return await self._fail_closed(context, subject_id, "subject_lookup", e)

        if subject is None:
            return await self._reject_invalid(
                context,
                f"Invalid authorization request: unknown subject {subject_id}",
                subject_id=subject_id,
            )

        return await self.evaluate(
            AuthRequestContext(
                subject=subject,
                resource=resource,
                action=action,
                declared_risk_level=declared_risk_level,
                metadata=context.metadata,
                request_id=context.request_id,
            )
        )

    async def _fetch_counts(self, subject_id: str, now: datetime) -> tuple[int, int]:
        """Fetch the frequency-window and failed-login counts concurrently."""
        activity_since = now - timedelta(seconds=self.policy.risk.high_frequency_window_seconds)
        failed_since = now - timedelta(seconds=self.policy.rules.failed_login_window_seconds)
        recent_activity, failed_logins = await asyncio.gather(
            self._bounded(
                self.audit_sink.count_since(subject_id, None, activity_since),
                "audit sink",
            ),
            self._bounded(
                self.audit_sink.count_since(
                    subject_id, [AuditEventKind.LOGIN_FAILED], failed_since
                ),
                "audit sink",
            ),
        )
        return recent_activity, failed_logins

    async def _bounded(self, awaitable: Awaitable[T], dependency: str) -> T:
        timeout = self.policy.dependency_timeout_seconds
        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)
        except asyncio.TimeoutError:
            raise DependencyTimeoutError(dependency, timeout) from None

    async def _fail_closed(
        self,
        context: AuthRequestContext,
        subject_id: str | None,
        stage: str,
        error: Exception,
    ) -> AuthDecision:
        rid = context.request_id
        error_fields: dict[str, Any] = {"error_type": type(error).__name__}
        if isinstance(error, ServiceError):
            error_fields.update(
                error_code=error.code,
                retryable=error.retryable,
                debug_id=error.debug_id,
            )
            if error.message_debug:
                logger.debug(f"[{rid}] {error.debug_id}: {error.message_debug}")
        logger.error(
            f"[{rid}] Authorization orchestration failed for subject {subject_id} "
            f"at stage {stage}: {error}"
        )
        decision = AuthDecision.fail_closed(INTERNAL_ERROR_REASON, "system_error")
        decision_counter.add(
            1, {"allowed": False, "kind": AuditEventKind.ORCHESTRATION_ERROR.value}
        )
        await self._emit(
            lambda: AuditRecord(
                subject_id=subject_id,
                kind=AuditEventKind.ORCHESTRATION_ERROR,
                detail=str(error),
                resource_id=context.resource,
                metadata=self._audit_metadata(
                    context,
                    AuditEventKind.ORCHESTRATION_ERROR,
                    stage=stage,
                    **error_fields,
                ),
            )
        )
        return decision

    async def _reject_invalid(
        self,
        context: AuthRequestContext,
        reason: str,
        subject_id: str | None = None,
    ) -> AuthDecision:
        subject_id = subject_id or context.subject_id
        logger.warning(f"[{context.request_id}] {reason}")
        decision = AuthDecision.fail_closed(reason, "invalid_request")
        decision_counter.add(1, {"allowed": False, "kind": AuditEventKind.ACCESS_DENIED.value})
        await self._emit(
            lambda: AuditRecord(
                subject_id=subject_id,
                kind=AuditEventKind.ACCESS_DENIED,
                detail=reason,
                resource_id=context.resource,
                metadata=self._audit_metadata(
                    context,
                    AuditEventKind.ACCESS_DENIED,
                    decision=decision,
                    stage="validation",
                ),
            )
        )
        return decision

    async def _emit(self, build: Callable[[], AuditRecord]) -> None:
        await asyncio.shield(self._append(build))

    async def _append(self, build: Callable[[], AuditRecord]) -> None:
        """Build and append a record; failures are logged and never affect the verdict."""
        try:
            record = build()
        except Exception as e:
            logger.error(f"Failed to build audit record: {e}")
            return
        try:
            await self._bounded(self.audit_sink.append(record), "audit sink")
        except Exception as e:
            logger.error(
                f"Failed to write audit record {record.kind.value} "
                f"for subject {record.subject_id}: {e}"
            )

    def _log_decision(self, context: AuthRequestContext, decision: AuthDecision, kind: AuditEventKind) -> None:
        rid = context.request_id
        decision_counter.add(1, {"allowed": decision.allowed, "kind": kind.value})
        if decision.allowed:
            logger.info(
                f"[{rid}] Access granted for subject {context.subject_id} "
                f"with risk score {decision.risk_assessment.score} "
                f"({decision.risk_assessment.recommendation.value})"
            )
        else:
            logger.warning(
                f"[{rid}] Access denied for subject {context.subject_id} "
                f"({kind.value}): {decision.reason}"
            )

    @staticmethod
    def _audit_metadata(
        context: AuthRequestContext,
        kind: AuditEventKind,
        decision: AuthDecision | None = None,
        **extra: Any,
    ) -> dict[str, Any]:
        try:
            signals = context.metadata.snapshot()
        except Exception as e:
            logger.warning(f"[{context.request_id}] Request metadata not serializable: {e}")
            signals = {"metadata_error": type(e).__name__}
        metadata: dict[str, Any] = {
            **signals,
            "orchestration_step": kind.value,
            "request_id": context.request_id,
            "action": context.action,
            "declared_risk_level": enum_value(context.declared_risk_level),
        }
        if decision is not None:
            metadata["decision"] = decision.model_dump(mode="json")
        metadata.update(extra)
        return metadata
