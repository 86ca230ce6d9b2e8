"""Translate between domain orchestration objects and their wire payloads."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError

from propflow.domain.orchestration import Suppression
from propflow.domain.orchestration.trace import thaw

from .schema import (
    ActionExecutionPayload,
    ActionPlanPayload,
    CheckPayload,
    DecisionTracePayload,
    ExecutionReportPayload,
    OrchestrationEventPayload,
    OutcomePayload,
    SuppressionPayload,
)

if TYPE_CHECKING:
    from propflow.domain.model import OrchestrationEvent
    from propflow.domain.orchestration import (
        ActionExecution,
        ActionPlanEntry,
        CheckResult,
        DecisionTrace,
        ExecutionReport,
    )

_SUPPRESSION_LIST = TypeAdapter(list[SuppressionPayload])


def translate_trace(trace: DecisionTrace) -> DecisionTracePayload:
    return DecisionTracePayload(
        property_id=trace.property_id,
        evaluated_at=trace.evaluated_at,
        bucket=trace.bucket,
        inputs=thaw(trace.inputs),
        checks=[_translate_check(check) for check in trace.checks],
        suppressions=[translate_suppression(item) for item in trace.suppressions],
        action_plan=[_translate_plan_entry(entry) for entry in trace.action_plan],
        outcome=OutcomePayload(status=trace.outcome.status, message=trace.outcome.message),
    )


def trace_to_json(trace: DecisionTrace) -> dict[str, Any]:
    """Return the JSON-compatible dashboard shape of ``trace``."""

    return translate_trace(trace).model_dump(mode="json", by_alias=True)


def _translate_check(check: CheckResult) -> CheckPayload:
    return CheckPayload(
        id=check.id,
        label=check.label or check.id,
        passed=check.passed,
        details=thaw(check.details),
    )


def translate_suppression(suppression: Suppression) -> SuppressionPayload:
    return SuppressionPayload(
        source=suppression.source,
        reason=suppression.reason,
        rule_id=suppression.rule_id,
        until=suppression.until,
        message=suppression.message,
        related_id=suppression.related_id,
    )


def _translate_plan_entry(entry: ActionPlanEntry) -> ActionPlanPayload:
    return ActionPlanPayload(
        action_type=entry.action_type,
        action_key=entry.action_key,
        will_create=entry.will_create,
        reason=entry.reason,
        rule_id=entry.rule_id,
        incident_type=entry.incident_type,
        payload=thaw(entry.payload) if entry.payload is not None else None,
        suppressed=bool(entry.suppressed_by),
        duplicate=entry.duplicate,
        persistence_failed=entry.persistence_failed,
    )


def translate_event(event: OrchestrationEvent) -> OrchestrationEventPayload:
    return OrchestrationEventPayload(
        id=event.id,
        property_id=event.property_id,
        action_key=event.action_key,
        action_type=event.action_type,
        source=event.source,
        created_by=event.created_by,
        payload=event.payload,
        created_at=event.created_at,
    )


def events_to_json(events: Iterable[OrchestrationEvent]) -> list[dict[str, Any]]:
    return [translate_event(event).model_dump(mode="json", by_alias=True) for event in events]


def _translate_execution(execution: ActionExecution) -> ActionExecutionPayload:
    return ActionExecutionPayload(
        action_key=execution.action_key,
        action_type=execution.action_type,
        status=execution.status,
        event_id=execution.event.id if execution.event is not None else None,
        error=execution.error,
    )


def report_to_json(report: ExecutionReport) -> dict[str, Any]:
    payload = ExecutionReportPayload(
        property_id=report.property_id,
        executions=[_translate_execution(item) for item in report.executions],
    )
    return payload.model_dump(mode="json", by_alias=True)


def parse_suppressions(raw: object) -> tuple[Suppression, ...]:
    """Build domain suppressions from a decoded JSON array.

    Raises ``ValueError`` when the payload does not match the wire shape or an
    entry is not a valid suppression (e.g. a naive ``until`` timestamp).
    """

    try:
        payloads = _SUPPRESSION_LIST.validate_python(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid suppressions payload: {exc}") from exc
    return tuple(_to_domain_suppression(payload) for payload in payloads)


def _to_domain_suppression(payload: SuppressionPayload) -> Suppression:
    return Suppression(
        source=payload.source,
        reason=payload.reason,
        rule_id=payload.rule_id,
        until=payload.until,
        message=payload.message,
        related_id=payload.related_id,
    )


def parse_signal(raw: object) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise ValueError("Signal payload must be a JSON object")
    return {str(key): value for key, value in raw.items()}
