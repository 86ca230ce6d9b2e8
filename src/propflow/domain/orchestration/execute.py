"""Plan execution: persist the actions a trace decided to create.

Execution is separate from planning so a trace can be shown before anything is
written. Each entry is persisted on its own; a storage failure is reported on
that entry and never invalidates the trace or the remaining entries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from propflow.domain.errors import PersistenceError
from propflow.domain.model import ExecutionStatus, OrchestrationEvent, Source

from .trace import thaw

if TYPE_CHECKING:
    from propflow.domain.ports.persistence import OrchestrationEventRepository

    from .plan import ActionPlanEntry
    from .trace import DecisionTrace

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class ActionExecution:
    action_key: str
    action_type: str
    status: ExecutionStatus
    event: OrchestrationEvent | None = None
    error: str | None = None


@dataclass(frozen=True, slots=True)
class ExecutionReport:
    property_id: str
    executions: tuple[ActionExecution, ...]

    def count(self, status: ExecutionStatus) -> int:
        return sum(1 for execution in self.executions if execution.status is status)

    @property
    def created(self) -> int:
        return self.count(ExecutionStatus.CREATED)

    @property
    def failed(self) -> int:
        return self.count(ExecutionStatus.PERSISTENCE_FAILED)


def execute_plan(
    trace: DecisionTrace,
    events: OrchestrationEventRepository,
    *,
    source: Source = Source.SYSTEM,
    created_by: str | None = None,
) -> ExecutionReport:
    """Upsert one orchestration event per ``will_create`` entry of ``trace``."""

    executions = tuple(
        _execute_entry(trace.property_id, entry, events, source=source, created_by=created_by)
        for entry in trace.action_plan
    )
    report = ExecutionReport(property_id=trace.property_id, executions=executions)
    log.info(
        "Executed plan for property %s: created=%s, existing=%s, skipped=%s, failed=%s",
        trace.property_id,
        report.created,
        report.count(ExecutionStatus.EXISTING),
        report.count(ExecutionStatus.SKIPPED),
        report.failed,
    )
    return report


def _execute_entry(
    property_id: str,
    entry: ActionPlanEntry,
    events: OrchestrationEventRepository,
    *,
    source: Source,
    created_by: str | None,
) -> ActionExecution:
    if not entry.will_create:
        return ActionExecution(
            action_key=entry.action_key,
            action_type=entry.action_type,
            status=ExecutionStatus.SKIPPED,
        )

    try:
        event, created = events.create_if_absent(
            property_id=property_id,
            action_key=entry.action_key,
            action_type=entry.action_type,
            source=source,
            created_by=created_by,
            payload=thaw(entry.payload) if entry.payload is not None else None,
        )
    except PersistenceError as exc:
        log.warning(
            "Failed to persist %s for property %s: %s", entry.action_type, property_id, exc
        )
        return ActionExecution(
            action_key=entry.action_key,
            action_type=entry.action_type,
            status=ExecutionStatus.PERSISTENCE_FAILED,
            error=str(exc),
        )

    # created is False when another run won the race for the same triple
    return ActionExecution(
        action_key=entry.action_key,
        action_type=entry.action_type,
        status=ExecutionStatus.CREATED if created else ExecutionStatus.EXISTING,
        event=event,
    )
