"""Decision trace assembly.

A trace is an immutable snapshot of one evaluation run. The recorder only
aggregates stage outputs; it never re-runs a stage.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from propflow.domain.model import OutcomeStatus

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from .checks import CheckResult
    from .labels import RuleLabels
    from .plan import ActionPlanEntry
    from .suppress import Suppression


@dataclass(frozen=True, slots=True)
class Outcome:
    status: OutcomeStatus
    message: str


@dataclass(frozen=True, slots=True, kw_only=True)
class DecisionTrace:
    """Auditable record of one orchestration run."""

    property_id: str
    evaluated_at: datetime
    bucket: str
    inputs: Mapping[str, Any]
    checks: tuple[CheckResult, ...]
    suppressions: tuple[Suppression, ...]
    action_plan: tuple[ActionPlanEntry, ...]
    outcome: Outcome

    @property
    def planned(self) -> tuple[ActionPlanEntry, ...]:
        return tuple(entry for entry in self.action_plan if entry.will_create)


def freeze(value: Any) -> Any:
    """Return a read-only deep copy of a JSON-like value."""

    if isinstance(value, Mapping):
        return MappingProxyType({str(key): freeze(item) for key, item in value.items()})
    if isinstance(value, list | tuple):
        return tuple(freeze(item) for item in value)
    return copy.deepcopy(value)


def _plural(count: int, singular: str, plural: str | None = None) -> str:
    return f"{count} {singular if count == 1 else (plural or singular + 's')}"


def summarize(
    checks: Sequence[CheckResult],
    action_plan: Sequence[ActionPlanEntry],
) -> Outcome:
    if not checks:
        return Outcome(OutcomeStatus.NO_OP, "no checks evaluated")
    if not action_plan:
        return Outcome(OutcomeStatus.NO_OP, "no actionable checks")

    planned = sum(1 for entry in action_plan if entry.will_create)
    suppressed = sum(1 for entry in action_plan if entry.suppressed_by)
    duplicates = sum(1 for entry in action_plan if entry.duplicate)
    failures = sum(1 for entry in action_plan if entry.persistence_failed)

    parts = [_plural(planned, "action") + " planned"]
    if suppressed:
        parts.append(f"{suppressed} suppressed")
    if duplicates:
        parts.append(_plural(duplicates, "duplicate"))
    if failures:
        parts.append(_plural(failures, "persistence failure"))
    status = OutcomeStatus.ACTIONS_PLANNED if planned else OutcomeStatus.ALL_WITHHELD
    return Outcome(status, ", ".join(parts))


def record_trace(
    *,
    property_id: str,
    evaluated_at: datetime,
    bucket: str,
    inputs: Mapping[str, Any],
    checks: Sequence[CheckResult],
    suppressions: Sequence[Suppression],
    action_plan: Sequence[ActionPlanEntry],
    labels: RuleLabels,
) -> DecisionTrace:
    labelled = tuple(
        replace(
            check,
            label=check.label or labels.label_for(check.id),
            details=freeze(check.details),
        )
        for check in checks
    )
    return DecisionTrace(
        property_id=property_id,
        evaluated_at=evaluated_at,
        bucket=bucket,
        inputs=freeze(inputs),
        checks=labelled,
        suppressions=tuple(suppressions),
        action_plan=tuple(action_plan),
        outcome=summarize(labelled, action_plan),
    )


def thaw(value: Any) -> Any:
    """Inverse of :func:`freeze`: plain dicts and lists for serialisation."""

    if isinstance(value, Mapping):
        return {str(key): thaw(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [thaw(item) for item in value]
    return value
