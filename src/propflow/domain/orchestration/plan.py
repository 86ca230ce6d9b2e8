"""Action planning stage.

The plan is the contract between evaluation and persistence: for each passed
rule it lists the candidate actions, their idempotency keys, and whether the run
would create them. Nothing is written here; see :mod:`.execute`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Final

from propflow.domain.errors import PersistenceError
from propflow.domain.model import ActionType, RuleId, Source

from .action_key import build_action_key
from .trace import freeze

if TYPE_CHECKING:
    from propflow.domain.ports.persistence import OrchestrationEventLookup

    from .checks import CheckResult
    from .suppress import Suppression

log = logging.getLogger(__name__)

DUPLICATE_REASON: Final = "duplicate of existing event"
CREATE_REASON: Final = "rule passed"


@dataclass(frozen=True, slots=True, kw_only=True)
class ActionDefinition:
    """Candidate action emitted when its triggering rule passes.

    ``incident_type`` feeds the action key. When omitted the planner uses the
    check's ``details["incidentType"]`` and falls back to the rule id.
    """

    action_type: str
    incident_type: str | None = None
    payload: Mapping[str, Any] | None = None
    cta_label: str | None = None


type ActionCatalog = Mapping[str, Sequence[ActionDefinition]]


@dataclass(frozen=True, slots=True, kw_only=True)
class ActionPlanEntry:
    action_type: str
    action_key: str
    will_create: bool
    reason: str
    rule_id: str
    incident_type: str
    payload: Mapping[str, Any] | None = None
    suppressed_by: tuple[Suppression, ...] = ()
    duplicate: bool = False
    persistence_failed: bool = False

    def __post_init__(self) -> None:
        if not self.will_create and not self.reason:
            raise ValueError("Withheld plan entries must carry a reason")


def _suppression_reason(suppression: Suppression) -> str:
    if suppression.message:
        return f"suppressed: {suppression.reason} ({suppression.message})"
    return f"suppressed: {suppression.reason}"


class ActionPlanner:
    """Decide per candidate action whether the run should create it."""

    def __init__(self, events: OrchestrationEventLookup) -> None:
        self._events = events

    def __call__(
        self,
        property_id: str,
        checks: Sequence[CheckResult],
        suppressions: Sequence[Suppression],
        catalog: ActionCatalog,
        *,
        bucket: str,
    ) -> tuple[ActionPlanEntry, ...]:
        entries: list[ActionPlanEntry] = []
        seen_keys: set[str] = set()

        for check in checks:
            if not check.passed:
                continue
            # USER entries take precedence as the reported reason
            applicable = tuple(
                sorted(
                    (s for s in suppressions if s.applies_to(check.id)),
                    key=lambda s: s.source is not Source.USER,
                )
            )
            for definition in catalog.get(check.id, ()):
                incident_type = _incident_type(definition, check)
                action_key = build_action_key(
                    property_id=property_id,
                    incident_type=incident_type,
                    action_type=definition.action_type,
                    bucket=bucket,
                )
                if action_key in seen_keys:
                    # first rule in evaluation order keeps authorship
                    continue
                seen_keys.add(action_key)
                entries.append(
                    self._decide(
                        property_id=property_id,
                        check=check,
                        definition=definition,
                        incident_type=incident_type,
                        action_key=action_key,
                        applicable=applicable,
                    )
                )

        return tuple(entries)

    def _decide(
        self,
        *,
        property_id: str,
        check: CheckResult,
        definition: ActionDefinition,
        incident_type: str,
        action_key: str,
        applicable: tuple[Suppression, ...],
    ) -> ActionPlanEntry:
        payload = freeze(definition.payload) if definition.payload else None
        common: dict[str, Any] = {
            "action_type": definition.action_type,
            "action_key": action_key,
            "rule_id": check.id,
            "incident_type": incident_type,
            "payload": payload,
        }

        if applicable:
            return ActionPlanEntry(
                **common,
                will_create=False,
                reason=_suppression_reason(applicable[0]),
                suppressed_by=applicable,
            )

        try:
            exists = self._events.exists(
                property_id=property_id,
                action_key=action_key,
                action_type=definition.action_type,
            )
        except PersistenceError as exc:
            log.warning(
                "Existence check failed for %s/%s on property %s: %s",
                check.id,
                definition.action_type,
                property_id,
                exc,
            )
            return ActionPlanEntry(
                **common,
                will_create=False,
                reason=f"persistence failure: {exc}",
                persistence_failed=True,
            )

        if exists:
            return ActionPlanEntry(
                **common,
                will_create=False,
                reason=DUPLICATE_REASON,
                duplicate=True,
            )
        return ActionPlanEntry(**common, will_create=True, reason=CREATE_REASON)


def _incident_type(definition: ActionDefinition, check: CheckResult) -> str:
    if definition.incident_type:
        return definition.incident_type
    detail = check.details.get("incidentType")
    if isinstance(detail, str) and detail.strip():
        return detail
    return check.id


def default_action_catalog() -> ActionCatalog:
    """Candidate actions for the built-in rules."""

    return MappingProxyType(
        {
            RuleId.RISK_ACTIONABLE: (
                ActionDefinition(action_type=ActionType.CREATE_TASK, cta_label="Add to checklist"),
                ActionDefinition(
                    action_type=ActionType.SCHEDULE_SERVICE, cta_label="Schedule Service"
                ),
            ),
            RuleId.CHECKLIST_ACTIONABLE: (
                ActionDefinition(action_type=ActionType.SCHEDULE_SERVICE, cta_label="Schedule"),
            ),
            RuleId.COVERAGE_AWARE_CTA: (
                ActionDefinition(
                    action_type=ActionType.REVIEW_COVERAGE,
                    cta_label="Review coverage options",
                ),
            ),
            RuleId.INCIDENT_SEVERITY: (
                ActionDefinition(action_type=ActionType.CREATE_TASK, cta_label="Create task"),
            ),
        }
    )
