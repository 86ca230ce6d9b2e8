"""Suppression resolution stage.

Suppressions are fetched by the caller (bookings, user dismissals, snoozes) before
the run. This stage only filters them to the ones that apply to the current
evaluation and orders them for display; deciding what to do with several
suppressions on one rule is the planner's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from propflow.domain.model import RuleId, Source, SuppressionReason

from .rules import ACTIVE_TASK_STATUSES
from .signals import ChecklistSignal, RiskSignal, SectionError, read_bookings, read_section

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime

    from .checks import CheckResult, Signal

ACTIVE_BOOKING_STATUSES: Final = frozenset({"PENDING", "CONFIRMED", "IN_PROGRESS", "DISPUTED"})

# USER entries sort ahead of every SYSTEM entry, property-wide ones included
_SOURCE_RANK: Final = {Source.USER: 0, Source.SYSTEM: 1}


@dataclass(frozen=True, slots=True, kw_only=True)
class Suppression:
    """An active reason to withhold an action whose check passed.

    ``rule_id=None`` applies to every rule of the property. ``until=None`` means the
    suppression holds until it is cleared explicitly.
    """

    source: Source
    reason: str
    rule_id: str | None = None
    until: datetime | None = None
    message: str | None = None
    related_id: str | None = None

    def __post_init__(self) -> None:
        if not self.reason.strip():
            raise ValueError("Suppression reason must be non-empty")
        if self.until is not None and self.until.tzinfo is None:
            raise ValueError("Suppression expiry must include timezone information")

    def is_active(self, evaluated_at: datetime) -> bool:
        return self.until is None or self.until > evaluated_at

    def applies_to(self, rule_id: str) -> bool:
        return self.rule_id is None or self.rule_id == rule_id


def resolve_suppressions(
    checks: Sequence[CheckResult],
    suppressions: Iterable[Suppression],
    *,
    evaluated_at: datetime,
) -> tuple[Suppression, ...]:
    """Return the unexpired suppressions that override a passed check.

    Output order: USER before SYSTEM, then property-wide entries, then by the
    position of the check they target, otherwise input order. Any subset that
    applies to one rule therefore lists its USER entries first.
    """

    position_by_rule = {check.id: index for index, check in enumerate(checks) if check.passed}
    if not position_by_rule:
        return ()

    ranked: list[tuple[int, int, int, Suppression]] = []
    for order, suppression in enumerate(suppressions):
        if not suppression.is_active(evaluated_at):
            continue
        if suppression.rule_id is None:
            target = -1
        elif suppression.rule_id in position_by_rule:
            target = position_by_rule[suppression.rule_id]
        else:
            continue
        ranked.append((_SOURCE_RANK[suppression.source], target, order, suppression))

    ranked.sort(key=lambda entry: entry[:3])
    return tuple(entry[3] for entry in ranked)


def snooze(
    rule_id: str,
    *,
    until: datetime,
    reason: str | None = None,
) -> Suppression:
    """User snooze: withhold actions for ``rule_id`` until ``until``."""

    return Suppression(
        source=Source.USER,
        reason=SuppressionReason.USER_SNOOZED,
        rule_id=rule_id,
        until=until,
        message=reason or "Snoozed by user",
    )


def user_marked_complete(rule_id: str, *, related_id: str | None = None) -> Suppression:
    return Suppression(
        source=Source.USER,
        reason=SuppressionReason.USER_MARKED_COMPLETE,
        rule_id=rule_id,
        message="User marked this action as complete",
        related_id=related_id,
    )


def system_suppressions_from_signal(signal: Signal) -> tuple[Suppression, ...]:
    """Derive SYSTEM suppressions from facts already present in ``signal``.

    - an active booking in the same service category as the risk or checklist item
      suppresses that rule (``BOOKING_EXISTS``)
    - an active checklist item in the risk's service category already tracks the
      risk (``CHECKLIST_TRACKED``)
    """

    risk = _optional_section(signal, "risk", RiskSignal)
    checklist = _optional_section(signal, "checklist", ChecklistSignal)

    booking_by_category: dict[str, str | None] = {}
    for booking in read_bookings(signal):
        if booking.category and booking.status in ACTIVE_BOOKING_STATUSES:
            booking_by_category.setdefault(booking.category, booking.id)

    suppressions: list[Suppression] = []
    targets: list[tuple[str, str | None]] = []
    if risk is not None:
        targets.append((RuleId.RISK_ACTIONABLE, risk.service_category))
    if checklist is not None:
        targets.append((RuleId.CHECKLIST_ACTIONABLE, checklist.service_category))

    for rule_id, category in targets:
        if category is not None and category in booking_by_category:
            suppressions.append(
                Suppression(
                    source=Source.SYSTEM,
                    reason=SuppressionReason.BOOKING_EXISTS,
                    rule_id=rule_id,
                    message="Related work is already scheduled",
                    related_id=booking_by_category[category],
                )
            )

    if (
        risk is not None
        and checklist is not None
        and risk.service_category is not None
        and risk.service_category == checklist.service_category
        and checklist.status in ACTIVE_TASK_STATUSES
    ):
        title = f' "{checklist.title}"' if checklist.title else ""
        suppressions.append(
            Suppression(
                source=Source.SYSTEM,
                reason=SuppressionReason.CHECKLIST_TRACKED,
                rule_id=RuleId.RISK_ACTIONABLE,
                message=f"Already covered by checklist item{title}",
                related_id=checklist.id,
            )
        )

    return tuple(suppressions)


def _optional_section[TSection: RiskSignal | ChecklistSignal](
    signal: Signal,
    key: str,
    model: type[TSection],
) -> TSection | None:
    try:
        return read_section(signal, key, model)
    except SectionError:
        return None
