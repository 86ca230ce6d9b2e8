"""Built-in orchestration rules.

Every rule reads one signal section and reports a :class:`CheckResult`. A missing
or malformed section yields ``passed=False`` with the validation details; rules
never raise for data problems. Where a rule knows which incident it is about it
records ``details["incidentType"]`` so the planner can fold it into action keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC
from typing import TYPE_CHECKING, Any, Final

from propflow.domain.model import RuleId, Severity

from .checks import CheckResult
from .scoring import compute_confidence, compute_severity
from .signals import (
    ChecklistSignal,
    CoverageSignal,
    IncidentSignal,
    RiskSignal,
    SectionError,
    read_section,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date, datetime

    from .checks import Rule, Signal

HIGH_RISK_LEVELS: Final = frozenset({"HIGH", "CRITICAL"})
RISK_ACTION_STATUSES: Final = frozenset(
    {"NEEDS_ATTENTION", "ACTION_REQUIRED", "MISSING_DATA", "NEEDS_REVIEW"}
)
ACTIVE_TASK_STATUSES: Final = frozenset(
    {"PENDING", "SCHEDULED", "IN_PROGRESS", "NEEDS_REVIEW", "OVERDUE"}
)
AUTO_ACTIVATE_MIN_CONFIDENCE: Final = 45


def _failed(rule_id: str, error: SectionError) -> CheckResult:
    return CheckResult(id=rule_id, passed=False, details=error.details)


def _utc_date(instant: datetime) -> date:
    return instant.astimezone(UTC).date()


@dataclass(frozen=True, slots=True)
class RiskActionableRule:
    """A risk-report entry that is high risk, flagged for action, or has a recommendation."""

    rule_id: str = RuleId.RISK_ACTIONABLE

    def evaluate(self, signal: Signal) -> CheckResult:
        try:
            risk = read_section(signal, "risk", RiskSignal)
        except SectionError as error:
            return _failed(self.rule_id, error)

        level = risk.effective_level
        matched: list[str] = []
        if level in HIGH_RISK_LEVELS:
            matched.append("HIGH_RISK_LEVEL")
        if risk.status in RISK_ACTION_STATUSES:
            matched.append("ACTION_STATUS")
        if risk.recommended_action:
            matched.append("RECOMMENDED_ACTION")

        category = risk.category or "SAFETY"
        system_type = risk.system_type or risk.asset_name or "UNKNOWN"
        return CheckResult(
            id=self.rule_id,
            passed=bool(matched),
            details={
                "riskLevel": level,
                "status": risk.status,
                "matched": matched,
                "serviceCategory": risk.service_category,
                "exposure": risk.exposure,
                "incidentType": f"RISK:{category}:{system_type}",
            },
        )


@dataclass(frozen=True, slots=True)
class ChecklistActionableRule:
    """An active checklist item that is overdue or recurring without a schedule."""

    evaluated_at: datetime
    rule_id: str = RuleId.CHECKLIST_ACTIONABLE

    def evaluate(self, signal: Signal) -> CheckResult:
        try:
            item = read_section(signal, "checklist", ChecklistSignal)
        except SectionError as error:
            return _failed(self.rule_id, error)

        details: dict[str, Any] = {
            "status": item.status,
            "nextDueDate": item.next_due_date.isoformat() if item.next_due_date else None,
            "isRecurring": item.is_recurring,
            "serviceCategory": item.service_category,
            "incidentType": f"CHECKLIST:{item.id}" if item.id else "CHECKLIST",
        }
        if item.status not in ACTIVE_TASK_STATUSES:
            details["reason"] = "INACTIVE_STATUS"
            return CheckResult(id=self.rule_id, passed=False, details=details)

        overdue = item.next_due_date is not None and item.next_due_date < _utc_date(
            self.evaluated_at
        )
        unscheduled_recurring = item.is_recurring and item.next_due_date is None
        details["overdue"] = overdue
        details["unscheduledRecurring"] = unscheduled_recurring
        return CheckResult(
            id=self.rule_id,
            passed=overdue or unscheduled_recurring,
            details=details,
        )


@dataclass(frozen=True, slots=True)
class CoverageAwareCtaRule:
    """Action is required unless active warranty or insurance coverage exists."""

    evaluated_at: datetime
    rule_id: str = RuleId.COVERAGE_AWARE_CTA

    def evaluate(self, signal: Signal) -> CheckResult:
        try:
            coverage = read_section(signal, "coverage", CoverageSignal)
        except SectionError as error:
            return _failed(self.rule_id, error)

        details: dict[str, Any] = {
            "type": coverage.type,
            "expiresOn": coverage.expires_on.isoformat() if coverage.expires_on else None,
            "incidentType": "COVERAGE_LAPSE",
        }
        if not coverage.has_coverage or coverage.type == "NONE":
            details["reason"] = "ACTION_REQUIRED"
            return CheckResult(id=self.rule_id, passed=True, details=details)
        if coverage.expires_on is not None and coverage.expires_on < _utc_date(self.evaluated_at):
            details["reason"] = "COVERAGE_EXPIRED"
            return CheckResult(id=self.rule_id, passed=True, details=details)
        details["reason"] = "COVERED"
        return CheckResult(id=self.rule_id, passed=False, details=details)


@dataclass(frozen=True, slots=True)
class IncidentSeverityRule:
    """An incident scored WARNING or CRITICAL with enough confidence to act on."""

    min_confidence: int = AUTO_ACTIVATE_MIN_CONFIDENCE
    rule_id: str = RuleId.INCIDENT_SEVERITY

    def evaluate(self, signal: Signal) -> CheckResult:
        try:
            incident = read_section(signal, "incident", IncidentSignal)
        except SectionError as error:
            return _failed(self.rule_id, error)

        severity, breakdown = compute_severity(incident)
        confidence = compute_confidence(incident)
        passed = (
            severity in {Severity.WARNING, Severity.CRITICAL}
            and confidence >= self.min_confidence
        )
        return CheckResult(
            id=self.rule_id,
            passed=passed,
            details={
                "severity": severity.value,
                "breakdown": breakdown.as_dict(),
                "confidence": confidence,
                "incidentType": incident.type_key,
            },
        )


def default_rules(evaluated_at: datetime) -> Sequence[Rule]:
    """Return the built-in rules in display order, bound to ``evaluated_at``."""

    return (
        RiskActionableRule(),
        ChecklistActionableRule(evaluated_at=evaluated_at),
        CoverageAwareCtaRule(evaluated_at=evaluated_at),
        IncidentSeverityRule(),
    )
