"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Source(StrEnum):
    """Who originated a suppression or an orchestration event."""

    SYSTEM = "SYSTEM"
    USER = "USER"


class RuleId(StrEnum):
    RISK_ACTIONABLE = "RISK_ACTIONABLE"
    CHECKLIST_ACTIONABLE = "CHECKLIST_ACTIONABLE"
    COVERAGE_AWARE_CTA = "COVERAGE_AWARE_CTA"
    INCIDENT_SEVERITY = "INCIDENT_SEVERITY"


class ActionType(StrEnum):
    CREATE_TASK = "CREATE_TASK"
    SCHEDULE_SERVICE = "SCHEDULE_SERVICE"
    REVIEW_COVERAGE = "REVIEW_COVERAGE"


class SuppressionReason(StrEnum):
    BOOKING_EXISTS = "BOOKING_EXISTS"
    CHECKLIST_TRACKED = "CHECKLIST_TRACKED"
    USER_MARKED_COMPLETE = "USER_MARKED_COMPLETE"
    USER_SNOOZED = "USER_SNOOZED"


class Severity(StrEnum):
    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class OutcomeStatus(StrEnum):
    """Summary status of one evaluation run."""

    NO_OP = "NO_OP"
    ACTIONS_PLANNED = "ACTIONS_PLANNED"
    ALL_WITHHELD = "ALL_WITHHELD"


class ExecutionStatus(StrEnum):
    CREATED = "CREATED"
    EXISTING = "EXISTING"
    SKIPPED = "SKIPPED"
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"


class BucketGranularity(StrEnum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
