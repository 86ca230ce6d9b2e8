"""Domain model for the orchestration engine."""

from __future__ import annotations

from .enums import (
    ActionType,
    BucketGranularity,
    ExecutionStatus,
    OutcomeStatus,
    RuleId,
    Severity,
    Source,
    SuppressionReason,
)
from .event import OrchestrationEvent

__all__ = [
    "ActionType",
    "BucketGranularity",
    "ExecutionStatus",
    "OrchestrationEvent",
    "OutcomeStatus",
    "RuleId",
    "Severity",
    "Source",
    "SuppressionReason",
]
