"""JSON wire layer for decision traces, execution reports and suppressions."""

from __future__ import annotations

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
from .translator import (
    events_to_json,
    parse_signal,
    parse_suppressions,
    report_to_json,
    trace_to_json,
    translate_event,
    translate_suppression,
    translate_trace,
)

__all__ = [
    "ActionExecutionPayload",
    "ActionPlanPayload",
    "CheckPayload",
    "DecisionTracePayload",
    "ExecutionReportPayload",
    "OrchestrationEventPayload",
    "OutcomePayload",
    "SuppressionPayload",
    "events_to_json",
    "parse_signal",
    "parse_suppressions",
    "report_to_json",
    "trace_to_json",
    "translate_event",
    "translate_suppression",
    "translate_trace",
]
