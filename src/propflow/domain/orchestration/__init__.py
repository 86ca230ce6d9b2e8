"""Orchestration decision engine.

Layered flow for one property snapshot:
1) evaluate an ordered rule list against the signal (``evaluate``)
2) keep the unexpired suppressions that override passed checks (``suppress``)
3) plan candidate actions keyed by deterministic action keys (``plan``)
4) assemble an immutable decision trace (``trace``)
5) optionally persist the planned actions idempotently (``execute``)
"""

from __future__ import annotations

from .action_key import build_action_key
from .buckets import bucket_for
from .checks import CheckResult, Rule, RuleSetFactory, Signal
from .engine import EvaluationRequest, OrchestrationEngine
from .evaluate import RuleEvaluator
from .execute import ActionExecution, ExecutionReport, execute_plan
from .labels import DEFAULT_RULE_LABELS, RuleLabels
from .plan import (
    DUPLICATE_REASON,
    ActionCatalog,
    ActionDefinition,
    ActionPlanEntry,
    ActionPlanner,
    default_action_catalog,
)
from .rules import (
    ChecklistActionableRule,
    CoverageAwareCtaRule,
    IncidentSeverityRule,
    RiskActionableRule,
    default_rules,
)
from .suppress import (
    Suppression,
    resolve_suppressions,
    snooze,
    system_suppressions_from_signal,
    user_marked_complete,
)
from .trace import DecisionTrace, Outcome, record_trace

__all__ = [
    "DEFAULT_RULE_LABELS",
    "DUPLICATE_REASON",
    "ActionCatalog",
    "ActionDefinition",
    "ActionExecution",
    "ActionPlanEntry",
    "ActionPlanner",
    "CheckResult",
    "ChecklistActionableRule",
    "CoverageAwareCtaRule",
    "DecisionTrace",
    "EvaluationRequest",
    "ExecutionReport",
    "IncidentSeverityRule",
    "OrchestrationEngine",
    "Outcome",
    "RiskActionableRule",
    "Rule",
    "RuleEvaluator",
    "RuleLabels",
    "RuleSetFactory",
    "Signal",
    "Suppression",
    "bucket_for",
    "build_action_key",
    "default_action_catalog",
    "default_rules",
    "execute_plan",
    "record_trace",
    "resolve_suppressions",
    "snooze",
    "system_suppressions_from_signal",
    "user_marked_complete",
]
