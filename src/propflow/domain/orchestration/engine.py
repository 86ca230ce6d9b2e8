"""Orchestrator for the decision pipeline.

The engine composes the stages evaluate -> suppress -> plan -> record for one
property snapshot. ``evaluated_at`` is captured once per run and threaded through
every stage, so expiry comparisons cannot disagree between stages.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from propflow.domain.model import BucketGranularity

from .buckets import bucket_for
from .evaluate import RuleEvaluator
from .labels import RuleLabels
from .plan import default_action_catalog
from .rules import default_rules
from .suppress import resolve_suppressions
from .trace import record_trace

if TYPE_CHECKING:
    from .checks import RuleSetFactory
    from .plan import ActionCatalog, ActionPlanner
    from .suppress import Suppression
    from .trace import DecisionTrace

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True, kw_only=True)
class EvaluationRequest:
    """Inputs of one run, as supplied by the request-handling layer."""

    property_id: str
    signal: Mapping[str, Any]
    suppressions: Sequence[Suppression] = ()
    bucket: str | None = None
    evaluated_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.property_id.strip():
            raise ValueError("property_id must be non-empty")
        if self.bucket is not None and not self.bucket.strip():
            raise ValueError("bucket must be non-empty when given")
        if self.evaluated_at is not None and self.evaluated_at.tzinfo is None:
            raise ValueError("evaluated_at must include timezone information")


@dataclass(slots=True)
class OrchestrationEngine:
    """Run the full decision pipeline for one property snapshot."""

    planner: ActionPlanner
    rules: RuleSetFactory = default_rules
    catalog: ActionCatalog = field(default_factory=default_action_catalog)
    labels: RuleLabels = field(default_factory=RuleLabels)
    granularity: BucketGranularity = BucketGranularity.DAY
    max_workers: int = 1
    clock: Callable[[], datetime] = _utcnow

    def evaluate(self, request: EvaluationRequest) -> DecisionTrace:
        evaluated_at = (request.evaluated_at or self.clock()).astimezone(UTC)
        bucket = request.bucket or bucket_for(evaluated_at, self.granularity)
        log.info(
            "Evaluating property %s: bucket=%s, evaluated_at=%s",
            request.property_id,
            bucket,
            evaluated_at.isoformat(),
        )

        evaluator = RuleEvaluator(self.rules(evaluated_at), max_workers=self.max_workers)
        checks = evaluator(request.signal)
        suppressions = resolve_suppressions(
            checks,
            request.suppressions,
            evaluated_at=evaluated_at,
        )
        action_plan = self.planner(
            request.property_id,
            checks,
            suppressions,
            self.catalog,
            bucket=bucket,
        )
        trace = record_trace(
            property_id=request.property_id,
            evaluated_at=evaluated_at,
            bucket=bucket,
            inputs=request.signal,
            checks=checks,
            suppressions=suppressions,
            action_plan=action_plan,
            labels=self.labels,
        )

        log.info(
            "Finished evaluation for property %s: status=%s, %s",
            request.property_id,
            trace.outcome.status,
            trace.outcome.message,
        )
        return trace
