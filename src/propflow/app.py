"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from logging import getLogger
from typing import TYPE_CHECKING

from propflow.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyOrchestrationUnitOfWork,
    is_started,
    startup,
)
from propflow.config import get_orchestration_config
from propflow.domain.model import Source
from propflow.domain.orchestration import (
    ActionPlanner,
    OrchestrationEngine,
    RuleLabels,
    execute_plan,
)

if TYPE_CHECKING:
    from propflow.config import OrchestrationConfig
    from propflow.domain.model import OrchestrationEvent
    from propflow.domain.orchestration import DecisionTrace, EvaluationRequest, ExecutionReport
    from propflow.domain.ports.unit_of_work import OrchestrationUnitOfWork

UnitOfWorkFactory = Callable[[], "OrchestrationUnitOfWork"]


log = getLogger(__name__)


def _ensure_started(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return SqlAlchemyOrchestrationUnitOfWork


def build_engine(planner: ActionPlanner, config: OrchestrationConfig) -> OrchestrationEngine:
    """Wire an engine from configuration values."""

    labels = (
        RuleLabels.from_file(config.rule_labels_path)
        if config.rule_labels_path is not None
        else RuleLabels()
    )
    return OrchestrationEngine(
        planner=planner,
        labels=labels,
        granularity=config.bucket_granularity,
        max_workers=config.evaluator_workers,
    )


def evaluate_property(
    request: EvaluationRequest,
    *,
    execute: bool = False,
    created_by: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: OrchestrationConfig | None = None,
) -> tuple[DecisionTrace, ExecutionReport | None]:
    """Evaluate one property snapshot and optionally persist the planned actions."""

    effective_uow = _ensure_started(unit_of_work_factory)
    effective_config = config or get_orchestration_config()

    with effective_uow() as uow:
        events = uow.repositories.events
        engine = build_engine(ActionPlanner(events), effective_config)
        trace = engine.evaluate(request)
        if not execute:
            return trace, None

        report = execute_plan(
            trace,
            events,
            source=Source.USER if created_by else Source.SYSTEM,
            created_by=created_by,
        )
        uow.commit()

    log.info(
        "Stored orchestration events for property %s: created=%s, failed=%s",
        request.property_id,
        report.created,
        report.failed,
    )
    return trace, report


def list_property_events(
    property_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Sequence[OrchestrationEvent]:
    effective_uow = _ensure_started(unit_of_work_factory)
    with effective_uow() as uow:
        return uow.repositories.events.list_for_property(property_id)
