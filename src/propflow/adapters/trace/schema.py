"""Wire models for decision traces and suppression inputs.

Field names follow the camelCase JSON shape consumed by the property dashboard.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import Any
from uuid import UUID  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from propflow.domain.model import ExecutionStatus, OutcomeStatus, Source


class TraceBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class CheckPayload(TraceBaseModel):
    id: str
    label: str
    passed: bool
    details: dict[str, Any] = Field(default_factory=dict)


class SuppressionPayload(TraceBaseModel):
    source: Source
    reason: str
    rule_id: str | None = None
    until: datetime | None = None
    message: str | None = None
    related_id: str | None = None


class ActionPlanPayload(TraceBaseModel):
    action_type: str
    action_key: str
    will_create: bool
    reason: str
    rule_id: str
    incident_type: str
    payload: dict[str, Any] | None = None
    suppressed: bool = False
    duplicate: bool = False
    persistence_failed: bool = False


class OutcomePayload(TraceBaseModel):
    status: OutcomeStatus
    message: str


class DecisionTracePayload(TraceBaseModel):
    property_id: str
    evaluated_at: datetime
    bucket: str
    inputs: dict[str, Any]
    checks: list[CheckPayload]
    suppressions: list[SuppressionPayload]
    action_plan: list[ActionPlanPayload]
    outcome: OutcomePayload


class OrchestrationEventPayload(TraceBaseModel):
    id: UUID
    property_id: str
    action_key: str
    action_type: str
    source: Source
    created_by: str | None = None
    payload: dict[str, Any] | None = None
    created_at: datetime


class ActionExecutionPayload(TraceBaseModel):
    action_key: str
    action_type: str
    status: ExecutionStatus
    event_id: UUID | None = None
    error: str | None = None


class ExecutionReportPayload(TraceBaseModel):
    property_id: str
    executions: list[ActionExecutionPayload]
