from __future__ import annotations

from datetime import UTC, datetime

import pytest

from propflow.adapters.trace import (
    events_to_json,
    parse_signal,
    parse_suppressions,
    report_to_json,
    trace_to_json,
)
from propflow.domain.model import ExecutionStatus, RuleId, Source, SuppressionReason
from propflow.domain.orchestration import (
    ActionPlanner,
    DecisionTrace,
    EvaluationRequest,
    OrchestrationEngine,
    execute_plan,
    user_marked_complete,
)

from tests.helpers.events import InMemoryEventRepository

EVALUATED_AT = datetime(2025, 3, 14, 9, 30, tzinfo=UTC)
SIGNAL = {
    "risk": {"riskLevel": "HIGH", "category": "WATER", "systemType": "Water Heater"},
    "coverage": {"hasCoverage": False},
}


def _run(events: InMemoryEventRepository) -> DecisionTrace:
    engine = OrchestrationEngine(planner=ActionPlanner(events))
    return engine.evaluate(
        EvaluationRequest(
            property_id="P1",
            signal=SIGNAL,
            suppressions=(user_marked_complete(RuleId.COVERAGE_AWARE_CTA, related_id="c-1"),),
            evaluated_at=EVALUATED_AT,
        )
    )


def test_trace_uses_camel_case_wire_shape() -> None:
    document = trace_to_json(_run(InMemoryEventRepository()))

    assert document["propertyId"] == "P1"
    assert document["evaluatedAt"] == "2025-03-14T09:30:00Z"
    assert document["bucket"] == "2025-03-14"
    assert document["inputs"] == SIGNAL
    assert document["checks"][0] == {
        "id": "RISK_ACTIONABLE",
        "label": "This issue needs attention",
        "passed": True,
        "details": {
            "riskLevel": "HIGH",
            "status": None,
            "matched": ["HIGH_RISK_LEVEL"],
            "serviceCategory": None,
            "exposure": None,
            "incidentType": "RISK:WATER:Water Heater",
        },
    }
    assert document["suppressions"] == [
        {
            "source": "USER",
            "reason": "USER_MARKED_COMPLETE",
            "ruleId": "COVERAGE_AWARE_CTA",
            "until": None,
            "message": "User marked this action as complete",
            "relatedId": "c-1",
        }
    ]
    plan = document["actionPlan"]
    assert [entry["actionType"] for entry in plan] == [
        "CREATE_TASK",
        "SCHEDULE_SERVICE",
        "REVIEW_COVERAGE",
    ]
    assert plan[2]["willCreate"] is False
    assert plan[2]["suppressed"] is True
    assert plan[2]["reason"].startswith("suppressed: USER_MARKED_COMPLETE")
    assert document["outcome"] == {
        "status": "ACTIONS_PLANNED",
        "message": "2 actions planned, 1 suppressed",
    }


def test_report_and_events_serialise() -> None:
    events = InMemoryEventRepository()
    trace = _run(events)
    report = execute_plan(trace, events)

    report_document = report_to_json(report)
    event_documents = events_to_json(events.list_for_property("P1"))

    statuses = [item["status"] for item in report_document["executions"]]
    assert statuses == [
        ExecutionStatus.CREATED,
        ExecutionStatus.CREATED,
        ExecutionStatus.SKIPPED,
    ]
    assert report_document["executions"][2]["eventId"] is None
    assert {item["eventId"] for item in report_document["executions"][:2]} == {
        item["id"] for item in event_documents
    }
    assert event_documents[0]["source"] == "SYSTEM"
    assert event_documents[0]["propertyId"] == "P1"


def test_parse_suppressions_accepts_wire_shape() -> None:
    (suppression,) = parse_suppressions(
        [
            {
                "source": "USER",
                "reason": "USER_SNOOZED",
                "ruleId": "RISK_ACTIONABLE",
                "until": "2025-03-20T00:00:00Z",
                "unknownField": "ignored",
            }
        ]
    )

    assert suppression.source is Source.USER
    assert suppression.reason == SuppressionReason.USER_SNOOZED
    assert suppression.rule_id == RuleId.RISK_ACTIONABLE
    assert suppression.until == datetime(2025, 3, 20, tzinfo=UTC)


@pytest.mark.parametrize(
    "payload",
    [
        {"source": "USER"},
        [{"source": "ROBOT", "reason": "X"}],
        [{"source": "USER", "reason": "X", "until": "2025-03-20T00:00:00"}],
    ],
)
def test_parse_suppressions_rejects_invalid_payloads(payload: object) -> None:
    with pytest.raises(ValueError):
        parse_suppressions(payload)


def test_parse_signal_requires_an_object() -> None:
    assert parse_signal({"risk": {}}) == {"risk": {}}
    with pytest.raises(ValueError, match="JSON object"):
        parse_signal(["risk"])
