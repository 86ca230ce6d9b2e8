from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from propflow.domain.model import ActionType, RuleId, Source
from propflow.domain.orchestration import (
    DUPLICATE_REASON,
    ActionDefinition,
    ActionPlanner,
    CheckResult,
    Suppression,
    build_action_key,
    default_action_catalog,
    record_trace,
    snooze,
)
from propflow.domain.orchestration.labels import RuleLabels

from tests.helpers.events import FailingEventRepository, InMemoryEventRepository

BUCKET = "2024-05-01"
NOW = datetime(2024, 5, 1, 12, tzinfo=UTC)

RISK_PASSED = CheckResult(
    id=RuleId.RISK_ACTIONABLE,
    passed=True,
    details={"incidentType": "RISK:WATER:Water Heater"},
)
CATALOG = {RuleId.RISK_ACTIONABLE: (ActionDefinition(action_type=ActionType.CREATE_TASK),)}


def _risk_key(property_id: str = "P1") -> str:
    return build_action_key(
        property_id=property_id,
        incident_type="RISK:WATER:Water Heater",
        action_type=ActionType.CREATE_TASK,
        bucket=BUCKET,
    )


def test_passed_rule_without_suppression_or_event_will_create() -> None:
    planner = ActionPlanner(InMemoryEventRepository())

    plan = planner("P1", [RISK_PASSED], [], CATALOG, bucket=BUCKET)

    (entry,) = plan
    assert entry.will_create is True
    assert entry.action_key == _risk_key()
    assert entry.rule_id == RuleId.RISK_ACTIONABLE
    assert entry.incident_type == "RISK:WATER:Water Heater"

    trace = record_trace(
        property_id="P1",
        evaluated_at=NOW,
        bucket=BUCKET,
        inputs={},
        checks=[RISK_PASSED],
        suppressions=[],
        action_plan=plan,
        labels=RuleLabels(),
    )
    assert trace.outcome.message == "1 action planned"


def test_existing_event_marks_entry_as_duplicate() -> None:
    events = InMemoryEventRepository()
    events.seed(property_id="P1", action_key=_risk_key(), action_type=ActionType.CREATE_TASK)

    (entry,) = ActionPlanner(events)("P1", [RISK_PASSED], [], CATALOG, bucket=BUCKET)

    assert entry.will_create is False
    assert entry.reason == DUPLICATE_REASON == "duplicate of existing event"
    assert entry.duplicate is True


def test_event_from_another_bucket_is_not_a_duplicate() -> None:
    events = InMemoryEventRepository()
    events.seed(property_id="P1", action_key=_risk_key(), action_type=ActionType.CREATE_TASK)

    (entry,) = ActionPlanner(events)("P1", [RISK_PASSED], [], CATALOG, bucket="2024-05-02")

    assert entry.will_create is True


def test_failed_rules_produce_no_entries() -> None:
    failed = CheckResult(id=RuleId.RISK_ACTIONABLE, passed=False)

    planner = ActionPlanner(InMemoryEventRepository())

    assert planner("P1", [failed], [], CATALOG, bucket=BUCKET) == ()


def test_first_applicable_suppression_names_the_reason() -> None:
    events = InMemoryEventRepository()
    user = snooze(
        RuleId.RISK_ACTIONABLE, until=NOW + timedelta(days=1), reason="Waiting on plumber"
    )
    system = Suppression(
        source=Source.SYSTEM, reason="BOOKING_EXISTS", rule_id=RuleId.RISK_ACTIONABLE
    )

    (entry,) = ActionPlanner(events)("P1", [RISK_PASSED], [user, system], CATALOG, bucket=BUCKET)

    assert entry.will_create is False
    assert entry.reason == "suppressed: USER_SNOOZED (Waiting on plumber)"
    assert entry.suppressed_by == (user, system)
    assert events.exists_calls == []


def test_user_suppression_outranks_property_wide_system_suppression() -> None:
    vacant = Suppression(source=Source.SYSTEM, reason="VACANT")
    user = snooze(RuleId.RISK_ACTIONABLE, until=NOW + timedelta(days=1))

    (entry,) = ActionPlanner(InMemoryEventRepository())(
        "P1", [RISK_PASSED], [vacant, user], CATALOG, bucket=BUCKET
    )

    assert entry.will_create is False
    assert entry.reason.startswith("suppressed: USER_SNOOZED")
    assert entry.suppressed_by == (user, vacant)


def test_planned_payload_is_detached_from_the_catalog() -> None:
    payload = {"notify": {"channels": ["email"]}}
    catalog = {
        RuleId.RISK_ACTIONABLE: (
            ActionDefinition(action_type=ActionType.CREATE_TASK, payload=payload),
        )
    }

    (entry,) = ActionPlanner(InMemoryEventRepository())(
        "P1", [RISK_PASSED], [], catalog, bucket=BUCKET
    )
    payload["notify"]["channels"].append("sms")

    assert entry.payload is not None
    assert entry.payload["notify"]["channels"] == ("email",)
    with pytest.raises(TypeError):
        entry.payload["notify"]["channels"] = ()  # type: ignore[index]


def test_suppression_for_another_rule_does_not_apply() -> None:
    other = Suppression(
        source=Source.USER, reason="USER_MARKED_COMPLETE", rule_id=RuleId.COVERAGE_AWARE_CTA
    )

    (entry,) = ActionPlanner(InMemoryEventRepository())(
        "P1", [RISK_PASSED], [other], CATALOG, bucket=BUCKET
    )

    assert entry.will_create is True


def test_duplicate_keys_across_rules_keep_the_first_rule() -> None:
    second = CheckResult(
        id=RuleId.INCIDENT_SEVERITY,
        passed=True,
        details={"incidentType": "RISK:WATER:Water Heater"},
    )
    catalog = {
        RuleId.RISK_ACTIONABLE: (ActionDefinition(action_type=ActionType.CREATE_TASK),),
        RuleId.INCIDENT_SEVERITY: (ActionDefinition(action_type=ActionType.CREATE_TASK),),
    }

    plan = ActionPlanner(InMemoryEventRepository())(
        "P1", [RISK_PASSED, second], [], catalog, bucket=BUCKET
    )

    assert [entry.rule_id for entry in plan] == [RuleId.RISK_ACTIONABLE]


def test_persistence_failure_is_isolated_to_its_entry() -> None:
    events = FailingEventRepository({ActionType.SCHEDULE_SERVICE})
    catalog = {
        RuleId.RISK_ACTIONABLE: (
            ActionDefinition(action_type=ActionType.CREATE_TASK),
            ActionDefinition(action_type=ActionType.SCHEDULE_SERVICE),
        )
    }

    create_task, schedule = ActionPlanner(events)(
        "P1", [RISK_PASSED], [], catalog, bucket=BUCKET
    )

    assert create_task.will_create is True
    assert schedule.will_create is False
    assert schedule.persistence_failed is True
    assert schedule.reason == "persistence failure: event store unavailable"


def test_incident_type_falls_back_to_definition_then_rule_id() -> None:
    bare = CheckResult(id="CUSTOM_RULE", passed=True)
    catalog = {
        "CUSTOM_RULE": (
            ActionDefinition(action_type="NOTIFY"),
            ActionDefinition(action_type="NOTIFY_OWNER", incident_type="LEAK"),
        )
    }

    by_rule, by_definition = ActionPlanner(InMemoryEventRepository())(
        "P1", [bare], [], catalog, bucket=BUCKET
    )

    assert by_rule.incident_type == "CUSTOM_RULE"
    assert by_definition.incident_type == "LEAK"


def test_default_catalog_covers_builtin_rules() -> None:
    catalog = default_action_catalog()

    assert set(catalog) == set(RuleId)
    assert [item.action_type for item in catalog[RuleId.RISK_ACTIONABLE]] == [
        ActionType.CREATE_TASK,
        ActionType.SCHEDULE_SERVICE,
    ]
    assert [item.action_type for item in catalog[RuleId.COVERAGE_AWARE_CTA]] == [
        ActionType.REVIEW_COVERAGE
    ]
