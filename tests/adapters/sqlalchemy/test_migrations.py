from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import inspect

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def test_upgrade_head_creates_event_table(sqlite_engine: Engine) -> None:
    inspector = inspect(sqlite_engine)

    assert "orchestration_event" in inspector.get_table_names()
    columns = {column["name"] for column in inspector.get_columns("orchestration_event")}
    assert columns == {
        "id",
        "property_id",
        "action_key",
        "action_type",
        "source",
        "created_by",
        "payload",
        "created_at",
    }
    unique = inspector.get_unique_constraints("orchestration_event")
    assert [constraint["column_names"] for constraint in unique] == [
        ["property_id", "action_key", "action_type"]
    ]
    indexes = {index["name"] for index in inspector.get_indexes("orchestration_event")}
    assert "ix_orchestration_event_property" in indexes
