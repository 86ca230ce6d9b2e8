"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from propflow.adapters.sqlalchemy.mappings import (
    ORCHESTRATION_EVENT_IDENTITY,
    orchestration_event_table,
)
from propflow.domain.errors import PersistenceError
from propflow.domain.model import OrchestrationEvent

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from sqlalchemy.engine import CursorResult
    from sqlalchemy.orm import Session

    from propflow.domain.model import Source

log = logging.getLogger(__name__)

_CONFLICT_AWARE_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise PersistenceError(f"Failed to {operation}: {exc}") from exc


class SqlAlchemyOrchestrationEventRepository:
    """Idempotent event store keyed by ``(property_id, action_key, action_type)``.

    Inserts never check-then-act: they rely on the unique constraint and let the
    database discard conflicting rows, then read back whichever row won.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def exists(self, *, property_id: str, action_key: str, action_type: str) -> bool:
        stmt = (
            select(orchestration_event_table.c.id)
            .where(orchestration_event_table.c.property_id == property_id)
            .where(orchestration_event_table.c.action_key == action_key)
            .where(orchestration_event_table.c.action_type == action_type)
            .limit(1)
        )
        with _storage_errors("check orchestration event"):
            return self.session.execute(stmt).scalar_one_or_none() is not None

    def get(
        self, *, property_id: str, action_key: str, action_type: str
    ) -> OrchestrationEvent | None:
        stmt = (
            select(OrchestrationEvent)
            .where(orchestration_event_table.c.property_id == property_id)
            .where(orchestration_event_table.c.action_key == action_key)
            .where(orchestration_event_table.c.action_type == action_type)
        )
        with _storage_errors("load orchestration event"):
            return self.session.execute(stmt).scalar_one_or_none()

    def list_for_property(self, property_id: str) -> Sequence[OrchestrationEvent]:
        stmt = (
            select(OrchestrationEvent)
            .where(orchestration_event_table.c.property_id == property_id)
            .order_by(orchestration_event_table.c.created_at, orchestration_event_table.c.id)
        )
        with _storage_errors("list orchestration events"):
            return list(self.session.execute(stmt).scalars())

    def create_if_absent(
        self,
        *,
        property_id: str,
        action_key: str,
        action_type: str,
        source: Source,
        created_by: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> tuple[OrchestrationEvent, bool]:
        values: dict[str, Any] = {
            "id": uuid.uuid4(),
            "property_id": property_id,
            "action_key": action_key,
            "action_type": action_type,
            "source": source,
            "created_by": created_by,
            "payload": payload,
            "created_at": datetime.now(tz=UTC),
        }
        with _storage_errors("store orchestration event"):
            created = self._insert_ignoring_conflict(values)
        event = self.get(property_id=property_id, action_key=action_key, action_type=action_type)
        if event is None:
            raise PersistenceError(
                f"Orchestration event for {property_id}/{action_key}/{action_type} "
                "vanished after insert"
            )
        if not created:
            log.debug("Orchestration event %s/%s already exists", action_key, action_type)
        return event, created

    def upsert(
        self,
        *,
        property_id: str,
        action_key: str,
        action_type: str,
        source: Source,
        created_by: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> OrchestrationEvent:
        event, _created = self.create_if_absent(
            property_id=property_id,
            action_key=action_key,
            action_type=action_type,
            source=source,
            created_by=created_by,
            payload=payload,
        )
        return event

    def _insert_ignoring_conflict(self, values: dict[str, Any]) -> bool:
        # a failed insert rolls back only its own savepoint
        dialect = self.session.get_bind().dialect.name
        insert = _CONFLICT_AWARE_INSERTS.get(dialect)
        if insert is not None:
            stmt = (
                insert(orchestration_event_table)
                .values(**values)
                .on_conflict_do_nothing(index_elements=list(ORCHESTRATION_EVENT_IDENTITY))
            )
            with self.session.begin_nested():
                result = cast("CursorResult[Any]", self.session.execute(stmt))
            return result.rowcount == 1

        # other dialects: let the constraint reject the row inside the savepoint
        try:
            with self.session.begin_nested():
                self.session.execute(orchestration_event_table.insert().values(**values))
        except IntegrityError:
            return False
        return True


if TYPE_CHECKING:
    from propflow.domain.ports.persistence import OrchestrationEventRepository

    _session_stub = cast("Session", object())
    _repo_check: OrchestrationEventRepository = SqlAlchemyOrchestrationEventRepository(
        _session_stub
    )
