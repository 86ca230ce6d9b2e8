"""In-memory event stores for domain tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from propflow.domain.errors import PersistenceError
from propflow.domain.model import OrchestrationEvent, Source

if TYPE_CHECKING:
    from collections.abc import Sequence


class InMemoryEventRepository:
    def __init__(self) -> None:
        self.events: dict[tuple[str, str, str], OrchestrationEvent] = {}
        self.exists_calls: list[tuple[str, str, str]] = []

    def exists(self, *, property_id: str, action_key: str, action_type: str) -> bool:
        identity = (property_id, action_key, action_type)
        self.exists_calls.append(identity)
        return identity in self.events

    def get(
        self, *, property_id: str, action_key: str, action_type: str
    ) -> OrchestrationEvent | None:
        return self.events.get((property_id, action_key, action_type))

    def list_for_property(self, property_id: str) -> Sequence[OrchestrationEvent]:
        return [event for event in self.events.values() if event.property_id == property_id]

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
        identity = (property_id, action_key, action_type)
        existing = self.events.get(identity)
        if existing is not None:
            return existing, False
        event = OrchestrationEvent(
            property_id=property_id,
            action_key=action_key,
            action_type=action_type,
            source=source,
            created_by=created_by,
            payload=payload,
        )
        self.events[identity] = event
        return event, True

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
        event, _ = self.create_if_absent(
            property_id=property_id,
            action_key=action_key,
            action_type=action_type,
            source=source,
            created_by=created_by,
            payload=payload,
        )
        return event

    def seed(self, *, property_id: str, action_key: str, action_type: str) -> OrchestrationEvent:
        return self.upsert(
            property_id=property_id,
            action_key=action_key,
            action_type=action_type,
            source=Source.SYSTEM,
        )


class FailingEventRepository(InMemoryEventRepository):
    """Raises :class:`PersistenceError` for the configured action types."""

    def __init__(self, failing_action_types: set[str] | None = None) -> None:
        super().__init__()
        self.failing_action_types = failing_action_types

    def _should_fail(self, action_type: str) -> bool:
        return self.failing_action_types is None or action_type in self.failing_action_types

    def exists(self, *, property_id: str, action_key: str, action_type: str) -> bool:
        if self._should_fail(action_type):
            raise PersistenceError("event store unavailable")
        return super().exists(
            property_id=property_id, action_key=action_key, action_type=action_type
        )

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
        if self._should_fail(action_type):
            raise PersistenceError("event store unavailable")
        return super().create_if_absent(
            property_id=property_id,
            action_key=action_key,
            action_type=action_type,
            source=source,
            created_by=created_by,
            payload=payload,
        )
