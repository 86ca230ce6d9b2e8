"""Ports for persisting orchestration events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from propflow.domain.model import OrchestrationEvent, Source


@runtime_checkable
class OrchestrationEventLookup(Protocol):
    """Read-only existence check used by the action planner."""

    def exists(self, *, property_id: str, action_key: str, action_type: str) -> bool: ...


@runtime_checkable
class OrchestrationEventRepository(OrchestrationEventLookup, Protocol):
    """Persistence contract for orchestration events.

    Exactly one event may exist per ``(property_id, action_key, action_type)``. The
    storage-level unique constraint is the only correctness mechanism: concurrent
    callers racing on a triple all receive the single stored row and no error.
    Implementations raise :class:`propflow.domain.errors.PersistenceError` when the
    storage cannot be reached.
    """

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
        """Return the stored event and whether this call created it."""
        ...

    def upsert(
        self,
        *,
        property_id: str,
        action_key: str,
        action_type: str,
        source: Source,
        created_by: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> OrchestrationEvent: ...

    def get(
        self, *, property_id: str, action_key: str, action_type: str
    ) -> OrchestrationEvent | None: ...

    def list_for_property(self, property_id: str) -> Sequence[OrchestrationEvent]: ...
