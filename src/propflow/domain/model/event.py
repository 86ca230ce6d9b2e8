"""Persisted record of an orchestration action."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .enums import Source


@dataclass(eq=False, kw_only=True)
class OrchestrationEvent:
    """One event per ``(property_id, action_key, action_type)``.

    Rows are written once and never updated; a repeated upsert for the same triple
    returns the stored record unchanged.
    """

    property_id: str
    action_key: str
    action_type: str
    source: Source
    created_by: str | None = None
    payload: dict[str, Any] | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @property
    def identity(self) -> tuple[str, str, str]:
        return (self.property_id, self.action_key, self.action_type)
