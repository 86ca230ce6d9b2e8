"""SQLAlchemy adapter package for propflow."""

from __future__ import annotations

from .mappings import mapper_registry, orchestration_event_table, start_mappers
from .repositories import SqlAlchemyOrchestrationEventRepository

__all__ = [
    "SqlAlchemyOrchestrationEventRepository",
    "mapper_registry",
    "orchestration_event_table",
    "start_mappers",
]
