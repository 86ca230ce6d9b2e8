"""SQLAlchemy mapping metadata for the orchestration domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Dialect,
    Enum,
    Index,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from propflow.domain.model import OrchestrationEvent, Source

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]

ORCHESTRATION_EVENT_IDENTITY = ("property_id", "action_key", "action_type")


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

orchestration_event_table = Table(
    "orchestration_event",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("property_id", String, nullable=False),
    Column("action_key", String(64), nullable=False),
    Column("action_type", String, nullable=False),
    Column("source", Enum(Source, native_enum=False, length=16), nullable=False),
    Column("created_by", String, nullable=True),
    Column("payload", JSON(none_as_null=True), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    # sole guard against duplicate actions; upserts rely on it
    UniqueConstraint(*ORCHESTRATION_EVENT_IDENTITY, name="uq_orchestration_event_identity"),
    Index("ix_orchestration_event_property", "property_id", "created_at"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(
        OrchestrationEvent,
        orchestration_event_table,
    )

    configure_mappers()
    return mapper_registry
