"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import OrchestrationEventLookup, OrchestrationEventRepository
from .unit_of_work import (
    OrchestrationRepositories,
    OrchestrationUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "OrchestrationEventLookup",
    "OrchestrationEventRepository",
    "OrchestrationRepositories",
    "OrchestrationUnitOfWork",
    "RepositoryCollection",
    "UnitOfWork",
]
