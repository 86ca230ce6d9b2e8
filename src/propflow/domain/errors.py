"""Domain-level error types."""

from __future__ import annotations


class OrchestrationError(RuntimeError):
    """Base class for orchestration failures."""


class PersistenceError(OrchestrationError):
    """Raised by event stores when the backing storage cannot be reached or written."""


class InvalidActionKeyInput(ValueError):  # noqa: N818
    """Raised when an action key component is missing or blank."""
