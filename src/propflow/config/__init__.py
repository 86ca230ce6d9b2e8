"""Application configuration helpers."""

from __future__ import annotations

from .errors import ConfigurationError
from .logging import configure_logging
from .orchestration import OrchestrationConfig, get_orchestration_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "OrchestrationConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_orchestration_config",
    "get_storage_config",
]
