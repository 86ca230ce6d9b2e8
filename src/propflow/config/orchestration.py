"""Orchestration engine configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from propflow.domain.model import BucketGranularity

from .errors import ConfigurationError

DEFAULT_BUCKET_GRANULARITY = BucketGranularity.DAY
DEFAULT_EVALUATOR_WORKERS = 1


@dataclass(frozen=True, slots=True)
class OrchestrationConfig:
    bucket_granularity: BucketGranularity = DEFAULT_BUCKET_GRANULARITY
    evaluator_workers: int = DEFAULT_EVALUATOR_WORKERS
    rule_labels_path: Path | None = None


def _parse_granularity(raw: str | None) -> BucketGranularity:
    if raw is None or not raw.strip():
        return DEFAULT_BUCKET_GRANULARITY
    try:
        return BucketGranularity(raw.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(item.value for item in BucketGranularity)
        raise ConfigurationError(
            f"Invalid PROPFLOW_BUCKET_GRANULARITY {raw!r} (expected one of: {allowed})"
        ) from exc


def _parse_workers(raw: str | None) -> int:
    if raw is None or not raw.strip():
        return DEFAULT_EVALUATOR_WORKERS
    try:
        workers = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid PROPFLOW_EVALUATOR_WORKERS {raw!r}") from exc
    if workers < 1:
        raise ConfigurationError("PROPFLOW_EVALUATOR_WORKERS must be at least 1")
    return workers


def get_orchestration_config() -> OrchestrationConfig:
    labels_path = os.getenv("PROPFLOW_RULE_LABELS_PATH")
    return OrchestrationConfig(
        bucket_granularity=_parse_granularity(os.getenv("PROPFLOW_BUCKET_GRANULARITY")),
        evaluator_workers=_parse_workers(os.getenv("PROPFLOW_EVALUATOR_WORKERS")),
        rule_labels_path=Path(labels_path).expanduser() if labels_path else None,
    )
