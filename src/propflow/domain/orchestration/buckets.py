"""Helpers for deriving rate-limit bucket labels from instants."""

from __future__ import annotations

from datetime import UTC, datetime

from propflow.domain.model import BucketGranularity


def bucket_for(instant: datetime, granularity: BucketGranularity = BucketGranularity.DAY) -> str:
    """Return the bucket label containing ``instant`` (evaluated in UTC)."""

    if instant.tzinfo is None:
        raise ValueError("Bucket instants must include timezone information")
    moment = instant.astimezone(UTC)
    if granularity is BucketGranularity.DAY:
        return moment.date().isoformat()
    if granularity is BucketGranularity.WEEK:
        year, week, _ = moment.isocalendar()
        return f"{year}-W{week:02d}"
    if granularity is BucketGranularity.MONTH:
        return f"{moment.year}-{moment.month:02d}"
    raise ValueError(f"Unsupported bucket granularity: {granularity}")
