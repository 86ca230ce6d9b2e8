from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from propflow.domain.model import BucketGranularity
from propflow.domain.orchestration import bucket_for


def test_day_bucket_uses_utc_date() -> None:
    instant = datetime(2024, 5, 1, 23, 30, tzinfo=timezone(timedelta(hours=-2)))

    assert bucket_for(instant) == "2024-05-02"


def test_week_bucket_uses_iso_week() -> None:
    instant = datetime(2021, 1, 1, 12, tzinfo=UTC)

    assert bucket_for(instant, BucketGranularity.WEEK) == "2020-W53"


def test_month_bucket() -> None:
    instant = datetime(2024, 11, 30, tzinfo=UTC)

    assert bucket_for(instant, BucketGranularity.MONTH) == "2024-11"


def test_naive_instant_is_rejected() -> None:
    with pytest.raises(ValueError, match="timezone"):
        bucket_for(datetime(2024, 5, 1))  # noqa: DTZ001
