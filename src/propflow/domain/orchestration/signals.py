"""Pydantic schemas for the signal sections consumed by built-in rules.

A signal snapshot is an open mapping. Each rule only validates the section it
reads, so unrelated or partial data never fails other rules:

``risk``
    ``riskLevel``/``severity``, ``status``, ``recommendedAction``, ``category``,
    ``serviceCategory``, ``systemType``, ``assetName``, ``exposure``.
``checklist``
    ``id``, ``title``, ``status`` (required), ``nextDueDate``, ``isRecurring``,
    ``serviceCategory``, ``actionKey``.
``coverage``
    ``hasCoverage`` (required), ``type``, ``expiresOn``, ``sourceId``.
``incident``
    ``typeKey`` (required) plus the scoring inputs of
    :mod:`propflow.domain.orchestration.scoring`.
``bookings``
    list of ``{id, category, status}``.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Literal, cast

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _upper(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped.upper() or None
    return value


class SignalSection(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        frozen=True,
    )


class RiskSignal(SignalSection):
    risk_level: str | None = None
    severity: str | None = None
    status: str | None = None
    recommended_action: str | None = None
    category: str | None = None
    service_category: str | None = None
    system_type: str | None = None
    asset_name: str | None = None
    exposure: float | None = None

    normalize_upper = field_validator(
        "risk_level", "severity", "status", "category", "service_category", mode="before"
    )(_upper)
    normalize_blank = field_validator(
        "recommended_action", "system_type", "asset_name", mode="before"
    )(_blank_to_none)

    @property
    def effective_level(self) -> str | None:
        return self.risk_level or self.severity


class ChecklistSignal(SignalSection):
    id: str | None = None
    title: str | None = None
    status: str
    next_due_date: date | None = None
    is_recurring: bool = False
    service_category: str | None = None
    action_key: str | None = None

    normalize_upper = field_validator("status", "service_category", mode="before")(_upper)

    @field_validator("next_due_date", mode="before")
    @classmethod
    def _coerce_due_date(cls, value: object) -> object:
        value = _blank_to_none(value)
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and "T" in value:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        return value


class CoverageSignal(SignalSection):
    has_coverage: bool
    type: Literal["HOME_WARRANTY", "INSURANCE", "NONE"] = "NONE"
    expires_on: date | None = None
    source_id: str | None = None

    normalize_type = field_validator("type", mode="before")(_upper)


class IncidentSignal(SignalSection):
    type_key: str
    exposure_usd: float | None = None
    safety_critical: bool | None = None
    time_window_hours: float | None = None
    probability_pct: float | None = Field(default=None, ge=0, le=100)
    is_covered: bool | None = None
    coverage_clarity: Literal["CLEAR", "UNCLEAR", "UNKNOWN"] = "UNKNOWN"
    mitigation_level: Literal[
        "ACTIVE_PROTECTION", "SCHEDULED", "CONFIRMED", "PARTIAL", "NONE"
    ] = "NONE"
    signal_count: int = 1
    has_authoritative_signal: bool = False
    signal_age_minutes: float | None = None

    normalize_upper = field_validator(
        "coverage_clarity", "mitigation_level", mode="before"
    )(_upper)


class BookingSignal(SignalSection):
    id: str | None = None
    category: str | None = None
    status: str

    normalize_upper = field_validator("category", "status", mode="before")(_upper)


class SectionError(Exception):
    """Signal section could not be read; ``details`` explains why."""

    def __init__(self, details: dict[str, Any]) -> None:
        super().__init__(details)
        self.details = details


def read_section[TSection: SignalSection](
    signal: Mapping[str, Any],
    key: str,
    model: type[TSection],
) -> TSection:
    """Validate ``signal[key]`` against ``model`` or raise :class:`SectionError`."""

    raw = signal.get(key)
    if raw is None:
        raise SectionError({"missing": [key]})
    if not isinstance(raw, Mapping):
        raise SectionError({"errors": [{"field": key, "message": "expected a mapping"}]})
    try:
        return model.model_validate(dict(cast(Mapping[str, Any], raw)))
    except ValidationError as exc:
        raise SectionError(_describe_validation_error(key, exc)) from exc


def read_bookings(signal: Mapping[str, Any]) -> list[BookingSignal]:
    """Return the well-formed bookings of ``signal``; malformed entries are skipped."""

    raw = signal.get("bookings")
    if not isinstance(raw, list | tuple):
        return []
    bookings: list[BookingSignal] = []
    for item in cast(list[object], raw):
        if not isinstance(item, Mapping):
            continue
        try:
            bookings.append(BookingSignal.model_validate(dict(cast(Mapping[str, Any], item))))
        except ValidationError:
            continue
    return bookings


def _describe_validation_error(key: str, exc: ValidationError) -> dict[str, Any]:
    missing: list[str] = []
    errors: list[dict[str, str]] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in (key, *error["loc"]))
        if error["type"] == "missing":
            missing.append(location)
        else:
            errors.append({"field": location, "message": error["msg"]})
    details: dict[str, Any] = {}
    if missing:
        details["missing"] = missing
    if errors:
        details["errors"] = errors
    return details
