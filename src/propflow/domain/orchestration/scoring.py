"""Rule-based incident severity and confidence scoring.

Severity is the clamped sum of five buckets:

- impact (0..30): exposure in USD, or 30 when safety critical
- likelihood (5..25): model probability
- time sensitivity (5..20): hours until the incident may manifest
- coverage penalty (0..15): uncovered or unclear coverage
- mitigation (-20..0): protection already in place
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from propflow.domain.model import Severity

if TYPE_CHECKING:
    from .signals import IncidentSignal

CRITICAL_THRESHOLD = 60
WARNING_THRESHOLD = 25

_MITIGATION_CREDIT = {
    "ACTIVE_PROTECTION": -20,
    "SCHEDULED": -15,
    "CONFIRMED": -10,
    "PARTIAL": -5,
    "NONE": 0,
}


@dataclass(frozen=True, slots=True)
class SeverityBreakdown:
    impact: int
    likelihood: int
    time_sensitivity: int
    coverage_penalty: int
    mitigation: int
    total: int

    def as_dict(self) -> dict[str, int]:
        return {
            "impact": self.impact,
            "likelihood": self.likelihood,
            "timeSensitivity": self.time_sensitivity,
            "coveragePenalty": self.coverage_penalty,
            "mitigation": self.mitigation,
            "total": self.total,
        }


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _impact(exposure_usd: float | None, safety_critical: bool | None) -> int:
    if safety_critical:
        return 30
    exposure = exposure_usd or 0
    if exposure <= 250:
        return 5
    if exposure <= 1500:
        return 15
    if exposure <= 5000:
        return 20
    if exposure <= 15000:
        return 25
    return 30


def _likelihood(probability_pct: float | None) -> int:
    probability = probability_pct or 0
    if probability >= 85:
        return 25
    if probability >= 60:
        return 18
    if probability >= 35:
        return 10
    return 5


def _time_sensitivity(time_window_hours: float | None) -> int:
    hours = time_window_hours if time_window_hours is not None else 9999
    if hours <= 24 * 7:
        return 20
    if hours <= 24 * 30:
        return 15
    if hours <= 24 * 90:
        return 10
    return 5


def _coverage_penalty(is_covered: bool | None) -> int:
    if is_covered is True:
        return 0
    if is_covered is False:
        return 15
    # unclear and unknown coverage are penalised alike
    return 10


def compute_severity(incident: IncidentSignal) -> tuple[Severity, SeverityBreakdown]:
    impact = _impact(incident.exposure_usd, incident.safety_critical)
    likelihood = _likelihood(incident.probability_pct)
    time_sensitivity = _time_sensitivity(incident.time_window_hours)
    coverage_penalty = _coverage_penalty(incident.is_covered)
    mitigation = _MITIGATION_CREDIT.get(incident.mitigation_level, 0)

    total = _clamp(impact + likelihood + time_sensitivity + coverage_penalty + mitigation, 0, 100)
    if total >= CRITICAL_THRESHOLD:
        severity = Severity.CRITICAL
    elif total >= WARNING_THRESHOLD:
        severity = Severity.WARNING
    else:
        severity = Severity.INFO

    breakdown = SeverityBreakdown(
        impact=impact,
        likelihood=likelihood,
        time_sensitivity=time_sensitivity,
        coverage_penalty=coverage_penalty,
        mitigation=mitigation,
        total=total,
    )
    return severity, breakdown


def compute_confidence(incident: IncidentSignal) -> int:
    """Confidence (0..100) from model probability, signal agreement and freshness."""

    probability = incident.probability_pct or 0
    # half-up rounding of the 0..40 probability contribution
    score = 30 + int(max(0.0, min(100.0, probability)) / 100 * 40 + 0.5)

    if incident.signal_count >= 2:
        score += 10
    if incident.has_authoritative_signal:
        score += 10

    age = incident.signal_age_minutes if incident.signal_age_minutes is not None else 999_999
    if age <= 60:
        score += 10
    elif age <= 24 * 60:
        score += 5
    else:
        score -= 5

    return _clamp(score, 0, 100)
