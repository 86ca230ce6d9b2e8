"""Human-readable labels for rule identifiers.

Labels are read-only data loaded once and injected into the trace recorder. An
unknown rule id never blocks trace construction; it gets a humanised fallback.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Final, cast

from propflow.domain.model import RuleId

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_RULE_LABELS: Final[Mapping[str, str]] = MappingProxyType(
    {
        RuleId.RISK_ACTIONABLE: "This issue needs attention",
        RuleId.CHECKLIST_ACTIONABLE: "A maintenance task needs scheduling",
        RuleId.COVERAGE_AWARE_CTA: "Your coverage was considered",
        RuleId.INCIDENT_SEVERITY: "Incident severity was assessed",
        "RISK_INFER_ASSET_KEY": "We identified the part of your home involved",
        "COVERAGE_MATCHING": "We checked your warranties and insurance",
        "BOOKING_SUPPRESSION": "We checked for existing scheduled work",
        "SUPPRESSION_FINAL": "Final decision made",
    }
)


def humanize_rule_id(rule_id: str) -> str:
    text = rule_id.replace("_", " ").replace("-", " ").strip().lower()
    return text.capitalize() if text else "Rule check"


class RuleLabels:
    """Lookup table from rule id to display label."""

    def __init__(self, labels: Mapping[str, str] | None = None) -> None:
        merged = dict(DEFAULT_RULE_LABELS)
        if labels:
            merged.update({str(key): str(value) for key, value in labels.items()})
        self._labels: Mapping[str, str] = MappingProxyType(merged)

    @classmethod
    def from_file(cls, path: Path) -> RuleLabels:
        """Load label overrides from a JSON object of ``{rule_id: label}``."""

        with path.open(encoding="utf-8") as handle:
            loaded = json.load(handle)
        if not isinstance(loaded, dict):
            raise ValueError(f"Rule label file {path} must contain a JSON object")
        return cls(cast(dict[str, str], loaded))

    def label_for(self, rule_id: str) -> str:
        return self._labels.get(rule_id) or humanize_rule_id(rule_id)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._labels
