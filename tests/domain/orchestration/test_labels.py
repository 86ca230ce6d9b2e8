from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from propflow.domain.model import RuleId
from propflow.domain.orchestration import RuleLabels
from propflow.domain.orchestration.labels import humanize_rule_id

if TYPE_CHECKING:
    from pathlib import Path


def test_default_labels() -> None:
    labels = RuleLabels()

    assert labels.label_for(RuleId.RISK_ACTIONABLE) == "This issue needs attention"
    assert RuleId.COVERAGE_AWARE_CTA in labels


def test_unknown_rule_gets_humanised_label() -> None:
    assert RuleLabels().label_for("GUTTER-CLEANING_DUE") == "Gutter cleaning due"
    assert humanize_rule_id("  ") == "Rule check"


def test_overrides_from_file(tmp_path: Path) -> None:
    path = tmp_path / "labels.json"
    path.write_text(json.dumps({"RISK_ACTIONABLE": "Fix this soon", "NEW_RULE": "New"}))

    labels = RuleLabels.from_file(path)

    assert labels.label_for(RuleId.RISK_ACTIONABLE) == "Fix this soon"
    assert labels.label_for("NEW_RULE") == "New"
    assert labels.label_for(RuleId.CHECKLIST_ACTIONABLE) == "A maintenance task needs scheduling"


def test_label_file_must_hold_an_object(tmp_path: Path) -> None:
    path = tmp_path / "labels.json"
    path.write_text("[]")

    with pytest.raises(ValueError, match="JSON object"):
        RuleLabels.from_file(path)
