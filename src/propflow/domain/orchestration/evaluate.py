"""Rule evaluation stage.

Rules are independent within one pass: none may read another rule's result. With
``max_workers > 1`` they run on a thread pool, but results are always returned in
declared order because downstream stages and the trace display rely on it.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from .checks import CheckResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .checks import Rule, Signal

log = logging.getLogger(__name__)


class RuleEvaluator:
    """Run an ordered list of rules against one signal snapshot."""

    def __init__(self, rules: Sequence[Rule], *, max_workers: int = 1) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        seen: set[str] = set()
        for rule in rules:
            if rule.rule_id in seen:
                raise ValueError(f"Duplicate rule id: {rule.rule_id}")
            seen.add(rule.rule_id)
        self._rules = tuple(rules)
        self._max_workers = max_workers

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def __call__(self, signal: Signal) -> tuple[CheckResult, ...]:
        if not self._rules:
            return ()
        if self._max_workers == 1 or len(self._rules) == 1:
            return tuple(_run_rule(rule, signal) for rule in self._rules)
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            # map() yields in submission order regardless of completion order
            return tuple(pool.map(lambda rule: _run_rule(rule, signal), self._rules))


def _run_rule(rule: Rule, signal: Signal) -> CheckResult:
    try:
        result = rule.evaluate(signal)
    except Exception as exc:  # noqa: BLE001
        log.warning(
            "Rule %s raised while evaluating; reporting as failed", rule.rule_id, exc_info=True
        )
        return CheckResult(
            id=rule.rule_id,
            passed=False,
            details={"error": f"{type(exc).__name__}: {exc}"},
        )
    if result.id != rule.rule_id:
        log.warning("Rule %s reported id %s; using the declared id", rule.rule_id, result.id)
        return CheckResult(
            id=rule.rule_id,
            passed=result.passed,
            details=result.details,
            label=result.label,
        )
    return result
