"""Check results and the rule contract used by the evaluator."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

type Signal = Mapping[str, Any]


@dataclass(frozen=True, slots=True, kw_only=True)
class CheckResult:
    """Outcome of one rule for one signal snapshot.

    ``label`` is optional on purpose: rules report ids, and the trace recorder fills
    in display labels from the injected label registry.
    """

    id: str
    passed: bool
    details: Mapping[str, Any] = field(default_factory=dict[str, Any])
    label: str | None = None


@runtime_checkable
class Rule(Protocol):
    """Independently invocable check over a signal snapshot."""

    @property
    def rule_id(self) -> str: ...

    def evaluate(self, signal: Signal) -> CheckResult: ...


class RuleSetFactory(Protocol):
    """Build the ordered rule list for one run, bound to its evaluation instant."""

    def __call__(self, evaluated_at: datetime) -> Sequence[Rule]: ...
