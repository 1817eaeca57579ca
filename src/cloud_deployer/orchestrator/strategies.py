"""Composition strategies for remote steps.

Two strategies exist on purpose. Inside one environment, steps depend on each
other, so ``run_sequence`` stops at the first failure. Across environments the
work is independent, so ``run_collecting_errors`` attempts every item and
reports the failures at the end.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, TypeVar, Union

from ..errors import DeployerError, FanOutFailed, StepOutcome
from ..utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

StepResult = Union[StepOutcome, List[StepOutcome]]
Step = Callable[[], StepResult]


def run_sequence(steps: Iterable[Step]) -> List[StepOutcome]:
    """Run ``steps`` in order; the first exception propagates unchanged.

    ``steps`` may be a generator, in which case later steps are not even
    built once an earlier one has failed.
    """
    outcomes: List[StepOutcome] = []
    for step in steps:
        result = step()
        if isinstance(result, list):
            outcomes.extend(result)
        else:
            outcomes.append(result)
    return outcomes


@dataclass
class FanOutReport:
    """Per-item results of a best-effort run."""

    succeeded: Dict[str, Any] = field(default_factory=dict)
    failed: Dict[str, DeployerError] = field(default_factory=dict)
    attempted: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def raise_for_failures(self) -> None:
        if self.failed:
            raise FanOutFailed(dict(self.failed))


def run_collecting_errors(
    items: Iterable[T],
    operation: Callable[[T], Any],
    key: Callable[[T], str] = str,
) -> FanOutReport:
    """Run ``operation`` on every item, recording failures instead of stopping."""
    report = FanOutReport()
    for item in items:
        name = key(item)
        report.attempted.append(name)
        try:
            report.succeeded[name] = operation(item)
        except DeployerError as exc:
            logger.error("%s failed: %s", name, exc)
            report.failed[name] = exc
    return report
