"""Result aggregation and JSON reports."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from cucumis.core.gherkin.models import StepStatus, TestResult

logger = logging.getLogger(__name__)


class ResultAggregator:
    """Collects scenario results across features, in execution order."""

    def __init__(self):
        self.results: list[TestResult] = []

    def add(self, result: TestResult) -> None:
        self.results.append(result)

    def extend(self, results: Iterable[TestResult]) -> None:
        self.results.extend(results)

    def by_feature(self, feature: str) -> list[TestResult]:
        return [r for r in self.results if r.feature == feature]

    @property
    def failed(self) -> bool:
        return any(r.status == StepStatus.FAILED for r in self.results)

    def summary(self) -> dict:
        """Scenario counts and total duration."""
        return {
            "total": len(self.results),
            "passed": sum(1 for r in self.results if r.status == StepStatus.PASSED),
            "failed": sum(1 for r in self.results if r.status == StepStatus.FAILED),
            "skipped": sum(1 for r in self.results if r.status == StepStatus.SKIPPED),
            "duration": sum(r.duration_ms for r in self.results),
        }

    def to_dict(self) -> dict:
        return {
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary(),
        }


def save_results(results: Iterable[TestResult], path: Path) -> Path:
    """Write results and their summary to a JSON file.

    Returns:
        Path to results file
    """
    aggregator = ResultAggregator()
    aggregator.extend(results)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(aggregator.to_dict(), f, ensure_ascii=False, indent=2)

    logger.info(f"Results saved to {path}")
    return path
