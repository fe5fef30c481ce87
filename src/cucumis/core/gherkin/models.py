"""Result models for scenario execution."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class StepStatus(str, Enum):
    """Step and scenario execution status."""
    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class StepResult:
    """Result of a single step execution."""
    id: str
    text: str
    keyword: str
    status: StepStatus
    duration_ms: int = 0
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            "id": self.id,
            "text": self.text,
            "keyword": self.keyword,
            "status": self.status.value,
            "duration": self.duration_ms,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class TestResult:
    """Result of one scenario of one feature.

    Created when the scenario starts, filled step by step and finalized
    once the scenario ends.
    """
    __test__ = False

    id: str
    timestamp: datetime
    feature: str
    scenario: str
    status: StepStatus = StepStatus.PENDING
    steps: list[StepResult] = field(default_factory=list)
    duration_ms: int = 0
    error: Optional[str] = None

    @property
    def executed_count(self) -> int:
        return sum(
            1 for s in self.steps
            if s.status in (StepStatus.PASSED, StepStatus.FAILED)
        )

    @property
    def passed_count(self) -> int:
        return sum(1 for s in self.steps if s.status == StepStatus.PASSED)

    @property
    def failed_count(self) -> int:
        return sum(1 for s in self.steps if s.status == StepStatus.FAILED)

    @property
    def skipped_count(self) -> int:
        return sum(1 for s in self.steps if s.status == StepStatus.SKIPPED)

    def finalize(self, duration_ms: int) -> None:
        """Derive the scenario status from its steps."""
        self.duration_ms = duration_ms
        if self.failed_count:
            self.status = StepStatus.FAILED
            failed = next(s for s in self.steps if s.status == StepStatus.FAILED)
            self.error = failed.error
        elif self.executed_count == 0:
            self.status = StepStatus.SKIPPED
        else:
            self.status = StepStatus.PASSED

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "feature": self.feature,
            "scenario": self.scenario,
            "status": self.status.value,
            "duration": self.duration_ms,
            "steps": [s.to_dict() for s in self.steps],
        }
        if self.error is not None:
            data["error"] = self.error
        return data
