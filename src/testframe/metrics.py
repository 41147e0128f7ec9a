from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from testframe.runner import TestResult


@dataclass
class DurationStatistics:
    """Statistics over the durations of executed (non-skipped) tests."""

    avg: float | None
    min: float | None
    max: float | None
    stddev: float | None
    total: float

    def to_dict(self) -> dict[str, float | None]:
        return asdict(self)


@dataclass
class RunSummary:
    total: int
    passed: int
    failed: int
    errored: int
    skipped: int
    pass_rate: float
    durations: DurationStatistics

    @property
    def all_passed(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "errored": self.errored,
            "skipped": self.skipped,
            "pass_rate": self.pass_rate,
            "durations": self.durations.to_dict(),
        }


def compute_stats(values: list[float | int | None]) -> DurationStatistics:
    """Compute avg, min, max, stddev and total for a list of numeric values."""
    nums = [v for v in values if v is not None]
    if not nums:
        return DurationStatistics(avg=None, min=None, max=None, stddev=None, total=0.0)

    arr = np.array(nums, dtype=float)
    return DurationStatistics(
        avg=round(float(np.mean(arr)), 4),
        min=round(float(np.min(arr)), 4),
        max=round(float(np.max(arr)), 4),
        stddev=round(float(np.std(arr)), 4),
        total=round(float(np.sum(arr)), 4),
    )


def summarize(results: list[TestResult]) -> RunSummary:
    """Count outcomes and compute duration stats for a result stream."""
    from testframe.runner import Status

    passed = sum(1 for r in results if r.status is Status.PASSED)
    failed = sum(1 for r in results if r.status is Status.FAILED)
    errored = sum(1 for r in results if r.errored)
    skipped = sum(1 for r in results if r.status is Status.SKIPPED)
    executed = passed + failed
    pass_rate = (passed / executed * 100) if executed > 0 else 0.0

    return RunSummary(
        total=len(results),
        passed=passed,
        failed=failed,
        errored=errored,
        skipped=skipped,
        pass_rate=round(pass_rate, 2),
        durations=compute_stats(
            [r.duration for r in results if r.status is not Status.SKIPPED]
        ),
    )
