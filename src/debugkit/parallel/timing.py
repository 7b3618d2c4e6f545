"""Wall-clock experiment for checking whether agent tasks run in parallel.

``record_start`` writes a timestamp before three sleep agents are invoked by
hand; ``analyze_timing`` reads it back once they finish and classifies the
elapsed time.
"""

import math
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

PARALLEL_MAX_SECONDS = 15
SEQUENTIAL_MIN_SECONDS = 25
SEQUENTIAL_MAX_SECONDS = 40


class ExecutionMode(str, Enum):
    PARALLEL = "parallel"
    SEQUENTIAL = "sequential"
    INCONCLUSIVE = "inconclusive"


@dataclass
class TimingAnalysis:
    start: datetime
    end: datetime
    duration_seconds: int
    mode: ExecutionMode


def classify_duration(seconds: int) -> ExecutionMode:
    if seconds <= PARALLEL_MAX_SECONDS:
        return ExecutionMode.PARALLEL
    if SEQUENTIAL_MIN_SECONDS <= seconds <= SEQUENTIAL_MAX_SECONDS:
        return ExecutionMode.SEQUENTIAL
    return ExecutionMode.INCONCLUSIVE


def record_start(path: str | Path, now: datetime | None = None) -> datetime:
    start = now or datetime.now(UTC)
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(start.isoformat(), encoding="utf-8")
    return start


def analyze_timing(path: str | Path, now: datetime | None = None) -> TimingAnalysis:
    """Classify the time elapsed since :func:`record_start` and delete the file.

    Raises:
        FileNotFoundError: If no start time was recorded.
    """
    target = Path(path)
    start = datetime.fromisoformat(target.read_text(encoding="utf-8").strip())
    if start.tzinfo is None:
        start = start.replace(tzinfo=UTC)
    end = now or datetime.now(UTC)
    # Half seconds round up.
    duration = math.floor((end - start).total_seconds() + 0.5)

    target.unlink()
    return TimingAnalysis(
        start=start, end=end, duration_seconds=duration, mode=classify_duration(duration)
    )
