import time
from collections.abc import Callable
from dataclasses import dataclass, field

from loguru import logger


@dataclass
class CheckResult:
    name: str
    passed: bool
    details: list[str] = field(default_factory=list)
    error: str | None = None
    duration_ms: float = 0.0


@dataclass
class CheckReport:
    title: str
    results: list[CheckResult] = field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.passed)

    @property
    def success(self) -> bool:
        return bool(self.results) and self.failed == 0

    @property
    def total_duration_ms(self) -> float:
        return sum(r.duration_ms for r in self.results)


class CheckFailed(Exception):
    """Raised inside a check body to fail it with a message."""


def run_check(name: str, fn: Callable[[], list[str] | None]) -> CheckResult:
    """Time ``fn`` and turn its outcome into a :class:`CheckResult`.

    ``fn`` returns detail lines on success. Any exception fails the check; the
    error message is kept and the exception is logged, not re-raised.
    """
    start = time.perf_counter()
    try:
        details = fn() or []
    except Exception as e:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.debug("Check {} failed: {}: {}", name, type(e).__name__, e)
        return CheckResult(
            name=name,
            passed=False,
            error=getattr(e, "message", None) or str(e),
            duration_ms=duration_ms,
        )

    duration_ms = (time.perf_counter() - start) * 1000
    logger.debug("Check {} passed in {:.0f}ms", name, duration_ms)
    return CheckResult(name=name, passed=True, details=details, duration_ms=duration_ms)
