"""Simulated parallel test runner.

Suites marked parallel run their tests in batches of ``parallel_limit``; the
others run one test at a time. Several suites can run concurrently. Tests do no
real work: each sleeps a random interval and passes with a fixed probability.
"""

import asyncio
import random
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field

from loguru import logger


@dataclass(frozen=True)
class TestSuite:
    __test__ = False

    key: str
    name: str
    tests: tuple[str, ...]
    parallel: bool


TEST_SUITES: dict[str, TestSuite] = {
    "database": TestSuite(
        "database",
        "Database Tests",
        ("connection.test", "migrations.test", "tables.test"),
        parallel=True,
    ),
    "api": TestSuite(
        "api",
        "API Tests",
        ("endpoints.test", "authentication.test", "validation.test"),
        parallel=True,
    ),
    "integration": TestSuite(
        "integration",
        "Integration Tests",
        ("supabase.test", "github.test", "agent-coordination.test"),
        parallel=False,
    ),
    "performance": TestSuite(
        "performance",
        "Performance Tests",
        ("benchmark.test", "load.test", "stress.test"),
        parallel=False,
    ),
}


@dataclass
class TaskResult:
    test: str
    suite: str
    passed: bool
    duration_s: float


@dataclass
class SuiteResult:
    suite: str
    name: str
    duration_s: float
    results: list[TaskResult] = field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.passed)


@dataclass
class RunReport:
    suites: list[SuiteResult]
    total_duration_s: float
    parallel: bool

    @property
    def total_passed(self) -> int:
        return sum(s.passed for s in self.suites)

    @property
    def total_failed(self) -> int:
        return sum(s.failed for s in self.suites)

    @property
    def total_tests(self) -> int:
        return self.total_passed + self.total_failed

    @property
    def success(self) -> bool:
        return self.total_failed == 0

    @property
    def success_rate(self) -> float:
        if not self.total_tests:
            return 0.0
        return self.total_passed / self.total_tests * 100

    @property
    def estimated_sequential_s(self) -> float:
        """Sum of suite durations, i.e. the wall time had suites not overlapped."""
        return sum(s.duration_s for s in self.suites)

    @property
    def speedup(self) -> float:
        if self.total_duration_s <= 0:
            return 1.0
        return self.estimated_sequential_s / self.total_duration_s


class ParallelRunner:
    def __init__(
        self,
        parallel_limit: int = 5,
        rng: random.Random | None = None,
        min_delay_s: float = 1.0,
        max_delay_s: float = 3.0,
        pass_rate: float = 0.9,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_result: Callable[[TaskResult], None] | None = None,
    ):
        if parallel_limit < 1:
            raise ValueError("parallel_limit must be at least 1")
        self.parallel_limit = parallel_limit
        self._rng = rng or random.Random()
        self._min_delay_s = min_delay_s
        self._max_delay_s = max_delay_s
        self._pass_rate = pass_rate
        self._sleep = sleep
        self._on_result = on_result

    def _report(self, result: TaskResult) -> None:
        logger.debug(
            "{} {} ({:.2f}s)", "PASS" if result.passed else "FAIL", result.test, result.duration_s
        )
        if self._on_result is not None:
            self._on_result(result)

    async def execute_test(self, test: str, suite: str) -> TaskResult:
        start = time.perf_counter()
        await self._sleep(self._rng.uniform(self._min_delay_s, self._max_delay_s))
        passed = self._rng.random() < self._pass_rate
        result = TaskResult(
            test=test, suite=suite, passed=passed, duration_s=time.perf_counter() - start
        )
        self._report(result)
        return result

    async def execute_batches(self, tests: list[str], suite: str) -> list[TaskResult]:
        """Run ``tests`` in concurrent batches of ``parallel_limit``."""
        results: list[TaskResult] = []
        batch_count = -(-len(tests) // self.parallel_limit)
        for index in range(0, len(tests), self.parallel_limit):
            batch = tests[index : index + self.parallel_limit]
            logger.debug(
                "Executing batch {}/{} of {}", index // self.parallel_limit + 1, batch_count, suite
            )
            results.extend(await asyncio.gather(*(self.execute_test(t, suite) for t in batch)))
        return results

    async def run_suite(self, suite: TestSuite) -> SuiteResult:
        start = time.perf_counter()
        if suite.parallel:
            results = await self.execute_batches(list(suite.tests), suite.key)
        else:
            results = [await self.execute_test(t, suite.key) for t in suite.tests]
        return SuiteResult(
            suite=suite.key,
            name=suite.name,
            duration_s=time.perf_counter() - start,
            results=results,
        )

    async def run(self, suites: Iterable[str] | None = None, parallel: bool = True) -> RunReport:
        """Run the named suites (all of them by default).

        Raises:
            ValueError: If a suite name is unknown.
        """
        names = list(suites) if suites else list(TEST_SUITES)
        unknown = [n for n in names if n not in TEST_SUITES]
        if unknown:
            raise ValueError(f"Unknown test suite(s): {', '.join(unknown)}")

        selected = [TEST_SUITES[n] for n in names]
        start = time.perf_counter()
        if parallel and len(selected) > 1:
            suite_results = list(await asyncio.gather(*(self.run_suite(s) for s in selected)))
        else:
            suite_results = [await self.run_suite(s) for s in selected]

        report = RunReport(
            suites=suite_results,
            total_duration_s=time.perf_counter() - start,
            parallel=parallel,
        )
        logger.info(
            "Ran {} tests: {} passed, {} failed, speedup {:.2f}x",
            report.total_tests,
            report.total_passed,
            report.total_failed,
            report.speedup,
        )
        return report
