from .runner import TEST_SUITES, ParallelRunner, RunReport, SuiteResult, TaskResult, TestSuite
from .timing import ExecutionMode, TimingAnalysis, analyze_timing, classify_duration, record_start

__all__ = [
    "TEST_SUITES",
    "ExecutionMode",
    "ParallelRunner",
    "RunReport",
    "SuiteResult",
    "TaskResult",
    "TestSuite",
    "TimingAnalysis",
    "analyze_timing",
    "classify_duration",
    "record_start",
]
