"""Unit tests for the parallel timing experiment."""

from datetime import UTC, datetime, timedelta

import pytest

from src.debugkit.parallel.timing import (
    ExecutionMode,
    analyze_timing,
    classify_duration,
    record_start,
)

START = datetime(2025, 8, 4, 12, 0, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    "seconds, mode",
    [
        (10, ExecutionMode.PARALLEL),
        (15, ExecutionMode.PARALLEL),
        (16, ExecutionMode.INCONCLUSIVE),
        (24, ExecutionMode.INCONCLUSIVE),
        (25, ExecutionMode.SEQUENTIAL),
        (30, ExecutionMode.SEQUENTIAL),
        (40, ExecutionMode.SEQUENTIAL),
        (41, ExecutionMode.INCONCLUSIVE),
    ],
)
def test_classify_duration(seconds, mode):
    assert classify_duration(seconds) is mode


class TestTimingFile:
    def test_record_then_analyze(self, tmp_path):
        path = tmp_path / "nested" / "start.txt"
        record_start(path, now=START)
        assert path.exists()

        analysis = analyze_timing(path, now=START + timedelta(seconds=11, milliseconds=400))

        assert analysis.duration_seconds == 11
        assert analysis.mode is ExecutionMode.PARALLEL
        assert analysis.start == START
        assert not path.exists()

    def test_sequential_run(self, tmp_path):
        path = tmp_path / "start.txt"
        record_start(path, now=START)
        assert analyze_timing(path, now=START + timedelta(seconds=31)).mode is ExecutionMode.SEQUENTIAL

    def test_naive_timestamp_is_treated_as_utc(self, tmp_path):
        path = tmp_path / "start.txt"
        path.write_text("2025-08-04T12:00:00")
        analysis = analyze_timing(path, now=START + timedelta(seconds=20))
        assert analysis.duration_seconds == 20
        assert analysis.mode is ExecutionMode.INCONCLUSIVE

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            analyze_timing(tmp_path / "absent.txt")

    @pytest.mark.parametrize(
        "elapsed_ms, expected_seconds, mode",
        [
            (24_500, 25, ExecutionMode.SEQUENTIAL),
            (40_500, 41, ExecutionMode.INCONCLUSIVE),
            (15_500, 16, ExecutionMode.INCONCLUSIVE),
            (14_499, 14, ExecutionMode.PARALLEL),
        ],
    )
    def test_half_seconds_round_up(self, tmp_path, elapsed_ms, expected_seconds, mode):
        path = tmp_path / "start.txt"
        record_start(path, now=START)
        analysis = analyze_timing(path, now=START + timedelta(milliseconds=elapsed_ms))
        assert analysis.duration_seconds == expected_seconds
        assert analysis.mode is mode
