"""Smoke checks run by ``debugkit test``.

Each check returns a :class:`CheckResult`; the CLI renders them and maps any
failure to exit code 1.
"""

from .results import CheckFailed, CheckReport, CheckResult, run_check

__all__ = ["CheckFailed", "CheckReport", "CheckResult", "run_check"]
