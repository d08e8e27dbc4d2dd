"""Build, run and parse benchmark suites."""

from bb_runner.api import BenchmarkExecutor, BuildOrchestrator, SubprocessRunner

__all__ = ["BenchmarkExecutor", "BuildOrchestrator", "SubprocessRunner"]
