"""Public API surface for bb_runner."""

from bb_runner.build import BuildOrchestrator, BuildStep, PreparedSuite, job_workspace
from bb_runner.executor import BenchmarkExecutor, result_path
from bb_runner.parser import build_records, parse_results
from bb_runner.process import ProcessResult, ProcessRunner, SubprocessRunner
from bb_runner.system_info import collect_platform_info

__all__ = [
    "BenchmarkExecutor",
    "BuildOrchestrator",
    "BuildStep",
    "PreparedSuite",
    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",
    "build_records",
    "collect_platform_info",
    "job_workspace",
    "parse_results",
    "result_path",
]
