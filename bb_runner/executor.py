"""Run one benchmark program of a compiled suite."""

from __future__ import annotations

import logging
from pathlib import Path

from bb_common.config import SuiteSettings
from bb_common.errors import ExecutionError, ParseError
from bb_runner.build import PreparedSuite, cargo_feature_args
from bb_runner.process import ProcessRunner

logger = logging.getLogger(__name__)


def result_path(build_dir: Path, name: str) -> Path:
    return build_dir / f"{name}.csv"


class BenchmarkExecutor:
    """Run benchmarks through ``cargo run`` with the options used to build them."""

    def __init__(self, runner: ProcessRunner, settings: SuiteSettings) -> None:
        self._runner = runner
        self._settings = settings

    def run(self, suite: PreparedSuite, name: str) -> Path:
        """Run ``name`` and return the path of the result file it wrote."""
        args = [
            "run",
            "--release",
            *cargo_feature_args(self._settings.features),
            "--",
            "--bench",
            "--example",
            name,
        ]
        result = self._runner.run(
            "cargo", args, cwd=suite.build_dir, timeout=self._settings.run_timeout_seconds
        )
        logger.info("Exit status for '%s' benchmark: %s", name, result.returncode)
        if not result.ok:
            raise ExecutionError(
                f"Benchmark '{name}' exited with status {result.returncode}",
                context={"benchmark": name, "returncode": result.returncode, "output": result.tail()},
            )

        path = result_path(suite.build_dir, name)
        if not path.is_file():
            raise ParseError(
                f"Benchmark '{name}' did not produce a result file",
                context={"benchmark": name, "path": path},
            )
        return path
