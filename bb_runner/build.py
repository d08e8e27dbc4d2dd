"""Clone, build and list the benchmark suite of a commit."""

from __future__ import annotations

import logging
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from bb_common.config import SuiteSettings
from bb_common.errors import BuildError, CheckoutError, DiscoveryError, ExecutionError
from bb_runner.process import ProcessResult, ProcessRunner

logger = logging.getLogger(__name__)

CHECKOUT_DIRNAME = "checkout"


class BuildStep(str, Enum):
    CHECKOUT = "checkout"
    BUILD = "build"
    DISCOVER = "discover"


@dataclass(frozen=True)
class PreparedSuite:
    """A compiled suite and the benchmarks it can run."""

    checkout_dir: Path
    build_dir: Path
    benchmarks: List[str]


@contextmanager
def job_workspace(root: Optional[Path] = None) -> Iterator[Path]:
    """Yield a fresh temporary directory that is removed on every exit path."""
    with tempfile.TemporaryDirectory(prefix="benchbot-", dir=root, ignore_cleanup_errors=True) as tmp_dir:
        logger.debug("Created workspace %s", tmp_dir)
        yield Path(tmp_dir)


def cargo_feature_args(features: List[str]) -> List[str]:
    args: List[str] = []
    for feature in features:
        args.extend(["--features", feature])
    return args


class BuildOrchestrator:
    """Produce a compiled benchmark suite for a repository commit."""

    def __init__(self, runner: ProcessRunner, settings: SuiteSettings) -> None:
        self._runner = runner
        self._settings = settings

    def prepare(
        self,
        repository: str,
        commit: str,
        workspace: Path,
        on_step: Optional[Callable[[BuildStep], None]] = None,
    ) -> PreparedSuite:
        """
        Clone, check out, build and list the suite inside ``workspace``.

        Args:
            repository: URL of the repository to clone
            commit: Commit to check out
            workspace: Job-owned directory the clone is created in
            on_step: Called before each step starts

        Returns:
            The checkout/build directories and the discovered benchmark names
        """
        notify = on_step or (lambda _step: None)
        checkout_dir = workspace / CHECKOUT_DIRNAME

        notify(BuildStep.CHECKOUT)
        self.checkout(repository, commit, checkout_dir)

        notify(BuildStep.BUILD)
        build_dir = checkout_dir / self._settings.bench_subdir
        self.build(build_dir)

        notify(BuildStep.DISCOVER)
        benchmarks = self.discover(checkout_dir)
        return PreparedSuite(checkout_dir=checkout_dir, build_dir=build_dir, benchmarks=benchmarks)

    def checkout(self, repository: str, commit: str, checkout_dir: Path) -> None:
        logger.info("Cloning %s in %s", repository, checkout_dir)
        context = {"repository": repository, "commit": commit}
        clone = self._git(["clone", repository, str(checkout_dir)], None, context)
        if not clone.ok:
            raise CheckoutError(
                f"git clone failed with return code {clone.returncode}",
                context={**context, "output": clone.tail()},
            )
        switch = self._git(["checkout", commit], checkout_dir, context)
        if not switch.ok:
            raise CheckoutError(
                f"Unknown commit {commit}",
                context={**context, "output": switch.tail()},
            )

    def _git(self, args: List[str], cwd: Optional[Path], context: dict) -> ProcessResult:
        try:
            return self._runner.run(
                "git", args, cwd=cwd, timeout=self._settings.build_timeout_seconds
            )
        except ExecutionError as exc:
            raise CheckoutError(str(exc), context={**context, **exc.context}, cause=exc) from exc

    def build(self, build_dir: Path) -> None:
        logger.info("Building %s", build_dir)
        args = ["build", "--release", *cargo_feature_args(self._settings.features)]
        try:
            result = self._runner.run(
                "cargo", args, cwd=build_dir, timeout=self._settings.build_timeout_seconds
            )
        except ExecutionError as exc:
            raise BuildError(str(exc), context=exc.context, cause=exc) from exc
        logger.info("Build ended with status: %s", result.returncode)
        if not result.ok:
            raise BuildError(
                f"cargo build failed with return code {result.returncode}",
                context={"build_dir": build_dir, "returncode": result.returncode, "output": result.tail()},
            )

    def discover(self, checkout_dir: Path) -> List[str]:
        exec_dir = checkout_dir / "target" / "release"
        binary = exec_dir / self._settings.binary
        try:
            result = self._runner.run(
                str(binary), ["--list"], cwd=exec_dir, timeout=self._settings.run_timeout_seconds
            )
        except ExecutionError as exc:
            raise DiscoveryError(str(exc), context=exc.context, cause=exc) from exc
        if not result.ok:
            raise DiscoveryError(
                f"{self._settings.binary} --list failed with return code {result.returncode}",
                context={"binary": binary, "output": result.tail()},
            )
        names = result.output.split()
        if not names:
            raise DiscoveryError("No benchmarks listed", context={"binary": binary})
        return names
