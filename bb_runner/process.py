"""Run external build and benchmark commands."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence

from bb_common.errors import ExecutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """Exit status and captured output of a finished command."""

    command: tuple[str, ...]
    returncode: int
    output: str
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def tail(self, lines: int = 40) -> str:
        """Last lines of stdout and stderr, for error context."""
        combined = (self.output + "\n" + self.stderr).strip()
        return "\n".join(combined.splitlines()[-lines:])


class ProcessRunner(Protocol):
    def run(
        self,
        command: str,
        args: Sequence[str] = (),
        cwd: Optional[Path] = None,
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        ...


class SubprocessRunner:
    """Blocking process runner backed by subprocess.run."""

    def run(
        self,
        command: str,
        args: Sequence[str] = (),
        cwd: Optional[Path] = None,
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        cmd = [command, *args]
        context = {"command": cmd, "cwd": cwd, "timeout": timeout}
        logger.debug("Running %s in %s", " ".join(cmd), cwd)
        try:
            proc = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise ExecutionError(
                f"{command} exceeded its {timeout}s budget", context=context, cause=exc
            ) from exc
        except OSError as exc:
            raise ExecutionError(
                f"Failed to launch {command}: {exc}", context=context, cause=exc
            ) from exc
        return ProcessResult(
            command=tuple(cmd),
            returncode=proc.returncode,
            output=proc.stdout or "",
            stderr=proc.stderr or "",
        )
