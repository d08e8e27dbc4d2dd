"""Collect platform details recorded alongside each result."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from bb_common.errors import ExecutionError
from bb_common.models import PlatformInfo
from bb_runner.process import ProcessRunner

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"


def parse_rustc_version(output: str) -> str:
    """Extract ``1.70.0`` from ``rustc 1.70.0 (90c541806 2023-05-31)``."""
    parts = output.split()
    if len(parts) >= 2 and parts[0] == "rustc":
        return parts[1]
    return UNKNOWN


def collect_platform_info(runner: ProcessRunner, cwd: Optional[Path] = None) -> PlatformInfo:
    """Query the compiler in ``cwd`` so toolchain overrides of the checkout apply."""
    try:
        result = runner.run("rustc", ["--version"], cwd=cwd, timeout=60)
    except ExecutionError as exc:
        logger.warning("Could not determine compiler version: %s", exc)
        return PlatformInfo(compiler=UNKNOWN)
    if not result.ok:
        return PlatformInfo(compiler=UNKNOWN)
    return PlatformInfo(compiler=parse_rustc_version(result.output))
