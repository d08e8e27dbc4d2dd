"""State shared between the benchbot commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from bb_common.config import BenchConfig
from bb_common.errors import ConfigError

_console = Console(stderr=True)


@dataclass
class CliState:
    config_path: Optional[Path] = None


def load_config(ctx: typer.Context) -> BenchConfig:
    """Load the configuration once for the invoked command, exiting on failure."""
    state = ctx.find_object(CliState) or CliState()
    try:
        return BenchConfig.load(state.config_path)
    except ConfigError as exc:
        _console.print(f"[red]{exc}[/red] ({exc.context.get('path')})")
        raise typer.Exit(1)
