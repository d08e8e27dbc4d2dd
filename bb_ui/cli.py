"""
Command-line interface for benchbot.

Publishes benchmark jobs, runs the worker and writes the credentials file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from bb_common.config import DEFAULT_CONFIG_NAME, BenchConfig, default_config_dir
from bb_common.errors import BBError
from bb_common.logging import configure_logging
from bb_common.models import JobRequest
from bb_controller.channel import MessageChannel
from bb_controller.pipeline import JobPipeline
from bb_ui.commands.query import create_query_app
from bb_ui.context import CliState, load_config

logger = logging.getLogger(__name__)
console = Console(stderr=True)

app = typer.Typer(help="Dimforge benchmark tool.", no_args_is_help=True)
app.add_typer(create_query_app(), name="query")


@app.callback()
def entry(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-f",
        help="Path to the JSON configuration file.",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    """Global options shared by every command."""
    configure_logging(debug=debug, force=True)
    ctx.obj = CliState(config_path=config)


@app.command("send")
def send(
    ctx: typer.Context,
    repository: str = typer.Option(..., "--repository", "-r", help="The repository to clone."),
    branch: str = typer.Option(..., "--branch", "-b", help="The branch of the commit to compile."),
    commit: str = typer.Option(..., "--commit", "-c", help="The commit to compile."),
) -> None:
    """Send a message to start a benchmark."""
    cfg = load_config(ctx)
    channel = MessageChannel(cfg.rabbitmq_uri)
    try:
        channel.publish(JobRequest(repository=repository, branch=branch, commit=commit))
    except BBError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    finally:
        channel.close()
    console.print("Bench message sent.")


@app.command("listen")
def listen(ctx: typer.Context) -> None:
    """Listen to incoming benchmark messages."""
    cfg = load_config(ctx)
    pipeline = JobPipeline.from_config(cfg)
    try:
        pipeline.serve()
    except BBError as exc:
        logger.error("Worker stopped: %s", exc)
        raise typer.Exit(1)
    except KeyboardInterrupt:
        logger.info("Worker interrupted")
    finally:
        pipeline.close()


@app.command("configure")
def configure() -> None:
    """Configure credentials."""
    bencher_uri = typer.prompt("MongoDB bencher uri")
    server_uri = typer.prompt("MongoDB server uri")
    database = typer.prompt("MongoDB database")
    rabbitmq_uri = typer.prompt("Rabbitmq uri")
    output_dir = typer.prompt(
        "Save configuration to folder", default=str(default_config_dir())
    )

    cfg = BenchConfig(
        mongodb_bencher_uri=bencher_uri,
        mongodb_server_uri=server_uri,
        rabbitmq_uri=rabbitmq_uri,
        mongodb_db=database,
    )
    target = Path(output_dir).expanduser() / DEFAULT_CONFIG_NAME
    try:
        cfg.save(target)
    except OSError as exc:
        console.print(f"[red]Could not write {target}: {exc}[/red]")
        raise typer.Exit(1)
    console.print(f"Configuration successfully saved to '{target}'.")


def main() -> None:
    """Invoke the benchbot Typer application."""
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
