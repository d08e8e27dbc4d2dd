from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from bb_common.errors import BBError
from bb_controller.query import compare_runs, list_values, to_epoch_millis
from bb_controller.store import ResultStore
from bb_ui.context import load_config


def _json_value(value: Any) -> Any:
    # Dates print as epoch milliseconds so they can be passed back to `compare`.
    if isinstance(value, datetime):
        return to_epoch_millis(value)
    return str(value)


def create_query_app() -> typer.Typer:
    """Build the query Typer app over the read-only result store."""
    app = typer.Typer(help="Query stored benchmark results.", no_args_is_help=True)
    console = Console()

    @app.command("list")
    def query_list(
        ctx: typer.Context,
        field: str = typer.Argument(..., help="Document field, e.g. key.date or context.name."),
        project: Optional[str] = typer.Option(None, "--project", "-p", help="Result collection."),
    ) -> None:
        """Print the distinct values of a field as JSON."""
        cfg = load_config(ctx)
        store = ResultStore.from_config(cfg, write=False)
        try:
            values = list_values(store, project or cfg.suite.project, field)
        except BBError as exc:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(1)
        finally:
            store.close()
        typer.echo(json.dumps(values, default=_json_value))

    @app.command("compare")
    def query_compare(
        ctx: typer.Context,
        date1: int = typer.Argument(..., help="First run date, epoch milliseconds."),
        date2: int = typer.Argument(..., help="Second run date, epoch milliseconds."),
        project: Optional[str] = typer.Option(None, "--project", "-p", help="Result collection."),
        other_engines: bool = typer.Option(False, "--other-engines", help="Include every backend."),
        as_json: bool = typer.Option(False, "--json", help="Print the raw comparison document."),
    ) -> None:
        """Compare the records of two runs."""
        cfg = load_config(ctx)
        store = ResultStore.from_config(cfg, write=False)
        try:
            comparison = compare_runs(
                store,
                project or cfg.suite.project,
                date1,
                date2,
                other_engines=other_engines,
                backend=cfg.suite.reference_backend,
            )
        except BBError as exc:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(1)
        finally:
            store.close()

        if as_json:
            typer.echo(json.dumps(comparison.to_dict()))
            return

        table = Table(title="Run comparison", show_header=True, header_style="bold magenta")
        table.add_column("Benchmark", style="cyan")
        table.add_column("Backend")
        table.add_column("Mean 1 (ms)", justify="right")
        table.add_column("Mean 2 (ms)", justify="right")

        def means(entries):
            return {
                (e.context.name, e.context.backend): sum(e.timings) / len(e.timings)
                for e in entries
                if e.timings
            }

        first, second = means(comparison.entries1), means(comparison.entries2)
        for name, backend in sorted(set(first) | set(second)):
            left = first.get((name, backend))
            right = second.get((name, backend))
            table.add_row(
                name,
                backend,
                f"{left:.3f}" if left is not None else "-",
                f"{right:.3f}" if right is not None else "-",
            )
        console.print(table)

    return app
