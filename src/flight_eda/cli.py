"""
CLI entry point for the flight delay report.

Usage:
    flight-eda report           Run the full pipeline and write the HTML report
    flight-eda query <name>     Run one named query
    flight-eda distances        Build and print the airport distance table
    flight-eda fit              Fit delay against distance
    flight-eda config           Show or save the effective configuration
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click
import pandas as pd
from rich.console import Console
from rich.table import Table

from .analysis import DelayDistanceAnalysis
from .backends import DuckDBBackend
from .config import ReportSettings
from .datasets import load_datasets
from .distances import DistanceTableBuilder
from .errors import FlightEDAError
from .loader import DataLoader
from .logging import setup_logging
from .pipeline import FlightReportPipeline
from .queries import FlightQueries


console = Console()


def get_config(config_path: Optional[str] = None) -> ReportSettings:
    """Load or create configuration."""
    if config_path:
        return ReportSettings.from_file(Path(config_path))
    return ReportSettings.default(Path.cwd())


def print_dataframe(df: pd.DataFrame, title: Optional[str] = None, limit: int = 50) -> None:
    """Print a DataFrame as a rich table."""
    table = Table(title=title, show_header=True, header_style="bold")
    for col in df.columns:
        table.add_column(str(col))
    for _, row in df.head(limit).iterrows():
        table.add_row(*["" if pd.isna(v) else str(v) for v in row])
    console.print(table)
    console.print(f"[dim]{len(df)} rows[/dim]")


def open_loaded_backend(config: ReportSettings, flights: bool = True) -> DuckDBBackend:
    """Backend with the configured datasets already loaded."""
    flights_df, airports_df = load_datasets(config.datasets)
    backend = DuckDBBackend(config.duckdb)
    try:
        loader = DataLoader(backend)
        if flights:
            loader.load(flights_df, airports_df)
        else:
            loader.load_airports(airports_df)
    except Exception:
        backend.close()
        raise
    return backend


@click.group()
@click.option("--config", "-c", help="Path to config file")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Override the configured log level",
)
@click.pass_context
def main(ctx, config, log_level):
    """Flight delay exploratory report."""
    ctx.ensure_object(dict)
    settings = get_config(config)
    if log_level:
        settings.logging.level = log_level.upper()
    try:
        setup_logging(settings.logging)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    ctx.obj["config"] = settings


@main.command()
@click.option("--output", "-o", type=click.Path(), help="Where to write the HTML report")
@click.pass_context
def report(ctx, output):
    """Run the full pipeline and write the HTML report."""
    config = ctx.obj["config"]
    if output:
        config.report.output_path = Path(output)

    console.print("[bold blue]Building flight delay report...[/bold blue]")
    result = FlightReportPipeline(config).run()

    if not result.succeeded:
        console.print(f"[red]Error: {result.error}[/red]")
        sys.exit(1)

    summary = result.outputs["summary"]
    console.print(f"Flights: {summary['row_count']:,}")
    print_dataframe(summary["top_routes"], title="Most frequent routes")
    print_dataframe(summary["worst_carriers_departure"], title="Worst departure delay")
    print_dataframe(summary["worst_carriers_arrival"], title="Worst arrival delay")

    console.print(f"[bold green]Report written to {result.outputs['render']}[/bold green]")


@main.command()
@click.argument("name", type=click.Choice(FlightQueries.available()))
@click.pass_context
def query(ctx, name):
    """Run one named query."""
    config = ctx.obj["config"]

    try:
        backend = open_loaded_backend(config)
    except (FlightEDAError, OSError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    try:
        result = FlightQueries(backend, config.queries).run(name)
        print_dataframe(result, title=name)
    except FlightEDAError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    finally:
        backend.close()


@main.command()
@click.option("--limit", "-l", default=50, help="Row limit")
@click.pass_context
def distances(ctx, limit):
    """Build and print the airport distance table."""
    config = ctx.obj["config"]

    try:
        backend = open_loaded_backend(config, flights=False)
    except (FlightEDAError, OSError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    try:
        builder = DistanceTableBuilder(backend)
        rows = builder.build()
        print_dataframe(builder.fetch(), title=f"Distances ({rows:,} pairs)", limit=limit)
    except FlightEDAError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    finally:
        backend.close()


@main.command()
@click.pass_context
def fit(ctx):
    """Fit mean departure delay against distance and print coefficients."""
    config = ctx.obj["config"]

    try:
        backend = open_loaded_backend(config)
    except (FlightEDAError, OSError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    try:
        DistanceTableBuilder(backend).build()
        result = DelayDistanceAnalysis(backend, config.regression).run()
    except FlightEDAError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    finally:
        backend.close()

    if result.fit is None:
        console.print("[yellow]No routes matched the distance table; nothing to fit[/yellow]")
        return

    table = Table(title=f"Fit on {result.fit.n_observations} routes", show_header=True)
    table.add_column("Term")
    table.add_column("Knot", justify="right")
    table.add_column("Coefficient", justify="right")
    table.add_row("bias", "", f"{result.fit.coefficients[0]:.4f}")
    for i, (knot, coef) in enumerate(zip(result.fit.knots, result.fit.coefficients[1:]), 1):
        table.add_row(f"rbf_{i}", f"{knot:.4f}", f"{coef:.4f}")
    console.print(table)
    console.print(f"[dim]bandwidth {result.fit.bandwidth:g}[/dim]")


@main.command("config")
@click.option("--save", "save_path", type=click.Path(), help="Write the configuration to this file")
@click.pass_context
def show_config(ctx, save_path):
    """Show or save the effective configuration."""
    config = ctx.obj["config"]

    if save_path:
        path = Path(save_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        config.save(path)
        console.print(f"Config saved: {path}")
        return

    click.echo(json.dumps(config.to_dict(), indent=2))


if __name__ == "__main__":
    main()
