# -*- coding: utf-8 -*-
"""
carbontrend - command line for the emissions trend engine

Reads an entity (or a bare series) from a JSON or YAML file and prints the
selected trend method, the projection and the Paris-alignment status.

Accepted input shapes:
    - an entity: ``{"wikidataId", "name", "reportingPeriods": [...], "baseYear": {"year"}}``
    - a list of entities (batch, with a summary)
    - a list of reporting periods: ``[{"endDate", "emissions": {...}}]``
    - a list of points: ``[{"year", "value"}]`` or ``{"points": [...]}``
"""

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, List, Optional

import typer
import yaml
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from carbontrend._version import __version__
from carbontrend.config import get_config
from carbontrend.exceptions import CarbonTrendException, InvalidInputError
from carbontrend.models import BudgetStatus
from carbontrend.service import EntityReport, TrendEngineService

app = typer.Typer(
    name="carbontrend",
    help="Emissions trend analysis and Paris-alignment projections",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()

PROJECTION_ROWS = 8


# ---------------------------------------------------------------------------
# Input loading
# ---------------------------------------------------------------------------


def load_input(path: Path) -> Any:
    """Parse a JSON or YAML input file.

    Raises:
        InvalidInputError: If the file is missing, has an unsupported
            extension or cannot be parsed.
    """
    if not path.exists():
        raise InvalidInputError(f"Input file not found: {path}", source=str(path))
    if not path.is_file():
        raise InvalidInputError(f"Input is not a file: {path}", source=str(path))

    suffix = path.suffix.lower()
    try:
        with open(path, encoding="utf-8") as f:
            if suffix == ".json":
                return json.load(f)
            if suffix in (".yaml", ".yml"):
                return yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise InvalidInputError(
            f"Could not parse {path.name}: {exc}", source=str(path),
        ) from exc
    except OSError as exc:
        raise InvalidInputError(
            f"Could not read {path.name}: {exc}", source=str(path),
        ) from exc
    raise InvalidInputError(
        f"Unsupported input format: {suffix or '(none)'}; use .json or .yaml",
        source=str(path),
    )


def _is_entity(item: Any) -> bool:
    return isinstance(item, dict) and "reportingPeriods" in item


def _is_period(item: Any) -> bool:
    return isinstance(item, dict) and "endDate" in item


def _reports(
    service: TrendEngineService,
    data: Any,
    base_year: Optional[int],
    source: str,
) -> List[EntityReport]:
    """Dispatch the parsed input to the matching service call."""
    if isinstance(data, dict) and "points" in data:
        return [service.report_series(data["points"], base_year, data.get("name", "series"))]

    if _is_entity(data):
        entities = [data]
    elif isinstance(data, list) and data and all(_is_entity(item) for item in data):
        entities = data
    elif isinstance(data, list) and data and all(_is_period(item) for item in data):
        entities = [{"name": Path(source).stem, "reportingPeriods": data}]
    elif isinstance(data, list):
        return [service.report_series(data, base_year, Path(source).stem)]
    else:
        raise InvalidInputError(
            "Input must be an entity, a list of entities, reporting periods or points",
            source=source,
        )

    if base_year is not None:
        entities = [{**raw, "baseYear": {"year": base_year}} for raw in entities]
    if len(entities) == 1:
        return [service.report_entity(entities[0])]
    return service.analyze_batch(entities)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _fmt(value: Optional[float], spec: str = ",.1f") -> str:
    return "-" if value is None else format(value, spec)


def _render_report(report: EntityReport) -> None:
    analysis = report.analysis
    title = report.entity_name or report.entity_id or "Series"

    table = Table(box=box.ROUNDED, show_header=False, title=f"[bold cyan]{title}[/bold cyan]")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Method", analysis.method.value)
    table.add_row("Data points", str(analysis.data_points))
    table.add_row("Base year", str(analysis.base_year) if analysis.base_year else "-")
    table.add_row("Missing years", str(analysis.missing_years))
    table.add_row("Direction", analysis.trend_direction.value)
    table.add_row("Slope (tCO2e/yr)", _fmt(analysis.trend_slope))
    table.add_row("Change per year", f"{analysis.yearly_percentage_change:+.1f}%")
    table.add_row("R² linear / exponential", f"{analysis.r2_linear:.2f} / {analysis.r2_exponential:.2f}")
    table.add_row("Recent stability", f"{analysis.recent_stability * 100:.1f}%")
    table.add_row("Unusual points", str(len(analysis.unusual_points_details)))
    console.print(table)
    console.print(f"[dim]{analysis.explanation}[/dim]\n")

    if report.projection:
        projection = Table(box=box.SIMPLE, title=f"Projection (current year {report.current_year})")
        projection.add_column("Year", justify="right")
        projection.add_column("Approximated", justify="right")
        projection.add_column("Trend", justify="right")
        projection.add_column("Carbon Law", justify="right")
        rows = report.projection
        shown = rows if len(rows) <= PROJECTION_ROWS else rows[:PROJECTION_ROWS - 1] + rows[-1:]
        for point in shown:
            projection.add_row(
                str(point.year), _fmt(point.approximated), _fmt(point.trend), _fmt(point.carbon_law),
            )
        console.print(projection)
    else:
        console.print("[yellow]No projection: not enough data for a trend[/yellow]\n")

    paris = report.paris
    if paris.status == BudgetStatus.UNKNOWN:
        body = f"[yellow]Unknown[/yellow]: no positive emissions estimate for {paris.reference_year}"
        style = "yellow"
    else:
        verdict = "[green]Meets Paris[/green]" if paris.meets_paris else "[red]Exceeds budget[/red]"
        body = (
            f"{verdict}\n"
            f"{paris.reference_year} emissions: {_fmt(paris.reference_emissions)} tCO2e\n"
            f"Cumulative {paris.reference_year}-{paris.horizon_year}: "
            f"{_fmt(paris.cumulative_projected)} vs budget {_fmt(paris.cumulative_budget)} tCO2e\n"
            f"Difference: {_fmt(paris.budget_tonnes, '+,.0f')} tCO2e ({_fmt(paris.budget_percent, '+.1f')}%)"
        )
        style = "green" if paris.meets_paris else "red"
    console.print(Panel(body, title="Carbon budget", border_style=style))


def _render_summary(service: TrendEngineService, reports: List[EntityReport]) -> None:
    summary = service.summarize(reports)
    table = Table(box=box.ROUNDED, title="[bold]Batch summary[/bold]")
    table.add_column("Method", style="cyan")
    table.add_column("Entities", justify="right")
    for method, count in sorted(summary.method_counts.items()):
        table.add_row(method, str(count))
    console.print(table)
    console.print(
        f"Entities: {summary.entity_count}  "
        f"avg points: {summary.avg_data_points:.1f}  "
        f"avg missing years: {summary.avg_missing_years:.1f}  "
        f"with unusual points: {summary.unusual_points_percentage:.0f}%"
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def analyze(
    input_file: Path = typer.Argument(..., help="Input data file (JSON/YAML)"),
    base_year: Optional[int] = typer.Option(
        None, "--base-year", "-b", help="Override the entity base year"
    ),
    current_year: Optional[int] = typer.Option(
        None, "--current-year", "-c", help="Year treated as now (default: this year)"
    ),
    horizon: Optional[int] = typer.Option(
        None, "--horizon", help="Last projected year (<= 2050)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the reports as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
):
    """
    Analyse emissions, select a trend method and evaluate the carbon budget

    Examples:
        carbontrend analyze company.json
        carbontrend analyze municipality.yaml --base-year 2015 --current-year 2024
        carbontrend analyze companies.json --json
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    try:
        config = get_config()
        if horizon is not None:
            config = dataclasses.replace(config, projection_end_year=horizon)
            config.validate()
        service = TrendEngineService(config=config, current_year=current_year)
        reports = _reports(service, load_input(input_file), base_year, str(input_file))
    except CarbonTrendException as exc:
        console.print(f"[red]Error: {exc.message}[/red]")
        raise typer.Exit(1)
    except ValueError as exc:
        console.print(f"[red]Invalid input: {exc}[/red]")
        raise typer.Exit(1)

    if as_json:
        payload = [report.model_dump(mode="json") for report in reports]
        typer.echo(json.dumps(payload[0] if len(payload) == 1 else payload, indent=2))
        return

    for report in reports:
        _render_report(report)
    if len(reports) > 1:
        _render_summary(service, reports)


@app.command()
def version():
    """Show carbontrend version"""
    console.print(f"[bold green]carbontrend v{__version__}[/bold green]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
