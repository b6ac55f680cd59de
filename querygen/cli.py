"""CLI for the devops query generator."""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

import click

from dialects import DIALECTS, get_dialect
from querygen.config import settings
from querygen.errors import QueryGenError
from querygen.generator import QueryGenerator
from querygen.metrics import ResultsExporter
from querygen.runner import QueryRunner, RunConfig
from querygen.scenarios import DEVOPS_SCENARIOS

logger = logging.getLogger(__name__)


def _parse_time(
    ctx: click.Context, param: click.Parameter, value: str | datetime
) -> datetime:
    """Parse an RFC3339 timestamp; naive values are UTC."""
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise click.BadParameter(f"not an RFC3339 timestamp: {value}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _build_generator(
    start: datetime, end: datetime, dialect: str, seed: int | None
) -> QueryGenerator:
    try:
        return QueryGenerator(start, end, dialect=get_dialect(dialect), seed=seed)
    except QueryGenError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option(
    "--log-level",
    default=settings.log_level,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level",
)
def cli(log_level: str) -> None:
    """Devops query workload generator."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.log_format,
        stream=sys.stderr,
    )


@cli.command()
@click.option("--count", default=settings.count, type=int, help="Number of queries")
@click.option("--scale", default=settings.scale, type=int, help="Number of hosts in the fleet")
@click.option("--workers", default=settings.workers, type=int, help="Worker threads")
@click.option("--seed", default=settings.seed, type=int, help="Random seed (default: random)")
@click.option(
    "--start",
    default=settings.start.isoformat(),
    callback=_parse_time,
    help="Benchmark interval start (RFC3339)",
)
@click.option(
    "--end",
    default=settings.end.isoformat(),
    callback=_parse_time,
    help="Benchmark interval end (RFC3339)",
)
@click.option(
    "--dialect",
    default=settings.dialect,
    type=click.Choice(sorted(DIALECTS)),
    help="Query dialect",
)
@click.option("--scenario", default=None, help="Only generate this scenario")
@click.option(
    "--output",
    default="-",
    type=click.File("w"),
    help="Output file for JSON lines (default: stdout)",
)
@click.option(
    "--summary-dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to write a JSON run summary to",
)
def generate(
    count: int,
    scale: int,
    workers: int,
    seed: int | None,
    start: datetime,
    end: datetime,
    dialect: str,
    scenario: str | None,
    output,
    summary_dir: Path | None,
) -> None:
    """Generate queries as JSON lines."""
    generator = _build_generator(start, end, dialect, seed)
    logger.info("Writing queries to %s", getattr(output, "name", output))

    try:
        config = RunConfig(
            count=count, scale=scale, workers=workers, seed=seed, scenario=scenario
        )
        results = QueryRunner(
            generator, config, sink=lambda line: output.write(line + "\n")
        ).run()
    except (QueryGenError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    if summary_dir:
        exporter = ResultsExporter(summary_dir)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = exporter.export_json(results, f"querygen_{timestamp}")
        click.echo(f"Summary written to {path}", err=True)

    click.echo(ResultsExporter.format_summary(results), err=True)


@cli.command()
def scenarios() -> None:
    """List scenarios in dispatch order."""
    for i, name in enumerate(DEVOPS_SCENARIOS.names()):
        click.echo(f"{i:>3}  {name}")


@cli.command()
@click.argument("name")
@click.option("--scale", default=settings.scale, type=int, help="Number of hosts in the fleet")
@click.option("--seed", default=settings.seed, type=int, help="Random seed (default: random)")
@click.option(
    "--dialect",
    default=settings.dialect,
    type=click.Choice(sorted(DIALECTS)),
    help="Query dialect",
)
def show(name: str, scale: int, seed: int | None, dialect: str) -> None:
    """Print one query from a scenario."""
    generator = _build_generator(settings.start, settings.end, dialect, seed)

    try:
        carrier = generator.generate_named(name, scale)
    except QueryGenError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Label:       {carrier.human_label}")
    click.echo(f"Description: {carrier.human_description}")
    click.echo(f"Namespace:   {carrier.namespace}")
    click.echo(f"Field:       {carrier.field}")
    click.echo()
    click.echo(carrier.query)
    generator.release(carrier)


if __name__ == "__main__":
    cli()
