"""Generation metrics: Prometheus counters and run summaries."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from prometheus_client import Counter, Gauge

from querygen.carrier import CarrierPool

# Queries generated, by scenario
QUERIES_GENERATED = Counter(
    "querygen_queries_generated_total",
    "Total queries generated",
    labelnames=["scenario"],
)

# Failed generation calls, by scenario and error class
GENERATION_ERRORS = Counter(
    "querygen_generation_errors_total",
    "Total failed generation calls",
    labelnames=["scenario", "error"],
)

# Carriers allocated by worker pools
CARRIERS_ALLOCATED = Gauge(
    "querygen_carriers_allocated",
    "Carriers allocated per worker in the last run",
    labelnames=["worker"],
)


class MetricsCollector:
    """Records generation metrics to Prometheus."""

    def record_query(self, scenario: str) -> None:
        QUERIES_GENERATED.labels(scenario=scenario).inc()

    def record_error(self, scenario: str, exc: BaseException) -> None:
        GENERATION_ERRORS.labels(scenario=scenario, error=type(exc).__name__).inc()

    def observe_pool(self, worker: int, pool: CarrierPool) -> None:
        CARRIERS_ALLOCATED.labels(worker=str(worker)).set(pool.allocated)


@dataclass
class RunResults:
    """Aggregated results for one generation run."""

    total_requested: int
    scale: int
    workers: int
    dialect: str
    start_time: datetime
    seed: int | None = None
    end_time: datetime | None = None
    scenario_counts: dict[str, int] = field(default_factory=dict)
    carriers_allocated: int = 0

    @property
    def total_generated(self) -> int:
        """Number of queries generated."""
        return sum(self.scenario_counts.values())

    @property
    def duration_seconds(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()

    @property
    def queries_per_second(self) -> float:
        duration = self.duration_seconds
        return self.total_generated / duration if duration > 0 else 0.0

    def to_summary(self) -> dict:
        """Convert to summary dictionary."""
        return {
            "total_requested": self.total_requested,
            "total_generated": self.total_generated,
            "scale": self.scale,
            "workers": self.workers,
            "dialect": self.dialect,
            "seed": self.seed,
            "duration_seconds": self.duration_seconds,
            "queries_per_second": round(self.queries_per_second, 2),
            "carriers_allocated": self.carriers_allocated,
            "scenarios": dict(self.scenario_counts),
        }


class ResultsExporter:
    """Export run summaries."""

    def __init__(self, output_dir: Path) -> None:
        """Initialize exporter.

        Args:
            output_dir: Directory for output files.
        """
        self.output_dir = output_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def export_json(self, results: RunResults, filename: str) -> Path:
        """Export a run summary to JSON.

        Args:
            results: Run results.
            filename: Output filename (without extension).

        Returns:
            Path to created file.
        """
        output_path = self.output_dir / f"{filename}.json"

        with open(output_path, "w") as f:
            json.dump(
                {
                    "generated_at": datetime.now().isoformat(),
                    "run": results.to_summary(),
                },
                f,
                indent=2,
            )

        return output_path

    @staticmethod
    def format_summary(results: RunResults) -> str:
        """Format a run summary for the console."""
        summary = results.to_summary()
        lines = [
            "=" * 60,
            "QUERY GENERATION SUMMARY",
            "=" * 60,
            f"  Dialect:         {summary['dialect']}",
            f"  Scale:           {summary['scale']}",
            f"  Workers:         {summary['workers']}",
            f"  Queries:         {summary['total_generated']}/{summary['total_requested']}",
            f"  Duration:        {summary['duration_seconds']:.2f}s",
            f"  Queries/sec:     {summary['queries_per_second']:.0f}",
            f"  Carriers:        {summary['carriers_allocated']}",
            "-" * 60,
        ]
        for name, count in summary["scenarios"].items():
            lines.append(f"  {name:<24} {count:>10}")
        lines.append("=" * 60)
        return "\n".join(lines)
