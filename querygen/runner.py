"""Run driver: generates a batch of queries across worker threads."""

import json
import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime

from querygen.carrier import QueryCarrier
from querygen.generator import QueryGenerator
from querygen.metrics import MetricsCollector, RunResults

logger = logging.getLogger(__name__)

Sink = Callable[[str], None]


def serialize(carrier: QueryCarrier) -> str:
    """Serialize a carrier as one JSON line."""
    return json.dumps(carrier.to_dict())


@dataclass
class RunConfig:
    """Generation run configuration."""

    count: int = 1000
    scale: int = 1
    workers: int = 1
    seed: int | None = None
    scenario: str | None = None

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"count must be >= 0, got {self.count}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")


class QueryRunner:
    """Drives a generator for a fixed number of queries.

    Worker ``w`` of ``W`` generates ordinals ``w, w + W, w + 2W, ...`` with its
    own forked generator, so the run still visits the scenario catalog round
    robin. Output order across workers is not defined.
    """

    def __init__(
        self,
        generator: QueryGenerator,
        config: RunConfig,
        sink: Sink,
        metrics: MetricsCollector | None = None,
    ) -> None:
        """Initialize runner.

        Args:
            generator: Template generator; each worker forks its own.
            config: Run configuration.
            sink: Receives one serialized query per call.
            metrics: Optional Prometheus collector.
        """
        self.generator = generator
        self.config = config
        self.sink = sink
        self.metrics = metrics or MetricsCollector()
        self._sink_lock = threading.Lock()
        self._stop = threading.Event()

    def _worker_seed(self, worker: int) -> int | None:
        if self.config.seed is None:
            return None
        return self.config.seed + worker

    def _worker(self, worker: int) -> tuple[dict[str, int], int]:
        """Generate this worker's share of the run.

        Returns:
            Per-scenario counts and the number of carriers allocated.
        """
        generator = self.generator.fork(self._worker_seed(worker))
        counts: dict[str, int] = {}
        scale = self.config.scale
        name = None
        if self.config.scenario:
            name = generator.registry.lookup(self.config.scenario).name

        for ordinal in range(worker, self.config.count, self.config.workers):
            if self._stop.is_set():
                break

            scenario = name or generator.scenario_for(ordinal)
            try:
                if name:
                    carrier = generator.generate_named(name, scale)
                else:
                    carrier = generator.generate(ordinal, scale)
            except Exception as e:
                self.metrics.record_error(scenario, e)
                self._stop.set()
                raise

            line = serialize(carrier)
            generator.release(carrier)

            with self._sink_lock:
                self.sink(line)

            counts[scenario] = counts.get(scenario, 0) + 1
            self.metrics.record_query(scenario)

        self.metrics.observe_pool(worker, generator.pool)
        return counts, generator.pool.allocated

    def run(self) -> RunResults:
        """Generate every query of the run.

        Returns:
            Run results with per-scenario counts.

        Raises:
            QueryGenError: The first error raised by any worker.
        """
        results = RunResults(
            total_requested=self.config.count,
            scale=self.config.scale,
            workers=self.config.workers,
            dialect=self.generator.dialect.name,
            seed=self.config.seed,
            start_time=datetime.now(),
        )
        self._stop.clear()

        logger.info(
            "Generating %d queries (scale=%d, workers=%d, dialect=%s)",
            self.config.count,
            self.config.scale,
            self.config.workers,
            results.dialect,
        )

        if self.config.workers == 1:
            outcomes = [self._worker(0)]
        else:
            with ThreadPoolExecutor(
                max_workers=self.config.workers, thread_name_prefix="querygen"
            ) as executor:
                futures = [
                    executor.submit(self._worker, w) for w in range(self.config.workers)
                ]
                outcomes = [f.result() for f in futures]

        # Merge in catalog order so summaries read the same for every run
        merged: dict[str, int] = {}
        for counts, allocated in outcomes:
            results.carriers_allocated += allocated
            for scenario, count in counts.items():
                merged[scenario] = merged.get(scenario, 0) + count
        order = self.generator.list_scenarios()
        results.scenario_counts = {n: merged[n] for n in order if n in merged}

        results.end_time = datetime.now()
        logger.info(
            "Generated %d queries in %.2fs",
            results.total_generated,
            results.duration_seconds,
        )
        return results
