"""Query generator: dispatches scenarios into pooled carriers."""

import logging
import random
from datetime import datetime

from dialects import BaseDialect, IoqlDialect
from querygen.carrier import CarrierPool, QueryCarrier
from querygen.errors import InvalidScale
from querygen.interval import TimeInterval
from querygen.registry import ScenarioEntry, ScenarioRegistry
from querygen.scenarios import DEVOPS_SCENARIOS, MEASUREMENTS, ScenarioContext

logger = logging.getLogger(__name__)


class QueryGenerator:
    """Generates devops queries over a fixed benchmark interval.

    A generator owns its random source and carrier pool and must not be shared
    between threads. Use fork() to give each worker its own generator; forks
    share the interval, registry, dialect and measurement catalog, all of which
    are read-only.
    """

    def __init__(
        self,
        start: datetime,
        end: datetime,
        dialect: BaseDialect | None = None,
        seed: int | None = None,
        registry: ScenarioRegistry = DEVOPS_SCENARIOS,
        measurements: tuple[str, ...] = MEASUREMENTS,
    ) -> None:
        """Initialize query generator.

        Args:
            start: Benchmark interval start.
            end: Benchmark interval end (exclusive).
            dialect: Rendering backend. Defaults to IOQL.
            seed: Random seed. None seeds from the operating system.
            registry: Scenario catalog.
            measurements: Measurement catalog for last-value lookups.

        Raises:
            InvalidInterval: If start is not before end.
        """
        self.interval = TimeInterval(start, end)
        self.dialect = dialect or IoqlDialect()
        self.registry = registry.freeze()
        self.measurements = tuple(measurements)
        self.seed = seed
        self.rng = random.Random(seed)
        self.pool = CarrierPool()
        self._ctx = ScenarioContext(
            interval=self.interval,
            rng=self.rng,
            dialect=self.dialect,
            measurements=self.measurements,
        )

    def fork(self, seed: int | None = None) -> "QueryGenerator":
        """Create a generator with its own random source and pool."""
        return QueryGenerator(
            self.interval.start,
            self.interval.end,
            dialect=self.dialect,
            seed=seed,
            registry=self.registry,
            measurements=self.measurements,
        )

    def list_scenarios(self) -> list[str]:
        """Scenario names in dispatch order."""
        return self.registry.names()

    def scenario_for(self, ordinal: int) -> str:
        """Name of the scenario the i-th query of a run uses."""
        return self.registry.by_ordinal(ordinal).name

    def generate(self, ordinal: int, scale: int) -> QueryCarrier:
        """Generate the i-th query of a run, cycling through the catalog.

        Args:
            ordinal: Position of the query in the run.
            scale: Fleet size.

        Returns:
            A filled carrier. Pass it to release() once consumed.
        """
        return self._run(self.registry.by_ordinal(ordinal), scale)

    def generate_named(self, name: str, scale: int) -> QueryCarrier:
        """Generate one query from the named scenario.

        Raises:
            UnknownScenario: If no scenario has that name.
        """
        return self._run(self.registry.lookup(name), scale)

    def release(self, carrier: QueryCarrier) -> None:
        """Return a consumed carrier for reuse."""
        self.pool.release(carrier)

    def _run(self, entry: ScenarioEntry, scale: int) -> QueryCarrier:
        if isinstance(scale, bool) or not isinstance(scale, int) or scale < 1:
            raise InvalidScale(f"Scale must be a positive integer, got {scale!r}")

        carrier = self.pool.acquire()
        try:
            entry.fn(self._ctx, carrier, scale)
        except Exception:
            carrier.reset()
            self.pool.release(carrier)
            logger.debug("Scenario %s failed at scale %d", entry.name, scale)
            raise

        return carrier
