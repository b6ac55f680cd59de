"""Errors raised by the query generation engine."""


class QueryGenError(Exception):
    """Base class for query generation errors."""


class InvalidInterval(QueryGenError, ValueError):
    """Benchmark interval start is not strictly before its end."""


class InvalidDuration(QueryGenError, ValueError):
    """Requested window does not fit inside the benchmark interval."""


class InvalidSampleSize(QueryGenError, ValueError):
    """Host sample size is outside [1, fleet size]."""


class InsufficientFleetSize(QueryGenError, ValueError):
    """Scenario needs more distinct hosts than the fleet provides."""

    def __init__(self, scenario: str, needed: int, scale: int) -> None:
        super().__init__(
            f"Scenario {scenario!r} needs {needed} distinct hosts, "
            f"but scale is {scale}"
        )
        self.scenario = scenario
        self.needed = needed
        self.scale = scale


class InvalidScale(QueryGenError, ValueError):
    """Scale (fleet size) is not a positive integer."""


class UnknownScenario(QueryGenError, KeyError):
    """No registered scenario matches the requested name."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "unknown scenario"


class RegistryFrozen(QueryGenError, RuntimeError):
    """Scenario registration attempted after the registry was frozen."""
