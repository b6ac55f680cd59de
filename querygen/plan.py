"""Backend-neutral description of a generated query."""

from dataclasses import dataclass
from datetime import timedelta

from querygen.interval import Window


@dataclass(frozen=True)
class Select:
    """An aggregated (or plain) output column."""

    field: str
    aggregate: str | None = None


@dataclass(frozen=True)
class Predicate:
    """A single ``field op value`` comparison."""

    field: str
    op: str
    value: str | float | int


@dataclass(frozen=True)
class Filter:
    """Predicates joined by AND or OR."""

    combinator: str
    predicates: tuple[Predicate, ...]

    def __post_init__(self) -> None:
        if self.combinator not in ("AND", "OR"):
            raise ValueError(f"Unsupported combinator: {self.combinator}")


@dataclass(frozen=True)
class QueryPlan:
    """What a scenario asks for, before a dialect renders it.

    An empty ``selects`` means all columns. ``limit_by`` asks for the most
    recent row per distinct value of that field.
    """

    namespace: str
    selects: tuple[Select, ...] = ()
    window: Window | None = None
    bucket: timedelta | None = None
    group_by: str | None = None
    filter: Filter | None = None
    limit_by: str | None = None
