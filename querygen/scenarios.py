"""Devops scenario catalog.

Each scenario fills a carrier in place from ``(ctx, carrier, scale)``. The
only state a scenario touches besides the carrier is the random source in its
context, so the same seed replays the same queries.
"""

import random
from dataclasses import dataclass
from datetime import timedelta

from dialects.base import BaseDialect
from querygen.carrier import WILDCARD, QueryCarrier
from querygen.errors import InsufficientFleetSize
from querygen.fleet import random_host, sample_host_names
from querygen.interval import TimeInterval
from querygen.plan import Filter, Predicate, QueryPlan, Select
from querygen.registry import ScenarioFn, ScenarioRegistry

# Measurements written by the devops data generator
MEASUREMENTS: tuple[str, ...] = (
    "cpu",
    "diskio",
    "disk",
    "kernel",
    "mem",
    "net",
    "nginx",
    "postgresl",
    "redis",
)

CPU_FIELDS: tuple[str, ...] = (
    "usage_user",
    "usage_system",
    "usage_idle",
    "usage_nice",
    "usage_iowait",
    "usage_irq",
    "usage_softirq",
    "usage_steal",
    "usage_guest",
    "usage_guest_nice",
)

HOST_FIELD = "hostname"

HALF_DAY = timedelta(hours=12)
DAY = timedelta(hours=24)
MINUTE = timedelta(minutes=1)
HOUR = timedelta(hours=1)

CPU_THRESHOLD = 90.0

MEM_OR_FILTER = Filter(
    "OR",
    (
        Predicate("used_percent", ">", 98.0),
        Predicate("used", "<", 1000),
        Predicate("used_percent", "<", 10.0),
    ),
)


@dataclass(frozen=True)
class ScenarioContext:
    """What a scenario may use besides the carrier."""

    interval: TimeInterval
    rng: random.Random
    dialect: BaseDialect
    measurements: tuple[str, ...] = MEASUREMENTS


def _fill(
    carrier: QueryCarrier,
    label: str,
    detail: str,
    namespace: str,
    field: str,
    query: str,
) -> None:
    carrier.human_label = label
    carrier.human_description = f"{label}: {detail}"
    carrier.namespace = namespace
    carrier.field = field
    carrier.query = query


def _hosts_filter(hostnames: list[str]) -> Filter:
    return Filter("OR", tuple(Predicate(HOST_FIELD, "=", h) for h in hostnames))


def max_cpu_usage_n_hosts(
    ctx: ScenarioContext, carrier: QueryCarrier, scale: int, nhosts: int
) -> None:
    """Max usage_user over a random 12h window for N random hosts, by minute.

    SELECT max(usage_user) FROM cpu
    WHERE (hostname = $H1 OR ... OR hostname = $HN) AND $WINDOW
    GROUP BY time(1m), hostname
    """
    window = ctx.interval.random_window(HALF_DAY, ctx.rng)
    hostnames = sample_host_names(scale, nhosts, ctx.rng)

    plan = QueryPlan(
        namespace="cpu",
        selects=(Select("usage_user", "max"),),
        window=window,
        bucket=MINUTE,
        group_by=HOST_FIELD,
        filter=_hosts_filter(hostnames),
    )
    label = f"{ctx.dialect.name} max cpu, rand {nhosts:4d} hosts, rand 12hr by 1m"
    _fill(carrier, label, window.start_string(), "cpu", "usage_user", ctx.dialect.render(plan))


def max_all_cpu_n_hosts(
    ctx: ScenarioContext, carrier: QueryCarrier, scale: int, nhosts: int
) -> None:
    """Max of every cpu field over a random 12h window for N random hosts."""
    window = ctx.interval.random_window(HALF_DAY, ctx.rng)
    hostnames = sample_host_names(scale, nhosts, ctx.rng)

    plan = QueryPlan(
        namespace="cpu",
        selects=tuple(Select(f, "max") for f in CPU_FIELDS),
        window=window,
        bucket=MINUTE,
        group_by=HOST_FIELD,
        filter=_hosts_filter(hostnames),
    )
    label = (
        f"{ctx.dialect.name} max cpu all fields, rand {nhosts:4d} hosts, rand 12hr by 1m"
    )
    _fill(carrier, label, window.start_string(), "cpu", WILDCARD, ctx.dialect.render(plan))


def mean_cpu_usage_all_hosts(
    ctx: ScenarioContext, carrier: QueryCarrier, scale: int
) -> None:
    """Mean usage_user over a random day for every host, by hour."""
    window = ctx.interval.random_window(DAY, ctx.rng)

    plan = QueryPlan(
        namespace="cpu",
        selects=(Select("usage_user", "mean"),),
        window=window,
        bucket=HOUR,
        group_by=HOST_FIELD,
    )
    label = f"{ctx.dialect.name} mean cpu, all hosts, rand 1day by 1hour"
    _fill(carrier, label, window.start_string(), "cpu", "usage_user", ctx.dialect.render(plan))


def high_cpu(ctx: ScenarioContext, carrier: QueryCarrier, scale: int) -> None:
    """Rows over the cpu threshold across all hosts in a random day."""
    window = ctx.interval.random_window(DAY, ctx.rng)

    plan = QueryPlan(
        namespace="cpu",
        window=window,
        filter=Filter("AND", (Predicate("usage_user", ">", CPU_THRESHOLD),)),
    )
    label = f"{ctx.dialect.name} cpu over threshold, all hosts"
    _fill(carrier, label, window.start_string(), "cpu", WILDCARD, ctx.dialect.render(plan))


def high_cpu_one_host(ctx: ScenarioContext, carrier: QueryCarrier, scale: int) -> None:
    """Rows over the cpu threshold for one random host in a random day.

    The host is drawn independently on every call, so repeats across a run
    are expected.
    """
    window = ctx.interval.random_window(DAY, ctx.rng)
    hostname = random_host(scale, ctx.rng)

    plan = QueryPlan(
        namespace="cpu",
        window=window,
        filter=Filter(
            "AND",
            (
                Predicate("usage_user", ">", CPU_THRESHOLD),
                Predicate(HOST_FIELD, "=", hostname),
            ),
        ),
    )
    label = f"{ctx.dialect.name} cpu over threshold, 1 host"
    _fill(
        carrier,
        label,
        f"{window.start_string()} {hostname}",
        "cpu",
        WILDCARD,
        ctx.dialect.render(plan),
    )


def mem_ors(ctx: ScenarioContext, carrier: QueryCarrier, scale: int) -> None:
    """Rows matching any of three mem thresholds in a random day."""
    window = ctx.interval.random_window(DAY, ctx.rng)

    plan = QueryPlan(namespace="mem", window=window, filter=MEM_OR_FILTER)
    label = f"{ctx.dialect.name} mem fields with or, all hosts"
    _fill(carrier, label, window.start_string(), "mem", WILDCARD, ctx.dialect.render(plan))


def mem_ors_by_host(ctx: ScenarioContext, carrier: QueryCarrier, scale: int) -> None:
    """Hourly max used_percent per host over rows matching the mem thresholds."""
    window = ctx.interval.random_window(DAY, ctx.rng)

    plan = QueryPlan(
        namespace="mem",
        selects=(Select("used_percent", "max"),),
        window=window,
        bucket=HOUR,
        group_by=HOST_FIELD,
        filter=MEM_OR_FILTER,
    )
    label = f"{ctx.dialect.name} mem fields with or, by host, rand 1day by 1hour"
    _fill(carrier, label, window.start_string(), "mem", "used_percent", ctx.dialect.render(plan))


def last_point_per_host(ctx: ScenarioContext, carrier: QueryCarrier, scale: int) -> None:
    """Most recent row per host for a random measurement."""
    measurement = ctx.rng.choice(ctx.measurements)

    plan = QueryPlan(namespace=measurement, limit_by=HOST_FIELD)
    label = f"{ctx.dialect.name} last row per host"
    _fill(carrier, label, measurement, measurement, WILDCARD, ctx.dialect.render(plan))


def _n_hosts(name: str, fn, nhosts: int) -> tuple[str, ScenarioFn]:
    def scenario(ctx: ScenarioContext, carrier: QueryCarrier, scale: int) -> None:
        if scale < nhosts:
            raise InsufficientFleetSize(name, nhosts, scale)
        fn(ctx, carrier, scale, nhosts)

    scenario.__name__ = name.replace("-", "_")
    scenario.__doc__ = fn.__doc__
    return name, scenario


DEVOPS_SCENARIOS = ScenarioRegistry(
    [
        _n_hosts("max-cpu-1-host", max_cpu_usage_n_hosts, 1),
        _n_hosts("max-cpu-2-hosts", max_cpu_usage_n_hosts, 2),
        _n_hosts("max-cpu-4-hosts", max_cpu_usage_n_hosts, 4),
        _n_hosts("max-cpu-8-hosts", max_cpu_usage_n_hosts, 8),
        _n_hosts("max-cpu-16-hosts", max_cpu_usage_n_hosts, 16),
        _n_hosts("max-cpu-32-hosts", max_cpu_usage_n_hosts, 32),
        _n_hosts("max-all-cpu-1-host", max_all_cpu_n_hosts, 1),
        _n_hosts("max-all-cpu-8-hosts", max_all_cpu_n_hosts, 8),
        ("mean-cpu-all-hosts", mean_cpu_usage_all_hosts),
        ("high-cpu", high_cpu),
        ("high-cpu-1-host", high_cpu_one_host),
        ("mem-ors", mem_ors),
        ("mem-ors-by-host", mem_ors_by_host),
        ("last-point-per-host", last_point_per_host),
    ]
).freeze()
