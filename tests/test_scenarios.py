"""Tests for the devops scenario catalog."""

import re
from collections import Counter
from datetime import datetime, timedelta, timezone

import pytest

from dialects import SqlDialect
from querygen.carrier import WILDCARD
from querygen.errors import InsufficientFleetSize
from querygen.generator import QueryGenerator
from querygen.interval import format_rfc3339, to_unix_nanos
from querygen.scenarios import CPU_FIELDS, DEVOPS_SCENARIOS, MEASUREMENTS

T0 = datetime(2016, 1, 1, tzinfo=timezone.utc)
DAY_END = T0 + timedelta(hours=24)

HOST_PREDICATE = re.compile(r"new_field_predicate\('hostname', '=', '(host_\d+)'::text\)")
TIME_CONDITION = re.compile(r"new_time_condition\((\d+), (\d+)\)")


@pytest.fixture
def generator() -> QueryGenerator:
    """Seeded IOQL generator over one day."""
    return QueryGenerator(T0, DAY_END, seed=1234)


class TestEveryScenario:
    """Properties shared by every scenario."""

    @pytest.mark.parametrize("name", DEVOPS_SCENARIOS.names())
    def test_fills_every_attribute(self, generator: QueryGenerator, name: str) -> None:
        """Each scenario should set all five carrier attributes."""
        carrier = generator.generate_named(name, 32)
        assert carrier.human_label
        assert carrier.human_description.startswith(carrier.human_label + ": ")
        assert carrier.namespace
        assert carrier.field
        assert carrier.query.startswith("new_ioql_query(")

    @pytest.mark.parametrize("name", DEVOPS_SCENARIOS.names())
    def test_renders_in_sql(self, name: str) -> None:
        """Each scenario should render with the SQL dialect too."""
        generator = QueryGenerator(T0, DAY_END, dialect=SqlDialect(), seed=5)
        carrier = generator.generate_named(name, 32)
        assert carrier.query.startswith("SELECT ")
        assert f"FROM {carrier.namespace}" in carrier.query

    def test_no_values_leak_between_queries(self, generator: QueryGenerator) -> None:
        """A reused carrier should hold only the latest scenario's values."""
        first = generator.generate_named("max-cpu-4-hosts", 8)
        assert first.field == "usage_user"
        generator.release(first)

        second = generator.generate_named("last-point-per-host", 8)
        assert second is first
        assert second.field == WILDCARD
        assert second.namespace in MEASUREMENTS
        assert "host_" not in second.query
        assert "new_aggregate" not in second.query
        assert "max cpu" not in second.human_description


class TestNHostAggregate:
    """Tests for the N-host windowed aggregate family."""

    def test_two_hosts_from_fleet_of_four(self, generator: QueryGenerator) -> None:
        """Two distinct host filters and a contained 12 hour window."""
        for _ in range(50):
            carrier = generator.generate_named("max-cpu-2-hosts", 4)

            hosts = HOST_PREDICATE.findall(carrier.query)
            assert len(hosts) == 2
            assert len(set(hosts)) == 2
            assert set(hosts) <= {"host_0", "host_1", "host_2", "host_3"}

            start_ns, end_ns = map(int, TIME_CONDITION.search(carrier.query).groups())
            assert end_ns - start_ns == 12 * 3600 * 10**9
            assert to_unix_nanos(T0) <= start_ns
            assert end_ns <= to_unix_nanos(DAY_END)

            assert "new_aggregate(60000000000, 'hostname')" in carrier.query
            assert carrier.namespace == "cpu"
            generator.release(carrier)

    def test_eight_hosts_needs_eight(self, generator: QueryGenerator) -> None:
        """Asking for more hosts than the fleet has should fail."""
        with pytest.raises(InsufficientFleetSize) as exc_info:
            generator.generate_named("max-cpu-8-hosts", 4)
        assert exc_info.value.needed == 8
        assert exc_info.value.scale == 4

    def test_exact_fleet_size_is_enough(self, generator: QueryGenerator) -> None:
        """A fleet exactly as large as needed should use every host."""
        carrier = generator.generate_named("max-cpu-8-hosts", 8)
        hosts = HOST_PREDICATE.findall(carrier.query)
        assert sorted(hosts) == sorted(f"host_{i}" for i in range(8))

    def test_description_embeds_window_start(self, generator: QueryGenerator) -> None:
        """The description should carry the sampled window start."""
        carrier = generator.generate_named("max-cpu-1-host", 1)
        start_ns = int(TIME_CONDITION.search(carrier.query).group(1))
        start = T0 + timedelta(microseconds=(start_ns - to_unix_nanos(T0)) // 1000)
        assert carrier.human_description == f"{carrier.human_label}: {format_rfc3339(start)}"
        assert "1 hosts" in carrier.human_label

    def test_all_fields_variant(self, generator: QueryGenerator) -> None:
        """The all-fields variant should aggregate every cpu field."""
        carrier = generator.generate_named("max-all-cpu-8-hosts", 16)
        for field in CPU_FIELDS:
            assert f"new_select_item('{field}'::text, 'MAX')" in carrier.query
        assert len(HOST_PREDICATE.findall(carrier.query)) == 8
        assert carrier.field == WILDCARD


class TestAllHostsAndScans:
    """Tests for the all-hosts aggregate and scan scenarios."""

    def test_all_hosts_aggregate(self, generator: QueryGenerator) -> None:
        """Mean usage over a day, bucketed hourly, with no host filter."""
        carrier = generator.generate_named("mean-cpu-all-hosts", 1)
        start_ns, end_ns = map(int, TIME_CONDITION.search(carrier.query).groups())
        assert end_ns - start_ns == 24 * 3600 * 10**9
        assert "new_aggregate(3600000000000, 'hostname')" in carrier.query
        assert "field_condition => NULL" in carrier.query
        assert "'MEAN'" in carrier.query

    def test_high_cpu(self, generator: QueryGenerator) -> None:
        """Threshold scan across all hosts."""
        carrier = generator.generate_named("high-cpu", 1)
        assert "new_field_predicate('usage_user', '>', '90.0'::text)" in carrier.query
        assert "hostname" not in carrier.query
        assert carrier.field == WILDCARD

    def test_high_cpu_one_host(self) -> None:
        """The single host should be drawn from [0, scale) with replacement."""
        generator = QueryGenerator(T0, DAY_END, seed=3)
        seen = Counter()
        for _ in range(200):
            carrier = generator.generate_named("high-cpu-1-host", 3)
            hosts = HOST_PREDICATE.findall(carrier.query)
            assert len(hosts) == 1
            seen[hosts[0]] += 1
            generator.release(carrier)
        assert set(seen) == {"host_0", "host_1", "host_2"}

    def test_high_cpu_one_host_smallest_fleet(self, generator: QueryGenerator) -> None:
        """A fleet of one always picks host_0."""
        carrier = generator.generate_named("high-cpu-1-host", 1)
        assert HOST_PREDICATE.findall(carrier.query) == ["host_0"]

    def test_mem_ors(self, generator: QueryGenerator) -> None:
        """Three-clause OR over two mem fields."""
        carrier = generator.generate_named("mem-ors", 1)
        assert carrier.namespace == "mem"
        assert "new_field_condition('OR', ARRAY[" in carrier.query
        assert carrier.query.count("new_field_predicate(") == 3
        assert "'used_percent', '>', '98.0'" in carrier.query
        assert "'used', '<', '1000'" in carrier.query
        assert "'used_percent', '<', '10.0'" in carrier.query
        assert "aggregate => NULL" in carrier.query

    def test_mem_ors_by_host(self, generator: QueryGenerator) -> None:
        """The companion variant should aggregate and group by host."""
        carrier = generator.generate_named("mem-ors-by-host", 1)
        assert carrier.query.count("new_field_predicate(") == 3
        assert "new_aggregate(3600000000000, 'hostname')" in carrier.query
        assert "new_select_item('used_percent'::text, 'MAX')" in carrier.query


class TestLastPointPerHost:
    """Tests for the last-value lookup scenario."""

    def test_no_window_or_filter(self, generator: QueryGenerator) -> None:
        """Last-value lookups have no time window, filter or aggregate."""
        carrier = generator.generate_named("last-point-per-host", 1)
        assert "time_condition => NULL" in carrier.query
        assert "field_condition => NULL" in carrier.query
        assert "limit_by_field => new_limit_by_field('hostname', 1)" in carrier.query
        assert carrier.human_description.endswith(carrier.namespace)
        assert carrier.field == WILDCARD

    def test_same_seed_same_measurement(self) -> None:
        """Two runs with the same seed should pick the same measurement."""
        first = QueryGenerator(T0, DAY_END, seed=77).generate_named(
            "last-point-per-host", 1
        )
        second = QueryGenerator(T0, DAY_END, seed=77).generate_named(
            "last-point-per-host", 1
        )
        assert first.namespace == second.namespace

    def test_measurements_are_uniform(self) -> None:
        """Over many draws every measurement should appear about equally."""
        seen = Counter()
        for seed in (1, 2):
            generator = QueryGenerator(T0, DAY_END, seed=seed)
            for _ in range(4500):
                carrier = generator.generate_named("last-point-per-host", 1)
                seen[carrier.namespace] += 1
                generator.release(carrier)

        assert set(seen) == set(MEASUREMENTS)
        for count in seen.values():
            assert 800 < count < 1200

    def test_custom_catalog(self) -> None:
        """The measurement catalog should be replaceable."""
        generator = QueryGenerator(T0, DAY_END, seed=1, measurements=("swap",))
        carrier = generator.generate_named("last-point-per-host", 1)
        assert carrier.namespace == "swap"
