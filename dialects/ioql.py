"""IOQL dialect: renders ``new_ioql_query(...)`` calls."""

from datetime import timedelta

from dialects.base import BaseDialect
from querygen.plan import Filter, Predicate, QueryPlan

_NANOS_PER_MICROSECOND = 1000


def _nanos(value: timedelta) -> int:
    return (value // timedelta(microseconds=1)) * _NANOS_PER_MICROSECOND


def _quote(value: object) -> str:
    return "'" + str(value).replace("'", "''") + "'"


class IoqlDialect(BaseDialect):
    """Renders queries as IOQL function calls.

    Times are Unix nanoseconds and predicate values are passed as text, e.g.:

        new_ioql_query(
            project_id => 1::bigint,
            namespace_name => 'cpu',
            select_field => ARRAY[new_select_item('usage_user'::text, 'MAX')],
            aggregate => new_aggregate(60000000000, 'hostname'),
            ...
        )
    """

    name = "ioql"

    def __init__(self, project_id: int = 1, total_partitions: int = 1) -> None:
        """Initialize IOQL dialect.

        Args:
            project_id: Project the queries run against.
            total_partitions: Partition count passed to every query.
        """
        self.project_id = project_id
        self.total_partitions = total_partitions

    def render(self, plan: QueryPlan) -> str:
        """Render a plan as a ``new_ioql_query`` call."""
        args = [
            ("project_id", f"{self.project_id}::bigint"),
            ("namespace_name", _quote(plan.namespace)),
            ("select_field", self._select_field(plan)),
            ("aggregate", self._aggregate(plan)),
            ("time_condition", self._time_condition(plan)),
            ("field_condition", self._field_condition(plan.filter)),
            ("limit_rows", "NULL"),
            ("limit_time_periods", "NULL"),
            ("limit_by_field", self._limit_by_field(plan)),
            ("total_partitions", str(self.total_partitions)),
        ]
        body = ",\n".join(f"\t{key} => {value}" for key, value in args)
        return f"new_ioql_query(\n{body}\n)"

    def _select_field(self, plan: QueryPlan) -> str:
        if not plan.selects:
            return "NULL"
        items = [
            f"new_select_item({_quote(s.field)}::text, {_quote(s.aggregate.upper())})"
            if s.aggregate
            else f"new_select_item({_quote(s.field)}::text, NULL)"
            for s in plan.selects
        ]
        return f"ARRAY[{', '.join(items)}]"

    def _aggregate(self, plan: QueryPlan) -> str:
        if plan.bucket is None:
            return "NULL"
        group_by = _quote(plan.group_by) if plan.group_by else "NULL"
        return f"new_aggregate({_nanos(plan.bucket)}, {group_by})"

    def _time_condition(self, plan: QueryPlan) -> str:
        if plan.window is None:
            return "NULL"
        return f"new_time_condition({plan.window.start_ns}, {plan.window.end_ns})"

    def _field_condition(self, condition: Filter | None) -> str:
        if condition is None:
            return "NULL"
        predicates = ", ".join(self._predicate(p) for p in condition.predicates)
        return f"new_field_condition({_quote(condition.combinator)}, ARRAY[{predicates}])"

    @staticmethod
    def _predicate(predicate: Predicate) -> str:
        return (
            f"new_field_predicate({_quote(predicate.field)}, "
            f"{_quote(predicate.op)}, {_quote(predicate.value)}::text)"
        )

    @staticmethod
    def _limit_by_field(plan: QueryPlan) -> str:
        if plan.limit_by is None:
            return "NULL"
        return f"new_limit_by_field({_quote(plan.limit_by)}, 1)"
