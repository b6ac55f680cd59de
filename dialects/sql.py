"""Plain SQL dialect for time-bucketing SQL stores."""

from datetime import timedelta

from dialects.base import BaseDialect
from querygen.plan import Filter, Predicate, QueryPlan

_UNITS = (
    ("day", timedelta(days=1)),
    ("hour", timedelta(hours=1)),
    ("minute", timedelta(minutes=1)),
    ("second", timedelta(seconds=1)),
)


def interval_literal(value: timedelta) -> str:
    """Format a bucket width as a SQL interval string, e.g. ``'1 hour'``."""
    for unit, size in _UNITS:
        if value >= size and value % size == timedelta(0):
            count = value // size
            return f"'{count} {unit}{'s' if count != 1 else ''}'"
    return f"'{value // timedelta(microseconds=1)} microseconds'"


def _literal(value: object) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return "'" + str(value).replace("'", "''") + "'"


class SqlDialect(BaseDialect):
    """Renders queries as SQL with ``time_bucket`` grouping.

    Example output:

        SELECT time_bucket('1 minute', time) AS bucket, hostname, max(usage_user) AS max_usage_user
        FROM cpu
        WHERE time >= '2016-01-01T00:00:00Z' AND time < '2016-01-01T12:00:00Z'
          AND (hostname = 'host_3' OR hostname = 'host_1')
        GROUP BY bucket, hostname
        ORDER BY bucket
    """

    name = "sql"

    def __init__(self, time_column: str = "time") -> None:
        self.time_column = time_column

    def render(self, plan: QueryPlan) -> str:
        """Render a plan as a SQL SELECT statement."""
        if plan.limit_by is not None:
            return self._render_last_row(plan)

        lines = [f"SELECT {', '.join(self._columns(plan))}", f"FROM {plan.namespace}"]

        conditions = self._conditions(plan)
        if conditions:
            lines.append("WHERE " + "\n  AND ".join(conditions))

        if plan.bucket is not None:
            group_by = ["bucket"] + ([plan.group_by] if plan.group_by else [])
            lines.append(f"GROUP BY {', '.join(group_by)}")
            lines.append("ORDER BY bucket")

        return "\n".join(lines)

    def _render_last_row(self, plan: QueryPlan) -> str:
        lines = [
            f"SELECT DISTINCT ON ({plan.limit_by}) *",
            f"FROM {plan.namespace}",
        ]
        conditions = self._conditions(plan)
        if conditions:
            lines.append("WHERE " + "\n  AND ".join(conditions))
        lines.append(f"ORDER BY {plan.limit_by}, {self.time_column} DESC")
        return "\n".join(lines)

    def _columns(self, plan: QueryPlan) -> list[str]:
        columns = []
        if plan.bucket is not None:
            columns.append(
                f"time_bucket({interval_literal(plan.bucket)}, {self.time_column}) AS bucket"
            )
            if plan.group_by:
                columns.append(plan.group_by)

        for select in plan.selects:
            if select.aggregate:
                agg = select.aggregate.lower()
                columns.append(f"{agg}({select.field}) AS {agg}_{select.field}")
            else:
                columns.append(select.field)

        return columns or ["*"]

    def _conditions(self, plan: QueryPlan) -> list[str]:
        conditions = []
        if plan.window is not None:
            conditions.append(
                f"{self.time_column} >= '{plan.window.start_string()}' "
                f"AND {self.time_column} < '{plan.window.end_string()}'"
            )
        if plan.filter is not None:
            conditions.append(self._filter(plan.filter))
        return conditions

    def _filter(self, condition: Filter) -> str:
        clauses = [self._predicate(p) for p in condition.predicates]
        if len(clauses) == 1:
            return clauses[0]
        return "(" + f" {condition.combinator} ".join(clauses) + ")"

    @staticmethod
    def _predicate(predicate: Predicate) -> str:
        op = "=" if predicate.op == "==" else predicate.op
        return f"{predicate.field} {op} {_literal(predicate.value)}"
