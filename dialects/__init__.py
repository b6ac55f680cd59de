"""Query dialects for time-series backends."""

from dialects.base import BaseDialect
from dialects.ioql import IoqlDialect
from dialects.sql import SqlDialect

DIALECTS: dict[str, type[BaseDialect]] = {
    IoqlDialect.name: IoqlDialect,
    SqlDialect.name: SqlDialect,
}


def get_dialect(name: str) -> BaseDialect:
    """Create a dialect by name.

    Raises:
        ValueError: If no dialect has that name.
    """
    try:
        return DIALECTS[name.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown dialect: {name!r} (choose from {', '.join(sorted(DIALECTS))})"
        ) from None


__all__ = [
    "BaseDialect",
    "DIALECTS",
    "IoqlDialect",
    "SqlDialect",
    "get_dialect",
]
