"""Query carrier records and their reuse pool."""

import logging
from collections import deque
from dataclasses import asdict, dataclass

logger = logging.getLogger(__name__)

WILDCARD = "*"


@dataclass
class QueryCarrier:
    """A generated query, filled in place by a scenario."""

    human_label: str = ""
    human_description: str = ""
    namespace: str = ""
    field: str = ""
    query: str = ""

    def reset(self) -> None:
        """Clear every attribute."""
        self.human_label = ""
        self.human_description = ""
        self.namespace = ""
        self.field = ""
        self.query = ""

    def to_dict(self) -> dict[str, str]:
        """Convert to a plain dictionary."""
        return asdict(self)


class CarrierPool:
    """Unbounded freelist of reusable carriers.

    A pool belongs to a single worker and is not synchronized.
    """

    def __init__(self) -> None:
        self._free: deque[QueryCarrier] = deque()
        self.allocated = 0

    @property
    def available(self) -> int:
        """Number of carriers waiting for reuse."""
        return len(self._free)

    def acquire(self) -> QueryCarrier:
        """Take a cleared carrier, allocating one if the freelist is empty."""
        if self._free:
            carrier = self._free.pop()
            carrier.reset()
            return carrier

        self.allocated += 1
        logger.debug("Allocated carrier #%d", self.allocated)
        return QueryCarrier()

    def release(self, carrier: QueryCarrier) -> None:
        """Return a carrier for reuse."""
        self._free.append(carrier)
