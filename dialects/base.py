"""Abstract base class for query dialects."""

from abc import ABC, abstractmethod

from querygen.plan import QueryPlan


class BaseDialect(ABC):
    """Abstract base class for query rendering backends.

    All dialects must inherit from this class and implement render(). A
    dialect holds no per-query state, so one instance can be shared by every
    worker of a run.
    """

    name: str = ""

    @abstractmethod
    def render(self, plan: QueryPlan) -> str:
        """Render a query plan as query text for this backend.

        Args:
            plan: The backend-neutral query description.

        Returns:
            The rendered query text.
        """
        ...
