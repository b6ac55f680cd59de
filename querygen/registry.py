"""Scenario registry and dispatch."""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from querygen.errors import RegistryFrozen, UnknownScenario

if TYPE_CHECKING:
    from querygen.carrier import QueryCarrier
    from querygen.scenarios import ScenarioContext

ScenarioFn = Callable[["ScenarioContext", "QueryCarrier", int], None]


@dataclass(frozen=True)
class ScenarioEntry:
    """A named scenario generator."""

    name: str
    fn: ScenarioFn


class ScenarioRegistry:
    """Ordered table of scenario generators.

    Entries are registered during initialization and the table is frozen
    before use. A frozen registry is safe to share between workers.
    """

    def __init__(self, entries: list[tuple[str, ScenarioFn]] | None = None) -> None:
        self._entries: list[ScenarioEntry] = []
        self._frozen = False
        for name, fn in entries or []:
            self.register(name, fn)

    def register(self, name: str, fn: ScenarioFn) -> "ScenarioRegistry":
        """Add a scenario.

        Raises:
            RegistryFrozen: If the registry has been frozen.
            ValueError: If the name is empty or already registered.
        """
        if self._frozen:
            raise RegistryFrozen(f"Cannot register {name!r}: registry is frozen")
        if not name:
            raise ValueError("Scenario name must not be empty")
        if any(e.name.lower() == name.lower() for e in self._entries):
            raise ValueError(f"Scenario {name!r} is already registered")

        self._entries.append(ScenarioEntry(name=name, fn=fn))
        return self

    def freeze(self) -> "ScenarioRegistry":
        """Disallow further registration."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def names(self) -> list[str]:
        """Scenario names in declaration order."""
        return [e.name for e in self._entries]

    def lookup(self, name: str) -> ScenarioEntry:
        """Find a scenario by case-insensitive name.

        Raises:
            UnknownScenario: If no scenario matches.
        """
        wanted = name.lower()
        for entry in self._entries:
            if entry.name.lower() == wanted:
                return entry
        raise UnknownScenario(f"Unknown scenario: {name!r}")

    def by_ordinal(self, ordinal: int) -> ScenarioEntry:
        """Select the scenario for the i-th query of a run (round robin)."""
        if not self._entries:
            raise UnknownScenario("No scenarios registered")
        return self._entries[ordinal % len(self._entries)]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ScenarioEntry]:
        return iter(tuple(self._entries))

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return any(e.name.lower() == name.lower() for e in self._entries)
