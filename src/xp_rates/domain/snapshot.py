"""Immutable point-in-time set of exchange rates.

Readers grab the current snapshot reference and never see a half-loaded
table; refresh builds a new snapshot and swaps the reference.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime
from types import MappingProxyType

from src.xp_rates.domain.models import ExchangeRate


class RateSnapshot:
    __slots__ = ("_rates", "loaded_at")

    def __init__(self, rates: Iterable[ExchangeRate], loaded_at: datetime | None = None) -> None:
        table: dict[tuple[str, str], ExchangeRate] = {}
        for r in rates:
            current = table.get((r.from_program, r.to_program))
            # keep the newest quote per pair
            if current is None or r.as_of > current.as_of:
                table[(r.from_program, r.to_program)] = r
        self._rates: Mapping[tuple[str, str], ExchangeRate] = MappingProxyType(table)
        self.loaded_at = loaded_at

    def get(self, from_program: str, to_program: str) -> ExchangeRate | None:
        return self._rates.get((from_program, to_program))

    def __len__(self) -> int:
        return len(self._rates)

    def __iter__(self):  # type: ignore[no-untyped-def]
        return iter(self._rates.values())


EMPTY_SNAPSHOT = RateSnapshot(())
