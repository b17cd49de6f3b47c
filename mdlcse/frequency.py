"""Occurrence counting for collected call strings."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Tuple, Union

from .grammar import Match


class FrequencyTable:
    """Call string → occurrence count, iterated in ascending key order.

    Keys are compared as exact strings; ``"f(a)"`` and ``"f( a )"`` are
    distinct entries.
    """

    def __init__(self) -> None:
        self._counts: Dict[str, int] = {}
        self._total = 0

    @classmethod
    def from_matches(cls, matches: Iterable[Union[Match, str]]) -> "FrequencyTable":
        table = cls()
        for m in matches:
            key = m.text if isinstance(m, Match) else m
            table._counts[key] = table._counts.get(key, 0) + 1
            table._total += 1
        return table

    @property
    def total(self) -> int:
        """Number of occurrences accumulated (sum of all counts)."""
        return self._total

    def items(self) -> Iterator[Tuple[str, int]]:
        for key in sorted(self._counts):
            yield key, self._counts[key]

    def repeated(self, min_count: int = 2) -> Iterator[Tuple[str, int]]:
        """Entries seen at least *min_count* times, in key order."""
        return ((k, n) for k, n in self.items() if n >= min_count)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._counts))

    def __getitem__(self, key: str) -> int:
        return self._counts[key]

    def __contains__(self, key: object) -> bool:
        return key in self._counts

    def __len__(self) -> int:
        return len(self._counts)

    def __repr__(self) -> str:
        return f"FrequencyTable({dict(self.items())!r})"
