"""Append-only chronological ledger of snapshots.

Entries are complete snapshots, so any prefix of the ledger can be charted
without replaying actions.  The backing store is an immutable tuple that is
swapped on every append: a reader holding :attr:`HistoryLedger.entries` sees
either the pre- or post-append sequence, never a partial write.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Sequence, Tuple

from petrosmart.stats import StatSnapshot


class HistoryLedger:
    """Ordered snapshot history; insertion order is chronological."""

    def __init__(self, entries: Iterable[StatSnapshot] = ()) -> None:
        self._entries: Tuple[StatSnapshot, ...] = tuple(entries)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------
    def append(self, snapshot: StatSnapshot) -> None:
        self._entries = self._entries + (snapshot,)

    def extend(self, snapshots: Iterable[StatSnapshot]) -> None:
        """Append several entries as one atomic publish."""

        self._entries = self._entries + tuple(snapshots)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def entries(self) -> Tuple[StatSnapshot, ...]:
        return self._entries

    @property
    def latest(self) -> StatSnapshot | None:
        return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[StatSnapshot]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> StatSnapshot:
        return self._entries[index]

    # ------------------------------------------------------------------
    # Time-series views
    # ------------------------------------------------------------------
    def per_turn(self) -> Tuple[StatSnapshot, ...]:
        return self._entries

    def monthly(self) -> Tuple[StatSnapshot, ...]:
        """Last entry recorded for each calendar month."""

        return _last_of_run(self._entries, key=lambda s: (s.year, s.month))

    def annual(self) -> Tuple[StatSnapshot, ...]:
        """Last entry recorded for each year."""

        return _last_of_run(self._entries, key=lambda s: s.year)

    def series(self, field_name: str, *, view: str = "turns") -> List[float]:
        views = {"turns": self.per_turn, "monthly": self.monthly, "annually": self.annual}
        try:
            selected = views[view]()
        except KeyError as exc:
            raise ValueError(f"Unknown ledger view '{view}'") from exc
        return [float(getattr(snapshot, field_name)) for snapshot in selected]


def _last_of_run(entries: Sequence[StatSnapshot], *, key) -> Tuple[StatSnapshot, ...]:
    selected: List[StatSnapshot] = []
    for index, snapshot in enumerate(entries):
        following = entries[index + 1] if index + 1 < len(entries) else None
        if following is None or key(following) != key(snapshot):
            selected.append(snapshot)
    return tuple(selected)


__all__ = ["HistoryLedger"]
