"""
Selection: the set of order ids the user has ticked in the current view.
"""
from __future__ import annotations

from typing import Iterable, Iterator, List, Set


class Selection:
    """Selected order ids, in the order they were picked.

    The selection only ever holds ids present in the last successful fetch;
    ``retain`` is called after every refresh to drop the ones that vanished.
    """

    def __init__(self, ids: Iterable[str] = ()) -> None:
        self._ids: List[str] = []
        for oid in ids:
            if oid not in self._ids:
                self._ids.append(oid)

    def toggle(self, order_id: str) -> bool:
        """Flip one id; returns True when it ends up selected."""
        if order_id in self._ids:
            self._ids.remove(order_id)
            return False
        self._ids.append(order_id)
        return True

    def select_all(self, visible_ids: Iterable[str]) -> None:
        """Toggle between "nothing" and "exactly the visible rows"."""
        visible = list(dict.fromkeys(visible_ids))
        if visible and set(visible) == set(self._ids):
            self._ids = []
        else:
            self._ids = visible

    def clear(self) -> None:
        self._ids = []

    def retain(self, present_ids: Iterable[str]) -> None:
        present: Set[str] = set(present_ids)
        self._ids = [oid for oid in self._ids if oid in present]

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._ids))

    def __len__(self) -> int:
        return len(self._ids)
