"""Selection of qualification ids within the current view."""

from typing import Iterable, Iterator


class SelectionModel:
    """
    Set of selected ids that remembers the order they were selected in.

    Bulk operations run over the ids in that order.
    """

    def __init__(self, ids: Iterable[str] = ()):
        self._ids: dict[str, None] = dict.fromkeys(ids)

    @property
    def ids(self) -> list[str]:
        return list(self._ids)

    def toggle(self, qualification_id: str) -> bool:
        """Flip membership of one id. Returns True if it is now selected."""
        if qualification_id in self._ids:
            del self._ids[qualification_id]
            return False
        self._ids[qualification_id] = None
        return True

    def select_all(self, ids: Iterable[str]) -> None:
        """Replace the selection with exactly ids."""
        self._ids = dict.fromkeys(ids)

    def clear(self) -> None:
        self._ids.clear()

    def prune_to(self, ids: Iterable[str]) -> list[str]:
        """Drop selected ids not in ids; returns the dropped ones."""
        keep = set(ids)
        dropped = [i for i in self._ids if i not in keep]
        for qualification_id in dropped:
            del self._ids[qualification_id]
        return dropped

    def __contains__(self, qualification_id: object) -> bool:
        return qualification_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._ids))

    def __bool__(self) -> bool:
        return bool(self._ids)
