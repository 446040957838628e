"""A list of items addressed by row index and data role, for list views."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Generic, Protocol, TypeVar


class _RoleData(Protocol):
    def get_data(self, role: int) -> Any: ...

    def set_data(self, role: int, value: Any) -> None: ...


T = TypeVar("T", bound=_RoleData)


class DataList(Generic[T]):
    """An ordered list of items that expose their values by role.

    Items are compared by identity, so two equal but distinct items are
    never confused with one another.
    """

    def __init__(self, role_names: Mapping[int, str]) -> None:
        self._role_names = dict(role_names)
        self._items: list[T] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def _valid(self, index: int) -> bool:
        return 0 <= index < len(self._items)

    def data(self, index: int, role: int) -> Any:
        """Return the item's value for ``role``, or None for a bad index."""
        if not self._valid(index):
            return None
        return self._items[index].get_data(role)

    def set_data(self, index: int, value: Any, role: int) -> bool:
        """Set the item's value for ``role``; False if the index is bad."""
        if not self._valid(index):
            return False
        self._items[index].set_data(role, value)
        return True

    def role_names(self) -> dict[int, str]:
        return dict(self._role_names)

    def add_item(self, item: T) -> None:
        self._items.append(item)

    def remove_item(self, index: int) -> None:
        if not self._valid(index):
            raise IndexError(f"row {index} out of range")
        del self._items[index]

    def remove_items(self, items: Iterable[T]) -> None:
        """Remove the first occurrence of each item; missing items are ignored."""
        for item in items:
            position = self.index_of(item)
            if position != -1:
                del self._items[position]

    def replace_item(self, row: int, item: T) -> None:
        """Replace the item at ``row``; out-of-range rows are ignored."""
        if self._valid(row):
            self._items[row] = item

    def replace_list(self, items: Iterable[T]) -> None:
        self._items = list(items)

    def clear(self) -> None:
        self._items.clear()

    def index_of(self, item: T) -> int:
        """Return the row holding ``item``, or -1 if it is not in the list."""
        return next(
            (row for row, candidate in enumerate(self._items) if candidate is item),
            -1,
        )

    def get_item(self, index: int) -> T | None:
        """Return the item at ``index``, or None if out of range."""
        if self._valid(index):
            return self._items[index]
        return None