from __future__ import annotations

from typing import Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")


class SelectionList(Generic[T]):
    """
    Ordered items plus an optional highlighted row.

    `selected` is either None or a valid index into `items`. Navigation wraps
    around both ends; on an empty list it is a no-op.
    """

    def __init__(self, items: Iterable[T] = ()) -> None:
        self.items: List[T] = list(items)
        self.selected: Optional[int] = None

    @classmethod
    def with_items(cls, items: Iterable[T]) -> "SelectionList[T]":
        return cls(items)

    def __len__(self) -> int:
        return len(self.items)

    def next(self) -> None:
        if not self.items:
            return
        if self.selected is None or self.selected >= len(self.items) - 1:
            self.selected = 0
        else:
            self.selected += 1

    def previous(self) -> None:
        if not self.items:
            return
        if self.selected is None:
            self.selected = 0
        elif self.selected == 0:
            self.selected = len(self.items) - 1
        else:
            self.selected -= 1

    def unselect(self) -> None:
        self.selected = None

    def replace_items(self, items: Iterable[T]) -> None:
        # Callers re-highlight with next() when they want a visible cursor.
        self.items = list(items)
        self.selected = None

    def selected_item(self) -> Optional[T]:
        if self.selected is None:
            return None
        return self.items[self.selected]
