"""In-memory cart for one checkout session."""

from __future__ import annotations

from typing import Iterable, Iterator

from pos.models import CartLine, MenuItem


class Cart:
    """Ordered cart lines keyed by menu item id, at most one line per item."""

    def __init__(self) -> None:
        # dict keeps insertion order, which is the display and commit order.
        self._lines: dict[str, CartLine] = {}

    def __iter__(self) -> Iterator[CartLine]:
        return iter(list(self._lines.values()))

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._lines

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    def is_empty(self) -> bool:
        return not self._lines

    def get(self, item_id: str) -> CartLine | None:
        return self._lines.get(item_id)

    def add_item(self, item: MenuItem) -> CartLine:
        """Add one unit of `item`, merging into its existing line."""
        line = self._lines.get(item.item_id)
        if line is None:
            line = CartLine(item=item, quantity=1)
            self._lines[item.item_id] = line
        else:
            line.quantity += 1
        return line

    def change_quantity(self, item_id: str, delta: int) -> CartLine | None:
        """Apply `delta` to a line; a line reaching zero is removed."""
        line = self._lines.get(item_id)
        if line is None:
            return None
        new_quantity = max(0, line.quantity + delta)
        if new_quantity == 0:
            del self._lines[item_id]
            return None
        line.quantity = new_quantity
        return line

    def remove_item(self, item_id: str) -> None:
        self._lines.pop(item_id, None)

    def clear(self) -> None:
        self._lines.clear()


def filter_by_name(catalog: Iterable[MenuItem], query: str) -> list[MenuItem]:
    """Case-insensitive substring match on item name."""
    source = list(catalog)
    if not query:
        return source
    q = query.lower()
    return [item for item in source if q in item.name.lower()]
