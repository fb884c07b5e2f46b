"""Multi-block selection for copy."""

from typing import Iterator


class SelectionSet:
    """Ordered set of selected block ids.

    Clicking a block with the extend modifier (shift) held toggles it in or
    out of the set; a plain click replaces the whole selection with that
    block. Copy order follows selection order.
    """

    def __init__(self) -> None:
        self._ids: dict[str, None] = {}

    def select(self, block_id: str, extend: bool = False) -> None:
        if extend:
            self.toggle(block_id)
        else:
            self.replace(block_id)

    def toggle(self, block_id: str) -> bool:
        """Add or remove a block.

        Returns:
            True if the block is selected afterwards
        """
        if block_id in self._ids:
            del self._ids[block_id]
            return False
        self._ids[block_id] = None
        return True

    def replace(self, block_id: str) -> None:
        self._ids = {block_id: None}

    def discard(self, block_id: str) -> None:
        self._ids.pop(block_id, None)

    def clear(self) -> None:
        self._ids.clear()

    def ids(self) -> list[str]:
        return list(self._ids)

    def __contains__(self, block_id: object) -> bool:
        return block_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._ids))
