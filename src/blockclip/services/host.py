"""Host document interface consumed by the transfer orchestrator.

The host owns block storage, rendering and undo; blockclip only calls the
methods below. ``delete_symbol`` and ``remove_subtree`` let a failed paste
undo what it already committed.
"""

from typing import Any, Optional, Protocol

from block_tree import BlockNode, Position
from blockclip.models.symbol import Symbol
from blockclip.models.viewport import Viewport


class HostDocument(Protocol):
    def lookup_symbol(self, name: str) -> Optional[Symbol]: ...

    def create_symbol(self, name: str, symbol_type: Optional[str]) -> Symbol: ...

    def delete_symbol(self, name: str) -> None: ...

    def enumerate_field_options(self, kind: str, field_name: str) -> Optional[list[Any]]: ...

    def merge_subtree(self, node: BlockNode, position: Optional[Position]) -> str:
        """Insert a sanitized subtree; return the new root's block id.

        Raises:
            SchemaRejection: If the document refuses the subtree
        """
        ...

    def remove_subtree(self, block_id: str) -> None: ...

    def current_viewport(self) -> Viewport: ...
