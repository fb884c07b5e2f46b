"""Subtree extraction for copy.

Captures a block and everything nested in its inputs, never the blocks
stacked below it. Copying one block must not drag along the rest of its
stack in the source document.
"""

from typing import Callable, Optional

from block_tree import BlockNode, SymbolRef, visit
from blockclip.models.symbol import Symbol
from blockclip.utils.logging import get_logger


logger = get_logger(__name__)

SymbolLookup = Callable[[str], Optional[Symbol]]


def _fill_symbol_types(root: BlockNode, lookup_symbol: SymbolLookup) -> None:
    """Attach the source table's declared type to untyped references."""

    def fill(block: BlockNode) -> None:
        for name, ref in block.symbol_fields().items():
            if ref.declared_type is not None:
                continue
            symbol = lookup_symbol(ref.name)
            if symbol is not None and symbol.type:
                block.set_field(name, SymbolRef(ref.name, symbol.type))

    visit(root, fill, include_next=False)


def _clear_block_id(block: BlockNode) -> None:
    block.block_id = None


def extract(
    node: BlockNode,
    include_position: bool = True,
    lookup_symbol: Optional[SymbolLookup] = None,
) -> BlockNode:
    """Extract a detached copy of ``node`` and its nested inputs.

    The root's ``next`` is always dropped. Stacks inside input slots are
    owned by the root and are kept. Source block ids are cleared so the
    payload carries no host identities.

    Args:
        node: Live block in the source document (left untouched)
        include_position: Keep the root's document position as the paste origin
        lookup_symbol: Source symbol lookup used to record declared types

    Returns:
        Subtree root ready for encoding
    """
    subtree = node.copy_subtree(include_next=False)
    visit(subtree, _clear_block_id)

    if include_position:
        subtree.position = node.position
    else:
        subtree.position = None

    if lookup_symbol is not None:
        _fill_symbol_types(subtree, lookup_symbol)

    return subtree


def extract_selection(
    nodes: list[BlockNode],
    lookup_symbol: Optional[SymbolLookup] = None,
) -> list[BlockNode]:
    """Extract several blocks copied together (multi-select).

    Each root keeps its own position so relative placement can preserve
    the layout between them. A root without a position gets none; paste
    then places it absolutely.

    Args:
        nodes: Selected blocks in selection order
        lookup_symbol: Source symbol lookup used to record declared types

    Returns:
        Extracted subtree roots in the same order
    """
    roots = [extract(node, include_position=True, lookup_symbol=lookup_symbol) for node in nodes]

    logger.debug(
        "selection_extracted",
        roots=len(roots),
        kinds=[root.kind for root in roots],
        positioned=sum(1 for root in roots if root.position is not None),
    )
    return roots
