"""Depth-first traversal over block subtrees."""

from typing import Callable, Iterator, Optional

from block_tree.node import BlockNode


def _children(node: BlockNode, include_next: bool) -> list[BlockNode]:
    """Snapshot the blocks to descend into, in visiting order.

    Per slot: the plugged-in block, then the slot's shadow. The node's own
    ``next`` comes last.
    """
    children = []
    for input_slot in list(node.inputs.values()):
        if input_slot.block is not None:
            children.append(input_slot.block)
        if input_slot.shadow is not None:
            children.append(input_slot.shadow)
    if include_next and node.next is not None:
        children.append(node.next)
    return children


def visit(
    root: Optional[BlockNode],
    callback: Callable[[BlockNode], None],
    include_next: bool = True,
) -> None:
    """Apply ``callback`` to every block reachable from ``root`` (pre-order).

    The structure to descend into is read before ``callback`` runs, so the
    callback may edit fields or swap out ``inputs`` of the node it receives.

    Args:
        root: Block to start from (None is a no-op)
        callback: Called once per block
        include_next: Follow the root's ``next`` link. Nested ``next`` links
                      inside input slots are always followed.
    """
    if root is None:
        return

    children = _children(root, include_next)
    callback(root)
    for child in children:
        visit(child, callback, include_next=True)


def iter_blocks(root: Optional[BlockNode], include_next: bool = True) -> Iterator[BlockNode]:
    """Yield blocks in the same order as :func:`visit`.

    Examples:
        >>> kinds = [b.kind for b in iter_blocks(root, include_next=False)]
    """
    if root is None:
        return

    children = _children(root, include_next)
    yield root
    for child in children:
        yield from iter_blocks(child, include_next=True)


def count_blocks(root: Optional[BlockNode], include_next: bool = True) -> int:
    return sum(1 for _ in iter_blocks(root, include_next=include_next))
