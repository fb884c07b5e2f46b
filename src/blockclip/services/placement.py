"""Coordinate mapping and placement of pasted subtrees.

Screen and document space are related by the viewport::

    document = (screen - viewport origin) / zoom + pan offset
    screen   = (document - pan offset) * zoom + viewport origin
"""

from typing import Literal, Optional

from block_tree import BlockNode, Position
from blockclip.models.viewport import PointerSnapshot, Viewport


PlacementMode = Literal["relative", "absolute"]


def screen_to_document(pointer: PointerSnapshot, viewport: Viewport) -> Position:
    """Convert a screen pointer position to document coordinates."""
    return Position(
        (pointer.x - viewport.left) / viewport.zoom + viewport.offset_x,
        (pointer.y - viewport.top) / viewport.zoom + viewport.offset_y,
    )


def document_to_screen(position: Position, viewport: Viewport) -> PointerSnapshot:
    """Project a document position onto the screen (inverse of screen_to_document)."""
    return PointerSnapshot(
        x=(position.x - viewport.offset_x) * viewport.zoom + viewport.left,
        y=(position.y - viewport.offset_y) * viewport.zoom + viewport.top,
    )


def apply_relative_offset(roots: list[BlockNode], target: Position) -> bool:
    """Move the first positioned root onto ``target`` and every other root by the same delta.

    Roots that never recorded a position are placed at ``target``.

    Args:
        roots: Pasted subtree roots (modified in place)
        target: Document position for the first positioned root

    Returns:
        False if no root has a recorded origin (nothing moved), in which
        case the caller should place absolutely
    """
    origin: Optional[Position] = next(
        (root.position for root in roots if root.position is not None), None
    )
    if origin is None:
        return False

    dx, dy = origin.delta_to(target)
    for root in roots:
        if root.position is None:
            root.position = target
        else:
            root.position = root.position.offset(dx, dy)
    return True


def apply_absolute(roots: list[BlockNode], target: Position) -> None:
    """Place every root at ``target``."""
    for root in roots:
        root.position = target


def plan_placement(
    roots: list[BlockNode],
    target: Position,
    mode: PlacementMode = "relative",
) -> PlacementMode:
    """Assign final positions to pasted roots.

    Relative placement falls back to absolute when the payload carries no
    origin.

    Args:
        roots: Pasted subtree roots (modified in place)
        target: Document position the user pointed at
        mode: Configured placement mode

    Returns:
        The mode actually applied
    """
    if mode == "relative" and apply_relative_offset(roots, target):
        return "relative"

    apply_absolute(roots, target)
    return "absolute"
