"""Block tree - In-memory model for visual-program block documents.

This package provides the block document shape shared by every part of
blockclip and a depth-first walker over it.

Key features:
- BlockNode with fields, named input slots (block + shadow) and a forward
  ``next`` sibling link
- SymbolRef tagged values for fields that point at variables
- Pre-order traversal that tolerates in-place mutation by the visitor

Example:
    >>> from block_tree import BlockNode, SymbolRef, visit
    >>> block = BlockNode("setVariable", fields={"VAR": SymbolRef("Score", "number")})
    >>> visit(block, lambda b: print(b.kind))
    setVariable
"""

from block_tree.node import BlockNode, FieldValue, InputSlot, Position, SymbolRef
from block_tree.walker import count_blocks, iter_blocks, visit

__version__ = "0.1.0"

__all__ = [
    "BlockNode",
    "FieldValue",
    "InputSlot",
    "Position",
    "SymbolRef",
    "visit",
    "iter_blocks",
    "count_blocks",
]
