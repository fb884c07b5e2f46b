"""Block document model for visual-program graphs.

This module holds the in-memory shape of a block document: blocks with
typed fields, named input slots (each with an optional child block and an
optional shadow block), a single forward ``next`` link to the following
sibling, and an optional position on subtree roots.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Optional, Union


@dataclass(frozen=True)
class Position:
    """Point in document (workspace) coordinates."""

    x: float
    y: float

    def offset(self, dx: float, dy: float) -> "Position":
        """Return a new position shifted by (dx, dy)."""
        return Position(self.x + dx, self.y + dy)

    def delta_to(self, other: "Position") -> tuple[float, float]:
        """Return (dx, dy) that moves this position onto ``other``."""
        return other.x - self.x, other.y - self.y


@dataclass(frozen=True)
class SymbolRef:
    """Reference from a field to a named symbol (variable).

    Attributes:
        name: Symbol name as shown to the user (never a host object id)
        declared_type: Type tag carried with the reference, None when unknown
    """

    name: str
    declared_type: Optional[str] = None

    def renamed(self, name: str) -> "SymbolRef":
        return replace(self, name=name)


FieldValue = Union[str, int, float, bool, None, list, SymbolRef]


@dataclass
class InputSlot:
    """Named input on a block.

    Attributes:
        block: Block plugged into the slot (None if empty)
        shadow: Fallback block shown when nothing is plugged in
    """

    block: Optional["BlockNode"] = None
    shadow: Optional["BlockNode"] = None

    def is_empty(self) -> bool:
        return self.block is None and self.shadow is None


@dataclass
class BlockNode:
    """Single block with its nested inputs and forward sibling link.

    Everything reachable through ``inputs`` is owned by this block.
    ``next`` points at the block stacked directly below it, which is a
    sibling, not a child.

    Attributes:
        kind: Block type identifier (e.g. "setVariable")
        fields: Field name to literal value or SymbolRef (insertion order kept)
        inputs: Slot name to InputSlot (insertion order kept)
        next: Following block in the same stack
        position: Document position, only set on subtree roots
        block_id: Host identifier, None for blocks that were never merged
    """

    kind: str
    fields: dict[str, FieldValue] = field(default_factory=dict)
    inputs: dict[str, InputSlot] = field(default_factory=dict)
    next: Optional["BlockNode"] = None
    position: Optional[Position] = None
    block_id: Optional[str] = None

    def get_field(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def set_field(self, name: str, value: FieldValue) -> None:
        """Set field value in place (keeps original field order)."""
        self.fields[name] = value

    def symbol_fields(self) -> dict[str, SymbolRef]:
        """Return the fields of this block that reference a symbol."""
        return {
            name: value
            for name, value in self.fields.items()
            if isinstance(value, SymbolRef)
        }

    def set_input(
        self,
        slot: str,
        block: Optional["BlockNode"] = None,
        shadow: Optional["BlockNode"] = None,
    ) -> InputSlot:
        """Plug a block (and optional shadow) into a named slot.

        Args:
            slot: Input slot name
            block: Child block
            shadow: Shadow block

        Returns:
            The InputSlot now stored under ``slot``
        """
        input_slot = InputSlot(block=block, shadow=shadow)
        self.inputs[slot] = input_slot
        return input_slot

    def get_input(self, slot: str) -> Optional["BlockNode"]:
        """Return the block plugged into ``slot`` (not the shadow)."""
        input_slot = self.inputs.get(slot)
        return input_slot.block if input_slot else None

    def append(self, block: "BlockNode") -> "BlockNode":
        """Attach ``block`` at the end of this block's stack.

        Returns:
            The appended block
        """
        tail = self
        while tail.next is not None:
            tail = tail.next
        tail.next = block
        return block

    def stack(self) -> list["BlockNode"]:
        """Return this block followed by every block linked through ``next``."""
        blocks = []
        current: Optional[BlockNode] = self
        while current is not None:
            blocks.append(current)
            current = current.next
        return blocks

    def copy_subtree(self, include_next: bool = False) -> "BlockNode":
        """Deep copy this block and everything nested in its inputs.

        The copy shares no mutable state with the original. ``next`` chains
        inside input slots are always copied; this block's own ``next`` is
        copied only when ``include_next`` is True.

        Args:
            include_next: Also copy the sibling chain that follows this block

        Returns:
            Detached copy of the subtree
        """
        inputs = {}
        for slot, input_slot in self.inputs.items():
            inputs[slot] = InputSlot(
                block=input_slot.block.copy_subtree(include_next=True) if input_slot.block else None,
                shadow=input_slot.shadow.copy_subtree(include_next=True) if input_slot.shadow else None,
            )

        fields = {
            name: list(value) if isinstance(value, list) else value
            for name, value in self.fields.items()
        }

        return BlockNode(
            kind=self.kind,
            fields=fields,
            inputs=inputs,
            next=self.next.copy_subtree(include_next=True) if include_next and self.next else None,
            position=self.position,
            block_id=self.block_id,
        )
