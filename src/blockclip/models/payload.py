"""Wire models for the portable clipboard payload.

These pydantic models describe the JSON placed on the clipboard. They are
validated on decode and converted to ``block_tree`` nodes by
:mod:`blockclip.services.codec`.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Any, Literal, Optional


PAYLOAD_FORMAT = "blockclip/1"


class SymbolRefPayload(BaseModel):
    """Symbol reference as written in a field value."""

    symbol: str = Field(..., min_length=1, description="Referenced symbol name")

    type: Optional[str] = Field(
        default=None,
        description="Declared type of the symbol in the source document"
    )

    model_config = {"extra": "forbid"}


class SlotPayload(BaseModel):
    """Contents of one input slot."""

    block: Optional[BlockPayload] = Field(default=None, description="Plugged-in block")
    shadow: Optional[BlockPayload] = Field(default=None, description="Shadow (fallback) block")


class BlockPayload(BaseModel):
    """One block and everything nested below it."""

    kind: str = Field(..., min_length=1, description="Block type identifier")

    id: Optional[str] = Field(default=None, description="Block id in the source document (informational)")

    fields: dict[str, Any] = Field(default_factory=dict, description="Field values")

    inputs: dict[str, SlotPayload] = Field(default_factory=dict, description="Input slots")

    next: Optional[BlockPayload] = Field(default=None, description="Following block in the same stack")

    x: Optional[float] = Field(default=None, allow_inf_nan=False, description="Document x (subtree roots only)")

    y: Optional[float] = Field(default=None, allow_inf_nan=False, description="Document y (subtree roots only)")

    model_config = {"extra": "ignore"}


class CollectionPayload(BaseModel):
    """Ordered collection of subtrees copied together."""

    format: Literal["blockclip/1"] = Field(default=PAYLOAD_FORMAT, description="Payload format tag")

    blocks: list[BlockPayload] = Field(..., min_length=1, description="Subtree roots in copy order")


SlotPayload.model_rebuild()
BlockPayload.model_rebuild()
CollectionPayload.model_rebuild()
