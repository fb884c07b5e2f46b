"""File model for JSON block documents."""

from pydantic import BaseModel, Field
from typing import Any, Optional

from blockclip.models.symbol import Symbol
from blockclip.models.viewport import Viewport


class DocumentFile(BaseModel):
    """On-disk shape of a document used by the CLI."""

    blocks: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Top-level block stacks, in the portable block format"
    )

    symbols: list[Symbol] = Field(
        default_factory=list,
        description="Symbol table entries"
    )

    field_options: dict[str, dict[str, list[Any]]] = Field(
        default_factory=dict,
        description="Constrained fields: kind -> field name -> allowed values"
    )

    kinds: Optional[list[str]] = Field(
        default=None,
        description="Block kinds the document accepts (None = any)"
    )

    viewport: Viewport = Field(
        default_factory=Viewport,
        description="Viewport used to map screen positions on paste"
    )
