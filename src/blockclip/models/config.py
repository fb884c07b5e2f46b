"""Configuration models for blockclip."""

from pydantic import BaseModel, Field, field_validator
from typing import Literal


class PlacementConfig(BaseModel):
    """Configuration for where pasted blocks land."""

    mode: Literal["relative", "absolute"] = Field(
        default="relative",
        description="'relative' keeps the layout between pasted roots, 'absolute' stacks every root at the pointer"
    )

    model_config = {"frozen": True}


class SymbolConfig(BaseModel):
    """Configuration for symbol reference detection and renaming."""

    markers: list[str] = Field(
        default_factory=lambda: ["VAR", "VARIABLE", "SYMBOL"],
        description="Field-name tokens that mark a plain string field as a symbol reference"
    )

    copy_suffix: str = Field(
        default="_Copy",
        min_length=1,
        description="Suffix used to derive a new symbol name on type conflict"
    )

    @field_validator("markers")
    @classmethod
    def validate_markers(cls, v: list[str]) -> list[str]:
        """Normalize markers to upper case and drop blanks."""
        markers = [m.strip().upper() for m in v if m.strip()]
        if not markers:
            raise ValueError("At least one symbol marker is required")
        return markers

    model_config = {"frozen": True}


class ClipboardConfig(BaseModel):
    """Configuration for the clipboard boundary."""

    backend: Literal["system", "memory"] = Field(
        default="system",
        description="'system' uses the OS clipboard, 'memory' keeps payloads in-process"
    )

    indent: int | None = Field(
        default=None,
        ge=0,
        le=8,
        description="JSON indent for encoded payloads (None = compact)"
    )

    model_config = {"frozen": True}


class Config(BaseModel):
    """Root configuration for blockclip."""

    placement: PlacementConfig = Field(default_factory=PlacementConfig, description="Placement settings")
    symbols: SymbolConfig = Field(default_factory=SymbolConfig, description="Symbol reconciliation settings")
    clipboard: ClipboardConfig = Field(default_factory=ClipboardConfig, description="Clipboard settings")

    model_config = {"frozen": True}
