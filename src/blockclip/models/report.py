"""Result models returned by reconciliation, validation and paste."""

from pydantic import BaseModel, Field
from typing import Any, Optional

from blockclip.models.symbol import Symbol


class ReconcileResult(BaseModel):
    """Outcome of reconciling one symbol reference."""

    symbol: Symbol = Field(..., description="Symbol the reference must point at")

    created: bool = Field(
        default=False,
        description="Whether the symbol was created by this call"
    )

    renamed_from: Optional[str] = Field(
        default=None,
        description="Original referenced name when a type conflict forced a new name"
    )

    model_config = {"frozen": True}


class FieldValidation(BaseModel):
    """Outcome of validating one field against the destination schema."""

    value: Any = Field(..., description="Value to store in the field")

    changed: bool = Field(
        default=False,
        description="Whether the value differs from the input"
    )

    warning: Optional[str] = Field(
        default=None,
        description="Set when the result is a degraded fallback or options were unavailable"
    )

    model_config = {"frozen": True}


class SymbolConflict(BaseModel):
    """Record of a reference renamed because of a type conflict."""

    original_name: str
    new_name: str
    declared_type: Optional[str] = None
    existing_type: Optional[str] = None

    model_config = {"frozen": True}


class FieldCorrection(BaseModel):
    """Record of a constrained field whose value was replaced."""

    kind: str
    field_name: str
    warning: Optional[str] = None

    model_config = {"frozen": True}


class PasteReport(BaseModel):
    """Summary of a completed paste."""

    merged_block_ids: list[str] = Field(default_factory=list)
    created_symbols: list[Symbol] = Field(default_factory=list)
    renames: list[SymbolConflict] = Field(default_factory=list)
    corrections: list[FieldCorrection] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    retried: bool = Field(default=False, description="Whether the stripped-field retry was used")

    model_config = {"frozen": False}
