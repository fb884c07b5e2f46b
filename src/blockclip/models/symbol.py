"""Symbol and SymbolTable models."""

from pydantic import BaseModel, Field
from typing import Iterator, Optional


class Symbol(BaseModel):
    """Named, typed entry in a document's symbol table."""

    name: str = Field(..., min_length=1, description="Symbol name, unique within a table")

    type: Optional[str] = Field(
        default=None,
        description="Declared type tag (None or '' = untyped)"
    )

    def is_untyped(self) -> bool:
        return not self.type

    model_config = {"frozen": True}


class SymbolTable:
    """In-memory symbol table for one document.

    Passed explicitly to whoever needs it; there is no process-wide table.

    Example:
        >>> table = SymbolTable([Symbol(name="Score", type="string")])
        >>> table.lookup_symbol("Score").type
        'string'
    """

    def __init__(self, symbols: Optional[list[Symbol]] = None) -> None:
        self._symbols: dict[str, Symbol] = {}
        for symbol in symbols or []:
            self._symbols[symbol.name] = symbol

    def lookup_symbol(self, name: str) -> Optional[Symbol]:
        return self._symbols.get(name)

    def create_symbol(self, name: str, symbol_type: Optional[str]) -> Symbol:
        """Create a new symbol.

        Raises:
            ValueError: If a symbol with this name already exists
        """
        if name in self._symbols:
            raise ValueError(f"Symbol already exists: {name}")
        symbol = Symbol(name=name, type=symbol_type)
        self._symbols[name] = symbol
        return symbol

    def delete_symbol(self, name: str) -> None:
        self._symbols.pop(name, None)

    def symbols(self) -> list[Symbol]:
        return list(self._symbols.values())

    def __contains__(self, name: object) -> bool:
        return name in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(list(self._symbols.values()))
