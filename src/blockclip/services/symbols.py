"""Symbol reconciliation for pasted subtrees.

Every symbol reference in a pasted subtree is matched against the
destination table:

1. Same name, compatible type: reuse the existing symbol
2. Name unknown: create it with the referenced type
3. Same name, different type: create (or reuse) ``name_Copy``,
   ``name_Copy2``, ... and rewrite the reference to it

An existing symbol is never changed. A reference without a declared type is
compatible with any existing symbol of that name, and so is an existing
untyped symbol with any declared type.
"""

from typing import Optional, Protocol

from block_tree import BlockNode, SymbolRef, visit
from blockclip.models.report import ReconcileResult, SymbolConflict
from blockclip.models.symbol import Symbol
from blockclip.utils.logging import get_logger


logger = get_logger(__name__)

DEFAULT_COPY_SUFFIX = "_Copy"


class SymbolStore(Protocol):
    """Anything that can look up and create symbols by name."""

    def lookup_symbol(self, name: str) -> Optional[Symbol]: ...

    def create_symbol(self, name: str, symbol_type: Optional[str]) -> Symbol: ...


class RollbackSymbolStore(SymbolStore, Protocol):
    def delete_symbol(self, name: str) -> None: ...


def is_compatible(symbol: Symbol, declared_type: Optional[str]) -> bool:
    """Check whether a reference typed ``declared_type`` may use ``symbol``."""
    if not declared_type or symbol.is_untyped():
        return True
    return symbol.type == declared_type


def derived_name(name: str, attempt: int, suffix: str = DEFAULT_COPY_SUFFIX) -> str:
    """Return the rename candidate for a given attempt.

    Examples:
        >>> derived_name("Score", 1)
        'Score_Copy'
        >>> derived_name("Score", 3)
        'Score_Copy3'
    """
    if attempt <= 1:
        return f"{name}{suffix}"
    return f"{name}{suffix}{attempt}"


def reconcile(
    table: SymbolStore,
    name: str,
    declared_type: Optional[str] = None,
    copy_suffix: str = DEFAULT_COPY_SUFFIX,
) -> ReconcileResult:
    """Find or create the symbol a reference should point at.

    Calling this twice with the same arguments returns the same symbol and
    leaves the table unchanged the second time.

    Args:
        table: Destination symbol table (or a staged overlay of it)
        name: Referenced symbol name
        declared_type: Type carried by the reference (None = any)
        copy_suffix: Suffix for derived names on type conflict

    Returns:
        ReconcileResult naming the symbol to reference

    Raises:
        ValueError: If ``name`` is empty
    """
    if not name:
        raise ValueError("Symbol name must not be empty")

    existing = table.lookup_symbol(name)
    if existing is None:
        symbol = table.create_symbol(name, declared_type)
        return ReconcileResult(symbol=symbol, created=True)

    if is_compatible(existing, declared_type):
        return ReconcileResult(symbol=existing)

    attempt = 1
    while True:
        candidate_name = derived_name(name, attempt, copy_suffix)
        candidate = table.lookup_symbol(candidate_name)

        if candidate is None:
            symbol = table.create_symbol(candidate_name, declared_type)
            return ReconcileResult(symbol=symbol, created=True, renamed_from=name)

        if candidate.type == declared_type:
            # Renamed by an earlier paste of the same reference
            return ReconcileResult(symbol=candidate, renamed_from=name)

        attempt += 1


class StagedSymbolTable:
    """Overlay that stages symbol creation until the paste commits.

    Lookups see staged symbols first, then the destination table, so
    several references to one new name inside a single paste share a
    symbol. Nothing reaches the destination before :meth:`commit`, and
    :meth:`rollback` deletes whatever a commit added.

    Example:
        >>> staged = StagedSymbolTable(document)
        >>> reconcile(staged, "Score", "number")
        >>> staged.commit()
        >>> # merge failed later on:
        >>> staged.rollback()
    """

    def __init__(self, target: RollbackSymbolStore) -> None:
        self._target = target
        self._staged: dict[str, Symbol] = {}
        self._committed: list[Symbol] = []

    @property
    def staged(self) -> list[Symbol]:
        return list(self._staged.values())

    def lookup_symbol(self, name: str) -> Optional[Symbol]:
        if name in self._staged:
            return self._staged[name]
        return self._target.lookup_symbol(name)

    def create_symbol(self, name: str, symbol_type: Optional[str]) -> Symbol:
        if self.lookup_symbol(name) is not None:
            raise ValueError(f"Symbol already exists: {name}")
        symbol = Symbol(name=name, type=symbol_type)
        self._staged[name] = symbol
        return symbol

    def commit(self) -> list[Symbol]:
        """Create every staged symbol in the destination table.

        If the destination refuses one, the symbols created so far are
        removed again before the error propagates.

        Returns:
            Symbols created in the destination
        """
        try:
            for symbol in self._staged.values():
                created = self._target.create_symbol(symbol.name, symbol.type)
                self._committed.append(created)
        except Exception:
            self.rollback()
            raise

        self._staged.clear()
        return list(self._committed)

    def rollback(self) -> None:
        """Undo a commit and forget staged symbols."""
        for symbol in reversed(self._committed):
            self._target.delete_symbol(symbol.name)
        if self._committed:
            logger.info("symbols_rolled_back", count=len(self._committed))
        self._committed.clear()
        self._staged.clear()


class SymbolReconciler:
    """Reconciles every symbol reference of a subtree against a table."""

    def __init__(self, copy_suffix: str = DEFAULT_COPY_SUFFIX) -> None:
        self.copy_suffix = copy_suffix

    def reconcile_subtree(self, root: BlockNode, table: SymbolStore) -> list[SymbolConflict]:
        """Reconcile references in place.

        References whose symbol had to be renamed are rewritten to the new
        name in the block that holds them.

        Args:
            root: Subtree root (its ``next`` chain is included)
            table: Destination table, normally a StagedSymbolTable

        Returns:
            One SymbolConflict per rewritten reference
        """
        conflicts: list[SymbolConflict] = []

        def reconcile_block(block: BlockNode) -> None:
            for field_name, ref in block.symbol_fields().items():
                existing = table.lookup_symbol(ref.name)
                result = reconcile(table, ref.name, ref.declared_type, self.copy_suffix)

                if result.created:
                    logger.debug(
                        "symbol_staged",
                        kind=block.kind,
                        field=field_name,
                        declared_type=ref.declared_type,
                    )

                if result.renamed_from is None:
                    continue

                block.set_field(
                    field_name,
                    SymbolRef(result.symbol.name, ref.declared_type or result.symbol.type),
                )
                conflicts.append(
                    SymbolConflict(
                        original_name=ref.name,
                        new_name=result.symbol.name,
                        declared_type=ref.declared_type,
                        existing_type=existing.type if existing else None,
                    )
                )
                logger.warning(
                    "symbol_renamed",
                    kind=block.kind,
                    field=field_name,
                    declared_type=ref.declared_type,
                    existing_type=existing.type if existing else None,
                )

        visit(root, reconcile_block)
        return conflicts
