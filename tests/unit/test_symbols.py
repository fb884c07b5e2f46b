"""Unit tests for symbol reconciliation."""

import pytest
from block_tree import BlockNode, SymbolRef
from blockclip.models.symbol import Symbol, SymbolTable
from blockclip.services.symbols import (
    StagedSymbolTable,
    SymbolReconciler,
    derived_name,
    is_compatible,
    reconcile,
)


class TestDerivedName:
    """Tests for rename candidates."""

    def test_sequence(self):
        """Test _Copy, _Copy2, _Copy3 ..."""
        assert [derived_name("X", i) for i in (1, 2, 3)] == ["X_Copy", "X_Copy2", "X_Copy3"]

    def test_custom_suffix(self):
        """Test configured suffix."""
        assert derived_name("X", 2, suffix="_dup") == "X_dup2"


class TestIsCompatible:
    """Tests for type compatibility."""

    def test_missing_declared_type_is_compatible(self):
        """Test a reference without type fits any symbol."""
        assert is_compatible(Symbol(name="X", type="number"), None)

    def test_untyped_symbol_is_compatible(self):
        """Test an untyped existing symbol fits any reference."""
        assert is_compatible(Symbol(name="X", type=""), "number")
        assert is_compatible(Symbol(name="X"), "number")

    def test_type_mismatch(self):
        """Test different types conflict."""
        assert not is_compatible(Symbol(name="X", type="string"), "number")


class TestReconcile:
    """Tests for reconcile()."""

    def test_creates_missing_symbol(self):
        """Test unknown names are created with the declared type."""
        table = SymbolTable()

        result = reconcile(table, "Score", "number")

        assert result.created
        assert result.renamed_from is None
        assert table.lookup_symbol("Score") == Symbol(name="Score", type="number")

    def test_idempotent(self):
        """Test the second call returns the same symbol and changes nothing."""
        table = SymbolTable()

        first = reconcile(table, "Score", "number")
        snapshot = table.symbols()
        second = reconcile(table, "Score", "number")

        assert second.symbol == first.symbol
        assert not second.created
        assert table.symbols() == snapshot

    def test_reuses_matching_symbol(self):
        """Test an existing same-typed symbol is returned unchanged."""
        table = SymbolTable([Symbol(name="Score", type="number")])

        result = reconcile(table, "Score", "number")

        assert result.symbol == Symbol(name="Score", type="number")
        assert not result.created
        assert len(table) == 1

    def test_untyped_reference_never_renames(self):
        """Test a reference without type uses the existing symbol."""
        table = SymbolTable([Symbol(name="Score", type="string")])

        result = reconcile(table, "Score", None)

        assert result.symbol.name == "Score"
        assert len(table) == 1

    def test_rename_on_type_conflict(self):
        """Test conflicting types get a derived name and leave X alone."""
        table = SymbolTable([Symbol(name="X", type="TypeA")])

        result = reconcile(table, "X", "TypeB")

        assert result.symbol.name != "X"
        assert result.symbol == Symbol(name="X_Copy", type="TypeB")
        assert result.renamed_from == "X"
        assert table.lookup_symbol("X") == Symbol(name="X", type="TypeA")

    def test_rename_skips_taken_names(self):
        """Test the counter moves past names with other types."""
        table = SymbolTable([
            Symbol(name="X", type="a"),
            Symbol(name="X_Copy", type="c"),
            Symbol(name="X_Copy2", type="d"),
        ])

        result = reconcile(table, "X", "b")

        assert result.symbol.name == "X_Copy3"
        assert result.created

    def test_rename_path_is_idempotent(self):
        """Test reconciling the same conflict twice reuses the renamed symbol."""
        table = SymbolTable([Symbol(name="X", type="a")])

        first = reconcile(table, "X", "b")
        second = reconcile(table, "X", "b")

        assert second.symbol == first.symbol
        assert not second.created
        assert second.renamed_from == "X"
        assert len(table) == 2

    def test_empty_name_rejected(self):
        """Test that an empty name is a caller error."""
        with pytest.raises(ValueError):
            reconcile(SymbolTable(), "", "number")


class TestStagedSymbolTable:
    """Tests for staged creation with commit and rollback."""

    def test_staged_symbols_invisible_to_target_until_commit(self):
        """Test that staging does not touch the destination."""
        target = SymbolTable()
        staged = StagedSymbolTable(target)

        reconcile(staged, "Score", "number")

        assert "Score" not in target
        assert staged.lookup_symbol("Score") == Symbol(name="Score", type="number")

        created = staged.commit()

        assert created == [Symbol(name="Score", type="number")]
        assert target.lookup_symbol("Score") == Symbol(name="Score", type="number")

    def test_rollback_removes_committed(self):
        """Test rollback restores the destination exactly."""
        target = SymbolTable([Symbol(name="Keep", type="number")])
        staged = StagedSymbolTable(target)
        reconcile(staged, "A", "number")
        reconcile(staged, "B", "string")
        staged.commit()

        staged.rollback()

        assert target.symbols() == [Symbol(name="Keep", type="number")]

    def test_rollback_before_commit_discards(self):
        """Test rolling back staged-only symbols."""
        target = SymbolTable()
        staged = StagedSymbolTable(target)
        reconcile(staged, "A", "number")

        staged.rollback()

        assert staged.staged == []
        assert len(target) == 0

    def test_commit_failure_rolls_back_partial(self):
        """Test a refused creation undoes the earlier ones."""

        class RefusingTable(SymbolTable):
            def create_symbol(self, name, symbol_type):
                if name == "B":
                    raise ValueError("refused")
                return super().create_symbol(name, symbol_type)

        target = RefusingTable()
        staged = StagedSymbolTable(target)
        reconcile(staged, "A", "number")
        reconcile(staged, "B", "number")

        with pytest.raises(ValueError, match="refused"):
            staged.commit()

        assert len(target) == 0


class TestSymbolReconciler:
    """Tests for reconciling whole subtrees."""

    def test_rewrites_conflicting_references(self):
        """Test every reference to a conflicting name is rewritten."""
        target = SymbolTable([Symbol(name="Score", type="string")])
        staged = StagedSymbolTable(target)

        root = BlockNode("setVariable", fields={"VAR": SymbolRef("Score", "number")})
        root.set_input("VALUE", block=BlockNode("getVariable", fields={"VAR": SymbolRef("Score", "number")}))

        conflicts = SymbolReconciler().reconcile_subtree(root, staged)

        assert root.fields["VAR"] == SymbolRef("Score_Copy", "number")
        assert root.get_input("VALUE").fields["VAR"] == SymbolRef("Score_Copy", "number")
        assert len(conflicts) == 2
        assert conflicts[0].original_name == "Score"
        assert conflicts[0].new_name == "Score_Copy"
        assert conflicts[0].existing_type == "string"
        assert [s.name for s in staged.staged] == ["Score_Copy"]

    def test_leaves_compatible_references(self):
        """Test references that resolve as-is are not touched."""
        target = SymbolTable([Symbol(name="Lives", type="number")])
        root = BlockNode("changeVariable", fields={"VAR": SymbolRef("Lives"), "BY": 1})

        conflicts = SymbolReconciler().reconcile_subtree(root, StagedSymbolTable(target))

        assert conflicts == []
        assert root.fields == {"VAR": SymbolRef("Lives"), "BY": 1}

    def test_custom_copy_suffix(self):
        """Test the configured suffix is used for renames."""
        target = SymbolTable([Symbol(name="X", type="a")])
        root = BlockNode("k", fields={"VAR": SymbolRef("X", "b")})

        SymbolReconciler(copy_suffix="_2nd").reconcile_subtree(root, StagedSymbolTable(target))

        assert root.fields["VAR"].name == "X_2nd"
