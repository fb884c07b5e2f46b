"""Unit tests for subtree extraction."""

from block_tree import BlockNode, Position, SymbolRef, count_blocks, iter_blocks
from blockclip.models.symbol import Symbol, SymbolTable
from blockclip.services.extractor import extract, extract_selection


class TestExtract:
    """Tests for extracting a single block."""

    def test_next_is_never_captured(self, source_document):
        """Test that the block stacked below is left out."""
        live = source_document.blocks[0]
        assert live.next is not None

        subtree = extract(live)

        assert subtree.next is None
        assert count_blocks(subtree) == 3

    def test_source_is_untouched(self, source_document):
        """Test that extraction does not modify the live document."""
        live = source_document.blocks[0]
        follower = live.next

        subtree = extract(live, lookup_symbol=source_document.lookup_symbol)
        subtree.inputs["VALUE"].block.set_field("NUM", 99)

        assert live.next is follower
        assert live.fields["VAR"] == SymbolRef("Score")
        assert live.inputs["VALUE"].block.get_field("NUM") == 5

    def test_block_ids_cleared(self, source_document):
        """Test the copy carries no source ids while the source keeps them."""
        live = source_document.blocks[0]
        live_ids = [b.block_id for b in iter_blocks(live, include_next=False)]

        subtree = extract(live)

        assert all(b.block_id is None for b in iter_blocks(subtree))
        assert [b.block_id for b in iter_blocks(live, include_next=False)] == live_ids
        assert all(live_ids)

    def test_nested_stacks_are_captured(self):
        """Test that a stack inside an input slot belongs to the subtree."""
        loop = BlockNode("repeat")
        body = BlockNode("step1")
        body.append(BlockNode("step2"))
        loop.set_input("DO", block=body)
        loop.next = BlockNode("after")

        subtree = extract(loop)

        assert [b.kind for b in subtree.get_input("DO").stack()] == ["step1", "step2"]
        assert subtree.next is None

    def test_position_kept_or_dropped(self):
        """Test include_position controls the paste origin."""
        block = BlockNode("say", position=Position(5, 6))

        assert extract(block).position == Position(5, 6)
        assert extract(block, include_position=False).position is None

    def test_declared_types_filled_from_source(self, source_document):
        """Test untyped references get the source table's type."""
        subtree = extract(source_document.blocks[0], lookup_symbol=source_document.lookup_symbol)

        assert subtree.fields["VAR"] == SymbolRef("Score", "number")

    def test_existing_declared_type_is_kept(self):
        """Test that a typed reference is not overwritten."""
        table = SymbolTable([Symbol(name="Score", type="number")])
        block = BlockNode("setVariable", fields={"VAR": SymbolRef("Score", "string")})

        subtree = extract(block, lookup_symbol=table.lookup_symbol)

        assert subtree.fields["VAR"] == SymbolRef("Score", "string")

    def test_unknown_symbol_stays_untyped(self):
        """Test references missing from the source table keep no type."""
        block = BlockNode("setVariable", fields={"VAR": SymbolRef("Ghost")})

        subtree = extract(block, lookup_symbol=SymbolTable().lookup_symbol)

        assert subtree.fields["VAR"] == SymbolRef("Ghost")


class TestExtractSelection:
    """Tests for multi-block extraction."""

    def test_keeps_order_and_positions(self):
        """Test that every root keeps its own position."""
        first = BlockNode("a", position=Position(10, 10))
        second = BlockNode("b", position=Position(40, 10))
        first.next = second

        roots = extract_selection([first, second])

        assert [r.kind for r in roots] == ["a", "b"]
        assert roots[0].position == Position(10, 10)
        assert roots[1].position == Position(40, 10)
        assert roots[0].next is None
