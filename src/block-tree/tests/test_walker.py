"""Tests for block tree traversal."""

import pytest
from block_tree.node import BlockNode, SymbolRef
from block_tree.walker import count_blocks, iter_blocks, visit


@pytest.fixture
def loop_block():
    """Build a small program:

    repeat (TIMES: number 3 / shadow number 10)
      DO: say "hi" -> say "bye"
    next: setVariable
    """
    loop = BlockNode("repeat")
    loop.set_input(
        "TIMES",
        block=BlockNode("number", fields={"NUM": 3}),
        shadow=BlockNode("number", fields={"NUM": 10}),
    )
    body = BlockNode("say", fields={"TEXT": "hi"})
    body.append(BlockNode("say", fields={"TEXT": "bye"}))
    loop.set_input("DO", block=body)
    loop.next = BlockNode("setVariable", fields={"VAR": SymbolRef("Score")})
    return loop


class TestVisitOrder:
    """Tests for pre-order visiting."""

    def test_visit_none_is_noop(self):
        """Test that visiting None never calls the callback."""
        seen = []
        visit(None, seen.append)
        assert seen == []

    def test_preorder_block_then_shadow_then_next(self, loop_block):
        """Test slot block before slot shadow, and next last."""
        seen = []
        visit(loop_block, lambda b: seen.append((b.kind, dict(b.fields))))

        assert seen == [
            ("repeat", {}),
            ("number", {"NUM": 3}),
            ("number", {"NUM": 10}),
            ("say", {"TEXT": "hi"}),
            ("say", {"TEXT": "bye"}),
            ("setVariable", {"VAR": SymbolRef("Score")}),
        ]

    def test_include_next_false_stops_at_root_sibling(self, loop_block):
        """Test that the root's next is skipped but nested stacks are kept."""
        kinds = [b.kind for b in iter_blocks(loop_block, include_next=False)]

        assert "setVariable" not in kinds
        assert kinds.count("say") == 2

    def test_iter_blocks_matches_visit(self, loop_block):
        """Test that the generator yields the same sequence as visit."""
        visited = []
        visit(loop_block, visited.append)

        assert list(iter_blocks(loop_block)) == visited

    def test_count_blocks(self, loop_block):
        """Test counting with and without the sibling chain."""
        assert count_blocks(loop_block) == 6
        assert count_blocks(loop_block, include_next=False) == 5


class TestVisitMutation:
    """Tests for callbacks that modify blocks during traversal."""

    def test_callback_can_edit_fields(self, loop_block):
        """Test in-place field edits are kept."""
        def bump(block):
            if block.kind == "number":
                block.set_field("NUM", block.get_field("NUM") + 1)

        visit(loop_block, bump)

        times = loop_block.inputs["TIMES"]
        assert times.block.get_field("NUM") == 4
        assert times.shadow.get_field("NUM") == 11

    def test_callback_clearing_inputs_still_visits_snapshot(self, loop_block):
        """Test that replacing inputs mid-walk does not break iteration."""
        seen = []

        def clear(block):
            seen.append(block.kind)
            if block.kind == "repeat":
                block.inputs = {}

        visit(loop_block, clear)

        assert seen[0] == "repeat"
        assert len(seen) == 6
        assert loop_block.inputs == {}
