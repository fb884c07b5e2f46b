"""Shared test fixtures for all test modules."""

import pytest
from block_tree import BlockNode, Position, SymbolRef
from blockclip.models.symbol import Symbol, SymbolTable
from blockclip.models.viewport import Viewport
from blockclip.services.clipboard import MemoryClipboard
from blockclip.services.document_store import JsonDocument


@pytest.fixture
def source_document():
    """
    Source document with one stack:

    setVariable(VAR=$Score) @ (10, 10)
      VALUE: number 5 (shadow number 0)
    next: pickMode(MODE="Legacy")
    """
    set_var = BlockNode(
        "setVariable",
        fields={"VAR": SymbolRef("Score")},
        position=Position(10, 10),
    )
    set_var.set_input(
        "VALUE",
        block=BlockNode("number", fields={"NUM": 5}),
        shadow=BlockNode("number", fields={"NUM": 0}),
    )
    set_var.next = BlockNode("pickMode", fields={"MODE": "Legacy"})

    return JsonDocument(
        blocks=[set_var],
        symbols=SymbolTable([Symbol(name="Score", type="number")]),
        field_options={"pickMode": {"MODE": ["Legacy", "Modern"]}},
    )


@pytest.fixture
def destination_document():
    """Destination whose Score is a string and whose MODE options changed."""
    return JsonDocument(
        blocks=[],
        symbols=SymbolTable([Symbol(name="Score", type="string")]),
        field_options={"pickMode": {"MODE": ["A", "B"]}},
        viewport=Viewport(),
    )


@pytest.fixture
def clipboard():
    """Empty in-memory clipboard."""
    return MemoryClipboard()
