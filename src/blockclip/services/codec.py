"""Encoding and decoding of the portable clipboard payload.

The payload is UTF-8 JSON. A single subtree is written as a bare block
object; several subtrees copied together are wrapped in a collection::

    {"kind": "setVariable", "x": 10, "y": 10,
     "fields": {"VAR": {"symbol": "Score", "type": "number"}}}

    {"format": "blockclip/1", "blocks": [{...}, {...}]}

Symbol references are resolved once here, at decode time: a field value
shaped ``{"symbol": ..., "type": ...}`` is always a reference, and a plain
string in a field whose name carries a marker token (``VAR``, ``VARIABLE``,
``SYMBOL`` by default) is promoted to an untyped reference.
"""

import json
import math
import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from pydantic import ValidationError
from block_tree import BlockNode, InputSlot, Position, SymbolRef, count_blocks
from blockclip.models.payload import (
    PAYLOAD_FORMAT,
    BlockPayload,
    CollectionPayload,
    SymbolRefPayload,
)
from blockclip.services.exceptions import MalformedPayload
from blockclip.utils.logging import get_logger


logger = get_logger(__name__)

DEFAULT_SYMBOL_MARKERS = ("VAR", "VARIABLE", "SYMBOL")

_TOKEN_SPLIT = re.compile(r"[^A-Za-z]+|(?<=[a-z])(?=[A-Z])")


@dataclass
class PortablePayload:
    """Decoded clipboard payload.

    Attributes:
        roots: Subtree roots in copy order
        collection: True when the payload was a collection (even of one)
    """

    roots: list[BlockNode]
    collection: bool = False

    def kinds(self) -> list[str]:
        return [root.kind for root in self.roots]

    def block_count(self) -> int:
        return sum(count_blocks(root) for root in self.roots)


def is_symbol_field_name(name: str, markers: Iterable[str] = DEFAULT_SYMBOL_MARKERS) -> bool:
    """Check whether a field name marks a symbol reference.

    The name is split into tokens on non-letters and camelCase boundaries;
    a token equal to a marker makes the field a reference.

    Examples:
        >>> is_symbol_field_name("VAR")
        True
        >>> is_symbol_field_name("listVariable")
        True
        >>> is_symbol_field_name("VARIANT")
        False
    """
    wanted = {marker.upper() for marker in markers}
    tokens = [token.upper() for token in _TOKEN_SPLIT.split(name) if token]
    return any(token in wanted for token in tokens)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _encode_value(value: Any) -> Any:
    if isinstance(value, SymbolRef):
        encoded = {"symbol": value.name}
        if value.declared_type is not None:
            encoded["type"] = value.declared_type
        return encoded
    return value


def block_to_dict(node: BlockNode) -> dict[str, Any]:
    """Convert a block (and everything linked from it) to a JSON-ready dict."""
    data: dict[str, Any] = {"kind": node.kind}

    if node.block_id is not None:
        data["id"] = node.block_id

    if node.position is not None:
        data["x"] = node.position.x
        data["y"] = node.position.y

    if node.fields:
        data["fields"] = {name: _encode_value(value) for name, value in node.fields.items()}

    inputs = {}
    for slot, input_slot in node.inputs.items():
        if input_slot.is_empty():
            continue
        slot_data = {}
        if input_slot.block is not None:
            slot_data["block"] = block_to_dict(input_slot.block)
        if input_slot.shadow is not None:
            slot_data["shadow"] = block_to_dict(input_slot.shadow)
        inputs[slot] = slot_data
    if inputs:
        data["inputs"] = inputs

    if node.next is not None:
        data["next"] = block_to_dict(node.next)

    return data


def encode_payload(roots: list[BlockNode], indent: Optional[int] = None) -> str:
    """Encode subtree roots as payload text.

    Args:
        roots: One or more subtree roots
        indent: JSON indent (None = compact)

    Returns:
        JSON text (non-ASCII characters kept as-is)

    Raises:
        ValueError: If ``roots`` is empty
    """
    if not roots:
        raise ValueError("Nothing to encode")

    if len(roots) == 1:
        data: Any = block_to_dict(roots[0])
    else:
        data = {"format": PAYLOAD_FORMAT, "blocks": [block_to_dict(root) for root in roots]}

    return json.dumps(data, ensure_ascii=False, indent=indent)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _describe_validation_error(error: ValidationError) -> str:
    """Summarize pydantic errors by location only (input values left out)."""
    parts = []
    for detail in error.errors()[:3]:
        location = ".".join(str(part) for part in detail["loc"]) or "(root)"
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)


def _decode_value(kind: str, name: str, value: Any, markers: tuple[str, ...]) -> Any:
    if isinstance(value, dict):
        if "symbol" not in value:
            raise MalformedPayload(f"field '{name}' on block '{kind}' has an unsupported object value")
        try:
            ref = SymbolRefPayload.model_validate(value)
        except ValidationError as e:
            raise MalformedPayload(
                f"field '{name}' on block '{kind}': {_describe_validation_error(e)}"
            ) from e
        return SymbolRef(ref.symbol, ref.type)

    if isinstance(value, float) and not math.isfinite(value):
        raise MalformedPayload(f"field '{name}' on block '{kind}' is not a finite number")

    if isinstance(value, str) and value and is_symbol_field_name(name, markers):
        return SymbolRef(value)

    return value


def _to_block(payload: BlockPayload, markers: tuple[str, ...], keep_ids: bool = True) -> BlockNode:
    fields = {
        name: _decode_value(payload.kind, name, value, markers)
        for name, value in payload.fields.items()
    }

    inputs = {}
    for slot, slot_payload in payload.inputs.items():
        inputs[slot] = InputSlot(
            block=_to_block(slot_payload.block, markers, keep_ids) if slot_payload.block else None,
            shadow=_to_block(slot_payload.shadow, markers, keep_ids) if slot_payload.shadow else None,
        )

    position = None
    if payload.x is not None and payload.y is not None:
        position = Position(payload.x, payload.y)

    return BlockNode(
        kind=payload.kind,
        fields=fields,
        inputs=inputs,
        next=_to_block(payload.next, markers, keep_ids) if payload.next else None,
        position=position,
        block_id=payload.id if keep_ids else None,
    )


def decode_block(data: dict[str, Any], markers: Iterable[str] = DEFAULT_SYMBOL_MARKERS) -> BlockNode:
    """Convert one JSON block object to a BlockNode.

    Raises:
        MalformedPayload: If the object is not a valid block
    """
    try:
        payload = BlockPayload.model_validate(data)
    except ValidationError as e:
        raise MalformedPayload(_describe_validation_error(e)) from e
    return _to_block(payload, tuple(markers))


def _reject_constant(name: str) -> Any:
    raise MalformedPayload(f"non-finite number {name} is not allowed")


def decode_payload(text: str, markers: Iterable[str] = DEFAULT_SYMBOL_MARKERS) -> PortablePayload:
    """Decode clipboard text into subtree roots.

    Args:
        text: Clipboard text
        markers: Field-name tokens that mark symbol references

    Returns:
        PortablePayload with one or more roots. Block ids in the text are
        dropped; merged blocks always get fresh ids.

    Raises:
        MalformedPayload: If the text is not JSON, contains NaN or Infinity,
                          a root lacks ``kind``, or the structure is
                          otherwise invalid
    """
    markers = tuple(markers)

    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise MalformedPayload(f"not JSON (line {e.lineno}, column {e.colno})") from e
    except RecursionError as e:
        raise MalformedPayload("nesting too deep") from e

    try:
        if isinstance(data, list):
            collection = CollectionPayload.model_validate({"blocks": data})
            roots, is_collection = collection.blocks, True
        elif isinstance(data, dict) and "blocks" in data:
            collection = CollectionPayload.model_validate(data)
            roots, is_collection = collection.blocks, True
        elif isinstance(data, dict):
            roots, is_collection = [BlockPayload.model_validate(data)], False
        else:
            raise MalformedPayload(f"expected a JSON object or list, got {type(data).__name__}")
    except ValidationError as e:
        raise MalformedPayload(_describe_validation_error(e)) from e
    except RecursionError as e:
        raise MalformedPayload("nesting too deep") from e

    payload = PortablePayload(
        roots=[_to_block(root, markers, keep_ids=False) for root in roots],
        collection=is_collection,
    )

    logger.debug(
        "payload_decoded",
        roots=len(payload.roots),
        kinds=payload.kinds(),
        blocks=payload.block_count(),
    )
    return payload
