"""File-backed block document used as the paste destination by the CLI.

Implements the host document interface on top of a JSON file and saves
with an atomic temp-file-rename write.
"""

import json
import os
import structlog
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

from pydantic import ValidationError
from block_tree import BlockNode, Position, SymbolRef, iter_blocks, visit
from blockclip.models.document import DocumentFile
from blockclip.models.symbol import Symbol, SymbolTable
from blockclip.models.viewport import Viewport
from blockclip.services.codec import DEFAULT_SYMBOL_MARKERS, block_to_dict, decode_block
from blockclip.services.exceptions import SchemaRejection
from blockclip.utils.ids import generate_block_id

logger = structlog.get_logger()


def atomic_write(path: Path, content: str) -> None:
    """
    Atomically write content to file with temp-file-rename pattern.

    1. Write to temporary file in the same directory
    2. fsync to ensure data is on disk
    3. Atomic rename to replace original file

    Args:
        path: Target file path
        content: Content to write

    Raises:
        OSError: On file I/O errors
    """
    temp_path = path.parent / f".{path.name}.tmp.{os.getpid()}"

    try:
        temp_path.write_text(content, encoding="utf-8")

        with open(temp_path, "r+", encoding="utf-8") as f:
            f.flush()
            os.fsync(f.fileno())

        temp_path.replace(path)

        logger.debug("atomic_write_success", path=str(path), size=len(content))

    except Exception as e:
        if temp_path.exists():
            temp_path.unlink()
        logger.error("atomic_write_failed", path=str(path), error=str(e))
        raise


def _is_empty_value(value: Any) -> bool:
    return value is None or (isinstance(value, (list, dict, tuple, set)) and len(value) == 0)


class JsonDocument:
    """Block document stored as a JSON file.

    Attributes:
        blocks: Top-level stacks (each root may carry a ``next`` chain)
        symbols: Document symbol table
        field_options: kind -> field name -> allowed values
        kinds: Accepted block kinds (None = any)
        viewport: Viewport used for paste placement
        path: File the document was loaded from
    """

    def __init__(
        self,
        blocks: Optional[list[BlockNode]] = None,
        symbols: Optional[SymbolTable] = None,
        field_options: Optional[dict[str, dict[str, list[Any]]]] = None,
        kinds: Optional[Iterable[str]] = None,
        viewport: Optional[Viewport] = None,
        path: Optional[Path] = None,
    ) -> None:
        self.blocks = blocks or []
        self.symbols = symbols or SymbolTable()
        self.field_options = field_options or {}
        self.kinds = set(kinds) if kinds is not None else None
        self.viewport = viewport or Viewport()
        self.path = path

        for block in self.iter_all_blocks():
            if block.block_id is None:
                block.block_id = generate_block_id()

    @classmethod
    def load(cls, path: Path, markers: Iterable[str] = DEFAULT_SYMBOL_MARKERS) -> "JsonDocument":
        """
        Load a document from a JSON file.

        Args:
            path: Document file
            markers: Field-name tokens that mark symbol references

        Returns:
            Loaded document (blocks without ids get fresh ones)

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file is not a valid document
        """
        if not path.exists():
            raise FileNotFoundError(f"Document not found: {path}")

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            document_file = DocumentFile.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ValueError(f"Invalid document {path}: {e}") from e

        blocks = [decode_block(block, markers) for block in document_file.blocks]

        logger.info("document_loaded", path=str(path), roots=len(blocks), symbols=len(document_file.symbols))

        return cls(
            blocks=blocks,
            symbols=SymbolTable(document_file.symbols),
            field_options=document_file.field_options,
            kinds=document_file.kinds,
            viewport=document_file.viewport,
            path=path,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "blocks": [block_to_dict(block) for block in self.blocks],
            "symbols": [symbol.model_dump() for symbol in self.symbols],
            "field_options": self.field_options,
            "viewport": self.viewport.model_dump(),
        }
        if self.kinds is not None:
            data["kinds"] = sorted(self.kinds)
        return data

    def save(self, path: Optional[Path] = None) -> Path:
        """Write the document back (atomically).

        Raises:
            ValueError: If no path is given and the document has none
        """
        target = path or self.path
        if target is None:
            raise ValueError("No path to save document to")
        atomic_write(target, json.dumps(self.to_dict(), ensure_ascii=False, indent=2) + "\n")
        return target

    # -- lookup ---------------------------------------------------------

    def iter_all_blocks(self) -> Iterator[BlockNode]:
        for root in self.blocks:
            yield from iter_blocks(root)

    def find_block(self, block_id: str) -> Optional[BlockNode]:
        for block in self.iter_all_blocks():
            if block.block_id == block_id:
                return block
        return None

    # -- host document interface -------------------------------------------

    def lookup_symbol(self, name: str) -> Optional[Symbol]:
        return self.symbols.lookup_symbol(name)

    def create_symbol(self, name: str, symbol_type: Optional[str]) -> Symbol:
        symbol = self.symbols.create_symbol(name, symbol_type)
        logger.info("symbol_created", declared_type=symbol_type)
        return symbol

    def delete_symbol(self, name: str) -> None:
        self.symbols.delete_symbol(name)

    def enumerate_field_options(self, kind: str, field_name: str) -> Optional[list[Any]]:
        options = self.field_options.get(kind, {}).get(field_name)
        return list(options) if options is not None else None

    def current_viewport(self) -> Viewport:
        return self.viewport

    def _check_subtree(self, node: BlockNode) -> None:
        def check(block: BlockNode) -> None:
            if self.kinds is not None and block.kind not in self.kinds:
                raise SchemaRejection(f"Unknown block kind: {block.kind}", kind=block.kind)
            for field_name, value in block.fields.items():
                if _is_empty_value(value):
                    raise SchemaRejection(
                        f"Field {block.kind}.{field_name} has no value",
                        kind=block.kind,
                        field_name=field_name,
                    )
                if isinstance(value, SymbolRef) and value.name not in self.symbols:
                    raise SchemaRejection(
                        f"Field {block.kind}.{field_name} references an unknown symbol",
                        kind=block.kind,
                        field_name=field_name,
                    )

        visit(node, check)

    def merge_subtree(self, node: BlockNode, position: Optional[Position]) -> str:
        """Append a subtree as a new top-level stack.

        Every merged block gets a fresh id.

        Returns:
            Id of the new root

        Raises:
            SchemaRejection: For unknown kinds, empty field values, or
                             references to symbols missing from the table
        """
        self._check_subtree(node)

        def assign_id(block: BlockNode) -> None:
            block.block_id = generate_block_id()

        visit(node, assign_id)
        node.position = position
        self.blocks.append(node)
        return node.block_id

    def remove_subtree(self, block_id: str) -> None:
        self.blocks = [block for block in self.blocks if block.block_id != block_id]
