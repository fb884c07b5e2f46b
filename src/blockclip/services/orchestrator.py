"""Copy and paste of block subtrees through the clipboard.

Copy: extract -> encode -> clipboard write.

Paste: clipboard read -> decode -> reconcile symbols and validate fields
(staged) -> place -> commit symbols and merge. A paste that fails at any
step leaves the destination document and symbol table as they were.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Union

from block_tree import BlockNode, visit
from blockclip.models.config import Config
from blockclip.models.report import PasteReport
from blockclip.models.viewport import PointerSnapshot, PointerState, Viewport
from blockclip.services.clipboard import ClipboardBoundary
from blockclip.services.codec import decode_payload, encode_payload
from blockclip.services.exceptions import (
    EmptyClipboard,
    MalformedPayload,
    SchemaRejection,
    TransferBusy,
    TransferError,
    TransferFailure,
)
from blockclip.services.extractor import SymbolLookup, extract_selection
from blockclip.services.host import HostDocument
from blockclip.services.placement import PlacementMode, plan_placement, screen_to_document
from blockclip.services.schema import SchemaValidator
from blockclip.services.symbols import StagedSymbolTable, SymbolReconciler
from blockclip.utils.logging import get_logger


logger = get_logger(__name__)


def strip_empty_fields(root: BlockNode) -> int:
    """Remove fields whose value is None or an empty collection.

    Args:
        root: Subtree root (modified in place, ``next`` chain included)

    Returns:
        Number of fields removed
    """
    removed = 0

    def strip(block: BlockNode) -> None:
        nonlocal removed
        for name in list(block.fields):
            value = block.fields[name]
            if value is None or (isinstance(value, (list, dict, tuple, set)) and len(value) == 0):
                del block.fields[name]
                removed += 1

    visit(root, strip)
    return removed


class TransferOrchestrator:
    """Runs copy and paste against one host document and clipboard.

    Only one copy or paste runs at a time; starting another while one is
    waiting on the clipboard raises TransferBusy.

    Example:
        >>> orchestrator = TransferOrchestrator(document, SystemClipboard())
        >>> await orchestrator.copy(block)
        >>> orchestrator.pointer.update(420, 310)
        >>> report = await orchestrator.paste()
    """

    def __init__(
        self,
        host: HostDocument,
        clipboard: ClipboardBoundary,
        config: Optional[Config] = None,
        pointer: Optional[PointerState] = None,
    ) -> None:
        self.host = host
        self.clipboard = clipboard
        self.config = config or Config()
        self.pointer = pointer or PointerState()
        self.reconciler = SymbolReconciler(copy_suffix=self.config.symbols.copy_suffix)
        self.validator = SchemaValidator(host)
        self._lock = asyncio.Lock()
        self._pending: Optional[str] = None

    @asynccontextmanager
    async def _exclusive(self, operation: str) -> AsyncIterator[None]:
        if self._lock.locked():
            logger.warning("transfer_busy", requested=operation, pending=self._pending)
            raise TransferBusy(self._pending or "transfer")
        async with self._lock:
            self._pending = operation
            try:
                yield
            finally:
                self._pending = None

    # ------------------------------------------------------------------
    # Copy
    # ------------------------------------------------------------------

    async def copy(
        self,
        nodes: Union[BlockNode, list[BlockNode]],
        lookup_symbol: Optional[SymbolLookup] = None,
    ) -> str:
        """Copy one or more blocks (without their following stacks).

        Args:
            nodes: Block or selected blocks in the source document
            lookup_symbol: Source symbol lookup (defaults to the host's)

        Returns:
            Payload text written to the clipboard

        Raises:
            TransferBusy: If another transfer is pending
            TransferFailure: If the clipboard refuses the write
            ValueError: If ``nodes`` is empty
        """
        if isinstance(nodes, BlockNode):
            nodes = [nodes]
        if not nodes:
            raise ValueError("No blocks to copy")

        async with self._exclusive("copy"):
            roots = extract_selection(nodes, lookup_symbol=lookup_symbol or self.host.lookup_symbol)
            text = encode_payload(roots, indent=self.config.clipboard.indent)

            try:
                await self.clipboard.write_text(text)
            except TransferFailure as e:
                logger.error("copy_failed", roots=len(roots), operation=e.operation, error=e.message)
                raise

            logger.info("copy_completed", roots=len(roots), kinds=[root.kind for root in roots], size=len(text))
            return text

    # ------------------------------------------------------------------
    # Paste
    # ------------------------------------------------------------------

    async def paste(
        self,
        pointer: Optional[PointerSnapshot] = None,
        viewport: Optional[Viewport] = None,
        mode: Optional[PlacementMode] = None,
    ) -> PasteReport:
        """Paste the clipboard payload at the pointer.

        Args:
            pointer: Screen position (defaults to the tracked pointer, read once)
            viewport: Viewport to map through (defaults to the host's)
            mode: Placement mode (defaults to configuration)

        Returns:
            PasteReport describing what was merged

        Raises:
            TransferBusy: If another transfer is pending
            TransferFailure: If the clipboard refuses the read
            EmptyClipboard: If the clipboard holds no text
            MalformedPayload: If the text is not a block payload
            SchemaRejection: If the destination refuses a subtree twice or fails while merging
            TransferError: If the destination viewport cannot be read
        """
        async with self._exclusive("paste"):
            if pointer is None:
                pointer = self.pointer.snapshot()
            if viewport is None:
                try:
                    viewport = self.host.current_viewport()
                except Exception as e:
                    logger.error("paste_failed", stage="viewport", error_type=type(e).__name__, error=str(e))
                    raise TransferError(f"Destination viewport is unavailable: {e}") from e
            mode = mode or self.config.placement.mode

            try:
                text = await self.clipboard.read_text()
            except TransferFailure as e:
                logger.error("paste_failed", stage="read", error=e.message)
                raise

            if text is None or not text.strip():
                logger.info("paste_empty_clipboard")
                raise EmptyClipboard()

            try:
                payload = decode_payload(text, self.config.symbols.markers)
            except MalformedPayload as e:
                logger.error("paste_failed", stage="decode", reason=e.reason, size=len(text))
                raise

            logger.info("paste_started", roots=len(payload.roots), kinds=payload.kinds(), blocks=payload.block_count())

            report = PasteReport()
            staged = StagedSymbolTable(self.host)

            for root in payload.roots:
                report.renames.extend(self.reconciler.reconcile_subtree(root, staged))
                report.corrections.extend(self.validator.validate_subtree(root))

            report.warnings.extend(c.warning for c in report.corrections if c.warning)

            target = screen_to_document(pointer, viewport)
            applied = plan_placement(payload.roots, target, mode)
            logger.debug("paste_placed", mode=applied, x=target.x, y=target.y)

            self._merge(payload.roots, staged, report)

            logger.info(
                "paste_completed",
                roots=len(report.merged_block_ids),
                created_symbols=len(report.created_symbols),
                renames=len(report.renames),
                corrections=len(report.corrections),
                retried=report.retried,
            )
            return report

    def _merge(self, roots: list[BlockNode], staged: StagedSymbolTable, report: PasteReport) -> None:
        """Commit staged symbols and merge every root, all or nothing."""
        try:
            report.created_symbols = staged.commit()
        except TransferError:
            raise
        except Exception as e:
            logger.error("paste_failed", stage="symbols", error=str(e))
            raise SchemaRejection(f"Destination refused a symbol: {e}") from e

        merged: list[str] = []
        try:
            for root in roots:
                block_id, retried = self._merge_root(root)
                merged.append(block_id)
                report.retried = report.retried or retried
        except Exception as e:
            for block_id in reversed(merged):
                self.host.remove_subtree(block_id)
            staged.rollback()
            report.created_symbols = []
            logger.error("paste_rolled_back", merged=len(merged), roots=len(roots))
            if isinstance(e, TransferError):
                raise
            logger.error("paste_failed", stage="merge", error_type=type(e).__name__, error=str(e))
            raise SchemaRejection(f"Destination failed to merge a block: {e}") from e

        report.merged_block_ids = merged

    def _merge_root(self, root: BlockNode) -> tuple[str, bool]:
        """Merge one root, retrying once with empty fields stripped.

        Returns:
            (block id, whether the retry was needed)
        """
        try:
            return self.host.merge_subtree(root, root.position), False
        except SchemaRejection as e:
            removed = strip_empty_fields(root)
            logger.warning(
                "merge_rejected_retrying",
                kind=e.kind or root.kind,
                field=e.field_name,
                stripped_fields=removed,
            )

        try:
            return self.host.merge_subtree(root, root.position), True
        except SchemaRejection as e:
            logger.error("paste_failed", stage="merge", kind=e.kind or root.kind, field=e.field_name)
            raise
