"""Host-facing copy/paste actions.

The host wires its notifications here: pointer moves, block selection
clicks, and the "copy" / "paste" menu items. Failures are logged and
reported through ``notify``; nothing is raised back into the host.
"""

from typing import Callable, Optional

from block_tree import BlockNode
from blockclip.models.report import PasteReport
from blockclip.services.exceptions import TransferError
from blockclip.services.orchestrator import TransferOrchestrator
from blockclip.services.selection import SelectionSet
from blockclip.utils.logging import get_logger


logger = get_logger(__name__)

BlockResolver = Callable[[str], Optional[BlockNode]]
Notifier = Callable[[str], None]


def summarize_paste(report: PasteReport) -> str:
    """Build a one-line user message for a completed paste."""
    parts = [f"Pasted {len(report.merged_block_ids)} block(s)"]
    if report.renames:
        renamed = ", ".join(f"{r.original_name} -> {r.new_name}" for r in report.renames)
        parts.append(f"renamed {renamed}")
    if report.corrections:
        parts.append(f"reset {len(report.corrections)} field(s)")
    if report.retried:
        parts.append("dropped empty fields")
    return "; ".join(parts)


class ClipboardActions:
    """Receives host notifications and runs copy/paste for them.

    Args:
        orchestrator: Orchestrator bound to the current document
        resolve_block: Returns the live block for a selected block id
        notify: Shows a message to the user
    """

    def __init__(
        self,
        orchestrator: TransferOrchestrator,
        resolve_block: BlockResolver,
        notify: Notifier,
    ) -> None:
        self.orchestrator = orchestrator
        self.resolve_block = resolve_block
        self.notify = notify
        self.selection = SelectionSet()

    def pointer_moved(self, x: float, y: float) -> None:
        self.orchestrator.pointer.update(x, y)

    def block_selected(self, block_id: str, extend: bool = False) -> None:
        self.selection.select(block_id, extend=extend)

    def _selected_blocks(self) -> list[BlockNode]:
        blocks = []
        for block_id in self.selection:
            block = self.resolve_block(block_id)
            if block is None:
                # Deleted since it was selected
                self.selection.discard(block_id)
                continue
            blocks.append(block)
        return blocks

    async def copy_requested(self, node: Optional[BlockNode] = None) -> Optional[str]:
        """Copy ``node``, or the current selection when no node is given.

        Returns:
            Payload text, or None if nothing was copied
        """
        nodes = [node] if node is not None else self._selected_blocks()
        if not nodes:
            self.notify("No blocks selected. Hold Shift and click blocks to select them.")
            return None

        try:
            text = await self.orchestrator.copy(nodes)
        except TransferError as e:
            logger.error("copy_action_failed", error_type=type(e).__name__, error=e.message)
            self.notify(f"Copy failed: {e.message}")
            return None
        except Exception as e:
            logger.error("copy_action_failed", error_type=type(e).__name__, error=str(e), exc_info=True)
            self.notify(f"Copy failed: {e}")
            return None

        self.notify(f"Copied {len(nodes)} block(s)")
        return text

    async def paste_requested(self) -> Optional[PasteReport]:
        """Paste the clipboard at the last pointer position.

        Returns:
            PasteReport, or None if the paste failed
        """
        try:
            report = await self.orchestrator.paste()
        except TransferError as e:
            logger.error("paste_action_failed", error_type=type(e).__name__, error=e.message)
            self.notify(f"Paste failed: {e.message}")
            return None
        except Exception as e:
            logger.error("paste_action_failed", error_type=type(e).__name__, error=str(e), exc_info=True)
            self.notify(f"Paste failed: {e}")
            return None

        self.notify(summarize_paste(report))
        for warning in report.warnings:
            self.notify(f"Warning: {warning}")
        return report
