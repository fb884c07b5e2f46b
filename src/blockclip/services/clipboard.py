"""Clipboard boundary adapters.

The orchestrator only sees :class:`ClipboardBoundary`: an awaited write and
an awaited read of UTF-8 text. ``SystemClipboard`` talks to the OS clipboard
through pyperclip in a worker thread; ``MemoryClipboard`` keeps the text
in-process.
"""

import asyncio
from typing import Optional, Protocol

import pyperclip

from blockclip.services.exceptions import TransferFailure
from blockclip.utils.logging import get_logger


logger = get_logger(__name__)


class ClipboardBoundary(Protocol):
    async def write_text(self, text: str) -> None: ...

    async def read_text(self) -> Optional[str]: ...


class MemoryClipboard:
    """Process-local clipboard.

    Args:
        text: Initial contents
        readable: False simulates a host that refuses clipboard reads
        writable: False simulates a host that refuses clipboard writes
    """

    def __init__(self, text: Optional[str] = None, readable: bool = True, writable: bool = True) -> None:
        self.text = text
        self.readable = readable
        self.writable = writable

    async def write_text(self, text: str) -> None:
        if not self.writable:
            raise TransferFailure("write", "Clipboard write was refused")
        self.text = text

    async def read_text(self) -> Optional[str]:
        if not self.readable:
            raise TransferFailure("read", "Clipboard read was refused")
        return self.text


class SystemClipboard:
    """OS clipboard via pyperclip.

    pyperclip blocks while the platform tool (xclip, pbcopy, ...) runs, so
    calls are moved to a worker thread.
    """

    async def write_text(self, text: str) -> None:
        try:
            await asyncio.to_thread(pyperclip.copy, text)
        except pyperclip.PyperclipException as e:
            logger.error("system_clipboard_write_failed", error=str(e))
            raise TransferFailure("write", f"System clipboard unavailable: {e}") from e

    async def read_text(self) -> Optional[str]:
        try:
            text = await asyncio.to_thread(pyperclip.paste)
        except pyperclip.PyperclipException as e:
            logger.error("system_clipboard_read_failed", error=str(e))
            raise TransferFailure("read", f"System clipboard unavailable: {e}") from e
        return text or None


def create_clipboard(backend: str) -> ClipboardBoundary:
    """Build the clipboard adapter named in configuration.

    Raises:
        ValueError: If ``backend`` is unknown
    """
    if backend == "system":
        return SystemClipboard()
    if backend == "memory":
        return MemoryClipboard()
    raise ValueError(f"Unknown clipboard backend: {backend}")
