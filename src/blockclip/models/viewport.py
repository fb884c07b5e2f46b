"""Viewport and pointer state models."""

from pydantic import BaseModel, Field


class Viewport(BaseModel):
    """Visible part of the document canvas.

    A document point ``(offset_x, offset_y)`` is drawn at screen point
    ``(left, top)``; every document unit spans ``zoom`` screen pixels.
    """

    left: float = Field(default=0.0, description="Screen x of the canvas origin")
    top: float = Field(default=0.0, description="Screen y of the canvas origin")
    zoom: float = Field(default=1.0, gt=0.0, description="Screen pixels per document unit")
    offset_x: float = Field(default=0.0, description="Document x shown at the canvas origin (pan)")
    offset_y: float = Field(default=0.0, description="Document y shown at the canvas origin (pan)")

    model_config = {"frozen": True}


class PointerSnapshot(BaseModel):
    """Pointer position in screen coordinates at one instant."""

    x: float = 0.0
    y: float = 0.0

    model_config = {"frozen": True}


class PointerState:
    """Most recent pointer position, updated by host pointer-move events.

    Paste reads it once through :meth:`snapshot` so a pointer moving while
    the clipboard read is pending cannot shift the paste target.
    """

    def __init__(self, x: float = 0.0, y: float = 0.0) -> None:
        self._x = x
        self._y = y

    def update(self, x: float, y: float) -> None:
        self._x = x
        self._y = y

    def snapshot(self) -> PointerSnapshot:
        return PointerSnapshot(x=self._x, y=self._y)
