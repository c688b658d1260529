"""
Uniform design-space -> viewport scaling.

One factor ``k`` scales geometry, rotation pivots and font sizes together so
the authored layout is preserved. Single faces and the open spread are never
scaled above 1; the listing thumbnail fills its frame.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .. import config
from .document import CanvasSettings

logger = logging.getLogger(__name__)


class ScaleMode(str, Enum):
    SINGLE = "single"
    SPREAD = "spread"
    THUMBNAIL = "thumbnail"


def content_width(canvas_width: float, mode: ScaleMode) -> float:
    if mode == ScaleMode.SPREAD:
        # Two faces side by side plus the visible gap/shadow at the fold.
        return canvas_width * config.SPREAD_WIDTH_FACTOR
    return canvas_width


def compute_scale(container_width: float, canvas_width: float, mode: ScaleMode = ScaleMode.SINGLE) -> float:
    if container_width <= 0 or canvas_width <= 0:
        return 1.0
    k = container_width / content_width(canvas_width, mode)
    if mode == ScaleMode.THUMBNAIL:
        return k
    return min(k, 1.0)


def thumbnail_frame(container_width: float, canvas: CanvasSettings) -> Tuple[float, float]:
    """Outer frame for a listing tile, letterboxed to the canvas aspect ratio."""
    if container_width <= 0:
        return float(canvas.width), float(canvas.height)
    return container_width, container_width / canvas.aspect_ratio


class ScaleController:
    """Holds the current container width and mode; notifies listeners when ``k`` changes."""

    def __init__(self, canvas: CanvasSettings, mode: ScaleMode = ScaleMode.SINGLE, container_width: float = 0.0) -> None:
        self.canvas = canvas
        self.mode = mode
        self.container_width = container_width
        self.k = compute_scale(container_width, canvas.width, mode)
        self._listeners: List[Callable[[float], None]] = []

    def subscribe(self, listener: Callable[[float], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def resize(self, container_width: float) -> float:
        self.container_width = container_width
        return self._recompute()

    def set_mode(self, mode: ScaleMode) -> float:
        self.mode = mode
        return self._recompute()

    def frame(self) -> Optional[Tuple[float, float]]:
        if self.mode != ScaleMode.THUMBNAIL:
            return None
        return thumbnail_frame(self.container_width, self.canvas)

    def close(self) -> None:
        self._listeners.clear()

    def _recompute(self) -> float:
        k = compute_scale(self.container_width, self.canvas.width, self.mode)
        if k != self.k:
            logger.debug("Scale %s -> %s (%s, width=%s)", self.k, k, self.mode.value, self.container_width)
            self.k = k
            for listener in list(self._listeners):
                listener(k)
        return k
