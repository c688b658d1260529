from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Protocol, Tuple

from reportlab.pdfbase import pdfmetrics

from .. import config


@dataclass(frozen=True)
class TextExtents:
    width: float
    height: float
    lines: Tuple[str, ...]


class TextMeasurer(Protocol):
    def measure(self, text: str, font_name: str, size: float, max_width: float) -> TextExtents:
        ...


def wrap_lines(text: str, max_width: float, width_of: Callable[[str], float]) -> List[str]:
    """
    Break ``text`` the way a ``white-space: pre-wrap`` box does.

    Newlines are kept, lines wrap greedily at spaces, trailing spaces hang
    outside the box, and a single word wider than ``max_width`` stays on its
    own line and overflows.
    """
    lines: List[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split(" ")
        current = words[0]
        for word in words[1:]:
            candidate = f"{current} {word}"
            if width_of(candidate.rstrip(" ")) <= max_width:
                current = candidate
                continue
            lines.append(current)
            current = word
        lines.append(current)
    return lines


class ReportLabMeasurer:
    """Measures rendered text extents with ReportLab font metrics."""

    def __init__(self, line_height: float = config.LINE_HEIGHT) -> None:
        self.line_height = line_height

    def measure(self, text: str, font_name: str, size: float, max_width: float) -> TextExtents:
        if not text:
            return TextExtents(0.0, 0.0, ())

        def width_of(value: str) -> float:
            return pdfmetrics.stringWidth(value, font_name, size)

        lines = wrap_lines(text, max_width, width_of)
        widest = max(width_of(line.rstrip(" ")) for line in lines)
        return TextExtents(widest, len(lines) * size * self.line_height, tuple(lines))
