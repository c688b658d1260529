"""
Shrink-to-fit sizing for editable text zones.

The size starts at the zone's authored font size and steps down one pixel at
a time while the measured text is taller OR wider than the box, stopping at
``MIN_FONT_SIZE``. If the text still overflows there it is accepted as is
and clipped by the renderer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from .. import config
from ..errors import InputRejected, ZoneOverflow
from .document import Zone
from .fonts import FontRegistry, is_bold
from .measure import ReportLabMeasurer, TextExtents, TextMeasurer

logger = logging.getLogger(__name__)

CACHE_LIMIT = 512


@dataclass(frozen=True)
class FitResult:
    size: int
    extents: TextExtents
    overflow: bool

    @property
    def lines(self) -> Tuple[str, ...]:
        return self.extents.lines

    def raise_for_overflow(self, zone_id: str) -> None:
        if self.overflow:
            raise ZoneOverflow(zone_id, self.size)


@dataclass(frozen=True)
class EffectiveStyle:
    font_family: str
    color: str


@dataclass(frozen=True)
class ZonePolicy:
    """Title (short) or body (tall) presentation of a text zone."""

    body: bool
    padding: float
    text_align: str
    vertical_align: str


def fit_text(
    value: str,
    box_width: float,
    box_height: float,
    max_size: int,
    font_name: str,
    measurer: TextMeasurer,
    min_size: int = config.MIN_FONT_SIZE,
) -> FitResult:
    size = int(max_size)
    extents = measurer.measure(value, font_name, size, box_width)
    while (extents.height > box_height or extents.width > box_width) and size > min_size:
        size -= 1
        extents = measurer.measure(value, font_name, size, box_width)
    overflow = extents.height > box_height or extents.width > box_width
    return FitResult(size=size, extents=extents, overflow=overflow)


def zone_policy(zone: Zone) -> ZonePolicy:
    if zone.is_body:
        return ZonePolicy(True, config.BODY_PADDING, zone.text_align or "left", "top")
    return ZonePolicy(False, 0.0, zone.text_align or "center", "middle")


def content_box(zone: Zone) -> Tuple[float, float]:
    padding = zone_policy(zone).padding
    return max(1.0, zone.width - 2 * padding), max(1.0, zone.height - 2 * padding)


def resolve_style(zone: Zone, override: Optional[Mapping[str, str]] = None) -> EffectiveStyle:
    """User override, then admin default, then engine default."""
    override = override or {}
    family = override.get("fontFamily") or zone.font_family or config.DEFAULT_FONT_FAMILY
    color = override.get("color") or zone.color or config.DEFAULT_COLOR
    return EffectiveStyle(font_family=family, color=color)


def enforce_max_chars(zone: Zone, value: str) -> None:
    if len(value) > zone.max_chars:
        raise InputRejected(zone.id, len(value), zone.max_chars)


class AutoFitter:
    """Caches fits on exactly the inputs that change the measurement."""

    def __init__(self, fonts: FontRegistry, measurer: Optional[TextMeasurer] = None) -> None:
        self.fonts = fonts
        self.measurer = measurer or ReportLabMeasurer()
        self._cache: Dict[tuple, FitResult] = {}
        self.measure_passes = 0

    def fit(self, zone: Zone, value: str, font_family: str) -> FitResult:
        face = self.fonts.resolve(font_family).face(is_bold(zone.font_weight))
        box_width, box_height = content_box(zone)
        key = (value, box_width, box_height, zone.authored_font_size, face)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        self.measure_passes += 1
        result = fit_text(value, box_width, box_height, zone.authored_font_size, face, self.measurer)
        if result.overflow:
            logger.debug("Zone %s overflows at %spx; clipping", zone.id, result.size)
        if len(self._cache) >= CACHE_LIMIT:
            self._cache.clear()
        self._cache[key] = result
        return result

    def invalidate(self) -> None:
        self._cache.clear()
