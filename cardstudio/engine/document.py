"""
Typed, read-only view of an admin-authored card template.

The admin API delivers the template as JSON; ``parse_document`` projects it
into frozen dataclasses. Anything structurally missing raises
``MalformedDocument`` and the whole template is refused, there is no
partial rendering.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .. import config
from ..errors import MalformedDocument


SLIDE_ORDER: Tuple[str, str, str, str] = ("front", "left_inner", "right_inner", "back")


class ZoneKind(str, Enum):
    TEXT = "text"
    EMOJI = "emoji"
    IMAGE = "image"


@dataclass(frozen=True)
class CanvasSettings:
    width: int
    height: int

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


@dataclass(frozen=True)
class Zone:
    id: str
    kind: ZoneKind
    dynamic: bool
    x: float
    y: float
    width: float
    height: float
    rotation: float = 0.0
    text: str = ""
    emoji: str = ""
    font_size: Optional[float] = None
    font_family: Optional[str] = None
    font_weight: Optional[str] = None
    color: Optional[str] = None
    text_align: Optional[str] = None
    background_color: Optional[str] = None
    max_chars: int = config.DEFAULT_MAX_CHARS
    placeholder: str = config.DEFAULT_PLACEHOLDER

    @property
    def is_body(self) -> bool:
        """Tall zones use the top-anchored, padded body policy."""
        return self.height > config.BODY_ZONE_THRESHOLD

    @property
    def authored_font_size(self) -> int:
        return int(self.font_size) if self.font_size else config.DEFAULT_FONT_SIZE

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def corners(self) -> List[Tuple[float, float]]:
        """Corner points after rotating the box about its own centre."""
        return rotated_corners(self.x, self.y, self.width, self.height, self.rotation)


@dataclass(frozen=True)
class Slide:
    name: str
    background_url: Optional[str]
    static_zones: Tuple[Zone, ...] = ()
    dynamic_zones: Tuple[Zone, ...] = ()

    def zone(self, zone_id: str) -> Zone:
        for zone in self.dynamic_zones + self.static_zones:
            if zone.id == zone_id:
                return zone
        raise KeyError(zone_id)


@dataclass(frozen=True)
class DesignDocument:
    id: Any
    sku: str
    title: str
    canvas: CanvasSettings
    slides: Mapping[str, Slide] = field(default_factory=dict)

    def slide(self, name: str) -> Slide:
        return self.slides[name]

    def iter_dynamic_zones(self) -> Iterator[Zone]:
        for name in SLIDE_ORDER:
            yield from self.slides[name].dynamic_zones

    def dynamic_zone_index(self) -> Dict[str, List[Zone]]:
        # Overlay values are keyed by zone id across the whole card, so one id
        # may name zones on more than one face.
        index: Dict[str, List[Zone]] = {}
        for zone in self.iter_dynamic_zones():
            index.setdefault(zone.id, []).append(zone)
        return index

    def font_families(self) -> List[str]:
        """Families named by any text zone, static or dynamic, in slide order."""
        families: List[str] = []
        for name in SLIDE_ORDER:
            slide = self.slides[name]
            for zone in slide.static_zones + slide.dynamic_zones:
                if zone.kind == ZoneKind.TEXT and zone.font_family and zone.font_family not in families:
                    families.append(zone.font_family)
        return families


def rotated_corners(x: float, y: float, w: float, h: float, rotation: float) -> List[Tuple[float, float]]:
    cx, cy = x + w / 2, y + h / 2
    rad = math.radians(rotation or 0.0)
    cos_r, sin_r = math.cos(rad), math.sin(rad)
    points = []
    for px, py in ((x, y), (x + w, y), (x + w, y + h), (x, y + h)):
        dx, dy = px - cx, py - cy
        points.append((cx + dx * cos_r - dy * sin_r, cy + dx * sin_r + dy * cos_r))
    return points


def clean_font_family(value: Optional[str]) -> Optional[str]:
    """``"'Noto Sans JP', sans-serif"`` -> ``"Noto Sans JP"``."""
    if not value:
        return None
    cleaned = str(value).replace("'", "").replace('"', "").split(",")[0].strip()
    return cleaned or None


def _number(raw: Mapping[str, Any], key: str, where: str) -> float:
    if key not in raw or raw[key] is None:
        raise MalformedDocument(f"{where}: missing '{key}'")
    value = raw[key]
    if isinstance(value, bool):
        raise MalformedDocument(f"{where}: '{key}' is not numeric")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise MalformedDocument(f"{where}: '{key}' is not numeric") from exc
    if math.isnan(number) or math.isinf(number):
        raise MalformedDocument(f"{where}: '{key}' is not finite")
    return number


def _optional_number(raw: Mapping[str, Any], key: str, where: str) -> Optional[float]:
    if raw.get(key) in (None, ""):
        return None
    return _number(raw, key, where)


def _optional_str(raw: Mapping[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    if value is None or value == "":
        return None
    return str(value)


def _parse_canvas(data: Mapping[str, Any]) -> CanvasSettings:
    raw = data.get("canvas_settings") or data.get("canvasSettings")
    if not isinstance(raw, Mapping):
        raise MalformedDocument("Document has no canvas settings")
    width = _number(raw, "width", "canvas_settings")
    height = _number(raw, "height", "canvas_settings")
    if width <= 0 or height <= 0 or not width.is_integer() or not height.is_integer():
        raise MalformedDocument(f"Canvas size must be positive integers, got {width}x{height}")
    return CanvasSettings(width=int(width), height=int(height))


def _parse_zone(raw: Any, slide_name: str, dynamic: bool) -> Zone:
    if not isinstance(raw, Mapping):
        raise MalformedDocument(f"{slide_name}: zone entry is not an object")
    if raw.get("id") in (None, ""):
        raise MalformedDocument(f"{slide_name}: zone without id")
    zone_id = str(raw["id"])
    where = f"{slide_name}/{zone_id}"
    width = _number(raw, "width", where)
    height = _number(raw, "height", where)
    if width <= 0 or height <= 0:
        raise MalformedDocument(f"{where}: zone size must be positive")

    try:
        kind = ZoneKind(str(raw.get("type") or "text"))
    except ValueError as exc:
        raise MalformedDocument(f"{where}: unknown zone type {raw.get('type')!r}") from exc

    text = str(raw.get("text") or "")
    max_chars = _optional_number(raw, "maxChars", where)
    return Zone(
        id=zone_id,
        kind=kind,
        dynamic=dynamic,
        x=_number(raw, "x", where),
        y=_number(raw, "y", where),
        width=width,
        height=height,
        rotation=_optional_number(raw, "rotation", where) or 0.0,
        text=text,
        emoji=str(raw.get("emoji") or ""),
        font_size=_optional_number(raw, "fontSize", where),
        font_family=clean_font_family(raw.get("fontFamily")),
        font_weight=_optional_str(raw, "fontWeight"),
        color=_optional_str(raw, "color"),
        text_align=_optional_str(raw, "textAlign"),
        background_color=_optional_str(raw, "backgroundColor"),
        max_chars=int(max_chars) if max_chars else config.DEFAULT_MAX_CHARS,
        placeholder=str(raw.get("placeholder") or text or config.DEFAULT_PLACEHOLDER),
    )


def _parse_slide(name: str, raw: Any) -> Slide:
    if not isinstance(raw, Mapping):
        raise MalformedDocument(f"Document is missing slide '{name}'")
    static_raw = raw.get("static_zones", raw.get("staticZones")) or []
    dynamic_raw = raw.get("dynamic_zones", raw.get("dynamicZones")) or []
    if not isinstance(static_raw, list) or not isinstance(dynamic_raw, list):
        raise MalformedDocument(f"{name}: zones must be lists")

    static_zones = tuple(_parse_zone(z, name, dynamic=False) for z in static_raw)
    dynamic_zones = tuple(_parse_zone(z, name, dynamic=True) for z in dynamic_raw)

    seen = set()
    for zone in static_zones + dynamic_zones:
        if zone.id in seen:
            raise MalformedDocument(f"{name}: duplicate zone id {zone.id}")
        seen.add(zone.id)

    background = raw.get("background_url", raw.get("backgroundUrl"))
    return Slide(
        name=name,
        background_url=str(background) if background else None,
        static_zones=static_zones,
        dynamic_zones=dynamic_zones,
    )


def parse_document(data: Any, sku: Optional[str] = None) -> DesignDocument:
    if not isinstance(data, Mapping):
        raise MalformedDocument("Document body is not an object")
    canvas = _parse_canvas(data)

    design = data.get("design_data") if isinstance(data.get("design_data"), Mapping) else data
    slides_raw = design.get("slides")
    if not isinstance(slides_raw, Mapping):
        raise MalformedDocument("Document has no slides")
    slides = {name: _parse_slide(name, slides_raw.get(name)) for name in SLIDE_ORDER}

    doc_sku = str(data.get("sku") or sku or "").strip()
    if not doc_sku:
        raise MalformedDocument("Document has no sku")
    return DesignDocument(
        id=data.get("id"),
        sku=doc_sku,
        title=str(data.get("title") or ""),
        canvas=canvas,
        slides=MappingProxyType(slides),
    )
