"""
Per-face render lists.

A face is drawn bottom to top: background image, static decorations, then
editable text zones. Everything is expressed in design-space pixels;
``SlideLayout.scaled`` maps the list onto the host's surface.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from .. import config
from .autofit import AutoFitter, FitResult, ZonePolicy, zone_policy
from .customization import CustomizationStore
from .document import CanvasSettings, Slide, Zone, ZoneKind, rotated_corners
from .fonts import is_bold

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float
    rotation: float = 0.0

    @classmethod
    def of(cls, zone: Zone) -> "Box":
        return cls(zone.x, zone.y, zone.width, zone.height, zone.rotation)

    def scaled(self, k: float) -> "Box":
        # Rotation is scale invariant.
        return Box(self.x * k, self.y * k, self.width * k, self.height * k, self.rotation)

    def corners(self):
        return rotated_corners(self.x, self.y, self.width, self.height, self.rotation)


@dataclass(frozen=True)
class BackgroundItem:
    url: str
    box: Box
    z: int = config.Z_BACKGROUND

    def scaled(self, k: float) -> "BackgroundItem":
        return replace(self, box=self.box.scaled(k))


@dataclass(frozen=True)
class StaticItem:
    zone_id: str
    kind: ZoneKind
    box: Box
    content: str
    font_size: float
    font_name: str
    color: str
    z: int = config.Z_STATIC

    def scaled(self, k: float) -> "StaticItem":
        return replace(self, box=self.box.scaled(k), font_size=self.font_size * k)


@dataclass(frozen=True)
class DynamicItem:
    zone_id: str
    box: Box
    text: str
    is_placeholder: bool
    opacity: float
    font_family: str
    font_name: str
    color: str
    fit: FitResult
    policy: ZonePolicy
    background_color: Optional[str] = None
    interactive: bool = True
    z: int = config.Z_DYNAMIC
    k: float = 1.0

    @property
    def font_size(self) -> float:
        return self.fit.size * self.k

    @property
    def padding(self) -> float:
        return self.policy.padding * self.k

    @property
    def line_height(self) -> float:
        return self.font_size * config.LINE_HEIGHT

    @property
    def clipped(self) -> bool:
        return self.fit.overflow

    def scaled(self, k: float) -> "DynamicItem":
        return replace(self, box=self.box.scaled(k), k=self.k * k)


RenderItem = Union[BackgroundItem, StaticItem, DynamicItem]


@dataclass(frozen=True)
class SlideLayout:
    name: str
    width: float
    height: float
    items: Tuple[RenderItem, ...]
    k: float = 1.0

    @property
    def dynamic_items(self) -> Tuple[DynamicItem, ...]:
        return tuple(item for item in self.items if isinstance(item, DynamicItem))

    def item(self, zone_id: str) -> RenderItem:
        for item in self.items:
            if getattr(item, "zone_id", None) == zone_id:
                return item
        raise KeyError(zone_id)

    def scaled(self, k: float) -> "SlideLayout":
        return SlideLayout(
            name=self.name,
            width=self.width * k,
            height=self.height * k,
            items=tuple(item.scaled(k) for item in self.items),
            k=self.k * k,
        )


def static_font_size(zone: Zone) -> float:
    return (zone.font_size or zone.height) * config.STATIC_FONT_FACTOR


class ZoneCompositor:
    def __init__(self, fitter: AutoFitter, store: CustomizationStore) -> None:
        self.fitter = fitter
        self.store = store

    def compose(self, slide: Slide, canvas: CanvasSettings) -> SlideLayout:
        items = []
        if slide.background_url:
            items.append(BackgroundItem(slide.background_url, Box(0, 0, canvas.width, canvas.height)))
        items.extend(self._static_item(zone) for zone in slide.static_zones)
        for zone in slide.dynamic_zones:
            if zone.kind != ZoneKind.TEXT:
                logger.debug("Skipping %s zone %s on %s", zone.kind.value, zone.id, slide.name)
                continue
            items.append(self._dynamic_item(zone))
        return SlideLayout(slide.name, canvas.width, canvas.height, tuple(items))

    def _static_item(self, zone: Zone) -> StaticItem:
        if zone.kind == ZoneKind.EMOJI:
            content = zone.emoji
        elif zone.kind == ZoneKind.TEXT:
            content = zone.text
        else:
            content = ""
        font = self.fitter.fonts.resolve(zone.font_family or config.DEFAULT_FONT_FAMILY)
        return StaticItem(
            zone_id=zone.id,
            kind=zone.kind,
            box=Box.of(zone),
            content=content,
            font_size=static_font_size(zone),
            font_name=font.face(is_bold(zone.font_weight)),
            color=zone.color or config.DEFAULT_COLOR,
        )

    def _dynamic_item(self, zone: Zone) -> DynamicItem:
        value = self.store.value(zone.id)
        style = self.store.effective_style(zone)
        show_placeholder = not value and self.store.editable
        text = zone.placeholder if show_placeholder else value
        fit = self.fitter.fit(zone, text, style.font_family)
        font = self.fitter.fonts.resolve(style.font_family)
        return DynamicItem(
            zone_id=zone.id,
            box=Box.of(zone),
            text=text,
            is_placeholder=show_placeholder,
            opacity=config.PLACEHOLDER_OPACITY if show_placeholder else 1.0,
            font_family=style.font_family,
            font_name=font.face(is_bold(zone.font_weight)),
            color=style.color,
            fit=fit,
            policy=zone_policy(zone),
            background_color=zone.background_color,
            interactive=self.store.editable,
        )
