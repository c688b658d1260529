"""
One viewing/editing session of one template.

The session owns the customization store, the navigator and the scale
controller, and recomputes the card layout synchronously whenever any of
them (or a font) changes, so a caller never sees a layout with stale font
sizes. Use it as a context manager; leaving the block detaches every
listener it registered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Tuple

from ..errors import UnknownZone
from .autofit import AutoFitter
from .compositor import DynamicItem, SlideLayout, ZoneCompositor
from .customization import Capabilities, CustomizationStore, DraftBackend
from .document import SLIDE_ORDER, DesignDocument
from .fonts import FontRegistry
from .measure import TextMeasurer
from .navigation import CardNavigator, CardPose, View
from .scale import ScaleController, ScaleMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CardLayout:
    view: View
    index: int
    pose: CardPose
    k: float
    faces: Tuple[SlideLayout, ...]
    frame: Optional[Tuple[float, float]]
    revision: int

    def face(self, name: str) -> SlideLayout:
        for face in self.faces:
            if face.name == name:
                return face
        raise KeyError(name)


def mode_for(view: View) -> ScaleMode:
    return ScaleMode.SPREAD if view == View.INNER else ScaleMode.SINGLE


class CardSession:
    def __init__(
        self,
        document: DesignDocument,
        *,
        capabilities: Capabilities = Capabilities(),
        drafts: Optional[DraftBackend] = None,
        fonts: Optional[FontRegistry] = None,
        measurer: Optional[TextMeasurer] = None,
        container_width: float = 0.0,
        index: int = 0,
        thumbnail: bool = False,
    ) -> None:
        self.document = document
        self.thumbnail = thumbnail
        self.fonts = fonts or FontRegistry()
        self.fitter = AutoFitter(self.fonts, measurer)
        self.store = CustomizationStore(document, drafts, capabilities)
        self.navigator = CardNavigator(index)
        self.scale = ScaleController(document.canvas, self._mode(), container_width)
        self.compositor = ZoneCompositor(self.fitter, self.store)
        self.revision = 0
        self.closed = False
        self._layout: Optional[CardLayout] = None

        self._unsubscribe: List[Callable[[], None]] = [
            self.store.subscribe(self._on_overlay_change),
            self.navigator.subscribe(self._on_navigate),
            self.scale.subscribe(self._on_scale),
            self.fonts.subscribe(self._on_font_loaded),
        ]

        # Hydration finishes before the store accepts a keystroke. Fonts are
        # only queued here; the first layout uses whatever is loaded.
        self.store.hydrate(document.sku)
        for family in document.font_families():
            self.fonts.ensure(family)
        for style in self.store.styles.values():
            self.fonts.ensure(style.get("fontFamily"))
        self.refresh()

    def __enter__(self) -> "CardSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    @property
    def layout(self) -> CardLayout:
        if self._layout is None:
            return self.refresh()
        return self._layout

    def refresh(self) -> CardLayout:
        canvas = self.document.canvas
        k = self.scale.k
        faces = tuple(
            self.compositor.compose(self.document.slide(name), canvas).scaled(k)
            for name in self.navigator.visible_slides
        )
        self.revision += 1
        self._layout = CardLayout(
            view=self.navigator.view,
            index=self.navigator.index,
            pose=self.navigator.pose(),
            k=k,
            faces=faces,
            frame=self.scale.frame(),
            revision=self.revision,
        )
        return self._layout

    def compose(self, name: str) -> SlideLayout:
        """Design-space layout of any face, visible or not."""
        return self.compositor.compose(self.document.slide(name), self.document.canvas)

    def zone_item(self, zone_id: str) -> DynamicItem:
        """Design-space item for a dynamic zone, on whichever face it sits."""
        for name in SLIDE_ORDER:
            if any(zone.id == zone_id for zone in self.document.slide(name).dynamic_zones):
                return self.compose(name).item(zone_id)
        raise UnknownZone(zone_id)

    def set_text(self, zone_id: str, value: str) -> bool:
        return self.store.set_text(zone_id, value)

    def set_style(self, zone_id: str, partial: Mapping[str, Optional[str]]) -> None:
        self.store.set_style(zone_id, partial)

    def go(self, view: View) -> View:
        return self.navigator.go(view)

    def change_page(self, direction: str) -> int:
        return self.navigator.change_page(direction)

    def resize(self, container_width: float) -> float:
        return self.scale.resize(container_width)

    def load_fonts(self) -> CardLayout:
        """Load queued font families; each arrival re-fits the layout."""
        self.fonts.load_pending()
        return self.layout

    def close(self) -> None:
        if self.closed:
            return
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        self.scale.close()
        self.closed = True
        logger.debug("Session for %s closed", self.document.sku)

    def _mode(self) -> ScaleMode:
        return ScaleMode.THUMBNAIL if self.thumbnail else mode_for(self.navigator.view)

    def _on_overlay_change(self, zone_id: Optional[str]) -> None:
        if zone_id is not None:
            self.fonts.ensure(self.store.style(zone_id).get("fontFamily"))
        if self._layout is not None:
            self.refresh()

    def _on_navigate(self, index: int) -> None:
        k = self.scale.k
        # A changed k refreshes through _on_scale.
        if self.scale.set_mode(self._mode()) == k:
            self.refresh()

    def _on_scale(self, k: float) -> None:
        self.refresh()

    def _on_font_loaded(self, family: str) -> None:
        logger.info("Re-fitting %s after font %s loaded", self.document.sku, family)
        self.fitter.invalidate()
        if self._layout is not None:
            self.refresh()
