"""
The buyer's overlay on top of a template: text per zone and an optional
font/colour override per zone.

Inputs and styles are always written and restored together as one JSON
payload, so a restored draft never mixes text from one save with styles from
another.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Protocol, Tuple

from ..errors import DraftCorrupt, InputRejected, ReadOnlyStore, StoreNotReady, UnknownZone
from .autofit import EffectiveStyle, enforce_max_chars, resolve_style
from .document import DesignDocument, Zone, clean_font_family

logger = logging.getLogger(__name__)

STYLE_KEYS = ("fontFamily", "color")

Inputs = Dict[str, str]
Styles = Dict[str, Dict[str, str]]


class DraftBackend(Protocol):
    def load(self, sku: str) -> Optional[str]:
        ...

    def save(self, sku: str, payload: str) -> None:
        ...

    def delete(self, sku: str) -> None:
        ...


@dataclass(frozen=True)
class Capabilities:
    editable: bool = True
    style_overrides_enabled: bool = True
    draft_persistence_enabled: bool = True


READ_ONLY = Capabilities(editable=False)


def encode_draft(inputs: Mapping[str, str], styles: Mapping[str, Mapping[str, str]]) -> str:
    return json.dumps(
        {"inputs": dict(inputs), "styles": {k: dict(v) for k, v in styles.items()}},
        ensure_ascii=False,
        sort_keys=True,
    )


def decode_draft(payload: str) -> Tuple[Inputs, Styles]:
    try:
        data = json.loads(payload)
    except (TypeError, ValueError) as exc:
        raise DraftCorrupt(f"Draft is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise DraftCorrupt("Draft is not an object")

    inputs = data.get("inputs") or {}
    styles = data.get("styles") or {}
    if not isinstance(inputs, dict) or not all(isinstance(v, str) for v in inputs.values()):
        raise DraftCorrupt("Draft inputs must map zone ids to strings")
    if not isinstance(styles, dict):
        raise DraftCorrupt("Draft styles must be an object")
    for zone_id, style in styles.items():
        if not isinstance(style, dict):
            raise DraftCorrupt(f"Draft style for {zone_id} is not an object")
        if any(key not in STYLE_KEYS or not isinstance(value, str) for key, value in style.items()):
            raise DraftCorrupt(f"Draft style for {zone_id} has unexpected fields")
    return {str(k): v for k, v in inputs.items()}, {str(k): dict(v) for k, v in styles.items()}


class CustomizationStore:
    """
    Single-writer store for one template's overlay.

    Every accepted change is flushed to the draft backend (when persistence
    is enabled) and then announced to subscribers with the zone id, or
    ``None`` when the whole overlay was replaced.
    """

    def __init__(
        self,
        document: DesignDocument,
        drafts: Optional[DraftBackend] = None,
        capabilities: Capabilities = Capabilities(),
    ) -> None:
        self.document = document
        self.sku = document.sku
        self.capabilities = capabilities
        self.drafts = drafts if capabilities.draft_persistence_enabled else None
        self._zones = document.dynamic_zone_index()
        self._inputs: Inputs = {}
        self._styles: Styles = {}
        self._listeners: List[Callable[[Optional[str]], None]] = []
        self.ready = self.drafts is None

    @property
    def editable(self) -> bool:
        return self.capabilities.editable

    @property
    def inputs(self) -> Mapping[str, str]:
        return MappingProxyType(self._inputs)

    @property
    def styles(self) -> Mapping[str, Mapping[str, str]]:
        return MappingProxyType({k: MappingProxyType(v) for k, v in self._styles.items()})

    def value(self, zone_id: str) -> str:
        return self._inputs.get(zone_id, "")

    def style(self, zone_id: str) -> Mapping[str, str]:
        return MappingProxyType(self._styles.get(zone_id, {}))

    def effective_style(self, zone: Zone) -> EffectiveStyle:
        override = self._styles.get(zone.id) if self.capabilities.style_overrides_enabled else None
        return resolve_style(zone, override)

    def snapshot(self) -> Dict[str, dict]:
        return {"inputs": dict(self._inputs), "styles": {k: dict(v) for k, v in self._styles.items()}}

    def subscribe(self, listener: Callable[[Optional[str]], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_text(self, zone_id: str, value: str) -> bool:
        """Returns False (and changes nothing) when ``value`` is over the zone's limit."""
        zones = self._writable_zones(zone_id)
        try:
            for zone in zones:
                enforce_max_chars(zone, value)
        except InputRejected as exc:
            logger.debug("Input refused: %s", exc)
            return False
        if self._inputs.get(zone_id) == value:
            return True
        self._inputs[zone_id] = value
        self._changed(zone_id)
        return True

    def set_style(self, zone_id: str, partial: Mapping[str, Optional[str]]) -> None:
        """Merge ``partial`` into the zone's override; a ``None`` value drops that key.

        ``fontFamily`` may be a CSS stack; only its first family is kept.
        """
        if not self.capabilities.style_overrides_enabled:
            raise ReadOnlyStore("Style overrides are disabled for this session")
        self._writable_zones(zone_id)
        unknown = set(partial) - set(STYLE_KEYS)
        if unknown:
            raise ValueError(f"Unsupported style keys: {', '.join(sorted(unknown))}")

        merged = dict(self._styles.get(zone_id, {}))
        for key, value in partial.items():
            if key == "fontFamily":
                value = clean_font_family(value)
            if value is None or value == "":
                merged.pop(key, None)
            else:
                merged[key] = str(value)
        if merged == self._styles.get(zone_id, {}):
            return
        if merged:
            self._styles[zone_id] = merged
        else:
            self._styles.pop(zone_id, None)
        self._changed(zone_id)

    def clear(self) -> None:
        if not self.editable:
            raise ReadOnlyStore(f"Store for {self.sku} is read-only")
        self._inputs, self._styles = {}, {}
        self._changed(None)

    def hydrate(self, sku: str) -> bool:
        """Load the saved draft for ``sku``; returns True if one was restored."""
        self._check_sku(sku)
        if self.drafts is None:
            self.ready = True
            return False
        payload = self.drafts.load(sku)
        restored = False
        if payload is not None:
            try:
                self._inputs, self._styles = decode_draft(payload)
                restored = True
            except DraftCorrupt as exc:
                logger.warning("Discarding draft for %s: %s", sku, exc)
                self.drafts.delete(sku)
                self._inputs, self._styles = {}, {}
        self.ready = True
        logger.info("Hydrated %s (%s)", sku, "draft restored" if restored else "empty")
        for listener in list(self._listeners):
            listener(None)
        return restored

    def persist(self, sku: str) -> None:
        self._check_sku(sku)
        if self.drafts is None:
            return
        self.drafts.save(sku, encode_draft(self._inputs, self._styles))

    def _check_sku(self, sku: str) -> None:
        if sku != self.sku:
            raise ValueError(f"Store belongs to {self.sku}, not {sku}")

    def _writable_zones(self, zone_id: str) -> List[Zone]:
        if not self.editable:
            raise ReadOnlyStore(f"Store for {self.sku} is read-only")
        if not self.ready:
            raise StoreNotReady(f"Draft for {self.sku} has not been hydrated")
        zones = self._zones.get(zone_id)
        if not zones:
            raise UnknownZone(zone_id)
        return zones

    def _changed(self, zone_id: Optional[str]) -> None:
        try:
            if self.drafts is not None:
                self.persist(self.sku)
        finally:
            for listener in list(self._listeners):
                listener(zone_id)
