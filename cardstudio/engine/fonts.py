"""
Font registry.

Zones name CSS font families; measurement and drawing need ReportLab font
names. ``FontRegistry.ensure`` makes a family available (standard PDF font
alias, TTF in the font directory, or an injected downloader). Standard
families are available at once; any other family is queued and only loaded
when the host calls ``load_pending``. Until then ``resolve`` hands back the
last font that did load, so text entry and layout never wait on a font.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set

import httpx
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont

from .. import config
from ..errors import FontLoadFailure

logger = logging.getLogger(__name__)

FontDownloader = Callable[[str, Path], Optional[Path]]


@dataclass(frozen=True)
class ResolvedFont:
    family: str
    regular: str
    bold: str

    def face(self, bold: bool = False) -> str:
        return self.bold if bold else self.regular


_HELVETICA = ("Helvetica", "Helvetica-Bold")
_TIMES = ("Times-Roman", "Times-Bold")
_COURIER = ("Courier", "Courier-Bold")

STANDARD_FONTS: Dict[str, tuple] = {
    "arial": _HELVETICA,
    "helvetica": _HELVETICA,
    "verdana": _HELVETICA,
    "sans-serif": _HELVETICA,
    "times": _TIMES,
    "times new roman": _TIMES,
    "georgia": _TIMES,
    "serif": _TIMES,
    "courier": _COURIER,
    "courier new": _COURIER,
    "monospace": _COURIER,
}

FALLBACK_FONT = ResolvedFont(config.DEFAULT_FONT_FAMILY, *_HELVETICA)


def is_bold(weight: Optional[str]) -> bool:
    if not weight:
        return False
    value = str(weight).strip().lower()
    if value in ("bold", "bolder"):
        return True
    return value.isdigit() and int(value) >= 600


def compact_name(family: str) -> str:
    return re.sub(r"[^A-Za-z0-9]+", "", family)


def google_fonts_downloader(family: str, dest_dir: Path) -> Optional[Path]:
    """Download the regular TTF for ``family`` from Google Fonts into ``dest_dir``."""
    css_url = config.FONT_CSS_URL.format(family=family.replace(" ", "+"))
    try:
        # Without a browser user agent the CSS API serves truetype sources.
        with httpx.Client(timeout=config.REQUEST_TIMEOUT, follow_redirects=True) as client:
            css = client.get(css_url)
            css.raise_for_status()
            match = re.search(r"url\((https://[^)]+)\)\s*format\('truetype'\)", css.text)
            if not match:
                return None
            font = client.get(match.group(1))
            font.raise_for_status()
    except httpx.HTTPError as exc:
        raise FontLoadFailure(family, str(exc)) from exc

    dest_dir.mkdir(parents=True, exist_ok=True)
    path = dest_dir / f"{compact_name(family)}-Regular.ttf"
    path.write_bytes(font.content)
    return path


class FontRegistry:
    def __init__(self, font_dir: Optional[Path] = None, downloader: Optional[FontDownloader] = None) -> None:
        self.font_dir = font_dir or config.FONT_DIR
        self.downloader = downloader
        self._resolved: Dict[str, ResolvedFont] = {}
        self._failed: Set[str] = set()
        self._pending: Dict[str, str] = {}
        self._last_good = FALLBACK_FONT
        self._listeners: List[Callable[[str], None]] = []

    def ensure(self, family: Optional[str]) -> bool:
        """Request ``family``; returns True if it is usable now, otherwise queues it."""
        if not family:
            return True
        key = family.strip().lower()
        if key in self._resolved:
            return True
        if key in self._failed:
            return False

        standard = STANDARD_FONTS.get(key)
        if standard is not None:
            self._remember(key, ResolvedFont(family, *standard))
            return True

        self._pending.setdefault(key, family)
        return False

    @property
    def pending(self) -> List[str]:
        return list(self._pending.values())

    def load_pending(self) -> List[str]:
        """Load every queued family, notify listeners of each one that arrived and return those."""
        loaded = []
        while self._pending:
            key, family = next(iter(self._pending.items()))
            del self._pending[key]
            try:
                font = self._load(family)
            except FontLoadFailure as exc:
                logger.warning("%s; falling back to %s", exc, self._last_good.family)
                self._failed.add(key)
                continue

            self._remember(key, font)
            loaded.append(family)
            logger.info("Font %s registered as %s", family, font.regular)
            for listener in list(self._listeners):
                listener(family)
        return loaded

    def resolve(self, family: Optional[str]) -> ResolvedFont:
        if family:
            key = family.strip().lower()
            font = self._resolved.get(key)
            if font is not None:
                return font
            if key in STANDARD_FONTS:
                return ResolvedFont(family, *STANDARD_FONTS[key])
        return self._last_good

    def is_available(self, family: str) -> bool:
        return family.strip().lower() in self._resolved

    def subscribe(self, listener: Callable[[str], None]) -> Callable[[], None]:
        """Call ``listener(family)`` whenever a non-standard family finishes loading."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _remember(self, key: str, font: ResolvedFont) -> None:
        self._resolved[key] = font
        self._last_good = font

    def _locate(self, family: str, suffix: str) -> Optional[Path]:
        compact = compact_name(family)
        names = [f"{compact}-{suffix}.ttf"]
        if suffix == "Regular":
            names += [f"{compact}.ttf", f"{family}.ttf"]
        for name in names:
            path = Path(self.font_dir) / name
            if path.exists():
                return path
        return None

    def _load(self, family: str) -> ResolvedFont:
        regular_path = self._locate(family, "Regular")
        if regular_path is None and self.downloader is not None:
            regular_path = self.downloader(family, Path(self.font_dir))
        if regular_path is None:
            raise FontLoadFailure(family, f"no font file in {self.font_dir}")

        regular = compact_name(family)
        bold = regular
        try:
            pdfmetrics.registerFont(TTFont(regular, str(regular_path)))
            bold_path = self._locate(family, "Bold")
            if bold_path is not None:
                bold = f"{regular}-Bold"
                pdfmetrics.registerFont(TTFont(bold, str(bold_path)))
        except (TTFError, OSError) as exc:
            raise FontLoadFailure(family, str(exc)) from exc
        return ResolvedFont(family, regular, bold)
