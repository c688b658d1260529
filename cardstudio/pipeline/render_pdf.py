from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Tuple

from reportlab.lib import colors
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from .. import config
from ..engine.compositor import BackgroundItem, DynamicItem, SlideLayout, StaticItem
from ..engine.session import CardSession
from ..storage import artifact_path

logger = logging.getLogger(__name__)

# Proof pages, in the order previews pick them up.
PROOF_PAGES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("front", ("front",)),
    ("inner", ("left_inner", "right_inner")),
    ("back", ("back",)),
)


def _hex(value: Optional[str], default=colors.black) -> colors.Color:
    if not value:
        return default
    value = str(value).strip()
    if value.startswith("#") and len(value) == 4:
        value = "#" + "".join(ch * 2 for ch in value[1:])
    return colors.toColor(value, default)


def _s(style: dict, key: str, default):
    return style.get(key, default)


def _draw_background(canv: canvas.Canvas, item: BackgroundItem, left: float, top: float) -> None:
    box = item.box
    try:
        image = ImageReader(item.url)
        iw, ih = image.getSize()
    except (OSError, ValueError) as exc:
        logger.warning("Background %s unavailable: %s", item.url, exc)
        return

    # object-fit: cover, clipped to the face
    cover = max(box.width / iw, box.height / ih)
    dw, dh = iw * cover, ih * cover
    canv.saveState()
    path = canv.beginPath()
    path.rect(left + box.x, top - box.y - box.height, box.width, box.height)
    canv.clipPath(path, stroke=0, fill=0)
    canv.drawImage(
        image,
        left + box.x + (box.width - dw) / 2,
        top - box.y - box.height + (box.height - dh) / 2,
        dw,
        dh,
    )
    canv.restoreState()


def _enter_box(canv: canvas.Canvas, box, left: float, top: float) -> None:
    """Move the origin to the box centre and apply its rotation (CSS rotates clockwise)."""
    cx = left + box.x + box.width / 2
    cy = top - box.y - box.height / 2
    canv.translate(cx, cy)
    if box.rotation:
        canv.rotate(-box.rotation)


def _draw_static(canv: canvas.Canvas, item: StaticItem, left: float, top: float) -> None:
    if not item.content:
        return
    canv.saveState()
    _enter_box(canv, item.box, left, top)
    ascent, descent = pdfmetrics.getAscentDescent(item.font_name, item.font_size)
    canv.setFillColor(_hex(item.color))
    canv.setFont(item.font_name, item.font_size)
    canv.drawCentredString(0, -(ascent + descent) / 2, item.content)
    canv.restoreState()


def _draw_dynamic(canv: canvas.Canvas, item: DynamicItem, left: float, top: float, style: dict) -> None:
    box = item.box
    w, h = box.width, box.height
    canv.saveState()
    _enter_box(canv, box, left, top)

    # overflow: hidden
    path = canv.beginPath()
    path.rect(-w / 2, -h / 2, w, h)
    canv.clipPath(path, stroke=0, fill=0)

    if item.background_color:
        canv.setFillColor(_hex(item.background_color, colors.white))
        canv.rect(-w / 2, -h / 2, w, h, stroke=0, fill=1)

    if item.is_placeholder:
        canv.setStrokeColor(_hex(_s(style, "placeholder_stroke", "#A1A1AA")))
        canv.setDash(4, 3)
        canv.setLineWidth(1)
        canv.rect(-w / 2, -h / 2, w, h, stroke=1, fill=0)
        canv.setDash()

    lines = item.fit.lines
    if lines:
        size = item.font_size
        line_h = item.line_height
        pad = item.padding
        block_h = len(lines) * line_h
        if item.policy.vertical_align == "top":
            line_top = h / 2 - pad
        else:
            line_top = block_h / 2
        ascent, descent = pdfmetrics.getAscentDescent(item.font_name, size)
        baseline_offset = (line_h - (ascent - descent)) / 2 + ascent

        canv.setFillColor(_hex(item.color))
        canv.setFillAlpha(item.opacity)
        canv.setFont(item.font_name, size)
        align = item.policy.text_align
        for line in lines:
            baseline = line_top - baseline_offset
            text = line.rstrip(" ")
            if align == "right":
                canv.drawRightString(w / 2 - pad, baseline, text)
            elif align == "center":
                canv.drawCentredString(0, baseline, text)
            else:
                canv.drawString(-w / 2 + pad, baseline, text)
            line_top -= line_h
    canv.restoreState()


def draw_face(canv: canvas.Canvas, face: SlideLayout, left: float, top: float, style: dict) -> None:
    canv.setFillColor(_hex(_s(style, "page_fill", "#FFFFFF"), colors.white))
    canv.rect(left, top - face.height, face.width, face.height, stroke=0, fill=1)
    for item in sorted(face.items, key=lambda i: i.z):
        if isinstance(item, BackgroundItem):
            _draw_background(canv, item, left, top)
        elif isinstance(item, StaticItem):
            _draw_static(canv, item, left, top)
        else:
            _draw_dynamic(canv, item, left, top, style)


def _draw_label(canv: canvas.Canvas, text: str, pw: float, margin: float, style: dict) -> None:
    canv.setFillColor(_hex(_s(style, "label_color", "#6B7280")))
    canv.setFont("Helvetica", float(_s(style, "label_size", 9)))
    canv.drawCentredString(pw / 2, margin * 0.4, text)


def render_page(canv: canvas.Canvas, faces: Iterable[SlideLayout], label: str, style: dict) -> None:
    faces = list(faces)
    margin = float(_s(style, "page_margin", 36))
    face_w, face_h = faces[0].width, faces[0].height
    gap = face_w * float(_s(style, "spread_gap", 0.1)) if len(faces) > 1 else 0.0
    pw = 2 * margin + face_w * len(faces) + gap * (len(faces) - 1)
    ph = 2 * margin + face_h
    canv.setPageSize((pw, ph))

    left = margin
    for face in faces:
        draw_face(canv, face, left, ph - margin, style)
        left += face_w + gap
    _draw_label(canv, label, pw, margin, style)
    canv.showPage()


def render_proof(session: CardSession, output_path: Optional[Path] = None) -> Path:
    """Draw front, open spread and back of the session's card into a three-page PDF."""
    document = session.document
    path = output_path or artifact_path(document.sku, "proof")
    style = dict(config.PROOF_STYLE)

    canv = canvas.Canvas(str(path))
    canv.setTitle(f"{document.title or document.sku} proof")
    for label, names in PROOF_PAGES:
        faces = [session.compose(name) for name in names]
        render_page(canv, faces, f"{document.sku} / {label.upper()}", style)
    canv.save()
    logger.info("Proof for %s written to %s", document.sku, path)
    return path
