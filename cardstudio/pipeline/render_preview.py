from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

import fitz  # PyMuPDF

from ..storage import artifact_path

PREVIEW_TYPES = ("preview_front", "preview_inner", "preview_back")


def _render_page_to_png(doc: fitz.Document, page_index: int, out_path: Path, width_px: int) -> None:
    page = doc.load_page(page_index)

    # Proof pages are in design-space points; zoom so the PNG is width_px wide.
    zoom = width_px / float(page.rect.width)
    mat = fitz.Matrix(zoom, zoom)

    pix = page.get_pixmap(matrix=mat, alpha=False)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    pix.save(str(out_path))


def render_previews(
    sku: str,
    pdf_path: Path,
    base_dir: Optional[Path] = None,
    width_px: int = 1200,
) -> Tuple[Path, Path, Path]:
    """Rasterise the front, inner spread and back pages of a proof."""
    paths = tuple(artifact_path(sku, kind, base_dir=base_dir) for kind in PREVIEW_TYPES)

    with fitz.open(pdf_path) as doc:
        for index, path in enumerate(paths):
            _render_page_to_png(doc, index, path, width_px)

    return paths  # type: ignore[return-value]
