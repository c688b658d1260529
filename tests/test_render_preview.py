from __future__ import annotations

import tempfile
from pathlib import Path

from cardstudio import config
from cardstudio.pipeline.render_preview import render_previews


class DummyPixmap:
    def save(self, path: str) -> None:
        Path(path).write_text("preview", encoding="utf-8")


class DummyRect:
    width = 600.0


class DummyPage:
    rect = DummyRect()

    def __init__(self, zooms: list) -> None:
        self.zooms = zooms

    def get_pixmap(self, matrix=None, alpha=True) -> DummyPixmap:  # noqa: ARG002 - signature matches fitz
        self.zooms.append(matrix.a)
        return DummyPixmap()


class DummyDoc:
    def __init__(self) -> None:
        self.page_count = 3
        self.closed = False
        self.zooms: list = []

    def __enter__(self) -> "DummyDoc":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001 - test helper
        self.closed = True

    def load_page(self, index: int) -> DummyPage:  # noqa: ARG002 - test helper
        return DummyPage(self.zooms)


def test_render_previews_closes_document(monkeypatch) -> None:
    doc = DummyDoc()

    def fake_open(path: str) -> DummyDoc:  # noqa: ARG001 - test helper
        return doc

    with tempfile.TemporaryDirectory() as temp_dir:
        config.set_out_dir(Path(temp_dir))
        monkeypatch.setattr("cardstudio.pipeline.render_preview.fitz.open", fake_open)
        previews = render_previews("PC-001", Path("proof.pdf"), base_dir=Path(temp_dir), width_px=1200)
        assert doc.closed is True
        assert [path.name for path in previews] == ["preview_front.png", "preview_inner.png", "preview_back.png"]
        assert all(path.exists() for path in previews)
        assert doc.zooms == [2.0, 2.0, 2.0]
