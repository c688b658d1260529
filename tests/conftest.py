from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Iterator

import pytest

from cardstudio import config
from cardstudio.engine.document import DesignDocument, parse_document
from cardstudio.engine.measure import TextExtents, wrap_lines
from cardstudio.models import reset_engine
from cardstudio.storage import SqlDraftStore

FIXTURES = Path(__file__).parent / "fixtures"


class CharMeasurer:
    """Every glyph is 0.6em wide; lines are 1.2em tall."""

    def __init__(self) -> None:
        self.calls = 0

    def measure(self, text: str, font_name: str, size: float, max_width: float) -> TextExtents:  # noqa: ARG002
        self.calls += 1
        if not text:
            return TextExtents(0.0, 0.0, ())

        def width_of(value: str) -> float:
            return len(value) * size * 0.6

        lines = wrap_lines(text, max_width, width_of)
        widest = max(width_of(line.rstrip(" ")) for line in lines)
        return TextExtents(widest, len(lines) * size * 1.2, tuple(lines))


@pytest.fixture
def card_data() -> dict:
    return json.loads((FIXTURES / "birthday_card.json").read_text(encoding="utf-8"))


@pytest.fixture
def document(card_data: dict) -> DesignDocument:
    return parse_document(card_data)


@pytest.fixture
def measurer() -> CharMeasurer:
    return CharMeasurer()


@pytest.fixture
def out_dir() -> Iterator[Path]:
    with tempfile.TemporaryDirectory() as temp_dir:
        path = Path(temp_dir)
        config.set_out_dir(path)
        reset_engine()
        yield path


@pytest.fixture
def drafts(out_dir: Path) -> SqlDraftStore:
    return SqlDraftStore()
