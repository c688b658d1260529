from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from cardstudio.errors import MalformedDocument
from cardstudio.pipeline.ingest import fetch_document, load_document

FIXTURE = Path(__file__).parent / "fixtures" / "birthday_card.json"


def test_load_document_from_file() -> None:
    document = load_document(FIXTURE)
    assert document.sku == "PC-001"
    assert document.title == "Birthday Balloons"


def test_missing_or_broken_file(tmp_path: Path) -> None:
    with pytest.raises(MalformedDocument):
        load_document(tmp_path / "nope.json")
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(MalformedDocument):
        load_document(broken)


def test_fetch_document_from_api(card_data) -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json=card_data)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        document = fetch_document("PC-001", base_url="http://admin.test/api/", client=client)
    assert seen == ["http://admin.test/api/products/PC-001"]
    assert document.canvas.width == 600


def test_unknown_sku_is_fatal() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(404, json={"detail": "Not found"}))
    with httpx.Client(transport=transport) as client:
        with pytest.raises(MalformedDocument):
            fetch_document("PC-404", base_url="http://admin.test/api", client=client)


def test_invalid_json_is_fatal() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
    with httpx.Client(transport=transport) as client:
        with pytest.raises(MalformedDocument):
            fetch_document("PC-001", base_url="http://admin.test/api", client=client)


def test_payload_without_slides_is_fatal(card_data) -> None:
    del card_data["design_data"]
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text=json.dumps(card_data)))
    with httpx.Client(transport=transport) as client:
        with pytest.raises(MalformedDocument):
            fetch_document("PC-001", base_url="http://admin.test/api", client=client)
