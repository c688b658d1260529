from __future__ import annotations

import copy

import pytest

from cardstudio.engine.document import SLIDE_ORDER, ZoneKind, clean_font_family, parse_document
from cardstudio.errors import MalformedDocument


def test_parses_all_four_slides(document) -> None:
    assert document.sku == "PC-001"
    assert document.canvas.width == 600
    assert document.canvas.height == 850
    assert tuple(document.slides) == SLIDE_ORDER


def test_zone_fields_and_defaults(document) -> None:
    name = document.slide("front").dynamic_zones[0]
    assert name.id == "1"
    assert name.dynamic is True
    assert name.font_family == "Arial"
    assert name.placeholder == "Your Name"
    assert name.max_chars == 40
    assert name.authored_font_size == 40

    sig = document.slide("back").dynamic_zones[0]
    assert sig.placeholder == "Signature"
    assert sig.font_family is None
    assert sig.rotation == -5

    balloon = document.slide("front").static_zones[0]
    assert balloon.kind == ZoneKind.EMOJI
    assert balloon.dynamic is False


def test_default_max_chars_and_rotation(card_data) -> None:
    zone = card_data["design_data"]["slides"]["back"]["dynamic_zones"][0]
    del zone["maxChars"]
    del zone["rotation"]
    doc = parse_document(card_data)
    sig = doc.slide("back").dynamic_zones[0]
    assert sig.max_chars == 200
    assert sig.rotation == 0.0


def test_accepts_camel_case_and_top_level_slides(card_data) -> None:
    data = {
        "sku": "PC-002",
        "canvasSettings": card_data["canvas_settings"],
        "slides": card_data["design_data"]["slides"],
    }
    doc = parse_document(data)
    assert doc.canvas.width == 600


def test_missing_canvas_is_fatal(card_data) -> None:
    del card_data["canvas_settings"]
    with pytest.raises(MalformedDocument):
        parse_document(card_data)


@pytest.mark.parametrize("slide", SLIDE_ORDER)
def test_missing_slide_is_fatal(card_data, slide) -> None:
    del card_data["design_data"]["slides"][slide]
    with pytest.raises(MalformedDocument):
        parse_document(card_data)


@pytest.mark.parametrize("field", ["x", "y", "width", "height"])
def test_missing_zone_geometry_is_fatal(card_data, field) -> None:
    data = copy.deepcopy(card_data)
    del data["design_data"]["slides"]["front"]["dynamic_zones"][0][field]
    with pytest.raises(MalformedDocument):
        parse_document(data)


def test_non_numeric_geometry_is_fatal(card_data) -> None:
    card_data["design_data"]["slides"]["front"]["dynamic_zones"][0]["width"] = "wide"
    with pytest.raises(MalformedDocument):
        parse_document(card_data)


def test_numeric_strings_are_accepted(card_data) -> None:
    card_data["design_data"]["slides"]["front"]["dynamic_zones"][0]["x"] = "150"
    doc = parse_document(card_data)
    assert doc.slide("front").dynamic_zones[0].x == 150.0


def test_zero_sized_zone_is_fatal(card_data) -> None:
    card_data["design_data"]["slides"]["back"]["dynamic_zones"][0]["height"] = 0
    with pytest.raises(MalformedDocument):
        parse_document(card_data)


def test_duplicate_zone_id_within_slide_is_fatal(card_data) -> None:
    zones = card_data["design_data"]["slides"]["front"]["dynamic_zones"]
    zones.append(dict(zones[0]))
    with pytest.raises(MalformedDocument):
        parse_document(card_data)


def test_non_integer_canvas_is_fatal(card_data) -> None:
    card_data["canvas_settings"]["width"] = 600.5
    with pytest.raises(MalformedDocument):
        parse_document(card_data)


def test_sku_falls_back_to_requested_sku(card_data) -> None:
    del card_data["sku"]
    assert parse_document(card_data, sku="PC-009").sku == "PC-009"
    with pytest.raises(MalformedDocument):
        parse_document(card_data)


def test_clean_font_family() -> None:
    assert clean_font_family("'Noto Sans JP', sans-serif") == "Noto Sans JP"
    assert clean_font_family('"Dancing Script"') == "Dancing Script"
    assert clean_font_family("") is None


def test_rotation_is_about_zone_centre(document) -> None:
    sig = document.slide("back").dynamic_zones[0]
    corners = sig.corners()
    cx = sum(x for x, _ in corners) / 4
    cy = sum(y for _, y in corners) / 4
    assert cx == pytest.approx(sig.center[0])
    assert cy == pytest.approx(sig.center[1])


def test_document_is_read_only(document) -> None:
    with pytest.raises(TypeError):
        document.slides["front"] = None  # type: ignore[index]


def test_font_families_include_static_text(card_data) -> None:
    card_data["design_data"]["slides"]["left_inner"]["static_zones"][0]["fontFamily"] = "'Dancing Script', cursive"
    doc = parse_document(card_data)
    assert doc.font_families() == ["Arial", "Dancing Script", "Times New Roman"]
