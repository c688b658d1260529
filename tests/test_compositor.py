from __future__ import annotations

import pytest

from cardstudio.engine.autofit import AutoFitter
from cardstudio.engine.compositor import BackgroundItem, DynamicItem, StaticItem, ZoneCompositor
from cardstudio.engine.customization import READ_ONLY, CustomizationStore
from cardstudio.engine.document import parse_document
from cardstudio.engine.fonts import FontRegistry


def _compositor(document, measurer, capabilities=None):
    store = CustomizationStore(document) if capabilities is None else CustomizationStore(document, None, capabilities)
    store.hydrate(document.sku)
    return ZoneCompositor(AutoFitter(FontRegistry(), measurer), store), store


def test_items_are_stacked_background_static_dynamic(card_data, measurer) -> None:
    card_data["design_data"]["slides"]["front"]["background_url"] = "https://cdn.example.com/front.jpg"
    document = parse_document(card_data)
    compositor, _ = _compositor(document, measurer)
    layout = compositor.compose(document.slide("front"), document.canvas)

    assert [type(item) for item in layout.items] == [BackgroundItem, StaticItem, DynamicItem]
    assert [item.z for item in layout.items] == [0, 5, 10]
    assert (layout.items[0].box.width, layout.items[0].box.height) == (600, 850)


def test_static_font_size(document, measurer) -> None:
    compositor, _ = _compositor(document, measurer)
    balloon = compositor.compose(document.slide("front"), document.canvas).item("s1")
    assert balloon.font_size == pytest.approx(64)
    assert balloon.content == "🎈"
    caption = compositor.compose(document.slide("left_inner"), document.canvas).item("s2")
    assert caption.font_size == pytest.approx(24)


def test_empty_zone_shows_faded_placeholder(document, measurer) -> None:
    compositor, store = _compositor(document, measurer)
    item = compositor.compose(document.slide("back"), document.canvas).item("sig")
    assert item.text == "Signature"
    assert item.is_placeholder is True
    assert item.opacity == pytest.approx(0.4)

    store.set_text("sig", "Sam")
    item = compositor.compose(document.slide("back"), document.canvas).item("sig")
    assert (item.text, item.is_placeholder, item.opacity) == ("Sam", False, 1.0)


def test_read_only_faces_hide_placeholders(document, measurer) -> None:
    compositor, _ = _compositor(document, measurer, READ_ONLY)
    item = compositor.compose(document.slide("back"), document.canvas).item("sig")
    assert item.text == ""
    assert item.interactive is False


def test_user_text_is_fitted_and_styled(document, measurer) -> None:
    compositor, store = _compositor(document, measurer)
    store.set_text("1", "Happy Birthday Grandma and Grandpa")
    store.set_style("1", {"color": "#1E88E5"})
    item = compositor.compose(document.slide("front"), document.canvas).item("1")
    assert item.font_size == 35
    assert item.color == "#1E88E5"
    assert item.font_name == "Helvetica-Bold"
    assert item.policy.text_align == "center"


def test_scaled_layout_keeps_proportions(document, measurer) -> None:
    compositor, store = _compositor(document, measurer)
    store.set_text("sig", "Sam")
    layout = compositor.compose(document.slide("back"), document.canvas).scaled(0.5)
    item = layout.item("sig")
    assert (layout.width, layout.height) == (300, 425)
    assert (item.box.x, item.box.y, item.box.width, item.box.height) == (100, 350, 100, 30)
    assert item.box.rotation == -5
    assert item.font_size == pytest.approx(item.fit.size * 0.5)


def test_css_stack_override_resolves_to_its_first_family(document, measurer) -> None:
    compositor, store = _compositor(document, measurer)
    store.set_style("1", {"fontFamily": "'Courier New', monospace"})
    item = compositor.compose(document.slide("front"), document.canvas).item("1")
    assert item.font_family == "Courier New"
    assert item.font_name == "Courier-Bold"
