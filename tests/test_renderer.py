import xml.etree.ElementTree as ET

import pytest

from africamap.layout import compute_layout
from africamap.renderer import ARROWHEAD_ID, WRAPPER_CLASS, label_font_size, render
from africamap.surface import MapContainer


@pytest.fixture
def rendered(features, catalog):
    container = MapContainer("#map", width=640)
    render(compute_layout(640), features, catalog, container)
    return container


def _chart_group(container):
    svg = container.find_svg()
    groups = [child for child in svg if child.tag == "g"]
    assert len(groups) == 1
    return groups[0]


def _label_style(text_el):
    return dict(
        part.strip().split(": ", 1) for part in text_el.get("style").split(";") if part.strip()
    )


def test_wrapper_and_svg_size(rendered):
    wrappers = rendered.query("div", **{"class": WRAPPER_CLASS})
    assert len(wrappers) == 1
    svg = rendered.find_svg()
    assert svg.get("width") == "640"
    assert svg.get("height") == "512"
    assert _chart_group(rendered).get("transform") == "translate(0,0)"


def test_rerender_replaces_contents(features, catalog):
    container = MapContainer("#map", width=640)
    render(compute_layout(640), features, catalog, container)
    first = container.element_count()
    render(compute_layout(640), features, catalog, container)
    assert container.element_count() == first
    render(compute_layout(320), features, catalog, container)
    assert container.element_count() == first
    assert len(container.query("svg")) == 1
    assert container.element.get("id") == "map"


def test_countries_classified(rendered):
    caf = rendered.query("path", id="CAF")
    usa = rendered.query("path", id="USA")
    assert len(caf) == 1 and len(usa) == 1
    assert caf[0].get("class") == "central-africa"
    assert usa[0].get("class") == "context"
    assert caf[0].get("fill") != usa[0].get("fill")
    assert caf[0].get("d").startswith("M")
    assert caf[0].get("d").endswith("Z")


def test_layer_order(rendered):
    classes = [child.get("class") for child in _chart_group(rendered)]
    assert classes == ["countries", "arrows", "labels"]


def test_arrowhead_marker_defined_once(rendered):
    markers = rendered.query("marker", id=ARROWHEAD_ID)
    assert len(markers) == 1
    assert markers[0].get("orient") == "auto"
    assert len(list(markers[0].iter("polygon"))) == 1


def test_arrows_are_smoothed_with_marker(rendered, catalog):
    arrows = next(g for g in _chart_group(rendered) if g.get("class") == "arrows")
    paths = list(arrows.iter("path"))
    assert len(paths) == len(catalog.arrows) == 3
    for path in paths:
        assert path.get("d").startswith("M")
        assert "C" in path.get("d")
        assert f"url(#{ARROWHEAD_ID})" in path.get("style")


def test_labels_positioned_and_sized(rendered):
    texts = rendered.query("text")
    assert len(texts) == 9
    for text in texts:
        assert text.get("transform").startswith("translate(")
        assert "rotate(0)" in text.get("transform")
    angola = next(t for t in texts if t.text == "Angola")
    assert _label_style(angola) == {"text-anchor": "middle", "font-size": "100%"}
    cameroon = next(t for t in texts if t.text == "Cameroon")
    assert _label_style(cameroon)["font-size"] == "90%"


def test_labels_shrink_with_width(features, catalog):
    container = MapContainer("#map", width=320)
    render(compute_layout(320), features, catalog, container)
    angola = next(t for t in container.query("text") if t.text == "Angola")
    assert _label_style(angola)["font-size"] == "50%"


def test_markup_becomes_tspans(rendered):
    svg = ET.fromstring(rendered.svg_markup())
    texts = [el for el in svg.iter() if el.tag.endswith("text")]
    guinea = next(
        t for t in texts if any((span.text or "") == "Equatorial" for span in t)
    )
    spans = list(guinea)
    assert [span.text for span in spans] == ["Equatorial", "Guinea"]
    assert spans[0].get("dx") == "9.5%"
    assert spans[1].get("dy") == "2.25%"
    assert _label_style(guinea)["text-anchor"] == "end"
    assert "&lt;tspan" not in rendered.svg_markup()


def test_labels_land_inside_frame(rendered):
    for text in rendered.query("text"):
        transform = text.get("transform")
        x_text, y_text = transform[len("translate(") : transform.index(")")].split(",")
        assert 0 <= float(x_text) <= 640
        assert 0 <= float(y_text) <= 512


def test_label_font_size_helper():
    assert label_font_size(1.0, 1.0) == "100%"
    assert label_font_size(1.0, 0.5) == "50%"
    assert label_font_size(0.9, 1.0) == "90%"
    assert label_font_size(0.9, 0.5) == "45%"


def test_container_html_wraps_svg(rendered):
    html = rendered.to_html()
    assert html.startswith('<div id="map">')
    assert f'<div class="{WRAPPER_CLASS}"><svg' in html
    assert html.endswith("</div></div>")
