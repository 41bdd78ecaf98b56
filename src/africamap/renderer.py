"""SVG rendering of countries, arrows and labels into a map container."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any

import svgwrite

from .layout import LayoutParameters
from .models import AnnotationCatalog, FeatureCollection
from .paths import basis_path, format_number
from .projection import Projector, build_projector
from .surface import MapContainer

_LOGGER = logging.getLogger("africamap.renderer")

ARROWHEAD_ID = "arrowhead"
WRAPPER_CLASS = "graphic-wrapper"


@dataclass(frozen=True, slots=True)
class _ArrowheadShape:
    view_box: tuple[float, float, float, float]
    ref: tuple[float, float]
    size: tuple[float, float]
    points: tuple[tuple[float, float], ...]
    fill: str


@dataclass(frozen=True, slots=True)
class _MapStyle:
    highlight_fill: str
    neutral_fill: str
    country_stroke: str
    country_stroke_width: float
    arrow_stroke: str
    arrow_stroke_width: float
    label_fill: str
    font_family: str


_ARROWHEAD = _ArrowheadShape(
    view_box=(0.0, 0.0, 5.108, 8.18),
    ref=(5.0, 4.09),
    size=(5.108, 8.18),
    points=(
        (0.745, 8.05),
        (0.07, 7.312),
        (3.71, 3.986),
        (0.127, 0.599),
        (0.815, -0.129),
        (5.179, 3.999),
    ),
    fill="#4C4C4C",
)
_STYLE = _MapStyle(
    highlight_fill="#C9D9E2",
    neutral_fill="#EFEFEF",
    country_stroke="#FFFFFF",
    country_stroke_width=0.5,
    arrow_stroke="#4C4C4C",
    arrow_stroke_width=1.0,
    label_fill="#333333",
    font_family="Helvetica, Arial, sans-serif",
)


def render(
    layout: LayoutParameters,
    features: FeatureCollection,
    catalog: AnnotationCatalog,
    container: MapContainer,
) -> None:
    """Rebuild the container contents for one layout.

    The container is cleared first, so repeated calls never accumulate
    elements. Layers are painted countries, then arrows, then labels.
    """
    projector = build_projector(layout)

    container.clear()
    wrapper = container.append("div", {"class": WRAPPER_CLASS})

    dwg = svgwrite.Drawing(
        size=(format_number(layout.svg_width), format_number(layout.svg_height)),
        debug=False,
    )
    chart = dwg.add(
        dwg.g(
            transform=(
                f"translate({format_number(layout.margins.left)},"
                f"{format_number(layout.margins.top)})"
            )
        )
    )

    _draw_countries(dwg, chart, projector, features, catalog)
    _define_arrowhead(dwg)
    _draw_arrows(dwg, chart, projector, catalog)
    _draw_labels(dwg, chart, projector, catalog, layout.scale_factor)

    wrapper.append(dwg.get_xml())
    _LOGGER.debug(
        "Rendered %d countries, %d arrows, %d labels at %sx%s",
        len(features),
        len(catalog.arrows),
        len(catalog.labels),
        format_number(layout.svg_width),
        format_number(layout.svg_height),
    )


def _draw_countries(
    dwg: svgwrite.Drawing,
    chart: Any,
    projector: Projector,
    features: FeatureCollection,
    catalog: AnnotationCatalog,
) -> None:
    countries = chart.add(
        dwg.g(
            class_="countries",
            stroke=_STYLE.country_stroke,
            stroke_width=format_number(_STYLE.country_stroke_width),
        )
    )
    for feature in features:
        highlighted = catalog.is_highlighted(feature.id)
        attributes: dict[str, Any] = {
            "class_": catalog.category_for(feature.id),
            "fill": _STYLE.highlight_fill if highlighted else _STYLE.neutral_fill,
        }
        if feature.id:
            attributes["id"] = feature.id
        d = projector.path_for(feature.geometry)
        if d:
            attributes["d"] = d
        countries.add(dwg.path(**attributes))


def _define_arrowhead(dwg: svgwrite.Drawing) -> None:
    marker = dwg.marker(
        id=ARROWHEAD_ID,
        insert=_ARROWHEAD.ref,
        size=_ARROWHEAD.size,
        orient="auto",
    )
    marker.viewbox(*_ARROWHEAD.view_box)
    marker.add(dwg.polygon(points=list(_ARROWHEAD.points), fill=_ARROWHEAD.fill))
    dwg.defs.add(marker)


def _draw_arrows(
    dwg: svgwrite.Drawing,
    chart: Any,
    projector: Projector,
    catalog: AnnotationCatalog,
) -> None:
    arrows = chart.add(
        dwg.g(
            class_="arrows",
            fill="none",
            stroke=_STYLE.arrow_stroke,
            stroke_width=format_number(_STYLE.arrow_stroke_width),
        )
    )
    for arrow in catalog.arrows:
        arrows.add(
            dwg.path(
                d=basis_path(projector.project_many(arrow.path)),
                style=f"marker-end: url(#{ARROWHEAD_ID})",
            )
        )


def _draw_labels(
    dwg: svgwrite.Drawing,
    chart: Any,
    projector: Projector,
    catalog: AnnotationCatalog,
    scale_factor: float,
) -> None:
    labels = chart.add(
        dwg.g(class_="labels", fill=_STYLE.label_fill, font_family=_STYLE.font_family)
    )
    for descriptor in catalog.labels:
        label = descriptor.resolved(catalog.label_defaults)
        x, y = projector.project(*label.loc)
        text = dwg.text(
            "",
            transform=(
                f"translate({format_number(x)},{format_number(y)}) "
                f"rotate({format_number(label.rotate)})"
            ),
            style=(
                f"text-anchor: {label.text_anchor}; "
                f"font-size: {label_font_size(label.font_size, scale_factor)}"
            ),
        )
        _apply_markup(dwg, text, label.text)
        labels.add(text)


def label_font_size(base_size: float, scale_factor: float) -> str:
    return f"{format_number(base_size * scale_factor * 100, precision=4)}%"


def _apply_markup(dwg: svgwrite.Drawing, text: Any, markup: str) -> None:
    """Copy inline markup into real tspan children instead of escaping it."""
    fragment = ET.fromstring(f"<text>{markup}</text>")
    text.text = fragment.text or ""
    _append_children(dwg, text, fragment)


def _append_children(dwg: svgwrite.Drawing, parent: Any, source: ET.Element) -> None:
    for child in source:
        tspan = dwg.tspan(child.text or "")
        for key, value in child.attrib.items():
            tspan[key] = value
        _append_children(dwg, tspan, child)
        parent.add(tspan)
        if child.tail:
            parent.add(dwg.tspan(child.tail))
