"""Host container the map is drawn into."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any


class MapContainer:
    """Selector-addressable element whose children the renderer owns.

    `width` is the measured width of the element; the host updates it when
    the viewport changes.
    """

    def __init__(self, selector: str = "#map", width: float = 640.0) -> None:
        self.selector = selector
        self.width = float(width)
        self._root = ET.Element("div", self._root_attributes())

    def _root_attributes(self) -> dict[str, str]:
        if self.selector.startswith("#"):
            return {"id": self.selector[1:]}
        if self.selector.startswith("."):
            return {"class": self.selector[1:]}
        return {}

    @property
    def element(self) -> ET.Element:
        return self._root

    def measure_width(self) -> float:
        return self.width

    def clear(self) -> None:
        self._root.clear()
        self._root.attrib.update(self._root_attributes())

    def append(self, tag: str, attributes: dict[str, str] | None = None) -> ET.Element:
        return ET.SubElement(self._root, tag, attributes or {})

    def element_count(self) -> int:
        """Number of elements below the container root."""
        return sum(1 for _ in self._root.iter()) - 1

    def find_svg(self) -> ET.Element | None:
        for element in self._root.iter("svg"):
            return element
        return None

    def svg_markup(self) -> str:
        svg = self.find_svg()
        if svg is None:
            return ""
        return ET.tostring(svg, encoding="unicode")

    def to_html(self) -> str:
        return ET.tostring(self._root, encoding="unicode", method="html")

    def query(self, tag: str, **attributes: Any) -> list[ET.Element]:
        matches: list[ET.Element] = []
        for element in self._root.iter(tag):
            if all(element.get(key) == str(value) for key, value in attributes.items()):
                matches.append(element)
        return matches
