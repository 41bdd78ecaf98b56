"""Responsive layout: projection and sizing parameters derived from container width."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .config import LayoutConfig, MarginsConfig

_LOGGER = logging.getLogger("africamap.layout")


@dataclass(frozen=True, slots=True)
class LayoutParameters:
    width: float
    height: float
    chart_width: float
    chart_height: float
    margins: MarginsConfig
    scale_factor: float
    projection_scale: float
    center: tuple[float, float]
    translate: tuple[float, float]

    @property
    def svg_width(self) -> float:
        return self.chart_width + self.margins.left + self.margins.right

    @property
    def svg_height(self) -> float:
        return self.chart_height + self.margins.top + self.margins.bottom

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "chart_width": self.chart_width,
            "chart_height": self.chart_height,
            "scale_factor": self.scale_factor,
            "projection_scale": self.projection_scale,
            "center": list(self.center),
            "translate": list(self.translate),
        }


def compute_layout(container_width: float, cfg: LayoutConfig | None = None) -> LayoutParameters:
    """Derive every size and projection knob from the container width.

    No bounds checking: zero or negative widths give degenerate parameters.
    """
    cfg = cfg or LayoutConfig()
    margins = cfg.margins
    width = float(container_width)
    height = width / cfg.aspect_ratio

    chart_width = width - (margins.left + margins.right)
    chart_height = height - (margins.top + margins.bottom)

    scale_factor = chart_width / cfg.reference_width
    projection_scale = scale_factor * cfg.reference_projection_scale

    layout = LayoutParameters(
        width=width,
        height=height,
        chart_width=chart_width,
        chart_height=chart_height,
        margins=margins,
        scale_factor=scale_factor,
        projection_scale=projection_scale,
        center=cfg.center,
        translate=(width / 2, height / 2),
    )
    _LOGGER.debug(
        "Layout for width=%.1f: height=%.1f scale_factor=%.4f projection_scale=%.2f",
        width,
        height,
        scale_factor,
        projection_scale,
    )
    return layout


def is_mobile(width: float, threshold: float = 600.0) -> bool:
    return width <= threshold
