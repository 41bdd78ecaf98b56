"""Robinson projection configured from layout parameters."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable, Sequence

from .layout import LayoutParameters
from .paths import linear_path

_ROBINSON_PROJ = "+proj=robin +R=1 +lon_0=0 +no_defs"
_SPHERE_LONLAT_PROJ = "+proj=longlat +R=1 +no_defs"

# PROJ scales Robinson x by 0.8487; d3-style scales put x = lambda at the equator.
_ROBINSON_FXC = 0.8487


@dataclass(frozen=True, slots=True)
class Projector:
    """Maps (lon, lat) to SVG coordinates; rebuilt for every layout.

    Unit-sphere Robinson output is normalised so that x equals longitude in
    radians along the equator, then scaled by `scale`, flipped vertically and
    shifted so that `center` lands on `translate`.
    """

    scale: float
    translate: tuple[float, float]
    center: tuple[float, float]
    origin: tuple[float, float]

    def project(self, lon: float, lat: float) -> tuple[float, float]:
        x, y = _require_robinson_transformer().transform(float(lon), float(lat))
        return self._to_plane(float(x), float(y))

    def project_many(self, points: Sequence[Sequence[float]]) -> list[tuple[float, float]]:
        if not points:
            return []
        lons = [float(point[0]) for point in points]
        lats = [float(point[1]) for point in points]
        xs, ys = _require_robinson_transformer().transform(lons, lats)
        return [self._to_plane(float(x), float(y)) for x, y in zip(xs, ys)]

    def path_for(self, geometry: Any) -> str:
        """SVG path data for a shapely geometry; points are not drawn."""
        if geometry is None or bool(getattr(geometry, "is_empty", False)):
            return ""
        return "".join(self._iter_geometry_paths(geometry))

    def _iter_geometry_paths(self, geometry: Any) -> Iterable[str]:
        geom_type = geometry.geom_type
        if geom_type == "Polygon":
            for ring in (geometry.exterior, *geometry.interiors):
                yield self._ring_path(ring.coords)
        elif geom_type in {"LineString", "LinearRing"}:
            yield linear_path(self.project_many(list(geometry.coords)))
        elif geom_type in {"MultiPolygon", "MultiLineString", "GeometryCollection"}:
            for part in geometry.geoms:
                yield from self._iter_geometry_paths(part)

    def _ring_path(self, coords: Iterable[Sequence[float]]) -> str:
        points = list(coords)
        if len(points) > 1 and tuple(points[0]) == tuple(points[-1]):
            points = points[:-1]
        if not points:
            return ""
        return linear_path(self.project_many(points), closed=True)

    def _to_plane(self, x: float, y: float) -> tuple[float, float]:
        tx, ty = self.translate
        ox, oy = self.origin
        k = self.scale / _ROBINSON_FXC
        return (tx + k * (x - ox), ty - k * (y - oy))


def build_projector(layout: LayoutParameters) -> Projector:
    lon, lat = layout.center
    origin_x, origin_y = _require_robinson_transformer().transform(float(lon), float(lat))
    return Projector(
        scale=layout.projection_scale,
        translate=layout.translate,
        center=layout.center,
        origin=(float(origin_x), float(origin_y)),
    )


@lru_cache(maxsize=1)
def _require_robinson_transformer() -> Any:
    try:
        from pyproj import Transformer
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("pyproj is required for the Robinson map projection") from exc
    return Transformer.from_crs(_SPHERE_LONLAT_PROJ, _ROBINSON_PROJ, always_xy=True)
