"""TopoJSON decoding into shapely-backed feature collections."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from shapely.geometry import shape

from .models import Feature, FeatureCollection

Position = tuple[float, ...]


class _ArcDecoder:
    """Resolves arc references (including `~index` reversals) into coordinates."""

    def __init__(self, topology: Mapping[str, Any]) -> None:
        transform = topology.get("transform")
        if transform:
            self._scale = tuple(float(v) for v in transform.get("scale", [1.0, 1.0]))
            self._translate = tuple(float(v) for v in transform.get("translate", [0.0, 0.0]))
        else:
            self._scale = None
            self._translate = None
        self._raw_arcs: Sequence[Any] = topology.get("arcs") or []
        self._cache: dict[int, list[Position]] = {}

    def position(self, point: Sequence[float]) -> Position:
        if self._scale is None or self._translate is None:
            return tuple(float(v) for v in point)
        sx, sy = self._scale
        tx, ty = self._translate
        return (float(point[0]) * sx + tx, float(point[1]) * sy + ty, *point[2:])

    def arc(self, index: int) -> list[Position]:
        if index < 0:
            return list(reversed(self._decoded(~index)))
        return list(self._decoded(index))

    def line(self, indices: Sequence[int]) -> list[Position]:
        points: list[Position] = []
        for index in indices:
            if points:
                points.pop()
            points.extend(self.arc(int(index)))
        if len(points) < 2 and points:
            points.append(points[0])
        return points

    def ring(self, indices: Sequence[int]) -> list[Position]:
        points = self.line(indices)
        while points and len(points) < 4:
            points.append(points[0])
        return points

    def _decoded(self, index: int) -> list[Position]:
        cached = self._cache.get(index)
        if cached is not None:
            return cached
        if index >= len(self._raw_arcs):
            raise ValueError(f"Arc index {index} out of range ({len(self._raw_arcs)} arcs)")
        raw = self._raw_arcs[index]
        if self._scale is None or self._translate is None:
            decoded = [tuple(float(v) for v in point) for point in raw]
        else:
            sx, sy = self._scale
            tx, ty = self._translate
            x = 0.0
            y = 0.0
            decoded = []
            for point in raw:
                x += float(point[0])
                y += float(point[1])
                decoded.append((x * sx + tx, y * sy + ty))
        self._cache[index] = decoded
        return decoded


def _geometry_to_geojson(geometry: Mapping[str, Any], decoder: _ArcDecoder) -> dict[str, Any] | None:
    geom_type = geometry.get("type")
    if geom_type is None:
        return None
    if geom_type == "Point":
        return {"type": "Point", "coordinates": decoder.position(geometry["coordinates"])}
    if geom_type == "MultiPoint":
        return {
            "type": "MultiPoint",
            "coordinates": [decoder.position(p) for p in geometry["coordinates"]],
        }
    if geom_type == "LineString":
        return {"type": "LineString", "coordinates": decoder.line(geometry["arcs"])}
    if geom_type == "MultiLineString":
        return {
            "type": "MultiLineString",
            "coordinates": [decoder.line(arcs) for arcs in geometry["arcs"]],
        }
    if geom_type == "Polygon":
        return {
            "type": "Polygon",
            "coordinates": [decoder.ring(arcs) for arcs in geometry["arcs"]],
        }
    if geom_type == "MultiPolygon":
        return {
            "type": "MultiPolygon",
            "coordinates": [
                [decoder.ring(arcs) for arcs in polygon] for polygon in geometry["arcs"]
            ],
        }
    if geom_type == "GeometryCollection":
        parts = [
            part
            for part in (
                _geometry_to_geojson(child, decoder) for child in geometry.get("geometries", [])
            )
            if part is not None
        ]
        return {"type": "GeometryCollection", "geometries": parts}
    raise ValueError(f"Unsupported topology geometry type: {geom_type}")


def _feature_id(
    raw_id: Any,
    properties: Mapping[str, Any],
    id_properties: Sequence[str],
) -> str:
    if raw_id is not None and str(raw_id).strip():
        return str(raw_id).strip()
    for key in id_properties:
        value = properties.get(key)
        if value is not None and str(value).strip() and str(value).strip() != "-99":
            return str(value).strip()
    return ""


def _to_shape(geojson: dict[str, Any] | None) -> Any:
    if geojson is None:
        return None
    return shape(geojson)


def topology_to_features(
    topology: Mapping[str, Any],
    object_name: str,
    *,
    id_properties: Sequence[str] = (),
) -> FeatureCollection:
    """Decode one named object of a TopoJSON document.

    Plain GeoJSON FeatureCollections are accepted too, in which case
    `object_name` is ignored.
    """
    if topology.get("type") == "FeatureCollection":
        return geojson_to_features(topology, id_properties=id_properties)
    if topology.get("type") != "Topology":
        raise ValueError(f"Expected a Topology document, got type={topology.get('type')!r}")

    objects = topology.get("objects") or {}
    if object_name not in objects:
        available = ", ".join(sorted(objects)) or "<none>"
        raise ValueError(f"Topology has no object '{object_name}' (available: {available})")

    decoder = _ArcDecoder(topology)
    obj = objects[object_name]
    geometries = obj.get("geometries", []) if obj.get("type") == "GeometryCollection" else [obj]

    features: list[Feature] = []
    for geometry in geometries:
        properties = dict(geometry.get("properties") or {})
        features.append(
            Feature(
                id=_feature_id(geometry.get("id"), properties, id_properties),
                geometry=_to_shape(_geometry_to_geojson(geometry, decoder)),
                properties=properties,
            )
        )
    return FeatureCollection(features=tuple(features))


def geojson_to_features(
    collection: Mapping[str, Any],
    *,
    id_properties: Sequence[str] = (),
) -> FeatureCollection:
    features: list[Feature] = []
    for raw in collection.get("features", []):
        properties = dict(raw.get("properties") or {})
        geometry = raw.get("geometry")
        features.append(
            Feature(
                id=_feature_id(raw.get("id"), properties, id_properties),
                geometry=shape(geometry) if geometry else None,
                properties=properties,
            )
        )
    return FeatureCollection(features=tuple(features))
