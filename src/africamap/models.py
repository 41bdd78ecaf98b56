"""Domain models shared across pipeline modules."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Iterator, Mapping

from .layout import is_mobile as classify_mobile

if TYPE_CHECKING:
    from .config import AppConfig


LonLat = tuple[float, float]


def _require_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _require_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected numeric value for '{field_name}'")
    return float(value)


def _require_lon_lat(value: Any, field_name: str) -> LonLat:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"Expected [lon, lat] pair for '{field_name}'")
    lon = _require_number(value[0], f"{field_name}[0]")
    lat = _require_number(value[1], f"{field_name}[1]")
    if lon < -180.0 or lon > 180.0:
        raise ValueError(f"{field_name} longitude must be between -180 and 180")
    if lat < -90.0 or lat > 90.0:
        raise ValueError(f"{field_name} latitude must be between -90 and 90")
    return (lon, lat)


@dataclass(frozen=True, slots=True)
class Feature:
    """One country boundary decoded from the topology dataset."""

    id: str
    geometry: Any
    properties: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class FeatureCollection:
    features: tuple[Feature, ...] = ()

    def __iter__(self) -> Iterator[Feature]:
        return iter(self.features)

    def __len__(self) -> int:
        return len(self.features)

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(feature.id for feature in self.features)


@dataclass(frozen=True, slots=True)
class LabelDefaults:
    text_anchor: str = "middle"
    font_size: float = 1.0
    rotate: float = 0.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> LabelDefaults:
        return cls(
            text_anchor=_require_str(data.get("text-anchor", "middle"), "label_defaults.text-anchor"),
            font_size=_require_number(data.get("font-size", 1), "label_defaults.font-size"),
            rotate=_require_number(data.get("rotate", 0), "label_defaults.rotate"),
        )


@dataclass(frozen=True, slots=True)
class ResolvedLabel:
    text: str
    loc: LonLat
    text_anchor: str
    font_size: float
    rotate: float


@dataclass(frozen=True, slots=True)
class LabelDescriptor:
    """Static label; `text` may carry inline `<tspan>` markup."""

    text: str
    loc: LonLat
    text_anchor: str | None = None
    font_size: float | None = None
    rotate: float | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> LabelDescriptor:
        text = _require_str(data.get("text"), "text")
        loc = _require_lon_lat(data.get("loc"), "loc")
        anchor_raw = data.get("text-anchor")
        size_raw = data.get("font-size")
        rotate_raw = data.get("rotate")
        return cls(
            text=text,
            loc=loc,
            text_anchor=_require_str(anchor_raw, "text-anchor") if anchor_raw is not None else None,
            font_size=_require_number(size_raw, "font-size") if size_raw is not None else None,
            rotate=_require_number(rotate_raw, "rotate") if rotate_raw is not None else None,
        )

    def resolved(self, defaults: LabelDefaults) -> ResolvedLabel:
        return ResolvedLabel(
            text=self.text,
            loc=self.loc,
            text_anchor=self.text_anchor if self.text_anchor is not None else defaults.text_anchor,
            # A zero size counts as unset.
            font_size=self.font_size or defaults.font_size,
            rotate=self.rotate if self.rotate is not None else defaults.rotate,
        )


@dataclass(frozen=True, slots=True)
class ArrowDescriptor:
    """Smoothed directional path through geographic control points."""

    path: tuple[LonLat, ...]
    name: str | None = None

    MIN_POINTS = 3

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ArrowDescriptor:
        raw = data.get("path")
        if not isinstance(raw, list):
            raise ValueError("Expected list for arrow 'path'")
        if len(raw) < cls.MIN_POINTS:
            raise ValueError(f"Arrow path needs at least {cls.MIN_POINTS} points, got {len(raw)}")
        points = tuple(_require_lon_lat(item, f"path[{idx}]") for idx, item in enumerate(raw))
        name_raw = data.get("name")
        name = _require_str(name_raw, "name") if name_raw is not None else None
        return cls(path=points, name=name)


@dataclass(frozen=True, slots=True)
class AnnotationCatalog:
    highlight_ids: frozenset[str]
    highlight_class: str
    neutral_class: str
    label_defaults: LabelDefaults
    labels: tuple[LabelDescriptor, ...]
    arrows: tuple[ArrowDescriptor, ...]

    def is_highlighted(self, feature_id: str) -> bool:
        return feature_id in self.highlight_ids

    def category_for(self, feature_id: str) -> str:
        return self.highlight_class if self.is_highlighted(feature_id) else self.neutral_class


@dataclass(frozen=True, slots=True)
class AppState:
    """Everything a render pass reads; rebuilt instead of mutated."""

    features: FeatureCollection
    catalog: AnnotationCatalog
    config: AppConfig
    width: float
    is_mobile: bool = False

    def with_viewport(self, width: float) -> AppState:
        return replace(
            self,
            width=width,
            is_mobile=classify_mobile(width, self.config.viewport.mobile_threshold),
        )


@dataclass(frozen=True, slots=True)
class RenderManifest:
    """Render metadata used for deterministic audit trails."""

    generated_at_utc: str
    config_hash_sha256: str | None
    git_commit: str | None
    layouts: Mapping[str, Mapping[str, Any]]
    artifacts: Mapping[str, str]

    @classmethod
    def create(
        cls,
        *,
        config_hash_sha256: str | None,
        git_commit: str | None,
        layouts: Mapping[str, Mapping[str, Any]],
        artifacts: Mapping[str, str],
    ) -> RenderManifest:
        now = datetime.now(timezone.utc).isoformat()
        return cls(
            generated_at_utc=now,
            config_hash_sha256=config_hash_sha256,
            git_commit=git_commit,
            layouts=layouts,
            artifacts=artifacts,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at_utc": self.generated_at_utc,
            "config_hash_sha256": self.config_hash_sha256,
            "git_commit": self.git_commit,
            "layouts": {key: dict(value) for key, value in self.layouts.items()},
            "artifacts": dict(self.artifacts),
        }
