"""Typed configuration loader for `config.yaml`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, cast

import yaml


_PACKAGE_DIR = Path(__file__).resolve().parent

DEFAULT_USER_AGENT = "central-africa-map/0.1 (+https://github.com/)"


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Expected integer for '{field_name}'")
    return value


def _float(value: Any, field_name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise ValueError(f"Expected float for '{field_name}'")


def _str_list(value: Any, field_name: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Expected list for '{field_name}'")
    out: list[str] = []
    for idx, item in enumerate(value):
        out.append(_str(item, f"{field_name}[{idx}]"))
    return tuple(out)


def _lon_lat(value: Any, field_name: str) -> tuple[float, float]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"Expected [lon, lat] pair for '{field_name}'")
    return (_float(value[0], f"{field_name}[0]"), _float(value[1], f"{field_name}[1]"))


def _path_from_cfg(value: Any, field_name: str, root_dir: Path) -> Path:
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


@dataclass(frozen=True, slots=True)
class MarginsConfig:
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> MarginsConfig:
        return cls(
            top=_float(raw.get("top", 0), "layout.margins.top"),
            right=_float(raw.get("right", 0), "layout.margins.right"),
            bottom=_float(raw.get("bottom", 0), "layout.margins.bottom"),
            left=_float(raw.get("left", 0), "layout.margins.left"),
        )


@dataclass(frozen=True, slots=True)
class LayoutConfig:
    aspect_ratio: float = 1.25
    reference_width: float = 640.0
    reference_projection_scale: float = 825.0
    center: tuple[float, float] = (10.0, 2.0)
    margins: MarginsConfig = MarginsConfig()

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> LayoutConfig:
        aspect_ratio = _float(raw.get("aspect_ratio", 1.25), "layout.aspect_ratio")
        reference_width = _float(raw.get("reference_width", 640), "layout.reference_width")
        if aspect_ratio <= 0:
            raise ValueError("layout.aspect_ratio must be > 0")
        if reference_width <= 0:
            raise ValueError("layout.reference_width must be > 0")
        return cls(
            aspect_ratio=aspect_ratio,
            reference_width=reference_width,
            reference_projection_scale=_float(
                raw.get("reference_projection_scale", 825),
                "layout.reference_projection_scale",
            ),
            center=_lon_lat(raw.get("center", [10, 2]), "layout.center"),
            margins=MarginsConfig.from_mapping(_mapping(raw.get("margins"), "layout.margins")),
        )


@dataclass(frozen=True, slots=True)
class ViewportConfig:
    default_width: float = 640.0
    mobile_threshold: float = 600.0
    resize_throttle_s: float = 0.25
    container_selector: str = "#map"

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ViewportConfig:
        resize_throttle_s = _float(raw.get("resize_throttle_s", 0.25), "viewport.resize_throttle_s")
        if resize_throttle_s < 0:
            raise ValueError("viewport.resize_throttle_s must be >= 0")
        return cls(
            default_width=_float(raw.get("default_width", 640), "viewport.default_width"),
            mobile_threshold=_float(raw.get("mobile_threshold", 600), "viewport.mobile_threshold"),
            resize_throttle_s=resize_throttle_s,
            container_selector=_str(
                raw.get("container_selector", "#map"), "viewport.container_selector"
            ),
        )


@dataclass(frozen=True, slots=True)
class DataConfig:
    source: str = "data/countries.json"
    object_name: str = "ne_50m_admin_0_countries"
    id_properties: tuple[str, ...] = ("ADM0_A3", "ISO_A3")
    request_timeout_s: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> DataConfig:
        source = _str(raw.get("source", "data/countries.json"), "data.source")
        if "://" not in source and not Path(source).is_absolute():
            source = str(root_dir / source)
        request_timeout_s = _float(raw.get("request_timeout_s", 30), "data.request_timeout_s")
        if request_timeout_s <= 0:
            raise ValueError("data.request_timeout_s must be > 0")
        return cls(
            source=source,
            object_name=_str(raw.get("object_name", "ne_50m_admin_0_countries"), "data.object_name"),
            id_properties=_str_list(
                raw.get("id_properties", ["ADM0_A3", "ISO_A3"]), "data.id_properties"
            ),
            request_timeout_s=request_timeout_s,
            user_agent=_str(raw.get("user_agent", DEFAULT_USER_AGENT), "data.user_agent"),
        )


@dataclass(frozen=True, slots=True)
class PathsConfig:
    annotations: Path
    output_dir: Path
    logs_dir: Path

    @property
    def build_directories(self) -> tuple[Path, ...]:
        return (self.output_dir, self.logs_dir)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> PathsConfig:
        annotations_raw = raw.get("annotations")
        annotations = (
            _path_from_cfg(annotations_raw, "paths.annotations", root_dir)
            if annotations_raw is not None
            else default_annotations_path()
        )
        return cls(
            annotations=annotations,
            output_dir=_path_from_cfg(raw.get("output_dir", "build/maps"), "paths.output_dir", root_dir),
            logs_dir=_path_from_cfg(raw.get("logs_dir", "build/logs"), "paths.logs_dir", root_dir),
        )


@dataclass(frozen=True, slots=True)
class ServeConfig:
    host: str = "127.0.0.1"
    port_start: int = 8000
    port_end: int = 8010

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ServeConfig:
        port_start = _int(raw.get("port_start", 8000), "serve.port_start")
        port_end = _int(raw.get("port_end", 8010), "serve.port_end")
        if port_end < port_start:
            raise ValueError("serve.port_end cannot be lower than serve.port_start")
        return cls(
            host=_str(raw.get("host", "127.0.0.1"), "serve.host"),
            port_start=port_start,
            port_end=port_end,
        )


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path | None
    layout: LayoutConfig
    viewport: ViewportConfig
    data: DataConfig
    paths: PathsConfig
    serve: ServeConfig

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path | None) -> AppConfig:
        root_dir = source_path.parent.resolve() if source_path is not None else Path.cwd()
        return cls(
            source_path=source_path.resolve() if source_path is not None else None,
            layout=LayoutConfig.from_mapping(_mapping(raw.get("layout"), "layout")),
            viewport=ViewportConfig.from_mapping(_mapping(raw.get("viewport"), "viewport")),
            data=DataConfig.from_mapping(_mapping(raw.get("data"), "data"), root_dir),
            paths=PathsConfig.from_mapping(_mapping(raw.get("paths"), "paths"), root_dir),
            serve=ServeConfig.from_mapping(_mapping(raw.get("serve"), "serve")),
        )


def default_annotations_path() -> Path:
    return _PACKAGE_DIR / "data" / "central_africa.yaml"


def load_config(path: str | Path | None) -> AppConfig:
    """Load and validate the YAML config file into typed settings.

    `None` yields the built-in defaults with paths relative to the working directory.
    """
    if path is None:
        return AppConfig.from_mapping({}, None)
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValueError("Top-level config must be a YAML mapping")
    return AppConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)
