from pathlib import Path

import pytest

from africamap.config import AppConfig, default_annotations_path, load_config


def test_defaults_without_file():
    cfg = load_config(None)
    assert cfg.source_path is None
    assert cfg.layout.aspect_ratio == 1.25
    assert cfg.layout.reference_width == 640
    assert cfg.layout.reference_projection_scale == 825
    assert cfg.layout.center == (10.0, 2.0)
    assert cfg.viewport.mobile_threshold == 600
    assert cfg.viewport.resize_throttle_s == 0.25
    assert cfg.viewport.container_selector == "#map"
    assert cfg.data.object_name == "ne_50m_admin_0_countries"
    assert cfg.paths.annotations == default_annotations_path()
    assert cfg.serve.port_start <= cfg.serve.port_end


def test_relative_paths_resolve_against_config_dir(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        "\n".join(
            [
                "layout:",
                "  margins: {top: 4, left: 2}",
                "data:",
                "  source: data/world.json",
                "paths:",
                "  annotations: notes.yaml",
                "  output_dir: out",
            ]
        ),
        encoding="utf-8",
    )
    cfg = load_config(cfg_path)
    root = tmp_path.resolve()
    assert cfg.source_path == cfg_path.resolve()
    assert Path(cfg.data.source) == root / "data" / "world.json"
    assert cfg.paths.annotations == root / "notes.yaml"
    assert cfg.paths.output_dir == root / "out"
    assert cfg.layout.margins.top == 4
    assert cfg.layout.margins.left == 2
    assert cfg.layout.margins.right == 0


def test_remote_source_is_left_alone():
    cfg = AppConfig.from_mapping({"data": {"source": "https://example.org/countries.json"}}, None)
    assert cfg.data.source == "https://example.org/countries.json"


@pytest.mark.parametrize(
    "raw, message",
    [
        ({"layout": {"aspect_ratio": 0}}, "aspect_ratio"),
        ({"layout": {"center": [10]}}, "layout.center"),
        ({"viewport": {"resize_throttle_s": -1}}, "resize_throttle_s"),
        ({"data": {"request_timeout_s": 0}}, "request_timeout_s"),
        ({"serve": {"port_start": 9000, "port_end": 8000}}, "port_end"),
        ({"layout": "wide"}, "layout"),
    ],
)
def test_invalid_values_name_the_field(raw, message):
    with pytest.raises(ValueError, match=message):
        AppConfig.from_mapping(raw, None)


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_non_mapping_config(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(cfg_path)
