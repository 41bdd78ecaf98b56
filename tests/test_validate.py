import json

from africamap.config import AppConfig
from africamap.validate import Validator, format_report_lines


def _write_catalog(path, *, ids, labels="", arrows=""):
    lines = ["highlight:", f"  ids: [{', '.join(ids)}]"]
    if labels:
        lines += ["labels:", labels]
    if arrows:
        lines += ["arrows:", arrows]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_bundled_catalog_against_small_dataset(cfg):
    report = Validator(cfg).run()
    assert not report.ok
    assert any("missing from dataset" in msg and "AGO" in msg for msg in report.errors)
    assert "CAF" not in " ".join(report.errors)
    assert any("Loaded 2 features" in msg for msg in report.infos)
    assert not report.warnings


def test_clean_catalog_passes(raw_config, tmp_path):
    raw_config["paths"]["annotations"] = str(
        _write_catalog(
            tmp_path / "catalog.yaml",
            ids=["CAF", "USA"],
            labels="  - {text: Bangui, loc: [18.5, 4.4]}",
            arrows="  - {path: [[10, 2], [12, 3], [14, 2]]}",
        )
    )
    report = Validator(AppConfig.from_mapping(raw_config, None)).run()
    assert report.ok
    lines = format_report_lines(report)
    assert lines[-1] == "[OK] Validation passed with no errors."
    assert any("All highlighted countries are present" in line for line in lines)


def test_markup_and_frame_problems(raw_config, tmp_path):
    raw_config["paths"]["annotations"] = str(
        _write_catalog(
            tmp_path / "catalog.yaml",
            ids=["CAF"],
            labels="\n".join(
                [
                    "  - {text: '<tspan>broken', loc: [10, 2]}",
                    "  - {text: Tokyo, loc: [139.7, 35.7]}",
                ]
            ),
            arrows="  - {name: Long, path: [[10, 2], [60, 30], [120, 40]]}",
        )
    )
    report = Validator(AppConfig.from_mapping(raw_config, None)).run()
    assert any("Label 0 has malformed markup" in msg for msg in report.errors)
    assert any("Label 1" in msg and "outside the map frame" in msg for msg in report.warnings)
    assert any("Arrow Long leaves the map frame" in msg for msg in report.warnings)


def test_dataset_problems_are_warnings(raw_config, tmp_path):
    square = {
        "type": "Polygon",
        "coordinates": [[[18, 4], [22, 4], [22, 8], [18, 8], [18, 4]]],
    }
    collection = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "id": "CAF", "properties": {}, "geometry": square},
            {"type": "Feature", "id": "CAF", "properties": {}, "geometry": square},
            {"type": "Feature", "properties": {}, "geometry": square},
            {"type": "Feature", "id": "ATA", "properties": {}, "geometry": None},
        ],
    }
    data_path = tmp_path / "dupes.json"
    data_path.write_text(json.dumps(collection), encoding="utf-8")
    raw_config["data"]["source"] = str(data_path)
    raw_config["paths"]["annotations"] = str(_write_catalog(tmp_path / "c.yaml", ids=["CAF"]))
    report = Validator(AppConfig.from_mapping(raw_config, None)).run()
    assert report.ok
    joined = " ".join(report.warnings)
    assert "Duplicate feature identifiers: CAF" in joined
    assert "1 features have no identifier" in joined
    assert "Features without geometry: ATA" in joined


def test_load_failures_are_errors(raw_config, tmp_path):
    raw_config["data"]["source"] = str(tmp_path / "missing.json")
    raw_config["paths"]["annotations"] = str(tmp_path / "missing.yaml")
    report = Validator(AppConfig.from_mapping(raw_config, None)).run()
    assert len(report.errors) == 2
    assert any("annotation catalog" in msg for msg in report.errors)
    assert any("not found" in msg for msg in report.errors)
