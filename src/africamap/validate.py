"""Validation layer for config, annotation catalog and topology dataset."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections import Counter
from dataclasses import dataclass, field
from typing import Sequence

from .annotations import load_annotation_catalog
from .config import AppConfig
from .layout import compute_layout
from .loader import DataLoader, DataLoadError
from .models import AnnotationCatalog, FeatureCollection, LonLat
from .projection import Projector, build_projector


@dataclass(slots=True)
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


class Validator:
    """Checks that the catalog and dataset fit together before rendering."""

    def __init__(self, cfg: AppConfig, loader: DataLoader | None = None) -> None:
        self.cfg = cfg
        self.loader = loader or DataLoader(cfg.data)

    def run(self) -> ValidationReport:
        report = ValidationReport()
        catalog = self._validate_catalog(report)
        features = self._validate_dataset(report)
        if catalog is None:
            return report
        self._validate_markup(report, catalog)
        self._validate_frame(report, catalog)
        if features is not None:
            self._validate_highlight_ids(report, catalog, features)
        return report

    def _validate_catalog(self, report: ValidationReport) -> AnnotationCatalog | None:
        path = self.cfg.paths.annotations
        try:
            catalog = load_annotation_catalog(path)
        except (OSError, ValueError) as exc:
            report.add_error(f"Failed parsing annotation catalog '{path}': {exc}")
            return None
        report.add_info(
            f"Loaded catalog with {len(catalog.highlight_ids)} highlighted countries, "
            f"{len(catalog.labels)} labels and {len(catalog.arrows)} arrows from {path}"
        )
        return catalog

    def _validate_dataset(self, report: ValidationReport) -> FeatureCollection | None:
        try:
            features = self.loader.load()
        except DataLoadError as exc:
            report.add_error(str(exc))
            return None
        report.add_info(f"Loaded {len(features)} features from {self.cfg.data.source}")

        counts = Counter(features.ids)
        missing_ids = counts.pop("", 0)
        if missing_ids:
            report.add_warning(f"{missing_ids} features have no identifier and cannot be highlighted")
        duplicates = sorted(code for code, count in counts.items() if count > 1)
        if duplicates:
            report.add_warning(f"Duplicate feature identifiers: {_format_code_list(duplicates)}")
        empty = [feature.id or "?" for feature in features if feature.geometry is None]
        if empty:
            report.add_warning(f"Features without geometry: {_format_code_list(sorted(empty))}")
        return features

    def _validate_highlight_ids(
        self,
        report: ValidationReport,
        catalog: AnnotationCatalog,
        features: FeatureCollection,
    ) -> None:
        present = set(features.ids)
        missing = sorted(catalog.highlight_ids - present)
        if missing:
            report.add_error(
                f"Highlighted countries missing from dataset: {_format_code_list(missing)}"
            )
        else:
            report.add_info("All highlighted countries are present in the dataset.")

    def _validate_markup(self, report: ValidationReport, catalog: AnnotationCatalog) -> None:
        for idx, label in enumerate(catalog.labels):
            try:
                ET.fromstring(f"<text>{label.text}</text>")
            except ET.ParseError as exc:
                report.add_error(f"Label {idx} has malformed markup ({exc}): {label.text!r}")

    def _validate_frame(self, report: ValidationReport, catalog: AnnotationCatalog) -> None:
        layout = compute_layout(self.cfg.layout.reference_width, self.cfg.layout)
        projector = build_projector(layout)
        frame = (layout.width, layout.height)
        for idx, label in enumerate(catalog.labels):
            if not _inside_frame(projector, [label.loc], frame):
                report.add_warning(f"Label {idx} anchor {label.loc} falls outside the map frame")
        for idx, arrow in enumerate(catalog.arrows):
            if not _inside_frame(projector, arrow.path, frame):
                label = arrow.name or f"#{idx}"
                report.add_warning(f"Arrow {label} leaves the map frame")


def _inside_frame(
    projector: Projector,
    points: Sequence[LonLat],
    frame: tuple[float, float],
) -> bool:
    width, height = frame
    for x, y in projector.project_many(points):
        if x < 0 or y < 0 or x > width or y > height:
            return False
    return True


def format_report_lines(report: ValidationReport) -> Sequence[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in report.infos)
    lines.extend(f"[WARN] {msg}" for msg in report.warnings)
    lines.extend(f"[ERROR] {msg}" for msg in report.errors)
    if report.ok:
        lines.append("[OK] Validation passed with no errors.")
    return lines


def _format_code_list(values: list[str], limit: int = 12) -> str:
    if len(values) <= limit:
        return ", ".join(values)
    shown = ", ".join(values[:limit])
    return f"{shown}, ... (+{len(values) - limit} more)"
