"""Annotation catalog loading: highlight set, labels and arrows."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml

from .config import default_annotations_path
from .models import AnnotationCatalog, ArrowDescriptor, LabelDefaults, LabelDescriptor


def _list_of_mappings(raw: Any, field_name: str, path: Path) -> list[Mapping[str, Any]]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"Expected list for '{field_name}' in {path}")
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValueError(f"Expected mapping at {field_name}[{idx}] in {path}")
    return raw


def _parse_highlight(raw: Any, path: Path) -> tuple[frozenset[str], str, str]:
    if not isinstance(raw, dict):
        raise ValueError(f"Expected mapping for 'highlight' in {path}")
    ids_raw = raw.get("ids")
    if not isinstance(ids_raw, list) or not ids_raw:
        raise ValueError(f"Expected non-empty list for 'highlight.ids' in {path}")
    ids: set[str] = set()
    for item in ids_raw:
        if not isinstance(item, str) or len(item.strip()) != 3:
            raise ValueError(f"Invalid highlight country code '{item}' in {path}")
        ids.add(item.strip().upper())
    css_class = raw.get("class", "central-africa")
    neutral_class = raw.get("neutral_class", "context")
    if not isinstance(css_class, str) or not isinstance(neutral_class, str):
        raise ValueError(f"Highlight classes must be strings in {path}")
    return (frozenset(ids), css_class.strip(), neutral_class.strip())


def load_annotation_catalog(path: Path | None = None) -> AnnotationCatalog:
    """Load the static highlight/label/arrow catalog from YAML."""
    path = path or default_annotations_path()
    if not path.exists():
        raise FileNotFoundError(f"Annotation catalog not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if not isinstance(raw, dict):
        raise ValueError(f"Expected mapping in {path}")

    highlight_ids, highlight_class, neutral_class = _parse_highlight(raw.get("highlight"), path)

    defaults_raw = raw.get("label_defaults") or {}
    if not isinstance(defaults_raw, dict):
        raise ValueError(f"Expected mapping for 'label_defaults' in {path}")

    labels: list[LabelDescriptor] = []
    for idx, item in enumerate(_list_of_mappings(raw.get("labels"), "labels", path)):
        try:
            labels.append(LabelDescriptor.from_mapping(item))
        except ValueError as exc:
            raise ValueError(f"Invalid label at index {idx} in {path}: {exc}") from exc

    arrows: list[ArrowDescriptor] = []
    for idx, item in enumerate(_list_of_mappings(raw.get("arrows"), "arrows", path)):
        try:
            arrows.append(ArrowDescriptor.from_mapping(item))
        except ValueError as exc:
            raise ValueError(f"Invalid arrow at index {idx} in {path}: {exc}") from exc

    return AnnotationCatalog(
        highlight_ids=highlight_ids,
        highlight_class=highlight_class,
        neutral_class=neutral_class,
        label_defaults=LabelDefaults.from_mapping(defaults_raw),
        labels=tuple(labels),
        arrows=tuple(arrows),
    )
