"""Startup wiring: load data, build state, start the responsive controller."""

from __future__ import annotations

import logging

from .annotations import load_annotation_catalog
from .config import AppConfig
from .controller import HostNotifier, ResponsiveController
from .loader import DataLoader
from .models import AppState, FeatureCollection
from .surface import MapContainer

_LOGGER = logging.getLogger("africamap.app")


def build_state(cfg: AppConfig, features: FeatureCollection, width: float) -> AppState:
    catalog = load_annotation_catalog(cfg.paths.annotations)
    state = AppState(features=features, catalog=catalog, config=cfg, width=width)
    return state.with_viewport(width)


def bootstrap(
    cfg: AppConfig,
    container: MapContainer,
    notifier: HostNotifier | None = None,
    *,
    loader: DataLoader | None = None,
) -> ResponsiveController:
    """Load the dataset, then render once and arm the resize subscription.

    Raises `DataLoadError` when the dataset cannot be loaded; nothing is
    rendered in that case.
    """
    loader = loader or DataLoader(cfg.data)
    features = loader.load()
    state = build_state(cfg, features, container.measure_width())
    _LOGGER.info(
        "Starting map in %s with %d features and %d labels",
        container.selector,
        len(features),
        len(state.catalog.labels),
    )
    return ResponsiveController(state, container, notifier)
