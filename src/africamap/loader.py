"""Startup fetch of the country topology dataset."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import requests

from .config import DataConfig
from .models import FeatureCollection
from .topology import topology_to_features

_LOGGER = logging.getLogger("africamap.loader")


class DataLoadError(RuntimeError):
    """The topology dataset could not be fetched or decoded."""


def _is_remote(source: str) -> bool:
    return source.startswith(("http://", "https://"))


class DataLoader:
    """Fetch and decode the topology document once; no retries."""

    def __init__(self, cfg: DataConfig, session: requests.Session | None = None) -> None:
        self.cfg = cfg
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": cfg.user_agent})

    def load(self, source: str | None = None) -> FeatureCollection:
        chosen = source or self.cfg.source
        payload = self._fetch_json(chosen)
        if not isinstance(payload, dict):
            raise DataLoadError(f"Expected a JSON object in {chosen}")
        try:
            features = topology_to_features(
                payload,
                self.cfg.object_name,
                id_properties=self.cfg.id_properties,
            )
        except (ValueError, KeyError, TypeError, IndexError) as exc:
            raise DataLoadError(f"Failed decoding topology from {chosen}: {exc}") from exc
        _LOGGER.info("Loaded %d features from %s", len(features), chosen)
        return features

    def _fetch_json(self, source: str) -> Any:
        if _is_remote(source):
            return self._fetch_remote(source)
        return self._read_local(Path(source))

    def _fetch_remote(self, url: str) -> Any:
        _LOGGER.info("Fetching topology from %s", url)
        try:
            response = self._session.get(url, timeout=self.cfg.request_timeout_s)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            raise DataLoadError(f"Failed fetching {url}: {exc}") from exc
        except ValueError as exc:
            raise DataLoadError(f"Response from {url} is not valid JSON: {exc}") from exc

    def _read_local(self, path: Path) -> Any:
        _LOGGER.info("Reading topology from %s", path)
        if not path.exists():
            raise DataLoadError(f"Topology file not found: {path}")
        try:
            with path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except OSError as exc:
            raise DataLoadError(f"Failed reading {path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise DataLoadError(f"Topology file {path} is not valid JSON: {exc}") from exc
