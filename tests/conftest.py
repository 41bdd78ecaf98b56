import json

import pytest

from africamap.annotations import load_annotation_catalog
from africamap.config import AppConfig


def square_topology():
    """Quantized topology with one highlighted (CAF) and one neutral (USA) square."""
    return {
        "type": "Topology",
        "transform": {"scale": [0.5, 0.5], "translate": [-100.0, 0.0]},
        "objects": {
            "countries": {
                "type": "GeometryCollection",
                "geometries": [
                    {
                        "type": "Polygon",
                        "id": "CAF",
                        "arcs": [[0]],
                        "properties": {"NAME": "Central African Rep."},
                    },
                    {
                        "type": "Polygon",
                        "arcs": [[1]],
                        "properties": {"NAME": "United States", "ADM0_A3": "USA"},
                    },
                ],
            }
        },
        "arcs": [
            # (18, 4) -> (22, 4) -> (22, 8) -> (18, 8) -> (18, 4)
            [[236, 8], [8, 0], [0, 8], [-8, 0], [0, -8]],
            # (-100, 35) -> (-90, 35) -> (-90, 45) -> (-100, 45) -> (-100, 35)
            [[0, 70], [20, 0], [0, 20], [-20, 0], [0, -20]],
        ],
    }


@pytest.fixture
def topology():
    return square_topology()


@pytest.fixture
def topology_path(tmp_path, topology):
    path = tmp_path / "countries.json"
    path.write_text(json.dumps(topology), encoding="utf-8")
    return path


@pytest.fixture
def raw_config(tmp_path, topology_path):
    return {
        "data": {"source": str(topology_path), "object_name": "countries"},
        "paths": {
            "output_dir": str(tmp_path / "out"),
            "logs_dir": str(tmp_path / "logs"),
        },
    }


@pytest.fixture
def cfg(raw_config):
    return AppConfig.from_mapping(raw_config, None)


@pytest.fixture
def catalog():
    return load_annotation_catalog()


@pytest.fixture
def features(cfg):
    from africamap.loader import DataLoader

    return DataLoader(cfg.data).load()


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeTimer:
    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.daemon = False
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if self.started and not self.cancelled and not self.fired:
            self.fired = True
            self.callback()


class FakeTimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, callback):
        timer = FakeTimer(interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def live(self):
        return [t for t in self.timers if t.started and not (t.cancelled or t.fired)]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timers():
    return FakeTimerFactory()
