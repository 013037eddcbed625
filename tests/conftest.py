"""Shared test fixtures: small in-memory maps and a populated registry."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from geomodel.registry import GeoRegistry


def square_feature(name: str | None, x: float, y: float, size: float = 1.0, **props) -> dict:
    properties = dict(props)
    if name is not None:
        properties["name"] = name
    return {
        "type": "Feature",
        "properties": properties,
        "geometry": {
            "type": "Polygon",
            "coordinates": [
                [[x, y], [x + size, y], [x + size, y + size], [x, y + size], [x, y]],
            ],
        },
    }


def feature_collection(*features: dict) -> dict:
    return {"type": "FeatureCollection", "features": list(features)}


# Three continents laid out left to right.
WORLD = feature_collection(
    square_feature("Asia", 0, 0, iso="AS"),
    square_feature("Europe", 2, 0, iso="EU"),
    square_feature("Africa", 4, 0, iso="AF"),
)

# Raw province codes, two features for "P1" (an island and the mainland).
PROVINCES = feature_collection(
    square_feature("P1", 0, 0),
    square_feature("P2", 2, 0),
    square_feature("P1", 10, 10),
)


@pytest.fixture
def world_features() -> dict:
    return json.loads(json.dumps(WORLD))


@pytest.fixture
def registry() -> GeoRegistry:
    reg = GeoRegistry()
    reg.register_map("world", json.loads(json.dumps(WORLD)))
    reg.register_map("provinces", json.loads(json.dumps(PROVINCES)))
    return reg


@pytest.fixture
def world_geojson_file(tmp_path: Path) -> Path:
    path = tmp_path / "world.geojson"
    path.write_text(json.dumps(WORLD), encoding="utf-8")
    return path


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
