"""Wiring from a chart config file to a ready geo component model."""

from __future__ import annotations

import logging
from pathlib import Path

from .config import AppConfig, load_config
from .geo_model import GeoComponentModel
from .option_model import OptionModel
from .registry import GeoRegistry
from .util import setup_logging

LOGGER = logging.getLogger("geomodel.chart")


def build_registry(cfg: AppConfig) -> GeoRegistry:
    registry = GeoRegistry()
    for source in cfg.maps:
        registry.register_map(source.map_id, source.path, name_property=source.name_property)
    return registry


def build_geo_model(cfg: AppConfig, registry: GeoRegistry | None = None) -> GeoComponentModel:
    """Build the geo component with the config's globals as its fallback parent."""
    if registry is None:
        registry = build_registry(cfg)
    global_model = OptionModel(cfg.global_option)
    return GeoComponentModel(cfg.geo_option, registry=registry, parent=global_model)


def load_chart(path: str | Path) -> GeoComponentModel:
    cfg = load_config(path)
    if cfg.logging is not None:
        setup_logging(cfg.logging.log_file, verbose=cfg.logging.verbose)
    model = build_geo_model(cfg)
    LOGGER.info(
        "Loaded geo component for map '%s' with %d regions",
        model.get("map"),
        len(model.regions),
    )
    return model
