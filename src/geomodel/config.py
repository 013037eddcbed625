"""Typed configuration loader for chart YAML files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, cast

import yaml

from .registry import DEFAULT_NAME_PROPERTY
from .selection import normalize_selected_mode


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _optional_mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    return _mapping(value, field_name)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"Expected bool for '{field_name}'")
    return value


def _path_from_cfg(value: Any, field_name: str, root_dir: Path) -> Path:
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


@dataclass(frozen=True, slots=True)
class MapSourceConfig:
    map_id: str
    path: Path
    name_property: str

    @classmethod
    def from_mapping(cls, map_id: Any, raw: Mapping[str, Any], root_dir: Path) -> MapSourceConfig:
        key = _str(map_id, "maps key")
        return cls(
            map_id=key,
            path=_path_from_cfg(raw.get("path"), f"maps.{key}.path", root_dir),
            name_property=_str(
                raw.get("name_property", DEFAULT_NAME_PROPERTY), f"maps.{key}.name_property"
            ),
        )


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    verbose: bool
    log_file: Path | None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> LoggingConfig:
        log_file_raw = raw.get("log_file")
        return cls(
            verbose=_bool(raw.get("verbose", False), "logging.verbose"),
            log_file=(
                None
                if log_file_raw is None
                else _path_from_cfg(log_file_raw, "logging.log_file", root_dir)
            ),
        )


def _validate_geo_option(raw: Mapping[str, Any]) -> dict[str, Any]:
    option = dict(raw)

    map_id = option.get("map")
    if map_id is not None and not isinstance(map_id, str):
        raise ValueError("Expected string for 'geo.map'")

    name_map = option.get("nameMap")
    if name_map is not None:
        for key, value in _mapping(name_map, "geo.nameMap").items():
            _str(key, "geo.nameMap key")
            _str(value, f"geo.nameMap.{key}")

    try:
        normalize_selected_mode(option.get("selectedMode"))
    except ValueError as exc:
        raise ValueError(f"Invalid 'geo.selectedMode': {exc}") from exc

    regions = option.get("regions")
    if regions is not None:
        if not isinstance(regions, list):
            raise ValueError("Expected list for 'geo.regions'")
        for idx, region in enumerate(regions):
            region_map = _mapping(region, f"geo.regions[{idx}]")
            _str(region_map.get("name"), f"geo.regions[{idx}].name")
    return option


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path
    maps: tuple[MapSourceConfig, ...]
    global_option: Mapping[str, Any]
    geo_option: Mapping[str, Any]
    logging: LoggingConfig | None

    def get_map(self, map_id: str) -> MapSourceConfig | None:
        for source in self.maps:
            if source.map_id == map_id:
                return source
        return None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path) -> AppConfig:
        root_dir = source_path.parent.resolve()
        maps_raw = _optional_mapping(raw.get("maps"), "maps")
        maps = tuple(
            MapSourceConfig.from_mapping(map_id, _mapping(value, f"maps.{map_id}"), root_dir)
            for map_id, value in maps_raw.items()
        )
        logging_raw = raw.get("logging")
        return cls(
            source_path=source_path.resolve(),
            maps=maps,
            global_option=dict(_optional_mapping(raw.get("globals"), "globals")),
            geo_option=_validate_geo_option(_mapping(raw.get("geo"), "geo")),
            logging=(
                None
                if logging_raw is None
                else LoggingConfig.from_mapping(_mapping(logging_raw, "logging"), root_dir)
            ),
        )


def load_config(path: str | Path) -> AppConfig:
    """Load and validate the YAML chart config into typed settings."""
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if not isinstance(raw, Mapping):
        raise ValueError("Top-level config must be a YAML mapping")
    return AppConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)
