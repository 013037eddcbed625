"""Region geometry registry and resolution of region options against it."""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from .models import Bounds, RegionGeometry, region_option_name, union_bounds


DEFAULT_NAME_PROPERTY = "name"

_LOGGER = logging.getLogger("geomodel.registry")


class ResolutionError(ValueError):
    """Raised when a registered geometry source cannot be turned into regions."""


@dataclass(frozen=True, slots=True)
class _MapSource:
    map_id: str
    source: Any
    name_property: str


class GeoRegistry:
    """Named-region geometry per map id.

    A source is registered once per map and loaded lazily on first use. Loaded
    regions are cached per ``(map_id, name_property)``; name remapping is
    applied on every read so the cache always holds the raw geometry names.
    """

    def __init__(self) -> None:
        self._sources: dict[str, _MapSource] = {}
        self._cache: dict[tuple[str, str], tuple[RegionGeometry, ...]] = {}

    def register_map(
        self,
        map_id: str,
        source: Any,
        *,
        name_property: str = DEFAULT_NAME_PROPERTY,
    ) -> None:
        """Register a geometry source for ``map_id``.

        ``source`` is a path readable by ``geopandas.read_file``, a GeoJSON
        FeatureCollection mapping (or a list of features), or a GeoDataFrame.
        """
        if not isinstance(map_id, str) or not map_id.strip():
            raise ValueError("Expected non-empty string for 'map_id'")
        if not isinstance(name_property, str) or not name_property.strip():
            raise ValueError("Expected non-empty string for 'name_property'")
        if source is None:
            raise ValueError(f"Geometry source for map '{map_id}' must not be None")
        self._sources[map_id] = _MapSource(map_id=map_id, source=source, name_property=name_property)
        self._drop_cached(map_id)
        _LOGGER.debug("Registered map '%s' (name property '%s')", map_id, name_property)

    def unregister_map(self, map_id: str) -> bool:
        removed = self._sources.pop(map_id, None)
        self._drop_cached(map_id)
        return removed is not None

    def is_registered(self, map_id: Any) -> bool:
        return isinstance(map_id, str) and map_id in self._sources

    def map_ids(self) -> list[str]:
        return sorted(self._sources)

    def clear_cache(self) -> None:
        self._cache.clear()

    def load_regions(
        self,
        map_id: Any,
        name_map: Mapping[str, str] | None = None,
        *,
        name_property: str | None = None,
    ) -> list[RegionGeometry]:
        """Return the authoritative regions of ``map_id`` in source order.

        Unregistered map ids yield an empty list. Raises ``ResolutionError``
        when the registered source cannot be read.
        """
        if not self.is_registered(map_id):
            if map_id:
                _LOGGER.warning("Map '%s' is not registered; resolving to no regions", map_id)
            return []

        source = self._sources[map_id]
        prop = name_property or source.name_property
        cache_key = (source.map_id, prop)
        regions = self._cache.get(cache_key)
        if regions is None:
            regions = self._read_source(source, prop)
            self._cache[cache_key] = regions
            _LOGGER.info("Loaded %d regions for map '%s'", len(regions), source.map_id)

        if not name_map:
            return list(regions)
        return _dissolve_same_named(region.renamed(_remap(name_map, region.name)) for region in regions)

    def get_bounding_rect(
        self,
        map_id: Any,
        name_map: Mapping[str, str] | None = None,
        *,
        name_property: str | None = None,
    ) -> Bounds | None:
        regions = self.load_regions(map_id, name_map, name_property=name_property)
        return union_bounds([region.bounds for region in regions])

    def resolve(
        self,
        map_id: Any,
        user_regions: Sequence[Any] | None,
        name_map: Mapping[str, str] | None = None,
        *,
        name_property: str | None = None,
    ) -> list[dict[str, Any]]:
        """Fill the user's region options out to one entry per known region.

        Output follows registry order. User fields are deep-copied into the
        matching entry; options naming regions the map does not have are
        dropped.
        """
        known = self.load_regions(map_id, name_map, name_property=name_property)

        overrides: dict[str, Mapping[str, Any]] = {}
        for option in user_regions or ():
            name = region_option_name(option)
            if name is not None:
                overrides[name] = option

        filled: list[dict[str, Any]] = []
        for region in known:
            entry: dict[str, Any] = {"name": region.name}
            override = overrides.pop(region.name, None)
            if override is not None:
                for key, value in override.items():
                    if key != "name":
                        entry[key] = copy.deepcopy(value)
            filled.append(entry)

        if overrides:
            _LOGGER.debug(
                "Dropped %d region option(s) without geometry in map '%s': %s",
                len(overrides),
                map_id,
                _format_name_list(sorted(overrides)),
            )
        return filled

    def _drop_cached(self, map_id: str) -> None:
        for key in [key for key in self._cache if key[0] == map_id]:
            del self._cache[key]

    def _read_source(self, source: _MapSource, name_property: str) -> tuple[RegionGeometry, ...]:
        frame = self._load_frame(source)
        if len(frame) == 0:
            return ()
        if name_property not in frame.columns:
            cols = ", ".join(str(c) for c in frame.columns)
            raise ResolutionError(
                f"Map '{source.map_id}' has no '{name_property}' property. Available columns: {cols}"
            )

        try:
            pairs = list(zip(frame[name_property].tolist(), frame.geometry.tolist()))
        except AttributeError as exc:
            raise ResolutionError(f"Map '{source.map_id}' source has no geometry column") from exc

        records: list[RegionGeometry] = []
        skipped = 0
        for raw_name, geometry in pairs:
            if _is_missing(raw_name) or geometry is None or geometry.is_empty:
                skipped += 1
                continue
            name = str(raw_name).strip()
            if not name:
                skipped += 1
                continue
            records.append(RegionGeometry.from_geometry(name, geometry))
        if skipped:
            _LOGGER.debug("Skipped %d unnamed or empty features in map '%s'", skipped, source.map_id)
        return tuple(_dissolve_same_named(records))

    def _load_frame(self, source: _MapSource) -> Any:
        gpd = self._require_geopandas()
        raw = source.source
        if isinstance(raw, gpd.GeoDataFrame):
            return raw
        if isinstance(raw, (str, Path)):
            path = Path(raw)
            if not path.exists():
                raise ResolutionError(f"Geometry source for map '{source.map_id}' not found: {path}")
            loader = gpd.read_file
        elif isinstance(raw, (Mapping, list, tuple)):
            loader = gpd.GeoDataFrame.from_features
        else:
            raise ResolutionError(
                f"Unsupported geometry source for map '{source.map_id}': {type(raw).__name__}"
            )
        try:
            return loader(raw)
        except Exception as exc:
            raise ResolutionError(f"Failed loading geometry for map '{source.map_id}': {exc}") from exc

    @staticmethod
    def _require_geopandas() -> Any:
        try:
            import geopandas as gpd
        except ImportError as exc:  # pragma: no cover
            raise RuntimeError("geopandas is required for loading map geometry") from exc
        return gpd


def _require_shapely_unary_union() -> Any:
    try:
        from shapely.ops import unary_union
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for dissolving same-named regions") from exc
    return unary_union


def _dissolve_same_named(regions: Iterable[RegionGeometry]) -> list[RegionGeometry]:
    grouped: dict[str, list[RegionGeometry]] = {}
    for region in regions:
        grouped.setdefault(region.name, []).append(region)

    out: list[RegionGeometry] = []
    for name, parts in grouped.items():
        if len(parts) == 1:
            out.append(parts[0])
            continue
        unary_union = _require_shapely_unary_union()
        out.append(RegionGeometry.from_geometry(name, unary_union([part.geometry for part in parts])))
    return out


def _remap(name_map: Mapping[str, str], name: str) -> str:
    mapped = name_map.get(name)
    if isinstance(mapped, str) and mapped:
        return mapped
    return name


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _format_name_list(values: list[str], limit: int = 12) -> str:
    if len(values) <= limit:
        return ", ".join(values)
    shown = ", ".join(values[:limit])
    return f"{shown}, ... (+{len(values) - limit} more)"
