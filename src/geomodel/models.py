"""Domain records shared across the geo component modules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


Bounds = tuple[float, float, float, float]


def _require_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def region_option_name(option: Any) -> str | None:
    """Return the join name of a region option fragment, or None if it has none."""
    if not isinstance(option, Mapping):
        return None
    name = option.get("name")
    if not isinstance(name, str) or not name:
        return None
    return name


@dataclass(frozen=True, slots=True)
class RegionGeometry:
    """One named region known to the geometry registry for a map."""

    name: str
    geometry: Any
    bounds: Bounds
    center: tuple[float, float]

    @classmethod
    def from_geometry(cls, name: Any, geometry: Any) -> RegionGeometry:
        region_name = _require_str(name, "region.name")
        if geometry is None or geometry.is_empty:
            raise ValueError(f"Region '{region_name}' has no geometry")
        minx, miny, maxx, maxy = (float(v) for v in geometry.bounds)
        point = geometry.representative_point()
        return cls(
            name=region_name,
            geometry=geometry,
            bounds=(minx, miny, maxx, maxy),
            center=(float(point.x), float(point.y)),
        )

    def renamed(self, name: str) -> RegionGeometry:
        if name == self.name:
            return self
        return RegionGeometry(name=name, geometry=self.geometry, bounds=self.bounds, center=self.center)


def union_bounds(bounds: list[Bounds]) -> Bounds | None:
    if not bounds:
        return None
    return (
        min(b[0] for b in bounds),
        min(b[1] for b in bounds),
        max(b[2] for b in bounds),
        max(b[3] for b in bounds),
    )
