"""JSON snapshot of a resolved geo component for debugging."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .geo_model import STATUS_EMPHASIS, STATUS_NORMAL, GeoComponentModel
from .util import write_json


def build_region_report(model: GeoComponentModel) -> dict[str, Any]:
    """Summarize the resolved regions as the renderer would see them."""
    rows: list[dict[str, Any]] = []
    for region in model.regions:
        name = region.get("name")
        region_model = model.get_region_model(name)
        rows.append(
            {
                "name": name,
                "selected": model.is_selected(name),
                "label_normal": _json_safe(model.get_formatted_label(name, STATUS_NORMAL)),
                "label_emphasis": _json_safe(model.get_formatted_label(name, STATUS_EMPHASIS)),
                "area_color": region_model.get("itemStyle.areaColor"),
                "color": region_model.get("itemStyle.color"),
                "has_override": len(region) > 1,
            }
        )

    bounding_rect = model.get_bounding_rect()
    return {
        "meta": {
            "map": model.get("map"),
            "zoom": model.get("zoom"),
            "center": model.get("center"),
            "selected_mode": model.selected_mode,
            "region_count": len(rows),
            "override_count": sum(1 for row in rows if row["has_override"]),
            "selected": list(model.selected_names),
            "bounding_rect": list(bounding_rect) if bounding_rect is not None else None,
        },
        "regions": rows,
    }


def write_region_report(model: GeoComponentModel, path: Path) -> Path:
    write_json(path, build_region_report(model))
    return path


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)
