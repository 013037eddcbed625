"""Geo component model: option tree, region lookup, labels and selection."""

from __future__ import annotations

import copy
import logging
from typing import Any, Mapping, Sequence

from .models import Bounds
from .option_model import OptionModel, default_emphasis, merge_defaults
from .region_index import RegionIndex, RegionModel
from .registry import GeoRegistry
from .selection import SelectionState, normalize_selected_mode


STATUS_NORMAL = "normal"
STATUS_EMPHASIS = "emphasis"

LABEL_FORMATTER_NORMAL = ("label", "formatter")
LABEL_FORMATTER_EMPHASIS = ("emphasis", "label", "formatter")

DEFAULT_OPTION: dict[str, Any] = {
    "zlevel": 0,
    "z": 0,
    "show": True,
    "left": "center",
    "top": "center",
    # Width / height scaling of the map aspect; None keeps the geometry aspect.
    "aspectScale": None,
    "silent": False,
    "map": "",
    # [[left, top], [right, bottom]] in map coordinates; overrides center and zoom.
    "boundingCoords": None,
    "center": None,
    "zoom": 1,
    "scaleLimit": None,
    "label": {
        "show": False,
        "color": "#000",
    },
    "itemStyle": {
        "borderWidth": 0.5,
        "borderColor": "#444",
        "color": "#eee",
    },
    "emphasis": {
        "label": {
            "show": True,
            "color": "rgb(100,0,0)",
        },
        "itemStyle": {
            "color": "rgba(255,215,0,0.8)",
        },
    },
    "regions": [],
}

_LOGGER = logging.getLogger("geomodel.geo_model")


def format_label(formatter: Any, name: str | None, status: str) -> str | None:
    """Apply a label formatter to a region name.

    Callables receive ``{"name": ...}`` plus ``"status"`` for non-normal
    states. Strings have their first ``{a}`` replaced by the name. Any other
    value yields None.
    """
    params: dict[str, Any] = {"name": name}
    if callable(formatter):
        if status != STATUS_NORMAL:
            params["status"] = status
        return formatter(params)
    if isinstance(formatter, str):
        return formatter.replace("{a}", "" if name is None else str(name), 1)
    return None


class GeoComponentModel(OptionModel):
    """Option model of one geo component.

    Every option update resolves ``regions`` against the registry, rebuilds
    the region index and refreshes the selected set. Queries never raise for
    unknown region names.
    """

    def __init__(
        self,
        option: Mapping[str, Any] | None = None,
        *,
        registry: GeoRegistry,
        parent: OptionModel | None = None,
    ) -> None:
        super().__init__(self._init_option(option), parent)
        self.registry = registry
        self._region_index = RegionIndex()
        self._region_parent = OptionModel(self.option, parent)
        self._selection = SelectionState()
        self.option_updated()

    @staticmethod
    def _init_option(option: Mapping[str, Any] | None) -> dict[str, Any]:
        user = copy.deepcopy(dict(option or {}))
        default_emphasis(user, "label", ["show"])
        return merge_defaults(user, DEFAULT_OPTION)

    def set_option(self, option: Mapping[str, Any] | None) -> None:
        """Replace the whole option. On failure the previous state is kept."""
        previous = self.option
        self.option = self._init_option(option)
        try:
            self.option_updated()
        except ValueError:
            self.option = previous
            raise

    def option_updated(self) -> None:
        option = self.option
        mode = normalize_selected_mode(option.get("selectedMode"))
        regions = self.registry.resolve(
            option.get("map"),
            option.get("regions"),
            option.get("nameMap"),
            name_property=option.get("nameProperty"),
        )
        # Region models of this pass read through a view of this pass's option tree.
        region_parent = OptionModel(option, self.parent)
        index = RegionIndex.build(regions, region_parent)

        option["regions"] = regions
        self._region_index = index
        self._region_parent = region_parent
        self._selection.update_targets(regions, mode)
        _LOGGER.debug(
            "Geo option updated: map=%r regions=%d selected=%d",
            option.get("map"),
            len(regions),
            len(self._selection.selected_names),
        )

    @property
    def regions(self) -> list[dict[str, Any]]:
        return self.option["regions"]

    @property
    def region_index(self) -> RegionIndex:
        return self._region_index

    def get_region_model(self, name: str | None) -> RegionModel:
        """Model of region ``name``; unknown names get an empty model over this component."""
        model = self._region_index.get(name)
        if model is None:
            return RegionModel(None, self._region_parent)
        return model

    def get_formatted_label(self, name: str | None, status: str = STATUS_NORMAL) -> str | None:
        region_model = self.get_region_model(name)
        if status == STATUS_NORMAL:
            formatter = region_model.get(LABEL_FORMATTER_NORMAL)
        else:
            formatter = region_model.get(LABEL_FORMATTER_EMPHASIS)
        return format_label(formatter, name, status)

    def get_bounding_rect(self) -> Bounds | None:
        option = self.option
        return self.registry.get_bounding_rect(
            option.get("map"),
            option.get("nameMap"),
            name_property=option.get("nameProperty"),
        )

    def set_zoom(self, zoom: float) -> None:
        self.option["zoom"] = zoom

    def set_center(self, center: Sequence[float] | None) -> None:
        self.option["center"] = center

    @property
    def selected_mode(self) -> str:
        return self._selection.mode

    @property
    def selected_names(self) -> tuple[str, ...]:
        return self._selection.selected_names

    def select(self, name: str | None = None, *, index: int | None = None) -> None:
        self._selection.select(name, index=index)

    def unselect(self, name: str | None = None, *, index: int | None = None) -> None:
        self._selection.unselect(name, index=index)

    def toggle_selected(self, name: str | None = None, *, index: int | None = None) -> bool:
        return self._selection.toggle_selected(name, index=index)

    def is_selected(self, name: str | None = None, *, index: int | None = None) -> bool:
        return self._selection.is_selected(name, index=index)
