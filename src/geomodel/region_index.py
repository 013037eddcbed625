"""Name-keyed lookup of per-region option models."""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Sequence

from .models import region_option_name
from .option_model import OptionModel


class RegionModel(OptionModel):
    """Option view over one resolved region, falling back to its geo component."""

    @property
    def name(self) -> str | None:
        return region_option_name(self.option)


class RegionIndex:
    """Immutable mapping of region name to ``RegionModel`` for one resolution pass."""

    __slots__ = ("_models",)

    def __init__(self, models: Mapping[str, RegionModel] | None = None) -> None:
        self._models: dict[str, RegionModel] = dict(models or {})

    @classmethod
    def build(cls, regions: Sequence[Any] | None, parent: OptionModel | None) -> RegionIndex:
        # Later entries win on duplicate names; unnamed entries are not indexed.
        models: dict[str, RegionModel] = {}
        for option in regions or ():
            name = region_option_name(option)
            if name is None:
                continue
            models[name] = RegionModel(option, parent)
        return cls(models)

    def get(self, name: Any) -> RegionModel | None:
        if not isinstance(name, str):
            return None
        return self._models.get(name)

    def names(self) -> list[str]:
        return list(self._models)

    def __contains__(self, name: object) -> bool:
        return name in self._models

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)
