"""Option trees with ordered fallback to parent models."""

from __future__ import annotations

import copy
from typing import Any, Mapping, Sequence


def parse_path(path: str | Sequence[str] | None) -> tuple[str, ...]:
    """Split a dotted option path (``"emphasis.label.formatter"``) into keys."""
    if path is None:
        return ()
    if isinstance(path, str):
        return tuple(part for part in path.split(".") if part)
    return tuple(str(part) for part in path)


def lookup(option: Any, keys: Sequence[str]) -> Any:
    value = option
    for key in keys:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
        if value is None:
            return None
    return value


def merge_defaults(option: Mapping[str, Any] | None, defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge ``defaults`` under ``option`` into a new dict.

    Values set in ``option`` win, including explicit ``None``. Nested mappings
    merge key by key; lists and scalars replace the default wholesale.
    """
    merged = copy.deepcopy(dict(defaults))
    for key, value in (option or {}).items():
        base = merged.get(key)
        if isinstance(value, Mapping) and isinstance(base, Mapping):
            merged[key] = merge_defaults(value, base)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def default_emphasis(option: dict[str, Any], key: str, sub_keys: Sequence[str]) -> None:
    """Fill legacy ``option[key].emphasis[sub]`` from ``option[key].normal[sub]`` where unset.

    Only options written in the legacy ``{normal, emphasis}`` layout are
    touched. A plain ``option[key][sub]`` never leaks into the emphasis state.
    """
    block = option.get(key)
    if not isinstance(block, dict):
        return
    if not block.get("normal") and not block.get("emphasis"):
        return
    emphasis = block.get("emphasis")
    if not isinstance(emphasis, dict):
        emphasis = block["emphasis"] = {}
    normal = block.get("normal")
    if not isinstance(normal, Mapping):
        return
    for sub in sub_keys:
        if emphasis.get(sub) is None and normal.get(sub) is not None:
            emphasis[sub] = normal[sub]


class OptionModel:
    """Read view over one option tree.

    Reads consult an explicit ordered list of sources, first match wins:
    the model's own option, then every source of its parent chain. ``None``
    counts as unset at any depth of the path.
    """

    def __init__(
        self,
        option: Mapping[str, Any] | None = None,
        parent: OptionModel | None = None,
    ) -> None:
        self.option = option
        self.parent = parent

    def option_sources(self, ignore_parent: bool = False) -> tuple[Mapping[str, Any], ...]:
        sources: list[Mapping[str, Any]] = []
        if isinstance(self.option, Mapping):
            sources.append(self.option)
        if not ignore_parent and self.parent is not None:
            sources.extend(self.parent.option_sources())
        return tuple(sources)

    def get(self, path: str | Sequence[str], ignore_parent: bool = False) -> Any:
        keys = parse_path(path)
        if not keys:
            return self.option
        for source in self.option_sources(ignore_parent):
            value = lookup(source, keys)
            if value is not None:
                return value
        return None

    def get_model(self, path: str | Sequence[str]) -> OptionModel:
        """Sub-model at ``path`` whose parent is the parent's sub-model at the same path."""
        keys = parse_path(path)
        if not keys:
            return self
        sub = lookup(self.option, keys)
        parent = self.parent.get_model(keys) if self.parent is not None else None
        return OptionModel(sub if isinstance(sub, Mapping) else None, parent)

    def is_empty(self) -> bool:
        return not self.option

    def __repr__(self) -> str:
        return f"{type(self).__name__}(option={self.option!r})"
