"""Select/unselect bookkeeping over a list of named targets."""

from __future__ import annotations

from typing import Any, Iterable, Mapping


SELECTED_MODE_NONE = "none"
SELECTED_MODE_SINGLE = "single"
SELECTED_MODE_MULTIPLE = "multiple"

_MODES = {SELECTED_MODE_NONE, SELECTED_MODE_SINGLE, SELECTED_MODE_MULTIPLE}


def normalize_selected_mode(value: Any) -> str:
    """Map a ``selectedMode`` option value onto one of the three modes."""
    if value is None or value is False:
        return SELECTED_MODE_NONE
    if value is True:
        return SELECTED_MODE_MULTIPLE
    if isinstance(value, str):
        mode = value.strip().casefold()
        if mode in _MODES:
            return mode
    raise ValueError(
        f"selectedMode must be one of: {', '.join(sorted(_MODES))}, true or false (got {value!r})"
    )


class SelectionState:
    """Selected-name set kept beside the targets, never written into them.

    Targets are addressed by name or by position in the last target list.
    Unknown names and out-of-range positions are ignored.
    """

    def __init__(self, mode: Any = None) -> None:
        self.mode = normalize_selected_mode(mode)
        self._targets: tuple[str, ...] = ()
        self._known: set[str] = set()
        self._selected: set[str] = set()

    def update_targets(self, targets: Iterable[Mapping[str, Any]], mode: Any = None) -> None:
        """Replace the target list and carry selection over to it.

        Names no longer present are dropped. A target whose option carries
        ``selected`` takes that value; other surviving names keep their state.
        """
        self.mode = normalize_selected_mode(mode)
        names: list[str] = []
        seen: set[str] = set()
        declared: dict[str, bool] = {}
        for target in targets:
            name = target.get("name") if isinstance(target, Mapping) else None
            if not isinstance(name, str) or not name:
                continue
            if name not in seen:
                seen.add(name)
                names.append(name)
            if target.get("selected") is not None:
                declared[name] = bool(target["selected"])

        selected = {name for name in self._selected if name in seen}
        for name, flag in declared.items():
            if flag:
                selected.add(name)
            else:
                selected.discard(name)

        self._targets = tuple(names)
        self._known = seen
        if self.mode == SELECTED_MODE_NONE:
            self._selected = set()
        elif self.mode == SELECTED_MODE_SINGLE and len(selected) > 1:
            last = [name for name in names if name in selected][-1]
            self._selected = {last}
        else:
            self._selected = selected

    @property
    def targets(self) -> tuple[str, ...]:
        return self._targets

    @property
    def selected_names(self) -> tuple[str, ...]:
        return tuple(name for name in self._targets if name in self._selected)

    def select(self, name: str | None = None, *, index: int | None = None) -> None:
        target = self._target(name, index)
        if target is None or self.mode == SELECTED_MODE_NONE:
            return
        if self.mode == SELECTED_MODE_SINGLE:
            self._selected.clear()
        self._selected.add(target)

    def unselect(self, name: str | None = None, *, index: int | None = None) -> None:
        target = self._target(name, index)
        if target is not None:
            self._selected.discard(target)

    def toggle_selected(self, name: str | None = None, *, index: int | None = None) -> bool:
        target = self._target(name, index)
        if target is None:
            return False
        if target in self._selected:
            self.unselect(target)
        else:
            self.select(target)
        return target in self._selected

    def is_selected(self, name: str | None = None, *, index: int | None = None) -> bool:
        target = self._target(name, index)
        return target is not None and target in self._selected

    def _target(self, name: str | None, index: int | None) -> str | None:
        if index is not None:
            if 0 <= index < len(self._targets):
                return self._targets[index]
            return None
        if isinstance(name, str) and name in self._known:
            return name
        return None
