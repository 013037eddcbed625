"""Tests for the selected-name bookkeeping."""

from __future__ import annotations

import pytest

from geomodel.selection import SelectionState, normalize_selected_mode


def _targets(*names: str, **selected: bool) -> list[dict]:
    out = []
    for name in names:
        target = {"name": name}
        if name in selected:
            target["selected"] = selected[name]
        out.append(target)
    return out


class TestNormalizeSelectedMode:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "none"),
            (False, "none"),
            (True, "multiple"),
            ("single", "single"),
            ("Multiple", "multiple"),
            (" none ", "none"),
        ],
    )
    def test_known_values(self, value, expected):
        assert normalize_selected_mode(value) == expected

    def test_unknown_value(self):
        with pytest.raises(ValueError, match="selectedMode"):
            normalize_selected_mode("sometimes")


class TestMultipleMode:
    def setup_method(self):
        self.state = SelectionState()
        self.state.update_targets(_targets("A", "B", "C"), "multiple")

    def test_select_and_query(self):
        self.state.select("A")
        self.state.select("C")
        assert self.state.is_selected("A")
        assert not self.state.is_selected("B")
        assert self.state.selected_names == ("A", "C")

    def test_unselect(self):
        self.state.select("A")
        self.state.unselect("A")
        assert not self.state.is_selected("A")

    def test_toggle(self):
        assert self.state.toggle_selected("B") is True
        assert self.state.toggle_selected("B") is False

    def test_unknown_names_are_ignored(self):
        self.state.select("Z")
        assert self.state.is_selected("Z") is False
        assert self.state.toggle_selected("Z") is False
        self.state.unselect("Z")
        assert self.state.selected_names == ()

    def test_index_addressing(self):
        self.state.select(index=1)
        assert self.state.is_selected("B")
        assert self.state.is_selected(index=1)
        assert self.state.is_selected(index=7) is False


class TestSingleMode:
    def test_select_replaces_previous(self):
        state = SelectionState()
        state.update_targets(_targets("A", "B"), "single")
        state.select("A")
        state.select("B")
        assert state.selected_names == ("B",)

    def test_declared_selection_keeps_last(self):
        state = SelectionState()
        state.update_targets(_targets("A", "B", "C", A=True, C=True), "single")
        assert state.selected_names == ("C",)


class TestNoneMode:
    def test_select_is_a_no_op(self):
        state = SelectionState()
        state.update_targets(_targets("A", B=True), None)
        state.select("A")
        assert state.toggle_selected("A") is False
        assert state.selected_names == ()


class TestUpdateTargets:
    def test_dropped_names_lose_selection(self):
        state = SelectionState()
        state.update_targets(_targets("A", "B"), "multiple")
        state.select("A")
        state.update_targets(_targets("B", "C"), "multiple")
        assert state.is_selected("A") is False
        assert state.selected_names == ()

    def test_surviving_names_keep_selection(self):
        state = SelectionState()
        state.update_targets(_targets("A", "B"), "multiple")
        state.select("B")
        state.update_targets(_targets("B", "C"), "multiple")
        assert state.selected_names == ("B",)

    def test_declared_flags_win(self):
        state = SelectionState()
        state.update_targets(_targets("A", "B"), "multiple")
        state.select("A")
        state.update_targets(_targets("A", "B", A=False, B=True), "multiple")
        assert state.selected_names == ("B",)

    def test_new_targets_start_unselected(self):
        state = SelectionState()
        state.update_targets(_targets("A"), "multiple")
        state.update_targets(_targets("A", "B"), "multiple")
        assert state.is_selected("B") is False

    def test_targets_are_not_mutated(self):
        targets = _targets("A", "B")
        state = SelectionState()
        state.update_targets(targets, "multiple")
        state.select("A")
        assert targets == [{"name": "A"}, {"name": "B"}]

    def test_invalid_mode_leaves_state_untouched(self):
        state = SelectionState()
        state.update_targets(_targets("A"), "multiple")
        state.select("A")
        with pytest.raises(ValueError):
            state.update_targets(_targets("B"), "often")
        assert state.selected_names == ("A",)
        assert state.mode == "multiple"
