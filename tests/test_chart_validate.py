"""End-to-end tests: config file to model, and config validation."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import yaml

from conftest import WORLD, feature_collection, square_feature
from geomodel.chart import build_geo_model, build_registry, load_chart
from geomodel.config import load_config
from geomodel.util import LOG_FORMAT, setup_logging
from geomodel.validate import ValidationReport, Validator, format_report_lines


def _write_chart(tmp_path: Path, geo: dict, **extra) -> Path:
    data_dir = tmp_path / "data"
    data_dir.mkdir(exist_ok=True)
    (data_dir / "world.geojson").write_text(json.dumps(WORLD), encoding="utf-8")
    payload = {"maps": {"world": {"path": "data/world.geojson"}}, "geo": geo}
    payload.update(extra)
    path = tmp_path / "chart.yaml"
    path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
    return path


class TestChart:
    def test_load_chart(self, tmp_path):
        path = _write_chart(
            tmp_path,
            {
                "map": "world",
                "selectedMode": "multiple",
                "label": {"formatter": "{a}!"},
                "regions": [{"name": "Europe", "selected": True, "itemStyle": {"areaColor": "#abc"}}],
            },
            globals={"label": {"fontSize": 11}},
        )
        model = load_chart(path)

        assert [region["name"] for region in model.regions] == ["Asia", "Europe", "Africa"]
        assert model.selected_names == ("Europe",)
        assert model.get_formatted_label("Africa") == "Africa!"
        assert model.get_region_model("Europe").get("itemStyle.areaColor") == "#abc"
        assert model.get_region_model("Asia").get("label.fontSize") == 11

    def test_build_registry_uses_name_property(self, tmp_path):
        path = _write_chart(tmp_path, {"map": "world"})
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        raw["maps"]["world"]["name_property"] = "iso"
        path.write_text(yaml.safe_dump(raw), encoding="utf-8")

        registry = build_registry(load_config(path))
        assert [region.name for region in registry.load_regions("world")] == ["AS", "EU", "AF"]

    def test_build_geo_model_with_shared_registry(self, tmp_path, registry):
        cfg = load_config(_write_chart(tmp_path, {"map": "provinces"}))
        model = build_geo_model(cfg, registry)
        assert model.registry is registry
        assert [region["name"] for region in model.regions] == ["P1", "P2"]

    def test_load_chart_configures_logging(self, tmp_path, restore_root_logging):
        path = _write_chart(
            tmp_path,
            {"map": "world"},
            logging={"verbose": True, "log_file": "logs/chart.log"},
        )
        load_chart(path)
        for handler in restore_root_logging.handlers:
            handler.flush()

        assert restore_root_logging.level == logging.DEBUG
        text = (tmp_path / "logs" / "chart.log").read_text(encoding="utf-8")
        assert "Loaded geo component for map 'world' with 3 regions" in text


def test_setup_logging_handlers(tmp_path, restore_root_logging):
    setup_logging(tmp_path / "out" / "run.log")
    root = restore_root_logging
    assert root.level == logging.INFO
    assert any(isinstance(handler, logging.FileHandler) for handler in root.handlers)
    assert all(handler.formatter._fmt == LOG_FORMAT for handler in root.handlers)


class TestValidator:
    def test_clean_config(self, tmp_path):
        cfg = load_config(_write_chart(tmp_path, {"map": "world", "regions": [{"name": "Asia"}]}))
        report = Validator(cfg).run()

        assert report.ok
        assert report.warnings == []
        assert any("Map 'world': 3 regions" in info for info in report.infos)
        assert "Region summary: resolved=3, configured=1, dropped=0" in report.infos
        assert list(format_report_lines(report))[-1] == "[OK] Validation completed with no errors."

    def test_missing_map_file(self, tmp_path):
        path = _write_chart(tmp_path, {"map": "world"})
        (tmp_path / "data" / "world.geojson").unlink()
        report = Validator(load_config(path)).run()

        assert not report.ok
        assert report.errors[0].startswith("Missing map source file for 'world'")
        assert "[OK] Validation completed with no errors." not in list(format_report_lines(report))

    def test_unreadable_map(self, tmp_path):
        path = _write_chart(tmp_path, {"map": "world"})
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        raw["maps"]["world"]["name_property"] = "missing_column"
        path.write_text(yaml.safe_dump(raw), encoding="utf-8")

        report = Validator(load_config(path)).run()
        assert any(error.startswith("Failed loading map 'world'") for error in report.errors)

    def test_unconfigured_geo_map(self, tmp_path):
        report = Validator(load_config(_write_chart(tmp_path, {"map": "mars"}))).run()
        assert report.ok
        assert any("geo.map 'mars' is not configured" in warning for warning in report.warnings)

    def test_empty_geo_map(self, tmp_path):
        report = Validator(load_config(_write_chart(tmp_path, {}))).run()
        assert any(warning.startswith("geo.map is empty") for warning in report.warnings)

    def test_duplicate_and_unknown_regions(self, tmp_path):
        geo = {
            "map": "world",
            "regions": [{"name": "Asia"}, {"name": "Asia"}, {"name": "Atlantis"}],
        }
        report = Validator(load_config(_write_chart(tmp_path, geo))).run()

        assert "Duplicate region options (the last one wins): Asia" in report.warnings
        assert (
            "Region options without geometry in map 'world' will be dropped: Atlantis"
            in report.warnings
        )
        assert "Region summary: resolved=3, configured=2, dropped=1" in report.infos

    def test_malformed_formatter(self, tmp_path):
        geo = {
            "map": "world",
            "emphasis": {"label": {"formatter": 5}},
            "regions": [{"name": "Asia", "label": {"formatter": ["{a}"]}}],
        }
        report = Validator(load_config(_write_chart(tmp_path, geo))).run()

        assert any(w.startswith("geo.emphasis.label.formatter is neither") for w in report.warnings)
        assert any(w.startswith("geo.regions[0].label.formatter is neither") for w in report.warnings)

    def test_validator_with_explicit_registry(self, tmp_path, registry):
        registry.register_map("world", feature_collection(square_feature("Only", 0, 0)))
        cfg = load_config(_write_chart(tmp_path, {"map": "world", "regions": [{"name": "Asia"}]}))
        report = Validator(cfg, registry).run()
        assert "Region summary: resolved=1, configured=1, dropped=1" in report.infos


def test_format_report_lines_order():
    report = ValidationReport()
    report.add_info("i")
    report.add_warning("w")
    report.add_error("e")
    assert list(format_report_lines(report)) == ["[INFO] i", "[WARN] w", "[ERROR] e"]
