"""Validation layer for chart configs and their map sources."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from .chart import build_registry
from .config import AppConfig
from .geo_model import LABEL_FORMATTER_EMPHASIS, LABEL_FORMATTER_NORMAL
from .models import RegionGeometry, region_option_name
from .option_model import lookup
from .registry import GeoRegistry, ResolutionError, _format_name_list


@dataclass(slots=True)
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


class Validator:
    """Checks a chart config against its map sources without building the model."""

    def __init__(self, cfg: AppConfig, registry: GeoRegistry | None = None) -> None:
        self.cfg = cfg
        self.registry = registry if registry is not None else build_registry(cfg)

    def run(self) -> ValidationReport:
        report = ValidationReport()
        loaded = self._validate_map_sources(report)
        self._validate_geo_map(report)
        self._validate_regions(report, loaded)
        self._validate_formatters(report)
        return report

    def _validate_map_sources(self, report: ValidationReport) -> dict[str, list[RegionGeometry]]:
        loaded: dict[str, list[RegionGeometry]] = {}
        for source in self.cfg.maps:
            if not source.path.exists():
                report.add_error(f"Missing map source file for '{source.map_id}': {source.path}")
                continue
            try:
                regions = self.registry.load_regions(source.map_id)
            except ResolutionError as exc:
                report.add_error(f"Failed loading map '{source.map_id}': {exc}")
                continue
            loaded[source.map_id] = regions
            if regions:
                report.add_info(f"Map '{source.map_id}': {len(regions)} regions from {source.path}")
            else:
                report.add_warning(f"Map '{source.map_id}' has no named regions: {source.path}")
        return loaded

    def _validate_geo_map(self, report: ValidationReport) -> None:
        map_id = self.cfg.geo_option.get("map")
        if not map_id:
            report.add_warning("geo.map is empty; no regions will be resolved.")
        elif self.cfg.get_map(map_id) is None:
            report.add_warning(f"geo.map '{map_id}' is not configured under maps; no regions will be resolved.")

    def _validate_regions(
        self,
        report: ValidationReport,
        loaded: Mapping[str, list[RegionGeometry]],
    ) -> None:
        option = self.cfg.geo_option
        names = [region_option_name(region) for region in option.get("regions") or []]
        names = [name for name in names if name is not None]

        duplicates = sorted(name for name, count in Counter(names).items() if count > 1)
        if duplicates:
            report.add_warning(
                "Duplicate region options (the last one wins): "
                f"{_format_name_list(duplicates)}"
            )

        map_id = option.get("map")
        if map_id not in loaded:
            return
        try:
            known = self.registry.load_regions(
                map_id,
                option.get("nameMap"),
                name_property=option.get("nameProperty"),
            )
        except ResolutionError as exc:
            report.add_error(f"Failed resolving regions of '{map_id}': {exc}")
            return

        known_names = {region.name for region in known}
        unknown = sorted(set(names) - known_names)
        if unknown:
            report.add_warning(
                f"Region options without geometry in map '{map_id}' will be dropped: "
                f"{_format_name_list(unknown)}"
            )
        report.add_info(
            f"Region summary: resolved={len(known_names)}, "
            f"configured={len(set(names))}, dropped={len(unknown)}"
        )

    def _validate_formatters(self, report: ValidationReport) -> None:
        option = self.cfg.geo_option
        scopes: list[tuple[str, Any]] = [("geo", option)]
        for idx, region in enumerate(option.get("regions") or []):
            scopes.append((f"geo.regions[{idx}]", region))

        for scope, fragment in scopes:
            for path in (LABEL_FORMATTER_NORMAL, LABEL_FORMATTER_EMPHASIS):
                formatter = lookup(fragment, path)
                if formatter is None or isinstance(formatter, str) or callable(formatter):
                    continue
                report.add_warning(
                    f"{scope}.{'.'.join(path)} is neither a string nor a callable "
                    f"({type(formatter).__name__}); the label falls back to default rendering."
                )


def format_report_lines(report: ValidationReport) -> Iterable[str]:
    if report.infos:
        for info in report.infos:
            yield f"[INFO] {info}"
    if report.warnings:
        for warning in report.warnings:
            yield f"[WARN] {warning}"
    if report.errors:
        for error in report.errors:
            yield f"[ERROR] {error}"
    if report.ok:
        yield "[OK] Validation completed with no errors."
