from __future__ import annotations

from dataclasses import dataclass, field, fields
import importlib.resources
from pathlib import Path
from typing import Any, Mapping

import yaml

from .inputs import ReserveComponentInput, ReserveStudyInput, StudyConfigError, StudyPolicy
from .io import load_components_csv

POLICY_FIELDS = tuple(f.name for f in fields(StudyPolicy))


def _check_policy_keys(raw: Mapping[str, Any], where: str) -> None:
    unknown = sorted(set(raw) - set(POLICY_FIELDS))
    if unknown:
        raise StudyConfigError(f"Unknown setting(s) in {where}: {', '.join(unknown)}")


def default_policy_mapping() -> dict[str, Any]:
    text = importlib.resources.files("reservestudy.resources").joinpath("default_policy.yaml").read_text(encoding="utf-8")
    raw = yaml.safe_load(text) or {}
    _check_policy_keys(raw, "default policy")
    return dict(raw)


@dataclass(frozen=True)
class StudyConfig:
    title: str
    settings: dict[str, Any]
    components: list[ReserveComponentInput]
    scenarios: dict[str, dict[str, Any]] = field(default_factory=lambda: {"Base": {}})
    defaults: dict[str, Any] = field(default_factory=default_policy_mapping)

    @staticmethod
    def from_mapping(raw: Mapping[str, Any], base_dir: str | Path | None = None) -> "StudyConfig":
        study_raw = dict(raw.get("study", {}) or {})
        title = str(study_raw.pop("name", "") or "Reserve Study")
        _check_policy_keys(study_raw, "study")

        components = [ReserveComponentInput.from_mapping(c) for c in (raw.get("components") or [])]
        csv_path = raw.get("components_csv")
        if csv_path:
            csv_path = Path(csv_path)
            if base_dir is not None and not csv_path.is_absolute():
                csv_path = Path(base_dir) / csv_path
            components.extend(load_components_csv(csv_path))

        scenarios_raw: Mapping[str, Any] = raw.get("scenarios", {}) or {}
        scenarios = {str(name): dict(v or {}) for name, v in scenarios_raw.items()}
        for name, overrides in scenarios.items():
            _check_policy_keys(overrides, f"scenario '{name}'")
        if not scenarios:
            scenarios = {"Base": {}}

        return StudyConfig(title=title, settings=study_raw, components=components, scenarios=scenarios)

    @staticmethod
    def from_yaml(path: str | Path) -> "StudyConfig":
        path = Path(path)
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise StudyConfigError(f"Could not parse {path}: {e}") from e
        return StudyConfig.from_mapping(raw, base_dir=path.parent)

    def resolve_scenario(self, name: str) -> tuple[StudyPolicy, dict[str, str]]:
        """Effective policy for a scenario and where each setting came from.

        Precedence: scenario override, then study setting, then packaged default.
        """
        if name not in self.scenarios:
            raise StudyConfigError(f"Unknown scenario '{name}'. Known: {list(self.scenarios)}")
        overrides = self.scenarios[name]

        values: dict[str, Any] = {}
        sources: dict[str, str] = {}
        for key in POLICY_FIELDS:
            if key in overrides:
                values[key], sources[key] = overrides[key], "scenario"
            elif key in self.settings:
                values[key], sources[key] = self.settings[key], "study"
            elif key in self.defaults:
                values[key], sources[key] = self.defaults[key], "default"
        try:
            policy = StudyPolicy(**values)
        except (TypeError, ValueError, ArithmeticError) as e:
            raise StudyConfigError(f"Invalid settings for scenario '{name}': {e}") from e
        if policy.start_year is None:
            raise StudyConfigError(f"Scenario '{name}': start_year is required.")
        return policy, sources

    def study_input(self, name: str) -> ReserveStudyInput:
        policy, _ = self.resolve_scenario(name)
        return ReserveStudyInput(policy=policy, components=tuple(self.components))
