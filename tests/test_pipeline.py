"""End-to-end: synthetic study -> agents -> study pack, and the CLI around it."""

from __future__ import annotations

import json
from pathlib import Path

from openpyxl import load_workbook
from typer.testing import CliRunner

from reservestudy.agents import AnalystAgent, PlannerAgent, ReporterAgent
from reservestudy.cli import app
from reservestudy.config import StudyConfig
from reservestudy.synth import SynthSpec, generate_components, generate_synthetic_study


def test_synthetic_components_are_valid_and_reproducible() -> None:
    spec = SynthSpec(start_year=2025, components=15, seed=3)
    components = generate_components(spec)
    assert len(components) == 15
    assert all(c.validate() == [] for c in components)
    assert len({c.name.lower() for c in components}) == 15
    assert components == generate_components(spec)


def test_end_to_end_all_scenarios(tmp_path: Path) -> None:
    study_path = generate_synthetic_study(tmp_path / "data", SynthSpec(start_year=2025, components=10, seed=7))
    out_dir = tmp_path / "out"

    cfg = StudyConfig.from_yaml(study_path)
    plan = PlannerAgent().plan(cfg)
    assert plan.scenarios == ["Base", "Escalating", "NoDeficit"]
    results = AnalystAgent().run(cfg, plan)
    ReporterAgent().package(out_dir=out_dir, results=results)

    assert all(r.is_success for r in results)
    assert (out_dir / "study_pack.xlsx").exists()
    assert (out_dir / "narrative.md").exists()
    assert (out_dir / "assumptions.json").exists()
    for name in plan.scenarios:
        assert (out_dir / "charts" / f"balance_{name}.png").exists()
        assert (out_dir / name / "narrative.md").exists()

    wb = load_workbook(out_dir / "study_pack.xlsx")
    assert wb.sheetnames[0] == "Summary"
    assert "NoDeficit - Cash Flow" in wb.sheetnames
    assert "Base - Allocation" in wb.sheetnames

    by_name = {r.scenario: r for r in results}
    assert all(y.ending_balance >= 0 for y in by_name["NoDeficit"].years)
    assert by_name["Escalating"].total_contributions > by_name["Base"].total_contributions

    assumptions = json.loads((out_dir / "NoDeficit" / "assumptions.json").read_text(encoding="utf-8"))
    assert assumptions["settings"]["contribution_strategy"] == "MaintainNonNegativeBalance"
    assert assumptions["sources"]["contribution_strategy"] == "scenario"
    assert assumptions["sources"]["start_year"] == "study"


def test_failed_scenario_still_gets_a_narrative(tmp_path: Path) -> None:
    path = tmp_path / "study.yaml"
    path.write_text("study:\n  start_year: 2025\n  horizon_years: 0\ncomponents: []\n", encoding="utf-8")
    cfg = StudyConfig.from_yaml(path)
    results = AnalystAgent().run(cfg, PlannerAgent().plan(cfg))
    ReporterAgent().package(out_dir=tmp_path / "out", results=results)

    narrative = (tmp_path / "out" / "Base" / "narrative.md").read_text(encoding="utf-8")
    assert "Calculation failed" in narrative
    assert "At least one component is required." in narrative


class TestCli:
    def test_synth_validate_run(self, tmp_path: Path) -> None:
        runner = CliRunner()
        data_dir = tmp_path / "data"
        res = runner.invoke(app, ["synth", "--out", str(data_dir), "--components", "6", "--seed", "1"])
        assert res.exit_code == 0, res.output

        res = runner.invoke(app, ["validate", "--study", str(data_dir / "study.yaml")])
        assert res.exit_code == 0, res.output
        assert "Base" in res.output

        out_dir = tmp_path / "out"
        res = runner.invoke(
            app, ["run", "--study", str(data_dir / "study.yaml"), "--out", str(out_dir), "--scenario", "Base"]
        )
        assert res.exit_code == 0, res.output
        assert (out_dir / "study_pack.xlsx").exists()
        assert not (out_dir / "Escalating").exists()

    def test_validate_reports_errors(self, tmp_path: Path) -> None:
        path = tmp_path / "study.yaml"
        path.write_text(
            "study:\n  start_year: 2025\ncomponents:\n  - name: Roof\n    current_cost: \"-10\"\n", encoding="utf-8"
        )
        res = CliRunner().invoke(app, ["validate", "--study", str(path)])
        assert res.exit_code == 1
        assert "CurrentCost cannot be negative" in res.output

    def test_unknown_scenario_exits_with_error(self, tmp_path: Path) -> None:
        study_path = generate_synthetic_study(tmp_path / "data", SynthSpec(start_year=2025, components=3, seed=2))
        res = CliRunner().invoke(
            app, ["run", "--study", str(study_path), "--out", str(tmp_path / "out"), "--scenario", "Nope"]
        )
        assert res.exit_code == 1
        assert "Unknown scenario" in res.output
