from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .calculator import ReserveStudyCalculator
from .config import StudyConfig
from .reporting import save_balance_charts, write_assumptions, write_excel_pack, write_narrative
from .types import ReserveStudyResult

logger = logging.getLogger("reservestudy.agents")


@dataclass(frozen=True)
class ScenarioPlan:
    scenarios: list[str]


class PlannerAgent:
    def plan(self, config: StudyConfig, scenario: str | None = None) -> ScenarioPlan:
        scenarios: list[str]
        if scenario:
            scenarios = [scenario]
        else:
            scenarios = list(config.scenarios)
        return ScenarioPlan(scenarios=scenarios)


class AnalystAgent:
    def __init__(self, calculator: ReserveStudyCalculator | None = None):
        self.calculator = calculator or ReserveStudyCalculator()

    def run(self, config: StudyConfig, plan: ScenarioPlan) -> list[ReserveStudyResult]:
        results: list[ReserveStudyResult] = []
        for scenario in plan.scenarios:
            policy, sources = config.resolve_scenario(scenario)
            logger.info("Running scenario %s (%s, %d years)", scenario, policy.contribution_strategy.value, policy.horizon_years)
            assumptions = {
                "study": config.title,
                "scenario": scenario,
                "settings": {key: _plain(getattr(policy, key)) for key in sources},
                "sources": sources,
                "component_count": len(config.components),
            }
            results.append(
                self.calculator.calculate(config.study_input(scenario), scenario=scenario, assumptions=assumptions)
            )
        return results


class ReporterAgent:
    def package(self, out_dir: Path, results: list[ReserveStudyResult]) -> None:
        out_dir.mkdir(parents=True, exist_ok=True)
        ok = [r for r in results if r.is_success]
        save_balance_charts(out_dir / "charts", ok)
        write_excel_pack(out_dir / "study_pack.xlsx", ok)

        for res in results:
            scen_dir = out_dir / res.scenario
            scen_dir.mkdir(parents=True, exist_ok=True)
            write_narrative(scen_dir / "narrative.md", res)
            write_assumptions(scen_dir / "assumptions.json", res.assumptions)

        if not results:
            return
        base = next((r for r in results if r.scenario == "Base"), results[0])
        write_narrative(out_dir / "narrative.md", base)
        write_assumptions(out_dir / "assumptions.json", base.assumptions)


def _plain(value):
    return getattr(value, "value", value)
