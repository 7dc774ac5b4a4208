from __future__ import annotations

import logging
from typing import Any

from .funding import build_category_allocations, build_component_summaries, total_fully_funded_balance
from .inputs import ReserveStudyInput, split_warnings
from .money import round2
from .projector import project_from_schedule
from .schedule import build_expenditure_schedule
from .types import ReserveStudyResult

logger = logging.getLogger("reservestudy.calculator")


class ReserveStudyCalculator:
    """Validate a study, project it, and summarise the outcome.

    Validation failures come back as a failed result rather than an exception,
    so callers can surface every error at once.
    """

    def calculate(
        self,
        study: ReserveStudyInput,
        scenario: str = "Base",
        assumptions: dict[str, Any] | None = None,
    ) -> ReserveStudyResult:
        policy = study.policy
        errors, warnings = split_warnings(study.validate())
        if errors:
            logger.info("Scenario %s rejected with %d validation error(s)", scenario, len(errors))
            return ReserveStudyResult.failure(
                "; ".join(errors),
                start_year=policy.start_year or 0,
                horizon_years=policy.horizon_years,
                scenario=scenario,
                assumptions=assumptions,
            )

        components = list(study.components)
        schedule = build_expenditure_schedule(components, policy)
        years = project_from_schedule(policy, schedule.totals)

        result = ReserveStudyResult(
            start_year=policy.start_year,
            horizon_years=policy.horizon_years,
            years=years,
            schedule=schedule,
            components=build_component_summaries(components, policy, schedule),
            allocations=build_category_allocations(components, schedule),
            fully_funded_balance=total_fully_funded_balance(components, policy.start_year),
            starting_balance=round2(policy.starting_balance),
            warnings=warnings,
            scenario=scenario,
            assumptions=dict(assumptions or {}),
        )
        logger.info(
            "Scenario %s: %d year(s), final balance %s, %d deficit year(s)",
            scenario,
            len(years),
            result.final_balance,
            result.deficit_year_count,
        )
        return result
