from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Iterable, Sequence

from .contributions import ContributionPlanner, YearContext
from .inputs import ReserveComponentInput, StudyConfigError, StudyPolicy, split_warnings
from .interest import compute_interest
from .money import round2
from .schedule import build_expenditure_schedule
from .types import YearResult

logger = logging.getLogger("reservestudy.projector")


class ProjectionCancelled(Exception):
    """Raised between years when a caller asks a long batch run to stop."""

    def __init__(self, completed: list[YearResult]):
        super().__init__(f"Projection cancelled after {len(completed)} year(s)")
        self.completed = completed


def check_preconditions(policy: StudyPolicy, components: Sequence[ReserveComponentInput] = ()) -> None:
    errors, _ = split_warnings(policy.validate())
    for component in components:
        errors.extend(component.validate())
    if errors:
        raise StudyConfigError("Cannot project funding plan: " + "; ".join(errors))


def project_from_schedule(
    policy: StudyPolicy,
    expenditures: Sequence[Decimal],
    should_cancel: Callable[[], bool] | None = None,
) -> list[YearResult]:
    """Run the year loop over precomputed yearly expenditure totals."""
    check_preconditions(policy)
    if len(expenditures) != policy.horizon_years:
        raise StudyConfigError(
            f"Expected {policy.horizon_years} yearly expenditure totals, got {len(expenditures)}."
        )

    planner = ContributionPlanner(policy)
    balance = round2(policy.starting_balance)
    years: list[YearResult] = []

    for i in range(policy.horizon_years):
        if should_cancel is not None and should_cancel():
            raise ProjectionCancelled(years)

        year_index = i + 1
        spent = round2(expenditures[i])
        beginning = balance

        def _interest(contribution: Decimal) -> Decimal:
            return compute_interest(policy, beginning, contribution, spent)

        contribution = planner.plan(YearContext(year_index, beginning, spent), _interest)
        result = YearResult(
            year_index=year_index,
            calendar_year=policy.start_year + i,
            beginning_balance=beginning,
            contribution=contribution,
            interest_earned=_interest(contribution),
            expenditures=spent,
        )
        years.append(result)
        balance = result.ending_balance
        logger.debug(
            "year %d (%d): begin=%s contrib=%s interest=%s spent=%s end=%s",
            result.year_index,
            result.calendar_year,
            result.beginning_balance,
            result.contribution,
            result.interest_earned,
            result.expenditures,
            result.ending_balance,
        )
    return years


def project_funding_plan(
    policy: StudyPolicy,
    components: Iterable[ReserveComponentInput],
    should_cancel: Callable[[], bool] | None = None,
) -> list[YearResult]:
    """Project the reserve fund year by year.

    Every component and the policy must be valid; otherwise ``StudyConfigError``
    is raised before any year is computed.
    """
    components = list(components)
    check_preconditions(policy, components)
    schedule = build_expenditure_schedule(components, policy)
    return project_from_schedule(policy, schedule.totals, should_cancel=should_cancel)
