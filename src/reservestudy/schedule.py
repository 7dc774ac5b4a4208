"""Per-component expenditure schedules over the projection horizon.

Schedules are tuples indexed from 0 (year index 1) holding the amount spent in
that year's inflated dollars. A cost at year index ``t`` is the base cost grown
by ``pow1p(rate, t)``, i.e. inflated from the start of the study to the year
it is spent.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from .inputs import ReserveComponentInput, StudyPolicy
from .money import ZERO, pow1p, round2
from .types import ComponentMethod, ExpenditureSchedule, RoundingPolicy

logger = logging.getLogger("reservestudy.schedule")


def replacement_years(component: ReserveComponentInput, start_year: int, horizon_years: int) -> list[int]:
    """Year indices (1-based) at which a full replacement falls inside the horizon."""
    remaining = component.remaining_life(start_year)
    if remaining is None or remaining > horizon_years:
        return []
    remaining = max(remaining, 0)
    life = component.useful_life_years
    if life is not None and life <= 0:
        return []

    # due now or past due: spend in year 1, then recur every `life` years from the due date
    first = max(remaining, 1)
    if life is None:
        return [first]
    years = [first]
    year = remaining + life
    if year <= first:
        year += life
    while year <= horizon_years:
        years.append(year)
        year += life
    return years


def component_keys(components: Iterable[ReserveComponentInput]) -> list[str]:
    """Schedule key per component; repeats get a `#n` suffix so no schedule is shadowed."""
    keys: list[str] = []
    used: set[str] = set()
    for component in components:
        key, n = component.key, 1
        while key in used:
            n += 1
            key = f"{component.key}#{n}"
        used.add(key)
        keys.append(key)
    return keys


def prn_years(component: ReserveComponentInput, horizon_years: int) -> list[int]:
    cycle = component.cycle_years or 1
    if cycle <= 0:
        return []
    return list(range(cycle, horizon_years + 1, cycle))


def _add_occurrences(
    schedule: list[Decimal],
    years: Iterable[int],
    base_cost: Decimal,
    inflation_rate: Decimal,
) -> None:
    for year_index in years:
        schedule[year_index - 1] += base_cost * pow1p(inflation_rate, year_index)


def build_component_schedule(component: ReserveComponentInput, policy: StudyPolicy) -> tuple[Decimal, ...]:
    """Raw (unrounded) per-year expenditures for one component.

    Never raises. Components that fail ``validate()`` simply produce whatever
    occurrences their fields allow, usually none.
    """
    horizon = policy.horizon_years
    schedule = [ZERO] * max(horizon, 0)
    if horizon <= 0 or policy.start_year is None:
        return tuple(schedule)
    rate = component.effective_inflation_rate(policy.inflation_rate)

    method = component.method
    if method not in (ComponentMethod.REPLACEMENT, ComponentMethod.PRN, ComponentMethod.COMBO):
        raise ValueError(f"Unknown component method: {method}")
    if method in (ComponentMethod.REPLACEMENT, ComponentMethod.COMBO):
        years = replacement_years(component, policy.start_year, horizon)
        _add_occurrences(schedule, years, component.current_cost, rate)
    if method in (ComponentMethod.PRN, ComponentMethod.COMBO):
        _add_occurrences(schedule, prn_years(component, horizon), _prn_cost(component), rate)
    return tuple(schedule)


def _prn_cost(component: ReserveComponentInput) -> Decimal:
    if component.annual_cost_override is not None:
        return component.annual_cost_override
    return component.current_cost


def build_expenditure_schedule(
    components: Iterable[ReserveComponentInput],
    policy: StudyPolicy,
) -> ExpenditureSchedule:
    """Schedules for every component plus yearly totals under the rounding policy."""
    horizon = max(policy.horizon_years, 0)
    per_component: dict[str, tuple[Decimal, ...]] = {}
    totals = [ZERO] * horizon

    components = list(components)
    for key, component in zip(component_keys(components), components):
        schedule = build_component_schedule(component, policy)
        if policy.rounding_policy is RoundingPolicy.PER_COMPONENT_PER_YEAR:
            schedule = tuple(round2(v) for v in schedule)
        elif policy.rounding_policy is not RoundingPolicy.PER_YEAR_TOTALS_ONLY:
            raise ValueError(f"Unknown rounding policy: {policy.rounding_policy}")
        per_component[key] = schedule
        for i, amount in enumerate(schedule):
            totals[i] += amount

    logger.debug("Built expenditure schedule for %d component(s) over %d year(s)", len(per_component), horizon)
    return ExpenditureSchedule(
        component_schedules=per_component,
        totals=tuple(round2(t) for t in totals),
    )
