"""Fully funded balance, percent funded and per-component / per-category summaries."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Sequence

from .inputs import ReserveComponentInput, StudyPolicy
from .money import ZERO, round2
from .schedule import component_keys
from .types import (
    CategoryAllocation,
    ComponentMethod,
    ComponentSummary,
    ExpenditureSchedule,
    FundingStatus,
    YearResult,
)


def component_fully_funded_balance(component: ReserveComponentInput, start_year: int) -> Decimal:
    """Depreciated share of today's cost: ``cost * age / useful life``.

    PRN-only components carry no depreciation reserve.
    """
    if component.method is ComponentMethod.PRN:
        return ZERO
    life = component.useful_life_years
    if life is None or life <= 0:
        return ZERO
    remaining = component.remaining_life(start_year)
    if remaining is None:
        return ZERO
    age = min(max(life - remaining, 0), life)
    return round2(component.current_cost * Decimal(age) / Decimal(life))


def total_fully_funded_balance(components: Iterable[ReserveComponentInput], start_year: int) -> Decimal:
    return sum((component_fully_funded_balance(c, start_year) for c in components), ZERO)


def classify_funding_status(percent: Decimal | float | int) -> FundingStatus:
    return FundingStatus.from_percent_funded(percent)


def special_assessment_required(years: Sequence[YearResult]) -> Decimal:
    """Smallest one-off amount that would have kept every year out of deficit."""
    if not years:
        return ZERO
    lowest = min(y.ending_balance for y in years)
    if lowest >= 0:
        return ZERO
    return round2(abs(lowest))


def build_component_summaries(
    components: Sequence[ReserveComponentInput],
    policy: StudyPolicy,
    schedule: ExpenditureSchedule,
) -> list[ComponentSummary]:
    start_year = policy.start_year
    total_ffb = total_fully_funded_balance(components, start_year)
    summaries: list[ComponentSummary] = []

    for key, component in zip(component_keys(components), components):
        spend = schedule.component_schedules.get(key, ())
        remaining = component.remaining_life(start_year)
        life = component.useful_life_years
        age = life - remaining if life is not None and remaining is not None else None

        first = next((i for i, amount in enumerate(spend) if amount > 0), None)
        ffb = component_fully_funded_balance(component, start_year)
        # starting balance is shared out in proportion to each component's need
        reserve = round2(policy.starting_balance * ffb / total_ffb) if total_ffb > 0 else ZERO

        summaries.append(
            ComponentSummary(
                key=key,
                name=component.name,
                category=component.category,
                current_cost=component.current_cost,
                useful_life_years=life,
                remaining_life_years=remaining,
                age_years=age,
                next_expenditure_year=start_year + first if first is not None else None,
                next_expenditure_cost=spend[first] if first is not None else None,
                total_projected_expenditures=sum(spend, ZERO),
                expenditure_count=sum(1 for amount in spend if amount > 0),
                fully_funded_balance=ffb,
                current_reserve=reserve,
            )
        )
    return summaries


def build_category_allocations(
    components: Sequence[ReserveComponentInput],
    schedule: ExpenditureSchedule,
) -> list[CategoryAllocation]:
    """Total projected spend per category, largest first."""
    totals: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for key, component in zip(component_keys(components), components):
        spend = schedule.component_schedules.get(key)
        if spend is None:
            continue
        category = component.category or "General"
        totals[category] = totals.get(category, ZERO) + sum(spend, ZERO)
        counts[category] = counts.get(category, 0) + 1

    grand_total = schedule.grand_total
    allocations = [
        CategoryAllocation(
            category=category,
            total_spend=round2(total),
            percent_of_total=round2(total / grand_total * 100) if grand_total > 0 else ZERO,
            component_count=counts[category],
        )
        for category, total in totals.items()
    ]
    allocations.sort(key=lambda a: a.total_spend, reverse=True)
    return allocations
