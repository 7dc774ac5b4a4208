from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from .contributions import monthly_deposits
from .inputs import StudyPolicy
from .money import ZERO, monthly_rate_from_annual, round2
from .types import ExpenditureTiming, InterestModel, RoundingPolicy

MONTHS = 12
_TWO = Decimal("2")


def monthly_expenditures(annual_expenditure: Decimal, timing: ExpenditureTiming) -> list[Decimal]:
    """Spread a year's expenditures across months according to ``timing``."""
    monthly = [ZERO] * MONTHS
    if timing is ExpenditureTiming.START_OF_YEAR:
        monthly[0] = annual_expenditure
    elif timing is ExpenditureTiming.MID_YEAR:
        monthly[5] = annual_expenditure
    elif timing is ExpenditureTiming.END_OF_YEAR:
        monthly[11] = annual_expenditure
    elif timing is ExpenditureTiming.MONTHLY_SPREAD:
        monthly = [annual_expenditure / MONTHS] * MONTHS
    else:
        raise ValueError(f"Unknown expenditure timing: {timing}")
    return monthly


def annual_average_interest(
    rate: Decimal,
    beginning_balance: Decimal,
    contribution: Decimal,
    expenditures: Decimal,
) -> Decimal:
    """Interest on the average of the opening and pre-interest closing balance.

    No interest is earned (or charged) when that average is not positive.
    """
    ending_before_interest = beginning_balance + contribution - expenditures
    average = (beginning_balance + ending_before_interest) / _TWO
    if average <= 0:
        return ZERO
    return round2(rate * average)


def monthly_simulation_interest(
    rate: Decimal,
    beginning_balance: Decimal,
    deposits: Sequence[Decimal],
    spending: Sequence[Decimal],
    rounding_policy: RoundingPolicy,
) -> Decimal:
    """Simulate twelve months: deposit, spend, then compound on a positive balance."""
    if rounding_policy not in (RoundingPolicy.PER_COMPONENT_PER_YEAR, RoundingPolicy.PER_YEAR_TOTALS_ONLY):
        raise ValueError(f"Unknown rounding policy: {rounding_policy}")
    monthly_rate = monthly_rate_from_annual(rate)
    round_each_month = rounding_policy is RoundingPolicy.PER_COMPONENT_PER_YEAR

    balance = beginning_balance
    total = ZERO
    for month in range(MONTHS):
        balance += deposits[month]
        balance -= spending[month]
        if balance > 0:
            earned = balance * monthly_rate
            if round_each_month:
                earned = round2(earned)
            total += earned
            balance += earned
    return round2(total)


def compute_interest(
    policy: StudyPolicy,
    beginning_balance: Decimal,
    contribution: Decimal,
    expenditures: Decimal,
) -> Decimal:
    """Interest earned over one year, in cents."""
    model = policy.interest_model
    if model is InterestModel.ANNUAL_AVERAGE_BALANCE:
        return annual_average_interest(policy.interest_rate, beginning_balance, contribution, expenditures)
    if model is InterestModel.MONTHLY_SIMULATION:
        deposits = monthly_deposits(contribution, policy.contribution_frequency, policy.contribution_timing)
        spending = monthly_expenditures(expenditures, policy.expenditure_timing)
        return monthly_simulation_interest(
            policy.interest_rate, beginning_balance, deposits, spending, policy.rounding_policy
        )
    raise ValueError(f"Unknown interest model: {model}")
