"""Yearly contribution amounts for each contribution strategy.

MaintainNonNegativeBalance projects the year with the baseline contribution
(including the interest that contribution earns) and adds any negative ending
balance to the contribution as a top-up. Interest earned on the top-up itself
is ignored when sizing it, so with a non-negative rate one pass suffices and
the ending balance lands on or just above zero (exactly zero at 0% interest).
A negative rate can leave a remainder, which further passes cover.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

from .inputs import StudyPolicy
from .money import ZERO, pow1p, round2
from .types import ContributionFrequency, ContributionStrategy, Timing

InterestEstimator = Callable[[Decimal], Decimal]

# negative interest rates can eat into a top-up; later passes cover that remainder
MAX_TOP_UPS = 8

_DEPOSIT_MONTH = {
    Timing.START_OF_PERIOD: 0,
    Timing.MID_PERIOD: 5,
    Timing.END_OF_PERIOD: 11,
}


@dataclass(frozen=True)
class YearContext:
    year_index: int
    beginning_balance: Decimal
    expenditures: Decimal


def monthly_deposits(
    annual_contribution: Decimal,
    frequency: ContributionFrequency,
    timing: Timing = Timing.START_OF_PERIOD,
) -> list[Decimal]:
    """Lay out a year's contribution over twelve months; the total is unchanged."""
    if frequency is ContributionFrequency.MONTHLY:
        return [annual_contribution / 12] * 12
    if frequency is ContributionFrequency.ANNUAL:
        if timing not in _DEPOSIT_MONTH:
            raise ValueError(f"Unknown contribution timing: {timing}")
        deposits = [ZERO] * 12
        deposits[_DEPOSIT_MONTH[timing]] = annual_contribution
        return deposits
    raise ValueError(f"Unknown contribution frequency: {frequency}")


class ContributionPlanner:
    def __init__(self, policy: StudyPolicy):
        self.policy = policy

    def baseline(self, year_index: int, strategy: ContributionStrategy | None = None) -> Decimal:
        strategy = strategy or self.policy.contribution_strategy
        if strategy is ContributionStrategy.FIXED_ANNUAL:
            return round2(self.policy.initial_contribution)
        if strategy is ContributionStrategy.ESCALATING_PERCENT:
            factor = pow1p(self.policy.escalation_rate, year_index - 1)
            return round2(self.policy.initial_contribution * factor)
        if strategy is ContributionStrategy.MAINTAIN_NON_NEGATIVE_BALANCE:
            if self.policy.baseline_strategy is strategy:
                raise ValueError("Baseline strategy cannot itself be MaintainNonNegativeBalance.")
            return self.baseline(year_index, self.policy.baseline_strategy)
        raise ValueError(f"Unknown contribution strategy: {strategy}")

    def plan(self, context: YearContext, estimate_interest: InterestEstimator) -> Decimal:
        """Contribution for one year.

        ``estimate_interest`` maps a candidate contribution to the interest the
        year would earn with it; only the balancing strategy needs it.
        """
        strategy = self.policy.contribution_strategy
        contribution = self.baseline(context.year_index, strategy)
        if strategy is not ContributionStrategy.MAINTAIN_NON_NEGATIVE_BALANCE:
            return contribution

        for _ in range(MAX_TOP_UPS):
            interest = estimate_interest(contribution)
            projected = context.beginning_balance + contribution + interest - context.expenditures
            if projected >= 0:
                break
            contribution = round2(contribution - projected)
        return contribution
