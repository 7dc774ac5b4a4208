"""Tests for contribution strategies and deposit layout."""

from __future__ import annotations

from decimal import Decimal

import pytest

from reservestudy.contributions import ContributionPlanner, YearContext, monthly_deposits
from reservestudy.inputs import StudyPolicy
from reservestudy.money import ZERO
from reservestudy.types import ContributionFrequency, ContributionStrategy, Timing


def _no_interest(contribution: Decimal) -> Decimal:
    return ZERO


class TestMonthlyDeposits:
    def test_monthly_spreads_evenly(self) -> None:
        deposits = monthly_deposits(Decimal("1200"), ContributionFrequency.MONTHLY)
        assert deposits == [Decimal("100")] * 12

    @pytest.mark.parametrize(
        "timing, month",
        [(Timing.START_OF_PERIOD, 0), (Timing.MID_PERIOD, 5), (Timing.END_OF_PERIOD, 11)],
    )
    def test_annual_lump_sum(self, timing: Timing, month: int) -> None:
        deposits = monthly_deposits(Decimal("5000"), ContributionFrequency.ANNUAL, timing)
        assert deposits[month] == Decimal("5000")
        assert sum(deposits) == Decimal("5000")


class TestBaseline:
    def test_fixed_annual(self) -> None:
        planner = ContributionPlanner(StudyPolicy(start_year=2025, initial_contribution="12000"))
        assert [planner.baseline(i) for i in (1, 2, 10)] == [Decimal("12000.00")] * 3

    def test_escalating_starts_at_initial(self) -> None:
        policy = StudyPolicy(
            start_year=2025, initial_contribution="10000",
            contribution_strategy="EscalatingPercent", escalation_rate="0.03",
        )
        planner = ContributionPlanner(policy)
        assert planner.baseline(1) == Decimal("10000.00")
        assert planner.baseline(2) == Decimal("10300.00")
        assert planner.baseline(3) == Decimal("10609.00")

    def test_balancing_strategy_uses_configured_baseline(self) -> None:
        policy = StudyPolicy(
            start_year=2025, initial_contribution="1000",
            contribution_strategy="MaintainNonNegativeBalance", baseline_strategy="FixedAnnual",
        )
        assert ContributionPlanner(policy).baseline(5) == Decimal("1000.00")

    def test_baseline_cannot_recurse(self) -> None:
        policy = StudyPolicy(
            start_year=2025,
            contribution_strategy="MaintainNonNegativeBalance",
            baseline_strategy="MaintainNonNegativeBalance",
        )
        with pytest.raises(ValueError):
            ContributionPlanner(policy).baseline(1)


class TestMaintainNonNegative:
    def _planner(self, initial: str = "1000") -> ContributionPlanner:
        return ContributionPlanner(
            StudyPolicy(
                start_year=2025, initial_contribution=initial,
                contribution_strategy=ContributionStrategy.MAINTAIN_NON_NEGATIVE_BALANCE,
                baseline_strategy=ContributionStrategy.FIXED_ANNUAL,
            )
        )

    def test_tops_up_to_zero(self) -> None:
        context = YearContext(year_index=1, beginning_balance=ZERO, expenditures=Decimal("5000.00"))
        assert self._planner().plan(context, _no_interest) == Decimal("5000.00")

    def test_baseline_kept_when_sufficient(self) -> None:
        context = YearContext(year_index=1, beginning_balance=Decimal("20000"), expenditures=Decimal("5000.00"))
        assert self._planner().plan(context, _no_interest) == Decimal("1000.00")

    def test_interest_reduces_top_up(self) -> None:
        context = YearContext(year_index=1, beginning_balance=Decimal("1000"), expenditures=Decimal("3000.00"))
        contribution = self._planner("0").plan(context, lambda c: Decimal("50.00"))
        assert contribution == Decimal("1950.00")

    def test_other_strategies_ignore_estimator(self) -> None:
        planner = ContributionPlanner(StudyPolicy(start_year=2025, initial_contribution="100"))

        def _boom(contribution: Decimal) -> Decimal:
            raise AssertionError("estimator should not be called")

        context = YearContext(year_index=1, beginning_balance=ZERO, expenditures=Decimal("99999"))
        assert planner.plan(context, _boom) == Decimal("100.00")
