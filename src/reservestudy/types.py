from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from .money import ZERO, Number, round2, to_decimal


class ComponentMethod(str, Enum):
    REPLACEMENT = "Replacement"
    PRN = "PRN"
    COMBO = "Combo"


class ContributionStrategy(str, Enum):
    FIXED_ANNUAL = "FixedAnnual"
    ESCALATING_PERCENT = "EscalatingPercent"
    MAINTAIN_NON_NEGATIVE_BALANCE = "MaintainNonNegativeBalance"


class ContributionFrequency(str, Enum):
    ANNUAL = "Annual"
    MONTHLY = "Monthly"


class Timing(str, Enum):
    START_OF_PERIOD = "StartOfPeriod"
    MID_PERIOD = "MidPeriod"
    END_OF_PERIOD = "EndOfPeriod"


class ExpenditureTiming(str, Enum):
    START_OF_YEAR = "StartOfYear"
    MID_YEAR = "MidYear"
    END_OF_YEAR = "EndOfYear"
    MONTHLY_SPREAD = "MonthlySpread"


class InterestModel(str, Enum):
    ANNUAL_AVERAGE_BALANCE = "AnnualAverageBalance"
    MONTHLY_SIMULATION = "MonthlySimulation"


class RoundingPolicy(str, Enum):
    PER_COMPONENT_PER_YEAR = "PerComponentPerYear"
    PER_YEAR_TOTALS_ONLY = "PerYearTotalsOnly"


class FundingStatus(str, Enum):
    STRONG = "Strong"
    FAIR = "Fair"
    WEAK = "Weak"

    @classmethod
    def from_percent_funded(cls, percent: Number) -> "FundingStatus":
        """Classify a percent-funded figure expressed in percent (85 means 85%)."""
        percent = to_decimal(percent)
        if percent >= 70:
            return cls.STRONG
        if percent >= 30:
            return cls.FAIR
        return cls.WEAK


def percent_funded(balance: Number, fully_funded_balance: Number) -> Decimal:
    """Balance as a percentage of the fully funded balance, to two decimals.

    A study with nothing to fund (fully funded balance of zero) counts as 100%.
    """
    balance = to_decimal(balance)
    fully_funded_balance = to_decimal(fully_funded_balance)
    if fully_funded_balance <= 0:
        return Decimal("100")
    return round2(balance / fully_funded_balance * 100)


@dataclass(frozen=True)
class YearResult:
    year_index: int
    calendar_year: int
    beginning_balance: Decimal
    contribution: Decimal
    interest_earned: Decimal
    expenditures: Decimal

    @property
    def ending_balance(self) -> Decimal:
        return self.beginning_balance + self.contribution + self.interest_earned - self.expenditures

    @property
    def net_cash_flow(self) -> Decimal:
        return self.contribution - self.expenditures

    @property
    def is_deficit_year(self) -> bool:
        return self.ending_balance < 0


@dataclass(frozen=True)
class ExpenditureSchedule:
    component_schedules: dict[str, tuple[Decimal, ...]]
    totals: tuple[Decimal, ...]

    @property
    def grand_total(self) -> Decimal:
        return sum(self.totals, ZERO)

    @property
    def year_count(self) -> int:
        return len(self.totals)

    def component_expenditure(self, key: str, year_index: int) -> Decimal:
        schedule = self.component_schedules.get(key)
        if schedule is None or not 1 <= year_index <= len(schedule):
            return ZERO
        return schedule[year_index - 1]


@dataclass(frozen=True)
class ComponentSummary:
    key: str
    name: str
    category: str
    current_cost: Decimal
    useful_life_years: int | None
    remaining_life_years: int | None
    age_years: int | None
    next_expenditure_year: int | None
    next_expenditure_cost: Decimal | None
    total_projected_expenditures: Decimal
    expenditure_count: int
    fully_funded_balance: Decimal
    current_reserve: Decimal

    @property
    def percent_funded(self) -> Decimal:
        return percent_funded(self.current_reserve, self.fully_funded_balance)

    @property
    def is_past_due(self) -> bool:
        return self.remaining_life_years is not None and self.remaining_life_years < 0

    @property
    def is_due_soon(self) -> bool:
        return self.remaining_life_years is not None and 0 <= self.remaining_life_years <= 5


@dataclass(frozen=True)
class CategoryAllocation:
    category: str
    total_spend: Decimal
    percent_of_total: Decimal
    component_count: int


@dataclass(frozen=True)
class ReserveStudyResult:
    start_year: int
    horizon_years: int
    years: list[YearResult] = field(default_factory=list)
    schedule: ExpenditureSchedule | None = None
    components: list[ComponentSummary] = field(default_factory=list)
    allocations: list[CategoryAllocation] = field(default_factory=list)
    fully_funded_balance: Decimal = ZERO
    starting_balance: Decimal = ZERO
    warnings: list[str] = field(default_factory=list)
    is_success: bool = True
    error_message: str | None = None
    scenario: str = "Base"
    assumptions: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def failure(
        error_message: str,
        start_year: int = 0,
        horizon_years: int = 0,
        scenario: str = "Base",
        assumptions: dict[str, Any] | None = None,
    ) -> "ReserveStudyResult":
        return ReserveStudyResult(
            start_year=start_year,
            horizon_years=horizon_years,
            is_success=False,
            error_message=error_message,
            scenario=scenario,
            assumptions=dict(assumptions or {}),
        )

    @property
    def total_contributions(self) -> Decimal:
        return sum((y.contribution for y in self.years), ZERO)

    @property
    def total_expenditures(self) -> Decimal:
        return sum((y.expenditures for y in self.years), ZERO)

    @property
    def total_interest_earned(self) -> Decimal:
        return sum((y.interest_earned for y in self.years), ZERO)

    @property
    def final_balance(self) -> Decimal:
        return self.years[-1].ending_balance if self.years else ZERO

    @property
    def minimum_balance(self) -> Decimal:
        return min((y.ending_balance for y in self.years), default=ZERO)

    @property
    def minimum_balance_year(self) -> int | None:
        if not self.years:
            return None
        return min(self.years, key=lambda y: y.ending_balance).calendar_year

    @property
    def deficit_year_count(self) -> int:
        return sum(1 for y in self.years if y.is_deficit_year)

    @property
    def first_deficit_year(self) -> int | None:
        return next((y.calendar_year for y in self.years if y.is_deficit_year), None)

    @property
    def is_fully_funded(self) -> bool:
        return self.deficit_year_count == 0

    @property
    def average_annual_contribution(self) -> Decimal:
        return self.total_contributions / len(self.years) if self.years else ZERO

    @property
    def average_annual_expenditure(self) -> Decimal:
        return self.total_expenditures / len(self.years) if self.years else ZERO

    @property
    def special_assessment(self) -> Decimal:
        """One-off amount that would have kept every year out of deficit."""
        lowest = self.minimum_balance
        return round2(-lowest) if lowest < 0 else ZERO

    @property
    def percent_funded(self) -> Decimal:
        return percent_funded(self.starting_balance, self.fully_funded_balance)

    @property
    def funding_status(self) -> FundingStatus:
        return FundingStatus.from_percent_funded(self.percent_funded)
