"""Input records for a reserve study: components, policy knobs and the study itself.

Validation never raises. ``validate()`` returns human-readable strings and an
empty list means the record may be projected. Entries starting with
``"Warning: "`` are advisory and do not block a calculation.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from decimal import Decimal
from typing import Any, Mapping

from .money import ZERO, is_valid_rate, to_decimal
from .types import (
    ComponentMethod,
    ContributionFrequency,
    ContributionStrategy,
    ExpenditureTiming,
    InterestModel,
    RoundingPolicy,
    Timing,
)

WARNING_PREFIX = "Warning: "


class StudyConfigError(ValueError):
    """Raised when a study cannot be projected or a config cannot be read."""


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    return int(value)


@dataclass(frozen=True)
class ReserveComponentInput:
    name: str
    current_cost: Decimal = ZERO
    category: str = "General"
    method: ComponentMethod = ComponentMethod.REPLACEMENT
    inflation_rate_override: Decimal | None = None
    last_service_year: int | None = None
    useful_life_years: int | None = None
    remaining_life_override_years: int | None = None
    cycle_years: int | None = None
    annual_cost_override: Decimal | None = None
    id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "current_cost", to_decimal(self.current_cost))
        object.__setattr__(self, "method", ComponentMethod(self.method))
        object.__setattr__(self, "inflation_rate_override", to_decimal(self.inflation_rate_override))
        object.__setattr__(self, "annual_cost_override", to_decimal(self.annual_cost_override))
        for name in ("last_service_year", "useful_life_years", "remaining_life_override_years", "cycle_years"):
            object.__setattr__(self, name, _optional_int(getattr(self, name)))

    @staticmethod
    def from_mapping(raw: Mapping[str, Any]) -> "ReserveComponentInput":
        known = {f.name for f in fields(ReserveComponentInput)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise StudyConfigError(f"Unknown component field(s): {', '.join(unknown)}")
        try:
            return ReserveComponentInput(**{k: v for k, v in raw.items() if v is not None})
        except (TypeError, ValueError, ArithmeticError) as e:
            raise StudyConfigError(f"Invalid component {raw.get('name')!r}: {e}") from e

    @property
    def key(self) -> str:
        return self.id or self.name

    def effective_inflation_rate(self, default_rate: Decimal) -> Decimal:
        if self.inflation_rate_override is not None:
            return self.inflation_rate_override
        return default_rate

    def remaining_life(self, start_year: int) -> int | None:
        if self.remaining_life_override_years is not None:
            return self.remaining_life_override_years
        if self.last_service_year is not None and self.useful_life_years is not None:
            return (self.last_service_year + self.useful_life_years) - start_year
        return None

    def validate(self) -> list[str]:
        errors: list[str] = []
        if not (self.name or "").strip():
            errors.append("Component name is required.")
        if self.current_cost < 0:
            errors.append(f"Component '{self.name}': CurrentCost cannot be negative.")

        if self.method in (ComponentMethod.REPLACEMENT, ComponentMethod.COMBO):
            if self.useful_life_years is None and self.remaining_life_override_years is None:
                errors.append(
                    f"Component '{self.name}': Replacement method requires UsefulLifeYears "
                    "or RemainingLifeOverrideYears."
                )
        if self.useful_life_years is not None and self.useful_life_years <= 0:
            errors.append(f"Component '{self.name}': UsefulLifeYears must be positive.")

        if self.method in (ComponentMethod.PRN, ComponentMethod.COMBO):
            if self.cycle_years is not None and self.cycle_years <= 0:
                errors.append(f"Component '{self.name}': CycleYears must be positive.")

        if self.inflation_rate_override is not None and not is_valid_rate(self.inflation_rate_override, "-0.2", "0.5"):
            errors.append(
                f"Component '{self.name}': InflationRateOverride is out of reasonable range (-20% to 50%)."
            )
        return errors


@dataclass(frozen=True)
class StudyPolicy:
    start_year: int | None = None
    horizon_years: int = 30
    starting_balance: Decimal = ZERO
    inflation_rate: Decimal = Decimal("0.03")
    interest_rate: Decimal = Decimal("0.02")
    interest_model: InterestModel = InterestModel.MONTHLY_SIMULATION
    rounding_policy: RoundingPolicy = RoundingPolicy.PER_COMPONENT_PER_YEAR
    expenditure_timing: ExpenditureTiming = ExpenditureTiming.MID_YEAR
    contribution_strategy: ContributionStrategy = ContributionStrategy.FIXED_ANNUAL
    initial_contribution: Decimal = ZERO
    escalation_rate: Decimal = Decimal("0.03")
    contribution_frequency: ContributionFrequency = ContributionFrequency.MONTHLY
    contribution_timing: Timing = Timing.START_OF_PERIOD
    # contribution used by MaintainNonNegativeBalance before any top-up
    baseline_strategy: ContributionStrategy = ContributionStrategy.ESCALATING_PERCENT

    def __post_init__(self) -> None:
        for name in ("starting_balance", "inflation_rate", "interest_rate", "initial_contribution", "escalation_rate"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        object.__setattr__(self, "start_year", _optional_int(self.start_year))
        object.__setattr__(self, "horizon_years", int(self.horizon_years))
        object.__setattr__(self, "interest_model", InterestModel(self.interest_model))
        object.__setattr__(self, "rounding_policy", RoundingPolicy(self.rounding_policy))
        object.__setattr__(self, "expenditure_timing", ExpenditureTiming(self.expenditure_timing))
        object.__setattr__(self, "contribution_strategy", ContributionStrategy(self.contribution_strategy))
        object.__setattr__(self, "contribution_frequency", ContributionFrequency(self.contribution_frequency))
        object.__setattr__(self, "contribution_timing", Timing(self.contribution_timing))
        object.__setattr__(self, "baseline_strategy", ContributionStrategy(self.baseline_strategy))

    @property
    def end_year(self) -> int | None:
        if self.start_year is None:
            return None
        return self.start_year + self.horizon_years - 1

    def validate(self) -> list[str]:
        errors: list[str] = []
        if self.horizon_years <= 0:
            errors.append("ProjectionYears must be positive.")
        if self.horizon_years > 100:
            errors.append("ProjectionYears cannot exceed 100 years.")
        if self.start_year is None:
            errors.append("StartYear is required.")
        elif not 1900 <= self.start_year <= 2200:
            errors.append("StartYear must be between 1900 and 2200.")
        if self.starting_balance < 0:
            errors.append("StartingBalance cannot be negative.")
        if not is_valid_rate(self.inflation_rate, "-0.2", "0.5"):
            errors.append("InflationRateDefault is out of reasonable range (-20% to 50%).")
        if not is_valid_rate(self.interest_rate, "-0.1", "0.3"):
            errors.append("InterestRateAnnual is out of reasonable range (-10% to 30%).")
        if not is_valid_rate(self.escalation_rate, "-0.2", "0.5"):
            errors.append("ContributionEscalationRate is out of reasonable range (-20% to 50%).")
        if self.initial_contribution < 0:
            errors.append("InitialAnnualContribution cannot be negative.")
        if self.baseline_strategy is ContributionStrategy.MAINTAIN_NON_NEGATIVE_BALANCE:
            errors.append("BaselineStrategy must be FixedAnnual or EscalatingPercent.")
        return errors


@dataclass(frozen=True)
class ReserveStudyInput:
    policy: StudyPolicy
    components: tuple[ReserveComponentInput, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "components", tuple(self.components))

    def validate(self) -> list[str]:
        errors = self.policy.validate()
        if not self.components:
            errors.append("At least one component is required.")
        for component in self.components:
            errors.extend(component.validate())

        seen: dict[str, int] = {}
        for component in self.components:
            lowered = (component.name or "").strip().lower()
            if not lowered:
                continue
            seen[lowered] = seen.get(lowered, 0) + 1
            if seen[lowered] == 2:
                errors.append(f"{WARNING_PREFIX}Duplicate component name '{component.name}' found.")
        return errors


def split_warnings(messages: list[str]) -> tuple[list[str], list[str]]:
    """Separate blocking errors from ``Warning:`` messages."""
    errors = [m for m in messages if not m.startswith(WARNING_PREFIX)]
    warnings = [m for m in messages if m.startswith(WARNING_PREFIX)]
    return errors, warnings
