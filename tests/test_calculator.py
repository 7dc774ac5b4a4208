"""Tests for the calculator facade."""

from __future__ import annotations

from decimal import Decimal

from reservestudy.calculator import ReserveStudyCalculator
from reservestudy.inputs import ReserveComponentInput, ReserveStudyInput, StudyPolicy
from reservestudy.types import FundingStatus


def _study(**policy_overrides) -> ReserveStudyInput:
    values = dict(
        start_year=2025, horizon_years=10, starting_balance="0", inflation_rate="0",
        interest_rate="0", initial_contribution="1000",
    )
    values.update(policy_overrides)
    return ReserveStudyInput(
        policy=StudyPolicy(**values),
        components=[
            ReserveComponentInput(
                name="Boiler", current_cost="10000", remaining_life_override_years=0, useful_life_years=10,
            )
        ],
    )


def test_successful_calculation_summarises_years() -> None:
    result = ReserveStudyCalculator().calculate(_study(), scenario="Base", assumptions={"source": "test"})

    assert result.is_success
    assert result.scenario == "Base"
    assert result.assumptions == {"source": "test"}
    assert len(result.years) == 10
    assert result.total_contributions == Decimal("10000.00")
    assert result.total_expenditures == Decimal("20000.00")
    assert result.final_balance == Decimal("-10000.00")
    assert result.minimum_balance == Decimal("-10000.00")
    assert result.minimum_balance_year == 2034
    assert result.deficit_year_count == 10
    assert result.first_deficit_year == 2025
    assert not result.is_fully_funded
    assert result.average_annual_contribution == Decimal("1000")
    # boiler is due now, so the whole cost should already be reserved
    assert result.fully_funded_balance == Decimal("10000.00")
    assert result.percent_funded == Decimal("0.00")
    assert result.funding_status is FundingStatus.WEAK
    assert result.special_assessment == Decimal("10000.00")


def test_validation_errors_become_a_failed_result() -> None:
    study = ReserveStudyInput(policy=StudyPolicy(start_year=2025, horizon_years=0))
    result = ReserveStudyCalculator().calculate(study, scenario="Broken")

    assert not result.is_success
    assert result.scenario == "Broken"
    assert "ProjectionYears must be positive." in result.error_message
    assert "At least one component is required." in result.error_message
    assert result.years == []
    assert result.final_balance == 0


def test_warnings_do_not_block() -> None:
    study = _study()
    study = ReserveStudyInput(policy=study.policy, components=study.components + study.components)
    result = ReserveStudyCalculator().calculate(study)
    assert result.is_success
    assert result.warnings == ["Warning: Duplicate component name 'Boiler' found."]
