"""Tests for the components CSV reader/writer."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pandas as pd
import pytest

from reservestudy.inputs import ReserveComponentInput, StudyConfigError
from reservestudy.io import COMPONENT_COLUMNS, load_components_csv, write_components_csv
from reservestudy.types import ComponentMethod


def test_load_parses_money_as_decimal(tmp_path: Path) -> None:
    path = tmp_path / "components.csv"
    path.write_text(
        "Id,Name,Category,Method,CurrentCost,InflationRateOverride,CycleYears,AnnualCostOverride\n"
        "C1,Seal Coat,Site,PRN,9000.10,0.035,3,\n"
        "C2,Pool,Amenities,Combo,45000,,4,2500.55\n",
        encoding="utf-8",
    )
    seal, pool = load_components_csv(path)
    assert seal.key == "C1"
    assert seal.method is ComponentMethod.PRN
    assert seal.current_cost == Decimal("9000.10")
    assert seal.inflation_rate_override == Decimal("0.035")
    assert seal.cycle_years == 3
    assert seal.annual_cost_override is None
    assert pool.inflation_rate_override is None
    assert pool.annual_cost_override == Decimal("2500.55")


def test_optional_columns_default(tmp_path: Path) -> None:
    path = tmp_path / "components.csv"
    path.write_text("Name,CurrentCost\nFence,4000\n", encoding="utf-8")
    (fence,) = load_components_csv(path)
    assert fence.category == "General"
    assert fence.method is ComponentMethod.REPLACEMENT


def test_missing_required_column(tmp_path: Path) -> None:
    path = tmp_path / "components.csv"
    path.write_text("Name,Category\nFence,Site\n", encoding="utf-8")
    with pytest.raises(StudyConfigError, match="CurrentCost"):
        load_components_csv(path)


def test_unknown_column(tmp_path: Path) -> None:
    path = tmp_path / "components.csv"
    path.write_text("Name,CurrentCost,Colour\nFence,4000,red\n", encoding="utf-8")
    with pytest.raises(StudyConfigError, match="Colour"):
        load_components_csv(path)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_components_csv(tmp_path / "nope.csv")


def test_written_file_has_every_column_and_reloads(tmp_path: Path) -> None:
    components = [
        ReserveComponentInput(
            id="R1", name="Roof", category="Exterior", current_cost="180000",
            last_service_year=2005, useful_life_years=25,
        ),
        ReserveComponentInput(id="S1", name="Seal", method="PRN", current_cost="9000", cycle_years=3),
    ]
    path = write_components_csv(tmp_path / "out.csv", components)
    assert list(pd.read_csv(path).columns) == list(COMPONENT_COLUMNS)

    reloaded = load_components_csv(path)
    assert [c.key for c in reloaded] == ["R1", "S1"]
    assert reloaded[0].remaining_life(2025) == 5
    assert reloaded[1].last_service_year is None


def test_blank_name_reaches_validation(tmp_path: Path) -> None:
    path = tmp_path / "components.csv"
    path.write_text("Name,CurrentCost,UsefulLifeYears,LastServiceYear\n,4000,10,2020\n", encoding="utf-8")
    (component,) = load_components_csv(path)
    assert component.name == ""
    assert "Component name is required." in component.validate()
