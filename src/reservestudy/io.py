from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd

from .inputs import ReserveComponentInput, StudyConfigError

# CSV header -> ReserveComponentInput field
COMPONENT_COLUMNS = {
    "Id": "id",
    "Name": "name",
    "Category": "category",
    "Method": "method",
    "CurrentCost": "current_cost",
    "InflationRateOverride": "inflation_rate_override",
    "LastServiceYear": "last_service_year",
    "UsefulLifeYears": "useful_life_years",
    "RemainingLifeOverrideYears": "remaining_life_override_years",
    "CycleYears": "cycle_years",
    "AnnualCostOverride": "annual_cost_override",
}
REQUIRED_COLUMNS = ("Name", "CurrentCost")
_TEXT_COLUMNS = ["Id", "Name", "Category", "Method", "CurrentCost", "InflationRateOverride", "AnnualCostOverride"]


def _read_csv(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Missing required input: {path}")
    # Money and rate columns stay text so "0.03" reaches Decimal untouched
    return pd.read_csv(path, dtype={c: str for c in _TEXT_COLUMNS})


def _clean(value: Any) -> Any:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def load_components_csv(path: str | Path) -> list[ReserveComponentInput]:
    path = Path(path)
    df = _read_csv(path)
    for required in REQUIRED_COLUMNS:
        if required not in df.columns:
            raise StudyConfigError(f"{path.name} missing required column: {required}")
    unknown = [c for c in df.columns if c not in COMPONENT_COLUMNS]
    if unknown:
        raise StudyConfigError(f"{path.name} has unknown column(s): {', '.join(unknown)}")

    components: list[ReserveComponentInput] = []
    for record in df.to_dict(orient="records"):
        raw = {COMPONENT_COLUMNS[col]: _clean(v) for col, v in record.items()}
        # blank names still load so validation can report them
        raw["name"] = raw["name"] or ""
        components.append(ReserveComponentInput.from_mapping(raw))
    return components


def write_components_csv(path: str | Path, components: list[ReserveComponentInput]) -> Path:
    path = Path(path)
    rows = []
    for component in components:
        rows.append(
            {
                col: (getattr(component, attr).value if col == "Method" else getattr(component, attr))
                for col, attr in COMPONENT_COLUMNS.items()
            }
        )
    df = pd.DataFrame(rows, columns=list(COMPONENT_COLUMNS))
    df.to_csv(path, index=False)
    return path
