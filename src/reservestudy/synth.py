from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np
import yaml

from .inputs import ReserveComponentInput
from .io import write_components_csv
from .types import ComponentMethod

# name, category, method, typical cost, useful life (or PRN cycle)
_CATALOG = [
    ("Roof Replacement", "Building Exterior", ComponentMethod.REPLACEMENT, 180_000, 25),
    ("Exterior Paint", "Building Exterior", ComponentMethod.REPLACEMENT, 65_000, 8),
    ("Asphalt Seal Coat", "Site", ComponentMethod.PRN, 9_000, 3),
    ("Asphalt Overlay", "Site", ComponentMethod.REPLACEMENT, 120_000, 20),
    ("Pool Resurfacing", "Amenities", ComponentMethod.COMBO, 45_000, 12),
    ("Elevator Modernization", "Mechanical", ComponentMethod.REPLACEMENT, 210_000, 30),
    ("Boiler", "Mechanical", ComponentMethod.REPLACEMENT, 55_000, 20),
    ("Landscape Refresh", "Site", ComponentMethod.PRN, 6_500, 1),
    ("Clubhouse Furniture", "Amenities", ComponentMethod.REPLACEMENT, 18_000, 10),
    ("Fire Alarm Panel", "Life Safety", ComponentMethod.REPLACEMENT, 28_000, 15),
    ("Gutters & Downspouts", "Building Exterior", ComponentMethod.REPLACEMENT, 14_000, 18),
    ("Fence Repairs", "Site", ComponentMethod.PRN, 4_000, 2),
]


@dataclass(frozen=True)
class SynthSpec:
    start_year: int
    components: int
    seed: int


def generate_components(spec: SynthSpec) -> list[ReserveComponentInput]:
    rng = np.random.default_rng(spec.seed)
    components: list[ReserveComponentInput] = []
    for idx in range(spec.components):
        name, category, method, cost, life = _CATALOG[idx % len(_CATALOG)]
        if idx >= len(_CATALOG):
            name = f"{name} {idx // len(_CATALOG) + 1}"
        cost = round(float(cost * rng.uniform(0.8, 1.25)), -2)

        if method is ComponentMethod.PRN:
            components.append(
                ReserveComponentInput(
                    id=f"C{idx + 1:03d}", name=name, category=category, method=method,
                    current_cost=cost, cycle_years=life,
                )
            )
            continue

        age = int(rng.integers(0, life + 1))
        components.append(
            ReserveComponentInput(
                id=f"C{idx + 1:03d}",
                name=name,
                category=category,
                method=method,
                current_cost=cost,
                last_service_year=spec.start_year - age,
                useful_life_years=life,
                cycle_years=3 if method is ComponentMethod.COMBO else None,
                annual_cost_override=round(cost * 0.05, -1) if method is ComponentMethod.COMBO else None,
            )
        )
    return components


def generate_synthetic_study(out_dir: str | Path, spec: SynthSpec) -> Path:
    """Write ``components.csv`` and ``study.yaml``; returns the YAML path."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    components = generate_components(spec)
    write_components_csv(out_dir / "components.csv", components)

    annual_need = sum(float(c.current_cost) / (c.useful_life_years or c.cycle_years or 1) for c in components)
    contribution = round(annual_need * 0.8, -2)
    study = {
        "study": {
            "name": "Synthetic Community Association",
            "start_year": spec.start_year,
            "horizon_years": 30,
            "starting_balance": round(annual_need * 3, -3),
            "inflation_rate": "0.03",
            "interest_rate": "0.02",
            "interest_model": "MonthlySimulation",
            "initial_contribution": contribution,
        },
        "components_csv": "components.csv",
        "scenarios": {
            "Base": {},
            "Escalating": {"contribution_strategy": "EscalatingPercent", "escalation_rate": "0.04"},
            "NoDeficit": {"contribution_strategy": "MaintainNonNegativeBalance"},
        },
    }
    path = out_dir / "study.yaml"
    path.write_text(yaml.safe_dump(study, sort_keys=False), encoding="utf-8")
    return path
