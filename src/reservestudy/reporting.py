from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import matplotlib.pyplot as plt
import matplotlib.ticker as mtick
import pandas as pd
from openpyxl import Workbook
from openpyxl.utils.dataframe import dataframe_to_rows

from .types import ReserveStudyResult

CASH_FLOW_COLUMNS = [
    "Year",
    "CalendarYear",
    "BeginningBalance",
    "Contribution",
    "InterestEarned",
    "Expenditures",
    "EndingBalance",
    "NetCashFlow",
    "Deficit",
]


def years_frame(result: ReserveStudyResult) -> pd.DataFrame:
    rows = [
        [
            y.year_index,
            y.calendar_year,
            float(y.beginning_balance),
            float(y.contribution),
            float(y.interest_earned),
            float(y.expenditures),
            float(y.ending_balance),
            float(y.net_cash_flow),
            y.is_deficit_year,
        ]
        for y in result.years
    ]
    return pd.DataFrame(rows, columns=CASH_FLOW_COLUMNS)


def components_frame(result: ReserveStudyResult) -> pd.DataFrame:
    rows = [
        {
            "Key": c.key,
            "Name": c.name,
            "Category": c.category,
            "CurrentCost": float(c.current_cost),
            "UsefulLife": c.useful_life_years,
            "RemainingLife": c.remaining_life_years,
            "Age": c.age_years,
            "NextExpenditureYear": c.next_expenditure_year,
            "NextExpenditureCost": float(c.next_expenditure_cost) if c.next_expenditure_cost is not None else None,
            "TotalProjected": float(c.total_projected_expenditures),
            "Occurrences": c.expenditure_count,
            "FullyFundedBalance": float(c.fully_funded_balance),
            "CurrentReserve": float(c.current_reserve),
            "PercentFunded": float(c.percent_funded),
            "PastDue": c.is_past_due,
            "DueSoon": c.is_due_soon,
        }
        for c in result.components
    ]
    return pd.DataFrame(rows)


def allocations_frame(result: ReserveStudyResult) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Category": a.category,
                "TotalSpend": float(a.total_spend),
                "PercentOfTotal": float(a.percent_of_total),
                "Components": a.component_count,
            }
            for a in result.allocations
        ],
        columns=["Category", "TotalSpend", "PercentOfTotal", "Components"],
    )


def summary_rows(result: ReserveStudyResult) -> list[tuple[str, Any]]:
    return [
        ("Scenario", result.scenario),
        ("Start Year", result.start_year),
        ("Projection Years", result.horizon_years),
        ("Starting Balance", float(result.starting_balance)),
        ("Total Contributions", float(result.total_contributions)),
        ("Total Expenditures", float(result.total_expenditures)),
        ("Interest Earned", float(result.total_interest_earned)),
        ("Final Balance", float(result.final_balance)),
        ("Minimum Balance", float(result.minimum_balance)),
        ("Minimum Balance Year", result.minimum_balance_year),
        ("Deficit Years", result.deficit_year_count),
        ("First Deficit Year", result.first_deficit_year),
        ("Special Assessment Required", float(result.special_assessment)),
        ("Fully Funded Balance", float(result.fully_funded_balance)),
        ("Percent Funded", float(result.percent_funded)),
        ("Funding Status", result.funding_status.value),
    ]


def write_assumptions(path: str | Path, assumptions: dict[str, Any]) -> None:
    path = Path(path)
    path.write_text(json.dumps(assumptions, indent=2, default=str), encoding="utf-8")


def write_narrative(path: str | Path, result: ReserveStudyResult) -> None:
    path = Path(path)
    lines: list[str] = []
    lines.append(f"# Reserve Study Funding Plan: {result.scenario}")
    lines.append("")
    if not result.is_success:
        lines.append("## Calculation failed")
        for err in (result.error_message or "").split("; "):
            lines.append(f"- {err}")
        lines.append("")
        path.write_text("\n".join(lines), encoding="utf-8")
        return

    lines.append("## Summary")
    lines.append(f"- Horizon: {result.start_year}-{result.start_year + result.horizon_years - 1}")
    lines.append(
        f"- Percent funded: {result.percent_funded}% ({result.funding_status.value}) "
        f"against a fully funded balance of ${result.fully_funded_balance:,.2f}"
    )
    lines.append(f"- Contributions: ${result.total_contributions:,.2f}")
    lines.append(f"- Expenditures: ${result.total_expenditures:,.2f}")
    lines.append(f"- Interest earned: ${result.total_interest_earned:,.2f}")
    lines.append(f"- Final balance: ${result.final_balance:,.2f}")
    lines.append("")

    lines.append("## Risk")
    if result.is_fully_funded:
        lines.append(f"- No deficit years; lowest balance ${result.minimum_balance:,.2f} in {result.minimum_balance_year}.")
    else:
        lines.append(
            f"- {result.deficit_year_count} deficit year(s), first in {result.first_deficit_year}; "
            f"lowest balance ${result.minimum_balance:,.2f} in {result.minimum_balance_year}."
        )
        lines.append(f"- Special assessment needed to avoid deficits: ${result.special_assessment:,.2f}")
    past_due = [c.name for c in result.components if c.is_past_due]
    if past_due:
        lines.append(f"- Past due: {', '.join(past_due)}")
    lines.append("")

    if result.allocations:
        lines.append("## Spending by category")
        for a in result.allocations:
            lines.append(f"- {a.category}: ${a.total_spend:,.2f} ({a.percent_of_total}%)")
        lines.append("")

    if result.assumptions.get("sources"):
        lines.append("## Assumptions")
        settings = result.assumptions.get("settings", {})
        for key, source in result.assumptions["sources"].items():
            lines.append(f"- {key}: {settings.get(key)} ({source})")
        lines.append("")

    if result.warnings:
        lines.append("## Data Quality / Warnings")
        for w in result.warnings:
            lines.append(f"- {w}")
        lines.append("")

    path.write_text("\n".join(lines), encoding="utf-8")


def save_balance_charts(out_dir: str | Path, results: list[ReserveStudyResult]) -> list[Path]:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    paths: list[Path] = []

    if not results:
        return paths

    for res in results:
        df = years_frame(res)
        fig, ax = plt.subplots(figsize=(10, 4))
        ax.bar(df["CalendarYear"], -df["Expenditures"], color="tab:red", alpha=0.35, label="Expenditures")
        ax.bar(df["CalendarYear"], df["Contribution"], color="tab:green", alpha=0.35, label="Contributions")
        ax.plot(df["CalendarYear"], df["EndingBalance"], color="tab:blue", marker="o", markersize=3, label="Ending balance")
        ax.axhline(0, color="gray", linestyle=":", linewidth=1)
        ax.set_title(f"Reserve Balance: {res.scenario}")
        ax.yaxis.set_major_formatter(mtick.StrMethodFormatter("${x:,.0f}"))
        ax.grid(True, alpha=0.25)
        ax.legend()
        p = out_dir / f"balance_{_safe_filename(res.scenario)}.png"
        fig.tight_layout()
        fig.savefig(p, dpi=160)
        plt.close(fig)
        paths.append(p)

    if len(results) > 1:
        fig, ax = plt.subplots(figsize=(10, 4))
        for res in results:
            df = years_frame(res)
            ax.plot(df["CalendarYear"], df["EndingBalance"], label=res.scenario)
        ax.axhline(0, color="gray", linestyle=":", linewidth=1)
        ax.set_title("Ending Balance by Scenario")
        ax.yaxis.set_major_formatter(mtick.StrMethodFormatter("${x:,.0f}"))
        ax.grid(True, alpha=0.25)
        ax.legend()
        p = out_dir / "balance_comparison.png"
        fig.tight_layout()
        fig.savefig(p, dpi=160)
        plt.close(fig)
        paths.append(p)
    return paths


def write_excel_pack(path: str | Path, results: list[ReserveStudyResult]) -> None:
    path = Path(path)
    wb = Workbook()
    wb.remove(wb.active)

    if results:
        summary = pd.DataFrame(
            {res.scenario: [v for _, v in summary_rows(res)] for res in results},
            index=[k for k, _ in summary_rows(results[0])],
        )
        _add_df_sheet(wb, "Summary", summary.reset_index(names="Metric"))

    for res in results:
        _add_df_sheet(wb, f"{res.scenario} - Cash Flow", years_frame(res))
        _add_df_sheet(wb, f"{res.scenario} - Components", components_frame(res))
        _add_df_sheet(wb, f"{res.scenario} - Allocation", allocations_frame(res))

    if not wb.sheetnames:
        wb.create_sheet(title="Summary")
    wb.save(path)


def _add_df_sheet(wb: Workbook, title: str, df: pd.DataFrame) -> None:
    ws = wb.create_sheet(title=title[:31])
    df = df.astype(object).where(pd.notna(df), None)
    for r in dataframe_to_rows(df, index=False, header=True):
        ws.append(r)
    ws.freeze_panes = "A2"


def _safe_filename(s: str) -> str:
    return "".join(ch if ch.isalnum() or ch in ("-", "_") else "_" for ch in s).strip("_")
