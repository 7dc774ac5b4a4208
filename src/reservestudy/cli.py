from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .agents import AnalystAgent, PlannerAgent, ReporterAgent
from .config import StudyConfig
from .inputs import StudyConfigError, split_warnings
from .synth import SynthSpec, generate_synthetic_study

app = typer.Typer(add_completion=False, help="Reserve study funding calculator for community associations.")
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log each projected year.")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _load(study: Path) -> StudyConfig:
    try:
        return StudyConfig.from_yaml(study)
    except (StudyConfigError, FileNotFoundError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)


@app.command()
def synth(
    out: Path = typer.Option(..., help="Output directory for the synthetic study."),
    components: int = typer.Option(12, min=1, help="Number of components."),
    start_year: int = typer.Option(2025, help="First projection year."),
    seed: int = typer.Option(42, help="RNG seed."),
):
    path = generate_synthetic_study(out, SynthSpec(start_year=start_year, components=components, seed=seed))
    console.print(f"Wrote synthetic study to {path}")


@app.command()
def validate(
    study: Path = typer.Option(..., exists=True, dir_okay=False, help="Study YAML file."),
):
    """Check every scenario of a study and list errors and warnings."""
    cfg = _load(study)
    failed = False
    for name in cfg.scenarios:
        try:
            errors, warnings = split_warnings(cfg.study_input(name).validate())
        except StudyConfigError as e:
            errors, warnings = [str(e)], []
        for err in errors:
            console.print(f"[red]{name}: {escape(err)}[/red]")
        for w in warnings:
            console.print(f"[yellow]{name}: {escape(w)}[/yellow]")
        if errors:
            failed = True
        else:
            console.print(f"[green]{name}: OK[/green] ({len(cfg.components)} components)")
    if failed:
        raise typer.Exit(code=1)


@app.command()
def run(
    study: Path = typer.Option(..., exists=True, dir_okay=False, help="Study YAML file."),
    out: Path = typer.Option(..., help="Output directory for the study pack."),
    scenario: Optional[str] = typer.Option(None, help="Scenario name (omit to run all scenarios)."),
):
    cfg = _load(study)
    try:
        plan = PlannerAgent().plan(cfg, scenario)
        results = AnalystAgent().run(cfg, plan)
    except StudyConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    ReporterAgent().package(out_dir=out, results=results)

    table = Table(title=cfg.title)
    for col in ("Scenario", "Final Balance", "Min Balance", "Deficit Years", "Funded", "Status"):
        table.add_column(col)
    for res in results:
        if not res.is_success:
            table.add_row(res.scenario, "-", "-", "-", "-", f"[red]{escape(res.error_message or '')}[/red]")
            continue
        table.add_row(
            res.scenario,
            f"${res.final_balance:,.2f}",
            f"${res.minimum_balance:,.2f}",
            str(res.deficit_year_count),
            f"{res.percent_funded}%",
            res.funding_status.value,
        )
    console.print(table)
    console.print(f"Wrote study pack to {out}")
    if any(not r.is_success for r in results):
        raise typer.Exit(code=1)
