"""Rich tables and JSON documents for fit results."""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from population_fit.fitting.models import BinomialFit, MixtureFit

console = Console()


def binomial_table(fit: BinomialFit, zero_truncated: bool) -> Table:
    title = "Zero-truncated binomial fit" if zero_truncated else "Binomial fit"
    table = Table(title=title)
    table.add_column("N", justify="right")
    table.add_column("p", justify="right")
    table.add_column("SS", justify="right")
    table.add_column("IC", justify="right")
    table.add_row(
        str(fit.n_trials),
        f"{fit.p:.4f}",
        f"{fit.sum_of_squares:.4g}",
        f"{fit.information_criterion:.4g}",
    )
    return table


def mixture_table(fit: MixtureFit, coefficient_label: str, title: str) -> Table:
    table = Table(title=f"{title} ({fit.order} population{'' if fit.order == 1 else 's'})")
    table.add_column("#", justify="right")
    table.add_column(coefficient_label, justify="right")
    table.add_column("Fraction", justify="right")
    for i, (c, f) in enumerate(zip(fit.coefficients, fit.fractions), start=1):
        table.add_row(str(i), f"{c:.4g}", f"{f:.4f}")
    table.caption = f"SS = {fit.sum_of_squares:.4g}, IC = {fit.information_criterion:.4g}"
    return table


def binomial_payload(fit: BinomialFit, zero_truncated: bool) -> dict:
    return {
        "model": "zero_truncated_binomial" if zero_truncated else "binomial",
        "n_trials": fit.n_trials,
        "p": fit.p,
        "sum_of_squares": fit.sum_of_squares,
        "information_criterion": fit.information_criterion,
    }


def emit(table: Table, payload: dict, json_output: bool, output: Path | None) -> None:
    """Print the table (or JSON to stdout) and optionally save the JSON document."""

    document = json.dumps(payload, indent=2)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(document)
    if json_output:
        typer.echo(document)
    else:
        console.print(table)


__all__ = ["binomial_payload", "binomial_table", "console", "emit", "mixture_table"]
