"""Jump-distance CLI command."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from population_fit.cli.output import emit, mixture_table
from population_fit.cli.validation import parse_column, validate_mixture_inputs
from population_fit.config.loader import load_config, merge_overrides
from population_fit.data.curve_writer import CsvCurveLogger
from population_fit.data.loader import load_values
from population_fit.exceptions import NoFitError
from population_fit.fitting.jump_distance_analysis import JumpDistanceAnalysis
from population_fit.interfaces.fit_logger import LoggerFitLogger
from population_fit.schema.fit_config import MixtureSearchConfig
from population_fit.utils.logging import get_logger

log = get_logger(__name__, component="cli_jump_distance")


def jump_distance(
    input_path: Path = typer.Argument(..., help="File with one mean squared jump distance (um^2/s) per row"),
    column: Optional[str] = typer.Option(None, "--column", help="Column name or zero-based position"),
    max_order: Optional[int] = typer.Option(None, "--max-order", help="Most populations to try"),
    min_fraction: Optional[float] = typer.Option(None, "--min-fraction", help="Smallest accepted population fraction"),
    min_difference: Optional[float] = typer.Option(
        None, "--min-difference", help="Smallest accepted ratio between adjacent coefficients"
    ),
    restarts: Optional[int] = typer.Option(None, "--restarts", help="Optimizer restarts per order"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for reproducible fits"),
    config: Optional[Path] = typer.Option(None, "--config", help="JSON config with a 'mixture' section"),
    curves: Optional[Path] = typer.Option(None, "--curves", help="Directory for sampled fit curves (CSV)"),
    curve_points: int = typer.Option(300, "--curve-points", help="Intervals per sampled curve"),
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    output: Optional[Path] = typer.Option(None, "--output", help="Also write the JSON result here"),
) -> None:
    """Fit diffusion populations to jump distances."""

    validate_mixture_inputs(max_order=max_order, restarts=restarts, curve_points=curve_points)
    settings = merge_overrides(
        load_config(config, "mixture"),
        max_order=max_order,
        min_fraction=min_fraction,
        min_difference=min_difference,
        fit_restarts=restarts,
        seed=seed,
    )
    mixture_config = MixtureSearchConfig.from_dict(settings)
    values = load_values(input_path, parse_column(column))

    curve_logger = CsvCurveLogger(curves, curve_points) if curves is not None else None
    analysis = JumpDistanceAnalysis(mixture_config, LoggerFitLogger(log, model="jump_distance"), curve_logger)
    fit = analysis.fit_jump_distances(values)
    if fit is None:
        raise NoFitError(f"No jump distance fit for {input_path}")

    payload = {"model": "jump_distance", **fit.to_dict()}
    if curve_logger is not None:
        payload["curves"] = [str(p) for p in curve_logger.written]
    log.info("jump-distance command completed", extra={"model": "jump_distance", "order": fit.order})
    emit(mixture_table(fit, "D (um^2/s)", "Jump distance fit"), payload, json_output, output)


__all__ = ["jump_distance"]
