"""Binomial CLI commands: trial-count search and fixed-N mixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from population_fit.cli.output import binomial_payload, binomial_table, emit, mixture_table
from population_fit.cli.validation import (
    parse_column,
    require_positive,
    validate_binomial_inputs,
    validate_mixture_inputs,
)
from population_fit.config.loader import load_config, merge_overrides
from population_fit.data.loader import load_values
from population_fit.exceptions import NoFitError
from population_fit.fitting.binomial_fitter import BinomialFitter
from population_fit.interfaces.fit_logger import LoggerFitLogger
from population_fit.schema.fit_config import BinomialFitConfig, MixtureSearchConfig
from population_fit.utils.logging import get_logger

log = get_logger(__name__, component="cli_binomial")


def binomial(
    input_path: Path = typer.Argument(..., help="File with one cluster size per row"),
    column: Optional[str] = typer.Option(None, "--column", help="Column name or zero-based position"),
    min_n: int = typer.Option(1, "--min-n", help="Smallest trial count to try"),
    max_n: int = typer.Option(0, "--max-n", help="Largest trial count to try (0 = largest observation)"),
    zero_truncated: bool = typer.Option(False, "--zero-truncated", help="Ignore the unobservable zero class"),
    least_squares: bool = typer.Option(
        False, "--least-squares", help="Fit p by least squares instead of maximum likelihood"
    ),
    restarts: Optional[int] = typer.Option(None, "--restarts", help="Optimizer restarts per trial count"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for reproducible fits"),
    config: Optional[Path] = typer.Option(None, "--config", help="JSON config with a 'binomial' section"),
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    output: Optional[Path] = typer.Option(None, "--output", help="Also write the JSON result here"),
) -> None:
    """Fit a binomial (N, p) distribution to cluster sizes."""

    validate_binomial_inputs(min_n=min_n, max_n=max_n, restarts=restarts)
    settings = merge_overrides(
        load_config(config, "binomial"),
        fit_restarts=restarts,
        seed=seed,
        maximum_likelihood=False if least_squares else None,
    )
    fit_config = BinomialFitConfig.from_dict(settings)
    values = load_values(input_path, parse_column(column))

    fitter = BinomialFitter(fit_config, LoggerFitLogger(log, model="binomial"))
    fit = fitter.fit_binomial(values, min_n=min_n, max_n=max_n, zero_truncated=zero_truncated)
    if fit is None:
        raise NoFitError(f"No binomial fit for {input_path}")

    log.info("binomial command completed", extra={"model": "binomial", "order": fit.n_trials})
    emit(binomial_table(fit, zero_truncated), binomial_payload(fit, zero_truncated), json_output, output)


def binomial_mixture(
    input_path: Path = typer.Argument(..., help="File with one cluster size per row"),
    n_trials: int = typer.Option(..., "--n-trials", help="Trial count shared by all populations"),
    column: Optional[str] = typer.Option(None, "--column", help="Column name or zero-based position"),
    zero_truncated: bool = typer.Option(False, "--zero-truncated", help="Ignore the unobservable zero class"),
    max_order: Optional[int] = typer.Option(None, "--max-order", help="Most populations to try"),
    restarts: Optional[int] = typer.Option(None, "--restarts", help="Optimizer restarts per order"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for reproducible fits"),
    config: Optional[Path] = typer.Option(None, "--config", help="JSON config with a 'mixture' section"),
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    output: Optional[Path] = typer.Option(None, "--output", help="Also write the JSON result here"),
) -> None:
    """Fit a mixture of binomial populations with a fixed trial count."""

    require_positive("n_trials", n_trials)
    validate_mixture_inputs(max_order=max_order, restarts=restarts)
    settings = merge_overrides(load_config(config, "mixture"), max_order=max_order, fit_restarts=restarts, seed=seed)
    mixture_config = MixtureSearchConfig.from_dict(settings)
    values = load_values(input_path, parse_column(column))

    fitter = BinomialFitter(fit_logger=LoggerFitLogger(log, model="binomial_mixture"), mixture_config=mixture_config)
    fit = fitter.fit_binomial_mixture(values, n_trials, zero_truncated=zero_truncated)
    if fit is None:
        raise NoFitError(f"No binomial mixture fit for {input_path}")

    payload = {"model": "binomial_mixture", "n_trials": n_trials, **fit.to_dict()}
    log.info("binomial-mixture command completed", extra={"model": "binomial_mixture", "order": fit.order})
    emit(mixture_table(fit, "p", "Binomial mixture"), payload, json_output, output)


__all__ = ["binomial", "binomial_mixture"]
