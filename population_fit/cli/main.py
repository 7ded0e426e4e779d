"""Typer CLI entrypoint with structured error handling."""

from __future__ import annotations

import logging
import sys

import typer

from population_fit.cli.commands.binomial import binomial, binomial_mixture
from population_fit.cli.commands.jump_distance import jump_distance
from population_fit.exceptions import (
    ConfigError,
    DegenerateInputError,
    InvalidInputError,
    NoFitError,
)
from population_fit.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Population mixture fitting CLI")


@app.callback()
def _options(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every optimizer attempt")) -> None:
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


app.command()(binomial)
app.command("binomial-mixture")(binomial_mixture)
app.command("jump-distance")(jump_distance)


log = get_logger(__name__, component="cli")


def main() -> None:
    configure_logging(component="cli")
    try:
        app()
    except ConfigError as exc:
        log.error(str(exc))
        sys.exit(1)
    except DegenerateInputError as exc:
        log.error(f"Degenerate input: {exc}")
        sys.exit(3)
    except InvalidInputError as exc:
        log.error(f"Data validation failed: {exc}")
        sys.exit(2)
    except NoFitError as exc:
        log.error(str(exc))
        sys.exit(4)
    except KeyboardInterrupt:
        log.info("Interrupted")
        sys.exit(130)
    except Exception:
        log.exception("Unhandled exception")
        sys.exit(255)


if __name__ == "__main__":
    main()
