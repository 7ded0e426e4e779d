"""CLI validation helpers."""

from __future__ import annotations

from population_fit.exceptions import ConfigValidationError


def require_positive(name: str, value: int | float) -> None:
    if value <= 0:
        raise ConfigValidationError(f"{name} must be > 0")


def parse_column(raw: str | None) -> str | int | None:
    """Column option: a zero-based position when numeric, otherwise a header name."""
    if raw is None or raw == "":
        return None
    return int(raw) if raw.isdigit() else raw


def validate_binomial_inputs(*, min_n: int, max_n: int, restarts: int | None) -> None:
    require_positive("min_n", min_n)
    if max_n < 0:
        raise ConfigValidationError("max_n must be >= 0 (0 searches up to the largest observation)")
    if max_n and max_n < min_n:
        raise ConfigValidationError("max_n must be >= min_n")
    if restarts is not None and restarts < 0:
        raise ConfigValidationError("restarts must be >= 0")


def validate_mixture_inputs(*, max_order: int | None, restarts: int | None, curve_points: int | None = None) -> None:
    if max_order is not None:
        require_positive("max_order", max_order)
    if restarts is not None and restarts < 0:
        raise ConfigValidationError("restarts must be >= 0")
    if curve_points is not None:
        require_positive("curve_points", curve_points)


__all__ = ["parse_column", "require_positive", "validate_binomial_inputs", "validate_mixture_inputs"]
