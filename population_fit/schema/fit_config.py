"""Fit configuration schema and validation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Literal, Optional

from population_fit.exceptions import ConfigValidationError

PopulationSizeBasis = Literal["data", "parameters"]


def _known_keys(cls, data: dict) -> dict:
    allowed = {f.name for f in fields(cls)}
    unknown = set(data) - allowed
    if unknown:
        raise ConfigValidationError(f"unknown {cls.__name__} fields: {sorted(unknown)}")
    return dict(data)


@dataclass(slots=True)
class OptimizerConfig:
    """Limits and tolerances shared by the CMA-ES search and the LM refinement."""

    max_iterations: int = 2000
    max_evaluations: Optional[int] = None
    relative_tolerance: float = 1e-6
    absolute_tolerance: float = 1e-10
    diagonal_only: int = 0
    active_cma: bool = True
    local_max_evaluations: int = 3000

    def __post_init__(self) -> None:
        if self.max_iterations <= 0:
            raise ConfigValidationError("max_iterations must be > 0")
        if self.max_evaluations is not None and self.max_evaluations <= 0:
            raise ConfigValidationError("max_evaluations must be positive when set")
        if self.relative_tolerance < 0 or self.absolute_tolerance < 0:
            raise ConfigValidationError("tolerances must be >= 0")
        if self.diagonal_only < 0:
            raise ConfigValidationError("diagonal_only must be >= 0")
        if self.local_max_evaluations <= 0:
            raise ConfigValidationError("local_max_evaluations must be > 0")

    @property
    def evaluation_limit(self) -> int:
        return self.max_evaluations if self.max_evaluations is not None else 2 * self.max_iterations

    @classmethod
    def from_dict(cls, data: dict) -> "OptimizerConfig":
        return cls(**_known_keys(cls, data))

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(slots=True)
class BinomialFitConfig:
    """Settings for the trial-count (N) search of a binomial fit."""

    fit_restarts: int = 5
    maximum_likelihood: bool = True
    worse_limit: int = 3
    seed: Optional[int] = None
    optimizer: OptimizerConfig = field(default_factory=OptimizerConfig)

    def __post_init__(self) -> None:
        if self.fit_restarts < 0:
            raise ConfigValidationError("fit_restarts must be >= 0")
        if self.worse_limit <= 0:
            raise ConfigValidationError("worse_limit must be > 0")
        if self.seed is not None and self.seed < 0:
            raise ConfigValidationError("seed must be >= 0")
        if isinstance(self.optimizer, dict):
            self.optimizer = OptimizerConfig.from_dict(self.optimizer)

    @classmethod
    def from_dict(cls, data: dict) -> "BinomialFitConfig":
        return cls(**_known_keys(cls, data))

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(slots=True)
class MixtureSearchConfig:
    """Settings for the mixture-order search (jump distances, binomial mixtures)."""

    fit_restarts: int = 3
    min_fraction: float = 0.1
    min_difference: float = 2.0
    max_order: int = 10
    fraction_upper: float = 10.0
    rate_upper_multiplier: float = 10.0
    rate_decay: float = 0.1
    population_size_basis: PopulationSizeBasis = "data"
    seed: Optional[int] = None
    optimizer: OptimizerConfig = field(default_factory=lambda: OptimizerConfig(diagonal_only=20))

    def __post_init__(self) -> None:
        if self.fit_restarts < 0:
            raise ConfigValidationError("fit_restarts must be >= 0")
        if not 0 <= self.min_fraction < 1:
            raise ConfigValidationError("min_fraction must be in [0, 1)")
        if self.min_difference < 1:
            raise ConfigValidationError("min_difference must be >= 1")
        if self.max_order < 1:
            raise ConfigValidationError("max_order must be >= 1")
        if self.fraction_upper <= 1:
            raise ConfigValidationError("fraction_upper must be > 1 (the fraction guess)")
        if self.rate_upper_multiplier <= 1:
            raise ConfigValidationError("rate_upper_multiplier must be > 1")
        if not 0 < self.rate_decay < 1:
            raise ConfigValidationError("rate_decay must be in (0, 1)")
        if self.population_size_basis not in {"data", "parameters"}:
            raise ConfigValidationError("invalid population_size_basis")
        if self.seed is not None and self.seed < 0:
            raise ConfigValidationError("seed must be >= 0")
        if isinstance(self.optimizer, dict):
            self.optimizer = OptimizerConfig.from_dict(self.optimizer)

    @classmethod
    def from_dict(cls, data: dict) -> "MixtureSearchConfig":
        return cls(**_known_keys(cls, data))

    def to_dict(self) -> dict:
        return asdict(self)


__all__ = ["BinomialFitConfig", "MixtureSearchConfig", "OptimizerConfig", "PopulationSizeBasis"]
