import json

import pytest

from population_fit.config.loader import load_config, merge_overrides
from population_fit.exceptions import ConfigError, ConfigValidationError
from population_fit.schema.fit_config import BinomialFitConfig, MixtureSearchConfig, OptimizerConfig


def test_defaults():
    binomial = BinomialFitConfig()
    assert binomial.fit_restarts == 5
    assert binomial.maximum_likelihood is True
    assert binomial.worse_limit == 3
    mixture = MixtureSearchConfig()
    assert mixture.fit_restarts == 3
    assert mixture.min_fraction == pytest.approx(0.1)
    assert mixture.min_difference == pytest.approx(2.0)
    assert mixture.max_order == 10
    assert mixture.optimizer.diagonal_only == 20
    assert binomial.optimizer.diagonal_only == 0


def test_evaluation_limit_defaults_to_twice_iterations():
    assert OptimizerConfig().evaluation_limit == 4000
    assert OptimizerConfig(max_evaluations=50).evaluation_limit == 50


@pytest.mark.parametrize(
    "kwargs",
    [
        {"fit_restarts": -1},
        {"min_fraction": 1.0},
        {"min_difference": 0.5},
        {"max_order": 0},
        {"rate_decay": 1.0},
        {"population_size_basis": "threads"},
    ],
)
def test_invalid_mixture_settings(kwargs):
    with pytest.raises(ConfigValidationError):
        MixtureSearchConfig(**kwargs)


def test_invalid_optimizer_settings():
    with pytest.raises(ConfigValidationError):
        OptimizerConfig(max_iterations=0)
    with pytest.raises(ConfigValidationError):
        BinomialFitConfig(worse_limit=0)


def test_from_dict_builds_nested_optimizer_and_rejects_unknown_keys():
    cfg = BinomialFitConfig.from_dict({"fit_restarts": 2, "optimizer": {"max_iterations": 100}})
    assert isinstance(cfg.optimizer, OptimizerConfig)
    assert cfg.optimizer.max_iterations == 100
    assert cfg.to_dict()["optimizer"]["max_iterations"] == 100
    with pytest.raises(ConfigValidationError):
        MixtureSearchConfig.from_dict({"max_orders": 3})


def test_load_config_section_and_overrides(tmp_path):
    path = tmp_path / "fit.json"
    path.write_text(json.dumps({"mixture": {"max_order": 4, "seed": 1}}))
    section = load_config(path, "mixture")
    assert section == {"max_order": 4, "seed": 1}
    assert load_config(path, "binomial") == {}
    merged = merge_overrides(section, max_order=None, seed=9)
    assert merged == {"max_order": 4, "seed": 9}


def test_load_config_errors(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.json")
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    with pytest.raises(ConfigValidationError):
        load_config(bad)
