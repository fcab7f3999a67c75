"""
Tests for the kconfig-style .config loader.
"""

import pytest

from gaclust import InputError
from gaclust.config_loader import load_config
from gaclust.evolution.config import ClusterConfig


def _write(tmp_path, text):
    path = tmp_path / ".config"
    path.write_text(text)
    return str(path)


def test_load_full_config(tmp_path):
    path = _write(tmp_path, """
# GA clustering
CONFIG_K=3
CONFIG_POPULATION_SIZE=40
CONFIG_GENERATIONS=60
CONFIG_CROSSOVER_RATE=0.8
CONFIG_MUTATION_RATE=0.05
CONFIG_ELITISM_FRACTION=0.1
CONFIG_SEED=7
CONFIG_DISTANCE_METHOD="spearman"
CONFIG_AGGREGATION="median"
CONFIG_BLEND_ALPHA=0.3
CONFIG_MUTATION_SHRINK=2
CONFIG_N_JOBS=4
CONFIG_TIMEOUT_S=30
""")
    cfg = load_config(path)

    assert cfg.k == 3
    assert cfg.population_size == 40
    assert cfg.generations == 60
    assert cfg.crossover_rate == pytest.approx(0.8)
    assert cfg.mutation_rate == pytest.approx(0.05)
    assert cfg.elitism_fraction == pytest.approx(0.1)
    assert cfg.elitism_size == 4
    assert cfg.seed == 7
    assert cfg.distance_method == "spearman"
    assert cfg.aggregation == "median"
    assert cfg.blend_alpha == pytest.approx(0.3)
    assert cfg.mutation_shrink == pytest.approx(2.0)
    assert cfg.n_jobs == 4
    assert cfg.timeout_s == pytest.approx(30.0)


def test_defaults_kept_for_missing_keys(tmp_path):
    cfg = load_config(_write(tmp_path, "CONFIG_K=4\n"))
    defaults = ClusterConfig()

    assert cfg.k == 4
    assert cfg.crossover_rate == defaults.crossover_rate
    assert cfg.population_size == defaults.population_size
    assert cfg.seed == 42


def test_base_config_is_overlaid(tmp_path):
    base = ClusterConfig(seed=3, generations=9)
    cfg = load_config(_write(tmp_path, "CONFIG_GENERATIONS=11\n"), base=base)
    assert cfg.seed == 3
    assert cfg.generations == 11


def test_unknown_key_rejected(tmp_path):
    with pytest.raises(InputError, match="CONFIG_POPSIZE"):
        load_config(_write(tmp_path, "CONFIG_POPSIZE=10\n"))


def test_bad_type_rejected(tmp_path):
    with pytest.raises(InputError, match="CONFIG_GENERATIONS"):
        load_config(_write(tmp_path, "CONFIG_GENERATIONS=ten\n"))


def test_validation_can_be_deferred(tmp_path):
    path = _write(tmp_path, "CONFIG_K=1\n")
    with pytest.raises(InputError, match="k"):
        load_config(path)
    assert load_config(path, validate=False).k == 1


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.config"))
