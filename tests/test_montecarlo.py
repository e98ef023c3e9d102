import numpy as np
import pandas as pd
import os
import pytest
from forest_tools import ForestGrowthModel
from forest_tools.montecarlo import Sim, MonteCarloConfig
from forest_tools.config import SpaceConfig, GrowthConfig
from forest_tools.utils.distributions import sample_space, clamp_non_negative


def get_sim(engine: str = "random", **config) -> Sim:
    config = MonteCarloConfig(**config)
    return Sim(ForestGrowthModel.from_config(config.growth), config, engine=engine)


def test_default_sampling_shape_and_sign():
    sim = get_sim()
    samples = sim._sample_from_space(2000)
    assert samples.shape == (2000, 4)
    assert np.all(samples >= 0)


def test_default_samples_centred_on_reference_values():
    samples = get_sim()._sample_from_space(4000)
    np.testing.assert_allclose(samples.mean(axis=0), [0.01, 250.0, 2.0, 50.0], rtol=0.02)
    np.testing.assert_allclose(samples.std(axis=0), [0.001, 25.0, 0.2, 5.0], rtol=0.1)


def test_clamping_keeps_every_sample():
    space = SpaceConfig.from_dict({"r": ["normal", [0.0, 1.0]]}).get_search_space()
    samples = sample_space(space, 1000, np.random.default_rng(0))

    assert samples.shape == (1000, 1)
    assert np.all(samples >= 0)
    # About half the draws are floored to exactly zero
    assert 400 < np.sum(samples == 0) < 600


def test_clamp_non_negative():
    np.testing.assert_array_equal(clamp_non_negative([-1.0, 0.0, 2.5]), [0.0, 0.0, 2.5])


def test_sampling_is_seeded():
    first = get_sim(seed=3).sample(10)
    second = get_sim(seed=3).sample(10)
    assert first == second
    assert list(first[0].keys()) == ["r", "K", "g", "thresh"]


def test_sobol_engine_requires_power_of_two():
    sim = get_sim(engine="sobol")
    with pytest.raises(ValueError):
        sim.sample(100)
    assert len(sim.sample(128)) == 128


def test_unknown_engine():
    with pytest.raises(ValueError):
        get_sim(engine="grid")


def test_evaluate_returns_one_value_per_sample():
    sim = get_sim(num_worker=2)
    peaks = sim.evaluate(n=20)
    assert peaks.shape == (20,)
    assert np.all(np.isfinite(peaks))
    assert np.all(peaks >= 10.0)


def test_fixed_overrides_apply_to_every_sample():
    sim = get_sim(num_worker=2)
    peaks = sim.evaluate(n=8, X={"K": 200.0})
    np.testing.assert_allclose(peaks, 200.0, rtol=0.01)


def test_analyze_trajectories():
    sim = get_sim(num_worker=2, growth=GrowthConfig(horizon=50))
    results = sim.run(n=12)
    stats = sim.analyze(results)

    assert set(stats.keys()) == {
        "ci_low", "ci_high", "mean", "stddev", "stderr", "min_val", "max_val"
    }
    for df in stats.values():
        assert df.shape == (50, 2)
        np.testing.assert_array_equal(df["time"], np.arange(1, 51, dtype=float))

    assert np.all(stats["ci_low"]["C"] <= stats["mean"]["C"])
    assert np.all(stats["mean"]["C"] <= stats["ci_high"]["C"])
    assert np.all(stats["min_val"]["C"] <= stats["max_val"]["C"])


def test_sequential_run_matches_parallel():
    parallel = get_sim(seed=11, growth=GrowthConfig(horizon=20)).run(n=4)
    sequential = get_sim(seed=11, growth=GrowthConfig(horizon=20)).run(n=4, parallel=False)
    for a, b in zip(parallel, sequential):
        pd.testing.assert_frame_equal(a, b)


def test_describe_and_plots(tmp_path):
    values = np.array([240.0, 250.0, 260.0, 255.0])
    desc = Sim.describe(values)
    assert desc["count"] == 4
    assert desc["max"] == 260.0

    outfile = os.path.join(tmp_path, "box.png")
    Sim.plot_box(values, outfile=outfile)
    assert os.path.exists(outfile)

    sim = get_sim(num_worker=2, growth=GrowthConfig(horizon=30))
    stats = sim.analyze(sim.run(n=5))
    stats.save(str(tmp_path))
    assert os.path.exists(os.path.join(tmp_path, "mean.csv"))

    outfile = os.path.join(tmp_path, "ci.png")
    Sim.plot_ci(stats, outfile=outfile)
    assert os.path.exists(outfile)


def test_zero_samples_is_not_the_default():
    sim = get_sim(num_samples=16)
    assert sim.sample(0) == []
    assert sim.evaluate(n=0).shape == (0,)
    assert len(sim.sample()) == 16
