import numpy as np
import os
import pytest
from SALib.analyze import sobol as asobol
from forest_tools import ForestGrowthModel
from forest_tools.sa import (
    SensitivityAnalysis,
    SensitivityAnalysisConfig,
    SensitivityAnalysisProblem,
    saltelli_design
)
from forest_tools.errors import DegenerateVarianceError


problem = SensitivityAnalysisProblem(num_vars=4, names=["r", "K", "g", "thresh"])


def additive_design(N: int = 2000, seed: int = 0):
    rng = np.random.default_rng(seed)
    X1 = rng.random((N, 4))
    X2 = rng.random((N, 4))
    design = saltelli_design(X1, X2)
    return X1, X2, design, design @ np.array([1.0, 2.0, 3.0, 0.0])


def test_design_row_count():
    X1 = np.zeros((2000, 4))
    X2 = np.ones((2000, 4))
    assert saltelli_design(X1, X2).shape == (2000 * 10, 4)


def test_design_block_structure():
    X1, X2, design, _ = additive_design(N=5)
    step = 10

    np.testing.assert_array_equal(design[0::step], X1)
    np.testing.assert_array_equal(design[step - 1::step], X2)
    for j in range(4):
        AB = design[j + 1::step]
        BA = design[j + 5::step]
        np.testing.assert_array_equal(AB[:, j], X2[:, j])
        np.testing.assert_array_equal(np.delete(AB, j, axis=1), np.delete(X1, j, axis=1))
        np.testing.assert_array_equal(BA[:, j], X1[:, j])
        np.testing.assert_array_equal(np.delete(BA, j, axis=1), np.delete(X2, j, axis=1))


def test_design_shape_mismatch():
    with pytest.raises(ValueError):
        saltelli_design(np.zeros((10, 4)), np.zeros((10, 3)))
    with pytest.raises(ValueError):
        saltelli_design(np.zeros(10), np.zeros(10))


def test_additive_model_indices():
    _, _, _, Y = additive_design()
    results = SensitivityAnalysis.analyze(Y, problem, num_resamples=100, seed=1)

    expected = np.array([1.0, 4.0, 9.0, 0.0]) / 14.0
    np.testing.assert_allclose(results.first_order, expected, atol=0.1)
    np.testing.assert_allclose(results.total_order, expected, atol=0.1)
    assert np.all(results.total_order >= results.first_order - 0.05)
    assert results.first_order.sum() <= 1.05
    assert np.argmax(results.first_order) == 2
    assert np.all(np.isfinite(results.first_order_conf))
    assert np.all(results.total_order_conf >= 0)


def test_indices_match_salib_without_clipping():
    _, _, _, Y = additive_design(N=128, seed=3)
    results = SensitivityAnalysis.analyze(Y, problem, num_resamples=50, seed=5)
    si = asobol.analyze(
        problem.to_dict(),
        Y,
        calc_second_order=True,
        num_resamples=50,
        conf_level=0.95,
        print_to_console=False,
        seed=5,
    )

    np.testing.assert_allclose(results.first_order, si['S1'])
    np.testing.assert_allclose(results.total_order, si['ST'])
    np.testing.assert_allclose(results.first_order_conf, si['S1_conf'])


def test_results_table():
    _, _, _, Y = additive_design(N=256)
    results = SensitivityAnalysis.analyze(Y, problem, num_resamples=50, seed=1)
    df = results.to_df()

    assert list(df["parameter"]) == problem.names
    np.testing.assert_allclose(df["S1_high"] - df["S1_low"], 2 * df["S1_conf"])
    assert results.second_order.shape == (4, 4)
    assert results.outputs.shape == (256,)


def test_constant_output_is_degenerate():
    Y = np.full(20 * 10, 250.0)
    with pytest.raises(DegenerateVarianceError) as excinfo:
        SensitivityAnalysis.analyze(Y, problem)
    assert excinfo.value.stage == "index computation"


def test_non_finite_output_is_degenerate():
    _, _, _, Y = additive_design(N=16)
    Y[3] = np.nan
    with pytest.raises(DegenerateVarianceError):
        SensitivityAnalysis.analyze(Y, problem)


def test_output_length_must_match_design():
    with pytest.raises(ValueError):
        SensitivityAnalysis.analyze(np.arange(11, dtype=float), problem)


def test_base_samples_are_seeded_and_clamped():
    config = SensitivityAnalysisConfig(samples=500, seed=7)
    sa = SensitivityAnalysis(ForestGrowthModel.from_config(config.growth), config)

    X1, X2 = sa._get_samples(config.samples)
    X1_again, _ = sa._get_samples(config.samples)

    assert X1.shape == X2.shape == (500, 4)
    assert np.all(X1 >= 0) and np.all(X2 >= 0)
    assert not np.array_equal(X1, X2)
    np.testing.assert_array_equal(X1, X1_again)


def test_forest_growth_end_to_end(tmp_path):
    config = SensitivityAnalysisConfig(samples=64, num_resamples=50, workers=2)
    model = ForestGrowthModel.from_config(config.growth)
    sa = SensitivityAnalysis(model, config)

    results = sa.run(str(tmp_path))

    assert results.names == ["r", "K", "g", "thresh"]
    for values in (results.first_order, results.first_order_conf,
                   results.total_order, results.total_order_conf):
        assert values.shape == (4,)
        assert np.all(np.isfinite(values))

    # Peak forest size is governed by the carrying capacity
    assert np.argmax(results.total_order) == 1

    res_dir = os.path.join(tmp_path, "sa_results")
    plt_dir = os.path.join(tmp_path, "plots")
    for name in ("sobol_indices.csv", "second_order_indices.csv",
                 "model_output.npy", "X1.npy", "X2.npy", "meta.json"):
        assert os.path.exists(os.path.join(res_dir, name))
    assert os.path.exists(os.path.join(plt_dir, "sobol_indices_peak.png"))
    assert np.load(os.path.join(res_dir, "model_output.npy")).shape == (64 * 10,)
