import pandas as pd
import numpy as np
import os
import time
import pytest
from forest_tools.model import ForestGrowthModel, Model
from forest_tools.config import GrowthConfig
from forest_tools.errors import IntegrationError, InvalidParameterError
from forest_tools.integrate import integrate
from forest_tools.utils.summary import Summary
import forest_tools.model


def get_model(**growth) -> ForestGrowthModel:
    return ForestGrowthModel.from_config(GrowthConfig(**growth))


model = get_model()


def test_model_inheritance():
    assert issubclass(ForestGrowthModel, Model)


def test_get_objective_returns_callable():
    obj = model.get_objective()
    assert callable(obj)


def test_run_returns_trajectory_on_requested_times():
    out = model.get_objective()()
    assert isinstance(out, pd.DataFrame)
    assert list(out.columns) == ["time", "C"]
    np.testing.assert_array_equal(out["time"].to_numpy(), np.arange(1, 301, dtype=float))
    assert out["C"].iloc[0] == pytest.approx(10.0)


def test_reference_scenario_saturates_at_capacity():
    out = model.get_objective()()
    assert out["C"].iloc[-1] == pytest.approx(250.0, rel=0.01)


def test_trajectory_non_decreasing_until_capacity():
    C = model.get_objective()()["C"].to_numpy()
    rising = C[:-1] < 0.99 * 250.0
    assert np.all(np.diff(C)[rising] >= -1e-6)


def test_threshold_above_capacity_stays_exponential():
    out = model.get_objective()(X={"thresh": 300.0})
    C = out["C"].to_numpy()
    t = out["time"].to_numpy()

    assert C.max() < 300.0
    np.testing.assert_allclose(C, 10.0 * np.exp(0.01 * (t - 1.0)), rtol=1e-4)


def test_run_is_deterministic():
    first = model.get_objective()(X={"r": 0.012, "g": 1.5})
    second = model.get_objective()(X={"r": 0.012, "g": 1.5})
    np.testing.assert_allclose(first["C"], second["C"], atol=1e-9, rtol=0)


def test_run_does_not_mutate_base_parameters():
    model.get_objective()(X={"K": 100.0})
    assert model.run_kwargs["parameters"].K == 250.0


def test_invalid_override_raises():
    with pytest.raises(InvalidParameterError):
        model.get_objective()(X={"K": 0.0})


def test_integration_error_carries_parameters(monkeypatch):

    def failing_integrate(*args, **kwargs):
        raise IntegrationError("solver LSODA failed", time=42.0)

    monkeypatch.setattr(forest_tools.model, "integrate", failing_integrate)

    with pytest.raises(IntegrationError) as excinfo:
        model.get_objective()(X={"g": 3.0})

    assert excinfo.value.time == 42.0
    assert excinfo.value.parameters["g"] == 3.0
    assert "integration" in str(excinfo.value)


def test_evaluate_model_returns_peak():
    out = pd.DataFrame({"time": [1.0, 2.0, 3.0], "C": [10.0, 30.0, 20.0]})
    assert ForestGrowthModel.evaluate_model(out, Summary.from_name("peak")) == 30.0
    assert ForestGrowthModel.evaluate_model(out, Summary.from_name("final")) == 20.0


def test_evaluate_parallel_keeps_input_order():
    X = [{"K": K} for K in (200.0, 260.0, 220.0, 240.0, 210.0)]
    summary = Summary.from_name("peak")

    parallel = model.evaluate_parallel(X, summary, workers=3, progress=False)
    sequential = [summary(model.get_objective()(X=x)) for x in X]

    np.testing.assert_allclose(parallel, sequential, atol=1e-9)
    assert np.argmax(parallel) == 1


def test_run_parallel_returns_trajectories_in_order():
    X = [{"thresh": 300.0}, {}]
    outs = model.run_parallel(X, workers=2, progress=False)
    assert outs[0]["C"].max() < 300.0
    assert outs[1]["C"].iloc[-1] == pytest.approx(250.0, rel=0.01)


def test_parallel_failure_propagates():
    X = [{"K": 250.0}, {"K": 0.0}, {"K": 240.0}]
    with pytest.raises(InvalidParameterError):
        model.evaluate_parallel(X, Summary.from_name("peak"), workers=2, progress=False)


def test_plot_trajectory_saves_figure(tmp_path):
    outfile = os.path.join(tmp_path, "trajectory.png")
    ForestGrowthModel.plot_trajectory(model.get_objective()(), threshold=50, outfile=outfile)
    assert os.path.exists(outfile)


def test_failure_cancels_pending_runs():
    calls = []

    def record(X=None):
        calls.append(X["row"])
        if X["row"] == 0:
            raise InvalidParameterError("row 0 cannot be evaluated")
        time.sleep(0.01)
        return X["row"]

    X = [{"row": i} for i in range(500)]
    with pytest.raises(InvalidParameterError):
        Model._map_parallel(record, X, workers=2, progress=False)

    assert 0 in calls
    assert len(calls) < 50


def test_max_step_reaches_solver(monkeypatch):
    seen = {}

    def recording_integrate(*args, **kwargs):
        seen.update(kwargs)
        return integrate(*args, **kwargs)

    monkeypatch.setattr(forest_tools.model, "integrate", recording_integrate)

    get_model().get_objective()()
    assert seen["max_step"] == np.inf

    out = get_model(max_step=0.5).get_objective()()
    assert seen["max_step"] == 0.5
    assert out["C"].iloc[-1] == pytest.approx(250.0, rel=0.01)
