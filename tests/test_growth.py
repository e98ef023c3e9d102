import numpy as np
import pytest
from forest_tools.growth import GrowthParameters, growth_rate, forest_ode
from forest_tools.errors import InvalidParameterError


params = GrowthParameters(r=0.01, K=250.0, g=2.0, thresh=50.0)


def test_exponential_regime_below_threshold():
    for C in np.linspace(0.0, 49.999, 25):
        assert growth_rate(C, params) == params.r * C


def test_logistic_regime_at_and_above_threshold():
    for C in np.linspace(50.0, 400.0, 25):
        assert growth_rate(C, params) == params.g * C * (1 - C / params.K)


def test_threshold_itself_is_logistic():
    assert growth_rate(50.0, params) == pytest.approx(2.0 * 50.0 * (1 - 50.0 / 250.0))


def test_rate_non_positive_at_or_above_capacity():
    assert growth_rate(250.0, params) == 0.0
    assert growth_rate(300.0, params) < 0.0


def test_forest_ode_ignores_time():
    assert forest_ode(0.0, [10.0], params) == forest_ode(123.4, [10.0], params)
    assert forest_ode(0.0, [10.0], params) == [pytest.approx(0.1)]


def test_names_in_tuple_order():
    assert GrowthParameters.names() == ["r", "K", "g", "thresh"]


def test_with_overrides_returns_new_tuple():
    new = params.with_overrides({"K": 300})
    assert new.K == 300.0
    assert params.K == 250.0
    assert params.with_overrides(None) is params


def test_with_overrides_rejects_unknown_names():
    with pytest.raises(ValueError):
        params.with_overrides({"growth": 1.0})


def test_validate_accepts_clamped_zero_rates_and_high_threshold():
    GrowthParameters(r=0.0, K=250.0, g=0.0, thresh=0.0).validate()
    GrowthParameters(thresh=300.0).validate()


@pytest.mark.parametrize("overrides", [
    {"K": 0.0},
    {"r": -0.01},
    {"g": float("nan")},
    {"thresh": float("inf")},
])
def test_validate_rejects_invalid_parameters(overrides):
    with pytest.raises(InvalidParameterError) as excinfo:
        params.with_overrides(overrides).validate()
    assert excinfo.value.stage == "model evaluation"
    assert "model evaluation" in str(excinfo.value)


def test_from_dict_roundtrip():
    assert GrowthParameters.from_dict(params.to_dict()) == params
