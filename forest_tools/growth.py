"""
# Forest Growth Law

Threshold-switched growth of forest carbon stock `C`:

- below `thresh` the stand grows exponentially, `dC/dt = r * C`
- at or above `thresh` growth becomes logistic, `dC/dt = g * C * (1 - C / K)`

In the logistic regime a stock at or above `K` gets a non-positive rate, so
the trajectory saturates (or relaxes back) towards the carrying capacity.

## Example Usage

```python
from forest_tools.growth import GrowthParameters, growth_rate

params = GrowthParameters(r=0.01, K=250.0, g=2.0, thresh=50.0)
growth_rate(10.0, params)   # 0.1, exponential regime
growth_rate(100.0, params)  # 120.0, logistic regime
```
"""

from dataclasses import dataclass, asdict, fields, replace
import numpy as np

from forest_tools.errors import InvalidParameterError


@dataclass(frozen=True)
class GrowthParameters:
    """
    Immutable parameter tuple of the growth law.

    Attributes:
        r (float): Exponential growth rate used below the threshold.
        K (float): Carrying capacity of the logistic regime.
        g (float): Logistic growth rate used at or above the threshold.
        thresh (float): Biomass at which the regime switches.
    """
    r: float = 0.01
    K: float = 250.0
    g: float = 2.0
    thresh: float = 50.0

    @staticmethod
    def names() -> list[str]:
        """Parameter names in tuple order."""
        return [f.name for f in fields(GrowthParameters)]

    @classmethod
    def from_dict(cls, data: dict):
        unknown = set(data) - set(cls.names())
        if unknown:
            raise ValueError(f"Unknown growth parameters: {sorted(unknown)}")
        return cls(**{k: float(v) for k, v in data.items()})

    def to_dict(self) -> dict[str, float]:
        return asdict(self)

    def with_overrides(self, X: dict[str, float] = None) -> "GrowthParameters":
        """
        Return a copy with the values in `X` substituted.

        Args:
            X (dict[str, float], optional): Parameter overrides keyed by name.

        Returns:
            GrowthParameters: New tuple, `self` is left untouched.

        Raises:
            ValueError: If `X` names a parameter the growth law does not have.
        """
        if not X:
            return self
        unknown = set(X) - set(self.names())
        if unknown:
            raise ValueError(f"Unknown growth parameters: {sorted(unknown)}")
        return replace(self, **{k: float(v) for k, v in X.items()})

    def validate(self) -> "GrowthParameters":
        """
        Check that the growth law is defined for every reachable state.

        Zero rates are accepted (clamped samples may produce them), the
        carrying capacity is not, since the logistic term divides by it.
        A threshold above `K` is also accepted.

        Returns:
            GrowthParameters: `self`, for chaining.

        Raises:
            InvalidParameterError: If a value is non-finite or negative, or
                if `K` is not strictly positive.
        """
        values = self.to_dict()
        for name, value in values.items():
            if not np.isfinite(value):
                raise InvalidParameterError(f"{name} is not finite", values)
            if value < 0:
                raise InvalidParameterError(f"{name} is negative", values)
        if self.K <= 0:
            raise InvalidParameterError("carrying capacity K must be positive", values)
        return self


def growth_rate(C: float, parameters: GrowthParameters) -> float:
    """
    Instantaneous rate of change of the carbon stock.

    Args:
        C (float): Current carbon stock.
        parameters (GrowthParameters): Growth law parameters.

    Returns:
        float: `dC/dt`.
    """
    if C < parameters.thresh:
        return parameters.r * C
    return parameters.g * C * (1 - C / parameters.K)


def forest_ode(t, y, parameters: GrowthParameters):
    """Right-hand side in solver form, `fun(t, y, *args)`. Time-invariant."""
    return [growth_rate(y[0], parameters)]
