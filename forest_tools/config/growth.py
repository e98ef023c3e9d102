"""
# Growth Run Configuration

This module provides the configuration of a single growth simulation: the
initial carbon stock, the output time grid, the base parameter tuple and the
solver settings. Monte Carlo and sensitivity analysis configurations embed
one so that every run of an experiment shares the same initial condition and
time grid.

## Example Usage

```python
from forest_tools.config.growth import GrowthConfig

config = GrowthConfig()          # C0=10, t=1..300, r=0.01, K=250, g=2, thresh=50
times = config.times()           # array([1., 2., ..., 300.])
config.to_json("growth.json")
```
"""

from dataclasses import dataclass, field
import json

import numpy as np

from forest_tools.growth import GrowthParameters


@dataclass
class GrowthConfig:
    """
    Configuration for one forest growth run.

    Attributes:
        c0 (float): Carbon stock at the first output time. Defaults to 10.
        start (float): First output time. Defaults to 1.
        horizon (int): Number of unit-spaced output times. Defaults to 300,
            i.e. times 1..300.
        parameters (GrowthParameters): Base parameter tuple. Sampled values
            override it per run.
        method (str): `solve_ivp` method. Defaults to "LSODA".
        rtol (float): Relative solver tolerance. Defaults to 1e-6.
        atol (float): Absolute solver tolerance. Defaults to 1e-9.
        max_step (float): Largest internal solver step. Defaults to None,
            no limit.
    """
    c0: float = 10.0
    start: float = 1.0
    horizon: int = 300
    parameters: GrowthParameters = field(default_factory=GrowthParameters)
    method: str = "LSODA"
    rtol: float = 1e-6
    atol: float = 1e-9
    max_step: float = None

    def times(self) -> np.ndarray:
        """Output times `start, start + 1, ..., start + horizon - 1`."""
        return self.start + np.arange(self.horizon, dtype=float)

    def run_kwargs(self) -> dict:
        """Keyword arguments for `ForestGrowthModel.run`."""
        return {
            "parameters": self.parameters,
            "c0": self.c0,
            "times": self.times(),
            "method": self.method,
            "rtol": self.rtol,
            "atol": self.atol,
            "max_step": self.max_step,
        }

    @classmethod
    def from_dict(cls, data: dict):
        data = dict(data)
        if "parameters" in data:
            data["parameters"] = GrowthParameters.from_dict(data["parameters"])
        return cls(**data)

    def to_dict(self) -> dict:
        return {
            "c0": self.c0,
            "start": self.start,
            "horizon": self.horizon,
            "parameters": self.parameters.to_dict(),
            "method": self.method,
            "rtol": self.rtol,
            "atol": self.atol,
            "max_step": self.max_step,
        }

    @classmethod
    def from_json(cls, infile: str):
        """
        Create a GrowthConfig instance from a JSON file.

        Raises:
            FileNotFoundError: If the specified file does not exist.
            json.JSONDecodeError: If the file contains invalid JSON.
            TypeError: If the loaded data doesn't match the expected structure.
        """
        with open(infile, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def to_json(self, outfile: str):
        """
        Serialize the configuration to a JSON file.

        The file is opened in exclusive creation mode ("+x") to prevent
        accidental overwrites.
        """
        with open(outfile, "+x") as f:
            json.dump(self.to_dict(), f, indent=4)
