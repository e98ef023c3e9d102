"""Configuration classes for Monte Carlo simulation settings.

This module provides the configuration for Monte Carlo simulations of the
forest growth model: the distributions parameters are drawn from, the growth
run shared by every sample, the scalar summary studied, and execution
settings. It supports serialization to and from JSON format for easy
persistence and loading of simulation configurations.

Typical usage example:

    from forest_tools.montecarlo import MonteCarloConfig

    config = MonteCarloConfig.from_json("mc_config.json")
    config.num_samples = 4000
    config.to_json("updated_config.json")
"""

from ..config.space import SpaceConfig
from ..config.growth import GrowthConfig
from forest_tools.utils.summary import Summary

import json
from dataclasses import dataclass, field


@dataclass
class MonteCarloConfig:
    """Configuration class for Monte Carlo simulation settings.

    Attributes:
        space (SpaceConfig): Distributions of the sampled parameters.
            Defaults to normals centred on the reference parameters with a
            standard deviation of 10% of the mean.
        growth (GrowthConfig): Initial condition, time grid, base parameters
            and solver settings shared by all samples.
        summary (Summary): Scalar summary of each trajectory. Defaults to
            the peak forest size.
        num_worker (int): Number of parallel workers to use during simulation
            execution. Defaults to 4.
        num_samples (int): Number of Monte Carlo samples. Defaults to 2000.
        seed (int): Seed of the random number generator. Defaults to 42.

    Example:
        ```python
        config = MonteCarloConfig(num_worker=8, num_samples=1024)
        config.to_json("mc_config.json")

        loaded_config = MonteCarloConfig.from_json("mc_config.json")
        ```
    """

    space: SpaceConfig = field(default_factory=SpaceConfig.around)
    growth: GrowthConfig = field(default_factory=GrowthConfig)
    summary: Summary = field(default_factory=lambda: Summary.from_name("peak"))
    num_worker: int = 4
    num_samples: int = 2000
    seed: int = 42

    @classmethod
    def from_dict(cls, data: dict):
        data = dict(data)
        if "space" in data:
            data["space"] = SpaceConfig.from_dict(data["space"])
        if "growth" in data:
            data["growth"] = GrowthConfig.from_dict(data["growth"])
        if "summary" in data:
            data["summary"] = Summary.from_dict(data["summary"])
        return cls(**data)

    def to_dict(self) -> dict:
        return {
            "space": self.space.to_dict(),
            "growth": self.growth.to_dict(),
            "summary": self.summary.to_dict(),
            "num_worker": self.num_worker,
            "num_samples": self.num_samples,
            "seed": self.seed,
        }

    @classmethod
    def from_json(cls, infile: str):
        """Create a MonteCarloConfig instance from a JSON file.

        Missing keys fall back to their defaults.

        Raises:
            FileNotFoundError: If the specified file does not exist.
            json.JSONDecodeError: If the file contains invalid JSON.
            ValueError: If a distribution or summary name is unknown.
            TypeError: If the loaded data doesn't match the expected structure.
        """
        with open(infile, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def to_json(self, outfile: str):
        """Serialize the configuration to a JSON file.

        The file is opened in exclusive creation mode ("+x") to prevent
        accidental overwrites.

        Raises:
            FileExistsError: If the specified file already exists.
        """
        with open(outfile, "+x") as f:
            json.dump(self.to_dict(), f, indent=4)
