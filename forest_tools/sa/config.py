"""Configuration classes for sensitivity analysis settings.

This module provides configuration classes for managing sensitivity analysis
parameters including the problem definition handed to SALib, the sampling
distributions, the growth run shared by all design rows and execution
settings. It supports serialization to and from JSON format for easy
persistence and loading of sensitivity analysis configurations.

Typical usage example:

    from forest_tools.sa import SensitivityAnalysisConfig

    config = SensitivityAnalysisConfig.from_json("sa_config.json")
    config.samples = 4000
    config.to_json("updated_sa_config.json")
"""

from dataclasses import dataclass, asdict, field
from ..config.space import SpaceConfig
from ..config.growth import GrowthConfig
from forest_tools.utils.summary import Summary
import json


@dataclass
class SensitivityAnalysisProblem:
    """Problem definition for sensitivity analysis using SALib.

    Attributes:
        num_vars (int): Number of variables (parameters) in the problem.
            Must match the length of names.
        names (list[str]): Parameter names, in design matrix column order.

    Example:
        ```python
        problem = SensitivityAnalysisProblem(
            num_vars=4,
            names=["r", "K", "g", "thresh"]
        )
        problem_dict = problem.to_dict()
        ```
    """

    num_vars: int
    names: list[str]

    @classmethod
    def from_space(cls, space: SpaceConfig):
        return cls(num_vars=len(space), names=space.names)

    def to_dict(self):
        """Convert the problem definition to the dictionary SALib expects."""
        return asdict(self)


@dataclass
class SensitivityAnalysisConfig:
    """Configuration class for sensitivity analysis execution settings.

    Attributes:
        space (SpaceConfig): Distributions both sample matrices are drawn
            from. Defaults to normals centred on the reference parameters
            with a standard deviation of 10% of the mean.
        growth (GrowthConfig): Initial condition, time grid, base parameters
            and solver settings of every design row.
        summary (Summary): Scalar output analysed. Defaults to the peak
            forest size over the horizon.
        workers (int): Number of parallel workers used to evaluate the
            design. Defaults to 4.
        samples (int): Rows N of each base sample matrix. The design has
            N * (2k + 2) rows. Defaults to 2000.
        num_resamples (int): Bootstrap resamples for the confidence
            intervals. Defaults to 300.
        conf_level (float): Confidence level of the intervals. Defaults to
            0.95.
        seed (int): Seed for sampling and bootstrap. Defaults to 42.

    Example:
        ```python
        config = SensitivityAnalysisConfig(samples=1024, workers=8)
        config.problem.names  # ['r', 'K', 'g', 'thresh']
        ```
    """

    space: SpaceConfig = field(default_factory=SpaceConfig.around)
    growth: GrowthConfig = field(default_factory=GrowthConfig)
    summary: Summary = field(default_factory=lambda: Summary.from_name("peak"))
    workers: int = 4
    samples: int = 2000
    num_resamples: int = 300
    conf_level: float = 0.95
    seed: int = 42

    @property
    def problem(self) -> SensitivityAnalysisProblem:
        return SensitivityAnalysisProblem.from_space(self.space)

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
            "workers": self.workers,
            "samples": self.samples,
            "num_resamples": self.num_resamples,
            "conf_level": self.conf_level,
            "seed": self.seed,
        }

    @classmethod
    def from_json(cls, infile: str):
        """Create a SensitivityAnalysisConfig instance from a JSON file.

        Missing keys fall back to their defaults.

        Raises:
            FileNotFoundError: If the specified file does not exist.
            json.JSONDecodeError: If the file contains invalid JSON.
            ValueError: If a distribution or summary name is unknown.
            TypeError: If the loaded data doesn't match the expected structure.

        Example:
            ```python
            config = SensitivityAnalysisConfig.from_json("sa_config.json")
            print(f"Running SA with {config.samples} samples using {config.workers} workers")
            ```
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
