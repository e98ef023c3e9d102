"""
# Parameter Space Configuration

This module provides configuration classes for defining the distributions
growth parameters are sampled from in Monte Carlo simulations and
sensitivity analyses.

## Classes

- `SampleSpace`: Container for a distribution name and its parameters
- `SpaceConfig`: Configuration for multiple parameter sampling spaces

## Example Usage

```python
from forest_tools.config.space import SpaceConfig

space_config = SpaceConfig.from_dict({
    'r': ['normal', [0.01, 0.001]],
    'K': ['normal', [250, 25]],
    'g': ['normal', [2, 0.2]],
    'thresh': ['normal', [50, 5]]
})

# Frozen scipy distributions keyed by parameter name
search_space = space_config.get_search_space()
```
"""

from dataclasses import dataclass
from typing import Callable

from forest_tools.growth import GrowthParameters
from forest_tools.utils.distributions import DISTRIBUTIONS


@dataclass
class SampleSpace:
    """
    Container for a probability distribution and its parameters.

    The distribution is stored by name so the space can be written back to
    JSON; it is resolved to a SciPy distribution by `SpaceConfig`.

    Attributes:
        distribution (str): Distribution name, e.g. 'normal'.
        parameters (tuple[float]): Positional parameters of the distribution.
    """
    distribution: str
    parameters: tuple[float]

    def unpack(self):
        """
        Unpack the distribution and parameters.

        Returns:
            tuple: (distribution_name, parameters_tuple).
        """
        return (self.distribution, self.parameters)


class SpaceConfig(dict[str, SampleSpace]):
    """
    Configuration for multiple parameter sampling spaces.

    Inherits from dict[str, SampleSpace] where:
    - Keys are parameter names
    - Values are SampleSpace instances

    Iteration order is the column order of every sample matrix drawn from
    the space.
    """

    @classmethod
    def from_dict(cls, data: dict, mapping: dict[str, Callable] = DISTRIBUTIONS):
        """
        Create a SpaceConfig from configuration data.

        Args:
            data (dict): Configuration data where keys are parameter names and
                values are lists of [distribution_name, parameters].
            mapping (dict[str, Callable], optional): Known distribution names.
                Defaults to the SciPy factories in `DISTRIBUTIONS`.

        Returns:
            SpaceConfig: Configured instance with parameter spaces.

        Raises:
            ValueError: If a distribution type in data is not found in mapping.
        """
        space_config = {}
        for k, v in data.items():
            dist_type = v[0].lower()
            params = v[1]
            if dist_type not in mapping:
                raise ValueError(f"Unknown distribution type: {dist_type}")
            space_config[k] = SampleSpace(
                distribution=dist_type,
                parameters=tuple(float(p) for p in params)
            )
        return cls(space_config)

    @classmethod
    def around(cls, base: GrowthParameters = None, rel_sd: float = 0.1):
        """
        Normal distributions centred on a parameter tuple.

        Args:
            base (GrowthParameters, optional): Means. Defaults to the
                reference parameters.
            rel_sd (float, optional): Standard deviation as a fraction of
                each mean. Defaults to 0.1.
        """
        base = base or GrowthParameters()
        return cls.from_dict({
            name: ["normal", [mean, abs(mean) * rel_sd]]
            for name, mean in base.to_dict().items()
        })

    @property
    def names(self) -> list[str]:
        return list(self.keys())

    def to_dict(self) -> dict:
        return {
            name: [space.distribution, list(space.parameters)]
            for name, space in self.items()
        }

    def get_search_space(self, mapping: dict[str, Callable] = DISTRIBUTIONS):
        """
        Resolve the configuration to frozen SciPy distributions.

        Returns:
            dict: Mapping parameter names to distribution objects exposing
                `ppf` and `rvs`.

        Note:
            Each call creates new distribution instances.
        """
        space = {}
        for param_name, samplespace in self.items():
            dist_name, parameters = samplespace.unpack()
            space[param_name] = mapping[dist_name](*parameters)

        return space
