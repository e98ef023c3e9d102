"""
# Sampling Distributions

This module provides the SciPy distributions parameters are drawn from and
the helpers that turn them into sample matrices. Samples are clamped to be
non-negative as soon as they are drawn, before any recombination, since
every growth parameter is a rate, a capacity or a threshold.

## Functions

- `get_scipy_truncated_normal`: Create SciPy truncated normal distribution
- `get_scipy_normal`: Create SciPy normal distribution
- `get_scipy_uniform`: Create SciPy uniform distribution
- `clamp_non_negative`: Floor negative samples to zero
- `sample_space`: Draw an `(n, k)` sample matrix from a search space

## Example Usage

```python
import numpy as np
from forest_tools.utils.distributions import get_scipy_normal, sample_space

space = {'r': get_scipy_normal(0.01, 0.001), 'K': get_scipy_normal(250, 25)}
X = sample_space(space, n=2000, rng=np.random.default_rng(42))  # (2000, 2)
```
"""

from scipy.stats import (
    truncnorm,
    norm,
    uniform
)
import numpy as np


def get_scipy_truncated_normal(loc=0.0, scale=1.0, a=1e-12, b=1e12):
    """
    Create a SciPy truncated normal distribution.

    Args:
        loc (float, optional): Mean of the underlying normal. Defaults to 0.0.
        scale (float, optional): Standard deviation. Defaults to 1.0.
        a (float, optional): Lower truncation bound. Defaults to 1e-12.
        b (float, optional): Upper truncation bound. Defaults to 1e12.

    Returns:
        scipy.stats.truncnorm: Configured truncated normal distribution.
    """
    a_scaled = (a - loc) / scale
    b_scaled = (b - loc) / scale
    return truncnorm(a=a_scaled, b=b_scaled, loc=loc, scale=scale)


def get_scipy_normal(loc=0.0, scale=1.0):
    """
    Create a SciPy normal distribution.

    Args:
        loc (float, optional): Mean of the distribution. Defaults to 0.0.
        scale (float, optional): Standard deviation. Defaults to 1.0.

    Returns:
        scipy.stats.norm: Configured normal distribution.
    """
    return norm(loc=loc, scale=scale)


def get_scipy_uniform(a=0.0, b=1.0):
    """
    Create a SciPy uniform distribution over [a, b].

    Note:
        SciPy's uniform distribution is parameterized as uniform(loc, scale)
        where scale = b - a, so we transform the [a, b] interface accordingly.
    """
    return uniform(loc=a, scale=b - a)


DISTRIBUTIONS = {
    "normal": get_scipy_normal,
    "truncnorm": get_scipy_truncated_normal,
    "uniform": get_scipy_uniform
}
"""Distribution names accepted in configuration files."""


def clamp_non_negative(samples: np.ndarray) -> np.ndarray:
    """Floor negative values to zero. Shape and element count are preserved."""
    return np.maximum(np.asarray(samples, dtype=float), 0.0)


def sample_space(space: dict, n: int, rng: np.random.Generator, clamp: bool = True) -> np.ndarray:
    """
    Draw `n` independent samples from every distribution of a search space.

    Args:
        space (dict): Parameter name to frozen SciPy distribution. Column
            order of the result follows the dictionary order.
        n (int): Number of samples.
        rng (np.random.Generator): Source of randomness.
        clamp (bool, optional): Floor negative draws to zero. Defaults to
            True.

    Returns:
        np.ndarray: Sample matrix with shape (n, len(space)).
    """
    u = rng.random((n, len(space)))
    return samples_from_uniform(space, u, clamp=clamp)


def samples_from_uniform(space: dict, u: np.ndarray, clamp: bool = True) -> np.ndarray:
    """
    Map uniform samples in [0, 1) through each distribution's inverse CDF.

    Args:
        space (dict): Parameter name to frozen SciPy distribution.
        u (np.ndarray): Uniform samples with shape (n, len(space)).
        clamp (bool, optional): Floor negative values to zero. Defaults to
            True.

    Returns:
        np.ndarray: Sample matrix with shape (n, len(space)).
    """
    samples = np.column_stack([
        dist.ppf(u[:, i]) for i, dist in enumerate(space.values())
    ])  # (n, dim)

    if clamp:
        samples = clamp_non_negative(samples)

    return samples
