"""
# Utilities

This module provides utility functions and classes for working with
trajectory summaries, probability distributions, and results management in
the forest_tools package.

## Components

- **summary**: Scalar summaries of a trajectory (peak, final, mean)
- **distributions**: SciPy distributions and clamped sample matrices
- **results**: Data structures for storing and saving analysis results

## Example Usage

```python
from forest_tools.utils.summary import Summary
from forest_tools.utils.distributions import get_scipy_normal
from forest_tools.utils.results import StatsResults, SobolResults

peak = Summary.from_name('peak', 'C')
normal_dist = get_scipy_normal(loc=250.0, scale=25.0)
```
"""
