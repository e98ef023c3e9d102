"""
# Results Management

This module provides data structures for storing and saving Monte Carlo and
sensitivity analysis results from the forest_tools package.

## Classes

- `StatsResults`: Collection of statistical summaries from Monte Carlo simulations
- `SobolResults`: First-order, total-effect and second-order Sobol indices

## Example Usage

```python
from forest_tools.utils.results import StatsResults

stats = StatsResults({'mean': mean_df, 'ci_low': ci_low_df, 'ci_high': ci_high_df})
stats.save('/results/directory')

sobol_results.to_df()           # one row per parameter
sobol_results.save('/results/directory')
```
"""

from dataclasses import dataclass
import pandas as pd
import numpy as np
import json
import os


class StatsResults(dict[str, pd.DataFrame]):
    """
    Collection of statistical summary DataFrames from Monte Carlo simulations.

    Each key represents a statistic type (e.g. 'mean', 'ci_low') and each
    value is a DataFrame with one row per output time.

    Example:
        ```python
        stats = sim.analyze(results, index_columns=["time"])
        stats.save('/results/monte_carlo/')
        mean_values = stats['mean']
        ```
    """

    def save(self, directory: str):
        """
        Save all statistical DataFrames to CSV files in the specified directory.

        Each statistic is saved as a separate CSV file named after its key.

        Args:
            directory (str): Path to the directory where CSV files will be saved.
                The directory must already exist.
        """
        for stat, data in self.items():
            data.to_csv(os.path.join(directory, f"{stat}.csv"), index=False)


@dataclass
class SobolResults:
    """
    Sobol sensitivity indices of one scalar model output.

    Indices are stored exactly as estimated. Small negative values can
    appear from Monte Carlo noise and are not clipped.

    Attributes:
        names (list[str]): Parameter names, in design column order.
        first_order (np.ndarray): First-order indices S1, shape (k,).
        first_order_conf (np.ndarray): Bootstrap half-width of the S1
            confidence interval, shape (k,).
        total_order (np.ndarray): Total-effect indices ST, shape (k,).
        total_order_conf (np.ndarray): Bootstrap half-width of the ST
            confidence interval, shape (k,).
        second_order (np.ndarray): Second-order indices S2, shape (k, k),
            upper triangle filled.
        second_order_conf (np.ndarray): Half-widths for S2, shape (k, k).
        outputs (np.ndarray): Model output of the N base samples (first
            design matrix), e.g. the peak forest sizes.
        conf_level (float): Confidence level of the intervals.
        num_resamples (int): Number of bootstrap resamples.
    """
    names: list[str]
    first_order: np.ndarray
    first_order_conf: np.ndarray
    total_order: np.ndarray
    total_order_conf: np.ndarray
    second_order: np.ndarray
    second_order_conf: np.ndarray
    outputs: np.ndarray
    conf_level: float
    num_resamples: int

    @property
    def first_order_bounds(self) -> tuple[np.ndarray, np.ndarray]:
        """Lower and upper confidence bounds of S1."""
        return (self.first_order - self.first_order_conf,
                self.first_order + self.first_order_conf)

    @property
    def total_order_bounds(self) -> tuple[np.ndarray, np.ndarray]:
        """Lower and upper confidence bounds of ST."""
        return (self.total_order - self.total_order_conf,
                self.total_order + self.total_order_conf)

    def to_df(self) -> pd.DataFrame:
        """
        Tabulate first-order and total-effect indices.

        Returns:
            pd.DataFrame: One row per parameter with columns S1, S1_conf,
                S1_low, S1_high, ST, ST_conf, ST_low, ST_high.
        """
        s1_low, s1_high = self.first_order_bounds
        st_low, st_high = self.total_order_bounds
        return pd.DataFrame({
            "parameter": self.names,
            "S1": self.first_order,
            "S1_conf": self.first_order_conf,
            "S1_low": s1_low,
            "S1_high": s1_high,
            "ST": self.total_order,
            "ST_conf": self.total_order_conf,
            "ST_low": st_low,
            "ST_high": st_high,
        })

    def second_order_df(self) -> pd.DataFrame:
        """Second-order indices as a (k, k) table labelled by parameter."""
        return pd.DataFrame(self.second_order, index=self.names, columns=self.names)

    def save(self, directory: str):
        """
        Save the index tables and base outputs to `directory`.

        Creates `sobol_indices.csv`, `second_order_indices.csv`,
        `outputs.npy` and `meta.json`. The directory must already exist.
        """
        self.to_df().to_csv(os.path.join(directory, "sobol_indices.csv"), index=False)
        self.second_order_df().to_csv(os.path.join(directory, "second_order_indices.csv"))
        np.save(os.path.join(directory, "outputs.npy"), self.outputs)
        with open(os.path.join(directory, "meta.json"), "w") as f:
            json.dump(
                {
                    "names": self.names,
                    "conf_level": self.conf_level,
                    "num_resamples": self.num_resamples,
                    "num_samples": int(self.outputs.size),
                },
                f,
                indent=4
            )
