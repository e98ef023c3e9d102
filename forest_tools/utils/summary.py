"""
# Trajectory Summaries

This module provides scalar summaries of a model trajectory. A summary turns
one simulated time series into the single number a Monte Carlo run or a
sensitivity analysis studies, e.g. the peak forest size over the horizon.

## Functions

- `peak`: Largest value of the series
- `final`: Value at the last output time
- `time_mean`: Mean over the output times

## Classes

- `Summary`: Base summary with name, output column and reducing function
- `Peak`, `Final`, `TimeMean`: Specific summaries

## Example Usage

```python
from forest_tools.utils.summary import Summary

summary = Summary.from_name("peak", "C")
peak_size = summary(trajectory)  # max of trajectory["C"]
```
"""

from dataclasses import dataclass
from typing import Callable

import numpy as np
import pandas as pd


def peak(values) -> float:
    """
    Largest value of the series.

    The maximum may sit at the last output time (monotonically increasing
    trajectory) or in the interior (overshoot); both are reported the same
    way.
    """
    return float(np.max(values))


def final(values) -> float:
    """Value at the last output time."""
    return float(np.asarray(values)[-1])


def time_mean(values) -> float:
    """Mean over the output times."""
    return float(np.mean(values))


@dataclass
class Summary:
    """
    Scalar summary of one model output column.

    Attributes:
        name (str): Summary identifier, also used to label results.
        output_name (str): Trajectory column the summary reads.
        func (Callable): Reduces a 1-D array of values to a float.

    Example:
        ```python
        summary = Summary(name="peak", output_name="C", func=peak)
        value = summary(trajectory)
        ```
    """
    name: str
    output_name: str
    func: Callable

    def __call__(self, output: pd.DataFrame) -> float:
        return self.func(output[self.output_name].to_numpy(dtype=float))

    @staticmethod
    def from_name(summary_name: str, output_name: str = "C") -> "Summary":
        """
        Create a Summary instance from string identifiers.

        Args:
            summary_name (str): Type of summary. Supported values:
                - 'peak': maximum over the horizon
                - 'final': value at the last output time
                - 'mean': mean over the output times
            output_name (str, optional): Column to summarise. Defaults to "C".

        Returns:
            Summary: Appropriate summary subclass instance.

        Raises:
            ValueError: If summary_name is not recognized.
        """
        mapping = {
            "peak": Peak,
            "max": Peak,
            "final": Final,
            "mean": TimeMean,
        }

        summary_cls = mapping.get(summary_name.lower())
        if summary_cls is None:
            raise ValueError(f"Unknown summary name: {summary_name}")

        return summary_cls(output_name)

    @classmethod
    def from_dict(cls, data: dict) -> "Summary":
        return cls.from_name(data["name"], data.get("output_name", "C"))

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "output_name": self.output_name}


class Peak(Summary):
    """Peak value over the horizon, `max(C)`."""
    def __init__(self, output_name: str = "C", name: str = "peak"):
        super().__init__(name=name, output_name=output_name, func=peak)


class Final(Summary):
    """Value at the end of the horizon."""
    def __init__(self, output_name: str = "C", name: str = "final"):
        super().__init__(name=name, output_name=output_name, func=final)


class TimeMean(Summary):
    """Mean over the output times."""
    def __init__(self, output_name: str = "C", name: str = "mean"):
        super().__init__(name=name, output_name=output_name, func=time_mean)
