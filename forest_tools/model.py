"""
# Model Interface and Forest Growth Implementation

This module provides the abstract model interface used by the Monte Carlo and
sensitivity analysis tools, and its concrete implementation for the
threshold-switched forest carbon growth model.

## Classes

- `Model`: Abstract base class defining the interface for all models
- `ForestGrowthModel`: Integrates the forest growth law over a time grid

## Key Features

- **Parallel Execution**: Thread pool map over parameter sets, results kept in input order
- **Fail Fast**: A failing run cancels the rest of its batch and the error propagates
- **Scalar Evaluation**: Summaries such as the peak forest size computed inside each worker

## Example Usage

```python
from forest_tools import ForestGrowthModel
from forest_tools.config import GrowthConfig
from forest_tools.utils.summary import Summary

model = ForestGrowthModel.from_config(GrowthConfig())

# Single trajectory with the base parameters
trajectory = model.get_objective()()

# Peak forest size for many parameter sets
peaks = model.evaluate_parallel(
    X=[{'K': 240.0}, {'K': 260.0}],
    summary=Summary.from_name('peak'),
    workers=4
)
```
"""

# Basic data utils
import pandas as pd
import numpy as np
from typing import Callable, Any
from numpy.typing import ArrayLike
from abc import abstractmethod, ABC
from functools import partial

# Logging
import logging

# Plotting
import matplotlib.pyplot as plt

# Growth law and solver
from forest_tools.growth import GrowthParameters, forest_ode
from forest_tools.integrate import integrate
from forest_tools.errors import IntegrationError
from forest_tools.config.growth import GrowthConfig
from forest_tools.utils.summary import Summary

# Parallel runs
from tqdm import tqdm
from concurrent.futures import ThreadPoolExecutor, as_completed


class Model(ABC):
    """
    Abstract base class for simulation models.

    Subclasses implement a single run and its evaluation; batching, ordering
    and failure handling of parallel runs are shared here.

    Attributes:
        run_kwargs (dict): Keyword arguments passed to model execution methods.
        eval_kwargs (dict): Keyword arguments passed to model evaluation methods.
    """
    def __init__(
            self,
            run_kwargs: dict = None,
            eval_kwargs: dict = None,
    ):
        """
        Initialize the Model instance.

        Args:
            run_kwargs (dict, optional): Keyword arguments for model execution.
                Defaults to None.
            eval_kwargs (dict, optional): Keyword arguments for model evaluation.
                Defaults to None.
        """
        self.run_kwargs = run_kwargs or {}
        self.eval_kwargs = eval_kwargs or {}

    @staticmethod
    @abstractmethod
    def run(X: dict[str, Any] = None, *args, **kwargs) -> ArrayLike:
        """
        Execute the model with a single parameter set.

        Args:
            X (dict[str, Any], optional): Dictionary of parameter values.
                Keys are parameter names, values are numeric parameter values.
            *args: Variable length argument list for additional model inputs.
            **kwargs: Arbitrary keyword arguments for model configuration.

        Returns:
            ArrayLike: Model output, e.g. a pandas DataFrame time series.
        """
        pass

    @staticmethod
    @abstractmethod
    def launch_model(*args, **kwargs) -> ArrayLike:
        """
        Low-level model execution method, called by `run`.
        """
        pass

    @staticmethod
    @abstractmethod
    def evaluate_model(*args, **kwargs) -> float:
        """
        Reduce one model output to a scalar.
        """
        pass

    def get_objective(
        self
    ) -> Callable:
        """
        Create a partial function for model execution with predefined kwargs.

        Returns:
            Callable: Partial function with run_kwargs applied to the run method.

        Example:
            ```python
            objective = model.get_objective()
            result = objective(X={'K': 260.0})
            ```
        """
        return partial(
            self.run,
            **self.run_kwargs
        )

    def get_evaluator(self, summary: Summary) -> Callable:
        """
        Create a function mapping one parameter set to one scalar.

        The trajectory is summarised inside the call and not kept.

        Args:
            summary (Summary): Scalar summary applied to each output.

        Returns:
            Callable: `f(X) -> float`.
        """
        objective = self.get_objective()

        def evaluate(X: dict[str, float] = None) -> float:
            return self.evaluate_model(objective(X=X), summary, **self.eval_kwargs)

        return evaluate

    @staticmethod
    def _map_parallel(
        func: Callable,
        X: list[dict[str, float]],
        workers: int = 4,
        progress: bool = True
    ) -> list:
        """
        Apply `func` to every parameter set on a thread pool.

        Results are stored by input index, never by completion order. The
        first failure cancels every run that has not started yet and is
        re-raised once the pool has shut down.

        Args:
            func (Callable): Called as `func(X=x)` for each element.
            X (list[dict[str, float]]): Parameter sets.
            workers (int, optional): Number of worker threads. Defaults to 4.
            progress (bool, optional): Show a tqdm progress bar. Defaults to
                True.

        Returns:
            list: One result per parameter set, in input order.
        """
        N = len(X)
        res = [None for _ in range(N)]  # Ensure that we have an accessible index

        pbar = tqdm(total=N, disable=not progress)

        try:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    executor.submit(func, X=X[i]): i
                    for i in range(N)  # Store corresponding sample number
                }

                for future in as_completed(futures):
                    pbar.update(1)
                    idx = futures[future]
                    try:
                        res[idx] = future.result()
                    except Exception as e:
                        logging.error(f"Run for index {idx} failed: {e}")
                        for pending in futures:
                            pending.cancel()
                        raise
        finally:
            pbar.close()

        return res

    def run_parallel(
        self,
        X: list[dict[str, float]],
        workers: int = 4,
        progress: bool = True
    ) -> list[ArrayLike]:
        """
        Execute the model for multiple parameter sets in parallel.

        Args:
            X (list[dict[str, float]]): Parameter sets.
            workers (int, optional): Number of worker threads. Defaults to 4.
            progress (bool, optional): Show a progress bar. Defaults to True.

        Returns:
            list[ArrayLike]: Model outputs in the same order as `X`.
        """
        return self._map_parallel(self.get_objective(), X, workers, progress)

    def evaluate_parallel(
        self,
        X: list[dict[str, float]],
        summary: Summary,
        workers: int = 4,
        progress: bool = True
    ) -> np.ndarray:
        """
        Run and summarise multiple parameter sets in parallel.

        Args:
            X (list[dict[str, float]]): Parameter sets.
            summary (Summary): Scalar summary of each output.
            workers (int, optional): Number of worker threads. Defaults to 4.
            progress (bool, optional): Show a progress bar. Defaults to True.

        Returns:
            np.ndarray: One value per parameter set, in the same order as `X`.
        """
        values = self._map_parallel(self.get_evaluator(summary), X, workers, progress)
        return np.asarray(values, dtype=float)


class ForestGrowthModel(Model):
    """
    Forest carbon stock simulation driven by the threshold-switched growth law.

    A run applies parameter overrides to the base tuple, validates the
    result, integrates the growth ODE from `c0` over the output times and
    returns a DataFrame with columns `time` and `C`.

    Example:
        ```python
        from forest_tools import ForestGrowthModel
        from forest_tools.config import GrowthConfig

        model = ForestGrowthModel.from_config(GrowthConfig())
        trajectory = model.run(X={'thresh': 300.0}, **model.run_kwargs)
        ```
    """
    def __init__(
            self,
            run_kwargs: dict = None,
            eval_kwargs: dict = None
    ):
        """
        Initialize the ForestGrowthModel instance.

        Args:
            run_kwargs (dict, optional): Keyword arguments for model execution.
                Expected keys include:
                - 'parameters': GrowthParameters base tuple
                - 'c0': float initial carbon stock
                - 'times': array of strictly increasing output times
                - 'method', 'rtol', 'atol', 'max_step': solver settings
            eval_kwargs (dict, optional): Keyword arguments for model
                evaluation. Not used by the built-in summaries.
        """
        super().__init__(run_kwargs=run_kwargs, eval_kwargs=eval_kwargs)

    @classmethod
    def from_config(cls, config: GrowthConfig):
        return cls(run_kwargs=config.run_kwargs(), eval_kwargs={})

    @staticmethod
    def run(
        parameters: GrowthParameters,
        c0: float,
        times: ArrayLike,
        X: dict[str, float] = None,
        **kwargs
    ) -> pd.DataFrame:
        """
        Execute a single forest growth run.

        Args:
            parameters (GrowthParameters): Base parameter tuple.
            c0 (float): Carbon stock at `times[0]`.
            times (ArrayLike): Strictly increasing output times.
            X (dict[str, float], optional): Parameter overrides.
            **kwargs: Solver settings passed to `launch_model`.

        Returns:
            pd.DataFrame: Trajectory with columns `time` and `C`.

        Raises:
            InvalidParameterError: If the resulting parameter tuple is invalid.
            IntegrationError: If the solver fails for this parameter tuple.
        """
        parameters = parameters.with_overrides(X).validate()

        return ForestGrowthModel.launch_model(
            parameters=parameters,
            c0=c0,
            times=times,
            **kwargs
        )

    @staticmethod
    def launch_model(
        parameters: GrowthParameters,
        c0: float,
        times: ArrayLike,
        method: str = "LSODA",
        rtol: float = 1e-6,
        atol: float = 1e-9,
        max_step: float = None
    ) -> pd.DataFrame:
        """
        Integrate the growth law and tabulate the trajectory.

        A `max_step` of None leaves the internal step size unbounded.

        Raises:
            IntegrationError: With the parameter tuple attached.
        """
        try:
            t, y = integrate(
                forest_ode,
                [c0],
                times,
                args=(parameters,),
                method=method,
                rtol=rtol,
                atol=atol,
                max_step=np.inf if max_step is None else max_step
            )
        except IntegrationError as e:
            e.parameters = parameters.to_dict()
            raise

        return pd.DataFrame({"time": t, "C": y[:, 0]})

    @staticmethod
    def evaluate_model(
        output: pd.DataFrame,
        summary: Summary,
        **kwargs
    ) -> float:
        """
        Reduce a trajectory to the configured scalar, e.g. `max(C)`.
        """
        return summary(output)

    @staticmethod
    def plot_trajectory(
        output: pd.DataFrame,
        threshold: float = 50.0,
        outfile: str = None
    ):
        """
        Plot carbon stock over time with a horizontal threshold marker.

        Args:
            output (pd.DataFrame): Trajectory with columns `time` and `C`.
            threshold (float, optional): Biomass marked on the plot.
                Defaults to 50.
            outfile (str, optional): Save the figure here instead of
                showing it.
        """
        fig, ax = plt.subplots(figsize=(10, 6))
        ax.plot(output["time"], output["C"], label="Forest carbon stock")
        ax.axhline(threshold, color="red", linestyle="--", label=f"Threshold ({threshold:g})")
        ax.set_xlabel("Time")
        ax.set_ylabel("C")
        ax.set_title("Forest Growth")
        ax.legend()
        ax.grid(True)
        plt.tight_layout()

        if outfile is None:
            plt.show()
        else:
            logging.info(f"Saving trajectory plot to: {outfile}")
            plt.savefig(outfile)
        plt.close(fig)
