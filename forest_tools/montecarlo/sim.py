"""Monte Carlo simulation of forest growth under parameter uncertainty.

This module provides the Sim class for drawing parameter tuples from the
configured distributions, running the growth model for each of them, and
summarising the resulting ensemble: per-time quantile bands of the
trajectories and the distribution of a scalar summary such as the peak
forest size.

Uniform draws come from a NumPy generator ('random') or from a
quasi-random engine of `scipy.stats.qmc` ('sobol', 'latin', 'halton') and
are mapped through each parameter's inverse CDF. Negative values are
floored to zero as soon as they are drawn.

Typical usage example:

```python
    from forest_tools import ForestGrowthModel
    from forest_tools.montecarlo import MonteCarloConfig, Sim

    config = MonteCarloConfig()
    model = ForestGrowthModel.from_config(config.growth)
    sim = Sim(model, config)
    peaks = sim.evaluate(n=2000)
    print(sim.describe(peaks))
```
"""

# Model running
from forest_tools import Model
from .config import MonteCarloConfig
from forest_tools.utils.results import StatsResults
from forest_tools.utils.summary import Summary
from forest_tools.utils.distributions import samples_from_uniform

# Data
import pandas as pd
import numpy as np

# Distributions and Sampling
from scipy.stats import qmc

# Typing
from typing import Literal, Callable

# Logging
import logging

# Plotting
import matplotlib.pyplot as plt


class Sim:
    """Monte Carlo simulation runner with configurable sampling engines.

    Attributes:
        space (dict[str, Callable]): Dictionary mapping parameter names to
            their sampling distributions.
        summary (Summary): Default scalar summary of each trajectory.
        model (Model): The model instance to be executed for each sample.
        num_samples (int): Default number of samples.
        workers (int): Default number of parallel workers.
        seed (int): Random seed for reproducibility.
        rng (np.random.Generator): Random number generator instance.
        engine: Quasi-random sampling engine instance, or None when drawing
            plain pseudo-random samples.
    """

    def __init__(
        self,
        model: Model,
        config: MonteCarloConfig,
        engine_kwargs: dict = None,
        engine: Literal['random', 'sobol', 'latin', 'halton'] = 'random',
        **kwargs
    ):
        """Initializes the Sim with model, configuration, and sampling settings.

        Args:
            model (Model): The model instance to run simulations on.
            config (MonteCarloConfig): Configuration object containing the
                parameter space definition and execution settings.
            engine_kwargs (dict, optional): Additional arguments for the
                quasi-random engine. Defaults to None.
            engine (Literal['random', 'sobol', 'latin', 'halton'], optional):
                Source of uniform draws. Defaults to 'random'.
            **kwargs: Additional keyword arguments including:
                seed (int): Random seed. Defaults to `config.seed`.
        """
        self.space: dict[str, Callable] = config.space.get_search_space()
        self.summary: Summary = config.summary
        self.model: Model = model
        self.num_samples: int = config.num_samples
        self.workers: int = config.num_worker

        self.seed: int = kwargs.get("seed", config.seed)
        self.rng = np.random.default_rng(self.seed)
        self.engine = self._get_engine(
            engine,
            d=len(self.space),
            rng=self.rng,
            **(engine_kwargs or {})
        )

    @staticmethod
    def _get_engine(engine: str, **kwargs):
        """Creates and returns the specified sampling engine.

        Args:
            engine (str): One of 'random', 'sobol', 'latin' or 'halton'.
            **kwargs: Arguments passed to the qmc engine constructor.

        Returns:
            qmc.QMCEngine | None: None for 'random'.

        Raises:
            ValueError: If the specified engine type is not supported.
        """
        match engine:
            case 'random':
                return None
            case 'sobol':
                return qmc.Sobol(**kwargs)
            case 'latin':
                return qmc.LatinHypercube(**kwargs)
            case 'halton':
                return qmc.Halton(**kwargs)
            case _:
                raise ValueError(f"Unknown sampling engine: {engine}")

    def _sample_from_space(self, n: int) -> np.ndarray:
        """Generates clamped parameter samples from the search space.

        Args:
            n (int): Number of samples to generate. For the Sobol engine,
                must be a power of 2.

        Returns:
            np.ndarray: Sample matrix with shape (n, dim), columns in the
                order of the search space.

        Raises:
            ValueError: If using the Sobol engine and n is not a power of 2.
        """
        if self.engine is None:
            u = self.rng.random((n, len(self.space)))
        elif isinstance(self.engine, qmc.Sobol):
            if n < 1 or np.log2(n) % 1 != 0:
                raise ValueError(f"Sobol sampling needs a power of 2 samples, got {n}")
            u = self.engine.random_base2(m=int(np.log2(n)))
        else:
            u = self.engine.random(n)

        return samples_from_uniform(self.space, u)

    def sample(self, n: int = None) -> list[dict[str, float]]:
        """Draws n parameter dictionaries.

        Args:
            n (int, optional): Number of samples. Defaults to the configured
                number.

        Returns:
            list[dict[str, float]]: One dictionary per sample.
        """
        n = self.num_samples if n is None else n
        logging.info(f"Drawing {n} parameter samples.")
        samples = self._sample_from_space(n)  # (n, dim)
        names = list(self.space.keys())

        return [
            {name: float(sample[i]) for i, name in enumerate(names)}
            for sample in samples
        ]

    def run(
        self,
        n: int = None,
        parallel: bool = True,
        workers: int = None,
        X: dict[str, float] = None
    ) -> list[pd.DataFrame]:
        """Executes the Monte Carlo simulation and keeps every trajectory.

        Args:
            n (int, optional): Number of samples. Defaults to the configured
                number.
            parallel (bool, optional): Whether to execute model runs in
                parallel. Defaults to True.
            workers (int, optional): Number of parallel workers. Defaults to
                the configured number.
            X (dict[str, float], optional): Fixed parameter values applied to
                every sample. These override sampled values for matching
                parameter names.

        Returns:
            list[pd.DataFrame]: One trajectory per sample.
        """
        samples = self.sample(n)

        if X:  # Apply fixed parameter overrides if provided
            samples = [dict(sample, **X) for sample in samples]

        logging.info("Running model with samples.")
        if parallel:
            return self.model.run_parallel(X=samples, workers=workers or self.workers)

        objective = self.model.get_objective()
        return [objective(X=sample) for sample in samples]

    def evaluate(
        self,
        n: int = None,
        summary: Summary = None,
        workers: int = None,
        X: dict[str, float] = None
    ) -> np.ndarray:
        """Runs the simulation and keeps only one scalar per sample.

        Args:
            n (int, optional): Number of samples.
            summary (Summary, optional): Scalar summary. Defaults to the
                configured one (peak forest size).
            workers (int, optional): Number of parallel workers.
            X (dict[str, float], optional): Fixed parameter overrides.

        Returns:
            np.ndarray: Summary values with shape (n,).
        """
        samples = self.sample(n)

        if X:
            samples = [dict(sample, **X) for sample in samples]

        logging.info("Evaluating model with samples.")
        return self.model.evaluate_parallel(
            X=samples,
            summary=summary or self.summary,
            workers=workers or self.workers
        )

    def analyze(
        self,
        results: list[pd.DataFrame],
        index_columns: list[str] = ("time",)
    ) -> StatsResults:
        """Analyzes simulation results to compute summary statistics.

        Computes, for every output time, the 95% quantile band, mean,
        standard deviation, standard error and extrema of every output
        variable across runs. Index columns (such as time) are copied from
        the first run.

        Args:
            results (list[pd.DataFrame]): Trajectories of equal length.
            index_columns (list[str], optional): Columns shared by all runs.
                Defaults to ("time",).

        Returns:
            StatsResults: DataFrames keyed by ci_low, ci_high, mean, stddev,
                stderr, min_val and max_val.
        """
        columns = results[0].columns  # Assume all results have same format
        data = np.array([result.to_numpy(dtype=float) for result in results])  # N x T x D

        T = data.shape[1]  # Time steps
        D = data.shape[2]  # Variables

        index_columns = set(index_columns)

        stats = {
            "ci_low": np.empty((T, D)),
            "ci_high": np.empty((T, D)),
            "mean": np.empty((T, D)),
            "stddev": np.empty((T, D)),
            "stderr": np.empty((T, D)),
            "min_val": np.empty((T, D)),
            "max_val": np.empty((T, D)),
        }

        for i, output in enumerate(columns):

            # Copy index column data from first result (assumed constant)
            if output in index_columns:

                for key in stats.keys():
                    stats[key][:, i] = data[0, :, i]

            else:
                # Compute statistics across simulation runs (axis=0)
                vals = data[:, :, i]

                stats["ci_low"][:, i] = np.quantile(vals, 0.025, axis=0)
                stats["ci_high"][:, i] = np.quantile(vals, 0.975, axis=0)
                stats["mean"][:, i] = np.mean(vals, axis=0)
                stats["stddev"][:, i] = np.std(vals, axis=0, ddof=1)  # Sample std dev
                stats["stderr"][:, i] = stats["stddev"][:, i] / np.sqrt(vals.shape[0])
                stats["min_val"][:, i] = np.min(vals, axis=0)
                stats["max_val"][:, i] = np.max(vals, axis=0)

        stats_res = {
            key: pd.DataFrame(val, columns=columns)
            for key, val in stats.items()
        }

        return StatsResults(stats_res)

    @staticmethod
    def describe(values: np.ndarray, name: str = "peak") -> pd.Series:
        """Distribution summary of a scalar output, as drawn by a box plot.

        Returns:
            pd.Series: count, mean, std, min, 25%, 50%, 75% and max.
        """
        return pd.Series(np.asarray(values, dtype=float), name=name).describe()

    @staticmethod
    def plot_ci(stats: StatsResults, output: str = "C", outfile: str = None):
        """Plots the mean and 95% band of one output over time.

        Args:
            stats (StatsResults): Result of `analyze`.
            output (str, optional): Output column. Defaults to "C".
            outfile (str, optional): Save the figure here instead of showing
                it.
        """
        t = stats["mean"]["time"] if "time" in stats["mean"] else range(len(stats["mean"]))

        fig = plt.figure()
        plt.plot(t, stats["mean"][output], label="Mean")
        plt.fill_between(t, stats["ci_low"][output], stats["ci_high"][output],
                         color="lightblue", alpha=0.5, label="95% CI")
        plt.title(f"95% Confidence Interval for {output}")
        plt.xlabel("Time")
        plt.ylabel(output)
        plt.legend()

        if outfile is None:
            plt.show()
        else:
            plt.savefig(outfile)
        plt.close(fig)

    @staticmethod
    def plot_box(values: np.ndarray, label: str = "Peak forest size", outfile: str = None):
        """Box plot of a scalar output across samples."""
        fig = plt.figure(figsize=(6, 6))
        plt.boxplot(np.asarray(values, dtype=float))
        plt.xticks([1], [label])
        plt.ylabel("C")
        plt.grid(True)
        plt.tight_layout()

        if outfile is None:
            plt.show()
        else:
            plt.savefig(outfile)
        plt.close(fig)
