"""Sensitivity analysis implementation using Sobol indices.

This module provides global variance-based sensitivity analysis of a scalar
model output (by default the peak forest size over the horizon) with
respect to the sampled growth parameters.

Two independent sample matrices X1 and X2 (N x k) are drawn from the
configured distributions and combined into a Saltelli design of
N * (2k + 2) rows: per base row, X1, then X1 with column i taken from X2
for every i, then X2 with column i taken from X1 for every i, then X2.
Every row is evaluated independently and the indices are estimated with
SALib, including bootstrap confidence intervals over the N base rows.

Features:
    - Saltelli design built from caller-supplied sample matrices
    - First-order, total-effect and second-order index computation
    - Bootstrap confidence intervals
    - Parallel evaluation of the design with fail-fast cancellation
    - Automated visualization and result saving

Notes:
    - Indices are reported as estimated. Negative first-order values can
      appear from Monte Carlo noise when N is small relative to k.

References:
    - Saltelli, A., et al. (2010). Variance based sensitivity analysis of
      model output. Design and estimator for the total sensitivity index
    - Sobol, I.M. (2001). Global sensitivity indices for nonlinear mathematical models

Typical usage example:

    from forest_tools import ForestGrowthModel
    from forest_tools.sa import SensitivityAnalysis, SensitivityAnalysisConfig

    config = SensitivityAnalysisConfig()
    model = ForestGrowthModel.from_config(config.growth)
    sa = SensitivityAnalysis(model, config)
    results = sa.run("output_directory")
    print(results.to_df())
"""

# Model and config
from ..model import Model
from .config import SensitivityAnalysisConfig, SensitivityAnalysisProblem
from ..errors import DegenerateVarianceError
from ..utils.distributions import sample_space
from ..utils.results import SobolResults

# SALib
from SALib.analyze import sobol as asobol

# Plotting
import matplotlib.pyplot as plt

# Logging
import logging

# Data and saving
import numpy as np
from numpy.typing import ArrayLike
import os


def saltelli_design(X1: ArrayLike, X2: ArrayLike) -> np.ndarray:
    """Combine two base sample matrices into a Saltelli design.

    Args:
        X1 (ArrayLike): First base matrix A, shape (N, k).
        X2 (ArrayLike): Second base matrix B, shape (N, k).

    Returns:
        np.ndarray: Design with shape (N * (2k + 2), k). Rows are grouped in
            blocks of 2k + 2 per base row: A, AB_1..AB_k, BA_1..BA_k, B,
            where AB_i is A with column i from B and BA_i is B with column i
            from A.

    Raises:
        ValueError: If the matrices are not two-dimensional with equal shape.
    """
    A = np.asarray(X1, dtype=float)
    B = np.asarray(X2, dtype=float)
    if A.ndim != 2 or A.shape != B.shape:
        raise ValueError(
            f"X1 and X2 must be 2-D arrays of the same shape, got {A.shape} and {B.shape}"
        )

    N, D = A.shape
    step = 2 * D + 2
    design = np.empty((N * step, D))

    design[0::step] = A
    design[step - 1::step] = B
    for j in range(D):
        AB = A.copy()
        AB[:, j] = B[:, j]
        design[j + 1::step] = AB

        BA = B.copy()
        BA[:, j] = A[:, j]
        design[j + 1 + D::step] = BA

    return design


class SensitivityAnalysis:
    """Global sensitivity analysis using Sobol indices.

    Attributes:
        model (Model): The model instance to analyze. Must implement
            evaluate_parallel for design evaluation.
        config (SensitivityAnalysisConfig): Configuration object containing
            sampling distributions, summary and execution parameters.

    Example:
        ```python
        sa = SensitivityAnalysis(model, config)
        results = sa.run("results/")
        results.first_order  # S1 per parameter
        ```
    """

    def __init__(
        self,
        model: Model,
        config: SensitivityAnalysisConfig,
    ):
        """Initialize the SensitivityAnalysis with model and configuration.

        Args:
            model (Model): The model instance to perform sensitivity analysis on.
            config (SensitivityAnalysisConfig): Configuration containing the
                sampling space, summary and execution parameters.
        """
        self.model = model
        self.config = config

    def _get_samples(
        self,
        n_samples: int,
        res_dir: str = None
    ) -> tuple[np.ndarray, np.ndarray]:
        """Draw the two independent base sample matrices.

        Both matrices come from one seeded generator, one after the other,
        and are clamped to non-negative values before they are combined.

        Args:
            n_samples (int): Rows N of each matrix.
            res_dir (str, optional): If given, the matrices are saved there
                as X1.npy and X2.npy.

        Returns:
            tuple[np.ndarray, np.ndarray]: X1 and X2, each (N, k).
        """
        logging.info("Drawing base sample matrices.")
        rng = np.random.default_rng(self.config.seed)
        space = self.config.space.get_search_space()

        X1 = sample_space(space, n_samples, rng)
        X2 = sample_space(space, n_samples, rng)

        if res_dir is not None:
            np.save(os.path.join(res_dir, "X1.npy"), X1)
            np.save(os.path.join(res_dir, "X2.npy"), X2)

        return X1, X2

    def evaluate(self, design: np.ndarray, names: list[str]) -> np.ndarray:
        """Evaluate the configured summary for every design row.

        Args:
            design (np.ndarray): Parameter rows, columns ordered as `names`.
            names (list[str]): Parameter names of the design columns.

        Returns:
            np.ndarray: One output per row, in row order.
        """
        X = [
            {name: float(val) for name, val in zip(names, row)}
            for row in design
        ]
        return self.model.evaluate_parallel(
            X=X,
            summary=self.config.summary,
            workers=self.config.workers
        )

    @staticmethod
    def analyze(
        Y: ArrayLike,
        problem: SensitivityAnalysisProblem,
        num_resamples: int = 300,
        conf_level: float = 0.95,
        seed: int = None
    ) -> SobolResults:
        """Compute Sobol indices from the outputs of a Saltelli design.

        Args:
            Y (ArrayLike): Model outputs, one per row of `saltelli_design`,
                in row order.
            problem (SensitivityAnalysisProblem): Parameter names and count.
            num_resamples (int, optional): Bootstrap resamples. Defaults to
                300.
            conf_level (float, optional): Confidence level. Defaults to 0.95.
            seed (int, optional): Seed of the bootstrap resampling.

        Returns:
            SobolResults: Indices as estimated (not clipped).

        Raises:
            ValueError: If the length of Y does not match a design for
                `problem.num_vars` parameters.
            DegenerateVarianceError: If the outputs are non-finite, if all
                base outputs are identical, or if the estimates come out
                non-finite.
        """
        Y = np.asarray(Y, dtype=float).ravel()
        D = problem.num_vars
        step = 2 * D + 2

        if Y.size == 0 or Y.size % step != 0:
            raise ValueError(
                f"Expected a multiple of {step} outputs for {D} parameters, got {Y.size}"
            )
        if not np.all(np.isfinite(Y)):
            raise DegenerateVarianceError("model outputs contain non-finite values")

        # Both estimators divide by the variance of the base outputs
        base = np.r_[Y[0::step], Y[step - 1::step]]
        if np.all(base == base[0]):
            raise DegenerateVarianceError(
                f"all {base.size} base evaluations are identical ({base[0]:g}), "
                "output variance is zero"
            )

        logging.info("Computing Sobol indices.")
        si = asobol.analyze(
            problem.to_dict(),
            Y,
            calc_second_order=True,
            num_resamples=num_resamples,
            conf_level=conf_level,
            print_to_console=False,
            seed=seed,
        )

        results = SobolResults(
            names=list(problem.names),
            first_order=np.asarray(si['S1'], dtype=float),
            first_order_conf=np.asarray(si['S1_conf'], dtype=float),
            total_order=np.asarray(si['ST'], dtype=float),
            total_order_conf=np.asarray(si['ST_conf'], dtype=float),
            second_order=np.asarray(si['S2'], dtype=float),
            second_order_conf=np.asarray(si['S2_conf'], dtype=float),
            outputs=Y[0::step].copy(),
            conf_level=conf_level,
            num_resamples=num_resamples,
        )

        estimates = np.r_[
            results.first_order, results.first_order_conf,
            results.total_order, results.total_order_conf
        ]
        if not np.all(np.isfinite(estimates)):
            raise DegenerateVarianceError("Sobol estimates are not finite")

        return results

    def run(self, out_dir: str = None) -> SobolResults:
        """Execute the complete sensitivity analysis workflow.

        1. Draw the base sample matrices X1 and X2
        2. Build the Saltelli design
        3. Evaluate the summary for every design row in parallel
        4. Compute indices and bootstrap confidence intervals
        5. If `out_dir` is given, save results and plots

        Args:
            out_dir (str, optional): Output directory. The method creates
                'plots' and 'sa_results' subdirectories.

        Returns:
            SobolResults: The estimated indices.
        """
        plt_dir = res_dir = None
        if out_dir is not None:
            plt_dir = os.path.join(out_dir, "plots")
            res_dir = os.path.join(out_dir, "sa_results")

            logging.info(f"Plots will be saved in: {plt_dir}")
            logging.info(f"Results will be saved in: {res_dir}")

            os.makedirs(plt_dir, exist_ok=True)
            os.makedirs(res_dir, exist_ok=True)

        problem = self.config.problem

        X1, X2 = self._get_samples(self.config.samples, res_dir=res_dir)
        design = saltelli_design(X1, X2)  # (N * (2D + 2), D)

        logging.info(f"Running model for {design.shape[0]} design rows.")
        Y = self.evaluate(design, problem.names)

        results = self.analyze(
            Y,
            problem,
            num_resamples=self.config.num_resamples,
            conf_level=self.config.conf_level,
            seed=self.config.seed
        )

        if out_dir is not None:
            np.save(os.path.join(res_dir, "model_output.npy"), Y)
            results.save(res_dir)
            self.plot(results, X1, plt_dir)

        return results

    def plot(
        self,
        results: SobolResults,
        param_values: np.ndarray,  # shape: (N, D)
        plt_dir: str
    ):
        """Create visualization plots for sensitivity analysis results.

        Creates:
            - Bar chart of first-order and total-effect indices with their
              confidence intervals
            - Box plot of the base outputs
            - Parameter vs output scatter plots

        Args:
            results (SobolResults): Estimated indices.
            param_values (np.ndarray): First base sample matrix, rows aligned
                with `results.outputs`.
            plt_dir (str): Directory path where plot files will be saved.
        """

        logging.info("Creating plots.")

        summary_name = self.config.summary.name
        x = np.arange(len(results.names))
        width = 0.35

        fig, ax = plt.subplots(figsize=(10, 6))
        ax.bar(x - width / 2, results.first_order, width,
               yerr=results.first_order_conf, capsize=4, label='First-order (S1)')
        ax.bar(x + width / 2, results.total_order, width,
               yerr=results.total_order_conf, capsize=4, label='Total-effect (ST)')
        ax.set_xticks(x)
        ax.set_xticklabels(results.names)
        ax.set_ylabel('Sobol Index')
        ax.set_title(f'Sobol Indices for {summary_name}')
        ax.axhline(0, color='black', linewidth=0.8)
        ax.legend()
        ax.grid(True, axis='y')
        plt.tight_layout()
        plt.savefig(os.path.join(plt_dir, f"sobol_indices_{summary_name}.png"))
        plt.close(fig)

        fig = plt.figure(figsize=(6, 6))
        plt.boxplot(results.outputs)
        plt.xticks([1], [summary_name])
        plt.ylabel('C')
        plt.title(f'Distribution of {summary_name} across samples')
        plt.grid(True)
        plt.tight_layout()
        plt.savefig(os.path.join(plt_dir, f"boxplot_{summary_name}.png"))
        plt.close(fig)

        for i, name in enumerate(results.names):
            fig = plt.figure(figsize=(10, 6))
            plt.scatter(param_values[:, i],
                        results.outputs,
                        marker='o',
                        s=8,
                        label=f'{summary_name}')
            plt.title(f'{summary_name} vs {name}')
            plt.xlabel(name)
            plt.ylabel(summary_name)
            plt.legend()
            plt.grid(True)
            plt.tight_layout()
            plt.savefig(os.path.join(plt_dir, f"{summary_name}_vs_{name}.png"))
            plt.close(fig)
