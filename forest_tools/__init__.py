"""
# Forest Tools

A toolkit for simulating forest carbon stock growth and analysing its
sensitivity to the growth parameters, providing functionality for:

- **Growth Model**: Threshold-switched exponential/logistic growth law
- **ODE Integration**: Solver wrapper reporting values exactly at requested times
- **Model Interface**: Base classes for running and evaluating models in parallel
- **Monte Carlo Simulations**: Ensembles of trajectories and peak forest sizes
- **Sensitivity Analysis**: Sobol indices from a Saltelli design with bootstrap intervals
- **Configuration Management**: JSON-backed configuration of runs, distributions and analyses

## Main Components

- `Model`: Base class for model execution and evaluation
- `ForestGrowthModel`: Concrete implementation for the forest growth model
- `montecarlo`: Monte Carlo simulation framework
- `sa`: Sobol sensitivity analysis
- `config`: Configuration of growth runs and parameter spaces
- `utils`: Trajectory summaries, distributions, and results handling

## Example Usage

```python
from forest_tools import ForestGrowthModel
from forest_tools.config import GrowthConfig
from forest_tools.sa import SensitivityAnalysis, SensitivityAnalysisConfig

# Single trajectory
model = ForestGrowthModel.from_config(GrowthConfig())
trajectory = model.get_objective()()
ForestGrowthModel.plot_trajectory(trajectory, threshold=50, outfile="growth.png")

# Sobol indices of the peak forest size
sa = SensitivityAnalysis(model, SensitivityAnalysisConfig())
results = sa.run("sa_output/")
print(results.to_df())
```
"""

from .model import *
