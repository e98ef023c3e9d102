"""
# Monte Carlo Simulations

This module provides functionality for running Monte Carlo simulations of
the forest growth model under parameter uncertainty.

## Components

- `Sim`: Main simulation class for running Monte Carlo experiments
- `MonteCarloConfig`: Configuration for Monte Carlo simulations

## Example Usage

```python
from forest_tools.montecarlo import Sim, MonteCarloConfig
from forest_tools import ForestGrowthModel

config = MonteCarloConfig.from_json('mc_config.json')
model = ForestGrowthModel.from_config(config.growth)

sim = Sim(model=model, config=config, seed=42)

# Trajectories and their per-time statistics
results = sim.run(n=500, parallel=True, workers=8)
stats = sim.analyze(results, index_columns=['time'])
stats.save('/path/to/results/')

# Peak forest size of every sample
peaks = sim.evaluate(n=2000)
Sim.plot_box(peaks, outfile='/path/to/results/peaks.png')
```
"""

from .sim import *
from .config import *
