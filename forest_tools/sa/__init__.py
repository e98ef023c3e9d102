"""
# Sensitivity Analysis

This module provides variance-based global sensitivity analysis of the
forest growth model: which parameters drive the peak forest size, alone and
through interactions.

## Components

- `saltelli_design`: Combine two base sample matrices into a Saltelli design
- `SensitivityAnalysis`: Sampling, parallel evaluation and Sobol index estimation
- `SensitivityAnalysisConfig`: Configuration for sensitivity analysis experiments
- `SensitivityAnalysisProblem`: Parameter names handed to SALib

## Example Usage

```python
from forest_tools import ForestGrowthModel
from forest_tools.sa import SensitivityAnalysis, SensitivityAnalysisConfig

sa_config = SensitivityAnalysisConfig.from_json('sa_config.json')
model = ForestGrowthModel.from_config(sa_config.growth)

sa = SensitivityAnalysis(model=model, config=sa_config)
results = sa.run('sa_output/')

first_order = results.first_order
total_order = results.total_order
print(results.to_df())
```
"""

from .sa import *
from .config import *
