"""
# Configuration Management

This module provides configuration classes shared by the simulation and
analysis tools of the forest_tools package.

## Components

- **GrowthConfig**: Initial condition, time grid, base parameters and solver settings
- **SpaceConfig**: Configuration for parameter sampling distributions

## Example Usage

```python
from forest_tools.config import GrowthConfig, SpaceConfig

growth = GrowthConfig(c0=10.0, horizon=300)

space_config = SpaceConfig.from_dict({
    'r': ['normal', [0.01, 0.001]],
    'K': ['normal', [250, 25]]
})
```
"""

from .growth import *
from .space import *
