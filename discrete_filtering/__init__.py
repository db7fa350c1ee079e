"""
Discrete Filtering Library.

A NumPy-based particle filtering library with:
- Weighted particle (discrete) distributions with inverse-CDF sampling
- Particle filter with KL-divergence triggered resampling
- Process / observation models and trajectory simulation
"""

from . import distributions
from . import models
from . import filters
from . import simulation
from . import utils
from .exceptions import (
    FilteringError,
    DimensionMismatchError,
    DegenerateDistributionError,
    IndexOutOfRangeError,
)

__version__ = "0.1.0"
