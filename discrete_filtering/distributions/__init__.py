"""
Distributions used by the filters.
"""

from .discrete import DiscreteDistribution
from .standard_gaussian import StandardGaussian

__all__ = [
    "DiscreteDistribution",
    "StandardGaussian",
]
