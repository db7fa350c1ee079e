"""
Standard Gaussian noise sampler.
"""

import numpy as np
from typing import Optional
from numpy.random import Generator, default_rng

from ..exceptions import DimensionMismatchError


class StandardGaussian:
    """
    Draws i.i.d. N(0, I) vectors of a given dimension.

    The generator is passed in explicitly (or built from seed), so two
    samplers sharing a generator draw from one stream.
    """

    def __init__(
        self,
        dimension: int = 1,
        rng: Optional[Generator] = None,
        seed: Optional[int] = None,
        fixed: bool = False,
    ):
        """
        Args:
            dimension: Noise dimension
            rng: NumPy random generator (takes precedence over seed)
            seed: Random seed used when rng is None
            fixed: If True, the dimension cannot be changed later
        """
        if dimension < 0:
            raise DimensionMismatchError("Dimension must be non-negative", dimension=dimension)
        self._dimension = int(dimension)
        self._fixed = fixed
        self.rng = rng if rng is not None else default_rng(seed)

    @property
    def dimension(self) -> int:
        return self._dimension

    @dimension.setter
    def dimension(self, new_dimension: int):
        if new_dimension == self._dimension:
            return
        if self._fixed:
            raise DimensionMismatchError(
                "Cannot resize a fixed-size Gaussian",
                dimension=self._dimension,
                requested=new_dimension,
            )
        if new_dimension < 0:
            raise DimensionMismatchError("Dimension must be non-negative", dimension=new_dimension)
        self._dimension = int(new_dimension)

    @property
    def fixed(self) -> bool:
        return self._fixed

    def sample(self, size: Optional[int] = None) -> np.ndarray:
        """
        Args:
            size: Number of samples (single sample if None)

        Returns:
            [dimension] sample, or [size, dimension] samples
        """
        if size is None:
            return self.rng.standard_normal(self._dimension)
        return self.rng.standard_normal((size, self._dimension))

    def __repr__(self) -> str:
        return f"StandardGaussian(dim={self._dimension}, fixed={self._fixed})"
