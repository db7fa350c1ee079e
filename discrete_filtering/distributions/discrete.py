"""
Discrete (weighted particle) distribution.

The belief representation used by the particle filter: N locations with
normalized log weights, a cumulative distribution for inverse-CDF sampling,
and weighted moments.
"""

import numpy as np
from typing import Optional
from numpy.random import Generator
from scipy.special import erf

from ..exceptions import DimensionMismatchError, IndexOutOfRangeError
from ..utils.resampling import (
    normalize_log_weights,
    cumulative_weights,
    inverse_cdf_indices,
    effective_sample_size,
)


class DiscreteDistribution:
    """
    Weighted particle set over vector-valued states.

    Attributes (read through accessors):
        locations: [N, dim] Particle states
        log_prob_mass: [N] Normalized log weights
        prob_mass: [N] Normalized weights, sum to 1
        cumulative_weights: [N] Running sum of prob_mass

    A fresh distribution holds a single zero-valued particle with all the
    mass. Whenever the weights are set with a different count the
    locations are resized along with them: surplus rows are dropped and new
    rows are zero, to be filled by the caller.
    """

    def __init__(self, dimension: int = 1):
        """
        Args:
            dimension: State dimension (dim)
        """
        if dimension < 1:
            raise DimensionMismatchError(
                "State dimension must be positive", dimension=dimension
            )
        self._locations = np.zeros((1, dimension))
        self._log_prob_mass = np.zeros(1)
        self._prob_mass = np.ones(1)
        self._cumulative_weights = np.ones(1)

    @classmethod
    def from_locations(
        cls,
        locations: np.ndarray,
        log_weights: Optional[np.ndarray] = None,
    ) -> "DiscreteDistribution":
        """
        Build a distribution from particle locations.

        Args:
            locations: [N, dim] or [N] (scalar states) particle locations
            log_weights: [N] Unnormalized log weights (uniform if None)

        Returns:
            DiscreteDistribution with N particles
        """
        locations = cls._as_location_array(locations)
        distribution = cls(locations.shape[1])
        if log_weights is None:
            distribution.set_uniform(locations.shape[0])
        else:
            distribution.set_log_weights(log_weights)
        distribution.set_locations(locations)
        return distribution

    # -------------------------------------------------------------------------
    # Weights
    # -------------------------------------------------------------------------

    def set_log_weights(self, log_mass: np.ndarray):
        """
        Set unnormalized log weights; their length becomes the new size.

        Args:
            log_mass: [N] Unnormalized log weights

        Raises:
            DimensionMismatchError: If log_mass is empty or not 1-D
            DegenerateDistributionError: If the weights sum to zero or
                are not finite
        """
        log_prob_mass, prob_mass = normalize_log_weights(log_mass)

        self._log_prob_mass = log_prob_mass
        self._prob_mass = prob_mass
        self._cumulative_weights = cumulative_weights(prob_mass)
        self._resize_locations(len(prob_mass))

    def add_log_weight_delta(self, delta: np.ndarray):
        """
        Add a log-weight increment (e.g. log likelihoods) and renormalize.

        Args:
            delta: [N] Log weight increment, N == size

        Raises:
            DimensionMismatchError: If len(delta) != size
        """
        delta = np.asarray(delta, dtype=np.float64)
        if delta.shape != self._log_prob_mass.shape:
            raise DimensionMismatchError(
                "Log weight delta does not match the particle count",
                expected=self.size,
                got=delta.shape,
            )
        self.set_log_weights(self._log_prob_mass + delta)

    def set_uniform(self, size: Optional[int] = None):
        """
        Give every particle mass 1/size.

        Args:
            size: New particle count (keeps the current count if None)
        """
        if size is None:
            size = self.size
        if size < 1:
            raise DimensionMismatchError("Particle count must be positive", size=size)
        self.set_log_weights(np.zeros(size))

    def log_prob_mass(self, i: Optional[int] = None):
        """Normalized log weight of particle i, or all of them if i is None."""
        if i is None:
            return self._log_prob_mass.copy()
        self._check_index(i)
        return float(self._log_prob_mass[i])

    def prob_mass(self, i: Optional[int] = None):
        """Normalized weight of particle i, or all of them if i is None."""
        if i is None:
            return self._prob_mass.copy()
        self._check_index(i)
        return float(self._prob_mass[i])

    @property
    def cumulative_weights(self) -> np.ndarray:
        """[N] Cumulative distribution over particle indices."""
        return self._cumulative_weights.copy()

    # -------------------------------------------------------------------------
    # Locations
    # -------------------------------------------------------------------------

    def location(self, i: int) -> np.ndarray:
        """
        Location of particle i.

        Returns a writable view, so ``d.location(i)[:] = x`` updates the
        particle in place.
        """
        self._check_index(i)
        return self._locations[i]

    def set_location(self, i: int, value: np.ndarray):
        """Overwrite the location of particle i."""
        self._check_index(i)
        value = np.asarray(value, dtype=np.float64).reshape(-1)
        if value.shape[0] != self.dimension:
            raise DimensionMismatchError(
                "Location has the wrong dimension",
                expected=self.dimension,
                got=value.shape[0],
            )
        self._locations[i] = value

    @property
    def locations(self) -> np.ndarray:
        """[N, dim] Copy of all particle locations."""
        return self._locations.copy()

    def set_locations(self, locations: np.ndarray):
        """
        Replace all particle locations.

        Args:
            locations: [N, dim] or [N] (scalar states), N == size
        """
        locations = self._as_location_array(locations)
        if locations.shape[0] != self.size:
            raise DimensionMismatchError(
                "Number of locations does not match the particle count",
                expected=self.size,
                got=locations.shape[0],
            )
        self._locations = locations.copy()

    @property
    def size(self) -> int:
        """Number of particles (N)."""
        return self._locations.shape[0]

    @property
    def dimension(self) -> int:
        """State dimension (dim)."""
        return self._locations.shape[1]

    def __len__(self) -> int:
        return self.size

    # -------------------------------------------------------------------------
    # Sampling
    # -------------------------------------------------------------------------

    def map_standard_uniform(self, u) -> np.ndarray:
        """
        Inverse-CDF transform of uniform draws.

        Args:
            u: Scalar or [M] values in [0, 1)

        Returns:
            [dim] location for scalar u, [M, dim] locations otherwise
        """
        indices = inverse_cdf_indices(self._cumulative_weights, np.asarray(u, dtype=np.float64))
        return self._locations[indices].copy()

    def map_standard_normal(self, z) -> np.ndarray:
        """
        Map standard normal draws to locations.

        z is pushed through the standard normal CDF and the resulting
        uniform value through map_standard_uniform.

        Args:
            z: Scalar or [M] standard normal values

        Returns:
            [dim] location for scalar z, [M, dim] locations otherwise
        """
        u = 0.5 * (1.0 + erf(np.asarray(z, dtype=np.float64) / np.sqrt(2.0)))
        return self.map_standard_uniform(u)

    def sample(self, rng: Generator, size: Optional[int] = None) -> np.ndarray:
        """
        Draw locations from this distribution.

        Args:
            rng: NumPy random generator
            size: Number of draws (single draw if None)

        Returns:
            [dim] location, or [size, dim] locations
        """
        return self.map_standard_uniform(rng.uniform(0.0, 1.0, size=size))

    def resample_from(self, source: "DiscreteDistribution", count: int, rng: Generator):
        """
        Replace this distribution with count i.i.d. draws from source.

        The result has uniform weights. source may be this distribution
        itself.

        Args:
            source: Distribution to draw from
            count: Number of particles after resampling
            rng: NumPy random generator
        """
        if count < 1:
            raise DimensionMismatchError("Particle count must be positive", count=count)

        # Draw into a fresh buffer first, source may alias self
        new_locations = np.array(source.sample(rng, size=count), dtype=np.float64)
        new_locations = new_locations.reshape(count, -1)

        self.set_uniform(count)
        self._locations = new_locations

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def mean(self) -> np.ndarray:
        """[dim] Weighted mean of the locations."""
        return self._prob_mass @ self._locations

    def covariance(self) -> np.ndarray:
        """[dim, dim] Weighted covariance about the mean."""
        diff = self._locations - self.mean()
        cov = np.einsum('n,ni,nj->ij', self._prob_mass, diff, diff)
        return 0.5 * (cov + cov.T)

    def entropy(self) -> float:
        """Shannon entropy in nats. Zero-mass particles contribute nothing."""
        nonzero = self._prob_mass > 0.0
        return float(-np.sum(self._log_prob_mass[nonzero] * self._prob_mass[nonzero]))

    def kl_given_uniform(self) -> float:
        """
        KL(p || u) between this distribution and the uniform one on the
        same particles.

        Equals log(N) - entropy. Zero for uniform weights, log(N) when all
        mass sits on a single particle.
        """
        return float(np.log(self.size) - self.entropy())

    def effective_sample_size(self) -> float:
        """ESS = 1 / sum(w_i^2), in [1, N]."""
        return float(effective_sample_size(self._prob_mass))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def copy(self) -> "DiscreteDistribution":
        """Deep copy."""
        other = DiscreteDistribution(self.dimension)
        other._locations = self._locations.copy()
        other._log_prob_mass = self._log_prob_mass.copy()
        other._prob_mass = self._prob_mass.copy()
        other._cumulative_weights = self._cumulative_weights.copy()
        return other

    def _check_index(self, i: int):
        if not 0 <= i < self.size:
            raise IndexOutOfRangeError(
                "Particle index out of range", index=i, size=self.size
            )

    def _resize_locations(self, n: int):
        current = self._locations.shape[0]
        if n < current:
            self._locations = self._locations[:n].copy()
        elif n > current:
            padding = np.zeros((n - current, self.dimension))
            self._locations = np.vstack([self._locations, padding])

    @staticmethod
    def _as_location_array(locations: np.ndarray) -> np.ndarray:
        locations = np.asarray(locations, dtype=np.float64)
        if locations.ndim == 1:
            locations = locations[:, np.newaxis]
        if locations.ndim != 2 or locations.shape[0] == 0 or locations.shape[1] == 0:
            raise DimensionMismatchError(
                "Locations must be a non-empty [N, dim] array",
                shape=locations.shape,
            )
        return locations

    def __repr__(self) -> str:
        return f"DiscreteDistribution(N={self.size}, dim={self.dimension})"
