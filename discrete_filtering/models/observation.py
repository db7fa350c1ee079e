"""
Additive uncorrelated Gaussian observation model.

y_t = h(x_t) + diag(sigma) w_t,  w_t ~ N(0, I)
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Callable, Optional


@dataclass
class AdditiveUncorrelatedObservationModel:
    """
    Observation model with independent Gaussian noise per component.

    Attributes:
        state_dim: State dimension (nx)
        obs_dim: Observation dimension (ny)
        obs_mean: h(x), maps [N, nx] -> [N, ny]
        noise_std: [ny] Noise standard deviation per component
    """
    state_dim: int
    obs_dim: int
    obs_mean: Callable[[np.ndarray], np.ndarray]
    noise_std: np.ndarray

    _log_norm: Optional[float] = field(default=None, repr=False)

    def __post_init__(self):
        """Validate noise and precompute the Gaussian normalizer."""
        self.noise_std = np.broadcast_to(
            np.asarray(self.noise_std, dtype=np.float64), (self.obs_dim,)
        ).copy()
        if np.any(self.noise_std <= 0.0):
            raise ValueError("noise_std must be strictly positive")
        self._log_norm = -0.5 * np.sum(np.log(2 * np.pi * self.noise_std ** 2))

    @property
    def obsrv_dimension(self) -> int:
        return self.obs_dim

    @property
    def noise_dimension(self) -> int:
        return self.obs_dim

    def log_likelihoods(self, observation: np.ndarray, locations: np.ndarray) -> np.ndarray:
        """
        Compute log p(y | x) for all particles.

        Args:
            observation: [ny] observation
            locations: [N, nx] particles

        Returns:
            log_prob: [N]
        """
        y = np.asarray(observation, dtype=np.float64).reshape(self.obs_dim)
        y_pred = self.obs_mean(np.atleast_2d(locations))  # [N, ny]
        standardized = (y - y_pred) / self.noise_std
        return self._log_norm - 0.5 * np.sum(standardized ** 2, axis=1)

    def observation(self, state: np.ndarray, noise: np.ndarray) -> np.ndarray:
        """h(x) + diag(sigma) w for a single state."""
        mean = self.obs_mean(np.asarray(state, dtype=np.float64)[np.newaxis, :])[0]
        return mean + self.noise_std * noise

    def __repr__(self) -> str:
        return f"AdditiveUncorrelatedObservationModel(nx={self.state_dim}, ny={self.obs_dim})"


def make_linear_observation_model(
    C: np.ndarray,
    noise_std,
) -> AdditiveUncorrelatedObservationModel:
    """
    Linear observation y = C @ x + diag(sigma) w.

    Args:
        C: [ny, nx] Observation matrix
        noise_std: Scalar or [ny] noise standard deviation

    Returns:
        AdditiveUncorrelatedObservationModel instance
    """
    C = np.asarray(C, dtype=np.float64)
    ny, nx = C.shape

    def obs_mean(x: np.ndarray) -> np.ndarray:
        """x: [N, nx] -> [N, ny]"""
        return x @ C.T

    return AdditiveUncorrelatedObservationModel(
        state_dim=nx,
        obs_dim=ny,
        obs_mean=obs_mean,
        noise_std=noise_std,
    )
