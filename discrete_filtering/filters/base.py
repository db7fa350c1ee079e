"""
Filter result container.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional


@dataclass
class FilterResult:
    """
    Container for particle filter outputs.

    Attributes:
        means: [T+1, nx] Filtered state means (m_0, m_1, ..., m_T)
        covariances: [T+1, nx, nx] Filtered state covariances (optional)

        particles: [T+1, N, nx] Particle history (optional)
        weights: [T+1, N] Weight history (optional)

        kl_divergence: [T] KL(p || uniform) of each predicted belief
        ess: [T] Effective sample size of each posterior
        resampled: [T] Boolean mask of resampling events
    """
    means: np.ndarray
    covariances: Optional[np.ndarray] = None

    particles: Optional[np.ndarray] = None
    weights: Optional[np.ndarray] = None

    kl_divergence: Optional[np.ndarray] = None
    ess: Optional[np.ndarray] = None
    resampled: Optional[np.ndarray] = None

    @property
    def T(self) -> int:
        """Number of time steps (observations)."""
        return self.means.shape[0] - 1

    @property
    def state_dim(self) -> int:
        """State dimension."""
        return self.means.shape[1]

    def rmse(self, true_states: np.ndarray) -> np.ndarray:
        """
        Compute per-timestep RMSE against true states.

        Args:
            true_states: [T+1, nx] True state trajectory

        Returns:
            rmse: [T+1] RMSE at each time step
        """
        return np.sqrt(self.mse(true_states))

    def mse(self, true_states: np.ndarray) -> np.ndarray:
        """
        Compute per-timestep MSE against true states.

        Args:
            true_states: [T+1, nx] True state trajectory

        Returns:
            mse: [T+1] MSE at each time step
        """
        squared_error = (self.means - true_states) ** 2
        return np.mean(squared_error, axis=1)

    def mean_rmse(self, true_states: np.ndarray) -> float:
        """Average RMSE over all time steps."""
        return np.mean(self.rmse(true_states))

    def average_ess(self) -> float:
        """Return average ESS if available."""
        if self.ess is None:
            return np.nan
        return np.mean(self.ess)

    def resample_count(self) -> int:
        """Number of steps at which resampling happened."""
        if self.resampled is None:
            return 0
        return int(np.sum(self.resampled))
