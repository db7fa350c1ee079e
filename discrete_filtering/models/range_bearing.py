"""
Range-bearing observation model with Student-t measurement noise.

State: [px, py, ...] - only the position is observed
Observation: [range, bearing] with Student-t noise
"""

import numpy as np
from scipy import stats
from scipy.special import ndtr
from dataclasses import dataclass
from typing import Tuple

from .process import AdditiveGaussianProcessModel, make_constant_velocity


def _wrap_angle(a: np.ndarray) -> np.ndarray:
    """Wrap angle to [-pi, pi]."""
    return (a + np.pi) % (2.0 * np.pi) - np.pi


def _h_range_bearing(x: np.ndarray, eps: float = 1e-12) -> np.ndarray:
    """
    Range-bearing observation function.

    Args:
        x: [N, nx] or [nx] states with position in the first two entries
        eps: Small constant for numerical stability

    Returns:
        y: [N, 2] or [2] observations [range, bearing]
    """
    single = x.ndim == 1
    if single:
        x = x[None, :]

    px, py = x[:, 0], x[:, 1]
    r = np.sqrt(px**2 + py**2 + eps)
    th = np.arctan2(py, px)

    y = np.stack([r, th], axis=-1)

    if single:
        return y[0]
    return y


@dataclass
class RangeBearingObservationModel:
    """
    Heavy-tailed range-bearing sensor at the origin.

    Attributes:
        state_dim: State dimension (nx >= 2)
        nu: Degrees of freedom for Student-t (nu=2 gives heavy tails)
        s_r: Scale for range noise
        s_th: Scale for bearing noise
        eps: Small constant for numerical stability
    """
    state_dim: int = 4
    nu: float = 2.0
    s_r: float = 0.01
    s_th: float = 0.01
    eps: float = 1e-12

    def __post_init__(self):
        if self.state_dim < 2:
            raise ValueError("Range-bearing model needs at least a 2D position")

    @property
    def obsrv_dimension(self) -> int:
        return 2

    @property
    def noise_dimension(self) -> int:
        return 2

    def log_likelihoods(self, observation: np.ndarray, locations: np.ndarray) -> np.ndarray:
        """
        Student-t log-likelihoods for range and bearing.

        Args:
            observation: [2] observation [range, bearing]
            locations: [N, nx] particles

        Returns:
            log_prob: [N]
        """
        y = np.asarray(observation, dtype=np.float64)
        y_pred = _h_range_bearing(np.atleast_2d(locations), self.eps)

        res_r = y[0] - y_pred[:, 0]
        res_th = _wrap_angle(y[1] - y_pred[:, 1])

        loglik_r = stats.t.logpdf(res_r, df=self.nu, loc=0, scale=self.s_r)
        loglik_th = stats.t.logpdf(res_th, df=self.nu, loc=0, scale=self.s_th)

        return loglik_r + loglik_th

    def observation(self, state: np.ndarray, noise: np.ndarray) -> np.ndarray:
        """
        Noisy [range, bearing] of a single state.

        The standard normal noise is turned into Student-t noise through
        the inverse CDF.
        """
        y_mean = _h_range_bearing(np.asarray(state, dtype=np.float64), self.eps)
        u = ndtr(np.asarray(noise, dtype=np.float64))
        noise_r = stats.t.ppf(u[0], df=self.nu, loc=0, scale=self.s_r)
        noise_th = stats.t.ppf(u[1], df=self.nu, loc=0, scale=self.s_th)

        return np.array([y_mean[0] + noise_r, _wrap_angle(y_mean[1] + noise_th)])


def make_range_bearing_models(
    dt: float = 0.1,
    q: float = 0.01,
    nu: float = 2.0,
    s_r: float = 0.01,
    s_th: float = 0.01,
) -> Tuple[AdditiveGaussianProcessModel, RangeBearingObservationModel]:
    """
    Constant velocity target observed by a range-bearing sensor.

    Args:
        dt: Time step
        q: Acceleration noise intensity
        nu: Degrees of freedom for Student-t
        s_r: Scale for range noise
        s_th: Scale for bearing noise

    Returns:
        process_model: AdditiveGaussianProcessModel over [px, py, vx, vy]
        observation_model: RangeBearingObservationModel
    """
    process_model = make_constant_velocity(dt=dt, q=q)
    observation_model = RangeBearingObservationModel(
        state_dim=process_model.state_dim, nu=nu, s_r=s_r, s_th=s_th,
    )
    return process_model, observation_model
