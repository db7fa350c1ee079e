"""
Additive Gaussian process model.

x_t = f(x_{t-1}, u_t) + L v_t,  v_t ~ N(0, I),  L L^T = Q
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Any, Callable, Optional


@dataclass
class AdditiveGaussianProcessModel:
    """
    Process model with additive Gaussian noise.

    Attributes:
        state_dim: State dimension (nx)
        transition: f(x, u), maps ([nx], input) -> [nx]
        noise_cov: [nx, nx] Process noise covariance Q
    """
    state_dim: int
    transition: Callable[[np.ndarray, Any], np.ndarray]
    noise_cov: np.ndarray

    _noise_chol: Optional[np.ndarray] = field(default=None, repr=False)

    def __post_init__(self):
        """Precompute the Cholesky factor of Q."""
        eps = 1e-12
        self.noise_cov = np.asarray(self.noise_cov, dtype=np.float64)
        if self.noise_cov.shape != (self.state_dim, self.state_dim):
            raise ValueError(
                f"noise_cov must be [{self.state_dim}, {self.state_dim}], "
                f"got {self.noise_cov.shape}"
            )
        if self._noise_chol is None:
            Q = 0.5 * (self.noise_cov + self.noise_cov.T) + eps * np.eye(self.state_dim)
            self._noise_chol = np.linalg.cholesky(Q)

    @property
    def state_dimension(self) -> int:
        return self.state_dim

    @property
    def noise_dimension(self) -> int:
        return self.state_dim

    def next_state(self, state: np.ndarray, noise: np.ndarray, input: Any = None) -> np.ndarray:
        """f(x, u) + L v"""
        return self.transition(state, input) + self._noise_chol @ noise

    def __repr__(self) -> str:
        return f"AdditiveGaussianProcessModel(nx={self.state_dim})"


def make_linear_process_model(
    A: np.ndarray,
    Q: np.ndarray,
    B: Optional[np.ndarray] = None,
) -> AdditiveGaussianProcessModel:
    """
    Linear Gaussian process model.

    x_t = A @ x_{t-1} + B @ u_t + v_t,  v_t ~ N(0, Q)

    The input term is skipped when B or u_t is None.

    Args:
        A: [nx, nx] State transition matrix
        Q: [nx, nx] Process noise covariance
        B: [nx, nu] Input matrix (optional)

    Returns:
        AdditiveGaussianProcessModel instance
    """
    A = np.asarray(A, dtype=np.float64)
    Q = np.asarray(Q, dtype=np.float64)
    if B is not None:
        B = np.asarray(B, dtype=np.float64)

    def transition(x: np.ndarray, u: Any) -> np.ndarray:
        x_next = A @ x
        if B is not None and u is not None:
            x_next = x_next + B @ np.atleast_1d(u)
        return x_next

    return AdditiveGaussianProcessModel(
        state_dim=A.shape[0],
        transition=transition,
        noise_cov=Q,
    )


def make_random_walk(nx: int = 1, q: float = 0.1, with_input: bool = False) -> AdditiveGaussianProcessModel:
    """
    Random walk x_t = x_{t-1} (+ u_t) + v_t, v_t ~ N(0, q I).

    Args:
        nx: State dimension
        q: Process noise variance
        with_input: If True, the input is added to the state

    Returns:
        AdditiveGaussianProcessModel instance
    """
    B = np.eye(nx) if with_input else None
    return make_linear_process_model(np.eye(nx), q * np.eye(nx), B)


def make_constant_velocity(dt: float = 1.0, q: float = 0.1) -> AdditiveGaussianProcessModel:
    """
    2D constant velocity model with white-noise acceleration.

    State: [px, py, vx, vy]

    Args:
        dt: Time step
        q: Acceleration noise intensity

    Returns:
        AdditiveGaussianProcessModel instance
    """
    A = np.array([
        [1, 0, dt, 0],
        [0, 1, 0, dt],
        [0, 0, 1, 0],
        [0, 0, 0, 1],
    ], dtype=np.float64)

    Q = q * np.array([
        [dt**3/3, 0, dt**2/2, 0],
        [0, dt**3/3, 0, dt**2/2],
        [dt**2/2, 0, dt, 0],
        [0, dt**2/2, 0, dt],
    ])

    return make_linear_process_model(A, Q)
