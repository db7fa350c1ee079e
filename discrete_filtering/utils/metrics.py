"""
Evaluation metrics for filtering.
"""

import numpy as np
from typing import Tuple


def _align(xs_true: np.ndarray, xs_est: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Drop the initial true state when estimates start at t=1."""
    if xs_est.shape[0] == xs_true.shape[0] - 1:
        xs_true = xs_true[1:]
    T = min(xs_true.shape[0], xs_est.shape[0])
    return xs_true[:T], xs_est[:T]


def compute_rmse(
    xs_true: np.ndarray,
    xs_est: np.ndarray,
) -> Tuple[np.ndarray, float]:
    """
    Compute Root Mean Square Error per time step.

    Args:
        xs_true: [T+1, nx] True states
        xs_est: [T+1, nx] or [T, nx] Estimated states

    Returns:
        rmse_per_step: [T] RMSE at each time step
        rmse_mean: Mean RMSE over all time steps
    """
    xs_true, xs_est = _align(xs_true, xs_est)
    rmse_per_step = np.sqrt(np.mean((xs_true - xs_est) ** 2, axis=1))
    return rmse_per_step, np.mean(rmse_per_step)


def compute_nees(
    xs_true: np.ndarray,
    means: np.ndarray,
    covariances: np.ndarray,
    jitter: float = 1e-9,
) -> Tuple[np.ndarray, float]:
    """
    Normalized Estimation Error Squared.

    NEES_t = (x_t - m_t)^T P_t^{-1} (x_t - m_t). For a consistent filter its
    mean is close to the state dimension.

    Args:
        xs_true: [T+1, nx] True states
        means: [T+1, nx] or [T, nx] Filtered means
        covariances: same leading length as means, [*, nx, nx]
        jitter: Diagonal regularization added before solving

    Returns:
        nees_per_step: [T] NEES at each time step
        nees_mean: Mean NEES
    """
    xs_true, means = _align(xs_true, means)
    covariances = covariances[-means.shape[0]:]
    nx = means.shape[1]

    nees = np.zeros(means.shape[0])
    for t in range(means.shape[0]):
        err = xs_true[t] - means[t]
        P = covariances[t] + jitter * np.eye(nx)
        nees[t] = err @ np.linalg.solve(P, err)

    return nees, np.mean(nees)
