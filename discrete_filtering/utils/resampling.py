"""
Weight normalization and inverse-CDF helpers for particle sets.
"""

import numpy as np

from ..exceptions import DimensionMismatchError, DegenerateDistributionError


def normalize_log_weights(log_weights: np.ndarray) -> tuple:
    """
    Normalize unnormalized log weights.

    The maximum is subtracted before exponentiating so that large log
    weights do not overflow. The normalized result does not depend on it.

    Args:
        log_weights: [N] Unnormalized log weights

    Returns:
        log_weights: [N] Normalized log weights (logsumexp == 0)
        weights: [N] Normalized weights (sum to 1)

    Raises:
        DimensionMismatchError: If log_weights is empty or not 1-D
        DegenerateDistributionError: If the weights cannot be normalized
    """
    log_weights = np.asarray(log_weights, dtype=np.float64)
    if log_weights.ndim != 1 or log_weights.size == 0:
        raise DimensionMismatchError(
            "Log weights must be a non-empty 1-D array",
            shape=log_weights.shape,
        )

    max_log = np.max(log_weights)
    if not np.isfinite(max_log):
        raise DegenerateDistributionError(
            "Maximum log weight is not finite", max_log_weight=float(max_log)
        )

    # Rescale for numeric stability
    log_weights = log_weights - max_log
    weights = np.exp(log_weights)
    total = np.sum(weights)

    if not np.isfinite(total) or total <= 0.0:
        raise DegenerateDistributionError(
            "Sum of weights is zero or not finite", total=float(total)
        )

    weights = weights / total
    log_weights = log_weights - np.log(total)

    return log_weights, weights


def cumulative_weights(weights: np.ndarray) -> np.ndarray:
    """
    Running sum of normalized weights.

    Args:
        weights: [N] Normalized weights

    Returns:
        cdf: [N] Non-decreasing, cdf[0] == weights[0], cdf[-1] ~ 1
    """
    return np.cumsum(weights)


def inverse_cdf_indices(cdf: np.ndarray, u) -> np.ndarray:
    """
    Lower-bound lookup of uniform draws in a cumulative distribution.

    Returns the first index i with cdf[i] >= u. Indices are clamped to N-1
    since cdf[-1] may fall slightly below 1 after round-off.

    Args:
        cdf: [N] Cumulative weights
        u: Scalar or [M] draws in [0, 1)

    Returns:
        indices: Scalar or [M] particle indices
    """
    indices = np.searchsorted(cdf, u, side='left')
    return np.minimum(indices, len(cdf) - 1)


def effective_sample_size(weights: np.ndarray) -> float:
    """
    Compute effective sample size (ESS).

    ESS = 1 / sum(w_i^2), where weights are normalized.

    Args:
        weights: [N] Normalized weights (must sum to 1)

    Returns:
        ESS value in [1, N]
    """
    return 1.0 / np.sum(weights ** 2)
