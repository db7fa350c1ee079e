"""
Utility functions.
"""

from .resampling import (
    normalize_log_weights,
    cumulative_weights,
    inverse_cdf_indices,
    effective_sample_size,
)

from .metrics import (
    compute_rmse,
    compute_nees,
)

__all__ = [
    "normalize_log_weights",
    "cumulative_weights",
    "inverse_cdf_indices",
    "effective_sample_size",
    "compute_rmse",
    "compute_nees",
]
