"""
Exception hierarchy for discrete_filtering.

All library errors inherit from FilteringError and also from the builtin
exception a caller would naturally catch (ValueError, IndexError).

Usage:
    from discrete_filtering.exceptions import DegenerateDistributionError

    if not np.isfinite(total):
        raise DegenerateDistributionError("Weights sum is not finite", total=total)
"""

from typing import Any, Dict


class FilteringError(Exception):
    """
    Base exception for all discrete_filtering errors.

    Carries a human-readable message plus keyword context for debugging.
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.context: Dict[str, Any] = context

        full_message = message
        if context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in context.items())
            full_message += f" ({context_str})"

        super().__init__(full_message)


class DimensionMismatchError(FilteringError, ValueError):
    """
    Raised when sizes disagree.

    Examples:
    - Resizing a sampler whose dimension is fixed
    - Log-weight delta whose length differs from the particle count
    - Empty weight vector
    """


class DegenerateDistributionError(FilteringError, ValueError):
    """Raised when weight normalization meets a zero or non-finite sum."""


class IndexOutOfRangeError(FilteringError, IndexError):
    """Raised when a particle index is outside [0, size)."""
