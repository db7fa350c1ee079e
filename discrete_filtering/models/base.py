"""
Model interfaces consumed by the particle filter.

Process models propagate one state at a time, observation models score a
whole batch of particle locations at once.
"""

import numpy as np
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ProcessModel(Protocol):
    """
    Process model x_t = f(x_{t-1}, v_t, u_t).

    Attributes:
        state_dimension: State dimension (nx)
        noise_dimension: Dimension of the standard normal noise v_t
    """

    @property
    def state_dimension(self) -> int: ...

    @property
    def noise_dimension(self) -> int: ...

    def next_state(self, state: np.ndarray, noise: np.ndarray, input: Any = None) -> np.ndarray:
        """
        Args:
            state: [nx] current state
            noise: [nv] standard normal sample
            input: control input (model specific, may be None)

        Returns:
            next_state: [nx]
        """
        ...


@runtime_checkable
class ObservationModel(Protocol):
    """
    Observation model y_t = h(x_t, w_t).

    Attributes:
        obsrv_dimension: Observation dimension (ny)
        noise_dimension: Dimension of the standard normal noise w_t
    """

    @property
    def obsrv_dimension(self) -> int: ...

    @property
    def noise_dimension(self) -> int: ...

    def log_likelihoods(self, observation: np.ndarray, locations: np.ndarray) -> np.ndarray:
        """
        Args:
            observation: [ny] observation
            locations: [N, nx] particle locations

        Returns:
            log_lik: [N] log p(y | x_i), same order as locations
        """
        ...

    def observation(self, state: np.ndarray, noise: np.ndarray) -> np.ndarray:
        """
        Args:
            state: [nx] state
            noise: [nw] standard normal sample

        Returns:
            y: [ny] observation
        """
        ...
