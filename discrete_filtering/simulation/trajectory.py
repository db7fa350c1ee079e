"""
Trajectory simulation and storage.
"""

import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence
from numpy.random import Generator, default_rng

from ..distributions import StandardGaussian
from ..models.base import ProcessModel, ObservationModel


@dataclass
class Trajectory:
    """
    Container for simulated or recorded trajectory data.

    Attributes:
        states: [T+1, nx] State trajectory (x_0, x_1, ..., x_T)
        observations: [T, ny] Observations (y_1, y_2, ..., y_T)
        inputs: [T, nu] Control inputs (u_1, ..., u_T), optional
        metadata: Optional dictionary for additional info
    """
    states: np.ndarray
    observations: np.ndarray
    inputs: Optional[np.ndarray] = None
    metadata: Optional[Dict[str, Any]] = None

    @property
    def T(self) -> int:
        """Number of time steps."""
        return self.observations.shape[0]

    @property
    def state_dim(self) -> int:
        """State dimension."""
        return self.states.shape[1]

    @property
    def obs_dim(self) -> int:
        """Observation dimension."""
        return self.observations.shape[1]

    def subset(self, start: int, end: int) -> "Trajectory":
        """
        Extract a subset of the trajectory.

        Args:
            start: Start time index (inclusive)
            end: End time index (exclusive)

        Returns:
            New Trajectory with subset of data
        """
        return Trajectory(
            states=self.states[start:end+1].copy(),
            observations=self.observations[start:end].copy(),
            inputs=None if self.inputs is None else self.inputs[start:end].copy(),
            metadata=self.metadata,
        )

    def save(self, path: str):
        """Save trajectory to .npz file."""
        arrays = {
            "states": self.states,
            "observations": self.observations,
            "metadata": np.array(self.metadata, dtype=object),
        }
        if self.inputs is not None:
            arrays["inputs"] = self.inputs
        np.savez(path, **arrays)

    @classmethod
    def load(cls, path: str) -> "Trajectory":
        """Load trajectory from .npz file."""
        data = np.load(path, allow_pickle=True)
        metadata = data['metadata'].item() if 'metadata' in data else None
        return cls(
            states=data['states'],
            observations=data['observations'],
            inputs=data['inputs'] if 'inputs' in data else None,
            metadata=metadata,
        )


def simulate(
    process_model: ProcessModel,
    observation_model: ObservationModel,
    initial_state: np.ndarray,
    T: int,
    inputs: Optional[Sequence[Any]] = None,
    seed: Optional[int] = None,
    rng: Optional[Generator] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Trajectory:
    """
    Simulate a trajectory from a process and an observation model.

    Args:
        process_model: ProcessModel instance
        observation_model: ObservationModel instance
        initial_state: [nx] State x_0
        T: Number of time steps
        inputs: T control inputs (None for every step if omitted)
        seed: Random seed (ignored if rng is provided)
        rng: NumPy random generator (optional)
        metadata: Optional metadata to attach

    Returns:
        Trajectory object
    """
    if rng is None:
        rng = default_rng(seed)
    if inputs is not None and len(inputs) != T:
        raise ValueError(f"Expected {T} inputs, got {len(inputs)}")

    process_noise = StandardGaussian(process_model.noise_dimension, rng=rng)
    observation_noise = StandardGaussian(observation_model.noise_dimension, rng=rng)

    states = np.zeros((T + 1, process_model.state_dimension))
    observations = np.zeros((T, observation_model.obsrv_dimension))
    states[0] = initial_state

    for t in range(T):
        u = None if inputs is None else inputs[t]
        states[t + 1] = process_model.next_state(states[t], process_noise.sample(), u)
        observations[t] = observation_model.observation(states[t + 1], observation_noise.sample())

    return Trajectory(
        states=states,
        observations=observations,
        inputs=None if inputs is None else np.asarray(inputs, dtype=np.float64),
        metadata=metadata,
    )


def simulate_batch(
    process_model: ProcessModel,
    observation_model: ObservationModel,
    initial_state: np.ndarray,
    T: int,
    n_trajectories: int,
    seed: Optional[int] = None,
) -> list:
    """
    Simulate multiple independent trajectories.

    Args:
        process_model: ProcessModel instance
        observation_model: ObservationModel instance
        initial_state: [nx] State x_0 shared by all trajectories
        T: Number of time steps
        n_trajectories: Number of trajectories to simulate
        seed: Random seed

    Returns:
        List of Trajectory objects
    """
    rng = default_rng(seed)

    trajectories = []
    for i in range(n_trajectories):
        traj = simulate(
            process_model, observation_model, initial_state, T,
            rng=rng, metadata={'trajectory_idx': i},
        )
        trajectories.append(traj)

    return trajectories
