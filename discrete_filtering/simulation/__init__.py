"""
Trajectory simulation.
"""

from .trajectory import Trajectory, simulate, simulate_batch

__all__ = [
    "Trajectory",
    "simulate",
    "simulate_batch",
]
