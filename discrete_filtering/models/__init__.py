"""
Process and observation model definitions.
"""

from .base import ProcessModel, ObservationModel
from .process import (
    AdditiveGaussianProcessModel,
    make_linear_process_model,
    make_random_walk,
    make_constant_velocity,
)
from .observation import AdditiveUncorrelatedObservationModel, make_linear_observation_model
from .range_bearing import RangeBearingObservationModel, make_range_bearing_models

__all__ = [
    "ProcessModel",
    "ObservationModel",
    "AdditiveGaussianProcessModel",
    "make_linear_process_model",
    "make_random_walk",
    "make_constant_velocity",
    "AdditiveUncorrelatedObservationModel",
    "make_linear_observation_model",
    "RangeBearingObservationModel",
    "make_range_bearing_models",
]
