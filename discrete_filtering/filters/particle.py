"""
Particle Filter implementation.

Sequential importance resampling over a DiscreteDistribution belief.
Resampling is triggered when the predicted belief drifts too far from
uniform weights, measured by KL(p || uniform).
"""

import numpy as np
from typing import Any, Optional, Sequence, Tuple
from numpy.random import Generator, default_rng
from loguru import logger

from .base import FilterResult
from ..distributions import DiscreteDistribution, StandardGaussian
from ..models.base import ProcessModel, ObservationModel


class ParticleFilter:
    """
    Particle filter over user supplied process and observation models.

    The filter holds no belief of its own. Beliefs are passed in and new
    beliefs are returned; the inputs are never modified.

    Example:
        pf = ParticleFilter(process_model, observation_model, seed=0)
        belief = pf.create_gaussian_belief(m0, P0, n_particles=500)
        for u, y in zip(inputs, observations):
            belief = pf.predict_and_update(belief, u, y)
    """

    def __init__(
        self,
        process_model: ProcessModel,
        observation_model: ObservationModel,
        max_kl_divergence: float = 1.0,
        seed: Optional[int] = None,
        rng: Optional[Generator] = None,
    ):
        """
        Args:
            process_model: Model providing next_state(state, noise, input)
            observation_model: Model providing log_likelihoods(obs, locations)
            max_kl_divergence: Resample when KL(p || uniform) of the
                predicted belief exceeds this. Roughly -log of the fraction
                of particles carrying the mass.
            seed: Random seed (ignored if rng is provided)
            rng: NumPy random generator shared by noise and resampling
        """
        if max_kl_divergence < 0:
            raise ValueError(f"max_kl_divergence must be non-negative, got {max_kl_divergence}")

        self.rng = rng if rng is not None else default_rng(seed)
        self._process_model = process_model
        self._observation_model = observation_model
        self._process_noise = StandardGaussian(process_model.noise_dimension, rng=self.rng)
        self._observation_noise = StandardGaussian(observation_model.noise_dimension, rng=self.rng)
        self._max_kl_divergence = float(max_kl_divergence)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def process_model(self) -> ProcessModel:
        return self._process_model

    @property
    def observation_model(self) -> ObservationModel:
        return self._observation_model

    @property
    def process_noise(self) -> StandardGaussian:
        return self._process_noise

    @property
    def observation_noise(self) -> StandardGaussian:
        return self._observation_noise

    @property
    def max_kl_divergence(self) -> float:
        return self._max_kl_divergence

    # -------------------------------------------------------------------------
    # Beliefs
    # -------------------------------------------------------------------------

    def create_belief(self) -> DiscreteDistribution:
        """Single zero particle sized to the process model's state."""
        return DiscreteDistribution(self._process_model.state_dimension)

    def create_gaussian_belief(
        self,
        mean: np.ndarray,
        cov: np.ndarray,
        n_particles: int,
    ) -> DiscreteDistribution:
        """
        Uniformly weighted belief sampled from N(mean, cov).

        Args:
            mean: [nx] Initial state mean
            cov: [nx, nx] Initial state covariance
            n_particles: Number of particles

        Returns:
            DiscreteDistribution with n_particles particles
        """
        mean = np.asarray(mean, dtype=np.float64)
        cov = np.asarray(cov, dtype=np.float64)
        nx = mean.shape[0]

        chol = np.linalg.cholesky(cov + 1e-12 * np.eye(nx))
        noise = self.rng.standard_normal((n_particles, nx))
        return DiscreteDistribution.from_locations(mean + noise @ chol.T)

    # -------------------------------------------------------------------------
    # Predict / update
    # -------------------------------------------------------------------------

    def predict(self, prior: DiscreteDistribution, input: Any = None) -> DiscreteDistribution:
        """
        Propagate every particle through the process model.

        Weights are carried over unchanged.

        Args:
            prior: Belief at t-1
            input: Control input passed to the process model

        Returns:
            Predicted belief, same size as prior
        """
        predicted = prior.copy()
        noise = self._process_noise.sample(size=prior.size)
        # Copy, so models that update state in place cannot touch prior
        locations = prior.locations

        for i in range(prior.size):
            predicted.set_location(
                i, self._process_model.next_state(locations[i], noise[i], input)
            )

        return predicted

    def update(self, predicted: DiscreteDistribution, observation: np.ndarray) -> DiscreteDistribution:
        """
        Weight the predicted belief by the observation likelihood.

        If the predicted belief is degenerate (KL to uniform above
        max_kl_divergence) it is resampled first.

        Args:
            predicted: Predicted belief
            observation: [ny] Observation

        Returns:
            Posterior belief
        """
        posterior, _ = self._update(predicted, observation)
        return posterior

    def predict_and_update(
        self,
        prior: DiscreteDistribution,
        input: Any,
        observation: np.ndarray,
    ) -> DiscreteDistribution:
        """update(predict(prior, input), observation)"""
        return self.update(self.predict(prior, input), observation)

    def _update(
        self,
        predicted: DiscreteDistribution,
        observation: np.ndarray,
    ) -> Tuple[DiscreteDistribution, bool]:
        kl = predicted.kl_given_uniform()
        resample = kl > self._max_kl_divergence

        if resample:
            logger.debug(
                "Resampling {} particles: KL to uniform {:.4f} > {:.4f}",
                predicted.size, kl, self._max_kl_divergence,
            )
            posterior = DiscreteDistribution(predicted.dimension)
            posterior.resample_from(predicted, predicted.size, self.rng)
        else:
            posterior = predicted.copy()

        log_lik = self._observation_model.log_likelihoods(observation, posterior.locations)
        posterior.add_log_weight_delta(log_lik)

        return posterior, resample

    # -------------------------------------------------------------------------
    # Batch filtering
    # -------------------------------------------------------------------------

    def filter(
        self,
        initial_belief: DiscreteDistribution,
        observations: np.ndarray,
        inputs: Optional[Sequence[Any]] = None,
        return_particles: bool = False,
    ) -> FilterResult:
        """
        Run the filter over a sequence of observations.

        Args:
            initial_belief: Belief at t=0
            observations: [T, ny] Observations (y_1, ..., y_T)
            inputs: T control inputs (None for every step if omitted)
            return_particles: If True, store particle history

        Returns:
            FilterResult
        """
        T = len(observations)
        if inputs is None:
            inputs = [None] * T
        elif len(inputs) != T:
            raise ValueError(f"Expected {T} inputs, got {len(inputs)}")

        belief = initial_belief
        N = belief.size
        nx = belief.dimension

        logger.info(
            "Running particle filter: T={}, N={}, max_kl_divergence={}",
            T, N, self._max_kl_divergence,
        )

        # Storage
        means = np.zeros((T + 1, nx))
        covariances = np.zeros((T + 1, nx, nx))
        kl_history = np.zeros(T)
        ess_history = np.zeros(T)
        resampled_history = np.zeros(T, dtype=bool)

        if return_particles:
            particles_history = np.zeros((T + 1, N, nx))
            weights_history = np.zeros((T + 1, N))
            particles_history[0] = belief.locations
            weights_history[0] = belief.prob_mass()

        means[0] = belief.mean()
        covariances[0] = belief.covariance()

        for t in range(T):
            predicted = self.predict(belief, inputs[t])
            kl_history[t] = predicted.kl_given_uniform()

            belief, resampled_history[t] = self._update(predicted, observations[t])
            ess_history[t] = belief.effective_sample_size()

            means[t + 1] = belief.mean()
            covariances[t + 1] = belief.covariance()

            if return_particles:
                particles_history[t + 1] = belief.locations
                weights_history[t + 1] = belief.prob_mass()

        logger.info(
            "Particle filter finished: resampled {}/{} steps, average ESS {:.1f}",
            int(resampled_history.sum()), T, np.mean(ess_history) if T else float(N),
        )

        result = FilterResult(
            means=means,
            covariances=covariances,
            kl_divergence=kl_history,
            ess=ess_history,
            resampled=resampled_history,
        )

        if return_particles:
            result.particles = particles_history
            result.weights = weights_history

        return result

    def __repr__(self) -> str:
        return (
            f"ParticleFilter(process_model={self._process_model!r}, "
            f"observation_model={self._observation_model!r}, "
            f"max_kl_divergence={self._max_kl_divergence})"
        )
