"""
Test suite for models, simulation and metrics.

Run: pytest test_models.py -v
"""

import pytest
import numpy as np
from numpy.random import default_rng
from scipy import stats

from discrete_filtering.models import (
    ProcessModel,
    ObservationModel,
    AdditiveGaussianProcessModel,
    make_linear_process_model,
    make_random_walk,
    make_constant_velocity,
    make_linear_observation_model,
    RangeBearingObservationModel,
    make_range_bearing_models,
)
from discrete_filtering.simulation import Trajectory, simulate, simulate_batch
from discrete_filtering.utils import compute_rmse, compute_nees


# ============================================================================
# Process models
# ============================================================================

class TestProcessModels:

    def test_protocol_conformance(self):
        assert isinstance(make_random_walk(2), ProcessModel)
        assert isinstance(make_linear_observation_model(np.eye(2), 1.0), ObservationModel)
        assert isinstance(RangeBearingObservationModel(), ObservationModel)

    def test_linear_next_state(self):
        A = np.array([[1.0, 1.0], [0.0, 1.0]])
        B = np.array([[0.0], [1.0]])
        model = make_linear_process_model(A, 0.1 * np.eye(2), B)
        x = np.array([1.0, 2.0])

        np.testing.assert_allclose(model.next_state(x, np.zeros(2)), [3.0, 2.0])
        np.testing.assert_allclose(model.next_state(x, np.zeros(2), 0.5), [3.0, 2.5])

    def test_noise_is_scaled_by_cholesky(self):
        Q = np.array([[4.0, 0.0], [0.0, 9.0]])
        model = make_linear_process_model(np.eye(2), Q)
        np.testing.assert_allclose(
            model.next_state(np.zeros(2), np.array([1.0, 1.0])), [2.0, 3.0], rtol=1e-6
        )

    def test_dimensions(self):
        model = make_constant_velocity(dt=0.5, q=0.2)
        assert model.state_dimension == 4
        assert model.noise_dimension == 4

    def test_noise_cov_shape_checked(self):
        with pytest.raises(ValueError):
            AdditiveGaussianProcessModel(
                state_dim=2, transition=lambda x, u: x, noise_cov=np.eye(3)
            )

    def test_propagated_covariance(self):
        model = make_constant_velocity(dt=1.0, q=0.5)
        rng = default_rng(0)
        x_next = np.array([
            model.next_state(np.zeros(4), rng.standard_normal(4)) for _ in range(20000)
        ])
        np.testing.assert_allclose(np.cov(x_next.T), model.noise_cov, atol=0.03)


# ============================================================================
# Observation models
# ============================================================================

class TestObservationModels:

    def test_gaussian_log_likelihoods(self):
        C = np.array([[1.0, 0.0], [0.0, 2.0]])
        sigma = np.array([0.5, 1.5])
        model = make_linear_observation_model(C, sigma)

        rng = default_rng(1)
        X = rng.normal(size=(10, 2))
        y = np.array([0.3, -0.7])

        expected = stats.multivariate_normal.logpdf(
            y - X @ C.T, mean=np.zeros(2), cov=np.diag(sigma ** 2)
        )
        np.testing.assert_allclose(model.log_likelihoods(y, X), expected, rtol=1e-10)

    def test_scalar_noise_broadcasts(self):
        model = make_linear_observation_model(np.eye(3), 0.2)
        np.testing.assert_array_equal(model.noise_std, [0.2, 0.2, 0.2])
        assert model.obsrv_dimension == 3
        assert model.noise_dimension == 3

    def test_non_positive_noise_rejected(self):
        with pytest.raises(ValueError):
            make_linear_observation_model(np.eye(2), [1.0, 0.0])

    def test_observation_adds_scaled_noise(self):
        model = make_linear_observation_model(np.array([[2.0, 0.0]]), 0.5)
        y = model.observation(np.array([1.0, 5.0]), np.array([2.0]))
        np.testing.assert_allclose(y, [3.0])

    def test_range_bearing_noise_free(self):
        model = RangeBearingObservationModel()
        y = model.observation(np.array([3.0, 4.0, 0.0, 0.0]), np.zeros(2))
        np.testing.assert_allclose(y, [5.0, np.arctan2(4.0, 3.0)], atol=1e-9)

    def test_range_bearing_log_likelihoods_peak_at_truth(self):
        model = RangeBearingObservationModel(s_r=0.1, s_th=0.05)
        X = np.array([
            [3.0, 4.0, 0.0, 0.0],
            [3.5, 4.0, 0.0, 0.0],
            [-3.0, 4.0, 0.0, 0.0],
        ])
        y = np.array([5.0, np.arctan2(4.0, 3.0)])
        ll = model.log_likelihoods(y, X)
        assert ll.shape == (3,)
        assert np.all(np.isfinite(ll))
        assert np.argmax(ll) == 0

    def test_range_bearing_bearing_wraps(self):
        model = RangeBearingObservationModel(s_r=0.1, s_th=0.05)
        X = np.array([[-1.0, 1e-3, 0.0, 0.0], [-1.0, -1e-3, 0.0, 0.0]])
        y = np.array([1.0, np.pi])
        ll = model.log_likelihoods(y, X)
        np.testing.assert_allclose(ll[0], ll[1], rtol=1e-3)

    def test_range_bearing_factory(self):
        process_model, obs_model = make_range_bearing_models(dt=0.2)
        assert process_model.state_dimension == 4
        assert obs_model.obsrv_dimension == 2


# ============================================================================
# Simulation
# ============================================================================

@pytest.fixture
def linear_models():
    process_model = make_constant_velocity(dt=1.0, q=0.05)
    obs_model = make_linear_observation_model(np.array([[1.0, 0, 0, 0], [0, 1.0, 0, 0]]), 0.3)
    return process_model, obs_model


class TestSimulation:

    def test_shapes(self, linear_models):
        traj = simulate(*linear_models, np.array([0.0, 0.0, 1.0, 0.5]), T=25, seed=0)
        assert traj.T == 25
        assert traj.state_dim == 4
        assert traj.obs_dim == 2
        assert traj.states.shape == (26, 4)
        np.testing.assert_array_equal(traj.states[0], [0.0, 0.0, 1.0, 0.5])

    def test_seed_reproducible(self, linear_models):
        a = simulate(*linear_models, np.zeros(4), T=10, seed=3)
        b = simulate(*linear_models, np.zeros(4), T=10, seed=3)
        np.testing.assert_array_equal(a.states, b.states)
        np.testing.assert_array_equal(a.observations, b.observations)

    def test_inputs_are_applied(self):
        process_model = make_random_walk(nx=1, q=1e-6, with_input=True)
        obs_model = make_linear_observation_model(np.eye(1), 1e-3)
        inputs = np.ones((4, 1))
        traj = simulate(process_model, obs_model, np.zeros(1), T=4, inputs=inputs, seed=0)
        np.testing.assert_allclose(traj.states[:, 0], [0, 1, 2, 3, 4], atol=1e-2)
        np.testing.assert_array_equal(traj.inputs, inputs)

    def test_inputs_length_checked(self, linear_models):
        with pytest.raises(ValueError):
            simulate(*linear_models, np.zeros(4), T=5, inputs=np.zeros((3, 1)))

    def test_subset(self, linear_models):
        traj = simulate(*linear_models, np.zeros(4), T=10, seed=1)
        sub = traj.subset(2, 6)
        assert sub.T == 4
        np.testing.assert_array_equal(sub.states, traj.states[2:7])

    def test_save_load(self, linear_models, tmp_path):
        traj = simulate(*linear_models, np.zeros(4), T=8, seed=2, metadata={"run": 1})
        path = str(tmp_path / "traj.npz")
        traj.save(path)
        loaded = Trajectory.load(path)
        np.testing.assert_array_equal(loaded.states, traj.states)
        np.testing.assert_array_equal(loaded.observations, traj.observations)
        assert loaded.metadata == {"run": 1}
        assert loaded.inputs is None

    def test_simulate_batch(self, linear_models):
        trajectories = simulate_batch(*linear_models, np.zeros(4), T=5, n_trajectories=3, seed=0)
        assert len(trajectories) == 3
        assert [t.metadata["trajectory_idx"] for t in trajectories] == [0, 1, 2]
        assert not np.allclose(trajectories[0].states, trajectories[1].states)


# ============================================================================
# Metrics
# ============================================================================

class TestMetrics:

    def test_rmse_alignment(self):
        xs_true = np.zeros((4, 2))
        xs_est = np.ones((3, 2))
        per_step, mean = compute_rmse(xs_true, xs_est)
        assert per_step.shape == (3,)
        assert mean == 1.0

    def test_nees_consistent_estimates(self):
        rng = default_rng(0)
        T, nx = 2000, 2
        covs = np.tile(np.diag([0.5, 2.0]), (T, 1, 1))
        means = np.zeros((T, nx))
        xs_true = rng.multivariate_normal(np.zeros(nx), covs[0], size=T)
        _, nees_mean = compute_nees(xs_true, means, covs)
        assert abs(nees_mean - nx) < 0.2
