"""Tests for L-BFGS stress minimization."""

import pytest
import numpy as np
from pylayout.descent import (
    NON_DESCENT_STEP,
    StressDescent,
    backtracking_line_search,
    kamada_kawai_cost,
    lbfgs_direction,
)
from pylayout.rng import RandomNumberGenerator


def cycle_distances():
    """Shortest path matrix of a 4-cycle."""
    return np.array([
        [0.0, 1.0, 2.0, 1.0],
        [1.0, 0.0, 1.0, 2.0],
        [2.0, 1.0, 0.0, 1.0],
        [1.0, 2.0, 1.0, 0.0],
    ])


def inverse(D):
    return np.divide(1.0, D + 1e-3, out=np.zeros_like(D), where=D != 0)


class TestKamadaKawaiCost:
    """Test the cost function and its gradient."""

    def test_cost_at_ideal_path(self):
        """Test that collinear ideal spacing costs almost nothing."""
        D = np.array([[0.0, 1.0, 2.0], [1.0, 0.0, 1.0], [2.0, 1.0, 0.0]])
        pos = np.array([-1.0, 0.0, 0.0, 0.0, 1.0, 0.0])
        cost, _ = kamada_kawai_cost(pos, inverse(D), 1e-3, 2)
        assert cost < 1e-5

    def test_centering_term(self):
        """Test the centering penalty with no distance pull."""
        inv = np.zeros((2, 2))
        pos = np.array([1.0, 0.0, 1.0, 0.0])
        cost, grad = kamada_kawai_cost(pos, inv, 0.5, 2)
        # Pairs with no ideal distance add a constant 0.5
        assert cost == pytest.approx(0.5 * 0.5 * 4.0 + 0.5)
        np.testing.assert_allclose(grad, [1.0, 0.0, 1.0, 0.0])

    def test_gradient_matches_finite_differences(self):
        """Test the analytic gradient."""
        inv = inverse(cycle_distances())
        pos = RandomNumberGenerator(seed=5).rand(8)
        _, grad = kamada_kawai_cost(pos, inv, 1e-3, 2)

        h = 1e-6
        numeric = np.zeros_like(pos)
        for i in range(len(pos)):
            step = np.zeros_like(pos)
            step[i] = h
            up, _ = kamada_kawai_cost(pos + step, inv, 1e-3, 2)
            down, _ = kamada_kawai_cost(pos - step, inv, 1e-3, 2)
            numeric[i] = (up - down) / (2 * h)

        np.testing.assert_allclose(grad, numeric, rtol=1e-4, atol=1e-7)

    def test_coincident_points_finite(self):
        """Test that coincident nodes give a finite gradient."""
        inv = inverse(cycle_distances())
        cost, grad = kamada_kawai_cost(np.zeros(8), inv, 1e-3, 2)
        assert np.isfinite(cost)
        assert np.all(np.isfinite(grad))


class TestLbfgsDirection:
    """Test the two-loop recursion."""

    def test_empty_history(self):
        """Test steepest descent without history."""
        grad = np.array([1.0, -2.0])
        np.testing.assert_array_equal(lbfgs_direction(grad, [], []), [-1.0, 2.0])

    def test_newton_step_on_quadratic(self):
        """Test that one exact curvature pair recovers the Newton step."""
        # f(x) = x0^2 + x1^2, Hessian 2I
        s = [np.array([1.0, 0.0])]
        y = [np.array([2.0, 0.0])]
        grad = np.array([2.0, 0.0])
        np.testing.assert_allclose(lbfgs_direction(grad, s, y), [-1.0, 0.0])

    def test_descent_direction(self):
        """Test that positive curvature pairs give a descent direction."""
        H = np.array([[3.0, 0.5], [0.5, 1.0]])
        s = [np.array([1.0, 0.0]), np.array([0.0, 1.0])]
        y = [H @ v for v in s]
        grad = np.array([0.7, -1.3])
        d = lbfgs_direction(grad, s, y)
        assert grad @ d < 0


class TestBacktrackingLineSearch:
    """Test the Armijo line search."""

    def test_accepts_full_step(self):
        """Test that a good step is accepted as is."""
        f = lambda x: float(x @ x)
        x = np.array([1.0])
        step, ok = backtracking_line_search(x, np.array([-1.0]), 1.0, np.array([2.0]), f, 1.0)
        assert ok
        assert step == 1.0

    def test_shrinks_step(self):
        """Test that an overlong step is reduced."""
        f = lambda x: float(x @ x)
        x = np.array([1.0])
        step, ok = backtracking_line_search(x, np.array([-10.0]), 1.0, np.array([2.0]), f, 1.0)
        assert ok
        assert step < 0.2
        assert f(x + step * np.array([-10.0])) < 1.0

    def test_non_descent_direction(self):
        """Test the fallback for an uphill direction."""
        f = lambda x: float(x @ x)
        step, ok = backtracking_line_search(
            np.array([1.0]), np.array([1.0]), 1.0, np.array([2.0]), f, 1.0
        )
        assert not ok
        assert step == NON_DESCENT_STEP

    def test_gives_up(self):
        """Test that the search stops after its trial budget."""
        f = lambda x: float(x @ x)
        step, ok = backtracking_line_search(
            np.array([1.0]), np.array([-1000.0]), 1.0, np.array([2.0]), f, 1.0
        )
        assert not ok
        assert step == pytest.approx(0.9 ** 20)


class TestStressDescent:
    """Test StressDescent class."""

    def test_create_solver(self):
        """Test solver creation."""
        x = np.zeros((4, 2))
        solver = StressDescent(cycle_distances(), x)
        assert solver.n == 4
        assert solver.dim == 2
        assert solver.inv_dist[0, 0] == 0

    def test_cost_decreases_on_accepted_steps(self):
        """Test monotone cost whenever the line search succeeds."""
        x = RandomNumberGenerator(seed=1).rand((4, 2))
        solver = StressDescent(cycle_distances(), x)
        solver.run()

        assert len(solver.costs) == solver.iterations + 1
        for i, ok in enumerate(solver.accepted):
            if ok:
                assert solver.costs[i + 1] <= solver.costs[i]
        assert solver.costs[-1] < solver.costs[0]

    def test_more_iterations_no_worse(self):
        """Test that 100 iterations end no worse than 10."""
        x = RandomNumberGenerator(seed=2).rand((4, 2))

        short = StressDescent(cycle_distances(), x)
        short.max_iter = 10
        short.run()

        long = StressDescent(cycle_distances(), x)
        long.max_iter = 100
        long.run()

        assert long.costs[-1] <= short.costs[-1] + 1e-9

    def test_converges(self):
        """Test that a path settles at its ideal spacing."""
        D = np.array([[0.0, 1.0, 2.0], [1.0, 0.0, 1.0], [2.0, 1.0, 0.0]])
        x = np.array([[1.0, 0.0], [-0.5, 0.8], [-0.5, -0.8]])
        solver = StressDescent(D, x)
        result = solver.run()

        assert result.shape == (3, 2)
        assert np.linalg.norm(result[0] - result[2]) == pytest.approx(2.0, rel=1e-2)

    def test_input_not_mutated(self):
        """Test that the initial positions are copied."""
        x = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
        StressDescent(cycle_distances(), x).run()
        np.testing.assert_array_equal(x[3], [1.0, 1.0])

    def test_compute_stress(self):
        """Test stress of a known configuration."""
        D = np.array([[0.0, 1.0, 2.0], [1.0, 0.0, 1.0], [2.0, 1.0, 0.0]])
        x = np.array([[0.0, 0.0], [1.0, 0.0], [3.0, 0.0]])
        solver = StressDescent(D, x)
        # (1-1)^2 + (3-2)^2 + (2-1)^2
        assert solver.compute_stress() == pytest.approx(2.0)

    def test_compute_stress_skips_infinite(self):
        """Test that unreachable pairs are ignored."""
        D = np.array([[0.0, np.inf], [np.inf, 0.0]])
        solver = StressDescent(D, np.array([[0.0, 0.0], [5.0, 0.0]]))
        assert solver.compute_stress() == 0.0
        assert solver.inv_dist[0, 1] == 0.0

    def test_only_accepted_step_carried_over(self, monkeypatch):
        """Test that a failed line search does not change the next start."""
        results = iter([(0.5, True), (NON_DESCENT_STEP, False), (0.25, True)])
        starts = []

        def fake_search(x, direction, f, grad, func, alpha0):
            starts.append(alpha0)
            return next(results)

        monkeypatch.setattr("pylayout.descent.backtracking_line_search", fake_search)
        solver = StressDescent(cycle_distances(), RandomNumberGenerator(seed=3).rand((4, 2)))
        solver.max_iter = 3
        solver.run()

        assert starts == [1.0, 0.5, 0.5]
        assert solver.accepted == [True, False, True]
