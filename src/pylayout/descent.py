"""
Quasi-Newton stress minimization for Kamada-Kawai layouts.

The cost over flattened node coordinates is:
cost = 0.5 * w * |Sum[x_i]|^2 + Sum_{i<j}[0.5 * (|x_i - x_j| / (D[i,j] + eps) - 1)^2]
where D is the matrix of ideal distances and the first term is a weak
centering penalty. It is minimized with limited-memory BFGS and a
backtracking (Armijo) line search.
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Sequence
import logging

import numpy as np

logger = logging.getLogger(__name__)

ARMIJO_C1 = 1e-4
BACKTRACK_FACTOR = 0.9
MAX_LINE_SEARCH_STEPS = 20
NON_DESCENT_STEP = 1e-8
ZERO_DISTANCE = 1e-10


def kamada_kawai_cost(
    pos_vec: np.ndarray,
    inv_dist: np.ndarray,
    mean_weight: float,
    dim: int
) -> tuple[float, np.ndarray]:
    """
    Cost and analytic gradient of the Kamada-Kawai stress.

    Only the upper triangle of ``inv_dist`` is read.

    Args:
        pos_vec: Flattened positions (n * dim)
        inv_dist: Inverse ideal distances (n x n)
        mean_weight: Weight of the centering penalty
        dim: Dimension of layout

    Returns:
        (cost, gradient) with the gradient flattened like pos_vec
    """
    n = inv_dist.shape[0]
    pos = pos_vec.reshape(n, dim)

    sum_pos = pos.sum(axis=0)
    cost = 0.5 * mean_weight * float(sum_pos @ sum_pos)

    # diff[i, j] = pos[i] - pos[j]
    diff = pos[:, np.newaxis, :] - pos[np.newaxis, :, :]
    distance = np.linalg.norm(diff, axis=2)

    upper = np.triu(np.ones((n, n), dtype=bool), k=1)
    offset = np.where(upper, distance * inv_dist - 1.0, 0.0)
    cost += 0.5 * float(np.sum(offset * offset))

    safe_distance = np.where(distance > 0, distance, ZERO_DISTANCE)
    coef = np.where(upper, inv_dist * offset / safe_distance, 0.0)
    coef = coef + coef.T

    grad = np.einsum('ijk,ij->ik', diff, coef) + mean_weight * sum_pos
    return cost, grad.ravel()


def lbfgs_direction(
    grad: np.ndarray,
    s_list: Sequence[np.ndarray],
    y_list: Sequence[np.ndarray]
) -> np.ndarray:
    """
    L-BFGS search direction by the two-loop recursion.

    Args:
        grad: Current gradient
        s_list: Recent position deltas, oldest first
        y_list: Matching gradient deltas

    Returns:
        Search direction -H * grad, H the implicit inverse-Hessian estimate
    """
    if len(s_list) == 0:
        return -grad

    q = grad.copy()
    count = len(s_list)
    rho = np.zeros(count)
    alpha = np.zeros(count)

    for i in range(count):
        ys = float(y_list[i] @ s_list[i])
        rho[i] = 1.0 / ys if ys != 0 else 0.0

    for i in range(count - 1, -1, -1):
        alpha[i] = rho[i] * float(s_list[i] @ q)
        q -= alpha[i] * y_list[i]

    s, y = s_list[-1], y_list[-1]
    yy = float(y @ y)
    gamma = float(s @ y) / yy if yy > 0 else 1.0

    r = gamma * q

    for i in range(count):
        beta = rho[i] * float(y_list[i] @ r)
        r += s_list[i] * (alpha[i] - beta)

    return -r


def backtracking_line_search(
    x: np.ndarray,
    direction: np.ndarray,
    f: float,
    grad: np.ndarray,
    func: Callable[[np.ndarray], float],
    alpha0: float
) -> tuple[float, bool]:
    """
    Shrink the step until the Armijo sufficient-decrease condition holds.

    Args:
        x: Current position
        direction: Search direction
        f: Cost at x
        grad: Gradient at x
        func: Cost function
        alpha0: Initial step size

    Returns:
        (step size, whether the Armijo condition was met). A direction that
        is not a descent direction gets a tiny fixed step.
    """
    slope = float(grad @ direction)
    if slope >= 0:
        return NON_DESCENT_STEP, False

    alpha = alpha0
    for _ in range(MAX_LINE_SEARCH_STEPS):
        if func(x + alpha * direction) <= f + ARMIJO_C1 * alpha * slope:
            return alpha, True
        alpha *= BACKTRACK_FACTOR

    return alpha, False


class StressDescent:
    """
    Uses L-BFGS to reduce Kamada-Kawai stress over a set of positions.

    Attributes:
        costs: Cost before the first step and after every step
        accepted: Per step, whether the line search met the Armijo condition
        iterations: Number of steps taken
        converged: Whether the gradient norm fell below ``gtol``
    """

    DISTANCE_OFFSET = 1e-3

    def __init__(self, D: np.ndarray, x: np.ndarray):
        """
        Initialize solver.

        Args:
            D: Matrix of ideal distances (n x n); zero and inf entries exert no pull
            x: Initial positions (n x dim)
        """
        self.D = np.asarray(D, dtype=float)
        self.x = np.array(x, dtype=float)
        self.n, self.dim = self.x.shape

        self.max_iter = 500
        self.gtol = 1e-5
        self.memory = 10
        self.mean_weight = 1e-3

        self.inv_dist = np.divide(
            1.0, self.D + self.DISTANCE_OFFSET,
            out=np.zeros_like(self.D),
            where=self.D != 0
        )

        self.costs: list[float] = []
        self.accepted: list[bool] = []
        self.iterations = 0
        self.converged = False

    def cost(self, pos_vec: np.ndarray) -> tuple[float, np.ndarray]:
        """Cost and gradient at a flattened position vector."""
        return kamada_kawai_cost(pos_vec, self.inv_dist, self.mean_weight, self.dim)

    def run(self) -> np.ndarray:
        """
        Run L-BFGS until the gradient norm drops below ``gtol`` or
        ``max_iter`` steps have been taken.

        Returns:
            Optimized positions (n x dim)
        """
        vec = self.x.ravel().copy()
        s_list: deque = deque(maxlen=self.memory)
        y_list: deque = deque(maxlen=self.memory)

        cost, grad = self.cost(vec)
        self.costs = [cost]
        self.accepted = []
        self.iterations = 0
        self.converged = False
        alpha = 1.0

        for _ in range(self.max_iter):
            direction = lbfgs_direction(grad, s_list, y_list)
            step, ok = backtracking_line_search(
                vec, direction, cost, grad,
                lambda v: self.cost(v)[0],
                alpha
            )
            # Only an accepted step is carried over to the next search. A failed
            # search keeps the previous start instead of its 1e-8 fallback.
            if ok:
                alpha = step

            new_vec = vec + step * direction
            new_cost, new_grad = self.cost(new_vec)

            s_list.append(new_vec - vec)
            y_list.append(new_grad - grad)

            vec, cost, grad = new_vec, new_cost, new_grad
            self.costs.append(cost)
            self.accepted.append(ok)
            self.iterations += 1

            if np.linalg.norm(grad) < self.gtol:
                self.converged = True
                break

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "stress descent: %d iterations, cost %.6g, converged=%s",
                self.iterations, cost, self.converged
            )

        self.x = vec.reshape(self.n, self.dim)
        return self.x

    def compute_stress(self) -> float:
        """
        Stress of the current positions.

        Returns:
            Sum of squared differences between actual and ideal distances
            over pairs with a finite ideal distance
        """
        diff = self.x[:, np.newaxis, :] - self.x[np.newaxis, :, :]
        distance = np.linalg.norm(diff, axis=2)
        upper = np.triu(np.ones((self.n, self.n), dtype=bool), k=1) & np.isfinite(self.D)
        return float(np.sum((distance[upper] - self.D[upper]) ** 2))
