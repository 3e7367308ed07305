"""
Attractive and repulsive forces (ARF) layout.

Every node pair is joined by a spring (constant 1, or ``a`` for edges)
and pushed apart by a repulsion that falls off with distance. The system
is integrated with explicit Euler steps until the total force drops below
a tolerance.

The result is deliberately left in the integrator's own frame: the
spacing is set by ``rho = scaling * sqrt(n)``, and rescaling would throw
that away.
"""

from __future__ import annotations

from typing import Optional
import logging
import math

import numpy as np

from .errors import InvalidParameterError
from .graph import GraphInput, PositionMap, coerce_position, get_edges, get_nodes, node_index
from .placement import random_layout
from .rng import RandomNumberGenerator

logger = logging.getLogger(__name__)

TIME_STEP = 1e-3
ERROR_TOLERANCE = 1e-6
MIN_DISTANCE = 0.01


def arf_layout(
    G: GraphInput,
    pos: Optional[PositionMap] = None,
    scaling: float = 1.0,
    a: float = 1.1,
    max_iter: int = 1000,
    seed: Optional[int] = None,
    dim: int = 2
) -> PositionMap:
    """
    Position nodes using the ARF spring-repulsion integrator.

    Args:
        G: Graph or list of nodes
        pos: Initial positions; missing nodes are placed at random
        scaling: Scale of the repulsion, and so of the final layout
        a: Spring strength between connected nodes, must be > 1
        max_iter: Maximum number of Euler steps
        seed: Random seed for initial positions
        dim: Dimension of layout

    Returns:
        Dict mapping node -> position (not rescaled)

    Raises:
        InvalidParameterError: a <= 1
    """
    if not a > 1:
        raise InvalidParameterError("The parameter a should be larger than 1")
    if dim < 1:
        raise InvalidParameterError(f"dimension of layout must be positive, got {dim}")

    nodes = get_nodes(G)
    n = len(nodes)
    if n == 0:
        return {}
    if n == 1:
        v = nodes[0]
        if pos and v in pos:
            return {v: coerce_position(pos[v], dim)}
        return {v: np.zeros(dim)}

    if not pos:
        pos = random_layout(G, None, dim, seed)
        x = np.array([pos[v] for v in nodes], dtype=float)
    else:
        rng = RandomNumberGenerator(seed)
        x = np.array([
            coerce_position(pos[v], dim) if v in pos else rng.rand(dim)
            for v in nodes
        ])

    index = node_index(nodes)
    K = np.ones((n, n)) - np.eye(n)
    for u, v in get_edges(G):
        if u == v:
            continue
        K[index[u], index[v]] = a
        K[index[v], index[u]] = a

    rho = scaling * math.sqrt(n)

    error = ERROR_TOLERANCE + 1
    n_iter = 0
    while error > ERROR_TOLERANCE and n_iter < max_iter:
        # diff[i, j] = x[j] - x[i], so springs pull i toward j
        diff = x[np.newaxis, :, :] - x[:, np.newaxis, :]
        dist = np.maximum(np.linalg.norm(diff, axis=2), MIN_DISTANCE)

        change = np.einsum('ijk,ij->ik', diff, K - rho / dist)
        x += change * TIME_STEP

        error = float(np.linalg.norm(change, axis=1).sum())
        n_iter += 1

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("arf: %d nodes, %d iterations, residual force %.3g", n, n_iter, error)

    return {v: x[i] for i, v in enumerate(nodes)}
