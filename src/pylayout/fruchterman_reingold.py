"""
Fruchterman-Reingold spring layout with a linear cooling schedule.

Every node pair repels with force k^2/d and every edge attracts with
force d^2/k. The summed displacement of each node is clamped to the
current temperature, which starts at 0.1 and falls linearly towards zero
over the iteration budget.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence
import logging
import math
import warnings

import numpy as np

from .errors import InvalidParameterError, LayoutWarning
from .graph import (
    GraphInput,
    Node,
    PositionMap,
    coerce_position,
    get_edges,
    get_nodes,
    node_index,
    process_params,
)
from .rescale import rescale_layout
from .rng import RandomNumberGenerator

logger = logging.getLogger(__name__)

# Distance floor for the force kernels
MIN_DISTANCE = 0.1
INITIAL_TEMPERATURE = 0.1


def _displacement(
    x: np.ndarray,
    sources: np.ndarray,
    targets: np.ndarray,
    k: float
) -> np.ndarray:
    """
    Net displacement of every node for one step.

    Args:
        x: Positions (n x dim)
        sources: Edge source indices
        targets: Edge target indices
        k: Optimal distance

    Returns:
        Displacement (n x dim)
    """
    # delta[i, j] = x[i] - x[j]
    delta = x[:, np.newaxis, :] - x[np.newaxis, :, :]
    distance = np.maximum(np.linalg.norm(delta, axis=2), MIN_DISTANCE)

    # Repulsion: unit(delta) * k^2 / d, summed over all other nodes
    disp = np.einsum('ijk,ij->ik', delta, k * k / (distance * distance))

    if len(sources):
        # Attraction along edges: unit(delta) * d^2 / k = delta * d / k
        edge_delta = delta[sources, targets]
        pull = edge_delta * (distance[sources, targets] / k)[:, np.newaxis]
        np.subtract.at(disp, sources, pull)
        np.add.at(disp, targets, pull)

    return disp


def fruchterman_reingold_layout(
    G: GraphInput,
    k: Optional[float] = None,
    pos: Optional[PositionMap] = None,
    fixed: Optional[Iterable[Node]] = None,
    iterations: int = 50,
    scale: float = 1.0,
    center: Optional[Sequence[float]] = None,
    dim: int = 2,
    seed: Optional[int] = None
) -> PositionMap:
    """
    Position nodes using the Fruchterman-Reingold force-directed algorithm.

    When ``fixed`` is given the result is returned in the caller's
    coordinate frame (no rescaling) so the fixed nodes stay exactly where
    they were put.

    Args:
        G: Graph or list of nodes
        k: Optimal distance between nodes (default 1/sqrt(n), also used for 0)
        pos: Initial positions; missing nodes are placed at random
        fixed: Nodes to keep at their initial position
        iterations: Number of cooling steps
        scale: Scale factor for the rescaled result
        center: Centre of the rescaled result
        dim: Dimension of layout
        seed: Random seed for initial positions

    Returns:
        Dict mapping node -> position
    """
    center = process_params(G, center, dim)
    if iterations < 0:
        raise InvalidParameterError(f"iterations must be non-negative, got {iterations}")

    nodes = get_nodes(G)
    n = len(nodes)
    if n == 0:
        return {}
    if n == 1:
        return {nodes[0]: center.copy()}

    index = node_index(nodes)
    edges = get_edges(G)
    fixed_nodes = set(fixed) if fixed is not None else set()

    rng = RandomNumberGenerator(seed)
    pos = pos or {}
    x = np.zeros((n, dim))
    for i, v in enumerate(nodes):
        if v in pos:
            x[i] = coerce_position(pos[v], dim)
        else:
            if v in fixed_nodes:
                warnings.warn(
                    f"fixed node {v!r} has no initial position; placing it at random",
                    LayoutWarning,
                    stacklevel=2
                )
            x[i] = rng.rand(dim)

    movable = np.array([v not in fixed_nodes for v in nodes])
    sources = np.array([index[u] for u, _ in edges], dtype=int)
    targets = np.array([index[v] for _, v in edges], dtype=int)

    if not k:
        k = 1.0 / math.sqrt(n)
    elif k < 0:
        raise InvalidParameterError(f"optimal distance k must be positive, got {k}")

    t = INITIAL_TEMPERATURE
    dt = t / (iterations + 1)

    for _ in range(iterations):
        disp = _displacement(x, sources, targets, k)

        length = np.linalg.norm(disp, axis=1)
        step = np.minimum(length, t)
        factor = np.divide(step, length, out=np.zeros(n), where=length > 0)
        factor[~movable] = 0.0
        x += disp * factor[:, np.newaxis]

        t -= dt

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "fruchterman-reingold: %d nodes, %d edges, %d iterations, final temperature %.3g",
            n, len(edges), iterations, t
        )

    positions = {v: x[i] for i, v in enumerate(nodes)}
    if fixed is None:
        positions = rescale_layout(positions, scale, center)
    return positions


def spring_layout(
    G: GraphInput,
    k: Optional[float] = None,
    pos: Optional[PositionMap] = None,
    fixed: Optional[Iterable[Node]] = None,
    iterations: int = 50,
    scale: float = 1.0,
    center: Optional[Sequence[float]] = None,
    dim: int = 2,
    seed: Optional[int] = None
) -> PositionMap:
    """Alias of ``fruchterman_reingold_layout``."""
    return fruchterman_reingold_layout(
        G, k=k, pos=pos, fixed=fixed, iterations=iterations,
        scale=scale, center=center, dim=dim, seed=seed
    )
