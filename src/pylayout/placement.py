"""
Closed-form initial placements.

These are the starting points the iterative layouts fall back on when the
caller supplies no positions: ``random_layout`` for ARF and
``circular_layout`` for Kamada-Kawai.
"""

from __future__ import annotations

from typing import Optional, Sequence
import math

import numpy as np

from .errors import InvalidParameterError
from .graph import GraphInput, PositionMap, get_nodes, process_params
from .rng import RandomNumberGenerator

GOLDEN_RATIO = (1 + math.sqrt(5)) / 2


def random_layout(
    G: GraphInput,
    center: Optional[Sequence[float]] = None,
    dim: int = 2,
    seed: Optional[int] = None
) -> PositionMap:
    """
    Position nodes uniformly at random in the unit hypercube.

    Args:
        G: Graph or list of nodes
        center: Offset added to every position
        dim: Dimension of layout
        seed: Random seed for reproducible layouts

    Returns:
        Dict mapping node -> position
    """
    center = process_params(G, center, dim)
    rng = RandomNumberGenerator(seed)
    return {v: rng.rand(dim) + center for v in get_nodes(G)}


def circular_layout(
    G: GraphInput,
    scale: float = 1.0,
    center: Optional[Sequence[float]] = None,
    dim: int = 2,
    seed: Optional[int] = None
) -> PositionMap:
    """
    Position nodes on a circle (2D), a sphere (3D) or a hypersphere.

    The 3D case uses a Fibonacci spiral for an even spread; higher
    dimensions place normalised random vectors.

    Args:
        G: Graph or list of nodes
        scale: Radius
        center: Centre of the circle/sphere
        dim: Dimension of layout, at least 2
        seed: Random seed, only used for dim > 3

    Returns:
        Dict mapping node -> position

    Raises:
        InvalidParameterError: dim < 2
    """
    if dim < 2:
        raise InvalidParameterError("cannot handle dimensions < 2")

    center = process_params(G, center, dim)
    nodes = get_nodes(G)
    n = len(nodes)

    if n == 0:
        return {}
    if n == 1:
        return {nodes[0]: center.copy()}

    if dim == 2:
        theta = np.linspace(0, 2 * np.pi, n + 1)[:-1]
        coords = np.column_stack([np.cos(theta), np.sin(theta)])
    elif dim == 3:
        i = np.arange(n)
        theta = 2 * np.pi * i / GOLDEN_RATIO
        phi = np.arccos(1 - 2 * (i + 0.5) / n)
        coords = np.column_stack([
            np.sin(phi) * np.cos(theta),
            np.sin(phi) * np.sin(theta),
            np.cos(phi),
        ])
    else:
        rng = RandomNumberGenerator(seed)
        coords = rng.uniform(-1.0, 1.0, (n, dim))
        norms = np.linalg.norm(coords, axis=1)
        coords /= np.where(norms > 0, norms, 1.0)[:, np.newaxis]

    coords = coords * scale + center
    return {v: coords[i] for i, v in enumerate(nodes)}
