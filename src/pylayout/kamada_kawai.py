"""
Kamada-Kawai layout: place nodes so geometric distances match
graph-theoretic ones.
"""

from __future__ import annotations

from typing import Optional, Sequence
import logging

import numpy as np

from .descent import StressDescent
from .errors import GraphStructureError
from .graph import (
    DistanceMap,
    GraphInput,
    PositionMap,
    coerce_position,
    get_nodes,
    has_edges,
    process_params,
)
from .placement import circular_layout
from .rescale import rescale_layout
from .shortestpaths import shortest_path_distances

logger = logging.getLogger(__name__)

# Ideal distance assumed for pairs missing from a caller-supplied DistanceMap
MISSING_DISTANCE = 1e6


def kamada_kawai_layout(
    G: GraphInput,
    dist: Optional[DistanceMap] = None,
    pos: Optional[PositionMap] = None,
    weight: Optional[str] = 'weight',
    scale: float = 1.0,
    center: Optional[Sequence[float]] = None,
    dim: int = 2
) -> PositionMap:
    """
    Position nodes using the Kamada-Kawai path-length cost function.

    Args:
        G: Graph, or a list of nodes when ``dist`` is given
        dist: Node -> node -> ideal distance; shortest path lengths if None
        pos: Initial positions (default: circle/sphere, or a line for dim 1)
        weight: Edge attribute used as edge length
        scale: Scale factor for positions
        center: Centre of the layout
        dim: Dimension of layout

    Returns:
        Dict mapping node -> position

    Raises:
        GraphStructureError: G is a bare node list and dist is None
    """
    center = process_params(G, center, dim)
    nodes = get_nodes(G)
    n = len(nodes)

    if n == 0:
        return {}
    if n == 1:
        return {nodes[0]: center.copy()}

    if dist is None:
        if not has_edges(G):
            raise GraphStructureError(
                "Kamada-Kawai layout requires a Graph with edges, not just a list of nodes"
            )
        dist = shortest_path_distances(G, weight)

    D = np.full((n, n), MISSING_DISTANCE)
    for i, u in enumerate(nodes):
        row = dist.get(u)
        if row is not None:
            for j, v in enumerate(nodes):
                if v in row:
                    D[i, j] = row[v]
        D[i, i] = 0.0

    if pos is None:
        if dim >= 2:
            pos = circular_layout(G, 1.0, center, dim)
        else:
            pos = {v: np.array([i / (n - 1)]) for i, v in enumerate(nodes)}

    x = np.array([
        coerce_position(pos[v], dim) if v in pos else np.zeros(dim)
        for v in nodes
    ])

    solver = StressDescent(D, x)
    result = solver.run()
    logger.debug("kamada-kawai: %d nodes solved in %d iterations", n, solver.iterations)

    return rescale_layout({v: result[i] for i, v in enumerate(nodes)}, scale, center)
