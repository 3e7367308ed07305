"""
All-pairs shortest paths for ideal-distance targets.

Kamada-Kawai compares geometric distances against graph-theoretic ones.
This module computes those with SciPy's Floyd-Warshall implementation and
exposes them either as a dense matrix (``Calculator``) or as the nested
node -> node -> distance mapping the layouts accept (``shortest_path_distances``).
"""

from __future__ import annotations

from typing import Callable, Optional, TypeVar
import logging

import numpy as np
from scipy.sparse.csgraph import csgraph_from_dense, shortest_path

from .graph import DistanceMap, GraphInput, edge_weight, get_edges, get_nodes, node_index

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Calculator:
    """
    Calculator for shortest path lengths over an undirected weighted graph.

    Parallel edges keep their shortest length; self-loops are ignored.
    Unreachable pairs get ``inf``.
    """

    def __init__(
        self,
        n: int,
        edges: list[T],
        get_source_index: Callable[[T], int],
        get_target_index: Callable[[T], int],
        get_length: Callable[[T], float],
    ):
        """
        Initialize shortest path calculator.

        Args:
            n: Number of nodes
            edges: List of edges
            get_source_index: Function to get source node index from edge
            get_target_index: Function to get target node index from edge
            get_length: Function to get edge length
        """
        self.n = n
        self.edges = edges
        self.get_source_index = get_source_index
        self.get_target_index = get_target_index
        self.get_length = get_length
        self._matrix: Optional[np.ndarray] = None
        self._graph = None
        if n == 0:
            return

        weights = np.full((n, n), np.inf)
        for edge in edges:
            u = get_source_index(edge)
            v = get_target_index(edge)
            if u == v:
                continue
            d = min(weights[u, v], float(get_length(edge)))
            weights[u, v] = d
            weights[v, u] = d
        self._graph = csgraph_from_dense(weights, null_value=np.inf)

    def distance_matrix(self) -> np.ndarray:
        """
        Compute all-pairs shortest paths.

        Returns:
            n x n matrix of shortest distances
        """
        if self._matrix is None:
            if self.n == 0:
                self._matrix = np.zeros((0, 0))
            else:
                self._matrix = shortest_path(
                    self._graph,
                    method='FW',
                    directed=False,
                    return_predecessors=False
                )
        return self._matrix

    def distances_from_node(self, start: int) -> np.ndarray:
        """
        Get shortest path lengths from a start node.

        Args:
            start: Starting node index

        Returns:
            Array of shortest distances from start to every node
        """
        return self.distance_matrix()[start]


def shortest_path_distances(G: GraphInput, weight: Optional[str] = "weight") -> DistanceMap:
    """
    All-pairs shortest path lengths of G as a two-level dict.

    Args:
        G: Graph; edge lengths read from the ``weight`` attribute (default 1)
        weight: Edge attribute name, or None for unit lengths

    Returns:
        Dict mapping node -> node -> distance (inf when unreachable)
    """
    nodes = get_nodes(G)
    index = node_index(nodes)
    edges = get_edges(G)

    calc = Calculator(
        len(nodes),
        edges,
        lambda e: index[e[0]],
        lambda e: index[e[1]],
        lambda e: edge_weight(G, e[0], e[1], weight),
    )
    D = calc.distance_matrix()
    logger.debug("computed shortest paths for %d nodes, %d edges", len(nodes), len(edges))

    return {
        u: {v: float(D[i, j]) for j, v in enumerate(nodes)}
        for i, u in enumerate(nodes)
    }
