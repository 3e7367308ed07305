"""
Graph input types and accessors shared by the layout algorithms.

Layouts accept either a graph object exposing ``nodes()`` and ``edges()``
(and optionally ``get_edge_data()``), or a bare sequence of nodes with no
edges. Algorithms that need edge structure check for it with
``has_edges()`` and raise ``GraphStructureError`` themselves.
"""

from __future__ import annotations

from typing import Any, Hashable, Optional, Protocol, Sequence, Union, runtime_checkable
import numpy as np

from .errors import InvalidParameterError

Node = Hashable
Edge = tuple
PositionMap = dict
DistanceMap = dict


@runtime_checkable
class GraphLike(Protocol):
    """Minimal capability interface consumed by the layouts."""

    def nodes(self) -> list: ...

    def edges(self) -> list: ...


GraphInput = Union[GraphLike, Sequence[Any]]


class Graph:
    """
    Simple undirected graph with insertion-ordered nodes.

    Edges may carry arbitrary attributes, read back through
    ``get_edge_data(source, target, attr)``.
    """

    def __init__(
        self,
        nodes: Optional[Sequence[Node]] = None,
        edges: Optional[Sequence[Edge]] = None
    ):
        """
        Initialize graph.

        Args:
            nodes: Initial nodes
            edges: Initial edges as (source, target) or (source, target, attrs)
        """
        self._nodes: dict[Node, None] = {}
        self._edges: list[tuple[Node, Node]] = []
        self._edge_data: dict[frozenset, dict[str, Any]] = {}

        for v in nodes or []:
            self.add_node(v)
        for e in edges or []:
            if len(e) == 3:
                self.add_edge(e[0], e[1], **e[2])
            else:
                self.add_edge(e[0], e[1])

    def add_node(self, v: Node) -> None:
        """Add a node (no-op if already present)."""
        self._nodes.setdefault(v, None)

    def add_edge(self, u: Node, v: Node, **attrs: Any) -> None:
        """
        Add an undirected edge, adding missing endpoints.

        Re-adding an existing edge updates its attributes.
        """
        self.add_node(u)
        self.add_node(v)
        key = frozenset((u, v))
        if key not in self._edge_data:
            self._edges.append((u, v))
            self._edge_data[key] = {}
        self._edge_data[key].update(attrs)

    def nodes(self) -> list[Node]:
        return list(self._nodes)

    def edges(self) -> list[tuple[Node, Node]]:
        return list(self._edges)

    def get_edge_data(self, source: Node, target: Node, attr: str) -> Any:
        """Get an edge attribute, or None if the edge or attribute is missing."""
        data = self._edge_data.get(frozenset((source, target)))
        if data is None:
            return None
        return data.get(attr)

    def degree(self, v: Node) -> int:
        """Number of edge endpoints at v (a self-loop counts twice)."""
        return sum((u == v) + (w == v) for u, w in self._edges)

    def neighbors(self, v: Node) -> list[Node]:
        """Distinct neighbours of v in edge order."""
        result: dict[Node, None] = {}
        for u, w in self._edges:
            if u == v:
                result.setdefault(w, None)
            elif w == v:
                result.setdefault(u, None)
        return list(result)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, v: object) -> bool:
        return v in self._nodes


def has_edges(G: GraphInput) -> bool:
    """Check whether G is a graph object rather than a bare node list."""
    return callable(getattr(G, 'edges', None))


def get_nodes(G: GraphInput) -> list[Node]:
    """Get the ordered node list of a graph or bare node sequence."""
    if callable(getattr(G, 'nodes', None)):
        return list(G.nodes())
    return list(G)


def get_edges(G: GraphInput) -> list[tuple[Node, Node]]:
    """Get the edges of G as (source, target) pairs; a bare node list has none."""
    if not has_edges(G):
        return []
    return [(e[0], e[1]) for e in G.edges()]


def edge_weight(
    G: GraphInput,
    source: Node,
    target: Node,
    attr: Optional[str],
    default: float = 1.0
) -> float:
    """
    Look up a numeric edge attribute.

    Missing accessor, missing attribute or a falsy value all fall back to
    the default.
    """
    if attr is None:
        return default
    getter = getattr(G, 'get_edge_data', None)
    if getter is None:
        return default
    value = getter(source, target, attr)
    return float(value) if value else default


def node_index(nodes: Sequence[Node]) -> dict[Node, int]:
    """Build the node -> dense index table used by the array kernels."""
    return {v: i for i, v in enumerate(nodes)}


def node_degrees(G: GraphInput, nodes: Optional[Sequence[Node]] = None) -> np.ndarray:
    """
    Degree of every node, in node order.

    Args:
        G: Graph or bare node list (all degrees zero)
        nodes: Node order; defaults to ``get_nodes(G)``

    Returns:
        Float array of degrees
    """
    if nodes is None:
        nodes = get_nodes(G)
    index = node_index(nodes)
    degrees = np.zeros(len(nodes))
    for u, v in get_edges(G):
        degrees[index[u]] += 1
        degrees[index[v]] += 1
    return degrees


def coerce_position(p: Sequence[float], dim: int) -> np.ndarray:
    """
    Convert a caller-supplied position to a float vector of length dim.

    Shorter vectors are zero-padded.

    Raises:
        InvalidParameterError: the position has more than dim coordinates
    """
    p = np.asarray(p, dtype=float).ravel()
    if len(p) > dim:
        raise InvalidParameterError(
            f"position has {len(p)} coordinates but the layout dimension is {dim}"
        )
    if len(p) < dim:
        p = np.concatenate([p, np.zeros(dim - len(p))])
    return p


def process_params(
    G: GraphInput,
    center: Optional[Sequence[float]],
    dim: int
) -> np.ndarray:
    """
    Validate the shared layout parameters.

    Args:
        G: Graph input (unused beyond symmetry with the layout signatures)
        center: Requested layout centre, or None for the origin
        dim: Layout dimension

    Returns:
        Centre as a float array of length dim

    Raises:
        InvalidParameterError: dim < 1 or len(center) != dim
    """
    if dim < 1:
        raise InvalidParameterError(f"dimension of layout must be positive, got {dim}")
    if center is None:
        return np.zeros(dim)
    center = np.asarray(center, dtype=float)
    if len(center) != dim:
        raise InvalidParameterError(
            "length of center coordinates must match dimension of layout"
        )
    return center
