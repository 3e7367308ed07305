"""
PyLayout: iterative node-positioning algorithms for graph drawing.

Force simulation (Fruchterman-Reingold, ForceAtlas2, ARF) and stress
minimization (Kamada-Kawai) over plain graphs, in any dimension.
"""

__version__ = "0.1.0"

from .errors import LayoutError, InvalidParameterError, GraphStructureError, LayoutWarning
from .graph import Graph, GraphLike
from .rng import RandomNumberGenerator
from .rescale import rescale_layout, rescale_layout_dict
from .placement import random_layout, circular_layout
from .shortestpaths import shortest_path_distances
from .fruchterman_reingold import fruchterman_reingold_layout, spring_layout
from .forceatlas2 import forceatlas2_layout
from .arf import arf_layout
from .kamada_kawai import kamada_kawai_layout

__all__ = [
    "LayoutError",
    "InvalidParameterError",
    "GraphStructureError",
    "LayoutWarning",
    "Graph",
    "GraphLike",
    "RandomNumberGenerator",
    "rescale_layout",
    "rescale_layout_dict",
    "random_layout",
    "circular_layout",
    "shortest_path_distances",
    "fruchterman_reingold_layout",
    "spring_layout",
    "forceatlas2_layout",
    "arf_layout",
    "kamada_kawai_layout",
]
