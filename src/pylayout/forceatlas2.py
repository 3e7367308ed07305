"""
ForceAtlas2 force-directed layout.

Based on the paper:
"ForceAtlas2, a Continuous Graph Layout Algorithm for Handy Network Visualization
Designed for the Gephi Software" by Jacomy, Venturini, Heymann, and Bastian (2014)

Key features:
- Mass-weighted repulsion (mass defaults to degree + 1, so hubs repel more)
- Gravity toward the centroid, linear or strong
- Adaptive global speed from aggregate swing/traction instead of cooling
- LinLog attraction for tighter clusters
- Hub dissuasion and distributed attraction
- Node-size aware repulsion for overlap prevention
"""

from __future__ import annotations

from typing import Optional
import logging
import math

import numpy as np

from .errors import InvalidParameterError
from .graph import (
    GraphInput,
    PositionMap,
    coerce_position,
    edge_weight,
    get_edges,
    get_nodes,
    has_edges,
    node_degrees,
    node_index,
)
from .rescale import rescale_layout
from .rng import RandomNumberGenerator

logger = logging.getLogger(__name__)

MIN_DISTANCE = 0.01
CONVERGENCE_THRESHOLD = 1e-10

# Adaptive speed controller
MAX_JITTER = 10.0
MIN_SPEED_EFFICIENCY = 0.05
MAX_RISE = 0.5
MAX_SPEED = 1000.0

# Overlap prevention step control
SIZE_SPEED_FACTOR = 0.1
MAX_SIZE_STEP = 10.0


def estimate_factor(
    n: int,
    swing: float,
    traction: float,
    speed: float,
    speed_efficiency: float,
    jitter_tolerance: float
) -> tuple[float, float]:
    """
    Update the global speed from this step's swing and traction.

    High swing relative to traction means the layout oscillates, so the
    speed efficiency is cut; steady traction lets it grow again. The speed
    itself rises by at most 50% per step.

    Args:
        n: Number of nodes
        swing: Aggregate oscillation of this step
        traction: Aggregate useful movement of this step
        speed: Current global speed
        speed_efficiency: Current speed efficiency
        jitter_tolerance: Allowed jitter

    Returns:
        (speed, speed_efficiency)
    """
    opt_jitter = 0.05 * math.sqrt(n)
    min_jitter = math.sqrt(opt_jitter)

    other = min(MAX_JITTER, opt_jitter * traction / (n * n))
    jitter = jitter_tolerance * max(min_jitter, other)

    ratio = swing / traction if traction > 0 else math.inf
    if ratio > 2.0:
        if speed_efficiency > MIN_SPEED_EFFICIENCY:
            speed_efficiency *= 0.5
        jitter = max(jitter, jitter_tolerance)

    if swing == 0:
        target_speed = math.inf
    else:
        target_speed = jitter * speed_efficiency * traction / swing

    if swing > jitter * traction:
        if speed_efficiency > MIN_SPEED_EFFICIENCY:
            speed_efficiency *= 0.7
    elif speed < MAX_SPEED:
        speed_efficiency *= 1.3

    speed = speed + min(target_speed - speed, MAX_RISE * speed)
    return speed, speed_efficiency


def _initial_positions(
    nodes: list,
    pos: Optional[PositionMap],
    dim: int,
    rng: RandomNumberGenerator
) -> np.ndarray:
    """
    Build the (n x dim) starting array.

    Without ``pos`` every node is drawn from [-1, 1)^dim. With a partial
    ``pos`` the unseeded nodes are drawn inside the bounding box of the
    seeded ones, widened by 1 on each side along any axis where it is flat.
    """
    n = len(nodes)
    seeded = [v for v in nodes if pos and v in pos]

    if not seeded:
        return rng.uniform(-1.0, 1.0, (n, dim))

    x = np.zeros((n, dim))
    known = np.array([coerce_position(pos[v], dim) for v in seeded])
    low = known.min(axis=0)
    high = known.max(axis=0)
    # A flat box would stack every unseeded node on one point
    flat = high == low
    low = np.where(flat, low - 1.0, low)
    high = np.where(flat, high + 1.0, high)
    for i, v in enumerate(nodes):
        if v in pos:
            x[i] = coerce_position(pos[v], dim)
        else:
            x[i] = low + rng.rand(dim) * (high - low)
    return x


def forceatlas2_layout(
    G: GraphInput,
    pos: Optional[PositionMap] = None,
    max_iter: int = 100,
    jitter_tolerance: float = 1.0,
    scaling_ratio: float = 2.0,
    gravity: float = 1.0,
    distributed_action: bool = False,
    strong_gravity: bool = False,
    node_mass: Optional[dict] = None,
    node_size: Optional[dict] = None,
    weight: Optional[str] = None,
    dissuade_hubs: bool = False,
    linlog: bool = False,
    seed: Optional[int] = None,
    dim: int = 2
) -> PositionMap:
    """
    Position nodes using the ForceAtlas2 force-directed algorithm.

    Args:
        G: Graph or list of nodes
        pos: Initial positions; may cover only some nodes
        max_iter: Maximum number of iterations
        jitter_tolerance: Tolerance for node speed adjustments
        scaling_ratio: Scaling of the repulsion force
        gravity: Attraction to the centroid, keeps components together
        distributed_action: Divide each node's attraction by its mass
        strong_gravity: Gravity grows with distance from the centroid
        node_mass: Node -> mass (default degree + 1)
        node_size: Node -> size; enables overlap prevention
        weight: Edge attribute used as attraction weight
        dissuade_hubs: Push hubs to the periphery by dividing their
            attraction by their mass
        linlog: Use logarithmic attraction
        seed: Random seed for initial positions
        dim: Dimension of layout

    Returns:
        Dict mapping node -> position, rescaled to unit extent around the origin
    """
    if dim < 1:
        raise InvalidParameterError(f"dimension of layout must be positive, got {dim}")
    if max_iter < 0:
        raise InvalidParameterError(f"max_iter must be non-negative, got {max_iter}")

    nodes = get_nodes(G)
    n = len(nodes)
    if n == 0:
        return {}

    rng = RandomNumberGenerator(seed)
    x = _initial_positions(nodes, pos, dim, rng)

    if has_edges(G):
        default_mass = node_degrees(G, nodes) + 1
    else:
        default_mass = np.ones(n)
    node_mass = node_mass or {}
    mass = np.array([node_mass.get(v) or default_mass[i] for i, v in enumerate(nodes)], dtype=float)

    adjust_sizes = node_size is not None
    size = np.array([(node_size or {}).get(v) or 1.0 for v in nodes], dtype=float)

    index = node_index(nodes)
    A = np.zeros((n, n))
    for u, v in get_edges(G):
        w = edge_weight(G, u, v, weight)
        A[index[u], index[v]] = w
        A[index[v], index[u]] = w

    mass_product = np.outer(mass, mass)
    not_self = ~np.eye(n, dtype=bool)
    if adjust_sizes:
        size_sum = size[:, np.newaxis] + size[np.newaxis, :]

    speed = 1.0
    speed_efficiency = 1.0
    iteration = 0

    for iteration in range(1, max_iter + 1):
        # diff[i, j] = x[i] - x[j]
        diff = x[:, np.newaxis, :] - x[np.newaxis, :, :]
        distance = np.maximum(np.linalg.norm(diff, axis=2), MIN_DISTANCE)

        if linlog:
            factor = -np.log1p(distance) / distance * A
            attraction = np.einsum('ijk,ij->ik', diff, factor)
        else:
            attraction = -np.einsum('ijk,ij->ik', diff, A)
        if distributed_action or dissuade_hubs:
            attraction /= mass[:, np.newaxis]

        if adjust_sizes:
            dist = np.maximum(distance - size_sum, MIN_DISTANCE)
        else:
            dist = distance
        factor = np.where(not_self, mass_product / (dist * dist) * scaling_ratio / dist, 0.0)
        repulsion = np.einsum('ijk,ij->ik', diff, factor)

        centered = x - x.mean(axis=0)
        if strong_gravity:
            gravities = -gravity * mass[:, np.newaxis] * centered
        else:
            length = np.linalg.norm(centered, axis=1)
            unit = np.divide(
                centered, length[:, np.newaxis],
                out=np.zeros_like(centered),
                where=(length > MIN_DISTANCE)[:, np.newaxis]
            )
            gravities = -gravity * mass[:, np.newaxis] * unit

        update = attraction + repulsion + gravities

        df = np.linalg.norm(update, axis=1)
        swing = float(np.sum(mass * df))
        traction = float(np.sum(0.5 * mass * np.linalg.norm(2 * x + update, axis=1)))

        speed, speed_efficiency = estimate_factor(
            n, swing, traction, speed, speed_efficiency, jitter_tolerance
        )

        swinging = mass * df
        if adjust_sizes:
            step = SIZE_SPEED_FACTOR * speed / (1 + np.sqrt(speed * swinging))
            step = np.divide(
                np.minimum(step * df, MAX_SIZE_STEP), df,
                out=np.zeros(n), where=df > 0
            )
        else:
            step = speed / (1 + np.sqrt(speed * swinging))

        movement = update * step[:, np.newaxis]
        x += movement

        total_movement = float(np.abs(movement).sum())
        if total_movement < CONVERGENCE_THRESHOLD:
            logger.debug("forceatlas2 converged after %d iterations", iteration)
            break

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "forceatlas2: %d nodes, %d iterations, speed %.3g, efficiency %.3g",
            n, iteration, speed, speed_efficiency
        )

    return rescale_layout({v: x[i] for i, v in enumerate(nodes)}, 1.0, np.zeros(dim))
