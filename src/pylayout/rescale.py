"""
Centering and rescaling of node positions.

Every optimizer except ARF passes its result through ``rescale_layout``.
Non-finite coordinates (NaN, inf) are left out of the centroid and radius
computations and copied to the output unchanged, so a corrupted coordinate
stays visible instead of poisoning the other nodes.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union
import numpy as np

PositionInput = Union[dict, Sequence[Sequence[float]], np.ndarray]


def _pad_columns(a: np.ndarray, dim: int) -> np.ndarray:
    """Zero-pad the trailing axis of a up to dim entries."""
    missing = dim - a.shape[-1]
    if missing <= 0:
        return a
    pad = [(0, 0)] * (a.ndim - 1) + [(0, missing)]
    return np.pad(a, pad)


def _rescale_array(
    pos: np.ndarray,
    scale: float,
    center: Optional[Sequence[float]]
) -> np.ndarray:
    """
    Rescale an (n x d) array of positions.

    Args:
        pos: Positions, one row per node
        scale: Distance of the farthest node from the centre after scaling
        center: Target centre; None for the origin

    Returns:
        New (n x D) array, D = max(d, len(center))
    """
    pos = np.asarray(pos, dtype=float)
    if pos.ndim == 1:
        pos = pos.reshape(-1, 1)

    if center is None:
        center = np.zeros(pos.shape[1])
    else:
        center = np.asarray(center, dtype=float)

    dim = max(pos.shape[1], len(center))
    pos = _pad_columns(pos, dim)
    center = _pad_columns(center, dim)

    finite = np.isfinite(pos)
    counts = finite.sum(axis=0)
    sums = np.where(finite, pos, 0.0).sum(axis=0)
    centroid = np.divide(sums, counts, out=np.zeros(dim), where=counts > 0)

    centered = np.where(finite, pos - centroid, 0.0)
    lengths = np.sqrt((centered * centered).sum(axis=1))
    max_length = lengths.max() if len(lengths) else 0.0

    if max_length > 0:
        result = centered * (scale / max_length) + center
    else:
        result = np.broadcast_to(center, pos.shape).copy()

    result[~finite] = pos[~finite]
    return result


def rescale_layout(
    pos: PositionInput,
    scale: float = 1.0,
    center: Optional[Sequence[float]] = None
) -> Union[dict, np.ndarray]:
    """
    Center positions on their centroid and scale them to a half-extent.

    The farthest node ends up at distance ``scale`` from ``center``. When
    all nodes coincide they collapse onto ``center``. Positions shorter
    than ``center`` are zero-padded, and vice versa.

    Args:
        pos: Dict mapping node -> coordinates, or array-like of rows
        scale: Target maximum distance from the centre
        center: Target centre (default: origin of the position dimension)

    Returns:
        Dict of ndarrays for dict input, otherwise an (n x D) ndarray
    """
    if isinstance(pos, dict):
        if not pos:
            return {}
        nodes = list(pos)
        rows = [np.asarray(pos[v], dtype=float).ravel() for v in nodes]
        width = max(len(r) for r in rows)
        stacked = np.array([_pad_columns(r, width) for r in rows])
        result = _rescale_array(stacked, scale, center)
        return {v: result[i] for i, v in enumerate(nodes)}

    arr = np.asarray(pos, dtype=float)
    if arr.size == 0:
        return arr.copy()
    return _rescale_array(arr, scale, center)


def rescale_layout_dict(pos: dict, scale: float = 1.0) -> dict:
    """
    Rescale a position dict around the origin.

    Args:
        pos: Dict mapping node -> coordinates
        scale: Target maximum distance from the origin

    Returns:
        New dict of rescaled ndarrays
    """
    return rescale_layout(pos, scale=scale)
