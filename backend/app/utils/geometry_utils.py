"""
Geometry helpers for vertex position arrays used by the layout algorithms.

Provides:
- clamp_to_canvas(positions, size)
- pairwise_deltas(positions)
- unit_vectors(delta, distance)
- cap_displacement(displacement, cap)
- circle_points(n, center, radius)

Positions are ``(n, 2)`` float arrays. Nothing here divides by a zero
distance: zero-length vectors map to zero unit vectors, and non-finite
displacements never produce a step.
"""
from typing import Tuple
import numpy as np
import math


def clamp_to_canvas(positions: np.ndarray, size: float) -> np.ndarray:
    """Clamp positions in place into ``[0, size]`` on both axes."""
    np.clip(positions, 0.0, size, out=positions)
    return positions


def pairwise_deltas(positions: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Return ``delta[i, j] = pos_i - pos_j`` and the matching distance matrix."""
    delta = positions[:, np.newaxis, :] - positions[np.newaxis, :, :]
    distance = np.linalg.norm(delta, axis=-1)
    return delta, distance


def unit_vectors(delta: np.ndarray, distance: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Normalize ``delta`` by ``distance`` where the distance is positive.

    Returns the unit vectors and the boolean mask of positive distances.
    """
    valid = distance > 0
    unit = np.zeros_like(delta)
    np.divide(delta, distance[..., np.newaxis], out=unit, where=valid[..., np.newaxis])
    return unit, valid


def cap_displacement(displacement: np.ndarray, cap: float) -> np.ndarray:
    """Scale each displacement row to length ``min(|d|, cap)``, keeping its direction."""
    length = np.hypot(displacement[:, 0], displacement[:, 1])
    step = np.zeros_like(displacement)
    # Rows that overflowed have no usable direction and do not move
    moving = (length > 0) & np.isfinite(length)
    if np.any(moving):
        scale = np.minimum(length[moving], cap) / length[moving]
        step[moving] = displacement[moving] * scale[:, np.newaxis]
    return step


def circle_points(n: int, center: Tuple[float, float], radius: float) -> np.ndarray:
    """``n`` points evenly spaced on a circle, the first at angle 0."""
    points = np.zeros((n, 2), dtype=float)
    for i in range(n):
        theta = (i / n) * 2.0 * math.pi
        points[i, 0] = center[0] + radius * math.cos(theta)
        points[i, 1] = center[1] + radius * math.sin(theta)
    return points
