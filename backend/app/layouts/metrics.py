"""
Helper functions for computing layout quality metrics.
"""
from typing import Dict, List, Sequence
import math

import numpy as np
from shapely.geometry import LineString

from .impl.distance import DistanceTable
from .impl.graph_model import Edge


def edge_length_stats(positions: np.ndarray, edges: Sequence[Edge]) -> Dict[str, float]:
    """Mean, standard deviation and coefficient of variation of drawn edge lengths."""
    lengths = [
        float(np.linalg.norm(positions[e.source] - positions[e.target]))
        for e in edges if not e.is_self_loop
    ]
    if not lengths:
        return {'mean': 0.0, 'std': 0.0, 'cv': 0.0}
    mean = float(np.mean(lengths))
    std = float(np.std(lengths))
    return {'mean': mean, 'std': std, 'cv': std / mean if mean > 0 else 0.0}


def normalized_stress(positions: np.ndarray, table: DistanceTable) -> float:
    """Weighted stress ``sum w_ij (s * |p_i - p_j| - d_ij)^2 / sum w_ij d_ij^2``
    with ``w_ij = 1 / d_ij^2`` over connected pairs.

    The drawing is first rescaled by the factor ``s`` that minimizes the stress,
    so the value does not depend on canvas size. 0 means distances are preserved
    exactly.
    """
    n = table.n
    if n < 2:
        return 0.0
    i, j = np.triu_indices(n, k=1)
    ideal = table.matrix[i, j]
    connected = np.isfinite(ideal)
    if not np.any(connected):
        return 0.0
    ideal = ideal[connected]
    actual = np.linalg.norm(positions[i[connected]] - positions[j[connected]], axis=1)
    weights = 1.0 / (ideal * ideal)

    denominator = float(np.sum(weights * actual * actual))
    scale = float(np.sum(weights * actual * ideal)) / denominator if denominator > 0 else 0.0
    residual = scale * actual - ideal
    return float(np.sum(weights * residual * residual) / np.sum(weights * ideal * ideal))


def count_edge_crossings(positions: np.ndarray, edges: Sequence[Edge]) -> int:
    """Number of edge pairs whose segments cross.

    Pairs sharing an endpoint, self-loops and zero-length edges never count.
    """
    segments = []
    for e in edges:
        if e.is_self_loop:
            continue
        start, end = tuple(positions[e.source]), tuple(positions[e.target])
        if start == end:
            continue
        segments.append((e, LineString([start, end])))

    crossings = 0
    for a, (e1, line1) in enumerate(segments):
        for e2, line2 in segments[a + 1:]:
            if {e1.source, e1.target} & {e2.source, e2.target}:
                continue
            if line1.crosses(line2):
                crossings += 1
    return crossings


def min_vertex_separation(positions: np.ndarray) -> float:
    """Smallest distance between two distinct vertices, ``inf`` below two vertices."""
    n = positions.shape[0]
    if n < 2:
        return math.inf
    i, j = np.triu_indices(n, k=1)
    return float(np.min(np.linalg.norm(positions[i] - positions[j], axis=1)))


def layout_quality(positions: np.ndarray,
                   edges: List[Edge],
                   table: DistanceTable) -> Dict[str, float]:
    """All quality metrics of one drawing, flattened for tabular reports."""
    lengths = edge_length_stats(positions, edges)
    return {
        'edge_length_mean': lengths['mean'],
        'edge_length_cv': lengths['cv'],
        'stress': normalized_stress(positions, table),
        'crossings': count_edge_crossings(positions, edges),
        'min_separation': min_vertex_separation(positions),
    }
