"""
Distance-scaling layouts: stress majorization, multidimensional scaling and
Kamada-Kawai.

Each one randomizes positions, builds a ``DistanceTable`` and then sweeps the
vertices in index order, updating positions in place so later vertices of a
sweep already see the earlier moves. Pairs at zero Euclidean distance or in
different components never contribute.
"""
from dataclasses import dataclass
from typing import Optional
import logging
import math

import numpy as np

from ...config import DEFAULT_SETTINGS, LayoutSettings
from .base import IterativeLayout
from .distance import DistanceTable
from .graph_model import Graph, LayoutDiagnostics

logger = logging.getLogger(__name__)


@dataclass
class ScalingParams:
    iterations: int = 100


class DistanceScalingLayout(IterativeLayout):
    """Iterative layout driven by graph-theoretic distances."""

    def __init__(self, params: ScalingParams, settings: LayoutSettings = DEFAULT_SETTINGS):
        super().__init__(params.iterations, settings)
        self.params = params
        self.table: Optional[DistanceTable] = None

    def _prepare(self, graph: Graph) -> None:
        self.table = DistanceTable.build(graph)
        unreachable = self.table.unreachable_pairs()
        if unreachable:
            logger.info(f"{self.name}: {unreachable} vertex pairs are disconnected and will be ignored")

    def _neighbours(self, i: int, positions: np.ndarray, diagnostics: LayoutDiagnostics):
        """Usable counterparts of vertex ``i`` in the current positions.

        Returns ``(mask, delta, actual, ideal, any_finite)`` where ``delta`` is
        ``pos_i - pos_j`` for every ``j`` and ``mask`` selects vertices at a
        finite graph distance and a nonzero Euclidean distance.
        """
        ideal = self.table.matrix[i]
        delta = positions[i] - positions
        actual = np.linalg.norm(delta, axis=1)
        finite = np.isfinite(ideal)
        finite[i] = False
        coincident = finite & (actual == 0)
        diagnostics.degenerate_geometry += int(np.count_nonzero(coincident))
        return finite & ~coincident, delta, actual, ideal, bool(finite.any())


class StressMajorizationLayout(DistanceScalingLayout):
    """Each vertex moves to the weighted average of the positions that would put
    it at its ideal distance from every other vertex, weights ``1 / d_ideal^2``.
    """

    name = "stress_majorization"

    def _step(self, graph: Graph, diagnostics: LayoutDiagnostics) -> None:
        positions = graph.positions
        for i in range(graph.vertex_count):
            mask, delta, actual, ideal, any_finite = self._neighbours(i, positions, diagnostics)
            if not mask.any():
                # Zero weight sum: keep the previous position
                if not any_finite:
                    diagnostics.no_finite_neighbors += 1
                continue
            d_ideal = ideal[mask]
            weights = 1.0 / (d_ideal * d_ideal)
            targets = positions[mask] + delta[mask] * (d_ideal / actual[mask])[:, np.newaxis]
            positions[i] = weights @ targets / weights.sum()


class MultidimensionalScalingLayout(DistanceScalingLayout):
    """Pairwise nudges: vertex ``i`` moves along the line to ``j`` by
    ``(d_actual - d_ideal) / d_ideal^2``, one ordered pair at a time.
    """

    name = "multidimensional_scaling"

    def _step(self, graph: Graph, diagnostics: LayoutDiagnostics) -> None:
        n = graph.vertex_count
        ideal = self.table.matrix.tolist()
        points = graph.positions.tolist()
        skipped = 0
        for i in range(n):
            row = ideal[i]
            p = points[i]
            for j in range(n):
                d_ideal = row[j]
                if i == j or math.isinf(d_ideal):
                    continue
                dx = points[j][0] - p[0]
                dy = points[j][1] - p[1]
                actual = math.hypot(dx, dy)
                if actual == 0:
                    skipped += 1
                    continue
                step = (actual - d_ideal) / (d_ideal * d_ideal * actual)
                p[0] += dx * step
                p[1] += dy * step
        diagnostics.degenerate_geometry += skipped
        graph.positions = np.array(points, dtype=float).reshape(n, 2)


class KamadaKawaiLayout(DistanceScalingLayout):
    """Spring relaxation: vertex ``i`` moves against the sum of
    ``(d_actual - d_ideal) / d_ideal`` along each unit vector ``(pos_i - pos_j) / d_actual``.
    """

    name = "kamada_kawai"

    def _step(self, graph: Graph, diagnostics: LayoutDiagnostics) -> None:
        positions = graph.positions
        for i in range(graph.vertex_count):
            mask, delta, actual, ideal, _ = self._neighbours(i, positions, diagnostics)
            if not mask.any():
                continue
            d_actual = actual[mask]
            d_ideal = ideal[mask]
            strength = (d_actual - d_ideal) / d_ideal
            force = (delta[mask] * (strength / d_actual)[:, np.newaxis]).sum(axis=0)
            positions[i] -= force
