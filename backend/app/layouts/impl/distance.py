"""
All-pairs shortest hop counts for the distance-scaling layouts.
"""
from typing import Optional
import logging
import time

import networkx as nx
import numpy as np

from .graph_model import Graph

logger = logging.getLogger(__name__)


class DistanceTable:
    """Read-only ``n x n`` matrix of graph-theoretic distances.

    The diagonal is 0, every edge counts as one hop in both directions and
    pairs in different components hold ``inf``.
    """

    def __init__(self, matrix: np.ndarray):
        self.matrix = np.array(matrix, dtype=float)
        self.matrix.setflags(write=False)

    @classmethod
    def build(cls, graph: Graph) -> "DistanceTable":
        """Floyd-Warshall over the undirected graph, O(n^3)."""
        n = graph.vertex_count
        if n == 0:
            return cls(np.zeros((0, 0)))
        t0 = time.time()
        matrix = nx.floyd_warshall_numpy(graph.to_networkx(), nodelist=list(range(n)))
        table = cls(np.asarray(matrix))
        logger.debug(
            f"Distance table built: {n} vertices, {table.unreachable_pairs()} unreachable pairs, "
            f"{time.time() - t0:.3f}s"
        )
        return table

    @property
    def n(self) -> int:
        return self.matrix.shape[0]

    def distance(self, i: int, j: int) -> float:
        return float(self.matrix[i, j])

    def is_connected(self, i: int, j: int) -> bool:
        return bool(np.isfinite(self.matrix[i, j]))

    def unreachable_pairs(self) -> int:
        """Number of unordered vertex pairs with no path between them."""
        return int(np.count_nonzero(~np.isfinite(self.matrix)) // 2)

    def diameter(self) -> Optional[float]:
        """Longest finite distance, or None for an empty table."""
        if self.n == 0:
            return None
        finite = self.matrix[np.isfinite(self.matrix)]
        return float(finite.max())
