"""
Graph model shared by every layout algorithm.

Vertices live in an arena: row ``i`` of ``Graph.positions`` is the position of
vertex ``i``. Edges are stored as ordered ``(source, target)`` pairs but every
algorithm treats them as undirected.
"""
from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Optional, Tuple
import networkx as nx
import numpy as np


class Edge(NamedTuple):
    source: int
    target: int

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


@dataclass
class LayoutDiagnostics:
    """Local recoveries and progress recorded during one layout run"""
    iterations_run: int = 0
    cancelled: bool = False
    # Force contributions skipped for zero distance or numeric overflow
    degenerate_geometry: int = 0
    # Vertex updates skipped because no finite-distance neighbour was usable
    no_finite_neighbors: int = 0

    def warnings(self, requested_iterations: Optional[int] = None) -> List[str]:
        messages = []
        if self.cancelled:
            if requested_iterations is not None:
                messages.append(
                    f"Deadline reached after {self.iterations_run} of {requested_iterations} iterations"
                )
            else:
                messages.append(f"Deadline reached after {self.iterations_run} iterations")
        if self.degenerate_geometry:
            messages.append(
                f"Skipped {self.degenerate_geometry} degenerate force contributions "
                "(zero distance or overflow)"
            )
        if self.no_finite_neighbors:
            messages.append(
                f"{self.no_finite_neighbors} vertex updates kept their previous position "
                "(no finite-distance neighbour)"
            )
        return messages


def count_vertices(edges: Iterable[Tuple[int, int]]) -> int:
    """``1 + max(endpoint)``, or 0 for no edges."""
    return max((max(s, t) + 1 for s, t in edges), default=0)


class Graph:
    """Edge list plus a vertex arena of positions and displacements.

    The vertex count is derived from the edges: ``1 + max(endpoint)``, or 0 when
    there are no edges, so every endpoint is a valid vertex index.
    """

    def __init__(self, edges: Iterable[Tuple[int, int]] = ()):
        self.edges: List[Edge] = [Edge(int(s), int(t)) for s, t in edges]
        for edge in self.edges:
            if edge.source < 0 or edge.target < 0:
                raise ValueError(f"Negative vertex index in edge {edge.source}-{edge.target}")
        n = count_vertices(self.edges)
        self._vertex_count = n
        self.positions = np.zeros((n, 2), dtype=float)
        self.displacements = np.zeros((n, 2), dtype=float)

    @property
    def vertex_count(self) -> int:
        return self._vertex_count

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def edge_array(self) -> np.ndarray:
        """Edges as an ``(m, 2)`` integer array."""
        if not self.edges:
            return np.zeros((0, 2), dtype=int)
        return np.array(self.edges, dtype=int)

    def randomize_positions(self, rng: np.random.Generator, canvas_size: float) -> None:
        """Uniform positions in ``[0, canvas_size)`` on both axes."""
        self.positions = rng.uniform(0.0, canvas_size, size=(self.vertex_count, 2))

    def reset_displacements(self) -> None:
        self.displacements.fill(0.0)

    def to_networkx(self) -> nx.Graph:
        """Undirected view with every vertex index present, isolated or not."""
        G = nx.Graph()
        G.add_nodes_from(range(self.vertex_count))
        G.add_edges_from(self.edges)
        return G

    def __repr__(self) -> str:
        return f"Graph(vertices={self.vertex_count}, edges={self.edge_count})"
