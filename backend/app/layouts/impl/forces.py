"""
Force simulators: random, circular, ForceAtlas2 and Fruchterman-Reingold.

The O(n^2) pairwise phase is shared by both force-directed algorithms through
``accumulate_pairwise``, parameterized by a force law. All forces of one
iteration are accumulated from a single snapshot of positions before any
vertex moves.
"""
from dataclasses import dataclass
from typing import Callable, Optional, Tuple
import logging
import math

import numpy as np

from ...config import DEFAULT_SETTINGS, LayoutSettings
from ...utils import geometry_utils as gu
from .base import IterativeLayout, LayoutAlgorithm, StopCheck
from .graph_model import Graph, LayoutDiagnostics

logger = logging.getLogger(__name__)

# Maps an array of positive distances to force magnitudes
ForceLaw = Callable[[np.ndarray], np.ndarray]


# ============================================================================
# FORCE ACCUMULATION
# ============================================================================

def accumulate_pairwise(positions: np.ndarray, law: ForceLaw) -> Tuple[np.ndarray, int]:
    """Sum ``law(d_ij) * (pos_i - pos_j) / d_ij`` over every ordered pair ``i != j``.

    Coincident pairs are skipped. Returns the displacement array and the number
    of skipped ordered pairs.
    """
    n = positions.shape[0]
    delta, distance = gu.pairwise_deltas(positions)
    unit, valid = gu.unit_vectors(delta, distance)
    magnitude = np.zeros_like(distance)
    magnitude[valid] = law(distance[valid])
    displacement = np.einsum("ijk,ij->ik", unit, magnitude)
    # The diagonal is always zero distance and is not a degenerate pair
    coincident = int(np.count_nonzero(~valid)) - n
    return displacement, coincident


def accumulate_edges(positions: np.ndarray,
                     edges: np.ndarray,
                     law: ForceLaw,
                     displacement: np.ndarray) -> int:
    """Pull the endpoints of every edge toward each other, in place.

    Duplicate edges contribute once per occurrence; self-loops contribute
    nothing. Returns the number of non-loop edges skipped for zero length.
    """
    if len(edges) == 0:
        return 0
    source, target = edges[:, 0], edges[:, 1]
    delta = positions[source] - positions[target]
    distance = np.linalg.norm(delta, axis=1)
    valid = distance > 0
    skipped = int(np.count_nonzero(~valid & (source != target)))
    if np.any(valid):
        d = distance[valid]
        force = delta[valid] / d[:, np.newaxis] * law(d)[:, np.newaxis]
        np.subtract.at(displacement, source[valid], force)
        np.add.at(displacement, target[valid], force)
    return skipped


def apply_gravity(positions: np.ndarray, law: ForceLaw, displacement: np.ndarray) -> int:
    """Pull every vertex toward the origin with magnitude ``law(|pos|)``, in place.

    Vertices sitting exactly on the origin are skipped; their count is returned.
    """
    distance = np.linalg.norm(positions, axis=1)
    valid = distance > 0
    if np.any(valid):
        d = distance[valid]
        displacement[valid] -= positions[valid] / d[:, np.newaxis] * law(d)[:, np.newaxis]
    return int(np.count_nonzero(~valid))


# ============================================================================
# NON-ITERATIVE LAYOUTS
# ============================================================================

class RandomLayout(LayoutAlgorithm):
    """Uniform random positions on the canvas."""

    name = "random"

    def run(self,
            graph: Graph,
            rng: Optional[np.random.Generator] = None,
            should_stop: Optional[StopCheck] = None) -> LayoutDiagnostics:
        self._initialize(graph, rng)
        return LayoutDiagnostics()


class CircularLayout(LayoutAlgorithm):
    """Vertices evenly spaced on the circle inscribed in the canvas."""

    name = "circular"

    def run(self,
            graph: Graph,
            rng: Optional[np.random.Generator] = None,
            should_stop: Optional[StopCheck] = None) -> LayoutDiagnostics:
        half = self.settings.canvas_size / 2.0
        graph.positions = gu.circle_points(graph.vertex_count, (half, half), half)
        gu.clamp_to_canvas(graph.positions, self.settings.canvas_size)
        return LayoutDiagnostics()


# ============================================================================
# FORCE-DIRECTED LAYOUTS
# ============================================================================

@dataclass
class ForceAtlas2Params:
    iterations: int = 100
    gravity: float = 1.0
    scaling_ratio: float = 2.0


@dataclass
class FruchtermanReingoldParams:
    iterations: int = 100
    gravity: float = 1.0


class ForceDirectedLayout(IterativeLayout):
    """Reset, repel, attract, gravitate, then move by a capped displacement."""

    def _repulsion(self, distance: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def _attraction(self, distance: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def _gravity(self, distance: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def _max_step(self) -> float:
        raise NotImplementedError

    def _step(self, graph: Graph, diagnostics: LayoutDiagnostics) -> None:
        graph.reset_displacements()
        # Extreme parameters can overflow a force law; such rows are dropped below
        with np.errstate(over="ignore", invalid="ignore"):
            repulsion, coincident = accumulate_pairwise(graph.positions, self._repulsion)
            graph.displacements += repulsion
            skipped_edges = accumulate_edges(
                graph.positions, graph.edge_array(), self._attraction, graph.displacements
            )
            at_origin = apply_gravity(graph.positions, self._gravity, graph.displacements)

        overflowed = ~np.all(np.isfinite(graph.displacements), axis=1)
        if np.any(overflowed):
            graph.displacements[overflowed] = 0.0
        diagnostics.degenerate_geometry += (
            coincident + skipped_edges + at_origin + int(np.count_nonzero(overflowed))
        )

        graph.positions += gu.cap_displacement(graph.displacements, self._max_step())


class ForceAtlas2Layout(ForceDirectedLayout):
    """ForceAtlas2 with linear repulsion falloff and quadratic attraction.

    Repulsion ``scaling_ratio / d``, attraction ``d^2 / scaling_ratio``,
    constant-magnitude gravity toward the origin, steps capped at unit length.
    """

    name = "force_atlas2"

    def __init__(self, params: ForceAtlas2Params, settings: LayoutSettings = DEFAULT_SETTINGS):
        super().__init__(params.iterations, settings)
        self.params = params

    def _repulsion(self, distance: np.ndarray) -> np.ndarray:
        return self.params.scaling_ratio / distance

    def _attraction(self, distance: np.ndarray) -> np.ndarray:
        return distance * distance / self.params.scaling_ratio

    def _gravity(self, distance: np.ndarray) -> np.ndarray:
        return np.full_like(distance, self.params.gravity)

    def _max_step(self) -> float:
        return 1.0


class FruchtermanReingoldLayout(ForceDirectedLayout):
    """Fruchterman-Reingold over a fixed area.

    With ``k = sqrt(area / n)``: repulsion ``k^2 / d``, attraction ``d^2 / k``,
    gravity ``gravity * d / k`` toward the origin, steps capped at ``k``.
    """

    name = "fruchterman_reingold"

    def __init__(self, params: FruchtermanReingoldParams, settings: LayoutSettings = DEFAULT_SETTINGS):
        super().__init__(params.iterations, settings)
        self.params = params
        self.k = 0.0

    def _prepare(self, graph: Graph) -> None:
        self.k = math.sqrt(self.settings.fr_area / graph.vertex_count)
        logger.debug(f"{self.name}: optimal distance k={self.k:.3f}")

    def _repulsion(self, distance: np.ndarray) -> np.ndarray:
        return self.k * self.k / distance

    def _attraction(self, distance: np.ndarray) -> np.ndarray:
        return distance * distance / self.k

    def _gravity(self, distance: np.ndarray) -> np.ndarray:
        return self.params.gravity * distance / self.k

    def _max_step(self) -> float:
        return self.k
