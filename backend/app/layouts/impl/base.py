"""
Base classes for layout algorithms.

Every algorithm takes a freshly parsed ``Graph``, overwrites its positions and
returns a ``LayoutDiagnostics`` record. Iterative algorithms share one loop:
per-iteration step, canvas clamp, optional cooperative stop check.
"""
from typing import Callable, Optional
import logging
import time

import numpy as np

from ...config import DEFAULT_SETTINGS, LayoutSettings
from ...utils import geometry_utils as gu
from .graph_model import Graph, LayoutDiagnostics

logger = logging.getLogger(__name__)

StopCheck = Callable[[], bool]


class LayoutAlgorithm:
    """A layout algorithm that assigns positions to every vertex of a graph."""

    name = "layout"

    def __init__(self, settings: LayoutSettings = DEFAULT_SETTINGS):
        self.settings = settings

    def run(self,
            graph: Graph,
            rng: Optional[np.random.Generator] = None,
            should_stop: Optional[StopCheck] = None) -> LayoutDiagnostics:
        raise NotImplementedError

    def _initialize(self, graph: Graph, rng: Optional[np.random.Generator]) -> None:
        """Uniform random start positions on the canvas."""
        graph.randomize_positions(rng if rng is not None else np.random.default_rng(),
                                  self.settings.canvas_size)


class IterativeLayout(LayoutAlgorithm):
    """Shared iteration loop; subclasses implement ``_step``."""

    def __init__(self, iterations: int, settings: LayoutSettings = DEFAULT_SETTINGS):
        super().__init__(settings)
        self.iterations = iterations

    def _prepare(self, graph: Graph) -> None:
        """Hook run once after initialization, before the first iteration."""

    def _step(self, graph: Graph, diagnostics: LayoutDiagnostics) -> None:
        raise NotImplementedError

    def run(self,
            graph: Graph,
            rng: Optional[np.random.Generator] = None,
            should_stop: Optional[StopCheck] = None) -> LayoutDiagnostics:
        diagnostics = LayoutDiagnostics()
        self._initialize(graph, rng)
        if graph.vertex_count == 0:
            return diagnostics
        self._prepare(graph)

        t0 = time.time()
        for iteration in range(self.iterations):
            if should_stop is not None and should_stop():
                diagnostics.cancelled = True
                logger.warning(
                    f"{self.name}: stopped after {iteration} of {self.iterations} iterations"
                )
                break
            self._step(graph, diagnostics)
            gu.clamp_to_canvas(graph.positions, self.settings.canvas_size)
            diagnostics.iterations_run += 1

            if iteration % self.settings.progress_log_interval == 0:
                logger.debug(f"{self.name}: iteration {iteration} ({time.time() - t0:.3f}s)")

        return diagnostics
