"""
Layout facade: the single entry point the HTTP layer calls.

Validates parameters, parses the graph, runs one algorithm and renders the result.
"""
from typing import Any, Dict, List, Optional
from enum import Enum
import logging
import math
import time

import numpy as np
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..config import DEFAULT_SETTINGS, LayoutSettings
from .errors import LayoutParameterError
from .impl import codec
from .impl.base import LayoutAlgorithm, StopCheck
from .impl.codec import OutputFormat
from .impl.forces import (
    CircularLayout,
    ForceAtlas2Layout,
    ForceAtlas2Params,
    FruchtermanReingoldLayout,
    FruchtermanReingoldParams,
    RandomLayout,
)
from .impl.scaling import (
    KamadaKawaiLayout,
    MultidimensionalScalingLayout,
    ScalingParams,
    StressMajorizationLayout,
)
from .impl.graph_model import Graph, count_vertices
from .impl.tree_layout import TreeLayout

logger = logging.getLogger(__name__)

# ============================================================================
# ENUMS & MODELS
# ============================================================================

class Algorithm(str, Enum):
    """Available layout algorithms"""
    RANDOM = "random"
    CIRCULAR = "circular"
    FORCE_ATLAS2 = "force_atlas2"
    FRUCHTERMAN_REINGOLD = "fruchterman_reingold"
    STRESS_MAJORIZATION = "stress_majorization"
    MULTIDIMENSIONAL_SCALING = "multidimensional_scaling"
    KAMADA_KAWAI = "kamada_kawai"
    TREE = "tree"


# Parameters each algorithm reads, beyond the graph itself
ALGORITHM_PARAMETERS: Dict[Algorithm, List[str]] = {
    Algorithm.RANDOM: ["seed"],
    Algorithm.CIRCULAR: [],
    Algorithm.FORCE_ATLAS2: ["iterations", "gravity", "scaling_ratio", "seed"],
    Algorithm.FRUCHTERMAN_REINGOLD: ["iterations", "gravity", "seed"],
    Algorithm.STRESS_MAJORIZATION: ["iterations", "seed"],
    Algorithm.MULTIDIMENSIONAL_SCALING: ["iterations", "seed"],
    Algorithm.KAMADA_KAWAI: ["iterations", "seed"],
    Algorithm.TREE: ["root"],
}


class LayoutRequest(BaseModel):
    """Layout request"""
    algorithm: Algorithm
    graph: str = ""
    iterations: int = Field(DEFAULT_SETTINGS.default_iterations, ge=0)
    gravity: float = DEFAULT_SETTINGS.default_gravity
    scaling_ratio: float = Field(DEFAULT_SETTINGS.default_scaling_ratio, gt=0)
    seed: Optional[int] = Field(None, ge=0)
    output_format: OutputFormat = OutputFormat.RICH
    # Cooperative deadline, checked once per iteration
    timeout_seconds: Optional[float] = Field(None, gt=0)
    root: int = Field(0, ge=0)

    @field_validator("gravity", "scaling_ratio")
    @classmethod
    def must_be_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("must be a finite number")
        return v


class LayoutResponse(BaseModel):
    """Layout response"""
    graph: str
    algorithm: str
    vertex_count: int
    edge_count: int
    iterations: int = 0
    generation_time: float = 0.0
    cancelled: bool = False
    warnings: List[str] = []


# ============================================================================
# DISPATCH
# ============================================================================

def make_request(**fields: Any) -> LayoutRequest:
    """Build a LayoutRequest, turning validation failures into one LayoutParameterError."""
    try:
        return LayoutRequest(**fields)
    except ValidationError as e:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise LayoutParameterError(
            f"Invalid layout parameters: {', '.join(err['field'] for err in errors)}",
            errors=errors,
        ) from None


def build_algorithm(request: LayoutRequest, settings: LayoutSettings = DEFAULT_SETTINGS) -> LayoutAlgorithm:
    algorithm = request.algorithm
    if algorithm == Algorithm.RANDOM:
        return RandomLayout(settings)
    if algorithm == Algorithm.CIRCULAR:
        return CircularLayout(settings)
    if algorithm == Algorithm.FORCE_ATLAS2:
        params = ForceAtlas2Params(request.iterations, request.gravity, request.scaling_ratio)
        return ForceAtlas2Layout(params, settings)
    if algorithm == Algorithm.FRUCHTERMAN_REINGOLD:
        params = FruchtermanReingoldParams(request.iterations, request.gravity)
        return FruchtermanReingoldLayout(params, settings)
    if algorithm == Algorithm.TREE:
        return TreeLayout(request.root, settings)

    scaling = {
        Algorithm.STRESS_MAJORIZATION: StressMajorizationLayout,
        Algorithm.MULTIDIMENSIONAL_SCALING: MultidimensionalScalingLayout,
        Algorithm.KAMADA_KAWAI: KamadaKawaiLayout,
    }
    return scaling[algorithm](ScalingParams(request.iterations), settings)


def _deadline_check(timeout_seconds: Optional[float]) -> Optional[StopCheck]:
    if timeout_seconds is None:
        return None
    deadline = time.monotonic() + timeout_seconds
    return lambda: time.monotonic() >= deadline


def _parameter_error(field: str, message: str) -> LayoutParameterError:
    return LayoutParameterError(
        f"Invalid layout parameters: {field}", errors=[{"field": field, "message": message}]
    )


def layout(request: LayoutRequest, settings: LayoutSettings = DEFAULT_SETTINGS) -> LayoutResponse:
    """Run one layout call end to end. Nothing is kept between calls."""
    t0 = time.time()
    if request.iterations > settings.max_iterations:
        raise _parameter_error(
            "iterations", f"must be at most {settings.max_iterations}"
        )

    # Checked on the edge list so oversized graphs are never allocated
    edges = codec.parse_edges(request.graph)
    vertex_count = count_vertices(edges)
    if vertex_count > settings.max_vertices:
        raise _parameter_error(
            "graph", f"has {vertex_count} vertices, the limit is {settings.max_vertices}"
        )
    graph = Graph(edges)
    if request.algorithm == Algorithm.TREE and graph.vertex_count and request.root >= graph.vertex_count:
        raise _parameter_error(
            "root", f"must be a vertex index below {graph.vertex_count}"
        )

    logger.info(
        "[layout] %s: vertices=%d, edges=%d, iterations=%d",
        request.algorithm.value, graph.vertex_count, graph.edge_count, request.iterations,
    )
    algorithm = build_algorithm(request, settings)
    diagnostics = algorithm.run(
        graph,
        rng=np.random.default_rng(request.seed),
        should_stop=_deadline_check(request.timeout_seconds),
    )
    rendered = codec.render(graph, request.output_format)

    iterative = "iterations" in ALGORITHM_PARAMETERS[request.algorithm]
    warnings = diagnostics.warnings(request.iterations if iterative else None)
    for message in warnings:
        logger.warning("[layout] %s: %s", request.algorithm.value, message)

    generation_time = time.time() - t0
    logger.info("[layout] %s finished in %.3fs", request.algorithm.value, generation_time)
    return LayoutResponse(
        graph=rendered,
        algorithm=request.algorithm.value,
        vertex_count=graph.vertex_count,
        edge_count=graph.edge_count,
        iterations=diagnostics.iterations_run,
        generation_time=round(generation_time, 3),
        cancelled=diagnostics.cancelled,
        warnings=warnings,
    )


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

def _run(algorithm: Algorithm, graph_text: str, settings: LayoutSettings = DEFAULT_SETTINGS, **params: Any) -> str:
    request = make_request(algorithm=algorithm, graph=graph_text, **params)
    return layout(request, settings).graph


def random_layout(graph_text: str, **options: Any) -> str:
    return _run(Algorithm.RANDOM, graph_text, **options)


def circular_layout(graph_text: str, **options: Any) -> str:
    return _run(Algorithm.CIRCULAR, graph_text, **options)


def force_atlas2(graph_text: str, iterations: int, gravity: float, scaling_ratio: float, **options: Any) -> str:
    return _run(Algorithm.FORCE_ATLAS2, graph_text, iterations=iterations,
                gravity=gravity, scaling_ratio=scaling_ratio, **options)


def fruchterman_reingold(graph_text: str, iterations: int, gravity: float, **options: Any) -> str:
    return _run(Algorithm.FRUCHTERMAN_REINGOLD, graph_text, iterations=iterations,
                gravity=gravity, **options)


def stress_majorization(graph_text: str, iterations: int, **options: Any) -> str:
    return _run(Algorithm.STRESS_MAJORIZATION, graph_text, iterations=iterations, **options)


def multidimensional_scaling(graph_text: str, iterations: int, **options: Any) -> str:
    return _run(Algorithm.MULTIDIMENSIONAL_SCALING, graph_text, iterations=iterations, **options)


def kamada_kawai(graph_text: str, iterations: int, **options: Any) -> str:
    return _run(Algorithm.KAMADA_KAWAI, graph_text, iterations=iterations, **options)


def tree_layout(graph_text: str, root: int = 0, **options: Any) -> str:
    return _run(Algorithm.TREE, graph_text, root=root, **options)

