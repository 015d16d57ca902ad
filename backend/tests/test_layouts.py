"""
Tests for the layout facade and the layout algorithms.
"""
import math

import numpy as np
import pytest
from backend.app.layouts import engine
from backend.app.layouts.engine import Algorithm, layout, make_request
from backend.app.layouts.errors import LayoutParameterError, MalformedGraphDescription
from backend.app.layouts.impl import codec
from backend.app.layouts.impl.distance import DistanceTable
from backend.app.layouts.impl.forces import (
    ForceAtlas2Layout,
    ForceAtlas2Params,
    FruchtermanReingoldLayout,
    FruchtermanReingoldParams,
)
from backend.app.layouts.impl.graph_model import LayoutDiagnostics
from backend.app.layouts.impl.scaling import (
    KamadaKawaiLayout,
    MultidimensionalScalingLayout,
    ScalingParams,
    StressMajorizationLayout,
)
from backend.app.layouts.metrics import normalized_stress

GRAPHS = [
    "0-1",
    "0-1,1-2,2-3,3-4,4-0",
    "0-1,0-2,0-3,0-4,0-5",
    "0-1,1-2,3-4",
    "0-0,1-1",
    "0-1,0-1,1-2,2-2",
    "5-6",
]


def positions_of(rendered: str) -> np.ndarray:
    positions, _ = codec.parse_rendered(rendered)
    return positions


def run(algorithm: Algorithm, graph: str, **params) -> str:
    return layout(make_request(algorithm=algorithm, graph=graph, **params)).graph


@pytest.mark.parametrize("algorithm", list(Algorithm))
@pytest.mark.parametrize("graph", GRAPHS)
def test_positions_inside_canvas(algorithm, graph):
    rendered = run(algorithm, graph, iterations=30, seed=7)
    positions = positions_of(rendered)

    assert positions.shape == (codec.parse(graph).vertex_count, 2)
    assert np.all(np.isfinite(positions))
    assert np.all(positions >= 0.0) and np.all(positions <= 100.0)


@pytest.mark.parametrize("algorithm", list(Algorithm))
def test_edges_survive_in_input_order(algorithm):
    graph = "3-1,0-2,2-3,1-1,0-2"
    _, edges = codec.parse_rendered(run(algorithm, graph, iterations=5, seed=1))
    assert [f"{e.source}-{e.target}" for e in edges] == graph.split(",")


@pytest.mark.parametrize("algorithm", list(Algorithm))
def test_empty_graph(algorithm):
    assert run(algorithm, "", seed=3) == "nodes: edges: "


def test_circular_four_vertices():
    positions = positions_of(engine.circular_layout("0-1,1-2,2-3,3-0"))
    expected = [(100.0, 50.0), (50.0, 100.0), (0.0, 50.0), (50.0, 0.0)]
    for (x, y), (ex, ey) in zip(positions, expected):
        assert math.isclose(x, ex, abs_tol=1e-6)
        assert math.isclose(y, ey, abs_tol=1e-6)


def test_circular_ignores_seed():
    assert engine.circular_layout("0-1,1-2", seed=1) == engine.circular_layout("0-1,1-2", seed=2)


def test_seed_makes_runs_repeatable():
    first = engine.force_atlas2("0-1,1-2,2-0", 20, 1.0, 2.0, seed=42)
    second = engine.force_atlas2("0-1,1-2,2-0", 20, 1.0, 2.0, seed=42)
    assert first == second
    assert engine.random_layout("0-1", seed=1) != engine.random_layout("0-1", seed=2)


def test_zero_iterations_is_random_placement():
    graph = "0-1,1-2,2-3"
    random = engine.random_layout(graph, seed=11)
    assert engine.force_atlas2(graph, 0, 1.0, 2.0, seed=11) == random
    assert engine.fruchterman_reingold(graph, 0, 1.0, seed=11) == random
    assert engine.kamada_kawai(graph, 0, seed=11) == random


@pytest.mark.parametrize("algorithm", [
    Algorithm.STRESS_MAJORIZATION,
    Algorithm.MULTIDIMENSIONAL_SCALING,
    Algorithm.KAMADA_KAWAI,
])
def test_disconnected_graph_stays_finite(algorithm):
    response = layout(make_request(algorithm=algorithm, graph="0-1,1-2,3-4,5-5", iterations=50, seed=5))
    assert np.all(np.isfinite(positions_of(response.graph)))
    assert not response.cancelled


def test_stress_majorization_reduces_stress():
    graph = "0-1,1-2,2-3,3-4,4-5"
    table = DistanceTable.build(codec.parse(graph))
    before = normalized_stress(positions_of(engine.stress_majorization(graph, 0, seed=9)), table)
    after = normalized_stress(positions_of(engine.stress_majorization(graph, 50, seed=9)), table)
    assert after < before


def test_isolated_vertex_keeps_position_and_warns():
    # Vertex 1 has no finite-distance neighbour
    response = layout(make_request(
        algorithm=Algorithm.STRESS_MAJORIZATION, graph="0-0,1-1", iterations=3, seed=2
    ))
    start = positions_of(engine.stress_majorization("0-0,1-1", 0, seed=2))
    assert np.array_equal(positions_of(response.graph), start)
    assert any("no finite-distance neighbour" in w for w in response.warnings)


def test_edges_output_format():
    graph = "0-1,1-2,2-0"
    assert engine.fruchterman_reingold(graph, 10, 1.0, output_format="edges") == graph


def test_tree_layout_parents_above_children():
    # 0 -> (1, 2), 1 -> (3, 4)
    positions = positions_of(engine.tree_layout("0-1,0-2,1-3,1-4"))
    x, y = positions[:, 0], positions[:, 1]

    assert y[0] == 0.0
    assert y[0] < y[1] == y[2] < y[3] == y[4]
    assert y[3] == 100.0
    assert x[1] < x[2]
    assert x[3] < x[4]
    assert x[3] < x[1] < x[4]


def test_tree_layout_path_is_vertical():
    positions = positions_of(engine.tree_layout("0-1,1-2"))
    assert positions[:, 0].tolist() == [50.0, 50.0, 50.0]
    assert positions[:, 1].tolist() == [0.0, 50.0, 100.0]


def test_tree_layout_root_choice():
    positions = positions_of(engine.tree_layout("0-1,1-2", root=2))
    assert positions[:, 1].tolist() == [100.0, 50.0, 0.0]


def test_tree_layout_forest_side_by_side():
    positions = positions_of(engine.tree_layout("0-1,2-3"))
    assert positions[0, 1] == positions[2, 1] == 0.0
    assert positions[0, 0] < positions[2, 0]


def test_tree_layout_root_out_of_range():
    with pytest.raises(LayoutParameterError) as excinfo:
        engine.tree_layout("0-1", root=5)
    assert excinfo.value.errors[0]["field"] == "root"


def test_malformed_graph():
    with pytest.raises(MalformedGraphDescription):
        engine.circular_layout("0-1,x-2")


def test_parameter_errors_list_every_field():
    with pytest.raises(LayoutParameterError) as excinfo:
        make_request(algorithm="force_atlas2", iterations=-1, scaling_ratio=0, gravity=float("nan"))
    fields = {e["field"] for e in excinfo.value.errors}
    assert fields == {"iterations", "scaling_ratio", "gravity"}


def test_unknown_algorithm_and_format():
    with pytest.raises(LayoutParameterError):
        make_request(algorithm="spectral")
    with pytest.raises(LayoutParameterError):
        engine.circular_layout("0-1", output_format="json")


def test_configured_limits():
    with pytest.raises(LayoutParameterError):
        engine.force_atlas2("0-1", 10001, 1.0, 2.0)
    with pytest.raises(LayoutParameterError):
        engine.circular_layout("0-2000")


def test_deadline_cancels_run():
    graph = ",".join(f"{i}-{i + 1}" for i in range(40))
    response = layout(make_request(
        algorithm=Algorithm.KAMADA_KAWAI, graph=graph, iterations=10000, seed=1, timeout_seconds=1e-9
    ))
    assert response.cancelled
    assert response.iterations < 10000
    assert any("Deadline" in w for w in response.warnings)
    positions = positions_of(response.graph)
    assert np.all(positions >= 0.0) and np.all(positions <= 100.0)


def test_stop_check_is_polled_every_iteration():
    calls = []

    def should_stop():
        calls.append(1)
        return len(calls) > 3

    graph = codec.parse("0-1,1-2")
    layout_algorithm = ForceAtlas2Layout(ForceAtlas2Params(iterations=10))
    diagnostics = layout_algorithm.run(graph, np.random.default_rng(0), should_stop)

    assert diagnostics.cancelled
    assert diagnostics.iterations_run == 3


def test_immediate_stop_returns_initial_positions():
    graph = codec.parse("0-1,1-2,2-0")
    diagnostics = StressMajorizationLayout(ScalingParams(iterations=50)).run(
        graph, np.random.default_rng(4), should_stop=lambda: True
    )
    expected = np.random.default_rng(4).uniform(0.0, 100.0, size=(3, 2))

    assert diagnostics.cancelled
    assert diagnostics.iterations_run == 0
    assert np.array_equal(graph.positions, expected)


def test_response_metadata():
    response = layout(make_request(algorithm="fruchterman_reingold", graph="0-1,1-2", iterations=12, seed=0))
    assert response.algorithm == "fruchterman_reingold"
    assert response.vertex_count == 3
    assert response.edge_count == 2
    assert response.iterations == 12
    assert not response.cancelled


def test_vertex_limit_checked_before_allocation():
    with pytest.raises(LayoutParameterError) as excinfo:
        engine.circular_layout("0-100000000000")
    assert excinfo.value.errors[0]["field"] == "graph"


# ----------------------------------------------------------------------------
# Single-step force laws and update rules
# ----------------------------------------------------------------------------

def two_vertex_graph(p0, p1):
    graph = codec.parse("0-1")
    graph.positions = np.array([p0, p1], dtype=float)
    return graph


def test_force_atlas2_single_step():
    graph = two_vertex_graph((10.0, 10.0), (13.0, 14.0))
    start = graph.positions.copy()
    fa2 = ForceAtlas2Layout(ForceAtlas2Params(iterations=1, gravity=1.0, scaling_ratio=2.0))
    diagnostics = LayoutDiagnostics()
    fa2._step(graph, diagnostics)

    # d = 5, unit vector from vertex 1 to vertex 0 is (-0.6, -0.8)
    repulsion = 2.0 / 5.0 * np.array([-0.6, -0.8])
    attraction = 25.0 / 2.0 * np.array([0.6, 0.8])
    expected = np.array([
        repulsion + attraction - start[0] / np.linalg.norm(start[0]),
        -repulsion - attraction - start[1] / np.linalg.norm(start[1]),
    ])
    assert np.allclose(graph.displacements, expected)

    # Both displacements are longer than 1, so each vertex moves exactly 1
    moved = graph.positions - start
    assert np.allclose(np.linalg.norm(moved, axis=1), [1.0, 1.0])
    assert np.allclose(moved, expected / np.linalg.norm(expected, axis=1)[:, np.newaxis])
    assert diagnostics.degenerate_geometry == 0


def test_fruchterman_reingold_single_step():
    graph = two_vertex_graph((10.0, 10.0), (13.0, 14.0))
    start = graph.positions.copy()
    fr = FruchtermanReingoldLayout(FruchtermanReingoldParams(iterations=1, gravity=1.0))
    fr._prepare(graph)
    k = math.sqrt(10000.0 / 2)
    assert fr.k == pytest.approx(k)
    fr._step(graph, LayoutDiagnostics())

    repulsion = k * k / 5.0 * np.array([-0.6, -0.8])
    attraction = 25.0 / k * np.array([0.6, 0.8])
    # Gravity magnitude |p| / k toward the origin is p / k
    expected = np.array([
        repulsion + attraction - start[0] / k,
        -repulsion - attraction - start[1] / k,
    ])
    assert np.allclose(graph.displacements, expected)

    # Repulsion dominates and the step is capped at k
    moved = graph.positions - start
    assert np.allclose(np.linalg.norm(moved, axis=1), [k, k])
    assert np.allclose(moved, expected / np.linalg.norm(expected, axis=1)[:, np.newaxis] * k)


def test_mds_single_step_pulls_stretched_pair_together():
    graph = two_vertex_graph((10.0, 10.0), (13.0, 14.0))
    mds = MultidimensionalScalingLayout(ScalingParams(iterations=1))
    mds._prepare(graph)
    mds._step(graph, LayoutDiagnostics())

    # Vertex 0 moves (5 - 1) / 5 of the way toward vertex 1; vertex 1 then sits at distance 1
    assert np.allclose(graph.positions, [[12.4, 13.2], [13.0, 14.0]])


def test_kamada_kawai_single_step_stretched_pair():
    graph = two_vertex_graph((10.0, 10.0), (13.0, 14.0))
    kk = KamadaKawaiLayout(ScalingParams(iterations=1))
    kk._prepare(graph)
    kk._step(graph, LayoutDiagnostics())

    assert np.allclose(graph.positions, [[12.4, 13.2], [13.0, 14.0]])


def test_kamada_kawai_single_step_compressed_pair():
    graph = two_vertex_graph((10.0, 10.0), (10.3, 10.4))
    kk = KamadaKawaiLayout(ScalingParams(iterations=1))
    kk._prepare(graph)
    kk._step(graph, LayoutDiagnostics())

    # Pushed apart to the ideal distance of 1
    assert np.allclose(graph.positions, [[9.7, 9.6], [10.3, 10.4]])
    assert np.linalg.norm(graph.positions[0] - graph.positions[1]) == pytest.approx(1.0)


def test_gravity_skipped_at_origin():
    graph = two_vertex_graph((0.0, 0.0), (3.0, 4.0))
    diagnostics = LayoutDiagnostics()
    ForceAtlas2Layout(ForceAtlas2Params(iterations=1))._step(graph, diagnostics)

    assert np.all(np.isfinite(graph.displacements))
    assert np.all(np.isfinite(graph.positions))
    assert diagnostics.degenerate_geometry == 1


# ----------------------------------------------------------------------------
# Numeric overflow
# ----------------------------------------------------------------------------

def test_overflowing_attraction_leaves_vertices_in_place():
    response = layout(make_request(
        algorithm=Algorithm.FORCE_ATLAS2, graph="0-1", iterations=1, scaling_ratio=1e-306, seed=1
    ))
    assert response.graph == engine.random_layout("0-1", seed=1)
    assert any("overflow" in w for w in response.warnings)


@pytest.mark.parametrize("params", [
    dict(algorithm=Algorithm.FORCE_ATLAS2, scaling_ratio=1e-306),
    dict(algorithm=Algorithm.FORCE_ATLAS2, scaling_ratio=1e306),
    dict(algorithm=Algorithm.FORCE_ATLAS2, gravity=1e308),
    dict(algorithm=Algorithm.FORCE_ATLAS2, gravity=-1e308),
    dict(algorithm=Algorithm.FRUCHTERMAN_REINGOLD, gravity=1e308),
    dict(algorithm=Algorithm.FRUCHTERMAN_REINGOLD, gravity=-1e308),
])
def test_extreme_parameters_stay_finite(params):
    response = layout(make_request(graph="0-1,1-2,2-0,3-3", iterations=5, seed=1, **params))
    positions = positions_of(response.graph)
    assert np.all(np.isfinite(positions))
    assert np.all(positions >= 0.0) and np.all(positions <= 100.0)
