"""
Layout implementation package.
"""
from .graph_model import Edge, Graph, LayoutDiagnostics
from .codec import OutputFormat, parse, parse_rendered, render
from .distance import DistanceTable
from .forces import (
    CircularLayout,
    ForceAtlas2Layout,
    ForceAtlas2Params,
    FruchtermanReingoldLayout,
    FruchtermanReingoldParams,
    RandomLayout,
    accumulate_pairwise,
)
from .scaling import (
    KamadaKawaiLayout,
    MultidimensionalScalingLayout,
    ScalingParams,
    StressMajorizationLayout,
)
from .tree_layout import TreeLayout, buchheim

__all__ = [
    'Edge',
    'Graph',
    'LayoutDiagnostics',
    'OutputFormat',
    'parse',
    'parse_rendered',
    'render',
    'DistanceTable',
    'RandomLayout',
    'CircularLayout',
    'ForceAtlas2Layout',
    'ForceAtlas2Params',
    'FruchtermanReingoldLayout',
    'FruchtermanReingoldParams',
    'accumulate_pairwise',
    'StressMajorizationLayout',
    'MultidimensionalScalingLayout',
    'KamadaKawaiLayout',
    'ScalingParams',
    'TreeLayout',
    'buchheim',
]
