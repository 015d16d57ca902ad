"""
Graph layout package.
"""
from .engine import (
    Algorithm,
    LayoutRequest,
    LayoutResponse,
    circular_layout,
    force_atlas2,
    fruchterman_reingold,
    kamada_kawai,
    layout,
    make_request,
    multidimensional_scaling,
    random_layout,
    stress_majorization,
    tree_layout,
)
from .errors import LayoutError, LayoutParameterError, MalformedGraphDescription

__all__ = [
    'Algorithm',
    'LayoutRequest',
    'LayoutResponse',
    'layout',
    'make_request',
    'random_layout',
    'circular_layout',
    'force_atlas2',
    'fruchterman_reingold',
    'stress_majorization',
    'multidimensional_scaling',
    'kamada_kawai',
    'tree_layout',
    'LayoutError',
    'LayoutParameterError',
    'MalformedGraphDescription',
]
