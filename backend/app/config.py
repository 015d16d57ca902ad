"""
Layout engine configuration.

Canvas geometry, algorithm defaults and request limits shared by the layout
facade, the HTTP router and the benchmark harness.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class LayoutSettings:
    """Engine-wide constants and limits"""
    canvas_size: float = 100.0  # canvas is [0, canvas_size] on both axes
    fr_area: float = 10000.0  # Fruchterman-Reingold layout area
    default_iterations: int = 100
    default_gravity: float = 1.0
    default_scaling_ratio: float = 2.0
    # Request limits (pairwise forces are O(n^2), shortest paths O(n^3))
    max_iterations: int = 10000
    max_vertices: int = 2000
    progress_log_interval: int = 20  # iterations between debug progress logs


DEFAULT_SETTINGS = LayoutSettings()
