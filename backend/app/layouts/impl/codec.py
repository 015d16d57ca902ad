"""
Wire encoding of graphs.

Input is an edge list ``"s1-t1,s2-t2,..."``. Output is either the rich form
``"nodes: x1,y1;x2,y2;...;edges: s1-t1,s2-t2,...,"`` or the edges-only form
``"s1-t1,s2-t2,..."`` kept for older clients.
"""
from enum import Enum
from typing import List, Tuple
import math
import re

import numpy as np

from ..errors import MalformedGraphDescription
from .graph_model import Edge, Graph

_VERTEX_INDEX = re.compile(r"[0-9]+", re.ASCII)
NODES_MARKER = "nodes:"
EDGES_MARKER = "edges:"


class OutputFormat(str, Enum):
    """Rendering modes"""
    RICH = "rich"
    EDGES = "edges"


# ============================================================================
# PARSING
# ============================================================================

def _parse_edge_token(token: str, position: int) -> Edge:
    parts = token.split("-")
    if len(parts) != 2:
        raise MalformedGraphDescription(
            f"Edge token {token!r} at position {position} must look like 'source-target'",
            token=token,
            position=position,
        )
    for part in parts:
        if not _VERTEX_INDEX.fullmatch(part):
            raise MalformedGraphDescription(
                f"Edge token {token!r} at position {position} has a non-integer endpoint {part!r}",
                token=token,
                position=position,
            )
    return Edge(int(parts[0]), int(parts[1]))


def parse_edges(text: str) -> List[Edge]:
    """Parse an edge list; empty text yields no edges."""
    text = text.strip()
    if not text:
        return []
    return [_parse_edge_token(token, i) for i, token in enumerate(text.split(","))]


def parse(text: str) -> Graph:
    """Parse the wire description into a fresh Graph."""
    return Graph(parse_edges(text))


def parse_rendered(text: str) -> Tuple[np.ndarray, List[Edge]]:
    """Decode the rich rendered form back into positions and edges."""
    text = text.strip()
    if not text.startswith(NODES_MARKER) or EDGES_MARKER not in text:
        raise MalformedGraphDescription(
            f"Rendered graph must contain {NODES_MARKER!r} followed by {EDGES_MARKER!r}"
        )
    nodes_part, edges_part = text[len(NODES_MARKER):].split(EDGES_MARKER, 1)

    coordinates = []
    for i, chunk in enumerate(c for c in nodes_part.strip().split(";") if c):
        try:
            x_text, y_text = chunk.split(",")
            x, y = float(x_text), float(y_text)
        except ValueError:
            raise MalformedGraphDescription(
                f"Node {i} has malformed coordinates {chunk!r}", token=chunk, position=i
            ) from None
        if not (math.isfinite(x) and math.isfinite(y)):
            raise MalformedGraphDescription(
                f"Node {i} has non-finite coordinates {chunk!r}", token=chunk, position=i
            )
        coordinates.append((x, y))

    tokens = [t for t in edges_part.strip().split(",") if t]
    edges = [_parse_edge_token(token, i) for i, token in enumerate(tokens)]
    positions = np.array(coordinates, dtype=float).reshape(-1, 2)
    return positions, edges


# ============================================================================
# RENDERING
# ============================================================================

def format_coordinate(value: float) -> str:
    """Shortest round-trip positional notation: ``100`` rather than ``100.0``."""
    # Adding 0.0 turns -0.0 into 0.0
    return np.format_float_positional(float(value) + 0.0, trim="-")


def render_edges(edges: List[Edge]) -> str:
    return ",".join(f"{e.source}-{e.target}" for e in edges)


def render(graph: Graph, output_format: OutputFormat = OutputFormat.RICH) -> str:
    """Serialize the graph; edges keep their input order."""
    output_format = OutputFormat(output_format)
    if output_format == OutputFormat.EDGES:
        return render_edges(graph.edges)

    nodes = "".join(
        f"{format_coordinate(x)},{format_coordinate(y)};" for x, y in graph.positions
    )
    edges = "".join(f"{e.source}-{e.target}," for e in graph.edges)
    return f"{NODES_MARKER} {nodes}{EDGES_MARKER} {edges}"
