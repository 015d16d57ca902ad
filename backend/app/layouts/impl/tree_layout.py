"""
Tidy tree drawing (Buchheim, Juenger and Leipert's linear-time variant of
Walker's algorithm).

Tree nodes are stored in an arena addressed by integer index: children,
parent, thread, ancestor and leftmost sibling are all indices, never nested
objects. The walks are iterative so deep paths do not hit the recursion limit.

A graph that is not a tree is drawn through its breadth-first spanning forest.
"""
from typing import List, Optional, Tuple
import logging

import networkx as nx
import numpy as np

from ...config import DEFAULT_SETTINGS, LayoutSettings
from .base import LayoutAlgorithm, StopCheck
from .graph_model import Graph, LayoutDiagnostics

logger = logging.getLogger(__name__)

NONE = -1


class TreeArena:
    """Per-node drawing state for the tidy tree walks."""

    def __init__(self, children: List[List[int]], root: int):
        size = len(children)
        self.root = root
        self.children = children
        self.parent = [NONE] * size
        self.number = [1] * size  # 1-based position among siblings
        for v, kids in enumerate(children):
            for position, c in enumerate(kids):
                self.parent[c] = v
                self.number[c] = position + 1
        self.x = [0.0] * size
        self.depth = [0] * size
        self.mod = [0.0] * size
        self.change = [0.0] * size
        self.shift = [0.0] * size
        self.thread = [NONE] * size
        self.ancestor = list(range(size))

    def left(self, v: int) -> int:
        if self.thread[v] != NONE:
            return self.thread[v]
        return self.children[v][0] if self.children[v] else NONE

    def right(self, v: int) -> int:
        if self.thread[v] != NONE:
            return self.thread[v]
        return self.children[v][-1] if self.children[v] else NONE

    def left_brother(self, v: int) -> int:
        p = self.parent[v]
        if p == NONE or self.number[v] == 1:
            return NONE
        return self.children[p][self.number[v] - 2]

    def leftmost_sibling(self, v: int) -> int:
        p = self.parent[v]
        if p == NONE or self.number[v] == 1:
            return NONE
        return self.children[p][0]

    def post_order(self) -> List[int]:
        order = []
        stack = [self.root]
        while stack:
            v = stack.pop()
            order.append(v)
            stack.extend(self.children[v])
        order.reverse()
        return order


def _first_walk(arena: TreeArena, distance: float) -> None:
    default_ancestor = {}
    for v in arena.post_order():
        kids = arena.children[v]
        w = arena.left_brother(v)
        if not kids:
            arena.x[v] = arena.x[w] + distance if w != NONE else 0.0
        else:
            _execute_shifts(arena, v)
            midpoint = (arena.x[kids[0]] + arena.x[kids[-1]]) / 2.0
            if w != NONE:
                arena.x[v] = arena.x[w] + distance
                arena.mod[v] = arena.x[v] - midpoint
            else:
                arena.x[v] = midpoint

        p = arena.parent[v]
        if p != NONE:
            current = default_ancestor.get(p, arena.children[p][0])
            default_ancestor[p] = _apportion(arena, v, current, distance)


def _apportion(arena: TreeArena, v: int, default_ancestor: int, distance: float) -> int:
    w = arena.left_brother(v)
    if w == NONE:
        return default_ancestor

    vir = vor = v
    vil = w
    vol = arena.leftmost_sibling(v)
    sir = sor = arena.mod[v]
    sil = arena.mod[vil]
    sol = arena.mod[vol]
    while arena.right(vil) != NONE and arena.left(vir) != NONE:
        vil = arena.right(vil)
        vir = arena.left(vir)
        vol = arena.left(vol)
        vor = arena.right(vor)
        arena.ancestor[vor] = v
        shift = (arena.x[vil] + sil) - (arena.x[vir] + sir) + distance
        if shift > 0:
            _move_subtree(arena, _ancestor(arena, vil, v, default_ancestor), v, shift)
            sir += shift
            sor += shift
        sil += arena.mod[vil]
        sir += arena.mod[vir]
        sol += arena.mod[vol]
        sor += arena.mod[vor]

    if arena.right(vil) != NONE and arena.right(vor) == NONE:
        arena.thread[vor] = arena.right(vil)
        arena.mod[vor] += sil - sor
    else:
        if arena.left(vir) != NONE and arena.left(vol) == NONE:
            arena.thread[vol] = arena.left(vir)
            arena.mod[vol] += sir - sol
        default_ancestor = v
    return default_ancestor


def _move_subtree(arena: TreeArena, wl: int, wr: int, shift: float) -> None:
    subtrees = arena.number[wr] - arena.number[wl]
    arena.change[wr] -= shift / subtrees
    arena.shift[wr] += shift
    arena.change[wl] += shift / subtrees
    arena.x[wr] += shift
    arena.mod[wr] += shift


def _execute_shifts(arena: TreeArena, v: int) -> None:
    shift = change = 0.0
    for w in reversed(arena.children[v]):
        arena.x[w] += shift
        arena.mod[w] += shift
        change += arena.change[w]
        shift += arena.shift[w] + change


def _ancestor(arena: TreeArena, vil: int, v: int, default_ancestor: int) -> int:
    a = arena.ancestor[vil]
    if arena.parent[a] == arena.parent[v]:
        return a
    return default_ancestor


def _second_walk(arena: TreeArena) -> float:
    """Resolve modifiers into absolute x and assign depths; returns the minimum x."""
    minimum = None
    stack = [(arena.root, 0.0, 0)]
    while stack:
        v, m, depth = stack.pop()
        arena.x[v] += m
        arena.depth[v] = depth
        if minimum is None or arena.x[v] < minimum:
            minimum = arena.x[v]
        for w in arena.children[v]:
            stack.append((w, m + arena.mod[v], depth + 1))
    return minimum


def buchheim(children: List[List[int]], root: int, distance: float = 1.0) -> TreeArena:
    """Lay out the tree given by ``children`` lists; x values start at 0."""
    arena = TreeArena(children, root)
    _first_walk(arena, distance)
    minimum = _second_walk(arena)
    if minimum < 0:
        arena.x = [x - minimum for x in arena.x]
    return arena


def spanning_forest(G: nx.Graph, root: int) -> Tuple[List[List[int]], List[int]]:
    """Breadth-first spanning forest: the component of ``root`` first, then one
    tree per remaining component rooted at its smallest vertex. Children are
    ordered by vertex index.
    """
    children: List[List[int]] = [[] for _ in range(G.number_of_nodes())]
    roots = [root]
    for component in sorted(nx.connected_components(G), key=min):
        if root not in component:
            roots.append(min(component))
    for r in roots:
        for parent, child in nx.bfs_edges(G, r, sort_neighbors=sorted):
            children[parent].append(child)
    return children, roots


class TreeLayout(LayoutAlgorithm):
    """Tidy top-down drawing of the spanning forest, scaled onto the canvas."""

    name = "tree"

    def __init__(self, root: int = 0, settings: LayoutSettings = DEFAULT_SETTINGS):
        super().__init__(settings)
        self.root = root

    def run(self,
            graph: Graph,
            rng: Optional[np.random.Generator] = None,
            should_stop: Optional[StopCheck] = None) -> LayoutDiagnostics:
        n = graph.vertex_count
        if n == 0:
            return LayoutDiagnostics()
        if not 0 <= self.root < n:
            raise IndexError(f"Root {self.root} is not a vertex of a graph with {n} vertices")

        children, roots = spanning_forest(graph.to_networkx(), self.root)
        if len(roots) > 1:
            logger.info(f"{self.name}: graph has {len(roots)} components, drawing a forest")
        # A virtual super-root places the trees of the forest side by side
        children.append(roots)
        arena = buchheim(children, root=n)

        xs = np.array(arena.x[:n], dtype=float)
        depths = np.array(arena.depth[:n], dtype=float) - 1.0
        size = self.settings.canvas_size
        width = xs.max() - xs.min()
        height = depths.max()
        positions = np.zeros((n, 2), dtype=float)
        positions[:, 0] = (xs - xs.min()) / width * size if width > 0 else size / 2.0
        positions[:, 1] = depths / height * size if height > 0 else 0.0
        graph.positions = positions
        return LayoutDiagnostics()
