"""Connected same-category clusters, used by the shopping center rule."""

from __future__ import annotations

from dataclasses import dataclass

from .board import Board
from .model import Position


@dataclass(frozen=True)
class Cluster:
    size: int
    touches_edge: bool


def find_cluster(board: Board, start: Position) -> Cluster:
    """Depth-first walk over 4-neighbors sharing the start cell's category.

    Membership is by category, not exact kind (a shop and a bank are both
    commercial). Adjacency is intra-region, so the walk never leaves the
    start region. An empty start cell yields an empty cluster. Nothing is
    cached; every call walks the current board.
    """
    tile = board.get(start)
    if tile is None:
        return Cluster(size=0, touches_edge=False)
    category = tile.category

    visited: set[Position] = set()
    touches_edge = False
    stack = [start]
    while stack:
        pos = stack.pop()
        if pos in visited:
            continue
        visited.add(pos)
        if board.is_edge_cell(pos):
            touches_edge = True
        for npos, ntile in board.adjacent_cells(pos):
            if (
                npos not in visited
                and ntile is not None
                and ntile.category is category
            ):
                stack.append(npos)

    return Cluster(size=len(visited), touches_edge=touches_edge)
