"""The rebuild phase: propagate upgrades until the visited regions settle.

After every placement the session calls ``rebuild(board, start)``. The loop
works through a FIFO queue of positions:

  1. Seed the queue with the 9 cells of the region containing ``start``.
  2. Pop a position. Skip it if it was already found stable this pass.
  3. Empty cells are stable. For an occupied cell, evaluate the full
     candidate map (``rules.candidates_for``) and ask the resolver
     (``priority.select_upgrade``) for at most one target kind.
  4. No target: the cell is stable for this pass.
  5. A target: overwrite the cell, record a ``TileChange`` with the target
     kind's points, forget every stability mark, and enqueue the changed
     cell's neighbors, its whole region, every orthogonally adjacent
     region, and finally the cell itself.

Every change forgets *all* stability marks. Rules read region counts,
adjacent-region counts and commercial clusters without declaring what they
depend on, so any stable mark may be stale after a change. The cross-region
rules (highrise, bank, high school) rely on the full re-check set.

Only the regions the phase actually visits end at a fixed point: the start
region and, for every change, the changed region and its neighbors
(``checked_regions``). A placement that changes nothing never looks past
its own region, even though restaurant, high school and highrise cells in
the neighboring regions count its residential tiles. Those cells are picked
up the next time a rebuild reaches their region.

Tile kinds climb a short ladder and slums -> house is the only step down,
so a phase terminates in practice. That is verified by tests rather than
proven, so the loop also enforces a ceiling on applied changes
(``max_changes``, 10,000 by default). Hitting it raises
``CascadeLimitError``: the rule set is defective, the board is left as it
was at the moment of the abort, and the caller must treat its session as
corrupted.

The loop is synchronous and is the only writer of the board during a
phase; rule evaluation only reads.
"""

from __future__ import annotations

import logging
from collections import deque

from .board import Board
from .model import (
    DEFAULT_MAX_CASCADE_CHANGES,
    REGION_SIZE,
    Position,
    RebuildResult,
    TileChange,
)
from .priority import select_upgrade
from .rules import candidates_for

logger = logging.getLogger(__name__)


class CascadeLimitError(RuntimeError):
    """The rebuild phase applied ``max_changes`` changes without settling."""

    def __init__(self, result: RebuildResult, max_changes: int) -> None:
        super().__init__(
            f"rebuild from {result.start} reached the limit of "
            f"{max_changes} tile changes"
        )
        self.result = result
        self.max_changes = max_changes


def _region_positions(region_row: int, region_col: int) -> list[Position]:
    return [
        Position(region_row, region_col, r, c)
        for r in range(REGION_SIZE)
        for c in range(REGION_SIZE)
    ]


def _affected_positions(board: Board, pos: Position) -> list[Position]:
    """Cells to re-check after ``pos`` changed, in enqueue order."""
    affected = [npos for npos, _ in board.adjacent_cells(pos)]
    affected.extend(_region_positions(*pos.region))
    for rr, rc in board.adjacent_regions(*pos.region):
        affected.extend(_region_positions(rr, rc))
    affected.append(pos)
    return affected


def checked_regions(result: RebuildResult) -> set[tuple[int, int]]:
    """Regions the phase leaves settled.

    The start region, plus each changed cell's region and its neighbors.
    """
    regions = {result.start.region}
    for change in result.changes:
        region = change.position.region
        regions.add(region)
        regions.update(Board.adjacent_regions(*region))
    return regions


def rebuild(
    board: Board,
    start: Position,
    max_changes: int = DEFAULT_MAX_CASCADE_CHANGES,
) -> RebuildResult:
    """Apply upgrades until no cell in the work queue changes.

    Mutates ``board`` in place and returns every change in the order it was
    applied. Raises ``CascadeLimitError`` once ``max_changes`` changes have
    been applied.
    """
    result = RebuildResult(start=start)
    queue: deque[Position] = deque(_region_positions(*start.region))
    stable: set[Position] = set()

    while queue:
        pos = queue.popleft()
        if pos in stable:
            continue

        tile = board.get(pos)
        if tile is None:
            stable.add(pos)
            continue

        target = select_upgrade(tile, candidates_for(tile, pos, board))
        if target is None:
            stable.add(pos)
            continue

        board.set(pos, target)
        change = TileChange(
            position=pos, old=tile, new=target, points=target.points
        )
        result.changes.append(change)
        logger.debug(
            "%s: %s -> %s (%+d)",
            pos,
            tile.value,
            target.value,
            change.points,
        )

        if result.num_changes >= max_changes:
            logger.error(
                "Rebuild from %s hit the change limit (%d); aborting",
                start,
                max_changes,
            )
            raise CascadeLimitError(result, max_changes)

        stable.clear()
        queue.extend(_affected_positions(board, pos))

    logger.debug(
        "Rebuild from %s settled: %d changes, score %+d",
        start,
        result.num_changes,
        result.score_delta,
    )
    return result
