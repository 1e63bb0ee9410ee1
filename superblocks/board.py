"""Board storage and the spatial queries the rule catalog is written against.

The board is a 3x3 macro grid of regions ("superblocks"), each a 3x3 grid
of cells. Cells are stored as small integer codes in a single
``(3, 3, 3, 3)`` numpy array indexed ``[region_row, region_col, cell_row,
cell_col]``; code 0 is an empty cell and code ``i + 1`` is the i-th
``TileKind``. Everything a rule needs to know is answered here:

  * **Cell access**: ``get`` / ``set``. ``set`` is an unconditional
    overwrite; the cascade engine is the only writer during play.
  * **Adjacency**: ``adjacent_cells`` returns the up-to-4 orthogonal
    neighbors *inside the same region*. Adjacency never crosses a region
    boundary, so cells on a region edge have fewer neighbors.
  * **Regions**: ``region_cells`` (row-major) and ``adjacent_regions``
    (orthogonal, clipped at the macro-grid boundary).
  * **Edge cells**: ``is_edge_cell``: the cell sits on the boundary
    row/column of its region (the "near road" notion used by several rules).
  * **Counts**: per-region and adjacent-region counts by category or by
    exact kind, plus the weighted residential value used by Highrise.

Categories are never stored. Every count maps the current kind codes
through a lookup table, so a kind change is reflected immediately.
"""

from __future__ import annotations

from collections.abc import Iterator

import numpy as np

from .model import (
    CATEGORY_OF,
    GRID_SIZE,
    REGION_SIZE,
    Category,
    Position,
    TileKind,
)

_KINDS: tuple[TileKind, ...] = tuple(TileKind)
_CATEGORIES: tuple[Category, ...] = tuple(Category)
_EMPTY = 0

_CODE_OF: dict[TileKind, int] = {k: i + 1 for i, k in enumerate(_KINDS)}

# code -> category index (-1 for empty)
_CATEGORY_INDEX = np.array(
    [-1] + [_CATEGORIES.index(CATEGORY_OF[k]) for k in _KINDS],
    dtype=np.int8,
)

# Weight of residential kinds in ``residential_value_in_adjacent``.
# Residential kinds not listed weigh 1.
RESIDENTIAL_WEIGHTS: dict[TileKind, int] = {
    TileKind.TIER2_RESIDENTIAL: 4,
    TileKind.HIGHRISE: 4,
}

# code -> weight (0 for empty and non-residential)
_RESIDENTIAL_WEIGHT = np.array(
    [0]
    + [
        RESIDENTIAL_WEIGHTS.get(k, 1)
        if CATEGORY_OF[k] is Category.RESIDENTIAL
        else 0
        for k in _KINDS
    ],
    dtype=np.int32,
)

_DIRECTIONS = ((-1, 0), (1, 0), (0, -1), (0, 1))  # N, S, W, E

CellView = tuple[Position, TileKind | None]


class Board:
    def __init__(self) -> None:
        self._cells = np.zeros(
            (GRID_SIZE, GRID_SIZE, REGION_SIZE, REGION_SIZE), dtype=np.int8
        )

    # -- Cell access ----------------------------------------------------

    def get(self, pos: Position) -> TileKind | None:
        code = int(
            self._cells[
                pos.region_row, pos.region_col, pos.cell_row, pos.cell_col
            ]
        )
        return _KINDS[code - 1] if code != _EMPTY else None

    def set(self, pos: Position, tile: TileKind | None) -> None:
        code = _CODE_OF[tile] if tile is not None else _EMPTY
        self._cells[
            pos.region_row, pos.region_col, pos.cell_row, pos.cell_col
        ] = code

    def occupied_count(self) -> int:
        return int(np.count_nonzero(self._cells))

    def is_full(self) -> bool:
        return bool(np.all(self._cells != _EMPTY))

    def positions(self) -> Iterator[Position]:
        """All 81 positions, region by region, each region row-major."""
        for rr in range(GRID_SIZE):
            for rc in range(GRID_SIZE):
                for r in range(REGION_SIZE):
                    for c in range(REGION_SIZE):
                        yield Position(rr, rc, r, c)

    # -- Spatial queries --------------------------------------------------

    def adjacent_cells(self, pos: Position) -> list[CellView]:
        result: list[CellView] = []
        for dr, dc in _DIRECTIONS:
            r = pos.cell_row + dr
            c = pos.cell_col + dc
            if 0 <= r < REGION_SIZE and 0 <= c < REGION_SIZE:
                npos = pos.with_cell(r, c)
                result.append((npos, self.get(npos)))
        return result

    def region_cells(
        self, region_row: int, region_col: int
    ) -> list[CellView]:
        result: list[CellView] = []
        for r in range(REGION_SIZE):
            for c in range(REGION_SIZE):
                npos = Position(region_row, region_col, r, c)
                result.append((npos, self.get(npos)))
        return result

    @staticmethod
    def adjacent_regions(
        region_row: int, region_col: int
    ) -> list[tuple[int, int]]:
        result: list[tuple[int, int]] = []
        for dr, dc in _DIRECTIONS:
            r = region_row + dr
            c = region_col + dc
            if 0 <= r < GRID_SIZE and 0 <= c < GRID_SIZE:
                result.append((r, c))
        return result

    @staticmethod
    def is_edge_cell(pos: Position) -> bool:
        last = REGION_SIZE - 1
        return pos.cell_row in (0, last) or pos.cell_col in (0, last)

    # -- Counts ---------------------------------------------------------

    def count_category(
        self, region_row: int, region_col: int, category: Category
    ) -> int:
        codes = self._cells[region_row, region_col]
        return int(
            np.count_nonzero(
                _CATEGORY_INDEX[codes] == _CATEGORIES.index(category)
            )
        )

    def count_kind(
        self, region_row: int, region_col: int, kind: TileKind
    ) -> int:
        return int(
            np.count_nonzero(
                self._cells[region_row, region_col] == _CODE_OF[kind]
            )
        )

    def count_category_in_adjacent(
        self, region_row: int, region_col: int, category: Category
    ) -> int:
        return sum(
            self.count_category(r, c, category)
            for r, c in self.adjacent_regions(region_row, region_col)
        )

    def count_kind_in_adjacent(
        self, region_row: int, region_col: int, kind: TileKind
    ) -> int:
        return sum(
            self.count_kind(r, c, kind)
            for r, c in self.adjacent_regions(region_row, region_col)
        )

    def residential_value_in_adjacent(
        self, region_row: int, region_col: int
    ) -> int:
        """Weighted residential total over the adjacent regions.

        Tier-2 residential and highrise count 4, other residential kinds 1
        (see ``RESIDENTIAL_WEIGHTS``).
        """
        return sum(
            int(_RESIDENTIAL_WEIGHT[self._cells[r, c]].sum())
            for r, c in self.adjacent_regions(region_row, region_col)
        )

    def to_dict(self) -> list[dict]:
        """Occupied cells only, in ``positions()`` order."""
        cells = []
        for pos in self.positions():
            tile = self.get(pos)
            if tile is not None:
                cells.append({"position": pos.to_dict(), "tile": tile.value})
        return cells
