"""Tests for board storage, spatial queries and count helpers."""

from __future__ import annotations

import pytest

from superblocks.board import RESIDENTIAL_WEIGHTS, Board
from superblocks.model import CATEGORY_OF, Category, Position, TileKind

P = Position
T = TileKind


def _prefill(board: Board, cells: dict[Position, TileKind]) -> Board:
    for pos, tile in cells.items():
        board.set(pos, tile)
    return board


class TestCellAccess:
    def test_new_board_is_empty(self):
        board = Board()
        assert all(board.get(p) is None for p in board.positions())
        assert board.occupied_count() == 0
        assert not board.is_full()

    def test_set_then_get(self):
        board = Board()
        board.set(P(1, 2, 0, 1), T.BANK)
        assert board.get(P(1, 2, 0, 1)) is T.BANK
        assert board.get(P(1, 2, 1, 0)) is None

    def test_set_overwrites_and_clears(self):
        board = Board()
        pos = P(0, 0, 1, 1)
        board.set(pos, T.HOUSE)
        board.set(pos, T.SLUMS)
        assert board.get(pos) is T.SLUMS
        board.set(pos, None)
        assert board.get(pos) is None

    def test_every_kind_round_trips(self):
        board = Board()
        positions = list(board.positions())
        for pos, kind in zip(positions, TileKind):
            board.set(pos, kind)
        for pos, kind in zip(positions, TileKind):
            assert board.get(pos) is kind

    def test_positions_cover_81_distinct_cells(self):
        positions = list(Board().positions())
        assert len(positions) == 81
        assert len(set(positions)) == 81
        assert positions[0] == P(0, 0, 0, 0)
        assert positions[9] == P(0, 1, 0, 0)

    def test_full_board(self):
        board = Board()
        for pos in board.positions():
            board.set(pos, T.YARD)
        assert board.occupied_count() == 81
        assert board.is_full()


class TestAdjacency:
    def test_center_cell_has_four_neighbors(self):
        neighbors = Board().adjacent_cells(P(1, 1, 1, 1))
        assert {p for p, _ in neighbors} == {
            P(1, 1, 0, 1),
            P(1, 1, 2, 1),
            P(1, 1, 1, 0),
            P(1, 1, 1, 2),
        }

    def test_corner_cell_has_two_neighbors(self):
        neighbors = Board().adjacent_cells(P(1, 1, 0, 0))
        assert {p for p, _ in neighbors} == {P(1, 1, 1, 0), P(1, 1, 0, 1)}

    def test_edge_cell_has_three_neighbors(self):
        assert len(Board().adjacent_cells(P(0, 0, 0, 1))) == 3

    def test_adjacency_never_crosses_regions(self):
        """Cell (0,0,0,2) touches (0,1,0,0) on the table but not here."""
        board = _prefill(Board(), {P(0, 1, 0, 0): T.YARD})
        neighbors = board.adjacent_cells(P(0, 0, 0, 2))
        assert all(p.region == (0, 0) for p, _ in neighbors)

    def test_neighbors_carry_tiles(self):
        board = _prefill(Board(), {P(2, 2, 0, 1): T.SCHOOL})
        tiles = dict(board.adjacent_cells(P(2, 2, 1, 1)))
        assert tiles[P(2, 2, 0, 1)] is T.SCHOOL
        assert tiles[P(2, 2, 1, 0)] is None

    def test_region_cells_row_major(self):
        cells = Board().region_cells(2, 1)
        assert [p for p, _ in cells] == [
            P(2, 1, r, c) for r in range(3) for c in range(3)
        ]

    @pytest.mark.parametrize(
        "region,expected",
        [
            ((0, 0), {(1, 0), (0, 1)}),
            ((0, 1), {(0, 0), (0, 2), (1, 1)}),
            ((1, 1), {(0, 1), (2, 1), (1, 0), (1, 2)}),
            ((2, 2), {(1, 2), (2, 1)}),
        ],
    )
    def test_adjacent_regions(self, region, expected):
        assert set(Board.adjacent_regions(*region)) == expected

    @pytest.mark.parametrize(
        "cell,edge",
        [
            ((0, 0), True),
            ((0, 1), True),
            ((1, 0), True),
            ((1, 2), True),
            ((2, 2), True),
            ((1, 1), False),
        ],
    )
    def test_is_edge_cell(self, cell, edge):
        assert Board.is_edge_cell(P(1, 1, *cell)) is edge


class TestCounts:
    def test_count_category_follows_current_kind(self):
        board = _prefill(
            Board(),
            {
                P(0, 0, 0, 0): T.HOUSE,
                P(0, 0, 0, 1): T.HIGHRISE,
                P(0, 0, 0, 2): T.PARK,
                P(0, 1, 0, 0): T.HOUSE,
            },
        )
        assert board.count_category(0, 0, Category.RESIDENTIAL) == 2
        assert board.count_category(0, 0, Category.LEISURE) == 1
        assert board.count_category(0, 0, Category.EDUCATION) == 0

        board.set(P(0, 0, 0, 0), T.SCHOOL)
        assert board.count_category(0, 0, Category.RESIDENTIAL) == 1
        assert board.count_category(0, 0, Category.EDUCATION) == 1

    def test_count_kind(self):
        board = _prefill(
            Board(),
            {
                P(2, 0, 0, 0): T.SHOP,
                P(2, 0, 1, 1): T.SHOP,
                P(2, 0, 2, 2): T.BANK,
            },
        )
        assert board.count_kind(2, 0, T.SHOP) == 2
        assert board.count_kind(2, 0, T.BANK) == 1
        assert board.count_kind(2, 1, T.SHOP) == 0

    def test_adjacent_counts_exclude_own_and_diagonal_regions(self):
        board = _prefill(
            Board(),
            {
                P(1, 1, 0, 0): T.HOUSE,  # own region
                P(0, 1, 0, 0): T.HOUSE,
                P(2, 1, 0, 0): T.TIER2_RESIDENTIAL,
                P(1, 0, 0, 0): T.SHOPPING_CENTER,
                P(0, 0, 0, 0): T.HOUSE,  # diagonal
            },
        )
        r = Category.RESIDENTIAL
        assert board.count_category_in_adjacent(1, 1, r) == 2
        assert board.count_kind_in_adjacent(1, 1, T.SHOPPING_CENTER) == 1
        assert board.count_kind_in_adjacent(1, 1, T.HOUSE) == 1

    def test_residential_value_weights(self):
        board = _prefill(
            Board(),
            {
                P(0, 1, 0, 0): T.HOUSE,
                P(0, 1, 0, 1): T.SLUMS,
                P(0, 1, 0, 2): T.TIER2_RESIDENTIAL,
                P(1, 0, 0, 0): T.HIGHRISE,
                P(1, 0, 0, 1): T.VILLA,
                P(1, 0, 0, 2): T.PARK,
                P(0, 0, 0, 0): T.HIGHRISE,  # own region, not counted
            },
        )
        assert board.residential_value_in_adjacent(0, 0) == 1 + 1 + 4 + 4 + 1

    def test_heavy_residential_weights_are_residential(self):
        for kind, weight in RESIDENTIAL_WEIGHTS.items():
            assert CATEGORY_OF[kind] is Category.RESIDENTIAL
            assert weight == 4

    def test_to_dict_lists_occupied_cells(self):
        board = _prefill(Board(), {P(0, 0, 2, 1): T.CINEMA})
        assert board.to_dict() == [
            {
                "position": {
                    "region_row": 0,
                    "region_col": 0,
                    "cell_row": 2,
                    "cell_col": 1,
                },
                "tile": "cinema",
            }
        ]
