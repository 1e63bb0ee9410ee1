"""Upgrade rule catalog: what every tile kind may turn into, and when.

Each rule is an ``UpgradeRule`` record: the target kind, the set of source
kinds it accepts, and a check function ``(position, board) -> conditions``.
Evaluating a rule for a tile gives a ``Candidate``:

  * not applicable, when the tile's current kind is not a source kind;
  * otherwise the ordered list of named conditions with their live truth
    values. The upgrade is satisfied only when every condition holds.

The same candidates back both the cascade decision (via ``priority.py``)
and the per-cell explanation shown to the player, so the condition
descriptions are user-facing text.

Rules are grouped per base category in ``UPGRADE_RULES``. Slums are the one
kind that can move back down: ``SLUMS_RECOVERY`` (slums -> house) is only
evaluated for slums tiles. ``CATALOG`` indexes every upgrade rule by
``(category, target)``.

All checks are pure reads of the board and never raise.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .board import Board
from .cluster import find_cluster
from .model import (
    REGION_SIZE,
    Candidate,
    Category,
    Condition,
    Position,
    TileKind,
)

R = Category.RESIDENTIAL
L = Category.LEISURE
C = Category.COMMERCIAL
E = Category.EDUCATION

RuleCheck = Callable[[Position, Board], list[Condition]]


@dataclass(frozen=True)
class UpgradeRule:
    target: TileKind
    sources: frozenset[TileKind]
    check: RuleCheck

    def evaluate(
        self, pos: Position, current: TileKind, board: Board
    ) -> Candidate:
        if current not in self.sources:
            return Candidate.not_applicable(self.target)
        return Candidate(
            target=self.target,
            applicable=True,
            conditions=self.check(pos, board),
        )


def _rule(
    target: TileKind, sources: set[TileKind], check: RuleCheck
) -> UpgradeRule:
    return UpgradeRule(target=target, sources=frozenset(sources), check=check)


def _count(board: Board, pos: Position, category: Category) -> int:
    return board.count_category(pos.region_row, pos.region_col, category)


def _adjacent_in_category(
    board: Board, pos: Position, category: Category
) -> int:
    return sum(
        1
        for _, tile in board.adjacent_cells(pos)
        if tile is not None and tile.category is category
    )


def _adjacent_kind(board: Board, pos: Position, kind: TileKind) -> bool:
    return any(tile is kind for _, tile in board.adjacent_cells(pos))


# Offsets of the four 2x2 windows a cell can belong to: the cell as
# top-left, top-right, bottom-left and bottom-right member.
_SQUARE_WINDOWS = (
    ((0, 0), (0, 1), (1, 0), (1, 1)),
    ((0, -1), (0, 0), (1, -1), (1, 0)),
    ((-1, 0), (-1, 1), (0, 0), (0, 1)),
    ((-1, -1), (-1, 0), (0, -1), (0, 0)),
)


def in_leisure_square(board: Board, pos: Position) -> bool:
    """True if the cell is part of an all-leisure 2x2 block in its region.

    Windows that would cross the region boundary do not count.
    """
    for window in _SQUARE_WINDOWS:
        cells = [(pos.cell_row + dr, pos.cell_col + dc) for dr, dc in window]
        if not all(
            0 <= r < REGION_SIZE and 0 <= c < REGION_SIZE for r, c in cells
        ):
            continue
        tiles = [board.get(pos.with_cell(r, c)) for r, c in cells]
        if all(t is not None and t.category is L for t in tiles):
            return True
    return False


# -- Residential --------------------------------------------------------


def _slums(pos: Position, board: Board) -> list[Condition]:
    r = _count(board, pos, R)
    le = _count(board, pos, L)
    e = _count(board, pos, E)
    return [
        Condition(f"Residential >= 4 in block ({r}/4)", r >= 4),
        Condition(
            f"No Leisure or Education in block (L: {le}, E: {e})",
            le == 0 and e == 0,
        ),
    ]


def _hotel(pos: Position, board: Board) -> list[Condition]:
    c = _count(board, pos, C)
    r = _count(board, pos, R)
    return [
        Condition(f"Commercial >= 3 in block ({c}/3)", c >= 3),
        Condition(f"Residential < 3 in block ({r}/3)", r < 3),
    ]


def _villa(pos: Position, board: Board) -> list[Condition]:
    return [
        Condition(
            "Next to Leisure", _adjacent_in_category(board, pos, L) >= 1
        ),
        Condition(
            "Away from road (not on block edge)",
            not board.is_edge_cell(pos),
        ),
    ]


def _tier2(pos: Position, board: Board) -> list[Condition]:
    r = _count(board, pos, R)
    le = _count(board, pos, L)
    c = _count(board, pos, C)
    e = _count(board, pos, E)
    return [
        Condition(f"Residential >= 3 in block ({r}/3)", r >= 3),
        Condition(f"Leisure >= 1 in block ({le}/1)", le >= 1),
        Condition(f"Commercial >= 1 in block ({c}/1)", c >= 1),
        Condition(f"Education >= 1 in block ({e}/1)", e >= 1),
    ]


def _highrise(pos: Position, board: Board) -> list[Condition]:
    rr, rc = pos.region
    malls = board.count_kind_in_adjacent(rr, rc, TileKind.SHOPPING_CENTER)
    value = board.residential_value_in_adjacent(rr, rc)
    e = _count(board, pos, E)
    le = _count(board, pos, L)
    return [
        Condition("Shopping Center in a neighboring block", malls >= 1),
        Condition(
            f"Residential value >= 20 in neighboring blocks ({value}/20)",
            value >= 20,
        ),
        Condition(f"Education >= 1 in block ({e}/1)", e >= 1),
        Condition(f"Leisure >= 3 in block ({le}/3)", le >= 3),
    ]


# -- Leisure ------------------------------------------------------------


def _sports(pos: Position, board: Board) -> list[Condition]:
    n = _adjacent_in_category(board, pos, L)
    return [Condition(f"Next to >= 2 Leisure ({n}/2)", n >= 2)]


def _playground(pos: Position, board: Board) -> list[Condition]:
    return [
        Condition(
            "Next to Education", _adjacent_in_category(board, pos, E) >= 1
        )
    ]


def _plaza(pos: Position, board: Board) -> list[Condition]:
    return [
        Condition(
            "Part of a 2x2 Leisure square", in_leisure_square(board, pos)
        )
    ]


def _park(pos: Position, board: Board) -> list[Condition]:
    le = _count(board, pos, L)
    return [Condition(f"Leisure >= 7 in block ({le}/7)", le >= 7)]


def _cinema(pos: Position, board: Board) -> list[Condition]:
    return [
        Condition(
            "Next to Shopping Center",
            _adjacent_kind(board, pos, TileKind.SHOPPING_CENTER),
        )
    ]


# -- Commercial ---------------------------------------------------------


def _shopping_center(pos: Position, board: Board) -> list[Condition]:
    if _adjacent_kind(board, pos, TileKind.SHOPPING_CENTER):
        return [Condition("Next to Shopping Center", True)]
    cluster = find_cluster(board, pos)
    road = "yes" if cluster.touches_edge else "no"
    return [
        Condition(
            "3+ connected Commercial touching road "
            f"(size: {cluster.size}, road: {road})",
            cluster.size >= 3 and cluster.touches_edge,
        )
    ]


def _restaurant(pos: Position, board: Board) -> list[Condition]:
    rr, rc = pos.region
    total = board.count_category(rr, rc, R)
    total += board.count_category_in_adjacent(rr, rc, R)
    return [
        Condition(
            "Next to Commercial", _adjacent_in_category(board, pos, C) >= 1
        ),
        Condition(
            f"Residential >= 10 in block and neighboring blocks ({total}/10)",
            total >= 10,
        ),
    ]


def _bank(pos: Position, board: Board) -> list[Condition]:
    n = board.count_kind_in_adjacent(*pos.region, TileKind.TIER2_RESIDENTIAL)
    return [
        Condition(
            f"Tier-2 Residential >= 4 in neighboring blocks ({n}/4)", n >= 4
        )
    ]


# -- Education ----------------------------------------------------------

_SCHOOL_KINDS = (TileKind.SCHOOL, TileKind.HIGHSCHOOL, TileKind.UNIVERSITY)


def _highschool(pos: Position, board: Board) -> list[Condition]:
    rr, rc = pos.region
    r = board.count_category_in_adjacent(rr, rc, R)
    schools = sum(
        board.count_kind_in_adjacent(rr, rc, k) for k in _SCHOOL_KINDS
    )
    return [
        Condition(
            f"Residential >= 20 in neighboring blocks ({r}/20)", r >= 20
        ),
        Condition(
            f"Another school in neighboring blocks ({schools}/1)",
            schools >= 1,
        ),
    ]


def _university(pos: Position, board: Board) -> list[Condition]:
    e = _count(board, pos, E)
    return [Condition(f"Education >= 4 in block ({e}/4)", e >= 4)]


def _slums_recovery(pos: Position, board: Board) -> list[Condition]:
    le = _count(board, pos, L)
    e = _count(board, pos, E)
    return [
        Condition(
            f"Leisure or Education in block (L: {le}, E: {e})",
            le > 0 or e > 0,
        )
    ]


# -- Catalog ------------------------------------------------------------

_T = TileKind

UPGRADE_RULES: dict[Category, tuple[UpgradeRule, ...]] = {
    R: (
        _rule(_T.SLUMS, {_T.HOUSE}, _slums),
        _rule(_T.HOTEL, {_T.HOUSE}, _hotel),
        _rule(_T.VILLA, {_T.HOUSE}, _villa),
        _rule(_T.TIER2_RESIDENTIAL, {_T.HOUSE, _T.SLUMS}, _tier2),
        _rule(_T.HIGHRISE, {_T.TIER2_RESIDENTIAL}, _highrise),
    ),
    L: (
        _rule(_T.SPORTS, {_T.YARD, _T.PLAYGROUND}, _sports),
        _rule(_T.PLAYGROUND, {_T.YARD}, _playground),
        _rule(_T.PLAZA, {_T.YARD, _T.SPORTS, _T.PLAYGROUND}, _plaza),
        _rule(
            _T.PARK,
            {_T.YARD, _T.SPORTS, _T.PLAZA, _T.PARK, _T.PLAYGROUND},
            _park,
        ),
        _rule(
            _T.CINEMA,
            {_T.YARD, _T.SPORTS, _T.PLAYGROUND, _T.PLAZA},
            _cinema,
        ),
    ),
    C: (
        _rule(_T.SHOPPING_CENTER, {_T.SHOP}, _shopping_center),
        _rule(_T.RESTAURANT, {_T.SHOP}, _restaurant),
        _rule(_T.BANK, {_T.SHOP}, _bank),
    ),
    E: (
        _rule(_T.HIGHSCHOOL, {_T.SCHOOL}, _highschool),
        _rule(_T.UNIVERSITY, {_T.SCHOOL, _T.HIGHSCHOOL}, _university),
    ),
}

SLUMS_RECOVERY = _rule(_T.HOUSE, {_T.SLUMS}, _slums_recovery)

CATALOG: dict[tuple[Category, TileKind], UpgradeRule] = {
    (category, rule.target): rule
    for category, rules in UPGRADE_RULES.items()
    for rule in rules
}


def candidates_for(
    tile: TileKind, pos: Position, board: Board
) -> dict[TileKind, Candidate]:
    """Every rule of the tile's category evaluated at ``pos``.

    Slums tiles additionally get the recovery candidate (target: house).
    """
    result = {
        rule.target: rule.evaluate(pos, tile, board)
        for rule in UPGRADE_RULES[tile.category]
    }
    if tile is TileKind.SLUMS:
        result[SLUMS_RECOVERY.target] = SLUMS_RECOVERY.evaluate(
            pos, tile, board
        )
    return result


def evaluate_cell(
    board: Board, pos: Position
) -> dict[TileKind, Candidate] | None:
    """Candidate map for the tile at ``pos``, or None for an empty cell."""
    tile = board.get(pos)
    if tile is None:
        return None
    return candidates_for(tile, pos, board)
