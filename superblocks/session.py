"""A single game: the board, the score and the source of upcoming tiles.

``GameSession`` is the only thing a display layer talks to. It is created
by the caller and owns its board outright; nothing is shared between
sessions.

A placement is accepted when the target cell is empty and a category is
available (for ``place_next``, from the draw source). Rejected placements
return False and change nothing. An accepted placement writes the
category's default kind, then runs the rebuild phase from that cell; the
phase's score delta is added to the session score.

If a rebuild phase hits its change ceiling the ``CascadeLimitError``
propagates to the caller and the session is marked corrupted: the board is
partially rebuilt, and every further placement raises
``SessionCorruptedError`` until ``reset()``.
"""

from __future__ import annotations

import logging

from .board import Board
from .cascade import CascadeLimitError, rebuild
from .deck import DrawSource, RandomDeck
from .model import (
    DEFAULT_KIND,
    Candidate,
    Category,
    GameParams,
    Position,
    RebuildResult,
    TileKind,
)
from .rules import evaluate_cell

logger = logging.getLogger(__name__)


class SessionCorruptedError(RuntimeError):
    """A placement was attempted after a rebuild phase aborted."""


class GameSession:
    def __init__(
        self,
        params: GameParams | None = None,
        deck: DrawSource | None = None,
    ) -> None:
        self.params = params if params is not None else GameParams()
        self.deck: DrawSource = (
            deck
            if deck is not None
            else RandomDeck(seed=self.params.seed, size=self.params.deck_size)
        )
        self.board = Board()
        self.score = 0
        self.turn = 0
        self.last_rebuild: RebuildResult | None = None
        self.corrupted = False

    def reset(self) -> None:
        """Start over: empty board, zero score, deck back to its start."""
        self.board = Board()
        self.score = 0
        self.turn = 0
        self.last_rebuild = None
        self.corrupted = False
        self.deck.reset()
        logger.info("Session reset")

    # -- Queries --------------------------------------------------------

    def tile_at(self, pos: Position) -> TileKind | None:
        return self.board.get(pos)

    def upgrade_info(self, pos: Position) -> dict[TileKind, Candidate] | None:
        """Every upgrade candidate for the tile at ``pos`` (None if empty)."""
        return evaluate_cell(self.board, pos)

    @property
    def occupied_count(self) -> int:
        return self.board.occupied_count()

    @property
    def is_full(self) -> bool:
        return self.board.is_full()

    def upcoming(self) -> list[Category]:
        return self.deck.upcoming()

    def can_place(self, pos: Position) -> bool:
        return (
            not self.corrupted
            and self.board.get(pos) is None
            and self.deck.peek() is not None
        )

    # -- Placement ------------------------------------------------------

    def place_next(self, pos: Position) -> bool:
        """Place the next category from the deck at ``pos``.

        Nothing is drawn when the placement is rejected.
        """
        self._check_usable()
        if self.board.get(pos) is not None:
            logger.debug("Rejected placement at %s: cell occupied", pos)
            return False
        category = self.deck.draw()
        if category is None:
            logger.debug("Rejected placement at %s: no tile to place", pos)
            return False
        self._apply(pos, category)
        return True

    def place(self, pos: Position, category: Category) -> bool:
        """Place ``category`` at ``pos`` without drawing from the deck."""
        self._check_usable()
        if self.board.get(pos) is not None:
            logger.debug("Rejected placement at %s: cell occupied", pos)
            return False
        self._apply(pos, category)
        return True

    def _check_usable(self) -> None:
        if self.corrupted:
            raise SessionCorruptedError(
                "a rebuild phase aborted; reset the session"
            )

    def _apply(self, pos: Position, category: Category) -> None:
        self.board.set(pos, DEFAULT_KIND[category])
        self.turn += 1
        try:
            result = rebuild(
                self.board, pos, max_changes=self.params.max_cascade_changes
            )
        except CascadeLimitError as e:
            self.corrupted = True
            self.score += e.result.score_delta
            self.last_rebuild = e.result
            raise
        self.score += result.score_delta
        self.last_rebuild = result

    def to_dict(self) -> dict:
        """Read-only view of the session for a display layer."""
        return {
            "cells": self.board.to_dict(),
            "score": self.score,
            "turn": self.turn,
            "occupied": self.occupied_count,
            "is_full": self.is_full,
            "upcoming": [c.value for c in self.upcoming()],
            "corrupted": self.corrupted,
        }
