"""Pick the single upgrade to apply when several are satisfied at once."""

from __future__ import annotations

from collections.abc import Mapping

from .model import Candidate, TileKind

# Highest-value, most specific kinds first. Sports precedes playground so a
# yard next to both leisure and education becomes sports. House appears
# once, as the slums recovery target; slums are last.
UPGRADE_PRIORITY: tuple[TileKind, ...] = (
    TileKind.HIGHRISE,
    TileKind.PARK,
    TileKind.BANK,
    TileKind.UNIVERSITY,
    TileKind.TIER2_RESIDENTIAL,
    TileKind.SHOPPING_CENTER,
    TileKind.RESTAURANT,
    TileKind.PLAZA,
    TileKind.CINEMA,
    TileKind.HIGHSCHOOL,
    TileKind.VILLA,
    TileKind.HOTEL,
    TileKind.SPORTS,
    TileKind.PLAYGROUND,
    TileKind.HOUSE,
    TileKind.SLUMS,
)


def select_upgrade(
    current: TileKind, candidates: Mapping[TileKind, Candidate]
) -> TileKind | None:
    """First kind in ``UPGRADE_PRIORITY`` whose candidate is satisfied.

    The current kind is never selected. Returns None when nothing applies.
    """
    for kind in UPGRADE_PRIORITY:
        if kind is current:
            continue
        candidate = candidates.get(kind)
        if candidate is not None and candidate.satisfied:
            return kind
    return None
