"""Data types shared by the board, rule catalog and cascade engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

GRID_SIZE = 3  # regions per side of the macro grid
REGION_SIZE = 3  # cells per side of a region

DEFAULT_DECK_SIZE = 5
DEFAULT_MAX_CASCADE_CHANGES = 10_000


class Category(Enum):
    RESIDENTIAL = "R"
    LEISURE = "L"
    COMMERCIAL = "C"
    EDUCATION = "E"


class TileKind(Enum):
    # Residential
    HOUSE = "house"
    SLUMS = "slums"
    HOTEL = "hotel"
    VILLA = "villa"
    TIER2_RESIDENTIAL = "tier2_residential"
    HIGHRISE = "highrise"
    # Leisure
    YARD = "yard"
    SPORTS = "sports"
    PLAZA = "plaza"
    PARK = "park"
    PLAYGROUND = "playground"
    CINEMA = "cinema"
    # Commercial
    SHOP = "shop"
    SHOPPING_CENTER = "shopping_center"
    RESTAURANT = "restaurant"
    BANK = "bank"
    # Education
    SCHOOL = "school"
    HIGHSCHOOL = "highschool"
    UNIVERSITY = "university"

    @property
    def category(self) -> Category:
        return CATEGORY_OF[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def points(self) -> int:
        """Score delta applied when a cell changes into this kind."""
        return UPGRADE_POINTS.get(self, 0)


CATEGORY_OF: dict[TileKind, Category] = {
    TileKind.HOUSE: Category.RESIDENTIAL,
    TileKind.SLUMS: Category.RESIDENTIAL,
    TileKind.HOTEL: Category.RESIDENTIAL,
    TileKind.VILLA: Category.RESIDENTIAL,
    TileKind.TIER2_RESIDENTIAL: Category.RESIDENTIAL,
    TileKind.HIGHRISE: Category.RESIDENTIAL,
    TileKind.YARD: Category.LEISURE,
    TileKind.SPORTS: Category.LEISURE,
    TileKind.PLAZA: Category.LEISURE,
    TileKind.PARK: Category.LEISURE,
    TileKind.PLAYGROUND: Category.LEISURE,
    TileKind.CINEMA: Category.LEISURE,
    TileKind.SHOP: Category.COMMERCIAL,
    TileKind.SHOPPING_CENTER: Category.COMMERCIAL,
    TileKind.RESTAURANT: Category.COMMERCIAL,
    TileKind.BANK: Category.COMMERCIAL,
    TileKind.SCHOOL: Category.EDUCATION,
    TileKind.HIGHSCHOOL: Category.EDUCATION,
    TileKind.UNIVERSITY: Category.EDUCATION,
}

DEFAULT_KIND: dict[Category, TileKind] = {
    Category.RESIDENTIAL: TileKind.HOUSE,
    Category.LEISURE: TileKind.YARD,
    Category.COMMERCIAL: TileKind.SHOP,
    Category.EDUCATION: TileKind.SCHOOL,
}

# Kinds missing here (the four defaults) are worth 0.
UPGRADE_POINTS: dict[TileKind, int] = {
    TileKind.SLUMS: -6,
    TileKind.HOTEL: 14,
    TileKind.VILLA: 18,
    TileKind.TIER2_RESIDENTIAL: 12,
    TileKind.HIGHRISE: 40,
    TileKind.SPORTS: 8,
    TileKind.PLAZA: 14,
    TileKind.PARK: 24,
    TileKind.SHOPPING_CENTER: 16,
    TileKind.RESTAURANT: 20,
    TileKind.BANK: 30,
    TileKind.PLAYGROUND: 4,
    TileKind.CINEMA: 10,
    TileKind.HIGHSCHOOL: 18,
    TileKind.UNIVERSITY: 35,
}

_LABELS: dict[TileKind, str] = {
    TileKind.HOUSE: "House",
    TileKind.SLUMS: "Slums",
    TileKind.HOTEL: "Hotel",
    TileKind.VILLA: "Villa",
    TileKind.TIER2_RESIDENTIAL: "Tier-2 Res",
    TileKind.HIGHRISE: "Highrise",
    TileKind.YARD: "Yard",
    TileKind.SPORTS: "Sports",
    TileKind.PLAZA: "Plaza",
    TileKind.PARK: "Park",
    TileKind.PLAYGROUND: "Playground",
    TileKind.CINEMA: "Cinema",
    TileKind.SHOP: "Shop",
    TileKind.SHOPPING_CENTER: "Mall",
    TileKind.RESTAURANT: "Restaurant",
    TileKind.BANK: "Bank",
    TileKind.SCHOOL: "School",
    TileKind.HIGHSCHOOL: "High School",
    TileKind.UNIVERSITY: "University",
}


@dataclass(frozen=True)
class Position:
    """One of the 81 cells: region coordinates, then cell within region."""

    region_row: int
    region_col: int
    cell_row: int
    cell_col: int

    def __post_init__(self) -> None:
        for name, limit in (
            ("region_row", GRID_SIZE),
            ("region_col", GRID_SIZE),
            ("cell_row", REGION_SIZE),
            ("cell_col", REGION_SIZE),
        ):
            value = getattr(self, name)
            if not 0 <= value < limit:
                raise ValueError(f"{name} out of range: {value}")

    @property
    def region(self) -> tuple[int, int]:
        return (self.region_row, self.region_col)

    def with_cell(self, cell_row: int, cell_col: int) -> Position:
        return Position(self.region_row, self.region_col, cell_row, cell_col)

    def to_dict(self) -> dict:
        return {
            "region_row": self.region_row,
            "region_col": self.region_col,
            "cell_row": self.cell_row,
            "cell_col": self.cell_col,
        }


@dataclass(frozen=True)
class Condition:
    description: str
    met: bool

    def to_dict(self) -> dict:
        return {"description": self.description, "met": self.met}


@dataclass
class Candidate:
    """Evaluation of one (current kind -> target kind) upgrade.

    ``applicable`` is False when the current kind is not a source kind of
    the rule; such candidates carry no conditions and are never satisfied.
    """

    target: TileKind
    applicable: bool
    conditions: list[Condition] = field(default_factory=list)

    @property
    def satisfied(self) -> bool:
        return self.applicable and all(c.met for c in self.conditions)

    @staticmethod
    def not_applicable(target: TileKind) -> Candidate:
        return Candidate(target=target, applicable=False)

    def to_dict(self) -> dict:
        d: dict = {
            "target": self.target.value,
            "label": self.target.label,
            "applicable": self.applicable,
        }
        if self.applicable:
            d["conditions"] = [c.to_dict() for c in self.conditions]
            d["satisfied"] = self.satisfied
        return d


@dataclass
class GameParams:
    seed: int = 0
    deck_size: int = DEFAULT_DECK_SIZE
    max_cascade_changes: int = DEFAULT_MAX_CASCADE_CHANGES

    @staticmethod
    def from_dict(d: dict) -> GameParams:
        return GameParams(
            seed=d.get("seed", 0),
            deck_size=d.get("deck_size", DEFAULT_DECK_SIZE),
            max_cascade_changes=d.get(
                "max_cascade_changes", DEFAULT_MAX_CASCADE_CHANGES
            ),
        )

    def to_dict(self) -> dict:
        return {
            "seed": self.seed,
            "deck_size": self.deck_size,
            "max_cascade_changes": self.max_cascade_changes,
        }


@dataclass(frozen=True)
class TileChange:
    position: Position
    old: TileKind
    new: TileKind
    points: int

    def to_dict(self) -> dict:
        return {
            "position": self.position.to_dict(),
            "old": self.old.value,
            "new": self.new.value,
            "points": self.points,
        }


@dataclass
class RebuildResult:
    """Everything one rebuild phase changed, in application order."""

    start: Position
    changes: list[TileChange] = field(default_factory=list)

    @property
    def num_changes(self) -> int:
        return len(self.changes)

    @property
    def score_delta(self) -> int:
        return sum(c.points for c in self.changes)

    def to_dict(self) -> dict:
        return {
            "start": self.start.to_dict(),
            "changes": [c.to_dict() for c in self.changes],
            "score_delta": self.score_delta,
        }
