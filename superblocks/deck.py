"""Sources of upcoming tile categories.

The session only needs a ``DrawSource``: something that can show the
upcoming categories and hand out the next one. Two implementations:

  * ``RandomDeck`` keeps a fixed number of upcoming categories, drawn with
    weights R:1, L:1, C:0.4, E:0.2 and topped up after every draw. All
    randomness comes from a seeded PCG32 generator, so a seed fully
    determines the sequence and ``reset()`` replays it.
  * ``ScriptedDeck`` hands out a fixed sequence and then runs dry. Tests
    and scripted scenarios use it.

``PCG32`` is the reference PCG-XSH-RR generator and ``weighted_choice`` the
usual cumulative-weight pick. Both are taken unchanged from Carltographer
(``v2/engine/prng.py`` and ``v2/engine/mutation.py``).
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import Protocol

from .model import DEFAULT_DECK_SIZE, Category

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF
_PCG_MULTIPLIER = 6364136223846793005

CATEGORY_WEIGHTS: dict[Category, float] = {
    Category.RESIDENTIAL: 1.0,
    Category.LEISURE: 1.0,
    Category.COMMERCIAL: 0.4,
    Category.EDUCATION: 0.2,
}


class PCG32:
    """PCG-XSH-RR, 64-bit state, 32-bit output (www.pcg-random.org)."""

    def __init__(self, seed: int, seq: int = 0) -> None:
        self._inc = ((seq << 1) | 1) & _MASK64
        self._state = 0
        self._step()
        self._state = (self._state + seed) & _MASK64
        self._step()

    def _step(self) -> None:
        self._state = (self._state * _PCG_MULTIPLIER + self._inc) & _MASK64

    def next_u32(self) -> int:
        old = self._state
        self._step()
        xorshifted = (((old >> 18) ^ old) >> 27) & _MASK32
        rot = old >> 59
        return ((xorshifted >> rot) | (xorshifted << (-rot & 31))) & _MASK32

    def next_float(self) -> float:
        """Uniform float in [0, 1)."""
        return self.next_u32() / (_MASK32 + 1)


def weighted_choice(rng: PCG32, weights: list[float]) -> int:
    """Index chosen with probability proportional to ``weights``.

    Returns -1 if every weight is 0.
    """
    total = sum(weights)
    if total <= 0:
        return -1
    r = rng.next_float() * total
    cumulative = 0.0
    for i, w in enumerate(weights):
        cumulative += w
        if r < cumulative:
            return i
    return len(weights) - 1


class DrawSource(Protocol):
    def peek(self) -> Category | None:
        """Next category to be drawn, without consuming it."""
        ...

    def draw(self) -> Category | None:
        """Consume and return the next category, or None if exhausted."""
        ...

    def upcoming(self) -> list[Category]:
        """Categories currently visible, next first."""
        ...

    def reset(self) -> None:
        """Return to the state the source was created in."""
        ...


class RandomDeck:
    def __init__(
        self,
        seed: int = 0,
        size: int = DEFAULT_DECK_SIZE,
        weights: dict[Category, float] | None = None,
    ) -> None:
        if size < 1:
            raise ValueError(f"deck size must be positive, got {size}")
        self.seed = seed
        self.size = size
        weights = weights if weights is not None else CATEGORY_WEIGHTS
        self._categories = list(weights)
        self._weights = [weights[c] for c in self._categories]
        self.reset()

    def reset(self) -> None:
        self._rng = PCG32(self.seed)
        self._queue: deque[Category] = deque()
        self._fill()

    def _fill(self) -> None:
        while len(self._queue) < self.size:
            i = weighted_choice(self._rng, self._weights)
            if i < 0:
                raise ValueError("category weights must not all be zero")
            self._queue.append(self._categories[i])

    def peek(self) -> Category | None:
        return self._queue[0]

    def draw(self) -> Category | None:
        category = self._queue.popleft()
        self._fill()
        return category

    def upcoming(self) -> list[Category]:
        return list(self._queue)


class ScriptedDeck:
    def __init__(self, categories: Iterable[Category] = ()) -> None:
        self._script = list(categories)
        self.reset()

    def reset(self) -> None:
        self._queue: deque[Category] = deque(self._script)

    def push(self, *categories: Category) -> None:
        """Append categories to the end of the current sequence."""
        self._queue.extend(categories)

    def peek(self) -> Category | None:
        return self._queue[0] if self._queue else None

    def draw(self) -> Category | None:
        return self._queue.popleft() if self._queue else None

    def upcoming(self) -> list[Category]:
        return list(self._queue)
