"""
Deterministic shuffling.

Fisher-Yates over a copy of the input, driven either by a seeded linear
congruential generator (same seed, same permutation) or by any injected
source of uniform draws in [0, 1).
"""

import random
from collections.abc import Callable, Sequence
from typing import TypeVar

T = TypeVar("T")

RandomSource = Callable[[], float]

LCG_MULTIPLIER = 1103515245
LCG_INCREMENT = 12345
LCG_MODULUS = 2**31


class SeededRandom:
    """
    Linear congruential generator producing draws in [0, 1).

    ``state = (state * 1103515245 + 12345) mod 2**31`` and each draw is
    ``state / 2**31``. Integer arithmetic keeps the sequence exact for any
    seed, including negative and very large ones.
    """

    def __init__(self, seed: int):
        self._state = int(seed) % LCG_MODULUS

    def __call__(self) -> float:
        self._state = (self._state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self._state / LCG_MODULUS


def shuffle(
    items: Sequence[T],
    seed: int | None = None,
    rng: RandomSource | None = None,
) -> list[T]:
    """
    Return a shuffled copy of ``items``.

    Args:
        items: The sequence to permute; it is not modified.
        seed: Fixes the permutation. Ignored when ``rng`` is given.
        rng: Source of uniform draws in [0, 1). Defaults to a SeededRandom
            for ``seed``, or ``random.random`` when there is no seed.

    Returns:
        A new list with the same elements in permuted order.
    """
    result = list(items)

    if rng is None:
        rng = SeededRandom(seed) if seed is not None else random.random

    for i in range(len(result) - 1, 0, -1):
        j = int(rng() * (i + 1))
        result[i], result[j] = result[j], result[i]

    return result
