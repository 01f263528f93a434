"""Seeded permutations of the eligible file list."""

from __future__ import annotations

import random
from typing import List, Sequence, TypeVar

from ..config import DEFAULT_SEED

T = TypeVar("T")


class ShuffleEngine:
    """Produces a fresh uniform permutation per call from one seeded generator."""

    def __init__(self, seed: int | None = DEFAULT_SEED) -> None:
        self._rng = random.Random(seed)

    def shuffle(self, items: Sequence[T]) -> List[T]:
        permutation = list(items)
        for i in range(len(permutation) - 1, 0, -1):
            j = self._rng.randint(0, i)
            permutation[i], permutation[j] = permutation[j], permutation[i]
        return permutation


__all__ = ["ShuffleEngine"]
