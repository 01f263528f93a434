"""Summary statistics over compressed-size samples."""

from __future__ import annotations

import math
from typing import Sequence, Tuple


def aggregate(samples: Sequence[int]) -> Tuple[float, float]:
    """Return the mean and population standard deviation of ``samples``."""
    if not samples:
        raise ValueError("at least one sample is required")
    count = len(samples)
    mean = math.fsum(samples) / count
    variance = math.fsum((sample - mean) ** 2 for sample in samples) / count
    return mean, math.sqrt(variance)


__all__ = ["aggregate"]
