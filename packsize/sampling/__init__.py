"""Shuffle, compress, measure: the sampling side of an estimation run."""

from .compressor import CompressionError, StreamingCompressor
from .controller import ControllerState, SamplingController
from .shuffle import ShuffleEngine
from .stats import aggregate

__all__ = [
    "CompressionError",
    "ControllerState",
    "SamplingController",
    "ShuffleEngine",
    "StreamingCompressor",
    "aggregate",
]
