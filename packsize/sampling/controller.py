"""Time-boxed sampling loop."""

from __future__ import annotations

import enum
import time
from typing import Callable, List, Optional, Sequence

from ..logging import get_logger
from ..models import CorpusManifest, EligibleFile, SampleRound
from .compressor import StreamingCompressor
from .shuffle import ShuffleEngine

logger = get_logger("sampling")


class ControllerState(enum.Enum):
    SAMPLING = "sampling"
    DONE = "done"


class SamplingController:
    """Runs shuffle-and-compress rounds until the time budget is spent.

    The budget is only checked between rounds: a round in progress always
    finishes, and the round that crosses the budget is kept. At least one round
    runs even with a zero budget.
    """

    def __init__(
        self,
        manifest: CorpusManifest,
        compressor: StreamingCompressor,
        shuffler: ShuffleEngine,
        *,
        max_rounds: Optional[int] = None,
        clock: Callable[[], float] = time.perf_counter,
        on_round: Callable[[SampleRound], None] | None = None,
    ) -> None:
        self._manifest = manifest
        self._compressor = compressor
        self._shuffler = shuffler
        self._max_rounds = max_rounds
        self._clock = clock
        self._on_round = on_round
        self.state = ControllerState.SAMPLING
        self.elapsed = 0.0

    def run(self, files: Sequence[EligibleFile], time_budget_ms: float) -> List[int]:
        """Return one compressed size per completed round."""
        budget = time_budget_ms / 1000.0
        samples: List[int] = []
        self.state = ControllerState.SAMPLING
        start = self._clock()

        while self.state is ControllerState.SAMPLING:
            permutation = self._shuffler.shuffle(files)
            size = self._compressor.compress(self._manifest.iter_contents(permutation))
            samples.append(size)
            self.elapsed = self._clock() - start

            sample_round = SampleRound(
                index=len(samples) - 1,
                permutation=permutation,
                compressed_size=size,
                elapsed=self.elapsed,
            )
            logger.debug("round %d: %d B after %.3fs", sample_round.index, size, self.elapsed)
            if self._on_round is not None:
                self._on_round(sample_round)

            # A zero budget means exactly one round, whatever the clock reports.
            if self.elapsed > budget or budget <= 0:
                self.state = ControllerState.DONE
            elif self._max_rounds is not None and len(samples) >= self._max_rounds:
                self.state = ControllerState.DONE

        return samples


__all__ = ["ControllerState", "SamplingController"]
