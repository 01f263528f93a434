"""Pipeline orchestration: scan once, sample until the budget runs out, aggregate."""

from __future__ import annotations

import time
from dataclasses import replace
from pathlib import Path
from typing import Callable, Optional

from .config import PackSizeConfig, load_config
from .logging import get_logger
from .models import CorpusManifest, EstimationResult, SampleRound
from .repo_scanner import RepoScanner
from .sampling import SamplingController, ShuffleEngine, StreamingCompressor, aggregate
from .stores import ContentCache

logger = get_logger("orchestrator")


class Orchestrator:
    """Coordinates a full estimation run for one directory."""

    def __init__(
        self,
        config: PackSizeConfig | None = None,
        *,
        scanner: RepoScanner | None = None,
        compressor: StreamingCompressor | None = None,
        shuffler: ShuffleEngine | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._config = config
        self._scanner = scanner
        self._compressor = compressor
        self._shuffler = shuffler
        self._clock = clock

    def resolve_config(self, root: Path) -> PackSizeConfig:
        if self._config is not None:
            return replace(self._config, root=root)
        return load_config(root)

    def scan(self, root: str, config: PackSizeConfig) -> CorpusManifest:
        scanner = self._scanner or RepoScanner(
            cache=ContentCache(config.cache_capacity),
            ignore_files=config.ignore_files,
            exclude_paths=config.exclude_paths,
            use_git=config.use_git,
        )
        return scanner.scan(root)

    def run(
        self,
        root: str = ".",
        *,
        on_round: Callable[[SampleRound], None] | None = None,
    ) -> EstimationResult:
        """Estimate the compressed size of the text files under ``root``."""
        root_path = Path(root).expanduser().resolve()
        config = self.resolve_config(root_path)

        manifest = self.scan(str(root_path), config)
        logger.debug(
            "collected %d files (%d B) under %s", len(manifest.files), manifest.uncompressed_size, manifest.root
        )

        compressor = self._compressor or StreamingCompressor(
            config.compressor, separator=config.separator
        )
        shuffler = self._shuffler or ShuffleEngine(config.seed)
        controller = SamplingController(
            manifest,
            compressor,
            shuffler,
            max_rounds=config.max_rounds,
            clock=self._clock,
            on_round=on_round,
        )
        samples = controller.run(manifest.files, config.time_budget_ms)
        mean, stddev = aggregate(samples)
        logger.debug("sampled %d rounds in %.3fs", len(samples), controller.elapsed)

        return EstimationResult(
            root=manifest.root,
            file_count=len(manifest.files),
            uncompressed_size=manifest.uncompressed_size,
            sample_sizes=samples,
            mean=mean,
            stddev=stddev,
            elapsed=controller.elapsed,
            skipped=list(manifest.skipped),
        )


def estimate(root: str = ".", config: Optional[PackSizeConfig] = None) -> EstimationResult:
    """Run an estimation with default collaborators."""
    return Orchestrator(config).run(root)


__all__ = ["Orchestrator", "estimate"]
