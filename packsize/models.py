"""Core data models shared across packsize components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Sequence, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .stores import ContentCache


@dataclass(frozen=True)
class EligibleFile:
    """A file whose content is valid text and not excluded by any ignore rule."""

    path: str
    size: int


@dataclass(frozen=True)
class SkippedFile:
    """A file excluded from the corpus because it could not be read."""

    path: str
    reason: str


@dataclass
class CorpusManifest:
    """Eligible files discovered under a root, plus the cache serving their bytes."""

    root: str
    files: List[EligibleFile]
    uncompressed_size: int
    cache: "ContentCache"
    skipped: List[SkippedFile] = field(default_factory=list)

    def read(self, file: EligibleFile) -> bytes:
        """Return a file's bytes, preferring the cache over a fresh disk read."""
        absolute = str(Path(self.root) / file.path)
        data = self.cache.peek(absolute)
        if data is None:
            data = Path(absolute).read_bytes()
        return data

    def iter_contents(self, files: Sequence[EligibleFile]) -> Iterator[bytes]:
        for file in files:
            yield self.read(file)


@dataclass
class SampleRound:
    """One shuffle-then-compress measurement."""

    index: int
    permutation: List[EligibleFile]
    compressed_size: int
    elapsed: float


@dataclass
class EstimationResult:
    """Aggregated outcome of a sampling run."""

    root: str
    file_count: int
    uncompressed_size: int
    sample_sizes: List[int]
    mean: float
    stddev: float
    elapsed: float
    skipped: List[SkippedFile] = field(default_factory=list)

    @property
    def rounded_mean(self) -> int:
        return round(self.mean)

    @property
    def rounded_stddev(self) -> int:
        return round(self.stddev)

    @property
    def rounds(self) -> int:
        return len(self.sample_sizes)
