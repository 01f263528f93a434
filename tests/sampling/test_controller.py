"""Tests for packsize.sampling.controller."""

from __future__ import annotations

from typing import Iterable, List

from packsize.models import CorpusManifest, EligibleFile
from packsize.sampling import ControllerState, SamplingController, ShuffleEngine
from packsize.stores import ContentCache


class FakeCompressor:
    def __init__(self) -> None:
        self.calls: List[bytes] = []

    def compress(self, contents: Iterable[bytes]) -> int:
        data = b"".join(contents)
        self.calls.append(data)
        return len(data) + 10


class StepClock:
    """Clock advancing a fixed step every time it is read."""

    def __init__(self, step: float) -> None:
        self.now = 0.0
        self.step = step

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value


def _manifest(count: int) -> CorpusManifest:
    cache = ContentCache()
    files = []
    for index in range(count):
        path = f"f{index}.txt"
        cache.store(f"/corpus/{path}", path.encode())
        files.append(EligibleFile(path=path, size=len(path)))
    return CorpusManifest(
        root="/corpus",
        files=files,
        uncompressed_size=sum(file.size for file in files),
        cache=cache,
    )


def test_zero_budget_runs_exactly_one_round() -> None:
    manifest = _manifest(100)
    compressor = FakeCompressor()
    controller = SamplingController(manifest, compressor, ShuffleEngine(seed=1))  # type: ignore[arg-type]

    samples = controller.run(manifest.files, 0)

    assert len(samples) == 1
    assert len(compressor.calls) == 1
    assert controller.state is ControllerState.DONE


def test_zero_budget_with_frozen_clock_still_stops() -> None:
    manifest = _manifest(3)
    controller = SamplingController(
        manifest, FakeCompressor(), ShuffleEngine(), clock=lambda: 0.0  # type: ignore[arg-type]
    )

    assert len(controller.run(manifest.files, 0)) == 1


def test_round_crossing_budget_is_included() -> None:
    manifest = _manifest(5)
    # Start reads 0.0, then each round ends 0.4s later: 0.4, 0.8, 1.2 -> three rounds for 1000 ms.
    controller = SamplingController(
        manifest, FakeCompressor(), ShuffleEngine(), clock=StepClock(0.4)  # type: ignore[arg-type]
    )

    samples = controller.run(manifest.files, 1000)

    assert len(samples) == 3
    assert controller.elapsed > 1.0


def test_max_rounds_caps_sampling() -> None:
    manifest = _manifest(5)
    controller = SamplingController(
        manifest,
        FakeCompressor(),  # type: ignore[arg-type]
        ShuffleEngine(),
        max_rounds=4,
        clock=lambda: 0.0,
    )

    assert len(controller.run(manifest.files, 60_000)) == 4


def test_each_round_compresses_a_permutation_of_all_files() -> None:
    manifest = _manifest(6)
    compressor = FakeCompressor()
    rounds = []
    controller = SamplingController(
        manifest,
        compressor,  # type: ignore[arg-type]
        ShuffleEngine(seed=5),
        max_rounds=3,
        clock=lambda: 0.0,
        on_round=rounds.append,
    )

    samples = controller.run(manifest.files, 60_000)

    expected = sorted(file.path for file in manifest.files)
    for sample_round in rounds:
        assert sorted(file.path for file in sample_round.permutation) == expected
    assert [sample_round.compressed_size for sample_round in rounds] == samples
    assert [sample_round.index for sample_round in rounds] == [0, 1, 2]
    assert len({len(data) for data in compressor.calls}) == 1


def test_empty_file_set_still_samples() -> None:
    manifest = _manifest(0)
    compressor = FakeCompressor()
    controller = SamplingController(manifest, compressor, ShuffleEngine())  # type: ignore[arg-type]

    assert controller.run([], 0) == [10]
    assert compressor.calls == [b""]


def test_round_ending_exactly_at_budget_keeps_sampling() -> None:
    manifest = _manifest(2)
    # Rounds end at 0.5, 1.0 and 1.5 seconds; only the third exceeds a 1000 ms budget.
    controller = SamplingController(
        manifest, FakeCompressor(), ShuffleEngine(), clock=StepClock(0.5)  # type: ignore[arg-type]
    )

    assert len(controller.run(manifest.files, 1000)) == 3
