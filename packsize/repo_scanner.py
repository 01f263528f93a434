"""Repository scanning: enumerates eligible text files under nested ignore rules."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Sequence

from .config import DEFAULT_CACHE_CAPACITY, DEFAULT_IGNORE_FILES
from .eligibility import EligibilityFilter
from .ignore import GitIgnoreResolver, IgnoreChain, IgnoreRuleSet
from .logging import get_logger
from .models import CorpusManifest, EligibleFile, SkippedFile
from .stores import ContentCache

logger = get_logger("scanner")


@dataclass
class ScanEvent:
    """A regular file reached by the walk, with its bytes and verdict or the read error."""

    path: str
    content: bytes | None = None
    error: OSError | None = None
    eligible: bool = False


class RepoScanner:
    """Walks a directory tree depth-first to build the corpus manifest."""

    def __init__(
        self,
        *,
        cache: ContentCache | None = None,
        ignore_files: Sequence[str] = DEFAULT_IGNORE_FILES,
        exclude_paths: Sequence[str] = (),
        use_git: bool = False,
    ) -> None:
        self.cache = cache if cache is not None else ContentCache(DEFAULT_CACHE_CAPACITY)
        self._ignore_files = list(ignore_files)
        self._exclude_paths = list(exclude_paths)
        self._use_git = use_git

    def scan(self, root: str) -> CorpusManifest:
        """Return the eligible files under ``root`` and their total size."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Repository path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Repository path is not a directory: {root}")

        files: List[EligibleFile] = []
        skipped: List[SkippedFile] = []
        uncompressed_size = 0

        for event in self.iter_files(root_path):
            if event.error is not None:
                message = event.error.strerror or str(event.error)
                logger.warning("- %s (%s)", event.path, message)
                skipped.append(SkippedFile(path=event.path, reason=message))
                continue
            content = event.content
            if content is None or not event.eligible:
                logger.debug("skipping ineligible file %s", event.path)
                continue
            files.append(EligibleFile(path=event.path, size=len(content)))
            uncompressed_size += len(content)
            logger.info("+ %s", event.path)

        return CorpusManifest(
            root=str(root_path),
            files=files,
            uncompressed_size=uncompressed_size,
            cache=self.cache,
            skipped=skipped,
        )

    def iter_files(self, root: Path) -> Iterator[ScanEvent]:
        """Lazily yield every non-ignored regular file under ``root``."""
        chain = IgnoreChain()
        if self._exclude_paths:
            chain.push(IgnoreRuleSet.from_patterns("", self._exclude_paths))
        resolvers = [GitIgnoreResolver(root)] if self._use_git else []
        eligibility = EligibilityFilter(chain, resolvers)
        yield from self._walk(root, "", eligibility)

    def _walk(self, directory: Path, rel_dir: str, eligibility: EligibilityFilter) -> Iterator[ScanEvent]:
        rule_set = self._load_rule_set(directory, rel_dir)
        if rule_set:
            eligibility.chain.push(rule_set)
        try:
            try:
                entries = list(os.scandir(directory))
            except OSError as exc:
                logger.warning("- %s/ (%s)", rel_dir or ".", exc.strerror or exc)
                return

            for entry in entries:
                rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                    is_file = entry.is_file(follow_symlinks=False)
                except OSError as exc:
                    yield ScanEvent(path=rel_path, error=exc)
                    continue

                if is_dir:
                    if eligibility.is_ignored(rel_path, is_dir=True):
                        logger.debug("pruned ignored directory %s/", rel_path)
                        continue
                    yield from self._walk(Path(entry.path), rel_path, eligibility)
                elif is_file:
                    if eligibility.is_ignored(rel_path, is_dir=False):
                        logger.debug("ignored %s", rel_path)
                        continue
                    try:
                        content = self.cache.read(entry.path)
                    except OSError as exc:
                        yield ScanEvent(path=rel_path, error=exc)
                        continue
                    yield ScanEvent(
                        path=rel_path,
                        content=content,
                        eligible=eligibility.is_eligible(rel_path, content),
                    )
        finally:
            if rule_set:
                eligibility.chain.pop()

    def _load_rule_set(self, directory: Path, rel_dir: str) -> IgnoreRuleSet | None:
        rules = IgnoreRuleSet(base=rel_dir)
        for name in self._ignore_files:
            try:
                data = self.cache.read(directory / name)
            except OSError as exc:
                logger.debug("could not read %s in %s (%s)", name, rel_dir or ".", exc)
                continue
            if not data:
                continue
            try:
                text = data.decode("utf-8")
            except UnicodeDecodeError:
                logger.debug("ignore file %s in %s is not UTF-8", name, rel_dir or ".")
                continue
            rules.rules.extend(IgnoreRuleSet.from_text(rel_dir, text).rules)
        return rules if rules else None


__all__ = ["RepoScanner", "ScanEvent"]
