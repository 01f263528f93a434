"""Ignore-rule parsing and resolution for nested ignore files."""

from __future__ import annotations

import enum
import subprocess
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from .logging import get_logger

logger = get_logger("ignore")


class Verdict(enum.Enum):
    """Outcome of testing a path against one rule set."""

    NEUTRAL = "neutral"
    IGNORED = "ignored"
    UNIGNORED = "unignored"


@dataclass
class IgnoreRule:
    """A single gitignore-style pattern."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False

        parts = rel_path.split("/")
        if self.anchored or self.has_slash:
            pattern_parts = self.pattern.split("/")
            # A pattern naming a directory also covers everything below it.
            for end in range(1, len(parts)):
                if _match_segments(pattern_parts, parts[:end]):
                    return True
            if self.directory_only and not is_dir:
                return False
            return _match_segments(pattern_parts, parts)

        for index, part in enumerate(parts):
            last = index == len(parts) - 1
            if self.directory_only and last and not is_dir:
                continue
            if fnmatchcase(part, self.pattern):
                return True
        return False


def _match_segments(pattern: Sequence[str], parts: Sequence[str]) -> bool:
    """Match path segments one at a time; ``**`` spans zero or more segments."""
    if not pattern:
        return not parts
    head = pattern[0]
    if head == "**":
        return any(_match_segments(pattern[1:], parts[start:]) for start in range(len(parts) + 1))
    if not parts:
        return False
    return fnmatchcase(parts[0], head) and _match_segments(pattern[1:], parts[1:])


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern.rstrip("/")

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern.lstrip("/")

    if not pattern:
        return None

    has_slash = "/" in pattern
    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash=has_slash,
    )


def parse_patterns(text: str) -> List[IgnoreRule]:
    """Parse the contents of an ignore file into rules, skipping comments."""
    rules: List[IgnoreRule] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        elif line.startswith("\\"):
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


@dataclass
class IgnoreRuleSet:
    """Rules scoped to ``base`` (a slash-separated path relative to the root)."""

    base: str
    rules: List[IgnoreRule] = field(default_factory=list)

    @classmethod
    def from_text(cls, base: str, text: str) -> "IgnoreRuleSet":
        return cls(base=base, rules=parse_patterns(text))

    @classmethod
    def from_patterns(cls, base: str, patterns: Iterable[str]) -> "IgnoreRuleSet":
        rules = [rule for rule in (build_ignore_rule(p) for p in patterns) if rule is not None]
        return cls(base=base, rules=rules)

    def relative(self, rel_path: str) -> Optional[str]:
        """Return ``rel_path`` relative to this set's base, or None when outside it."""
        if not self.base:
            return rel_path
        prefix = f"{self.base}/"
        if rel_path.startswith(prefix):
            return rel_path[len(prefix):]
        return None

    def verdict(self, rel_path: str, is_dir: bool) -> Verdict:
        local = self.relative(rel_path)
        if not local:
            return Verdict.NEUTRAL
        result = Verdict.NEUTRAL
        for rule in self.rules:
            if rule.matches(local, is_dir):
                result = Verdict.UNIGNORED if rule.negate else Verdict.IGNORED
        return result

    def __bool__(self) -> bool:
        return bool(self.rules)


class IgnoreChain:
    """Stack of rule sets from the root down to the directory being visited."""

    def __init__(self, rule_sets: Sequence[IgnoreRuleSet] = ()) -> None:
        self._stack: List[IgnoreRuleSet] = list(rule_sets)

    def __len__(self) -> int:
        return len(self._stack)

    def push(self, rule_set: IgnoreRuleSet) -> None:
        self._stack.append(rule_set)

    def pop(self) -> IgnoreRuleSet:
        return self._stack.pop()

    def is_ignored(self, rel_path: str, is_dir: bool) -> bool:
        """Resolve ``rel_path`` outermost to innermost; the innermost opinion wins."""
        ignored = False
        for rule_set in self._stack:
            verdict = rule_set.verdict(rel_path, is_dir)
            if verdict is Verdict.UNIGNORED:
                ignored = False
            elif verdict is Verdict.IGNORED:
                ignored = True
        return ignored


class GitIgnoreResolver:
    """Asks ``git check-ignore`` whether a path is ignored by version control."""

    def __init__(self, root: Path, runner: Callable[..., int] | None = None) -> None:
        self._root = root
        self._runner = runner or self._default_runner
        self._enabled = True

    @property
    def enabled(self) -> bool:
        return self._enabled

    def is_ignored(self, rel_path: str, is_dir: bool) -> bool:
        if not self._enabled:
            return False
        target = f"{rel_path}/" if is_dir else rel_path
        try:
            code = self._runner(["git", "check-ignore", "-q", "--", target], cwd=self._root)
        except OSError as exc:
            logger.warning("git unavailable, ignoring .gitignore rules (%s)", exc)
            self._enabled = False
            return False
        if code == 0:
            return True
        if code == 1:
            return False
        logger.warning("git check-ignore failed in %s, ignoring .gitignore rules", self._root)
        self._enabled = False
        return False

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> int:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=False,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        return completed.returncode


__all__ = [
    "GitIgnoreResolver",
    "IgnoreChain",
    "IgnoreRule",
    "IgnoreRuleSet",
    "Verdict",
    "build_ignore_rule",
    "parse_patterns",
]
