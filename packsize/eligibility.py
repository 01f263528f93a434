"""Decides which discovered files count toward the compression sample."""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

from .ignore import GitIgnoreResolver, IgnoreChain


def is_valid_text(data: bytes) -> bool:
    """Return True when ``data`` is strictly valid UTF-8.

    A truncated multi-byte sequence at the end of the buffer is invalid.
    """
    try:
        data.decode("utf-8", errors="strict")
    except UnicodeDecodeError:
        return False
    return True


class EligibilityFilter:
    """Combines ignore rules and the text check into a single verdict."""

    def __init__(
        self,
        chain: IgnoreChain | None = None,
        resolvers: Sequence[GitIgnoreResolver] = (),
    ) -> None:
        self.chain = chain if chain is not None else IgnoreChain()
        self._resolvers = list(resolvers)
        self._resolved: Dict[Tuple[str, bool], bool] = {}

    def is_ignored(self, rel_path: str, is_dir: bool = False) -> bool:
        if self.chain.is_ignored(rel_path, is_dir):
            return True
        key = (rel_path, is_dir)
        if key not in self._resolved:
            self._resolved[key] = any(resolver.is_ignored(rel_path, is_dir) for resolver in self._resolvers)
        return self._resolved[key]

    def is_eligible(self, rel_path: str, content: Optional[bytes]) -> bool:
        if content is None:
            return False
        if self.is_ignored(rel_path, is_dir=False):
            return False
        return is_valid_text(content)


__all__ = ["EligibilityFilter", "is_valid_text"]
