"""Tests for packsize.eligibility."""

from __future__ import annotations

from packsize.eligibility import EligibilityFilter, is_valid_text
from packsize.ignore import IgnoreChain, IgnoreRuleSet


def test_valid_text_accepts_utf8() -> None:
    assert is_valid_text(b"plain ascii\n")
    assert is_valid_text("café ☃".encode("utf-8"))
    assert is_valid_text(b"")


def test_valid_text_rejects_invalid_bytes() -> None:
    assert not is_valid_text(b"\xff\xfe\x00binary")
    assert not is_valid_text(b"abc\x80def")


def test_valid_text_rejects_truncated_trailing_sequence() -> None:
    complete = "snow ☃".encode("utf-8")
    truncated = complete + "☃".encode("utf-8")[:2]

    assert not is_valid_text(truncated)
    assert is_valid_text(complete)


def test_lone_leading_byte_at_end_is_rejected() -> None:
    assert not is_valid_text(b"hello\xc3")
    assert is_valid_text(b"hello")


def test_filter_combines_ignore_rules_and_text_check() -> None:
    chain = IgnoreChain([IgnoreRuleSet.from_text("", "*.bin\n")])
    eligibility = EligibilityFilter(chain)

    assert eligibility.is_eligible("note.txt", b"hello")
    assert not eligibility.is_eligible("data.bin", b"hello")
    assert not eligibility.is_eligible("blob.dat", b"\x00\xff")
    assert not eligibility.is_eligible("missing.txt", None)


def test_filter_consults_extra_resolvers() -> None:
    class AlwaysIgnore:
        def is_ignored(self, rel_path: str, is_dir: bool) -> bool:
            return rel_path.startswith("vendor")

    eligibility = EligibilityFilter(IgnoreChain(), [AlwaysIgnore()])  # type: ignore[list-item]

    assert eligibility.is_ignored("vendor", is_dir=True)
    assert not eligibility.is_ignored("src", is_dir=True)


def test_resolver_is_consulted_once_per_path() -> None:
    calls = []

    class CountingResolver:
        def is_ignored(self, rel_path: str, is_dir: bool) -> bool:
            calls.append((rel_path, is_dir))
            return False

    eligibility = EligibilityFilter(IgnoreChain(), [CountingResolver()])  # type: ignore[list-item]

    assert not eligibility.is_ignored("a.txt", is_dir=False)
    assert eligibility.is_eligible("a.txt", b"text")
    assert calls == [("a.txt", False)]
