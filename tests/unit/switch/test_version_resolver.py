"""Unit tests for version clue resolution."""

from __future__ import annotations

import pytest

from core.errors import AmbiguousVersionMatchError, NoVersionMatchError
from switch.version_resolver import resolve_version


def test_exact_match_beats_longer_prefixed_keys() -> None:
    """An exact key should win even when it prefixes other keys."""
    stored = ["2.4.9.0", "2.4.9.1", "2.4"]

    assert resolve_version("2.4", stored) == "2.4"


def test_single_prefix_candidate_resolves() -> None:
    """A clue matching one key by prefix should resolve to it."""
    assert resolve_version("2", {"2.4.9.0", "3.0.0-alpha"}) == "2.4.9.0"


def test_multiple_candidates_are_ambiguous() -> None:
    """Several prefix matches should enumerate every candidate."""
    with pytest.raises(AmbiguousVersionMatchError) as error_info:
        resolve_version("2.4", ["2.4.9.1", "2.4.9.0"])

    assert error_info.value.candidates == ("2.4.9.0", "2.4.9.1")


def test_no_candidate_raises_no_match() -> None:
    """A clue matching nothing should raise no match."""
    with pytest.raises(NoVersionMatchError):
        resolve_version("4", {"2.4.9.0", "3.0.0-alpha"})


def test_clue_is_matched_literally_not_as_pattern() -> None:
    """Regex metacharacters in the clue should not act as wildcards."""
    with pytest.raises(NoVersionMatchError):
        resolve_version("2.4.9.", {"2.4.910"})
