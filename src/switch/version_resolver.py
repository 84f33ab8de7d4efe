"""Prefix resolution of user-typed version clues."""

from __future__ import annotations

from typing import Iterable

from core.errors import AmbiguousVersionMatchError, NoVersionMatchError


def resolve_version(clue: str, stored_versions: Iterable[str]) -> str:
    """Resolve a literal version prefix to exactly one stored version.

    An exact match wins immediately, even when longer keys share the
    prefix. Otherwise the clue must prefix exactly one stored key.

    Args:
        clue: User-supplied partial version, matched literally.
        stored_versions: Stored version keys in any order.

    Returns:
        The single matching stored version.

    Raises:
        NoVersionMatchError: If no stored key starts with the clue.
        AmbiguousVersionMatchError: If several stored keys start with it.
    """
    candidates: list[str] = []
    for version in stored_versions:
        if version == clue:
            return version
        if version.startswith(clue):
            candidates.append(version)
    if not candidates:
        raise NoVersionMatchError(
            f"No saved version matches '{clue}'. "
            "Run 'cvswitch list' to see saved versions."
        )
    if len(candidates) > 1:
        ordered = tuple(sorted(candidates))
        raise AmbiguousVersionMatchError(
            f"Version clue '{clue}' is ambiguous; it matches: {', '.join(ordered)}. "
            "Retry with a longer version prefix.",
            candidates=ordered,
        )
    return candidates[0]
