"""Version string derivation from installed header definitions.

This module turns the ``#define`` constants of the library's version
header into the dotted identifier used as a snapshot key.
"""

from __future__ import annotations

from pathlib import Path
import re
from typing import Mapping

from core.constants import (
    EPOCH_REVISION_SEPARATOR,
    SNAPSHOT_VERSION_COMPONENTS,
    VERSION_HEADER_RELATIVE_PATHS,
)

_DEFINE_PATTERN = re.compile(r"^\s*#\s*define\s+([A-Za-z_][A-Za-z0-9_]*)\s+(.+?)\s*$")

# (key, separator placed before the component)
_EPOCH_SCHEME = (
    ("CV_VERSION_EPOCH", ""),
    ("CV_VERSION_MAJOR", "."),
    ("CV_VERSION_MINOR", "."),
    ("CV_VERSION_REVISION", EPOCH_REVISION_SEPARATOR),
)
_MAJOR_SCHEME = (
    ("CV_VERSION_MAJOR", ""),
    ("CV_VERSION_MINOR", "."),
    ("CV_VERSION_REVISION", "."),
    ("CV_VERSION_STATUS", ""),
)
_LEGACY_SCHEME = (
    ("CV_MAJOR_VERSION", ""),
    ("CV_MINOR_VERSION", "."),
    ("CV_SUBMINOR_VERSION", "."),
)


def parse_header_definitions(text: str) -> dict[str, str]:
    """Extract object-like ``#define`` constants from header text.

    Args:
        text: Header file contents.

    Returns:
        Mapping of macro name to value with surrounding quotes removed.
    """
    definitions: dict[str, str] = {}
    for line in text.splitlines():
        match = _DEFINE_PATTERN.match(line)
        if match is None:
            continue
        value = match.group(2).split("//", 1)[0].strip()
        if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
            value = value[1:-1]
        definitions[match.group(1)] = value
    return definitions


def derive_version_string(
    definitions: Mapping[str, str] | None,
    max_components: int = SNAPSHOT_VERSION_COMPONENTS,
) -> str:
    """Build a version string from header definitions.

    The scheme is picked by key presence: epoch first, then the
    ``CV_VERSION_MAJOR`` family, then the legacy ``CV_*_VERSION`` keys.

    Args:
        definitions: Header definitions, or None when the header is absent.
        max_components: Maximum number of components to include.

    Returns:
        Version string, or an empty string when nothing resolves.
    """
    if definitions is None:
        return ""
    if "CV_VERSION_EPOCH" in definitions:
        scheme = _EPOCH_SCHEME
    elif "CV_VERSION_MAJOR" in definitions:
        scheme = _MAJOR_SCHEME
    else:
        scheme = _LEGACY_SCHEME
    parts: list[str] = []
    count = 0
    for key, separator in scheme:
        value = definitions.get(key, "")
        if count >= max_components or not value:
            break
        parts.append(f"{separator if count else ''}{value}")
        count += 1
    return "".join(parts)


def find_version_header(include_dir: Path) -> Path | None:
    """Return the first existing version header under an include dir."""
    for relative_path in VERSION_HEADER_RELATIVE_PATHS:
        candidate = include_dir / relative_path
        if candidate.is_file():
            return candidate
    return None


def read_version_string(
    include_dir: Path,
    max_components: int = SNAPSHOT_VERSION_COMPONENTS,
) -> str:
    """Derive the installed version from headers under ``include_dir``.

    Args:
        include_dir: Include directory of the installation.
        max_components: Maximum number of components to include.

    Returns:
        Version string, or an empty string when the header is absent.
    """
    header_path = find_version_header(include_dir)
    if header_path is None:
        return derive_version_string(None, max_components)
    text = header_path.read_text(encoding="utf-8", errors="replace")
    return derive_version_string(parse_header_definitions(text), max_components)
