"""Live installation inspection.

This module derives the active install prefix from pkg-config cflags
and reads the installed version from its headers. Nothing is cached.
"""

from __future__ import annotations

from pathlib import Path
import shlex

from core.config import CvSwitchConfig
from core.constants import (
    CFLAGS_PREFIX_SUFFIXES,
    LIBRARY_DIR_NAME,
    METADATA_VERSION_COMPONENTS,
    SNAPSHOT_VERSION_COMPONENTS,
)
from core.logging_config import get_logger
from core.types import ActiveInstallation
from core.version_naming import read_version_string
from system.pkg_config_service import PackageMetadataService

_LOGGER = get_logger(__name__)


def inspect_active_installation(
    config: CvSwitchConfig,
    metadata_service: PackageMetadataService,
) -> ActiveInstallation | None:
    """Return the live installation, or None when none is detected.

    Args:
        config: Runtime configuration.
        metadata_service: Package metadata query service.

    Returns:
        Active installation view, or None.
    """
    cflags = metadata_service.cflags(config.package_name)
    prefix = prefix_from_cflags(cflags)
    if prefix is None:
        _LOGGER.info("active_installation_missing", package=config.package_name)
        return None
    include_dir = prefix / "include"
    version = read_version_string(include_dir, SNAPSHOT_VERSION_COMPONENTS)
    if not version:
        _LOGGER.info("active_version_unresolved", include_dir=str(include_dir))
        return None
    return ActiveInstallation(
        prefix=prefix,
        include_dir=include_dir,
        lib_dir=prefix / LIBRARY_DIR_NAME,
        version=version,
        metadata_version=read_version_string(include_dir, METADATA_VERSION_COMPONENTS),
    )


def prefix_from_cflags(cflags: str) -> Path | None:
    """Derive the install prefix from the first ``-I`` flag.

    Args:
        cflags: Raw compiler flag text.

    Returns:
        Prefix with one known include suffix stripped, or None.
    """
    include_path = _first_include_path(cflags)
    if include_path is None:
        return None
    trimmed = include_path.rstrip("/")
    for suffix in CFLAGS_PREFIX_SUFFIXES:
        if trimmed.endswith(suffix):
            return Path(trimmed[: -len(suffix)] or "/")
    return Path(trimmed)


def _first_include_path(cflags: str) -> str | None:
    tokens = shlex.split(cflags)
    for index, token in enumerate(tokens):
        if token == "-I" and index + 1 < len(tokens):
            return tokens[index + 1]
        if token.startswith("-I") and len(token) > 2:
            return token[2:]
    return None
