"""Shared typed models.

This module defines immutable data models passed between the store,
switch, and CLI layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from core.constants import (
    MANAGED_HEADER_DIR_NAMES,
    SNAPSHOT_HEADERS_DIR_NAME,
    SNAPSHOT_LIBS_DIR_NAME,
    SNAPSHOT_METADATA_DIR_NAME,
)


@dataclass(frozen=True)
class ActiveInstallation:
    """Live view of the currently installed library.

    Attributes:
        prefix: Install prefix derived from pkg-config cflags.
        include_dir: Directory holding the managed header trees.
        lib_dir: Directory holding the compiled libraries.
        version: Four-component version string used as storage key.
        metadata_version: Three-component version declared by the .pc file.
    """

    prefix: Path
    include_dir: Path
    lib_dir: Path
    version: str
    metadata_version: str

    def header_dirs(self) -> tuple[Path, ...]:
        """Return managed header directories that currently exist."""
        candidates = (self.include_dir / name for name in MANAGED_HEADER_DIR_NAMES)
        return tuple(path for path in candidates if path.is_dir())


@dataclass(frozen=True)
class Snapshot:
    """Stored artifact bundle for one version.

    Attributes:
        version: Version string used as storage key.
        root: Snapshot directory under the storage root.
        metadata_file_name: Expected metadata file name.
    """

    version: str
    root: Path
    metadata_file_name: str

    @property
    def headers_dir(self) -> Path:
        return self.root / SNAPSHOT_HEADERS_DIR_NAME

    @property
    def libs_dir(self) -> Path:
        return self.root / SNAPSHOT_LIBS_DIR_NAME

    @property
    def metadata_dir(self) -> Path:
        return self.root / SNAPSHOT_METADATA_DIR_NAME

    @property
    def metadata_file(self) -> Path:
        return self.metadata_dir / self.metadata_file_name

    @property
    def is_complete(self) -> bool:
        """Whether the metadata file was captured at save time."""
        return self.metadata_file.is_file()
