"""Filesystem copy service.

This module owns every recursive copy and removal the store performs,
optionally hard-linking files instead of duplicating their bytes.
"""

from __future__ import annotations

import errno
import os
from pathlib import Path
import shutil
from typing import Protocol

from core.errors import ExternalCommandError


class FilesystemCopyService(Protocol):
    """Copy operations consumed by the snapshot store."""

    def copy_tree(self, source: Path, destination: Path) -> None:
        """Copy a directory tree into a new destination directory."""
        ...

    def copy_file(self, source: Path, destination: Path) -> None:
        """Copy one file, replacing any existing destination file."""
        ...

    def remove_tree(self, path: Path) -> None:
        """Remove a directory tree if it exists."""
        ...


class LocalCopyService:
    """``shutil`` backed copy service with optional hard links."""

    def __init__(self, hard_link: bool = False) -> None:
        self._hard_link = hard_link

    def copy_tree(self, source: Path, destination: Path) -> None:
        """Copy ``source`` to ``destination``, preserving symlinks.

        Raises:
            ExternalCommandError: If the copy fails.
        """
        try:
            shutil.copytree(
                source,
                destination,
                symlinks=True,
                copy_function=self._copy_one,
                dirs_exist_ok=True,
            )
        except (OSError, shutil.Error) as error:
            raise ExternalCommandError(
                f"Failed to copy {source} to {destination}: {error}. "
                "Check permissions and free space, then retry."
            ) from error

    def copy_file(self, source: Path, destination: Path) -> None:
        """Copy a single file; symlinks are recreated rather than followed.

        Raises:
            ExternalCommandError: If the copy fails.
        """
        try:
            if destination.is_symlink() or destination.exists():
                destination.unlink()
            if source.is_symlink():
                os.symlink(os.readlink(source), destination)
                return
            self._copy_one(str(source), str(destination))
        except OSError as error:
            raise ExternalCommandError(
                f"Failed to copy {source} to {destination}: {error}. "
                "Check permissions and free space, then retry."
            ) from error

    def remove_tree(self, path: Path) -> None:
        """Remove a directory tree, or a symlink pointing at one.

        Raises:
            ExternalCommandError: If removal fails.
        """
        try:
            if path.is_symlink():
                path.unlink()
            elif path.exists():
                shutil.rmtree(path)
        except OSError as error:
            raise ExternalCommandError(
                f"Failed to remove {path}: {error}. Check permissions and retry."
            ) from error

    def _copy_one(self, source: str, destination: str) -> str:
        if not self._hard_link:
            return shutil.copy2(source, destination)
        try:
            os.link(source, destination)
        except OSError as error:
            # hard links cannot cross filesystems
            if error.errno != errno.EXDEV:
                raise
            return shutil.copy2(source, destination)
        return destination
