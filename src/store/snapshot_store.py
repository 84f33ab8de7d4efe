"""Snapshot store for installed library versions.

This module saves the headers, libraries, and package metadata of the
active installation under a per-version directory and replays them back.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from core.config import CvSwitchConfig
from core.constants import (
    LIBRARY_GLOB_TEMPLATES,
    MANAGED_HEADER_DIR_NAMES,
    RETIRED_DIR_PREFIX,
    STAGING_DIR_PREFIX,
)
from core.errors import (
    CvSwitchError,
    ExternalCommandError,
    MetadataPlaceholderMissingError,
    NoActiveInstallationError,
    SnapshotMissingError,
)
from core.logging_config import get_logger
from core.types import ActiveInstallation, Snapshot
from store.metadata_locator import MetadataLookup, MetadataLookupStatus, locate_metadata
from system.copy_service import FilesystemCopyService
from system.linker_cache import LinkerCacheService

_LOGGER = get_logger(__name__)
_WORKING_DIR_PREFIXES = (STAGING_DIR_PREFIX, RETIRED_DIR_PREFIX)


@dataclass(frozen=True)
class SnapshotSaveResult:
    """Outcome of saving one snapshot.

    Attributes:
        snapshot: The written snapshot.
        metadata_lookup: Metadata lookup performed during the save.
    """

    snapshot: Snapshot
    metadata_lookup: MetadataLookup

    @property
    def degraded(self) -> bool:
        """Whether headers and libraries were saved without metadata."""
        return not self.snapshot.is_complete


class SnapshotStore:
    """Directory-keyed store of version snapshots.

    Each saved version owns ``<storage_root>/<version>`` with fixed
    subdirectories for headers, libraries, and the metadata file.
    """

    def __init__(
        self,
        config: CvSwitchConfig,
        copy_service: FilesystemCopyService,
        linker_cache: LinkerCacheService,
    ) -> None:
        """Initialize snapshot store from config and collaborators.

        Args:
            config: Runtime configuration.
            copy_service: Filesystem copy operations.
            linker_cache: Linker cache refresh triggered after restore.
        """
        self._config = config
        self._copy = copy_service
        self._linker_cache = linker_cache
        self._root = config.storage_root

    @property
    def root(self) -> Path:
        return self._root

    def create(self, installation: ActiveInstallation) -> SnapshotSaveResult:
        """Save the active installation, replacing any prior snapshot.

        Args:
            installation: Live installation to copy from.

        Returns:
            Save result; ``degraded`` when no metadata file was captured.

        Raises:
            NoActiveInstallationError: If the installation has no version.
            ExternalCommandError: If a copy fails.
        """
        if not installation.version:
            raise NoActiveInstallationError(
                "Cannot save: no installed version was detected. "
                f"Check that pkg-config knows '{self._config.package_name}'."
            )
        snapshot = self.snapshot_for(installation.version)
        staging = replace(snapshot, root=self._root / f"{STAGING_DIR_PREFIX}{snapshot.version}")
        try:
            lookup, library_count = self._write_snapshot(staging, installation)
            self._swap_into_place(staging, snapshot)
        except CvSwitchError as error:
            self._abandon(staging, error)
            raise
        except OSError as error:
            self._abandon(staging, error)
            raise ExternalCommandError(
                f"Failed to save snapshot {snapshot.version} under {self._root}: {error}. "
                "Check that the storage root is a writable directory and retry."
            ) from error
        _LOGGER.info(
            "snapshot_created",
            version=snapshot.version,
            header_dirs=len(installation.header_dirs()),
            library_files=library_count,
            complete=snapshot.is_complete,
        )
        return SnapshotSaveResult(snapshot=snapshot, metadata_lookup=lookup)

    def exists(self, version: str) -> bool:
        """Return True when a non-empty snapshot directory exists."""
        if not version:
            return False
        snapshot_root = self._root / version
        return snapshot_root.is_dir() and any(snapshot_root.iterdir())

    def list_versions(self) -> set[str]:
        """Return all stored version keys, unordered."""
        if not self._root.is_dir():
            return set()
        return {
            path.name
            for path in self._root.iterdir()
            if path.is_dir() and not path.name.startswith(_WORKING_DIR_PREFIXES)
        }

    def get(self, version: str) -> Snapshot:
        """Return a stored snapshot.

        Raises:
            SnapshotMissingError: If nothing is stored for the version.
        """
        if not self.exists(version):
            raise SnapshotMissingError(
                f"No snapshot stored for version '{version}' under {self._root}. "
                "Run 'cvswitch list' to see saved versions."
            )
        return self.snapshot_for(version)

    def restore(self, version: str, installation: ActiveInstallation) -> Snapshot:
        """Replay a stored snapshot into the active installation paths.

        The metadata target is resolved before anything is modified, so a
        missing target leaves the installation untouched. Metadata is
        copied first, then header trees are replaced and libraries merged.

        Args:
            version: Stored version to restore.
            installation: Installation being displaced; its paths are targets.

        Returns:
            The restored snapshot.

        Raises:
            SnapshotMissingError: If the version is not stored.
            MetadataPlaceholderMissingError: If no metadata target is known.
            ExternalCommandError: If a copy fails.
        """
        snapshot = self.get(version)
        metadata_target = self._metadata_target(installation)
        if snapshot.is_complete:
            self._copy.copy_file(snapshot.metadata_file, metadata_target)
        else:
            _LOGGER.warning(
                "restore_without_metadata",
                version=version,
                metadata_target=str(metadata_target),
            )
        try:
            self._replay_files(snapshot, installation)
        except OSError as error:
            raise ExternalCommandError(
                f"Failed to restore {version} into {installation.prefix}: {error}. "
                f"Check the snapshot under {snapshot.root} and write access to the prefix."
            ) from error
        self._linker_cache.refresh()
        _LOGGER.info(
            "snapshot_restored",
            version=version,
            include_dir=str(installation.include_dir),
            lib_dir=str(installation.lib_dir),
        )
        return snapshot

    def snapshot_for(self, version: str) -> Snapshot:
        """Return the snapshot handle for a key without checking existence."""
        return Snapshot(
            version=version,
            root=self._root / version,
            metadata_file_name=self._config.metadata_file_name,
        )

    def _replay_files(self, snapshot: Snapshot, installation: ActiveInstallation) -> None:
        """Replace managed header trees and merge stored libraries."""
        for name in MANAGED_HEADER_DIR_NAMES:
            self._copy.remove_tree(installation.include_dir / name)
        installation.include_dir.mkdir(parents=True, exist_ok=True)
        for stored_dir in sorted(snapshot.headers_dir.iterdir()):
            self._copy.copy_tree(stored_dir, installation.include_dir / stored_dir.name)
        installation.lib_dir.mkdir(parents=True, exist_ok=True)
        for stored_file in sorted(snapshot.libs_dir.iterdir()):
            self._copy.copy_file(stored_file, installation.lib_dir / stored_file.name)

    def _write_snapshot(
        self, snapshot: Snapshot, installation: ActiveInstallation
    ) -> tuple[MetadataLookup, int]:
        """Fill a snapshot directory with fresh copies.

        Args:
            snapshot: Staging snapshot written before it replaces the stored one.
            installation: Live installation to copy from.

        Returns:
            Metadata lookup result and number of library files copied.
        """
        self._copy.remove_tree(snapshot.root)
        for directory in (snapshot.headers_dir, snapshot.libs_dir, snapshot.metadata_dir):
            directory.mkdir(parents=True, exist_ok=True)
        for header_dir in installation.header_dirs():
            self._copy.copy_tree(header_dir, snapshot.headers_dir / header_dir.name)
        library_files = self._library_files(installation.lib_dir)
        for library_file in library_files:
            self._copy.copy_file(library_file, snapshot.libs_dir / library_file.name)
        lookup = locate_metadata(self._config, installation.metadata_version)
        metadata_file = lookup.metadata_file
        if lookup.status is MetadataLookupStatus.MATCHED and metadata_file is not None:
            self._copy.copy_file(metadata_file, snapshot.metadata_file)
        else:
            _LOGGER.warning(
                "snapshot_metadata_missing",
                version=snapshot.version,
                lookup_status=lookup.status.value,
            )
        return lookup, len(library_files)

    def _swap_into_place(self, staging: Snapshot, snapshot: Snapshot) -> None:
        """Move a fully written staging snapshot over the stored one.

        The prior snapshot is renamed aside first and put back if the
        final rename fails, so a stored version is never lost.
        """
        retired_root = self._root / f"{RETIRED_DIR_PREFIX}{snapshot.version}"
        self._copy.remove_tree(retired_root)
        had_prior = snapshot.root.exists()
        if had_prior:
            snapshot.root.rename(retired_root)
        try:
            staging.root.rename(snapshot.root)
        except OSError:
            if had_prior:
                retired_root.rename(snapshot.root)
            raise
        try:
            self._copy.remove_tree(retired_root)
        except ExternalCommandError as error:
            _LOGGER.warning(
                "retired_snapshot_cleanup_failed", version=snapshot.version, reason=str(error)
            )

    def _abandon(self, staging: Snapshot, error: Exception) -> None:
        """Log a failed save and remove its staging directory."""
        _LOGGER.error("snapshot_create_failed", version=staging.version, reason=str(error))
        try:
            self._copy.remove_tree(staging.root)
        except ExternalCommandError as discard_error:
            _LOGGER.warning(
                "snapshot_discard_failed", version=staging.version, reason=str(discard_error)
            )

    def _library_files(self, lib_dir: Path) -> list[Path]:
        """Collect library files matching the fixed glob patterns.

        Args:
            lib_dir: Active library directory.

        Returns:
            Sorted, de-duplicated list of matching files and symlinks.
        """
        if not lib_dir.is_dir():
            return []
        matches: set[Path] = set()
        for template in LIBRARY_GLOB_TEMPLATES:
            pattern = template.format(package=self._config.package_name)
            matches.update(
                path for path in lib_dir.glob(pattern) if path.is_file() or path.is_symlink()
            )
        return sorted(matches)

    def _metadata_target(self, installation: ActiveInstallation) -> Path:
        """Resolve where the restored metadata file must be written.

        Raises:
            MetadataPlaceholderMissingError: If no location was found.
        """
        lookup = locate_metadata(self._config, installation.metadata_version)
        metadata_file = lookup.metadata_file
        if not lookup.found or metadata_file is None:
            raise MetadataPlaceholderMissingError(
                f"Cannot restore: no {self._config.metadata_file_name} location is known "
                f"for the active version {installation.version or '(none)'}. "
                "Set PKG_CONFIG_PATH to the directory holding it (use 'sudo -E' "
                "to keep it) and retry."
            )
        return metadata_file
