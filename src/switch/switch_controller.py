"""Save-before-switch orchestration.

This module composes the resolver, the live installation view, and the
snapshot store. An unsaved active installation is never overwritten.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.config import CvSwitchConfig
from core.errors import CvSwitchError, NoActiveInstallationError, SaveFailedError
from core.logging_config import get_logger
from core.types import ActiveInstallation, Snapshot
from store.snapshot_store import SnapshotSaveResult, SnapshotStore
from switch.active_installation import inspect_active_installation
from switch.version_resolver import resolve_version
from system.copy_service import LocalCopyService
from system.linker_cache import LdconfigService
from system.pkg_config_service import PackageMetadataService, PkgConfigService

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class SwitchResult:
    """Outcome of one switch transition.

    Attributes:
        previous_version: Active version before the switch.
        target_version: Resolved stored version that was restored.
        active_version: Version re-derived from the live installation after restore.
        implicit_save: Result of the safety save, when one ran.
    """

    previous_version: str
    target_version: str
    active_version: str
    implicit_save: SnapshotSaveResult | None

    @property
    def consistent(self) -> bool:
        """Whether the live installation now reports the target version."""
        return self.active_version == self.target_version


class SwitchController:
    """Entry point for list, save, current, and switch operations."""

    def __init__(
        self,
        config: CvSwitchConfig,
        store: SnapshotStore,
        metadata_service: PackageMetadataService,
    ) -> None:
        self._config = config
        self._store = store
        self._metadata_service = metadata_service

    @property
    def store(self) -> SnapshotStore:
        return self._store

    def current(self) -> ActiveInstallation | None:
        """Return the live installation, re-derived on every call."""
        return inspect_active_installation(self._config, self._metadata_service)

    def require_current(self) -> ActiveInstallation:
        """Return the live installation or raise.

        Raises:
            NoActiveInstallationError: If nothing is installed.
        """
        installation = self.current()
        if installation is None:
            raise NoActiveInstallationError(
                f"No active {self._config.package_name} installation detected. "
                f"Check that 'pkg-config --cflags {self._config.package_name}' works "
                "and that PKG_CONFIG_PATH is set."
            )
        return installation

    def list_snapshots(self) -> list[Snapshot]:
        """Return stored snapshots sorted by version text for display."""
        versions = sorted(self._store.list_versions())
        return [self._store.snapshot_for(version) for version in versions]

    def save_current(self) -> SnapshotSaveResult:
        """Explicitly snapshot the live installation.

        Raises:
            NoActiveInstallationError: If nothing is installed.
        """
        return self._store.create(self.require_current())

    def switch_to(self, clue: str) -> SwitchResult:
        """Switch the live installation to the stored version matching ``clue``.

        Args:
            clue: Literal version prefix typed by the user.

        Returns:
            Switch outcome with the re-derived active version.

        Raises:
            NoVersionMatchError: If no stored version matches.
            AmbiguousVersionMatchError: If several stored versions match.
            NoActiveInstallationError: If there is no installation to replace.
            SaveFailedError: If the safety save of the active version fails.
            MetadataPlaceholderMissingError: If no metadata target is known.
        """
        target_version = resolve_version(clue, self._store.list_versions())
        installation = self.require_current()
        implicit_save = None
        if not self._store.exists(installation.version):
            implicit_save = self._safety_save(installation)
        self._store.restore(target_version, installation)
        refreshed = self.current()
        active_version = refreshed.version if refreshed is not None else ""
        result = SwitchResult(
            previous_version=installation.version,
            target_version=target_version,
            active_version=active_version,
            implicit_save=implicit_save,
        )
        if not result.consistent:
            _LOGGER.warning(
                "switch_version_mismatch",
                target_version=target_version,
                active_version=active_version,
            )
        _LOGGER.info(
            "switch_completed",
            previous_version=installation.version,
            target_version=target_version,
            active_version=active_version,
            implicit_save=implicit_save is not None,
        )
        return result

    def _safety_save(self, installation: ActiveInstallation) -> SnapshotSaveResult:
        """Snapshot the active version before it is overwritten.

        Raises:
            SaveFailedError: If the save raises for any domain or OS reason.
        """
        try:
            return self._store.create(installation)
        except (CvSwitchError, OSError) as error:
            raise SaveFailedError(
                f"Could not save the active version {installation.version} before "
                f"switching: {error} Nothing was changed; the system is still on "
                f"{installation.version}."
            ) from error


def build_switch_controller(config: CvSwitchConfig) -> SwitchController:
    """Wire a controller with the real filesystem and process services.

    Args:
        config: Runtime configuration.

    Returns:
        Ready-to-use switch controller.
    """
    store = SnapshotStore(
        config,
        copy_service=LocalCopyService(hard_link=config.hard_link),
        linker_cache=LdconfigService(),
    )
    return SwitchController(config, store, PkgConfigService())
