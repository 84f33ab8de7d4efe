"""Unit tests for save-before-switch orchestration."""

from __future__ import annotations

from pathlib import Path
import shutil

import pytest

from core.errors import (
    ExternalCommandError,
    NoActiveInstallationError,
    NoVersionMatchError,
    SaveFailedError,
)
from core.types import ActiveInstallation
from store.snapshot_store import SnapshotSaveResult, SnapshotStore
from switch.switch_controller import SwitchController
from system.copy_service import LocalCopyService


class _FlakyCopy(LocalCopyService):
    """Copy service that can be told to fail on writes into the store."""

    def __init__(self, storage_root: Path) -> None:
        super().__init__()
        self.storage_root = storage_root
        self.fail = False

    def copy_tree(self, source: Path, destination: Path) -> None:
        self._check(destination)
        super().copy_tree(source, destination)

    def copy_file(self, source: Path, destination: Path) -> None:
        self._check(destination)
        super().copy_file(source, destination)

    def _check(self, destination: Path) -> None:
        if self.fail and self.storage_root in destination.parents:
            raise ExternalCommandError(f"Failed to copy into {destination}.")


class _CountingStore(SnapshotStore):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.created: list[str] = []

    def create(self, installation: ActiveInstallation) -> SnapshotSaveResult:
        self.created.append(installation.version)
        return super().create(installation)


def _tree_bytes(root: Path) -> dict[str, bytes]:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.fixture
def prefix(tmp_path: Path) -> Path:
    return tmp_path / "usr"


@pytest.fixture
def copy_service(tmp_path: Path) -> _FlakyCopy:
    return _FlakyCopy(tmp_path / "store")


@pytest.fixture
def controller(
    prefix: Path,
    config_factory,
    metadata_service,
    linker_cache,
    copy_service: _FlakyCopy,
    installation_writer,
    metadata_writer,
    epoch_definitions,
    major_definitions,
) -> SwitchController:
    """Controller with 3.0.0-alpha saved and unsaved 2.4.9.0 active."""
    pkgconfig_dir = prefix / "lib" / "pkgconfig"
    config = config_factory(pkg_config_path=(str(pkgconfig_dir),))
    metadata_service.cflags_text = f"-I{prefix}/include/opencv -I{prefix}/include"
    store = _CountingStore(config, copy_service, linker_cache)
    switch_controller = SwitchController(config, store, metadata_service)
    installation_writer(prefix, major_definitions, {"libopencv_core.so.3.0": b"three"})
    metadata_writer(pkgconfig_dir, "3.0.0")
    switch_controller.save_current()
    shutil.rmtree(prefix)
    installation_writer(prefix, epoch_definitions, {"libopencv_core.so.2.4.9": b"two"})
    metadata_writer(pkgconfig_dir, "2.4.9")
    store.created.clear()
    return switch_controller


def test_switch_saves_unsaved_active_version_once(controller, linker_cache) -> None:
    """Switching away from an unsaved version should save it exactly once."""
    result = controller.switch_to("3")

    assert controller.store.created == ["2.4.9.0"]
    assert (result.previous_version, result.target_version) == ("2.4.9.0", "3.0.0-alpha")
    assert result.implicit_save is not None and linker_cache.refresh_count == 1


def test_switch_reports_rederived_active_version(controller, prefix: Path) -> None:
    """The reported version should come from the live headers after restore."""
    result = controller.switch_to("3.0")

    assert result.active_version == "3.0.0-alpha" and result.consistent
    assert (prefix / "lib" / "libopencv_core.so.2.4.9").read_bytes() == b"two"


def test_switch_back_skips_save_of_already_saved_version(controller) -> None:
    """A version already in the store should not be saved again."""
    controller.switch_to("3")
    controller.store.created.clear()

    result = controller.switch_to("2.4.9.0")

    assert controller.store.created == [] and result.implicit_save is None
    assert result.active_version == "2.4.9.0"


def test_failed_implicit_save_leaves_installation_unchanged(
    controller, copy_service: _FlakyCopy, prefix: Path, linker_cache
) -> None:
    """A failed safety save should abort the switch with nothing modified."""
    before = _tree_bytes(prefix)
    copy_service.fail = True

    with pytest.raises(SaveFailedError, match="still on 2.4.9.0"):
        controller.switch_to("3")

    assert _tree_bytes(prefix) == before
    assert not controller.store.exists("2.4.9.0") and linker_cache.refresh_count == 0


def test_unknown_clue_changes_nothing(controller, prefix: Path) -> None:
    """Resolution failures should happen before any save or restore."""
    before = _tree_bytes(prefix)

    with pytest.raises(NoVersionMatchError):
        controller.switch_to("9")

    assert controller.store.created == [] and _tree_bytes(prefix) == before


def test_switch_without_active_installation_raises(controller, metadata_service) -> None:
    """A switch needs an installation whose paths it can replace."""
    metadata_service.cflags_text = ""

    with pytest.raises(NoActiveInstallationError):
        controller.switch_to("3")


def test_restore_targets_pre_switch_prefix(controller, prefix: Path) -> None:
    """Restored files land under the displaced prefix, not the stored one.

    The restored metadata file declares prefix=/usr/local, yet headers and
    libraries are written to the paths of the installation being replaced.
    """
    controller.switch_to("3")

    metadata_text = (prefix / "lib" / "pkgconfig" / "opencv.pc").read_text(encoding="utf-8")
    assert "prefix=/usr/local" in metadata_text
    assert (prefix / "lib" / "libopencv_core.so.3.0").read_bytes() == b"three"
