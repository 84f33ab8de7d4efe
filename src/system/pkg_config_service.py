"""Package metadata query service backed by ``pkg-config``."""

from __future__ import annotations

from typing import Protocol

from core.errors import ExternalCommandError
from core.logging_config import get_logger
from system.process_runner import run_command

_LOGGER = get_logger(__name__)


class PackageMetadataService(Protocol):
    """Query interface for build-configuration metadata."""

    def cflags(self, package: str) -> str:
        """Return compiler flags for ``package``, or an empty string."""
        ...


class PkgConfigService:
    """Shell out to ``pkg-config`` for compiler flags."""

    def __init__(self, executable: str = "pkg-config") -> None:
        self._executable = executable

    def cflags(self, package: str) -> str:
        """Return ``pkg-config --cflags`` output for a package.

        Args:
            package: pkg-config package name.

        Returns:
            Stripped flag text; empty when the package is unknown or
            pkg-config itself is not installed.
        """
        try:
            completed = run_command([self._executable, "--cflags", package], check=False)
        except ExternalCommandError as error:
            _LOGGER.warning("pkg_config_unavailable", package=package, reason=str(error))
            return ""
        if completed.returncode != 0:
            _LOGGER.info(
                "package_metadata_missing",
                package=package,
                stderr=completed.stderr.strip(),
            )
            return ""
        return completed.stdout.strip()
