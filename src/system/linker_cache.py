"""Dynamic linker cache refresh service."""

from __future__ import annotations

from typing import Protocol

from core.errors import ExternalCommandError
from core.logging_config import get_logger
from system.process_runner import run_command

_LOGGER = get_logger(__name__)


class LinkerCacheService(Protocol):
    """Fire-and-forget linker cache refresh."""

    def refresh(self) -> None:
        """Refresh the dynamic linker cache."""
        ...


class LdconfigService:
    """Refresh the linker cache with ``ldconfig``."""

    def __init__(self, executable: str = "ldconfig") -> None:
        self._executable = executable

    def refresh(self) -> None:
        """Run ``ldconfig``; failures are logged and never raised."""
        try:
            completed = run_command([self._executable], check=False)
        except ExternalCommandError as error:
            _LOGGER.warning("linker_cache_refresh_skipped", reason=str(error))
            return
        if completed.returncode != 0:
            _LOGGER.warning(
                "linker_cache_refresh_failed",
                returncode=completed.returncode,
                stderr=completed.stderr.strip(),
            )
