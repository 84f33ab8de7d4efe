"""cvswitch exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each error carries the process exit code the CLI reports for it.
"""

from __future__ import annotations

from core.constants import (
    EXIT_GENERIC_FAILURE,
    EXIT_METADATA_UNLOCATABLE,
    EXIT_NO_INSTALLATION,
    EXIT_NO_MATCH,
    EXIT_SAVE_FAILED,
)


class CvSwitchError(Exception):
    """Base exception for all cvswitch failures."""

    exit_code = EXIT_GENERIC_FAILURE


class CvSwitchConfigError(CvSwitchError):
    """Raised for invalid runtime configuration."""


class ExternalCommandError(CvSwitchError):
    """Raised when a copy or query collaborator fails."""


class NoActiveInstallationError(CvSwitchError):
    """Raised when no live library installation can be detected."""

    exit_code = EXIT_NO_INSTALLATION


class NoVersionMatchError(CvSwitchError):
    """Raised when a version clue matches no stored snapshot."""

    exit_code = EXIT_NO_MATCH


class AmbiguousVersionMatchError(CvSwitchError):
    """Raised when a version clue matches several stored snapshots."""

    exit_code = EXIT_NO_MATCH

    def __init__(self, message: str, candidates: tuple[str, ...]) -> None:
        super().__init__(message)
        self.candidates = candidates


class SnapshotMissingError(CvSwitchError):
    """Raised when a requested snapshot is not in the store."""

    exit_code = EXIT_NO_MATCH


class MetadataSearchPathUnsetError(CvSwitchError):
    """Raised when the metadata search path is unset and no default exists."""

    exit_code = EXIT_METADATA_UNLOCATABLE


class MetadataNotFoundError(CvSwitchError):
    """Raised when no candidate directory holds a metadata file."""

    exit_code = EXIT_METADATA_UNLOCATABLE


class MetadataPlaceholderMissingError(CvSwitchError):
    """Raised when restore has no metadata location to overwrite."""

    exit_code = EXIT_METADATA_UNLOCATABLE


class SaveFailedError(CvSwitchError):
    """Raised when snapshotting the active installation fails."""

    exit_code = EXIT_SAVE_FAILED
