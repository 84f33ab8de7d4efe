"""Package metadata file lookup.

This module finds the ``.pc`` file describing the active installation
by scanning the configured search path for a declared version match.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from core.config import CvSwitchConfig
from core.constants import METADATA_VERSION_FIELD
from core.errors import MetadataNotFoundError, MetadataSearchPathUnsetError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class MetadataLookupStatus(Enum):
    """Outcome of a metadata lookup.

    MATCHED covers an exact version match and the default-location
    fallbacks. PLACEHOLDER is an unverified best guess usable as a
    write target. The remaining two are terminal failures.
    """

    MATCHED = "matched"
    PLACEHOLDER = "placeholder"
    SEARCH_PATH_UNSET = "search_path_unset"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class MetadataLookup:
    """Metadata lookup result.

    Attributes:
        status: Lookup outcome.
        directory: Directory holding the metadata file, when any.
        metadata_file_name: Metadata file name that was searched for.
    """

    status: MetadataLookupStatus
    directory: Path | None
    metadata_file_name: str

    @property
    def metadata_file(self) -> Path | None:
        if self.directory is None:
            return None
        return self.directory / self.metadata_file_name

    @property
    def found(self) -> bool:
        """Whether a usable location was returned."""
        return self.status in (MetadataLookupStatus.MATCHED, MetadataLookupStatus.PLACEHOLDER)

    def require_found(self) -> Path:
        """Return the metadata file path or raise the terminal failure.

        Raises:
            MetadataSearchPathUnsetError: If the search path was unset.
            MetadataNotFoundError: If no candidate held a metadata file.
        """
        metadata_file = self.metadata_file
        if self.found and metadata_file is not None:
            return metadata_file
        if self.status is MetadataLookupStatus.SEARCH_PATH_UNSET:
            raise MetadataSearchPathUnsetError(
                f"PKG_CONFIG_PATH is not set and no {self.metadata_file_name} exists "
                "in the default location. If running under sudo, use 'sudo -E' "
                "so PKG_CONFIG_PATH is preserved."
            )
        raise MetadataNotFoundError(
            f"No {self.metadata_file_name} found in any PKG_CONFIG_PATH directory. "
            f"Add the directory containing {self.metadata_file_name} to PKG_CONFIG_PATH."
        )


def locate_metadata(config: CvSwitchConfig, expected_version: str) -> MetadataLookup:
    """Find the metadata file declaring ``expected_version``.

    Args:
        config: Runtime configuration with search path and default dir.
        expected_version: Version the metadata file must declare.

    Returns:
        Lookup result; callers branch on its status.
    """
    file_name = config.metadata_file_name
    default_dir = config.default_pkgconfig_dir
    default_present = (default_dir / file_name).is_file()
    if config.pkg_config_path is None:
        if default_present:
            return _result(MetadataLookupStatus.MATCHED, default_dir, file_name)
        return _result(MetadataLookupStatus.SEARCH_PATH_UNSET, None, file_name)
    last_seen: Path | None = None
    for entry in config.pkg_config_path:
        if not entry:
            continue
        candidate_dir = Path(entry)
        candidate_file = candidate_dir / file_name
        if not candidate_file.is_file():
            continue
        last_seen = candidate_dir
        if read_declared_version(candidate_file) == expected_version:
            return _result(MetadataLookupStatus.MATCHED, candidate_dir, file_name)
    if default_present:
        return _result(MetadataLookupStatus.MATCHED, default_dir, file_name)
    if last_seen is not None:
        return _result(MetadataLookupStatus.PLACEHOLDER, last_seen, file_name)
    return _result(MetadataLookupStatus.NOT_FOUND, None, file_name)


def read_declared_version(metadata_file: Path) -> str | None:
    """Return the ``Version:`` field of a metadata file, if declared."""
    for line in metadata_file.read_text(encoding="utf-8", errors="replace").splitlines():
        if line.startswith(METADATA_VERSION_FIELD):
            return line[len(METADATA_VERSION_FIELD):].strip()
    return None


def _result(
    status: MetadataLookupStatus, directory: Path | None, file_name: str
) -> MetadataLookup:
    lookup = MetadataLookup(status=status, directory=directory, metadata_file_name=file_name)
    _LOGGER.debug(
        "metadata_located",
        status=status.value,
        directory=str(directory) if directory else None,
    )
    return lookup
