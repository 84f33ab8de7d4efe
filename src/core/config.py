"""Runtime configuration model for cvswitch.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping

from core.constants import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_PACKAGE_NAME,
    DEFAULT_PKGCONFIG_DIR,
    METADATA_FILE_SUFFIX,
    STORAGE_DIR_NAME,
    SUPPORTED_LOG_LEVELS,
)
from core.errors import CvSwitchConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class CvSwitchConfig:
    """Validated runtime configuration.

    Attributes:
        storage_root: Directory holding one subdirectory per saved version.
        package_name: pkg-config package name of the managed library.
        pkg_config_path: Ordered metadata search directories, None when unset.
        default_pkgconfig_dir: Fixed fallback directory for the metadata file.
        hard_link: Whether copies hard-link files instead of duplicating them.
        auto_elevate: Whether mutating commands re-exec through sudo.
        log_level: Minimum structured log level.
    """

    storage_root: Path
    package_name: str
    pkg_config_path: tuple[str, ...] | None
    default_pkgconfig_dir: Path
    hard_link: bool
    auto_elevate: bool
    log_level: str

    @property
    def metadata_file_name(self) -> str:
        """Return the metadata file name, e.g. ``opencv.pc``."""
        return f"{self.package_name}{METADATA_FILE_SUFFIX}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CvSwitchConfig":
        """Build config from process environment variables.

        Args:
            environ: Optional environment mapping; defaults to ``os.environ``.

        Returns:
            A validated config object.

        Raises:
            CvSwitchConfigError: If environment values are invalid.
        """
        env = os.environ if environ is None else environ
        return cls(
            storage_root=_resolve_storage_root(env),
            package_name=env.get("CVSWITCH_PACKAGE") or DEFAULT_PACKAGE_NAME,
            pkg_config_path=_parse_search_path(env.get("PKG_CONFIG_PATH")),
            default_pkgconfig_dir=Path(
                env.get("CVSWITCH_DEFAULT_PKGCONFIG_DIR") or str(DEFAULT_PKGCONFIG_DIR)
            ),
            hard_link=_parse_bool("CVSWITCH_HARD_LINK", env.get("CVSWITCH_HARD_LINK"), False),
            auto_elevate=_parse_bool(
                "CVSWITCH_AUTO_ELEVATE", env.get("CVSWITCH_AUTO_ELEVATE"), True
            ),
            log_level=_parse_log_level(env.get("CVSWITCH_LOG_LEVEL")),
        )


def _resolve_storage_root(env: Mapping[str, str]) -> Path:
    """Resolve the snapshot storage root.

    Args:
        env: Environment mapping.

    Returns:
        Absolute storage root path.

    Raises:
        CvSwitchConfigError: If neither override nor HOME is set.
    """
    override = env.get("CVSWITCH_STORAGE_ROOT")
    if override:
        return Path(override).expanduser().resolve()
    home = env.get("HOME")
    if not home:
        raise CvSwitchConfigError(
            "Cannot locate snapshot storage: HOME is not set. "
            "Set HOME or CVSWITCH_STORAGE_ROOT before running cvswitch."
        )
    return (Path(home) / STORAGE_DIR_NAME).resolve()


def _parse_search_path(raw_value: str | None) -> tuple[str, ...] | None:
    """Split a colon-separated search path, dropping empty entries."""
    if raw_value is None or not raw_value.strip():
        return None
    return tuple(entry for entry in raw_value.split(":") if entry.strip())


def _parse_bool(name: str, raw_value: str | None, default: bool) -> bool:
    """Parse a boolean environment value.

    Args:
        name: Variable name used in error messages.
        raw_value: Raw string from environment.
        default: Value used when unset.

    Returns:
        Parsed boolean.

    Raises:
        CvSwitchConfigError: If value is not recognizable boolean text.
    """
    if raw_value is None:
        return default
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise CvSwitchConfigError(
        f"Invalid {name} value: expected one of "
        f"{', '.join(_TRUE_VALUES + _FALSE_VALUES[:-1])}, got '{raw_value}'. "
        f"Set {name} to a boolean value."
    )


def _parse_log_level(raw_value: str | None) -> str:
    """Parse the log level environment value.

    Raises:
        CvSwitchConfigError: If the level is not supported.
    """
    if not raw_value:
        return DEFAULT_LOG_LEVEL
    normalized = raw_value.strip().lower()
    if normalized not in SUPPORTED_LOG_LEVELS:
        raise CvSwitchConfigError(
            f"Invalid CVSWITCH_LOG_LEVEL value: got '{raw_value}'. "
            f"Use one of: {', '.join(SUPPORTED_LOG_LEVELS)}."
        )
    return normalized
