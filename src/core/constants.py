"""Core constants used across cvswitch modules.

This module centralizes names, paths, and exit codes.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_PACKAGE_NAME = "opencv"
STORAGE_DIR_NAME = ".opencv-versions"
DEFAULT_PKGCONFIG_DIR = Path("/usr/local/lib/pkgconfig")
DEFAULT_LOG_LEVEL = "warning"
SUPPORTED_LOG_LEVELS = ("debug", "info", "warning", "error")

SNAPSHOT_HEADERS_DIR_NAME = "include"
SNAPSHOT_LIBS_DIR_NAME = "lib"
SNAPSHOT_METADATA_DIR_NAME = "pkgconfig"
STAGING_DIR_PREFIX = ".staging-"
RETIRED_DIR_PREFIX = ".retired-"
METADATA_FILE_SUFFIX = ".pc"
METADATA_VERSION_FIELD = "Version:"

MANAGED_HEADER_DIR_NAMES = ("opencv", "opencv2", "opencv4")
VERSION_HEADER_RELATIVE_PATHS = (
    Path("opencv2") / "core" / "version.hpp",
    Path("opencv4") / "opencv2" / "core" / "version.hpp",
)
CFLAGS_PREFIX_SUFFIXES = ("/include/opencv4", "/include/opencv", "/include")
LIBRARY_DIR_NAME = "lib"
LIBRARY_GLOB_TEMPLATES = (
    "lib{package}_*.so",
    "lib{package}_*.so.*",
    "lib{package}_*.a",
    "lib{package}_*.dylib",
)

SNAPSHOT_VERSION_COMPONENTS = 4
METADATA_VERSION_COMPONENTS = 3
EPOCH_REVISION_SEPARATOR = "."

ELEVATED_MARKER_ENV = "CVSWITCH_ELEVATED"
PRESERVED_ENV_NAMES = ("PKG_CONFIG_PATH", "HOME")
PRESERVED_ENV_PREFIX = "CVSWITCH_"

EXIT_SUCCESS = 0
EXIT_GENERIC_FAILURE = 1
# 2 is left to argparse usage errors
EXIT_NO_INSTALLATION = 3
EXIT_NO_MATCH = 4
EXIT_METADATA_UNLOCATABLE = 5
EXIT_SAVE_FAILED = 6
