"""Pytest configuration and shared fixtures for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Mapping

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


EPOCH_DEFINITIONS = {
    "CV_VERSION_EPOCH": "2",
    "CV_VERSION_MAJOR": "4",
    "CV_VERSION_MINOR": "9",
    "CV_VERSION_REVISION": "0",
}
MAJOR_DEFINITIONS = {
    "CV_VERSION_MAJOR": "3",
    "CV_VERSION_MINOR": "0",
    "CV_VERSION_REVISION": "0",
    "CV_VERSION_STATUS": '"-alpha"',
}


class FakeMetadataService:
    """In-memory pkg-config stand-in returning fixed cflags."""

    def __init__(self, cflags_text: str = "") -> None:
        self.cflags_text = cflags_text
        self.calls: list[str] = []

    def cflags(self, package: str) -> str:
        self.calls.append(package)
        return self.cflags_text


class FakeLinkerCache:
    """In-memory linker cache that counts refreshes."""

    def __init__(self) -> None:
        self.refresh_count = 0

    def refresh(self) -> None:
        self.refresh_count += 1


def write_installation(
    prefix: Path,
    definitions: Mapping[str, str],
    libraries: Mapping[str, bytes] | None = None,
    marker: str = "",
) -> None:
    """Write a minimal library installation tree under ``prefix``."""
    include_dir = prefix / "include"
    header = include_dir / "opencv2" / "core" / "version.hpp"
    header.parent.mkdir(parents=True, exist_ok=True)
    header.write_text(
        "".join(f"#define {key} {value}\n" for key, value in definitions.items()),
        encoding="utf-8",
    )
    (include_dir / "opencv2" / "core.hpp").write_text(f"// core {marker}\n", encoding="utf-8")
    (include_dir / "opencv").mkdir(parents=True, exist_ok=True)
    (include_dir / "opencv" / "cv.h").write_text(f"// legacy {marker}\n", encoding="utf-8")
    lib_dir = prefix / "lib"
    lib_dir.mkdir(parents=True, exist_ok=True)
    payloads = libraries or {"libopencv_core.so.2.4.9": f"core-{marker}".encode()}
    for name, payload in payloads.items():
        (lib_dir / name).write_bytes(payload)


def write_metadata_file(directory: Path, version: str, package: str = "opencv") -> Path:
    """Write a ``.pc`` file declaring ``version``."""
    directory.mkdir(parents=True, exist_ok=True)
    metadata_file = directory / f"{package}.pc"
    metadata_file.write_text(
        f"prefix=/usr/local\nName: OpenCV\nVersion: {version}  \nCflags: -I${{prefix}}/include\n",
        encoding="utf-8",
    )
    return metadata_file


@pytest.fixture
def config_factory(tmp_path: Path) -> Callable[..., object]:
    """Build a config rooted in tmp_path with an overridable search path."""
    from core.config import CvSwitchConfig

    def _build(
        pkg_config_path: tuple[str, ...] | None = None,
        default_pkgconfig_dir: Path | None = None,
    ) -> CvSwitchConfig:
        return CvSwitchConfig(
            storage_root=tmp_path / "store",
            package_name="opencv",
            pkg_config_path=pkg_config_path,
            default_pkgconfig_dir=default_pkgconfig_dir or tmp_path / "no-default",
            hard_link=False,
            auto_elevate=False,
            log_level="warning",
        )

    return _build


@pytest.fixture
def metadata_service() -> FakeMetadataService:
    """Fake metadata service with no installation registered."""
    return FakeMetadataService()


@pytest.fixture
def linker_cache() -> FakeLinkerCache:
    """Fake linker cache counting refreshes."""
    return FakeLinkerCache()


@pytest.fixture
def installation_writer() -> Callable[..., None]:
    """Expose ``write_installation`` to tests."""
    return write_installation


@pytest.fixture
def metadata_writer() -> Callable[..., Path]:
    """Expose ``write_metadata_file`` to tests."""
    return write_metadata_file


@pytest.fixture
def epoch_definitions() -> dict[str, str]:
    """Header definitions of an epoch-scheme release (2.4.9.0)."""
    return dict(EPOCH_DEFINITIONS)


@pytest.fixture
def major_definitions() -> dict[str, str]:
    """Header definitions of a major-scheme release (3.0.0-alpha)."""
    return dict(MAJOR_DEFINITIONS)
