"""Unit tests for live installation inspection."""

from __future__ import annotations

from pathlib import Path

import pytest

from switch.active_installation import inspect_active_installation, prefix_from_cflags


@pytest.mark.parametrize(
    ("cflags", "expected"),
    [
        ("-I/usr/local/include/opencv -I/usr/local/include", Path("/usr/local")),
        ("-I/opt/cv/include/opencv4", Path("/opt/cv")),
        ("-I /usr/include", Path("/usr")),
        ("-DFOO -I/custom/headers", Path("/custom/headers")),
    ],
)
def test_prefix_from_cflags_strips_known_suffix(cflags: str, expected: Path) -> None:
    """The first include flag should lose one known include suffix."""
    assert prefix_from_cflags(cflags) == expected


def test_prefix_from_cflags_without_include_flag() -> None:
    """Flags without -I should not yield a prefix."""
    assert prefix_from_cflags("-pthread") is None


def test_inspect_reads_version_from_headers(
    tmp_path: Path, config_factory, metadata_service, installation_writer, epoch_definitions
) -> None:
    """The active version should be derived from installed headers."""
    prefix = tmp_path / "usr"
    installation_writer(prefix, epoch_definitions)
    metadata_service.cflags_text = f"-I{prefix}/include/opencv -I{prefix}/include"

    installation = inspect_active_installation(config_factory(), metadata_service)

    assert installation is not None
    assert (installation.version, installation.metadata_version, installation.lib_dir) == (
        "2.4.9.0",
        "2.4.9",
        prefix / "lib",
    )
    assert metadata_service.calls == ["opencv"]


def test_inspect_returns_none_without_metadata(config_factory, metadata_service) -> None:
    """An unknown package should mean no active installation."""
    assert inspect_active_installation(config_factory(), metadata_service) is None


def test_inspect_returns_none_without_version_header(
    tmp_path: Path, config_factory, metadata_service
) -> None:
    """A prefix without the version header should mean no installation."""
    (tmp_path / "usr" / "include").mkdir(parents=True)
    metadata_service.cflags_text = f"-I{tmp_path}/usr/include"

    assert inspect_active_installation(config_factory(), metadata_service) is None
