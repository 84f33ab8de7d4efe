"""cvswitch CLI entry points.

This module maps the single action token onto switch controller calls
and converts domain errors into process exit codes.
"""

from __future__ import annotations

import argparse
import sys
from typing import Callable, Sequence

from core.config import CvSwitchConfig
from core.constants import EXIT_METADATA_UNLOCATABLE, EXIT_SUCCESS
from core.errors import AmbiguousVersionMatchError, CvSwitchError
from core.logging_config import configure_logging
from cli.privilege import elevate_if_needed
from store.snapshot_store import SnapshotSaveResult
from switch.switch_controller import SwitchController, build_switch_controller

_EPILOG = """actions:
  list        list saved versions; '*' marks the active one (default)
  current     print the active version
  save        snapshot the active installation
  help        show this message
  <clue>      switch to the saved version starting with <clue>
"""

ControllerFactory = Callable[[CvSwitchConfig], SwitchController]


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="cvswitch",
        description="Save and switch between installed OpenCV versions",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "action",
        nargs="?",
        default="list",
        help="list, current, save, help, or a version clue",
    )
    return parser


def main(
    argv: Sequence[str] | None = None,
    controller_factory: ControllerFactory = build_switch_controller,
) -> int:
    """Run the cvswitch CLI.

    Args:
        argv: Optional argument vector.
        controller_factory: Builds the controller from config.

    Returns:
        Process exit code.
    """
    raw_args = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    args = parser.parse_args(raw_args)
    if args.action == "help":
        parser.print_help()
        return EXIT_SUCCESS
    try:
        config = CvSwitchConfig.from_env()
        configure_logging(config.log_level)
        elevate_if_needed(args.action, raw_args, config)
        controller = controller_factory(config)
        if args.action == "list":
            return _run_list_command(controller)
        if args.action == "current":
            return _run_current_command(controller)
        if args.action == "save":
            return _run_save_command(controller, config)
        return _run_switch_command(controller, config, args.action)
    except AmbiguousVersionMatchError as error:
        print(f"error: {error}", file=sys.stderr)
        for candidate in error.candidates:
            print(f"  {candidate}", file=sys.stderr)
        return error.exit_code
    except CvSwitchError as error:
        print(f"error: {error}", file=sys.stderr)
        return error.exit_code


def _run_list_command(controller: SwitchController) -> int:
    """Handle list command.

    Args:
        controller: Switch controller.

    Returns:
        Exit code.
    """
    snapshots = controller.list_snapshots()
    if not snapshots:
        print(
            f"No saved versions under {controller.store.root}. "
            "Run 'cvswitch save' to snapshot the active installation.",
            file=sys.stderr,
        )
        return EXIT_SUCCESS
    installation = controller.current()
    active_version = installation.version if installation is not None else ""
    for snapshot in snapshots:
        marker = "*" if snapshot.version == active_version else " "
        suffix = "" if snapshot.is_complete else "\t(incomplete)"
        print(f"{marker} {snapshot.version}{suffix}")
    return EXIT_SUCCESS


def _run_current_command(controller: SwitchController) -> int:
    """Handle current command."""
    installation = controller.require_current()
    print(installation.version)
    return EXIT_SUCCESS


def _run_save_command(controller: SwitchController, config: CvSwitchConfig) -> int:
    """Handle save command.

    Args:
        controller: Switch controller.
        config: Runtime configuration.

    Returns:
        Exit code; nonzero when the metadata file could not be saved.
    """
    result = controller.save_current()
    print(f"Saved {result.snapshot.version} to {result.snapshot.root}")
    if result.degraded:
        _warn_degraded_save(result, config)
        return EXIT_METADATA_UNLOCATABLE
    return EXIT_SUCCESS


def _run_switch_command(
    controller: SwitchController, config: CvSwitchConfig, clue: str
) -> int:
    """Handle the switch-to-clue form.

    Args:
        controller: Switch controller.
        config: Runtime configuration.
        clue: Version prefix typed by the user.

    Returns:
        Exit code.
    """
    result = controller.switch_to(clue)
    if result.implicit_save is not None:
        print(f"Saved {result.previous_version} before switching")
        if result.implicit_save.degraded:
            _warn_degraded_save(result.implicit_save, config)
    print(f"Switched to {result.active_version or '(unknown)'}")
    if not result.consistent:
        print(
            f"warning: requested {result.target_version} but the installation now "
            f"reports {result.active_version or 'no version'}. Check PKG_CONFIG_PATH "
            "and the restored install prefix.",
            file=sys.stderr,
        )
    return EXIT_SUCCESS


def _warn_degraded_save(result: SnapshotSaveResult, config: CvSwitchConfig) -> None:
    """Print remediation text for a save without its metadata file."""
    search_path = ":".join(config.pkg_config_path) if config.pkg_config_path else "(unset)"
    print(
        f"warning: {config.metadata_file_name} for {result.snapshot.version} was not "
        f"found ({result.metadata_lookup.status.value}); headers and libraries were "
        "saved without it.\n"
        f"  PKG_CONFIG_PATH={search_path}\n"
        f"  Point PKG_CONFIG_PATH at the directory holding {config.metadata_file_name}, "
        "e.g.\n"
        f"    export PKG_CONFIG_PATH={config.default_pkgconfig_dir}:$PKG_CONFIG_PATH\n"
        "  and use 'sudo -E' so the variable survives privilege elevation.",
        file=sys.stderr,
    )
