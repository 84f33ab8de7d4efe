"""Privilege elevation for mutating commands.

Mutating commands write into system install prefixes, so the CLI
re-executes itself once through ``sudo`` before doing any work.
"""

from __future__ import annotations

import os
import shutil
import sys
from typing import Callable, Mapping, Sequence

from core.config import CvSwitchConfig
from core.constants import ELEVATED_MARKER_ENV, PRESERVED_ENV_NAMES, PRESERVED_ENV_PREFIX
from core.errors import CvSwitchError
from core.logging_config import get_logger

READ_ONLY_ACTIONS = ("list", "current", "help")

_LOGGER = get_logger(__name__)


def requires_elevation(action: str) -> bool:
    """Return True for ``save`` and version switches."""
    return action not in READ_ONLY_ACTIONS


def build_elevated_command(argv: Sequence[str], environ: Mapping[str, str]) -> list[str]:
    """Build the sudo command line that re-runs this CLI.

    Args:
        argv: Original CLI arguments, without the program name.
        environ: Environment whose relevant names must survive sudo.

    Returns:
        Argument vector for ``os.execvpe``.
    """
    preserved = list(PRESERVED_ENV_NAMES)
    preserved.extend(
        sorted(
            name
            for name in environ
            if name.startswith(PRESERVED_ENV_PREFIX) and name not in preserved
        )
    )
    if ELEVATED_MARKER_ENV not in preserved:
        preserved.append(ELEVATED_MARKER_ENV)
    return [
        "sudo",
        f"--preserve-env={','.join(preserved)}",
        sys.executable,
        "-m",
        "cli",
        *argv,
    ]


def elevate_if_needed(
    action: str,
    argv: Sequence[str],
    config: CvSwitchConfig,
    environ: Mapping[str, str] | None = None,
    geteuid: Callable[[], int] = os.geteuid,
    exec_fn: Callable[[str, list[str], dict[str, str]], None] = os.execvpe,
) -> bool:
    """Re-exec through sudo when the action needs root and we lack it.

    Args:
        action: Requested CLI action.
        argv: Original CLI arguments.
        config: Runtime configuration.
        environ: Process environment; defaults to ``os.environ``.
        geteuid: Effective uid provider.
        exec_fn: Process replacement function.

    Returns:
        False when no elevation was needed. A successful re-exec does not return.

    Raises:
        CvSwitchError: If elevation is required but sudo is unavailable.
    """
    env = dict(os.environ if environ is None else environ)
    if not requires_elevation(action) or not config.auto_elevate:
        return False
    if geteuid() == 0 or env.get(ELEVATED_MARKER_ENV):
        return False
    if shutil.which("sudo") is None:
        raise CvSwitchError(
            f"'{action}' needs root privileges but sudo is not available. "
            "Re-run the command as root."
        )
    env[ELEVATED_MARKER_ENV] = "1"
    command = build_elevated_command(argv, env)
    _LOGGER.info("privilege_elevation", action=action)
    exec_fn(command[0], command, env)
    return True
