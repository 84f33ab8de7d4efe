"""Subprocess execution helper.

Commands are always passed as argv lists and never through a shell.
"""

from __future__ import annotations

import shutil
import subprocess

from core.errors import ExternalCommandError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


def run_command(argv: list[str], check: bool = True) -> subprocess.CompletedProcess[str]:
    """Run an external command and capture its text output.

    Args:
        argv: Command and arguments; the executable must be on PATH.
        check: Whether a nonzero exit status raises.

    Returns:
        Completed process with captured stdout and stderr.

    Raises:
        ExternalCommandError: If the executable is missing or the command fails.
    """
    if not argv:
        raise ExternalCommandError("Cannot run an empty command.")
    executable = argv[0]
    if shutil.which(executable) is None:
        raise ExternalCommandError(
            f"Executable not found on PATH: {executable}. "
            f"Install {executable} or add it to PATH."
        )
    _LOGGER.debug("command_started", argv=argv)
    completed = subprocess.run(argv, capture_output=True, text=True, check=False)
    if check and completed.returncode != 0:
        raise ExternalCommandError(
            f"Command {' '.join(argv)} failed with exit status {completed.returncode}: "
            f"{completed.stderr.strip() or 'no error output'}."
        )
    return completed
