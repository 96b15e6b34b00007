"""Helpers for invoking external system tools.

Used for desktop helpers such as ``gio`` that have no Python API.
"""

import shutil
import subprocess
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured outcome of an external tool.

    Attributes:
        stdout: Standard output.
        stderr: Standard error.
        returncode: Exit code.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """True when the tool exited with status 0."""
        return self.returncode == 0


def run_command(args: list[str], *, timeout: float | None = 60.0) -> CommandResult:
    """Run a tool to completion and capture its output.

    A non-zero exit status is returned, not raised; callers inspect
    ``CommandResult.success``.

    Args:
        args: Executable and arguments (no shell involved).
        timeout: Seconds to wait before giving up.

    Returns:
        CommandResult with the captured output.

    Raises:
        subprocess.TimeoutExpired: If the tool runs longer than ``timeout``.
        FileNotFoundError: If the executable does not exist.
    """
    completed = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=False,
        timeout=timeout,
    )
    return CommandResult(
        stdout=completed.stdout,
        stderr=completed.stderr,
        returncode=completed.returncode,
    )


def command_exists(name: str) -> bool:
    """Check whether an executable is on PATH."""
    return shutil.which(name) is not None
