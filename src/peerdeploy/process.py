"""Local process execution, blocking or detached."""

from __future__ import annotations

import logging
import shlex
import signal
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

# Exit status a shell reports when it cannot find or execute a program
NOT_FOUND_RETURNCODE = 127


class RunStatus(Enum):
    """How a child process finished."""

    SUCCESS = "success"
    EXITED = "exited"
    SIGNALED = "signaled"
    NOT_FOUND = "not found"


@dataclass(frozen=True)
class RunResult:
    """Outcome of one command."""

    command: tuple[str, ...]
    returncode: int
    spawn_error: str | None = None

    @property
    def status(self) -> RunStatus:
        if self.spawn_error is not None:
            return RunStatus.NOT_FOUND
        if self.returncode == 0:
            return RunStatus.SUCCESS
        if self.returncode < 0:
            return RunStatus.SIGNALED
        return RunStatus.EXITED

    @property
    def ok(self) -> bool:
        return self.status == RunStatus.SUCCESS

    def describe(self) -> str:
        """Human-readable summary naming the command and how it ended."""
        cmd = shlex.join(self.command)
        status = self.status
        if status == RunStatus.SUCCESS:
            return f"{cmd}: succeeded"
        if status == RunStatus.NOT_FOUND:
            return f"{cmd}: could not start ({self.spawn_error})"
        if status == RunStatus.SIGNALED:
            signum = -self.returncode
            try:
                name = signal.Signals(signum).name
            except ValueError:
                name = f"signal {signum}"
            return f"{cmd}: terminated by {name}"
        return f"{cmd}: exited with status {self.returncode}"


@dataclass
class Handle:
    """A command started by run_async, waiting to be joined."""

    command: tuple[str, ...]
    host: str | None = None
    process: subprocess.Popen | None = None
    spawn_error: str | None = None


def run_async(command: Sequence[str], host: str | None = None) -> Handle:
    """Start a command without waiting for it.

    The child inherits this process's stdin, stdout and stderr so its output
    appears on the operator's console as it is produced.
    """
    cmd = tuple(command)
    logger.debug("Starting: %s", shlex.join(cmd))
    try:
        proc = subprocess.Popen(cmd)
    except OSError as e:
        logger.debug("Could not start %s: %s", cmd[0] if cmd else "", e)
        return Handle(command=cmd, host=host, spawn_error=str(e))
    return Handle(command=cmd, host=host, process=proc)


def wait(handle: Handle) -> RunResult:
    """Block until the handle's command exits and return its result."""
    if handle.process is None:
        return RunResult(
            command=handle.command,
            returncode=NOT_FOUND_RETURNCODE,
            spawn_error=handle.spawn_error or "not started",
        )
    returncode = handle.process.wait()
    logger.debug("Finished (%d): %s", returncode, shlex.join(handle.command))
    return RunResult(command=handle.command, returncode=returncode)


def run(command: Sequence[str]) -> RunResult:
    """Run a command to completion."""
    return wait(run_async(command))
