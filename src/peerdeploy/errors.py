"""Error taxonomy for peerdeploy."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .process import RunResult


class DeployError(Exception):
    """Base class for every fatal deployment error."""


class BuildFailure(DeployError):
    """The local build toolchain exited unsuccessfully."""

    def __init__(self, result: RunResult):
        self.result = result
        super().__init__(f"Build failed: {result.describe()}")


class RemoteCommandFailure(DeployError):
    """A single host's command failed during a fan-out phase."""

    def __init__(self, phase: str, host: str, result: RunResult):
        self.phase = phase
        self.host = host
        self.result = result
        super().__init__(f"{phase} failed on {host}: {result.describe()}")


class NoTerminalFound(DeployError):
    """None of the candidate terminal emulators is on the search path."""

    def __init__(self, candidates: Sequence[str]):
        self.candidates = list(candidates)
        tried = ", ".join(self.candidates) or "(none)"
        super().__init__(f"No terminal emulator found; tried: {tried}")


class UsageError(DeployError):
    """The command line did not name any hosts."""
