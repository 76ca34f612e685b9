"""Parallel fan-out of one command per host."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from enum import Enum
from typing import Callable

from .errors import RemoteCommandFailure
from .process import Handle, RunResult, run_async, wait

logger = logging.getLogger(__name__)


class HostStatus(Enum):
    """Status of a host within a fan-out phase."""

    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


# Type aliases for the builder and callback
CommandBuilder = Callable[[str, int, int], Sequence[str]]  # (host, index, total) -> command
StatusCallback = Callable[[str, str, HostStatus], None]  # (phase, host, status) -> None
SpawnFn = Callable[[Sequence[str], str], Handle]
JoinFn = Callable[[Handle], RunResult]


class FanOut:
    """Runs one command per host concurrently, failing fast in host order."""

    def __init__(
        self,
        on_status: StatusCallback | None = None,
        launch_delay: float = 0.0,
        spawn: SpawnFn = run_async,
        join: JoinFn = wait,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.on_status = on_status
        self.launch_delay = launch_delay
        self._spawn = spawn
        self._join = join
        self._sleep = sleep

    def _emit_status(self, phase: str, host: str, status: HostStatus) -> None:
        if self.on_status:
            self.on_status(phase, host, status)

    def run(
        self,
        phase: str,
        hosts: Sequence[str],
        build_command: CommandBuilder,
        launch_delay: float | None = None,
    ) -> list[RunResult]:
        """Start every host's command, then wait on them in host order.

        The first failing host (in host order, not completion order) raises
        RemoteCommandFailure. Commands still running at that point are left
        to finish on their own. launch_delay overrides the instance default
        for this phase.
        """
        delay = self.launch_delay if launch_delay is None else launch_delay
        total = len(hosts)
        handles: list[Handle] = []

        for i, host in enumerate(hosts):
            if i > 0 and delay > 0:
                self._sleep(delay)
            command = list(build_command(host, i, total))
            handles.append(self._spawn(command, host))
            self._emit_status(phase, host, HostStatus.RUNNING)

        logger.debug("%s: started %d command(s)", phase, len(handles))

        results = []
        for handle in handles:
            result = self._join(handle)
            host = handle.host or ""
            if not result.ok:
                self._emit_status(phase, host, HostStatus.FAILED)
                raise RemoteCommandFailure(phase, host, result)
            self._emit_status(phase, host, HostStatus.SUCCESS)
            results.append(result)

        return results


def fan_out(
    hosts: Sequence[str],
    build_command: CommandBuilder,
    phase: str = "fan-out",
    **kwargs,
) -> list[RunResult]:
    """Run build_command(host, index, total) on every host concurrently."""
    return FanOut(**kwargs).run(phase, hosts, build_command)
