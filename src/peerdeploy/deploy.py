"""Build, distribute and launch a binary across a peer group."""

from __future__ import annotations

import logging
import shlex
from collections.abc import Sequence
from typing import Callable

from .config import Settings
from .errors import BuildFailure
from .fanout import FanOut
from .process import RunResult, run
from .terminal import TerminalSpec, resolve_terminal

logger = logging.getLogger(__name__)

PHASE_KILL = "kill-stale"
PHASE_UPLOAD = "upload"
PHASE_LAUNCH = "launch"


class Deployment:
    """Sequences build, kill-stale, upload and launch for one set of hosts."""

    def __init__(
        self,
        settings: Settings,
        hosts: Sequence[str],
        flags: Sequence[str] = (),
        fan_out: FanOut | None = None,
        resolve: Callable[[Sequence[Sequence[str]]], TerminalSpec] = resolve_terminal,
        run_command: Callable[[Sequence[str]], RunResult] = run,
    ):
        self.settings = settings
        self.hosts = tuple(hosts)
        self.flags = tuple(flags)
        self.fan_out = fan_out or FanOut()
        self._resolve = resolve
        self._run_command = run_command

    def _destination(self, host: str) -> str:
        return f"{self.settings.user}@{host}"

    def _scp_destination(self, host: str) -> str:
        # scp splits user@host:path at the first colon, so IPv6 needs brackets
        if ":" in host and not host.startswith("["):
            host = f"[{host}]"
        return self._destination(host)

    def _ssh(self, host: str) -> list[str]:
        cmd = ["ssh", *self.settings.ssh_options]
        if self.settings.port is not None:
            cmd += ["-p", str(self.settings.port)]
        cmd.append(self._destination(host))
        return cmd

    # Command builders: (host, index, total) -> command

    def kill_command(self, host: str, index: int, total: int) -> list[str]:
        """Stop any running instance, then remove the old binary.

        The remote shell sees `killall ... ; rm -f ...` so the removal runs
        whether or not anything was killed.
        """
        return [
            *self._ssh(host),
            "killall", "-q", shlex.quote(self.settings.binary_name),
            ";",
            "rm", "-f", shlex.quote(self.settings.remote_path),
        ]

    def upload_command(self, host: str, index: int, total: int) -> list[str]:
        cmd = ["scp", "-q", *self.settings.ssh_options]
        if self.settings.port is not None:
            cmd += ["-P", str(self.settings.port)]
        cmd += [
            str(self.settings.local_binary),
            f"{self._scp_destination(host)}:{self.settings.remote_path}",
        ]
        return cmd

    def remote_launch_args(self, index: int, total: int) -> list[str]:
        """Arguments the deployed binary is started with on one host."""
        return [
            self.settings.remote_path,
            "--total-participants", str(total),
            "--local-index", str(index),
            *self.flags,
        ]

    def launch_command(self, host: str, index: int, total: int) -> list[str]:
        """The ssh invocation for one host, before terminal wrapping."""
        remote = [shlex.quote(arg) for arg in self.remote_launch_args(index, total)]
        return [*self._ssh(host), *remote]

    # Phases

    def build(self) -> RunResult:
        """Run the local build; raise BuildFailure if it does not succeed."""
        logger.debug("Build command: %s", shlex.join(self.settings.build_command))
        result = self._run_command(self.settings.build_command)
        if not result.ok:
            raise BuildFailure(result)
        return result

    def kill_stale(self) -> list[RunResult]:
        return self.fan_out.run(PHASE_KILL, self.hosts, self.kill_command)

    def upload(self) -> list[RunResult]:
        return self.fan_out.run(PHASE_UPLOAD, self.hosts, self.upload_command)

    def resolve_terminal(self) -> TerminalSpec:
        terminal = self._resolve(self.settings.terminals)
        logger.debug("Using terminal %s", terminal.name)
        return terminal

    def launch(self, terminal: TerminalSpec) -> list[RunResult]:
        """Start the binary on every host, each in its own terminal window."""

        def build_command(host: str, index: int, total: int) -> list[str]:
            return terminal.wrap(self.launch_command(host, index, total))

        # Staggered only so windows open in host order
        return self.fan_out.run(
            PHASE_LAUNCH, self.hosts, build_command, launch_delay=self.settings.launch_delay
        )

    def run(self) -> None:
        """Run every phase in order; any failure propagates and stops the run."""
        print("Building binary", flush=True)
        self.build()

        print("Uploading binary", flush=True)
        self.kill_stale()
        self.upload()

        terminal = self.resolve_terminal()
        print("Running on all machines", flush=True)
        self.launch(terminal)
