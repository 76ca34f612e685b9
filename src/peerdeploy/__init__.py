"""peerdeploy: build a binary, copy it to a set of hosts and launch it on all of them."""

from .config import Settings, load_settings, settings_from_env
from .deploy import Deployment
from .errors import (
    BuildFailure,
    DeployError,
    NoTerminalFound,
    RemoteCommandFailure,
    UsageError,
)
from .fanout import FanOut, HostStatus, fan_out
from .process import Handle, RunResult, RunStatus, run, run_async, wait
from .terminal import DEFAULT_TERMINALS, TerminalSpec, resolve_terminal

__all__ = [
    "Settings",
    "load_settings",
    "settings_from_env",
    "Deployment",
    "DeployError",
    "BuildFailure",
    "RemoteCommandFailure",
    "NoTerminalFound",
    "UsageError",
    "FanOut",
    "HostStatus",
    "fan_out",
    "Handle",
    "RunResult",
    "RunStatus",
    "run",
    "run_async",
    "wait",
    "DEFAULT_TERMINALS",
    "TerminalSpec",
    "resolve_terminal",
]
