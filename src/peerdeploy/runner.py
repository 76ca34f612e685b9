#!/usr/bin/env python3
"""Main entry point for peerdeploy."""

from __future__ import annotations

import logging
import os
import re
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field

from .config import CONFIG_ENV_VAR, settings_from_env
from .deploy import Deployment
from .errors import DeployError, UsageError
from .fanout import FanOut, HostStatus

LOG_LEVEL_ENV_VAR = "PEERDEPLOY_LOG_LEVEL"

DELIMITER = "--"
_HELP_RE = re.compile(r"^-h|--help$")

USAGE = f"""\
Usage: peerdeploy <flags> -- <hosts>
Flags are forwarded to every instance after --total-participants and --local-index.
Settings are read from ${CONFIG_ENV_VAR} or ./peerdeploy.yaml when present."""

# ANSI colors for different hosts
COLORS = [
    "\033[36m",  # Cyan
    "\033[33m",  # Yellow
    "\033[35m",  # Magenta
    "\033[32m",  # Green
    "\033[34m",  # Blue
    "\033[91m",  # Light Red
    "\033[96m",  # Light Cyan
    "\033[93m",  # Light Yellow
]
RESET = "\033[0m"


@dataclass
class Invocation:
    """Operator input split at the delimiter."""

    flags: list[str] = field(default_factory=list)
    hosts: list[str] = field(default_factory=list)
    show_help: bool = False


def parse_args(argv: Sequence[str]) -> Invocation:
    """Split tokens into forwarded flags and hosts.

    Raises UsageError when no hosts follow the delimiter.
    """
    invocation = Invocation()
    delimiter_seen = False
    for arg in argv:
        if arg == DELIMITER:
            delimiter_seen = True
        elif _HELP_RE.search(arg):
            invocation.show_help = True
            return invocation
        elif delimiter_seen:
            invocation.hosts.append(arg)
        else:
            invocation.flags.append(arg)

    if not invocation.hosts:
        raise UsageError("No hosts given")
    return invocation


def configure_logging(environ=None) -> None:
    environ = os.environ if environ is None else environ
    name = environ.get(LOG_LEVEL_ENV_VAR, "WARNING").upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _status_printer(hosts: Sequence[str]):
    """Build an on_status callback that prints one colored line per event."""
    host_colors: dict[str, str] = {}
    for host in hosts:
        host_colors.setdefault(host, COLORS[len(host_colors) % len(COLORS)])

    def on_status(phase: str, host: str, status: HostStatus) -> None:
        color = host_colors.get(host, "")
        print(f"{color}[{host}]{RESET} {phase}: {status.value}", flush=True)

    return on_status


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    argv = sys.argv[1:] if argv is None else argv

    try:
        invocation = parse_args(argv)
    except UsageError:
        print(USAGE, file=sys.stderr)
        return 1

    if invocation.show_help:
        print(USAGE)
        return 0

    configure_logging()

    # Load configuration
    try:
        settings = settings_from_env()
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (ValueError, OSError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    deployment = Deployment(
        settings,
        invocation.hosts,
        invocation.flags,
        fan_out=FanOut(on_status=_status_printer(invocation.hosts)),
    )

    try:
        deployment.run()
    except DeployError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
