"""Configuration loader for peerdeploy."""

from __future__ import annotations

import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .terminal import DEFAULT_TERMINALS

CONFIG_ENV_VAR = "PEERDEPLOY_CONFIG"
DEFAULT_CONFIG_NAME = "peerdeploy.yaml"

DEFAULT_BINARY_NAME = "ip-juggler"
DEFAULT_BUILD_TARGET = "x86_64-unknown-linux-musl"


@dataclass
class Settings:
    """Everything the deployment needs besides the hosts and forwarded flags."""

    user: str = "root"
    port: int | None = None
    binary_name: str = DEFAULT_BINARY_NAME
    build_command: list[str] = field(
        default_factory=lambda: ["cargo", "build", "--release", "--target", DEFAULT_BUILD_TARGET]
    )
    local_binary: Path = field(
        default_factory=lambda: Path("target", DEFAULT_BUILD_TARGET, "release", DEFAULT_BINARY_NAME)
    )
    remote_path: str = f"/root/{DEFAULT_BINARY_NAME}"
    ssh_options: list[str] = field(
        default_factory=lambda: ["-o", "StrictHostKeyChecking=no"]
    )
    launch_delay: float = 0.2
    terminals: list[list[str]] = field(
        default_factory=lambda: [list(t) for t in DEFAULT_TERMINALS]
    )


def load_settings(config_path: str | Path) -> Settings:
    """Load and validate settings from a YAML file."""
    config_path = Path(config_path).expanduser().resolve()

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError("Configuration must be a mapping")

    return _parse_settings(raw)


def settings_from_env(
    environ: Mapping[str, str] | None = None, cwd: Path | None = None
) -> Settings:
    """Find the configuration file for this run, falling back to defaults."""
    environ = os.environ if environ is None else environ
    explicit = environ.get(CONFIG_ENV_VAR)
    if explicit:
        return load_settings(explicit)

    candidate = (cwd or Path.cwd()) / DEFAULT_CONFIG_NAME
    if candidate.exists():
        return load_settings(candidate)

    return Settings()


def _parse_settings(raw: dict[str, Any]) -> Settings:
    """Parse raw YAML data into a Settings object."""
    defaults = Settings()

    binary_name = _get_str(raw, "binary_name", defaults.binary_name)

    # Paths derived from the binary name unless given explicitly
    local_binary = raw.get(
        "local_binary", str(Path("target", DEFAULT_BUILD_TARGET, "release", binary_name))
    )
    if not isinstance(local_binary, str) or not local_binary:
        raise ValueError("'local_binary' must be a non-empty string")
    remote_path = _get_str(raw, "remote_path", f"/root/{binary_name}")

    port = raw.get("port")
    if port is not None:
        if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
            raise ValueError(f"'port' must be an integer between 1 and 65535, got {port!r}")

    launch_delay = raw.get("launch_delay", defaults.launch_delay)
    if isinstance(launch_delay, bool) or not isinstance(launch_delay, (int, float)):
        raise ValueError("'launch_delay' must be a number")
    if launch_delay < 0:
        raise ValueError("'launch_delay' must not be negative")

    return Settings(
        user=_get_str(raw, "user", defaults.user),
        port=port,
        binary_name=binary_name,
        build_command=_parse_command(raw.get("build_command", defaults.build_command)),
        local_binary=Path(local_binary).expanduser(),
        remote_path=remote_path,
        ssh_options=_parse_tokens(raw.get("ssh_options", defaults.ssh_options), "ssh_options"),
        launch_delay=float(launch_delay),
        terminals=_parse_terminals(raw.get("terminals", defaults.terminals)),
    )


def _get_str(raw: dict[str, Any], key: str, default: str) -> str:
    value = raw.get(key, default)
    if not isinstance(value, str) or not value:
        raise ValueError(f"'{key}' must be a non-empty string")
    return value


def _parse_command(value: Any) -> list[str]:
    """A command may be written as one string or as a list of tokens."""
    if isinstance(value, str):
        tokens = shlex.split(value)
    else:
        tokens = _parse_tokens(value, "build_command")
    if not tokens:
        raise ValueError("'build_command' must not be empty")
    return tokens


def _parse_tokens(value: Any, key: str) -> list[str]:
    if not isinstance(value, list):
        raise ValueError(f"'{key}' must be a list")
    return [str(token) for token in value]


def _parse_terminals(value: Any) -> list[list[str]]:
    if not isinstance(value, list) or not value:
        raise ValueError("'terminals' must be a non-empty list")
    terminals = []
    for entry in value:
        tokens = _parse_command_tokens(entry)
        if not tokens:
            raise ValueError("Each terminal entry must name a program")
        terminals.append(tokens)
    return terminals


def _parse_command_tokens(entry: Any) -> list[str]:
    if isinstance(entry, str):
        return shlex.split(entry)
    if isinstance(entry, list):
        return [str(token) for token in entry]
    raise ValueError(f"Terminal entry must be a string or list, got {entry!r}")
