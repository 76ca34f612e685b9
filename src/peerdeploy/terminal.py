"""Locate a terminal emulator that keeps its window open."""

from __future__ import annotations

import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Callable

from .errors import NoTerminalFound

# Preference order. Each entry opens a new window and holds it open after the
# wrapped command exits.
DEFAULT_TERMINALS: tuple[tuple[str, ...], ...] = (
    ("konsole", "--separate", "--hold", "-e"),
    ("xterm", "-hold", "-e"),
    ("xfce4-terminal", "--hold", "-x"),
    ("urxvt", "-hold", "-e"),
    ("alacritty", "--hold", "-e"),
    ("kitty", "--hold"),
)

WhichFn = Callable[[str], str | None]


@dataclass(frozen=True)
class TerminalSpec:
    """Argument prefix that runs a command in a new, persistent window."""

    name: str
    args: tuple[str, ...]

    @classmethod
    def from_tokens(cls, tokens: Sequence[str]) -> TerminalSpec:
        if not tokens:
            raise ValueError("Terminal entry must name a program")
        return cls(name=tokens[0], args=tuple(tokens))

    def wrap(self, command: Sequence[str]) -> list[str]:
        return [*self.args, *command]


@dataclass(frozen=True)
class TerminalProbe:
    """Result of looking one candidate up on the search path."""

    spec: TerminalSpec
    path: str | None

    @property
    def found(self) -> bool:
        return self.path is not None


def probe_terminals(
    candidates: Sequence[Sequence[str]] = DEFAULT_TERMINALS,
    which: WhichFn = shutil.which,
) -> list[TerminalProbe]:
    """Check each candidate's program against the search path, in order."""
    probes = []
    for tokens in candidates:
        spec = TerminalSpec.from_tokens(tokens)
        probes.append(TerminalProbe(spec=spec, path=which(spec.name)))
    return probes


def resolve_terminal(
    candidates: Sequence[Sequence[str]] = DEFAULT_TERMINALS,
    which: WhichFn = shutil.which,
) -> TerminalSpec:
    """Return the first available terminal, or raise NoTerminalFound."""
    probes = probe_terminals(candidates, which)
    for probe in probes:
        if probe.found:
            return probe.spec
    raise NoTerminalFound([probe.spec.name for probe in probes])
