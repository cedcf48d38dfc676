"""Scripted input replays: one line per step, ``<frames>, <KEYS>``."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable

TAS_FILE = "inputs.tas"
_LINE = re.compile(r"[0-9]+, [A-Z]+\n")


class Key(IntEnum):
    """Keyboard scancodes the game reacts to."""

    A = 4
    D = 7
    O = 18  # noqa: E741
    S = 22
    W = 26
    ESCAPE = 41
    RIGHT = 79
    LEFT = 80


_CHAR_KEYS = {
    "A": Key.A,
    "S": Key.S,
    "D": Key.D,
    "W": Key.W,
    "L": Key.LEFT,
    "R": Key.RIGHT,
    "O": Key.O,
}


class TasFormatError(Exception):
    """A replay file could not be read or has malformed lines.

    ``invalid`` lists ``(line number, line)`` pairs for every bad line.
    """

    def __init__(self, message: str, invalid: Iterable[tuple[int, str]] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.invalid = list(invalid)


@dataclass(frozen=True)
class TasStep:
    """Hold ``keys`` down for ``frames`` frames."""

    frames: int
    keys: frozenset[Key] = field(default_factory=frozenset)


def key_for_char(char: str) -> Key | None:
    """Key bound to a replay letter, or None for an unknown letter."""
    return _CHAR_KEYS.get(char)


def _invalid_message(lineno: int, line: str) -> str:
    return f'Line {lineno}: \u274c Invalid --> "{line}"'


def _keys(letters: str) -> frozenset[Key]:
    keys: set[Key] = set()
    for char in letters:
        if char in " \n":
            continue
        key = key_for_char(char)
        if key is None:
            # An unknown letter ends the key list of its step.
            break
        keys.add(key)
    return frozenset(keys)


def parse_tas_line(line: str) -> TasStep:
    """Parse one newline-terminated replay line."""
    if not _LINE.fullmatch(line):
        raise TasFormatError(_invalid_message(1, line), [(1, line)])
    count, _, letters = line.partition(",")
    return TasStep(frames=int(count), keys=_keys(letters))


def _split_lines(text: str) -> list[str]:
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def parse_tas(text: str) -> list[TasStep]:
    """Parse a whole replay; every line must match, and there must be one."""
    lines = _split_lines(text)
    invalid = [
        (lineno, line)
        for lineno, line in enumerate(lines, start=1)
        if not _LINE.fullmatch(line)
    ]
    if invalid:
        message = "\n".join(_invalid_message(n, line) for n, line in invalid)
        raise TasFormatError(message, invalid)
    if not lines:
        raise TasFormatError("Empty replay file")
    return [parse_tas_line(line) for line in lines]


def read_tas_file(path: str | os.PathLike[str] = TAS_FILE) -> list[TasStep]:
    """Read and parse a replay file."""
    try:
        with open(path, encoding="utf-8", errors="surrogateescape", newline="\n") as handle:
            text = handle.read()
    except OSError:
        raise TasFormatError("File open failed") from None
    return parse_tas(text)