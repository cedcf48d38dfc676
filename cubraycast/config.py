"""Reading and parsing of ``.cub`` scene description files."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

_SPACE = " \t\n\v\f\r"
_DIGITS = "0123456789"

TEXTURE_IDS = ("NO", "SO", "EA", "WE", "DT")
FLOOR_ID = "F"
CEILING_ID = "C"
_COMPONENTS = (*TEXTURE_IDS, FLOOR_ID, CEILING_ID)
_MAP_TILES = "01D"


class ConfigError(Exception):
    """A scene file could not be read or is malformed.

    ``code`` is the exit status the program reports for this error.
    """

    def __init__(self, message: str, code: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


@dataclass(frozen=True)
class Color:
    """An RGB color with components in 0..255."""

    r: int
    g: int
    b: int


@dataclass
class SceneConfig:
    """Header elements and map lines read from a scene file."""

    textures: dict[str, str] = field(default_factory=dict)
    floor: Color | None = None
    ceiling: Color | None = None
    map_lines: list[str] = field(default_factory=list)

    @property
    def missing(self) -> list[str]:
        """Identifiers of the header elements that were never set."""
        absent = [name for name in TEXTURE_IDS if name not in self.textures]
        if self.floor is None:
            absent.append(FLOOR_ID)
        if self.ceiling is None:
            absent.append(CEILING_ID)
        return absent

    @property
    def complete(self) -> bool:
        return not self.missing


def _skip_space(text: str) -> str:
    return text.lstrip(_SPACE)


def read_scene_file(path: str | os.PathLike[str]) -> list[str]:
    """Return the lines of a ``.cub`` file, each keeping its newline."""
    name = os.fspath(path)
    if Path(name).is_dir():
        raise ConfigError(f"{name} is a directory", code=4)
    try:
        handle = open(name, encoding="utf-8", errors="surrogateescape", newline="\n")
    except PermissionError:
        raise ConfigError(f"{name} :No permission for this file", code=1) from None
    except FileNotFoundError:
        raise ConfigError(f"{name} :No such a file", code=2) from None
    except OSError:
        raise ConfigError("Open failed", code=3) from None
    with handle:
        if not name.endswith(".cub"):
            raise ConfigError('this file is missing the ".cub" extension', code=5)
        return handle.readlines()


def _read_component(text: str) -> tuple[int, str]:
    if not text or text[0] not in _DIGITS:
        raise ConfigError("One or more invalid caracter in a color componenet")
    digits = text[: len(text) - len(text.lstrip(_DIGITS))]
    return int(digits), _skip_space(text[len(digits):])


def parse_color(text: str) -> Color:
    """Parse ``R,G,B`` (spaces allowed around numbers) into a Color."""
    rest = _skip_space(text)
    values = []
    for position in range(3):
        value, rest = _read_component(rest)
        values.append(value)
        if position < 2:
            if not rest.startswith(","):
                raise ConfigError("In one of the color component")
            rest = _skip_space(rest[1:])
    if rest not in ("", "\n") and rest[0] not in "\n":
        raise ConfigError("Invalid caracter in one of the color component")
    if any(not 0 <= value <= 255 for value in values):
        raise ConfigError("One of the rgb component is not bet ween 0 and 255")
    return Color(*values)


def parse_texture_path(text: str) -> str:
    """Extract a texture path from the rest of a header line and check it opens.

    Leading whitespace is skipped and the final character (the line's
    newline) is dropped.
    """
    path = _skip_space(text)[:-1]
    try:
        with open(path, "rb"):
            pass
    except OSError:
        raise ConfigError(f"can't open this file :{path}") from None
    return path


def _component(body: str) -> str | None:
    for name in _COMPONENTS:
        if body.startswith(name) and len(body) > len(name) and body[len(name)] == " ":
            return name
    return None


def _map_section(lines: Sequence[str], start: int) -> list[str]:
    for index, line in enumerate(lines[start:], start):
        for char in line:
            if char not in _MAP_TILES and char not in _SPACE:
                raise ConfigError("Unknow type for the map")
            if char in _MAP_TILES:
                return list(lines[index:])
    return list(lines)


def parse_header(lines: Sequence[str]) -> SceneConfig:
    """Read texture and color elements, then locate the map section.

    Header parsing stops at the first unindented line that is not a known
    element; indented unknown lines are skipped. The map starts at the first
    line from there on holding a map tile.
    """
    config = SceneConfig()
    stop = len(lines)
    for index, line in enumerate(lines):
        if not line or line[0] == "\n":
            continue
        body = _skip_space(line)
        indent = len(line) - len(body)
        name = _component(body)
        if name is None:
            if indent:
                continue
            stop = index
            break
        if name in TEXTURE_IDS:
            path = parse_texture_path(body[len(name):])
            if name in config.textures:
                raise ConfigError(f"This texture is set multiple times : {name}")
            config.textures[name] = path
            continue
        current = config.floor if name == FLOOR_ID else config.ceiling
        if current is not None:
            raise ConfigError(f"{name} is set multiple times")
        color = parse_color(body[len(name):])
        if name == FLOOR_ID:
            config.floor = color
        else:
            config.ceiling = color
    config.map_lines = _map_section(lines, stop)
    return config


def max_line_len(lines: Iterable[str]) -> int:
    """Length of the longest line, 0 for no lines."""
    return max((len(line) for line in lines), default=0)