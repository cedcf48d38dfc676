"""Validation of the map section of a scene: characters, player and closure."""

from __future__ import annotations

from typing import Sequence

from cubraycast.config import ConfigError, max_line_len

SPAWNS = "NSEW"
_MAP_CHARS = " \n10D" + SPAWNS
_WALKABLE = "0D" + SPAWNS
_NEIGHBOURS = ((1, 0), (-1, 0), (0, 1), (0, -1))


def is_spawn(char: str) -> bool:
    """True for the letters that mark the player's start and facing."""
    return len(char) == 1 and char in SPAWNS


def pad_lines(lines: Sequence[str], width: int, fill: str = " ") -> list[str]:
    """Right-pad every line with ``fill`` up to ``width`` characters."""
    return [line.ljust(width, fill) for line in lines]


def check_map(lines: Sequence[str]) -> str:
    """Check the raw map lines and return the player's spawn letter.

    The map must hold exactly one spawn, only known characters, and no
    empty line following a line that ends with a newline.
    """
    rows = list(lines)
    spawns = [char for row in rows for char in row if is_spawn(char)]
    if len(spawns) != 1:
        raise ConfigError("Not the correct number of player in the map")
    if any(char not in _MAP_CHARS for row in rows for char in row):
        raise ConfigError("There is an invalid caracter in the map")
    for row, following in zip(rows, rows[1:]):
        if "\n" in row and following.startswith("\n"):
            raise ConfigError("There is an empty line in the map")
    return spawns[0]


def check_closed(lines: Sequence[str]) -> list[str]:
    """Check that every walkable tile is enclosed and return the padded grid.

    Lines are padded with spaces to the longest one; a floor, door or spawn
    tile touching a space or the edge of the grid means the map is open.
    """
    width = max_line_len(lines)
    grid = pad_lines(lines, width, " ")
    height = len(grid)
    for y, row in enumerate(grid):
        for x, char in enumerate(row):
            if char not in _WALKABLE:
                continue
            for dx, dy in _NEIGHBOURS:
                nx, ny = x + dx, y + dy
                if not (0 <= nx < width and 0 <= ny < height) or grid[ny][nx] == " ":
                    raise ConfigError("Map not closed")
    return grid