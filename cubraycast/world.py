"""The playable world: the tile grid, the player and how input moves them."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Collection, Sequence

from cubraycast.config import Color, max_line_len
from cubraycast.tas import Key
from cubraycast.vector import Vector

WIDTH = 1920
HEIGHT = 1080
HALF_WIDTH = WIDTH // 2
HALF_HEIGHT = HEIGHT // 2
TITLE = "Cub3D"
FPS = 360
MOVE_SPEED = 3.0
ROT_SPEED = 1.0
MOUSE_ROT_SPEED = 0.1
PLANE_SCALE = 0.85
DOOR_COOLDOWN_MS = 200

_DIRECTIONS = {
    "N": Vector(0.0, -1.0),
    "S": Vector(0.0, 1.0),
    "W": Vector(-1.0, 0.0),
    "E": Vector(1.0, 0.0),
}


class Cell(IntEnum):
    """A map tile. Bit 0 marks a solid tile, bit 1 marks a door."""

    EMPTY = 0
    WALL = 1
    DOOR_OPEN = 2
    DOOR_CLOSE = 3

    @property
    def solid(self) -> bool:
        return bool(self & Cell.WALL)

    @property
    def is_door(self) -> bool:
        return bool(self & 2)

    def toggled(self) -> Cell:
        """The door in its other state; non-doors are returned unchanged."""
        if self.is_door:
            return Cell(self ^ 1)
        return self


class Side(IntEnum):
    """Wall faces, also the indices of the wall textures; D is the door."""

    W = 0
    E = 1
    N = 2
    S = 3
    D = 4


_CELL_FOR_CHAR = {
    "1": Cell.WALL,
    " ": Cell.WALL,
    "0": Cell.EMPTY,
    "N": Cell.EMPTY,
    "S": Cell.EMPTY,
    "W": Cell.EMPTY,
    "E": Cell.EMPTY,
    "D": Cell.DOOR_CLOSE,
}


@dataclass
class Player:
    """Position, facing direction and camera plane of the player."""

    pos: Vector
    dir: Vector
    plane: Vector


def build_grid(lines: Sequence[str]) -> list[list[Cell]]:
    """Turn map lines into a rectangular grid of cells.

    Spaces and the padding of short lines become walls.
    """
    width = max_line_len(lines)
    grid = []
    for row, line in enumerate(lines):
        cells = []
        for col, char in enumerate(line.ljust(width, "1")):
            try:
                cells.append(_CELL_FOR_CHAR[char])
            except KeyError:
                raise ValueError(
                    f"unknown map character {char!r} at row {row}, column {col}"
                ) from None
        grid.append(cells)
    return grid


def find_player(lines: Sequence[str]) -> tuple[Vector, Vector]:
    """Return the position and facing direction of the first spawn letter."""
    for y, line in enumerate(lines):
        for x, char in enumerate(line):
            if char in _DIRECTIONS:
                return Vector(float(x), float(y)), _DIRECTIONS[char]
    raise ValueError("no player spawn in the map")


def color_to_rgba(color: Color) -> int:
    """Pack an opaque color as a 32-bit RGBA value (red in the top byte)."""
    return (color.r << 24) | (color.g << 16) | (color.b << 8) | 0xFF


@dataclass
class World:
    """The grid of cells and the player moving through it."""

    grid: list[list[Cell]]
    player: Player
    last_door_ms: float = field(default=0)

    @property
    def height(self) -> int:
        return len(self.grid)

    @property
    def width(self) -> int:
        return max((len(row) for row in self.grid), default=0)

    def cell(self, x: int, y: int) -> Cell:
        return self.grid[y][x]

    @classmethod
    def from_lines(cls, lines: Sequence[str]) -> World:
        """Build a world from validated map lines without newlines."""
        grid = build_grid(lines)
        pos, direction = find_player(lines)
        plane = Vector(direction.y * PLANE_SCALE, -direction.x * PLANE_SCALE)
        return cls(grid=grid, player=Player(pos=pos, dir=direction, plane=plane))

    def _step(self, row: list[Cell], x: float, y: float,
              delta: Vector, ms: float) -> tuple[float, float]:
        if not row[int(x + delta.x * ms)].solid:
            x += delta.x * ms
        if not self.grid[int(y + delta.y * ms)][int(x)].solid:
            y += delta.y * ms
        return x, y

    def move(self, keys: Collection[Key], dt: float) -> None:
        """Walk and strafe for ``dt`` seconds, sliding along walls.

        Horizontal collisions are checked against the row the player stood
        in at the start of the step.
        """
        player = self.player
        ms = MOVE_SPEED * dt
        x, y = player.pos.x, player.pos.y
        row = self.grid[int(y)]
        if Key.W in keys:
            x, y = self._step(row, x, y, player.dir, ms)
        if Key.S in keys:
            x, y = self._step(row, x, y, player.dir, -ms)
        if Key.D in keys:
            x, y = self._step(row, x, y, player.plane, ms)
        if Key.A in keys:
            x, y = self._step(row, x, y, player.plane, -ms)
        player.pos = Vector(x, y)

    def rotate_by(self, angle: float) -> None:
        """Rotate the facing direction and camera plane by ``angle`` radians."""
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        player = self.player
        d, p = player.dir, player.plane
        player.dir = Vector(d.x * cos_a - d.y * sin_a, d.x * sin_a + d.y * cos_a)
        player.plane = Vector(p.x * cos_a - p.y * sin_a, p.x * sin_a + p.y * cos_a)

    def rotate(self, keys: Collection[Key], dt: float) -> None:
        """Turn with the arrow keys for ``dt`` seconds."""
        speed = ROT_SPEED * dt
        if Key.RIGHT in keys:
            self.rotate_by(-speed)
        if Key.LEFT in keys:
            self.rotate_by(speed)

    def mouse_look(self, dx: float, dt: float) -> None:
        """Turn by a horizontal mouse offset from the window centre."""
        if dx != 0.0:
            self.rotate_by(-dx * MOUSE_ROT_SPEED * dt)

    def use_door(self, now_ms: float) -> bool:
        """Toggle the doors around the player, at most once per cooldown.

        Returns whether the doors were toggled.
        """
        if now_ms - self.last_door_ms < DOOR_COOLDOWN_MS:
            return False
        pos = self.player.pos
        height, width = self.height, self.width
        for i in range(-2, 3):
            for j in range(-2, 4):
                if i == 0 and j == 0:
                    continue
                if not (0 <= pos.y + j < height and 0 <= pos.x + i < width):
                    continue
                y, x = int(pos.y) + j, int(pos.x) + i
                if x < len(self.grid[y]):
                    self.grid[y][x] = self.grid[y][x].toggled()
        self.last_door_ms = now_ms
        return True