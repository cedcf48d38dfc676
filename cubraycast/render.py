"""Ray casting, textured wall columns, the background, the minimap and sprite cycling."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from time import time as _wall_clock
from typing import Sequence

import numpy as np

from cubraycast.vector import Vector
from cubraycast.world import HEIGHT, WIDTH, Cell, Side, World

FAR = 1e30

MINIMAP_UNIT = 8
MINIMAP_RADIUS = 6
MINIMAP_ORIGIN = 10
PLAYER_DOT_SIZE = 6
PLAYER_DOT_ORIGIN = 59
PLAYER_COLOR = 0xFF0000FF
MINIMAP_WALL = 0x000000FF
MINIMAP_FLOOR = 0x0888888F

SPRITE_COUNT = 5
SPRITE_FRAMES = 40
SPRITE_PERIOD = 200
SPRITE_POSITION = (0, 785)
SPRITE_SCALE = 0.25

# Wall slices taller than this are treated as covering the whole column.
_UNBOUNDED_LINE = 1 << 30


def _now_ms() -> float:
    return float(int(_wall_clock() * 1000))


@dataclass(frozen=True, eq=False)
class Texture:
    """A square image of packed 32-bit RGBA pixels, indexed ``[row, column]``."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        pixels = np.asarray(self.pixels, dtype=np.uint32)
        if pixels.ndim != 2 or pixels.shape[0] != pixels.shape[1] or pixels.shape[0] == 0:
            raise ValueError("Image is not a square")
        object.__setattr__(self, "pixels", pixels)

    @property
    def size(self) -> int:
        return int(self.pixels.shape[0])

    @classmethod
    def filled(cls, size: int, color: int) -> Texture:
        """A texture of one color."""
        return cls(np.full((size, size), color, dtype=np.uint32))


@dataclass(frozen=True)
class RayHit:
    """Where a ray met a solid cell and from which side."""

    ray_dir: Vector
    map_x: int
    map_y: int
    side: Side
    distance: float
    cell: Cell


@dataclass
class FrameClock:
    """Frame timing in milliseconds; ``delta_time`` is in seconds."""

    time: float = field(default_factory=_now_ms)
    old_time: float = 0.0
    delta_time: float = 0.0

    def tick(self, now_ms: float | None = None) -> float:
        """Advance to ``now_ms`` (the current time if omitted); return the delta."""
        self.old_time = self.time
        self.time = _now_ms() if now_ms is None else now_ms
        self.delta_time = (self.time - self.old_time) / 1000.0
        return self.delta_time


@dataclass
class SpriteCycler:
    """Chooses which animated sprite frame to show on each rendered frame."""

    count: int = SPRITE_COUNT
    counter: int = 0
    index: int = 0

    def advance(self) -> int:
        """Return the sprite index to draw for this frame."""
        if self.counter % SPRITE_FRAMES == 0:
            self.index = (self.index + 1) % self.count
        current = self.index
        self.counter = (self.counter + 1) % SPRITE_PERIOD
        return current


def background(width: int, height: int, sky: int, ground: int) -> np.ndarray:
    """A frame whose upper half is ``sky`` and lower half ``ground``."""
    frame = np.empty((height, width), dtype=np.uint32)
    half = height // 2
    frame[:half] = sky
    frame[half:] = ground
    return frame


def _signbit(value: float) -> bool:
    return math.copysign(1.0, value) < 0


def _cell_at(world: World, x: int, y: int) -> Cell:
    grid = world.grid
    if not (0 <= y < len(grid) and 0 <= x < len(grid[y])):
        raise ValueError(f"ray left the map at ({x}, {y})")
    return grid[y][x]


def cast_ray(world: World, camera_x: float) -> RayHit:
    """Walk the grid along one camera ray until it meets a solid cell.

    ``camera_x`` runs from -1 (left edge of the view) to 1 (right edge).
    """
    player = world.player
    pos = player.pos
    ray = player.dir + player.plane * camera_x
    map_x, map_y = int(pos.x), int(pos.y)

    delta_x = abs(1 / ray.x) if ray.x != 0 else FAR
    delta_y = abs(1 / ray.y) if ray.y != 0 else FAR
    step_x = -1 if _signbit(ray.x) else 1
    step_y = -1 if _signbit(ray.y) else 1

    if ray.x < 0:
        side_x = (pos.x - map_x) * delta_x
    else:
        side_x = (map_x + 1.0 - pos.x) * delta_x
    if ray.y < 0:
        side_y = (pos.y - map_y) * delta_y
    else:
        side_y = (map_y + 1.0 - pos.y) * delta_y

    side = Side.W
    cell = _cell_at(world, map_x, map_y)
    while not cell.solid:
        if side_x < side_y:
            side_x += delta_x
            map_x += step_x
            side = Side.W if step_x > 0 else Side.E
        else:
            side_y += delta_y
            map_y += step_y
            side = Side.N if step_y > 0 else Side.S
        cell = _cell_at(world, map_x, map_y)

    if side < 2:
        distance = side_x - delta_x
    else:
        distance = side_y - delta_y
    return RayHit(ray_dir=ray, map_x=map_x, map_y=map_y, side=side,
                  distance=distance, cell=cell)


def texture_column(hit: RayHit, player_pos: Vector, texture_size: int) -> int:
    """The texture column to sample for a wall hit."""
    if hit.side < 2:
        wall_x = player_pos.y + hit.distance * hit.ray_dir.y
    else:
        wall_x = player_pos.x + hit.distance * hit.ray_dir.x
    wall_x -= math.floor(wall_x)
    tex_x = int(wall_x * texture_size)
    ray = hit.ray_dir
    flip = (
        (hit.side == Side.N and ray.y < 0)
        or (hit.side == Side.E and ray.x > 0)
        or (hit.side == Side.S and ray.y < 0)
        or (hit.side == Side.W and ray.x > 0)
    )
    if flip:
        tex_x = texture_size - tex_x - 1
    return min(max(tex_x, 0), texture_size - 1)


@dataclass
class Renderer:
    """Draws the view of a world into frames of packed RGBA pixels.

    ``textures`` holds one texture per :class:`Side`, in that order; the
    last one is used for closed doors.
    """

    textures: Sequence[Texture]
    sky: int
    ground: int
    width: int = WIDTH
    height: int = HEIGHT
    _background: np.ndarray | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.textures = tuple(self.textures)
        if len(self.textures) != len(Side):
            raise ValueError(f"expected {len(Side)} textures, got {len(self.textures)}")

    def texture_for(self, hit: RayHit) -> Texture:
        """The texture a hit cell is drawn with."""
        if hit.cell == Cell.WALL:
            return self.textures[hit.side]
        return self.textures[Side.D]

    def render(self, world: World) -> np.ndarray:
        """Draw the background, one wall slice per column, then the minimap."""
        if self._background is None:
            self._background = background(self.width, self.height, self.sky, self.ground)
        frame = self._background.copy()
        pos = world.player.pos
        for x in range(self.width):
            hit = cast_ray(world, 2.0 * x / self.width - 1)
            self._draw_column(frame, x, hit, pos)
        self.draw_minimap(frame, world)
        return frame

    def _draw_column(self, frame: np.ndarray, x: int, hit: RayHit, pos: Vector) -> None:
        texture = self.texture_for(hit)
        size = texture.size
        tex_x = texture_column(hit, pos, size)
        half = self.height // 2
        if hit.distance > 0:
            line = min(int(self.height / hit.distance), _UNBOUNDED_LINE)
        else:
            line = _UNBOUNDED_LINE
        top = half - (line >> 1)
        bottom = (line >> 1) + half
        span = bottom - top
        if span <= 0:
            return
        step = np.float32(size) / np.float32(span)
        start = np.float32(0.0)
        if top < 0:
            start = step * np.float32(-top)
            top = 0
        count = min(bottom - top, self.height)
        if count <= 0:
            return
        positions = start + step * np.arange(count, dtype=np.float32)
        tex_y = np.clip(positions.astype(np.int64), 0, size - 1)
        frame[top:top + count, x] = texture.pixels[tex_y, tex_x]

    def draw_minimap(self, frame: np.ndarray, world: World) -> np.ndarray:
        """Draw the map around the player in the top-left corner of ``frame``.

        The map is mirrored horizontally; walls and cells off the map are
        drawn dark. Returns ``frame``.
        """
        pos = world.player.pos
        px, py = int(pos.x), int(pos.y)
        radius, unit = MINIMAP_RADIUS, MINIMAP_UNIT
        height, width = world.height, world.width
        for iy in range(-radius, radius + 1):
            for ix in range(-radius, radius + 1):
                mx, my = px + ix, py + iy
                color = MINIMAP_WALL
                if 0 <= my < height and 0 <= mx < width and mx < len(world.grid[my]):
                    color = MINIMAP_WALL if world.cell(mx, my).solid else MINIMAP_FLOOR
                sx = MINIMAP_ORIGIN + (-ix + radius) * unit
                sy = MINIMAP_ORIGIN + (iy + radius) * unit
                frame[sy:sy + unit, sx:sx + unit] = color
        dot = PLAYER_DOT_ORIGIN
        frame[dot:dot + PLAYER_DOT_SIZE, dot:dot + PLAYER_DOT_SIZE] = PLAYER_COLOR
        return frame