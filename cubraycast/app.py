"""The game loop: keyboard state, per-frame updates, replays and the window."""

from __future__ import annotations

import os
import sys
import time
from typing import Callable, Iterable, Sequence

import numpy as np

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
import pygame  # noqa: E402

from cubraycast.config import ConfigError  # noqa: E402
from cubraycast.loader import check_sprites, load_scene, parse_args  # noqa: E402
from cubraycast.render import (  # noqa: E402
    SPRITE_COUNT,
    SPRITE_POSITION,
    SPRITE_SCALE,
    FrameClock,
    Renderer,
    SpriteCycler,
    Texture,
)
from cubraycast.tas import Key, TasFormatError, TasStep, read_tas_file  # noqa: E402
from cubraycast.world import FPS, TITLE, World, color_to_rgba  # noqa: E402

# Texture identifiers in the order of the Side enumeration: W, E, N, S, D.
_TEXTURE_ORDER = ("WE", "EA", "NO", "SO", "DT")


def _now_ms() -> float:
    return float(int(time.time() * 1000))


def _pack_rgba(raw: bytes, width: int, height: int) -> np.ndarray:
    channels = np.frombuffer(raw, dtype=np.uint8).reshape(height, width, 4)
    channels = channels.astype(np.uint32)
    return (
        (channels[..., 0] << 24)
        | (channels[..., 1] << 16)
        | (channels[..., 2] << 8)
        | channels[..., 3]
    )


def load_square_texture(path: str | os.PathLike[str]) -> Texture:
    """Load an image file as a square texture of packed RGBA pixels."""
    try:
        surface = pygame.image.load(os.fspath(path))
    except (pygame.error, OSError, FileNotFoundError):
        raise ConfigError("While opening the textures") from None
    width, height = surface.get_size()
    if width != height:
        raise ConfigError("Image is not a square")
    if width == 0:
        raise ConfigError("While opening the textures")
    raw = pygame.image.tostring(surface, "RGBA")
    return Texture(_pack_rgba(raw, width, height))


def _load_sprite(path: str | os.PathLike[str]) -> pygame.Surface:
    try:
        image = pygame.image.load(os.fspath(path))
    except (pygame.error, OSError):
        raise ConfigError("While opening the textures") from None
    width, height = image.get_size()
    size = (max(1, int(width * SPRITE_SCALE)), max(1, int(height * SPRITE_SCALE)))
    return pygame.transform.scale(image, size)


def _to_rgb(frame: np.ndarray) -> np.ndarray:
    columns = frame.T
    rgb = np.empty(columns.shape + (3,), dtype=np.uint8)
    rgb[..., 0] = (columns >> 24) & 0xFF
    rgb[..., 1] = (columns >> 16) & 0xFF
    rgb[..., 2] = (columns >> 8) & 0xFF
    return rgb


class Game:
    """Holds the world, the keys held down and the state of the main loop.

    ``now`` returns the current time in milliseconds; it drives frame
    timing and the door cooldown.
    """

    def __init__(
        self,
        world: World,
        renderer: Renderer,
        sprite_images: Sequence[pygame.Surface] = (),
        tas: bool = False,
        now: Callable[[], float] | None = None,
    ) -> None:
        self.world = world
        self.renderer = renderer
        self.sprite_images = list(sprite_images)
        self.tas = tas
        self._now = now or _now_ms
        self.clock = FrameClock(time=self._now())
        self.sprites = SpriteCycler(count=len(self.sprite_images) or SPRITE_COUNT)
        self.keys: set[int] = set()
        self.frames = 0
        self.update_num: int | None = None
        self.running = False
        self.end = False
        self.sprite_index = 0
        self.frame: np.ndarray | None = None
        self._screen: pygame.Surface | None = None
        self._pace: pygame.time.Clock | None = None

    def key_down(self, key: int) -> None:
        """Escape ends the game; other keys are held unless a replay runs."""
        if key == Key.ESCAPE:
            self.end = True
            self.running = False
        if not self.tas:
            self.keys.add(int(key))

    def key_up(self, key: int) -> None:
        if not self.tas:
            self.keys.discard(int(key))

    def update(self, mouse_dx: float = 0.0) -> np.ndarray:
        """Advance one frame: look, move, turn, use doors, then render it."""
        world = self.world
        dt = self.clock.delta_time
        world.mouse_look(mouse_dx, dt)
        world.move(self.keys, dt)
        world.rotate(self.keys, dt)
        if Key.O in self.keys:
            world.use_door(self._now())
        frame = self.renderer.render(world)
        self.clock.tick(self._now())
        self.frame = frame
        self.frames += 1
        if self.update_num is not None and self.update_num <= self.frames:
            self.running = False
        self.sprite_index = self.sprites.advance()
        return frame

    def _open_window(self) -> None:
        if self._screen is not None:
            return
        pygame.init()
        self._screen = pygame.display.set_mode((self.renderer.width, self.renderer.height))
        pygame.display.set_caption(TITLE)
        pygame.mouse.set_visible(False)
        self._pace = pygame.time.Clock()

    def _close_window(self) -> None:
        if self._screen is None:
            return
        self._screen = None
        self._pace = None
        pygame.display.quit()
        pygame.quit()

    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                self.key_down(event.scancode)
            elif event.type == pygame.KEYUP:
                self.key_up(event.scancode)

    def _present(self, frame: np.ndarray) -> None:
        assert self._screen is not None
        pygame.surfarray.blit_array(self._screen, _to_rgb(frame))
        if self.sprite_images:
            self._screen.blit(self.sprite_images[self.sprite_index], SPRITE_POSITION)
        pygame.display.flip()

    def _frame(self) -> None:
        if self._screen is None:
            self.update(0.0)
            return
        self._handle_events()
        if not self.running:
            return
        centre = (self.renderer.width // 2, self.renderer.height // 2)
        mouse_dx = pygame.mouse.get_pos()[0] - self.renderer.width / 2.0
        frame = self.update(mouse_dx)
        pygame.mouse.set_pos(centre)
        self._present(frame)
        if self._pace is not None:
            self._pace.tick(FPS)

    def _loop(self) -> None:
        self.running = True
        while self.running:
            self._frame()

    def run(self) -> None:
        """Open the window and play until it is closed or Escape is pressed."""
        self._open_window()
        self._loop()

    def run_tas(self, steps: Iterable[TasStep]) -> int:
        """Replay scripted steps, then hand the keyboard back to the player.

        Each step holds its keys for its number of frames (at least one
        frame is drawn). Stops early once the game has ended. Returns the
        number of frames drawn.
        """
        start = self.frames
        self.tas = True
        for step in steps:
            if self.end:
                break
            self.keys = {int(key) for key in step.keys}
            self.update_num = self.frames + step.frames
            self._loop()
        self.keys = set()
        self.update_num = None
        self.tas = False
        return self.frames - start


def _report(message: str) -> None:
    print(f"Error\n{message}")


def main(argv: Sequence[str] | None = None) -> int:
    """Start the game with a map path and an optional ``--tas`` flag."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        sprite_paths = check_sprites()
        map_path, tas = parse_args(args)
        scene = load_scene(map_path)
        textures = [load_square_texture(scene.textures[name]) for name in _TEXTURE_ORDER]
        sprites = [_load_sprite(path) for path in sprite_paths]
    except ConfigError as exc:
        _report(exc.message)
        return exc.code
    steps: list[TasStep] = []
    if tas:
        try:
            steps = read_tas_file()
        except TasFormatError as exc:
            _report(exc.message)
            _report("While reading the tas file")
            return 1
    world = World.from_lines(scene.map_lines)
    renderer = Renderer(
        textures,
        sky=color_to_rgba(scene.ceiling),
        ground=color_to_rgba(scene.floor),
    )
    game = Game(world, renderer, sprite_images=sprites, tas=tas)
    try:
        game._open_window()
    except pygame.error:
        _report("Mlx window failed")
        return 1
    try:
        if steps:
            game.run_tas(steps)
        if not game.end:
            game.run()
    finally:
        game._close_window()
    return 0


if __name__ == "__main__":
    sys.exit(main())