"""Command-line checks and loading of a complete, validated scene."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from cubraycast.config import (
    Color,
    ConfigError,
    SceneConfig,
    parse_header,
    read_scene_file,
)
from cubraycast.mapcheck import check_closed, check_map

SPRITE_DIR = "textures"
SPRITE_FILES = (
    "atrebois.jpg",
    "sombronces.jpg",
    "cravite.jpg",
    "sablieres.jpg",
    "leviathe.jpg",
)
TAS_FLAG = "--tas"


@dataclass
class Scene:
    """A scene whose header is complete and whose map is valid and closed."""

    config: SceneConfig
    map_lines: list[str]
    spawn: str

    @property
    def textures(self) -> dict[str, str]:
        return self.config.textures

    @property
    def floor(self) -> Color:
        assert self.config.floor is not None
        return self.config.floor

    @property
    def ceiling(self) -> Color:
        assert self.config.ceiling is not None
        return self.config.ceiling

    @property
    def height(self) -> int:
        return len(self.map_lines)

    @property
    def width(self) -> int:
        return max((len(line) for line in self.map_lines), default=0)


def parse_args(argv: Sequence[str]) -> tuple[str, bool]:
    """Return the map path and whether replay mode was requested.

    ``argv`` holds the arguments after the program name: a single map
    path, optionally followed by ``--tas``.
    """
    args = list(argv)
    if len(args) == 1:
        return args[0], False
    if len(args) == 2 and args[1] == TAS_FLAG:
        return args[0], True
    raise ConfigError(
        "Not the right number of argument, put two argument, "
        "exemple :./Cub3d path_to_the_map"
    )


def check_sprites(directory: str | os.PathLike[str] = SPRITE_DIR) -> list[Path]:
    """Return the paths of the animated sprite frames, checking each opens."""
    paths = [Path(directory) / name for name in SPRITE_FILES]
    for path in paths:
        try:
            with open(path, "rb"):
                pass
        except OSError:
            raise ConfigError("One of the required sprites don't exist") from None
    return paths


def load_scene(path: str | os.PathLike[str]) -> Scene:
    """Read, parse and validate a ``.cub`` scene file."""
    config = parse_header(read_scene_file(path))
    if not config.complete:
        raise ConfigError("Missing component in the map")
    spawn = check_map(config.map_lines)
    trimmed = [line.strip("\n") for line in config.map_lines]
    check_closed(trimmed)
    return Scene(config=config, map_lines=trimmed, spawn=spawn)