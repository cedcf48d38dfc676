import pytest

from cubraycast.config import Color, ConfigError
from cubraycast.loader import (
    SPRITE_FILES,
    check_sprites,
    load_scene,
    parse_args,
)

TEXTURE_NAMES = ("NO", "SO", "WE", "EA", "DT")


def _write_scene(tmp_path, map_text, skip=()):
    texture = tmp_path / "wall.png"
    texture.write_bytes(b"")
    lines = [f"{name} {texture}\n" for name in TEXTURE_NAMES if name not in skip]
    if "F" not in skip:
        lines.append("F 220,100,0\n")
    if "C" not in skip:
        lines.append("C 225,30,0\n")
    lines.append("\n")
    scene = tmp_path / "level.cub"
    scene.write_text("".join(lines) + map_text)
    return scene


def test_parse_args_single_path():
    assert parse_args(["maps/level.cub"]) == ("maps/level.cub", False)


def test_parse_args_tas_flag():
    assert parse_args(["maps/level.cub", "--tas"]) == ("maps/level.cub", True)


@pytest.mark.parametrize(
    "argv", [[], ["a.cub", "--tasx"], ["a.cub", "--ta"], ["a.cub", "b", "c"]]
)
def test_parse_args_wrong_count(argv):
    with pytest.raises(ConfigError, match="Not the right number of argument"):
        parse_args(argv)


def test_check_sprites_all_present(tmp_path):
    for name in SPRITE_FILES:
        (tmp_path / name).write_bytes(b"")
    paths = check_sprites(tmp_path)
    assert [p.name for p in paths] == list(SPRITE_FILES)
    assert all(p.parent == tmp_path for p in paths)


def test_check_sprites_missing_one(tmp_path):
    for name in SPRITE_FILES[:-1]:
        (tmp_path / name).write_bytes(b"")
    with pytest.raises(ConfigError, match="required sprites"):
        check_sprites(tmp_path)


def test_load_scene_valid(tmp_path):
    scene_path = _write_scene(tmp_path, "111\n1N1\n111\n")
    scene = load_scene(scene_path)
    assert scene.map_lines == ["111", "1N1", "111"]
    assert scene.spawn == "N"
    assert scene.floor == Color(220, 100, 0)
    assert scene.ceiling == Color(225, 30, 0)
    assert set(scene.textures) == set(TEXTURE_NAMES)
    assert (scene.height, scene.width) == (3, 3)


def test_load_scene_missing_component(tmp_path):
    scene_path = _write_scene(tmp_path, "111\n1N1\n111\n", skip=("DT",))
    with pytest.raises(ConfigError, match="Missing component in the map"):
        load_scene(scene_path)


def test_load_scene_missing_color(tmp_path):
    scene_path = _write_scene(tmp_path, "111\n1N1\n111\n", skip=("C",))
    with pytest.raises(ConfigError, match="Missing component in the map"):
        load_scene(scene_path)


def test_load_scene_open_map(tmp_path):
    scene_path = _write_scene(tmp_path, "111\n1N0\n111\n")
    with pytest.raises(ConfigError, match="Map not closed"):
        load_scene(scene_path)


def test_load_scene_without_player(tmp_path):
    scene_path = _write_scene(tmp_path, "111\n101\n111\n")
    with pytest.raises(ConfigError, match="number of player"):
        load_scene(scene_path)


def test_load_scene_wrong_extension(tmp_path):
    other = tmp_path / "level.txt"
    other.write_text("111\n")
    with pytest.raises(ConfigError) as excinfo:
        load_scene(other)
    assert excinfo.value.code == 5