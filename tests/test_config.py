import pytest

from cubraycast.config import (
    Color,
    ConfigError,
    SceneConfig,
    max_line_len,
    parse_color,
    parse_header,
    parse_texture_path,
    read_scene_file,
)


@pytest.fixture
def textures(tmp_path):
    paths = {}
    for name in ("NO", "SO", "EA", "WE", "DT"):
        target = tmp_path / f"{name.lower()}.png"
        target.write_bytes(b"img")
        paths[name] = str(target)
    return paths


def _header(textures):
    return [f"{name} {path}\n" for name, path in textures.items()]


def test_read_scene_file_keeps_newlines(tmp_path):
    scene = tmp_path / "map.cub"
    scene.write_text("F 1,2,3\n\n111\n1N1")
    assert read_scene_file(scene) == ["F 1,2,3\n", "\n", "111\n", "1N1"]


def test_read_scene_file_missing(tmp_path):
    with pytest.raises(ConfigError) as info:
        read_scene_file(tmp_path / "absent.cub")
    assert info.value.code == 2


def test_read_scene_file_directory(tmp_path):
    folder = tmp_path / "dir.cub"
    folder.mkdir()
    with pytest.raises(ConfigError) as info:
        read_scene_file(folder)
    assert info.value.code == 4


def test_read_scene_file_wrong_extension(tmp_path):
    scene = tmp_path / "map.txt"
    scene.write_text("111\n")
    with pytest.raises(ConfigError) as info:
        read_scene_file(scene)
    assert info.value.code == 5


def test_parse_color_plain():
    assert parse_color("220,100,0\n") == Color(220, 100, 0)


def test_parse_color_with_spaces():
    assert parse_color("  12 , 34 ,  56  \n") == Color(12, 34, 56)


def test_parse_color_without_newline():
    assert parse_color("0,0,255") == Color(0, 0, 255)


@pytest.mark.parametrize(
    "text",
    ["256,0,0\n", "a,0,0\n", "1,2\n", "1,2,3x\n", "-1,2,3\n", "1;2;3\n", ""],
)
def test_parse_color_rejects(text):
    with pytest.raises(ConfigError):
        parse_color(text)


def test_parse_texture_path_strips(textures):
    path = textures["NO"]
    assert parse_texture_path(f"   {path}\n") == path


def test_parse_texture_path_missing(tmp_path):
    with pytest.raises(ConfigError):
        parse_texture_path(f" {tmp_path / 'none.png'}\n")


def test_parse_header_full(textures):
    lines = _header(textures) + ["F 220,100,0\n", "C 225,30,0\n", "\n", "111\n", "1N1\n", "111\n"]
    config = parse_header(lines)
    assert config.textures == textures
    assert config.floor == Color(220, 100, 0)
    assert config.ceiling == Color(225, 30, 0)
    assert config.map_lines == ["111\n", "1N1\n", "111\n"]
    assert config.complete


def test_parse_header_reports_missing(textures):
    lines = [f"NO {textures['NO']}\n", "F 1,2,3\n", "111\n"]
    config = parse_header(lines)
    assert config.missing == ["SO", "EA", "WE", "DT", "C"]
    assert not config.complete


def test_parse_header_duplicate_texture(textures):
    lines = _header(textures) + [f"NO {textures['SO']}\n"]
    with pytest.raises(ConfigError):
        parse_header(lines)


def test_parse_header_duplicate_color():
    with pytest.raises(ConfigError):
        parse_header(["F 1,2,3\n", "F 4,5,6\n"])


def test_parse_header_bad_color_propagates():
    with pytest.raises(ConfigError):
        parse_header(["C 1,2\n", "111\n"])


def test_parse_header_skips_indented_unknown_lines():
    config = parse_header(["F 1,2,3\n", "  111\n", "1N1\n", "111\n"])
    assert config.map_lines == ["1N1\n", "111\n"]


def test_parse_header_unknown_map_character():
    with pytest.raises(ConfigError):
        parse_header(["X11\n"])


def test_parse_header_without_map_returns_all_lines():
    lines = ["F 1,2,3\n", "C 4,5,6\n"]
    assert parse_header(lines).map_lines == lines


def test_scene_config_defaults_empty():
    config = SceneConfig()
    assert config.map_lines == []
    assert config.textures == {}


def test_max_line_len():
    lines = ["ab\n", "abcdef\n", ""]
    assert max_line_len(lines) == len("abcdef\n")
    assert max_line_len([]) == 0