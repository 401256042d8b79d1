import pytest

from cubcaster.cubfile import (
    CubConfig,
    CubError,
    atoi_custom,
    check_filename,
    find_player,
    format_information,
    is_map_closed,
    load_cub,
    normalize_map,
    parse_color,
    parse_cub_lines,
    validate_map_chars,
)

HEADER = [
    "NO ./north.xpm\n",
    "SO ./south.xpm\n",
    "WE ./west.xpm\n",
    "EA ./east.xpm\n",
    "F 220,100,0\n",
    "C 225,30,0\n",
]
MAP = [
    "111111\n",
    "100001\n",
    "10N001\n",
    "111111\n",
]


def sample_lines():
    return HEADER + ["\n"] + MAP


def test_atoi_custom_basic():
    assert atoi_custom("42") == 42
    assert atoi_custom("  -17") == -17
    assert atoi_custom("+5x") == 5
    assert atoi_custom("abc") == 0


def test_atoi_custom_overflow():
    assert atoi_custom("2147483648") == -2000
    assert atoi_custom("-2147483649") == 2000
    assert atoi_custom("-2147483648") == -2147483648


def test_check_filename_accepts_cub():
    assert check_filename("maps/a.cub") == "maps/a.cub"


@pytest.mark.parametrize("name", [".cub", "map.txt", "mapcub", None])
def test_check_filename_rejects(name):
    with pytest.raises(CubError) as info:
        check_filename(name)
    assert info.value.exit_code == 65


def test_parse_color_valid():
    assert parse_color("220,100,0") == (220, 100, 0)
    assert parse_color("1,,2,3") == (1, 2, 3)


@pytest.mark.parametrize("text", ["1,2", "1,2,3,4", ""])
def test_parse_color_bad_format(text):
    with pytest.raises(CubError) as info:
        parse_color(text)
    assert info.value.exit_code == 67


@pytest.mark.parametrize("text", ["1,x,3", "256,0,0", "1,2,3 "])
def test_parse_color_bad_values(text):
    with pytest.raises(CubError) as info:
        parse_color(text)
    assert info.value.exit_code == 68


def test_validate_map_chars():
    rows = ["1111", "1N01", "1111"]
    assert validate_map_chars(rows) == rows
    with pytest.raises(CubError) as info:
        validate_map_chars(["1X11"])
    assert info.value.exit_code == 65


def test_normalize_map_pads_rows():
    rows = ["111", "10001", "1"]
    result = normalize_map(rows)
    assert len({len(row) for row in result}) == 1
    assert all(new.startswith(old) for new, old in zip(result, rows))
    assert all(new[len(old):].strip() == "" for new, old in zip(result, rows))


def test_find_player():
    assert find_player(["111", "1W1", "111"]) == (1, 1)
    with pytest.raises(CubError) as info:
        find_player(["1N1", "1S1"])
    assert info.value.exit_code == 65
    with pytest.raises(CubError):
        find_player(["111", "101"])


def test_is_map_closed():
    closed = ["111111", "100001", "10N001", "111111"]
    assert is_map_closed(closed, 2, 2) is True
    gap = ["111011", "100001", "10N001", "111111"]
    assert is_map_closed(gap, 2, 2) is False
    hole = ["111111", "10 001", "10N001", "111111"]
    assert is_map_closed(hole, 2, 2) is False


def test_parse_cub_lines_sample():
    config = parse_cub_lines(sample_lines())
    assert config.north == "./north.xpm"
    assert config.south == "./south.xpm"
    assert config.west == "./west.xpm"
    assert config.east == "./east.xpm"
    assert config.floor == (220, 100, 0)
    assert config.ceiling == (225, 30, 0)
    assert config.grid == [row.rstrip("\n") for row in MAP]


def test_parse_cub_lines_pads_map():
    lines = HEADER + ["\n", "1111\n", "1N01\n", "111\n"]
    with pytest.raises(CubError) as info:
        parse_cub_lines(lines)
    assert info.value.message == "Map is not closed"


def test_duplicate_identifier():
    lines = HEADER[:1] + HEADER[:5] + ["\n"] + MAP
    with pytest.raises(CubError) as info:
        parse_cub_lines(lines)
    assert info.value.exit_code == 67


def test_missing_identifier():
    lines = HEADER[:5] + MAP
    with pytest.raises(CubError) as info:
        parse_cub_lines(lines)
    assert info.value.exit_code == 68


def test_missing_map():
    with pytest.raises(CubError) as info:
        parse_cub_lines(HEADER + ["\n"])
    assert info.value.exit_code == 68


def test_empty_line_inside_map():
    lines = HEADER + ["\n"] + MAP[:2] + ["\n"] + MAP[2:]
    with pytest.raises(CubError) as info:
        parse_cub_lines(lines)
    assert info.value.message == "Invalid empty line inside map"


def test_texture_must_be_xpm():
    lines = ["NO ./north.png\n"] + HEADER[1:] + ["\n"] + MAP
    with pytest.raises(CubError) as info:
        parse_cub_lines(lines)
    assert info.value.exit_code == 65


def test_tab_after_texture_key_loses_path():
    lines = ["NO\t./north.xpm\n"] + HEADER[1:] + ["\n"] + MAP
    with pytest.raises(CubError) as info:
        parse_cub_lines(lines)
    assert info.value.message == "Texture path must end with .xpm"


def _write_scene(directory, lines, textures=("north", "south", "west", "east")):
    for name in textures:
        (directory / f"{name}.xpm").write_text("/* XPM */\n")
    scene = directory / "scene.cub"
    scene.write_text("".join(lines))
    return scene


def test_load_cub(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    scene = _write_scene(tmp_path, sample_lines())
    config = load_cub(scene)
    assert isinstance(config, CubConfig)
    assert config.floor == (220, 100, 0)
    assert config.grid[2] == "10N001"


def test_load_cub_missing_texture(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    scene = _write_scene(tmp_path, sample_lines(), textures=("north", "south", "west"))
    with pytest.raises(CubError) as info:
        load_cub(scene)
    assert info.value.exit_code == 66
    assert info.value.message == "Failed to open EA texture"


def test_load_cub_missing_file(tmp_path):
    with pytest.raises(CubError) as info:
        load_cub(tmp_path / "absent.cub")
    assert info.value.exit_code == 66


def test_load_cub_bad_name(tmp_path):
    with pytest.raises(CubError) as info:
        load_cub(tmp_path / "scene.txt")
    assert info.value.exit_code == 65


def test_format_information():
    config = parse_cub_lines(sample_lines())
    text = format_information(config)
    lines = text.splitlines()
    assert lines[0] == "=== Parsed Information ==="
    assert "NO: ./north.xpm" in lines
    assert "Floor   -> R:220 G:100 B:0" in lines
    assert "Ceiling -> R:225 G:30 B:0" in lines
    assert "10N001" in lines
    assert text.endswith("\n==========================\n")