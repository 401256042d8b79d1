import math

import pytest

from cubcaster.raycast import (
    RADIUS,
    SQUARE_SIZE,
    FrameBuffer,
    Key,
    Player,
    cast_ray,
    check_area,
    handle_key,
    render_scene,
    spawn_player,
    window_size,
)
from cubcaster.xpm import XpmImage

ROOM = ["11111", "10N01", "11111"]
CORRIDOR = ["1111111111", "1E00000001", "1111111111"]

TEX_COLORS = (0x111111, 0x222222, 0x333333, 0x444444)


def _textures():
    return [XpmImage(1, 1, (color,)) for color in TEX_COLORS]


def _room(ch):
    return ["11111", f"10{ch}01", "11111"]


def test_x11_escape_code_quits():
    player = spawn_player(ROOM)
    assert handle_key(player, ROOM, Key(65307)) is False


def test_x11_arrow_codes_drive_player():
    player = spawn_player(CORRIDOR)
    start_x = player.x
    start_angle = player.angle

    assert handle_key(player, CORRIDOR, Key(65362)) is True
    assert player.x == start_x + player.move_speed
    assert handle_key(player, CORRIDOR, Key(65364)) is True
    assert player.x == start_x

    player = spawn_player(ROOM)
    start_angle = player.angle
    handle_key(player, ROOM, Key(65363))
    assert math.isclose(player.angle, start_angle + player.rotation_speed)
    handle_key(player, ROOM, Key(65361))
    assert math.isclose(player.angle, start_angle)


def test_spawn_player_centre_of_cell():
    player = spawn_player(ROOM)
    assert player.x == 80
    assert player.y == 48
    assert player.facing == "N"


@pytest.mark.parametrize(
    "ch, dx, dy",
    [("N", 0, -1), ("S", 0, 1), ("E", 1, 0), ("W", -1, 0)],
)
def test_spawn_player_angle_matches_facing(ch, dx, dy):
    player = spawn_player(_room(ch))
    assert math.isclose(math.cos(player.angle), dx, abs_tol=1e-12)
    assert math.isclose(-math.sin(player.angle), dy, abs_tol=1e-12)


def test_spawn_player_requires_start():
    with pytest.raises(ValueError):
        spawn_player(["111", "101", "111"])


def test_window_size():
    assert window_size(ROOM) == (5 * SQUARE_SIZE, 3 * SQUARE_SIZE)


def test_window_size_empty():
    with pytest.raises(ValueError):
        window_size([])


def test_cast_ray_opposite_directions_span_room():
    position = (48.0, 48.0)
    east = cast_ray(ROOM, position, 0.0)
    west = cast_ray(ROOM, position, math.pi)
    assert math.isclose(east.distance + west.distance, 3 * SQUARE_SIZE)
    assert east.side == 0
    assert west.side == 0
    assert east.map_x == 4
    assert west.map_x == 0


def test_cast_ray_north_is_horizontal_side():
    position = (48.0, 48.0)
    north = cast_ray(ROOM, position, math.pi / 2)
    west = cast_ray(ROOM, position, math.pi)
    assert north.side == 1
    assert north.map_y == 0
    assert math.isclose(north.distance, west.distance)


def test_check_area_clear_in_cell_centre():
    assert check_area(ROOM, 48, 48) is False


def test_check_area_touches_wall():
    assert check_area(ROOM, SQUARE_SIZE + RADIUS - 1, 48) is True


def test_handle_key_escape_quits():
    player = spawn_player(ROOM)
    assert handle_key(player, ROOM, Key.ESCAPE) is False


def test_handle_key_forward_moves_by_speed():
    player = spawn_player(CORRIDOR)
    start_x, start_y = player.x, player.y
    assert handle_key(player, CORRIDOR, Key.UP) is True
    assert player.x == start_x + player.move_speed
    assert player.y == start_y


def test_handle_key_forward_then_back_returns():
    player = spawn_player(CORRIDOR)
    handle_key(player, CORRIDOR, Key.UP)
    handle_key(player, CORRIDOR, Key.UP)
    moved = player.x
    handle_key(player, CORRIDOR, Key.DOWN)
    handle_key(player, CORRIDOR, Key.DOWN)
    assert moved > player.x
    assert player.x == spawn_player(CORRIDOR).x


def test_handle_key_wall_blocks_movement():
    player = Player(x=SQUARE_SIZE + RADIUS + 1, y=48, angle=math.pi, facing="W")
    handle_key(player, ROOM, Key.UP)
    assert player.x == SQUARE_SIZE + RADIUS + 1


def test_handle_key_rotation_round_trip():
    player = spawn_player(ROOM)
    start = player.angle
    handle_key(player, ROOM, Key.RIGHT)
    assert math.isclose(player.angle, start + player.rotation_speed)
    handle_key(player, ROOM, Key.LEFT)
    assert math.isclose(player.angle, start)


def test_handle_key_keeps_angle_in_range():
    player = spawn_player(_room("E"))
    handle_key(player, ROOM, Key.LEFT)
    assert 0 <= player.angle <= 2 * math.pi
    assert math.isclose(player.angle, 2 * math.pi - player.rotation_speed)


def test_frame_buffer_put_and_clear():
    frame = FrameBuffer(4, 3)
    frame.put_pixel(1, 2, 0xABCDEF)
    frame.put_pixel(10, 10, 0xFFFFFF)
    frame.put_pixel(-1, 0, 0xFFFFFF)
    assert frame.pixels[2 * 4 + 1] == 0xABCDEF
    assert sum(1 for p in frame.pixels if p) == 1
    frame.clear()
    assert frame.pixels == [0] * 12


@pytest.mark.parametrize(
    "ch, slot",
    [("E", 3), ("W", 2), ("N", 0), ("S", 1)],
)
def test_render_scene_uses_texture_for_facing(ch, slot):
    grid = _room(ch)
    player = spawn_player(grid)
    width, height = window_size(grid)
    frame = FrameBuffer(width, height)
    render_scene(frame, grid, player, _textures())
    centre = frame.pixels[(height // 2) * width + width // 2]
    assert centre == TEX_COLORS[slot]


def test_render_scene_draws_only_texture_colors():
    grid = _room("E")
    player = spawn_player(grid)
    frame = FrameBuffer(*window_size(grid))
    frame.put_pixel(0, 0, 0x999999)
    render_scene(frame, grid, player, _textures())
    assert set(frame.pixels) <= set(TEX_COLORS) | {0}
    assert 0x999999 not in frame.pixels