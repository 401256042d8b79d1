"""Grid ray casting, player movement and textured wall rendering."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Protocol

SQUARE_SIZE = 32
FOV = 60 * math.pi / 180
RADIUS = 5

_DIRECTIONS = {
    "N": (0.0, -1.0),
    "S": (0.0, 1.0),
    "E": (1.0, 0.0),
    "W": (-1.0, 0.0),
}

NORTH, SOUTH, EAST, WEST = range(4)
"""Texture slots as they are loaded: north, south, east, west."""


class Key(IntEnum):
    """X11 key codes the game reacts to."""

    ESCAPE = 65307
    LEFT = 65361
    UP = 65362
    RIGHT = 65363
    DOWN = 65364


class Texture(Protocol):
    width: int
    height: int

    def pixel(self, x: int, y: int) -> int: ...


@dataclass
class Player:
    """Position in pixels, view angle in radians (counter-clockwise, 0 = east)."""

    x: float
    y: float
    angle: float
    facing: str
    move_speed: int = 4
    rotation_speed: float = 0.2

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class RayHit:
    """Result of a ray cast: perpendicular distance in pixels and wall side.

    ``side`` is 0 when a vertical grid line was crossed, 1 for a horizontal one.
    """

    distance: float
    side: int
    map_x: int
    map_y: int


@dataclass
class FrameBuffer:
    """A width x height image of 32-bit colours stored row by row."""

    width: int
    height: int
    pixels: list[int] = field(init=False)

    def __post_init__(self) -> None:
        self.pixels = [0] * (self.width * self.height)

    def put_pixel(self, x: int, y: int, color: int) -> None:
        """Set one pixel; coordinates outside the image are ignored."""
        if 0 <= x < self.width and 0 <= y < self.height:
            self.pixels[y * self.width + x] = color & 0xFFFFFFFF

    def clear(self) -> None:
        """Set every pixel to black."""
        self.pixels = [0] * (self.width * self.height)


def spawn_player(grid: Sequence[str]) -> Player:
    """Place the player at the centre of the first N, S, E or W cell."""
    for row_index, row in enumerate(grid):
        for col_index, ch in enumerate(row):
            if ch in _DIRECTIONS:
                dir_x, dir_y = _DIRECTIONS[ch]
                return Player(
                    x=(col_index + 1) * SQUARE_SIZE - SQUARE_SIZE // 2,
                    y=(row_index + 1) * SQUARE_SIZE - SQUARE_SIZE // 2,
                    angle=math.atan2(-dir_y, dir_x),
                    facing=ch,
                )
    raise ValueError("no player start in map")


def window_size(grid: Sequence[str]) -> tuple[int, int]:
    """Return the (width, height) in pixels that shows the whole grid."""
    if not grid:
        raise ValueError("empty map")
    return len(grid[0]) * SQUARE_SIZE, len(grid) * SQUARE_SIZE


def _is_wall(grid: Sequence[str], cx: int, cy: int) -> bool:
    if cy < 0 or cx < 0 or cy >= len(grid) or cx >= len(grid[cy]):
        return True
    return grid[cy][cx] == "1"


def _inverse(value: float) -> float:
    return math.inf if value == 0 else abs(1 / value)


def cast_ray(grid: Sequence[str], position: tuple[float, float], angle: float) -> RayHit:
    """Step through grid cells from ``position`` along ``angle`` to the first wall."""
    ray_x = position[0] / SQUARE_SIZE
    ray_y = position[1] / SQUARE_SIZE
    dir_x = math.cos(angle)
    dir_y = -math.sin(angle)
    map_x = int(ray_x)
    map_y = int(ray_y)
    delta_x = _inverse(dir_x)
    delta_y = _inverse(dir_y)

    if dir_x < 0:
        step_x, side_x = -1, (ray_x - map_x) * delta_x
    else:
        step_x, side_x = 1, (map_x + 1.0 - ray_x) * delta_x
    if dir_y < 0:
        step_y, side_y = -1, (ray_y - map_y) * delta_y
    else:
        step_y, side_y = 1, (map_y + 1.0 - ray_y) * delta_y

    while True:
        if side_x < side_y:
            side_x += delta_x
            map_x += step_x
            side = 0
        else:
            side_y += delta_y
            map_y += step_y
            side = 1
        if _is_wall(grid, map_x, map_y):
            break

    if side == 0:
        perp = (map_x - ray_x + (1 - step_x) // 2) / dir_x
    else:
        perp = (map_y - ray_y + (1 - step_y) // 2) / dir_y
    return RayHit(perp * SQUARE_SIZE, side, map_x, map_y)


def _cell(coord: int) -> int:
    return int(coord / SQUARE_SIZE)


def check_area(grid: Sequence[str], x: int, y: int) -> bool:
    """Tell whether a circle of radius RADIUS at pixel (x, y) touches a wall."""
    for px in range(x - RADIUS, x + RADIUS + 1):
        for py in range(y - RADIUS, y + RADIUS + 1):
            if (px - x) ** 2 + (py - y) ** 2 <= RADIUS**2 and _is_wall(grid, _cell(px), _cell(py)):
                return True
    return False


def _try_move(player: Player, grid: Sequence[str], sign: int) -> None:
    test_x = int(player.x + sign * player.move_speed * math.cos(player.angle))
    test_y = int(player.y - sign * player.move_speed * math.sin(player.angle))
    if not check_area(grid, test_x, test_y):
        player.x = test_x
        player.y = test_y


def handle_key(player: Player, grid: Sequence[str], key: int) -> bool:
    """Apply a key press to the player; returns False when the game should quit."""
    if key == Key.ESCAPE:
        return False
    if key == Key.RIGHT:
        player.angle += player.rotation_speed
    if key == Key.LEFT:
        player.angle -= player.rotation_speed
    if key == Key.UP:
        _try_move(player, grid, 1)
    if key == Key.DOWN:
        _try_move(player, grid, -1)
    if player.angle < 0:
        player.angle += 2 * math.pi
    if player.angle > 2 * math.pi:
        player.angle -= 2 * math.pi
    return True


def _texel(texture: Texture, x: int, y: int) -> int:
    if 0 <= x < texture.width and 0 <= y < texture.height:
        return texture.pixel(x, y)
    return 0


def render_scene(
    frame: FrameBuffer,
    grid: Sequence[str],
    player: Player,
    textures: Sequence[Texture],
) -> None:
    """Draw textured wall columns for the player's view into ``frame``."""
    frame.clear()
    height = frame.height
    ray_x = player.x / SQUARE_SIZE
    ray_y = player.y / SQUARE_SIZE
    for x in range(frame.width):
        camera_x = 2 * x / frame.width - 1
        ray_angle = player.angle + camera_x * (FOV / 2)
        dir_x = math.cos(ray_angle)
        dir_y = -math.sin(ray_angle)
        hit = cast_ray(grid, player.position, ray_angle)
        corrected = max(hit.distance * math.cos(ray_angle - player.angle), 1e-9)
        line_height = max(int(SQUARE_SIZE * height / corrected), 1)

        draw_start = max(-(line_height // 2) + height // 2, 0)
        draw_end = min(line_height // 2 + height // 2, height - 1)

        if hit.side == 0:
            wall_x = ray_y + corrected * dir_y
        else:
            wall_x = ray_x + corrected * dir_x
        wall_x -= math.floor(wall_x)

        if hit.side == 0 and dir_x > 0:
            tex_id, wall_x = WEST, 1 - wall_x
        elif hit.side == 0 and dir_x < 0:
            tex_id = EAST
        elif hit.side == 1 and dir_y > 0:
            tex_id = SOUTH
        else:
            tex_id, wall_x = NORTH, 1 - wall_x

        texture = textures[tex_id]
        tex_x = int(wall_x * texture.width)
        for y in range(draw_start, draw_end):
            tex_y = (y - draw_start) * texture.height // line_height
            frame.put_pixel(x, y, _texel(texture, tex_x, tex_y))