"""The playable game: scene setup, key handling, frame loop and entry point."""

from __future__ import annotations

import sys
from array import array
from collections.abc import Sequence
from typing import TextIO

from cubcaster.cubfile import CubConfig, CubError, format_information, load_cub
from cubcaster.raycast import (
    FrameBuffer,
    Key,
    Player,
    handle_key,
    render_scene,
    spawn_player,
    window_size,
)
from cubcaster.xpm import XpmError, XpmImage, load_xpm

WINDOW_TITLE = "CUB3D"

_FACING_MESSAGES = {"N": "up", "W": "left", "S": "down", "E": "right"}
_KEY_MESSAGES = {
    Key.RIGHT: "left",
    Key.LEFT: "right",
    Key.UP: "forward",
    Key.DOWN: "backward",
}


def load_textures(config: CubConfig) -> list[XpmImage]:
    """Load the wall textures in slot order: north, south, east, west."""
    textures = []
    for path in (config.north, config.south, config.east, config.west):
        try:
            textures.append(load_xpm(path))
        except XpmError as exc:
            raise XpmError(f"failed to load texture {path}") from exc
    return textures


def _clear_player_cell(grid: Sequence[str], player: Player) -> list[str]:
    rows = list(grid)
    for y, row in enumerate(rows):
        x = next((i for i, ch in enumerate(row) if ch in _FACING_MESSAGES), -1)
        if x >= 0:
            rows[y] = row[:x] + "0" + row[x + 1:]
            break
    return rows


class Game:
    """A running scene: the map, the player, the textures and the frame."""

    def __init__(
        self,
        config: CubConfig,
        textures: Sequence[XpmImage],
        out: TextIO | None = None,
    ) -> None:
        if len(textures) != 4:
            raise ValueError("exactly four wall textures are needed")
        self.config = config
        self.textures = list(textures)
        self._out = out
        self.player = spawn_player(config.grid)
        self.grid = _clear_player_cell(config.grid, self.player)
        width, height = window_size(self.grid)
        self.frame = FrameBuffer(width, height)
        self.running = True
        self._say(_FACING_MESSAGES[self.player.facing])

    def _say(self, message: str) -> None:
        print(message, file=self._out if self._out is not None else sys.stdout)

    def step(self) -> FrameBuffer:
        """Render the current view and return the frame."""
        render_scene(self.frame, self.grid, self.player, self.textures)
        return self.frame

    def press(self, key: int) -> bool:
        """Apply a key press; returns whether the game is still running."""
        if key in _KEY_MESSAGES:
            self._say(_KEY_MESSAGES[Key(key)])
        if not handle_key(self.player, self.grid, key):
            self.running = False
        return self.running


def frame_bytes(frame: FrameBuffer) -> bytes:
    """Return the frame as RGBX bytes, row by row."""
    data = array("I", (((pixel & 0xFFFFFF) << 8) for pixel in frame.pixels))
    if sys.byteorder == "little":
        data.byteswap()
    return data.tobytes()


def _run_window(game: Game) -> None:
    import pygame

    key_map = {
        pygame.K_ESCAPE: Key.ESCAPE,
        pygame.K_LEFT: Key.LEFT,
        pygame.K_RIGHT: Key.RIGHT,
        pygame.K_UP: Key.UP,
        pygame.K_DOWN: Key.DOWN,
    }
    size = (game.frame.width, game.frame.height)
    pygame.init()
    try:
        screen = pygame.display.set_mode(size)
        pygame.display.set_caption(WINDOW_TITLE)
        while game.running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    game.running = False
                elif event.type == pygame.KEYDOWN and event.key in key_map:
                    game.press(key_map[event.key])
            if not game.running:
                break
            frame = game.step()
            surface = pygame.image.frombuffer(frame_bytes(frame), size, "RGBX")
            screen.blit(surface, (0, 0))
            pygame.display.flip()
    finally:
        pygame.quit()


def main(argv: Sequence[str] | None = None) -> int:
    """Load a scene file given on the command line and play it in a window."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print("Error\nUsage: cubcaster <map.cub>", file=sys.stderr)
        return 1
    try:
        config = load_cub(args[0])
    except CubError as exc:
        print(f"Error\n{exc.message}", file=sys.stderr)
        return exc.exit_code
    sys.stdout.write(format_information(config))
    try:
        textures = load_textures(config)
    except XpmError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    _run_window(Game(config, textures))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())