# cubcaster

A small first-person raycaster in the classic grid style. It reads a level
from a `.cub` file, loads four XPM wall textures and shows the view from
the player in a pygame window that you can walk around in.

## Installing

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Running

```
cubcaster path/to/level.cub
```

The command takes exactly one argument. Before the window opens it prints a
summary of the parsed level (texture paths, floor and ceiling colours and
the padded map) and the direction the player starts facing.

Controls:

- Up arrow: move forward
- Down arrow: move backward
- Right arrow: turn counter-clockwise; left arrow: turn clockwise
- Escape, or closing the window: quit

The player is a circle of radius 5 pixels; a move is refused if the circle
at the new position would touch a wall. Cells outside the map count as
walls.

On a problem with the level the command writes `Error` and a message to
standard error and exits with the status carried by the `CubError` (65 for
format errors, 66 for files that cannot be opened, 67 or 68 for bad
identifiers, colours or map layout). A wrong number of arguments, or a
texture that cannot be decoded, exits with status 1.

## The `.cub` format

A level starts with six identifiers, each on its own line, in any order,
possibly separated by blank lines:

```
NO ./textures/north.xpm
SO ./textures/south.xpm
WE ./textures/west.xpm
EA ./textures/east.xpm
F 220,100,0
C 225,30,0
```

- Each identifier must be followed by a space or tab and may appear only
  once.
- `NO`, `SO`, `WE`, `EA` name the wall textures; each path must end in
  `.xpm` and the file must be readable.
- `F` and `C` are the floor and ceiling colours as `R,G,B`: three decimal
  values, digits only, each from 0 to 255.

The map comes after the identifiers. Its first line must start with `1`,
`0` or a space, and it may contain no blank lines. It is made only of `0`
(floor), `1` (wall), space, and exactly one of `N`, `S`, `E`, `W` marking
the player's start and facing. Shorter rows are padded with spaces, and
every cell reachable from the player must be enclosed by walls.

```
111111
100101
101001
1100N1
111111
```

## Using it as a library

- `cubcaster.cubfile`
  - `load_cub(path)` checks the name ends in `.cub`, parses and validates
    the level, checks the textures can be opened and returns a `CubConfig`
    (`north`, `south`, `west`, `east`, `floor`, `ceiling`, `grid`).
  - `parse_cub_lines(lines)` does the same from lines in memory, without
    looking at the texture files.
  - `format_information(config)` returns the printed summary.
  - Helpers: `check_filename`, `parse_color`, `atoi_custom`,
    `validate_map_chars`, `normalize_map`, `find_player`, `is_map_closed`.
  - Errors are raised as `CubError`, with `message` and `exit_code`.
- `cubcaster.xpm`
  - `load_xpm(path)`, `parse_xpm_text(text)` and `parse_xpm_lines(lines)`
    decode XPM images into an `XpmImage` (`width`, `height`, `pixels`);
    `pixel(x, y)` returns a 0xAARRGGBB value, with the colour `None` given
    as 0xFF000000.
  - Colours may be `#hex` values or X11 colour names, resolved through
    `cubcaster.colors.lookup_color(name)`; unknown names give black.
  - Malformed or unreadable data raises `XpmError`.
- `cubcaster.raycast`
  - `spawn_player(grid)` returns a `Player`; `window_size(grid)` the window
    size in pixels (32 per cell).
  - `cast_ray(grid, position, angle)` returns a `RayHit` with the
    perpendicular distance and the side hit.
  - `check_area(grid, x, y)` and `handle_key(player, grid, key)` handle
    collision and key presses (`Key` holds the key codes).
  - `render_scene(frame, grid, player, textures)` draws textured wall
    columns into a `FrameBuffer`.
- `cubcaster.game`
  - `Game(config, textures)` ties these together; `press(key)` feeds a key
    and `step()` renders one frame.
  - `load_textures(config)` loads the four textures; `frame_bytes(frame)`
    converts a frame to RGBX bytes; `main(argv=None)` is the command.

## What it does not do

Only the walls are drawn: the floor and ceiling colours are read and
validated but the rest of each frame stays black. There is no minimap, no
mouse look, no sprites or doors, and no sound.