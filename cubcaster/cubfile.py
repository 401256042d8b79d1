"""Reading and validating ``.cub`` scene description files."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

PLAYER_CHARS = frozenset("NSEW")
MAP_CHARS = frozenset("NSEW 10\n")
_MAP_START = frozenset("10 ")
_IDENTIFIERS = ("NO", "SO", "WE", "EA", "F", "C")
_TEXTURE_KEYS = ("NO", "SO", "WE", "EA")
_C_WHITESPACE = " \t\n\v\f\r"


class CubError(Exception):
    """A problem with a scene file; ``exit_code`` is the status to exit with."""

    def __init__(self, message: str, exit_code: int) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


@dataclass
class CubConfig:
    """A parsed scene: texture paths, floor and ceiling colours and the map."""

    north: str
    south: str
    west: str
    east: str
    floor: tuple[int, int, int]
    ceiling: tuple[int, int, int]
    grid: list[str] = field(default_factory=list)


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def atoi_custom(text: str) -> int:
    """Read a leading integer the way the scene parser does.

    Leading whitespace is skipped, one sign is accepted, digits accumulate
    with 32-bit wrap-around and reading stops at the first other character.
    Values too large for a signed 32-bit int give -2000 (positive) or 2000
    (negative).
    """
    num = 0
    found = False
    sign = 1
    for ch in text:
        if _is_digit(ch):
            found = True
            num = (num * 10 + ord(ch) - ord("0")) & 0xFFFFFFFF
        elif ch in "+-" and not found:
            found = True
            sign = -1 if ch == "-" else 1
        elif found or ch not in _C_WHITESPACE:
            break
    if sign == 1 and num > 0x7FFFFFFF:
        return -2000
    if sign == -1 and num > 0x80000000:
        return 2000
    value = (num * sign) & 0xFFFFFFFF
    return value - (1 << 32) if value >= (1 << 31) else value


def check_filename(name: str | None) -> str:
    """Return ``name`` if it names a ``.cub`` file, else raise CubError."""
    if name is None:
        raise CubError("No filename provided", 65)
    if len(name) < 5 or not name.endswith(".cub"):
        raise CubError("Invalid file name. Must end with .cub", 65)
    return name


def parse_color(text: str) -> tuple[int, int, int]:
    """Parse ``R,G,B`` with each component a decimal number from 0 to 255."""
    parts = [part for part in text.split(",") if part]
    if len(parts) != 3:
        raise CubError("Invalid color format (must be R,G,B)", 67)
    if not all(_is_digit(ch) for part in parts for ch in part):
        raise CubError("Color values must a digit!!!", 68)
    values = []
    for part in parts:
        value = atoi_custom(part)
        if not 0 <= value <= 255:
            raise CubError("Color values must be between 0 and 255", 68)
        values.append(value)
    return values[0], values[1], values[2]


def validate_map_chars(rows: Iterable[str]) -> list[str]:
    """Return the rows if they hold only map characters, else raise CubError."""
    checked = list(rows)
    if any(ch not in MAP_CHARS for row in checked for ch in row):
        raise CubError("Data format error (bad input file, corrupted data)", 65)
    return checked


def normalize_map(rows: Iterable[str]) -> list[str]:
    """Pad every row with spaces to the length of the longest row."""
    rows = list(rows)
    width = max((len(row) for row in rows), default=0)
    return [row.ljust(width) for row in rows]


def find_player(rows: Iterable[str]) -> tuple[int, int]:
    """Return the (x, y) cell of the single player start."""
    position: tuple[int, int] | None = None
    for y, row in enumerate(rows):
        for x, ch in enumerate(row):
            if ch in PLAYER_CHARS:
                if position is not None:
                    raise CubError("Multiple player positions", 65)
                position = (x, y)
    if position is None:
        raise CubError("No player found in map", 65)
    return position


def is_map_closed(rows: Iterable[str], x: int, y: int) -> bool:
    """Tell whether the area reachable from (x, y) is enclosed by walls.

    The fill escapes when it reaches a space or leaves the map.
    """
    grid = [list(row) for row in rows]
    closed = True
    pending = [(x, y)]
    while pending:
        cx, cy = pending.pop()
        if cy < 0 or cx < 0 or cy >= len(grid) or cx >= len(grid[cy]) or grid[cy][cx] == " ":
            closed = False
            continue
        if grid[cy][cx] in ("1", "F"):
            continue
        grid[cy][cx] = "F"
        pending.extend(((cx + 1, cy), (cx - 1, cy), (cx, cy + 1), (cx, cy - 1)))
    return closed


def _is_empty(line: str) -> bool:
    return line == "" or line[0] == "\n"


def _is_identifier(line: str, key: str) -> bool:
    return line.startswith(key) and line[len(key):len(key) + 1] in (" ", "\t")


def _save_identifier(found: dict[str, str], line: str) -> None:
    for key in _IDENTIFIERS:
        if _is_identifier(line, key) and key not in found:
            found[key] = line[len(key):]
            return
    raise CubError("Duplicate or invalid identifier in .cub file", 67)


def _trim_after_key(text: str) -> str:
    i = 0
    while i < len(text) and text[i] != " ":
        i += 1
    while i < len(text) and text[i] == " ":
        i += 1
    return text[i:]


def _trim_until_digit(text: str) -> str:
    i = 0
    while i < len(text) and not _is_digit(text[i]):
        i += 1
    return text[i:]


def _chop_newline(text: str) -> str:
    return text[:-1] if text.endswith("\n") else text


@dataclass
class _Layout:
    fields: dict[str, str]
    grid: list[str]


def _read_sections(source: Iterator[str]) -> _Layout:
    fields: dict[str, str] = {}
    found = 0
    line = next(source, None)
    while line is not None:
        if _is_empty(line):
            line = next(source, None)
            continue
        _save_identifier(fields, line)
        found += 1
        line = next(source, None)
        if found == 6 or line is None or line[:1] in _MAP_START:
            break
    if found < 6:
        raise CubError("Missing one or more identifiers (NO, SO, WE, EA, F, C)", 68)
    while line is not None and _is_empty(line):
        line = next(source, None)
    if line is None or line[:1] not in _MAP_START:
        raise CubError("Missing the map or invalid map", 68)
    grid: list[str] = []
    while line is not None:
        if _is_empty(line):
            raise CubError("Invalid empty line inside map", 68)
        grid.append(line)
        line = next(source, None)
    return _Layout(fields, grid)


def _read_layout(lines: Iterable[str]) -> _Layout:
    layout = _read_sections(iter(lines))
    fields = {
        key: _chop_newline(_trim_after_key(value) if key in _TEXTURE_KEYS else _trim_until_digit(value))
        for key, value in layout.fields.items()
    }
    grid = validate_map_chars(_chop_newline(row) for row in layout.grid)
    if not grid:
        raise CubError("No map found", 65)
    grid = normalize_map(grid)
    x, y = find_player(grid)
    if not is_map_closed(grid, x, y):
        raise CubError("Map is not closed", 65)
    return _Layout(fields, grid)


def _check_textures_readable(layout: _Layout) -> None:
    for key in _TEXTURE_KEYS:
        try:
            with open(layout.fields[key], "rb"):
                pass
        except OSError:
            raise CubError(f"Failed to open {key} texture", 66) from None


def _finish(layout: _Layout) -> CubConfig:
    fields = layout.fields
    if not all(len(fields[key]) >= 4 and fields[key].endswith(".xpm") for key in _TEXTURE_KEYS):
        raise CubError("Texture path must end with .xpm", 65)
    floor = parse_color(fields["F"])
    ceiling = parse_color(fields["C"])
    return CubConfig(
        north=fields["NO"],
        south=fields["SO"],
        west=fields["WE"],
        east=fields["EA"],
        floor=floor,
        ceiling=ceiling,
        grid=layout.grid,
    )


def parse_cub_lines(lines: Iterable[str]) -> CubConfig:
    """Parse and validate scene lines without checking texture files exist."""
    return _finish(_read_layout(lines))


def load_cub(path: str | Path) -> CubConfig:
    """Read, validate and parse the scene file at ``path``."""
    name = check_filename(None if path is None else str(path))
    try:
        with open(name, encoding="latin-1", newline="") as handle:
            lines = handle.read().splitlines(keepends=True)
    except OSError:
        raise CubError("Cannot open input (file not found / permission denied)", 66) from None
    layout = _read_layout(lines)
    _check_textures_readable(layout)
    return _finish(layout)


def format_information(config: CubConfig) -> str:
    """Return a human-readable summary of a parsed scene."""
    out = [
        "=== Parsed Information ===",
        f"NO: {config.north}",
        f"SO: {config.south}",
        f"WE: {config.west}",
        f"EA: {config.east}",
        "Floor   -> R:{} G:{} B:{}".format(*config.floor),
        "Ceiling -> R:{} G:{} B:{}".format(*config.ceiling),
        "==========================",
        "=== Map ===",
        *config.grid,
        "",
        "==========================",
    ]
    return "\n".join(out) + "\n"