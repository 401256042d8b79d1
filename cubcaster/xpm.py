"""Reading XPM images into 32-bit pixel arrays."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from cubcaster.colors import lookup_color

TRANSPARENT = 0xFF000000
"""Pixel value used for the colour ``None``."""

_WORD_SEPARATORS = re.compile(r"[ \t]+")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_LEADING_HEX = re.compile(r"[0-9a-fA-F]+")
_MAX_NAME = 63


class XpmError(ValueError):
    """Raised when XPM data cannot be read or is malformed."""


@dataclass(frozen=True)
class XpmImage:
    """A decoded image: ``pixels`` holds 0xAARRGGBB values row by row."""

    width: int
    height: int
    pixels: tuple[int, ...]

    def pixel(self, x: int, y: int) -> int:
        """Return the pixel value at column ``x`` of row ``y``."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} image")
        return self.pixels[y * self.width + x]


def split_words(text: str) -> list[str]:
    """Split ``text`` into words separated by spaces and tabs."""
    return [word for word in _WORD_SEPARATORS.split(text) if word]


def find_unquoted(text: str, needle: str) -> int:
    """Return the index of ``needle`` outside double quotes, or -1."""
    if not needle or len(needle) > len(text):
        return -1
    quoted = False
    for pos in range(len(text) - len(needle) + 1):
        if text[pos] == '"':
            quoted = not quoted
        if not quoted and text.startswith(needle, pos):
            return pos
    return -1


def _blank(text: str, start: int, end: int) -> str:
    return text[:start] + " " * (end - start) + text[end:]


def strip_comments(text: str) -> str:
    """Replace C and C++ comments outside quotes by spaces, keeping the length."""
    while (begin := find_unquoted(text, "/*")) != -1:
        close = text.find("*/", begin + 2)
        end = len(text) if close == -1 else close + 2
        text = _blank(text, begin, end)
    while (begin := find_unquoted(text, "//")) != -1:
        newline = text.find("\n", begin + 2)
        end = len(text) if newline == -1 else newline + 1
        text = _blank(text, begin, end)
    return text


def extract_quoted_strings(text: str) -> list[str]:
    """Return the contents of successive double-quoted strings in ``text``."""
    strings: list[str] = []
    pos = 0
    while (opening := text.find('"', pos)) != -1:
        closing = text.find('"', opening + 1)
        if closing == -1:
            break
        strings.append(text[opening + 1:closing])
        pos = closing + 1
    return strings


def parse_text_rgb(name: str, end: str | None) -> int:
    """Resolve a colour specification to 0xRRGGBB; ``none`` gives -1.

    ``#hex`` values are read as hexadecimal. Otherwise ``name`` and ``end``
    are joined with a space and looked up by name; unknown names give 0.
    """
    if name.startswith("#"):
        match = _LEADING_HEX.match(name, 1)
        return int(match.group(), 16) if match else 0
    if end is not None:
        name = f"{name} {end}"[:_MAX_NAME]
    value = lookup_color(name)
    return 0 if value is None else value


def _atoi(word: str) -> int:
    match = _LEADING_INT.match(word)
    return int(match.group(1)) if match else 0


def _next_line(lines: Iterator[str], what: str) -> str:
    try:
        return next(lines)
    except StopIteration:
        raise XpmError(f"unexpected end of XPM data while reading {what}") from None


def parse_xpm_lines(lines: Iterable[str]) -> XpmImage:
    """Decode an image from XPM strings: header, colour lines, then pixel rows."""
    source = iter(lines)
    header = split_words(_next_line(source, "the header"))
    if len(header) < 4:
        raise XpmError("XPM header needs width, height, colour count and chars per pixel")
    width, height, ncolors, cpp = (_atoi(word) for word in header[:4])
    if min(width, height, ncolors, cpp) <= 0:
        raise XpmError("XPM header values must be positive")

    direct = cpp <= 2
    palette: dict[str, int] = {}
    for _ in range(ncolors):
        line = _next_line(source, "the colour table")
        words = split_words(line[cpp:])
        try:
            spec_index = words.index("c") + 1
        except ValueError:
            raise XpmError(f"colour line without a 'c' entry: {line!r}") from None
        if spec_index >= len(words):
            raise XpmError(f"colour line without a colour after 'c': {line!r}")
        end = words[spec_index + 1] if spec_index + 1 < len(words) else None
        rgb = parse_text_rgb(words[spec_index], end)
        key = line[:cpp]
        if direct:
            palette[key] = rgb
        else:
            palette.setdefault(key, rgb)

    pixels: list[int] = []
    for _ in range(height):
        row = _next_line(source, "the pixel rows")
        for x in range(width):
            color = palette.get(row[cpp * x:cpp * (x + 1)], 0) & 0xFFFFFFFF
            pixels.append(TRANSPARENT if color == 0xFFFFFFFF else color)
    return XpmImage(width, height, tuple(pixels))


def parse_xpm_text(text: str) -> XpmImage:
    """Decode an image from the text of an XPM file."""
    return parse_xpm_lines(extract_quoted_strings(strip_comments(text)))


def load_xpm(path: str | Path) -> XpmImage:
    """Read and decode the XPM file at ``path``."""
    try:
        text = Path(path).read_text(encoding="latin-1")
    except OSError as exc:
        raise XpmError(f"cannot read {path}: {exc}") from exc
    return parse_xpm_text(text)