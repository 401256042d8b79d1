import pytest

from cubcaster.xpm import (
    XpmError,
    XpmImage,
    extract_quoted_strings,
    find_unquoted,
    load_xpm,
    parse_text_rgb,
    parse_xpm_lines,
    parse_xpm_text,
    split_words,
    strip_comments,
)

SAMPLE = """/* XPM */
static char *img[] = {
/* columns rows colors chars-per-pixel */
"2 2 2 1",
". c #FF0000",
"# c blue",
".#",
"#.",
};
"""


def test_split_words_spaces_and_tabs():
    assert split_words("  a\tb  c ") == ["a", "b", "c"]


def test_split_words_empty():
    assert split_words(" \t ") == []


def test_find_unquoted_skips_quoted_text():
    text = 'ab"/*"/*'
    pos = find_unquoted(text, "/*")
    assert pos == text.rindex("/*")


def test_find_unquoted_missing():
    assert find_unquoted('"//"', "//") == -1


def test_find_unquoted_needle_longer_than_text():
    assert find_unquoted("a", "abc") == -1


def test_strip_comments_block_keeps_length():
    text = 'x /* gone */ "keep"'
    result = strip_comments(text)
    assert len(result) == len(text)
    assert "gone" not in result
    assert result.endswith('"keep"')


def test_strip_comments_leaves_quoted_markers():
    text = '"a/*b*/c"'
    assert strip_comments(text) == text


def test_strip_comments_line_comment():
    text = "x // hi\ny"
    result = strip_comments(text)
    assert len(result) == len(text)
    assert "hi" not in result
    assert result.startswith("x") and result.endswith("y")


def test_extract_quoted_strings():
    assert extract_quoted_strings('{"one", "two",\n"three"}') == ["one", "two", "three"]


def test_extract_quoted_strings_ignores_unterminated():
    assert extract_quoted_strings('"a" "b') == ["a"]


def test_parse_text_rgb_hex():
    assert parse_text_rgb("#FF0000", None) == 0xFF0000


def test_parse_text_rgb_hex_ignores_end():
    assert parse_text_rgb("#0000ff", "anything") == 0x0000FF


def test_parse_text_rgb_named_two_words():
    assert parse_text_rgb("dark", "green") == 0x6400


def test_parse_text_rgb_case_insensitive():
    assert parse_text_rgb("RED", None) == parse_text_rgb("red", None) == 0xFF0000


def test_parse_text_rgb_unknown_is_zero():
    assert parse_text_rgb("nosuchcolour", None) == 0


def test_parse_text_rgb_none_is_minus_one():
    assert parse_text_rgb("None", None) == -1


def test_parse_xpm_text_sample():
    image = parse_xpm_text(SAMPLE)
    assert (image.width, image.height) == (2, 2)
    assert image.pixel(0, 0) == 0xFF0000
    assert image.pixel(1, 0) == 0xFF
    assert image.pixel(0, 1) == 0xFF
    assert image.pixel(1, 1) == 0xFF0000
    assert len(image.pixels) == image.width * image.height


def test_pixel_out_of_range():
    image = parse_xpm_text(SAMPLE)
    with pytest.raises(IndexError):
        image.pixel(2, 0)
    with pytest.raises(IndexError):
        image.pixel(-1, 0)


def test_none_colour_is_transparent():
    image = parse_xpm_lines(["1 1 1 2", "ab c None", "ab"])
    assert image.pixels == (0xFF000000,)


def test_direct_palette_last_definition_wins():
    image = parse_xpm_lines(["1 1 2 1", "a c #000001", "a c #000002", "a"])
    assert image.pixel(0, 0) == 0x000002


def test_wide_palette_first_definition_wins():
    image = parse_xpm_lines(["1 1 2 3", "abc c #000001", "abc c #000002", "abc"])
    assert image.pixel(0, 0) == 0x000001


def test_undefined_key_gives_zero():
    image = parse_xpm_lines(["2 1 1 1", "a c #FFFFFF", "az"])
    assert image.pixels == (0xFFFFFF, 0)


def test_header_with_zero_width():
    with pytest.raises(XpmError):
        parse_xpm_lines(["0 1 1 1", "a c red", "a"])


def test_header_too_short():
    with pytest.raises(XpmError):
        parse_xpm_lines(["1 1 1"])


def test_colour_line_without_c():
    with pytest.raises(XpmError):
        parse_xpm_lines(["1 1 1 1", "a m red", "a"])


def test_missing_rows():
    with pytest.raises(XpmError):
        parse_xpm_lines(["1 2 1 1", "a c red", "a"])


def test_empty_input():
    with pytest.raises(XpmError):
        parse_xpm_lines([])


def test_load_xpm_round_trip(tmp_path):
    path = tmp_path / "wall.xpm"
    path.write_text(SAMPLE)
    assert load_xpm(path) == parse_xpm_text(SAMPLE)


def test_load_xpm_missing_file(tmp_path):
    with pytest.raises(XpmError):
        load_xpm(tmp_path / "absent.xpm")


def test_image_equality_by_value():
    image = parse_xpm_lines(["1 1 1 1", "a c #123456", "a"])
    assert image == XpmImage(1, 1, (0x123456,))