"""Tests for color parsing and conversion."""

import io

import pytest

from termtheme.errors import InvalidColorFormat
from termtheme.theme_engine.colors import (
    RESET,
    ansi_to_rgb,
    calculate_contrast_ratio,
    color_to_ansi,
    detect_terminal_capability,
    hex_to_rgb,
    meets_wcag_contrast,
    parse_color,
    rgb_to_ansi16,
    rgb_to_ansi256,
    rgb_to_hex,
    validate_color_accessibility,
)
from termtheme.theme_engine.named_colors import NamedColorRegistry
from termtheme.theme_engine.schema import ColorDefinition, Palette, TerminalCapability, rgb


class TestAnsiToRgb:
    """Test the 256-color palette mapping."""

    @pytest.mark.parametrize("index,expected", [
        (0, (0, 0, 0)),
        (1, (128, 0, 0)),
        (7, (192, 192, 192)),
        (8, (128, 128, 128)),
        (15, (255, 255, 255)),
        (16, (0, 0, 0)),
        (17, (0, 0, 95)),
        (196, (255, 0, 0)),
        (231, (255, 255, 255)),
        (232, (8, 8, 8)),
        (244, (128, 128, 128)),
        (255, (238, 238, 238)),
    ])
    def test_boundaries(self, index, expected):
        assert ansi_to_rgb(index) == expected

    @pytest.mark.parametrize("index", [-1, 256, True, 3.0, "7"])
    def test_rejects_out_of_range(self, index):
        with pytest.raises(InvalidColorFormat):
            ansi_to_rgb(index)


class TestHex:
    """Test hex conversion helpers."""

    def test_with_and_without_hash(self):
        assert hex_to_rgb("#FF8000") == (255, 128, 0)
        assert hex_to_rgb("ff8000") == (255, 128, 0)

    @pytest.mark.parametrize("value", [
        "#FFF", "#12345", "#1234567", "#GG0000", "", "##123456", "#ff0000\n", "ff0000\n",
    ])
    def test_invalid(self, value):
        with pytest.raises(InvalidColorFormat):
            hex_to_rgb(value)

    def test_rgb_to_hex_is_lowercase(self):
        assert rgb_to_hex(255, 171, 0) == "#ffab00"


class TestParseColor:
    """Test parsing of every color input shape."""

    def test_each_shape(self):
        assert parse_color({"hex": "#0a0b0c"}) == rgb(10, 11, 12)
        assert parse_color({"rgb": [1, 2, 3]}) == rgb(1, 2, 3)
        assert parse_color({"r": 4, "g": 5, "b": 6}) == rgb(4, 5, 6)
        assert parse_color({"ansi": 196}) == rgb(255, 0, 0)

    @pytest.mark.parametrize("value, expected", [
        ("#000000", (0, 0, 0)),
        ("ffffff", (255, 255, 255)),
        ("#0A0B0C", (10, 11, 12)),
        ("0a0b0c", (10, 11, 12)),
        ("#7F80fe", (127, 128, 254)),
        ("c0ffee", (192, 255, 238)),
    ])
    def test_hex_matches_channels(self, value, expected):
        r, g, b = expected
        assert parse_color({"hex": value}) == parse_color({"r": r, "g": g, "b": b})

    def test_trailing_newline_hex(self):
        with pytest.raises(InvalidColorFormat):
            parse_color({"hex": "ff0000\n"})

    def test_named_reference(self):
        registry = NamedColorRegistry()
        registry.register("brand", rgb(1, 2, 3))
        assert parse_color({"name": "brand"}, registry) == rgb(1, 2, 3)

    def test_unknown_named_reference(self):
        with pytest.raises(InvalidColorFormat, match="unknown named color 'missing'"):
            parse_color({"name": "missing"}, NamedColorRegistry(), label="primary")

    def test_no_shape(self):
        with pytest.raises(InvalidColorFormat, match="at least one valid format"):
            parse_color({})

    def test_multiple_shapes(self):
        with pytest.raises(InvalidColorFormat, match="multiple color formats"):
            parse_color({"hex": "#000000", "ansi": 1})

    def test_label_in_message(self):
        with pytest.raises(InvalidColorFormat) as exc_info:
            parse_color({"rgb": [1, 2, 300]}, label="accent")
        assert exc_info.value.label == "accent"
        assert "Color 'accent'" in str(exc_info.value)

    def test_bool_is_not_a_channel(self):
        with pytest.raises(InvalidColorFormat):
            parse_color({"r": True, "g": 0, "b": 0})

    def test_partial_rgb_object(self):
        with pytest.raises(InvalidColorFormat, match="r, g, b must all be numbers"):
            parse_color({"r": 1, "g": 2})

    def test_not_a_mapping(self):
        with pytest.raises(InvalidColorFormat):
            parse_color("#ffffff")


class TestDowngrades:
    """Test nearest-color lookup for limited terminals."""

    def test_exact_cube_color(self):
        assert rgb_to_ansi256(255, 0, 0) == 196
        assert rgb_to_ansi256(0, 0, 0) == 16

    def test_gray_uses_ramp(self):
        assert rgb_to_ansi256(128, 128, 128) == 244

    def test_ansi16(self):
        assert rgb_to_ansi16(250, 5, 5) == 9
        assert rgb_to_ansi16(0, 0, 0) == 0
        assert rgb_to_ansi16(190, 190, 190) == 7


class TestColorToAnsi:
    """Test escape sequence generation."""

    def setup_method(self):
        self.color = ColorDefinition(r=255, g=0, b=0)

    def test_truecolor(self):
        assert color_to_ansi(self.color) == "\x1b[38;2;255;0;0m"
        assert color_to_ansi(self.color, background=True) == "\x1b[48;2;255;0;0m"

    def test_256(self):
        assert color_to_ansi(self.color, False, TerminalCapability.COLOR_256) == "\x1b[38;5;196m"
        assert color_to_ansi(self.color, True, "256") == "\x1b[48;5;196m"

    def test_16(self):
        assert color_to_ansi(self.color, False, TerminalCapability.COLOR_16) == "\x1b[91m"
        assert color_to_ansi(self.color, True, TerminalCapability.COLOR_16) == "\x1b[101m"
        dark_red = ColorDefinition(r=128, g=0, b=0)
        assert color_to_ansi(dark_red, False, TerminalCapability.COLOR_16) == "\x1b[31m"

    def test_monochrome(self):
        white = ColorDefinition(r=250, g=250, b=250)
        assert color_to_ansi(white, False, TerminalCapability.MONOCHROME) == "\x1b[37m"
        assert color_to_ansi(self.color, True, TerminalCapability.MONOCHROME) == "\x1b[40m"

    def test_reset(self):
        assert RESET == "\x1b[0m"


class FakeTTY(io.StringIO):
    def isatty(self):
        return True


class TestDetectTerminalCapability:
    """Test environment-based capability detection."""

    def test_not_a_tty(self):
        assert detect_terminal_capability(io.StringIO(), {"COLORTERM": "truecolor"}) == \
            TerminalCapability.MONOCHROME

    def test_truecolor(self):
        assert detect_terminal_capability(FakeTTY(), {"COLORTERM": "truecolor"}) == \
            TerminalCapability.TRUECOLOR

    def test_256(self):
        assert detect_terminal_capability(FakeTTY(), {"TERM": "xterm-256color"}) == \
            TerminalCapability.COLOR_256

    def test_16(self):
        assert detect_terminal_capability(FakeTTY(), {"TERM": "xterm"}) == \
            TerminalCapability.COLOR_16

    def test_no_color(self):
        env = {"NO_COLOR": "1", "COLORTERM": "truecolor"}
        assert detect_terminal_capability(FakeTTY(), env) == TerminalCapability.MONOCHROME


class TestContrast:
    """Test WCAG contrast helpers."""

    def test_black_on_white(self):
        ratio = calculate_contrast_ratio(rgb(0, 0, 0), rgb(255, 255, 255))
        assert ratio == pytest.approx(21.0)
        assert meets_wcag_contrast(rgb(0, 0, 0), rgb(255, 255, 255), "AAA")

    def test_same_color(self):
        assert calculate_contrast_ratio(rgb(10, 20, 30), rgb(10, 20, 30)) == pytest.approx(1.0)

    def test_default_palette_is_readable(self):
        warnings = validate_color_accessibility(Palette())
        assert not any("text and background" in w for w in warnings)

    def test_low_contrast_reported(self):
        palette = Palette(text=rgb(20, 20, 20), background=rgb(0, 0, 0))
        warnings = validate_color_accessibility(palette)
        assert any("Low contrast between text and background" in w for w in warnings)
