"""Color parsing, conversion and terminal escape sequence utilities.

This module turns color inputs from theme documents into ``ColorDefinition``
values, maps between RGB and the 256/16 color terminal palettes, detects
what the current terminal supports and computes WCAG contrast ratios.
"""

import os
import re
import sys
from typing import Any, Dict, List, Mapping, Optional, Tuple, TYPE_CHECKING

from ..errors import InvalidColorFormat, NotFound
from .schema import ColorDefinition, Palette, TerminalCapability

if TYPE_CHECKING:
    from .named_colors import NamedColorRegistry


RESET = "\x1b[0m"

COLOR_SHAPES = ("hex", "rgb", "r/g/b", "ansi", "name")

_HEX_RE = re.compile(r"#?[0-9A-Fa-f]{6}")

# Standard xterm values for indices 0-15
ANSI_STANDARD_COLORS: List[Tuple[int, int, int]] = [
    (0, 0, 0),
    (128, 0, 0),
    (0, 128, 0),
    (128, 128, 0),
    (0, 0, 128),
    (128, 0, 128),
    (0, 128, 128),
    (192, 192, 192),
    (128, 128, 128),
    (255, 0, 0),
    (0, 255, 0),
    (255, 255, 0),
    (0, 0, 255),
    (255, 0, 255),
    (0, 255, 255),
    (255, 255, 255),
]

_CUBE_LEVELS = (0, 95, 135, 175, 215, 255)


def detect_terminal_capability(stream=None, environ: Optional[Mapping[str, str]] = None) -> TerminalCapability:
    """Detect the color capability of the current terminal.

    Args:
        stream: Output stream to check for a TTY (defaults to stdout)
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        TerminalCapability enum indicating color support level
    """
    stream = stream if stream is not None else sys.stdout
    environ = environ if environ is not None else os.environ

    if environ.get("NO_COLOR"):
        return TerminalCapability.MONOCHROME

    # Check if we're in a TTY
    isatty = getattr(stream, "isatty", None)
    if not (isatty and isatty()):
        return TerminalCapability.MONOCHROME

    colorterm = environ.get("COLORTERM", "").lower()
    term = environ.get("TERM", "").lower()

    if "truecolor" in colorterm or "24bit" in colorterm:
        return TerminalCapability.TRUECOLOR

    if "256" in term:
        return TerminalCapability.COLOR_256

    if "color" in term or term in ("xterm", "screen", "tmux", "linux"):
        return TerminalCapability.COLOR_16

    return TerminalCapability.MONOCHROME


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color to RGB tuple.

    Args:
        hex_color: Hex color string (e.g., '#FF0000' or 'FF0000')

    Returns:
        RGB tuple (r, g, b) with values 0-255

    Raises:
        InvalidColorFormat: If hex_color is not exactly six hex digits
    """
    if not isinstance(hex_color, str) or not _HEX_RE.fullmatch(hex_color):
        raise InvalidColorFormat(
            f"invalid hex format '{hex_color}' - must be #RRGGBB or RRGGBB"
        )
    digits = hex_color.lstrip("#")
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Convert RGB values to a lowercase hex string with # prefix."""
    return f"#{r:02x}{g:02x}{b:02x}"


def ansi_to_rgb(index: int) -> Tuple[int, int, int]:
    """Convert a 256-color palette index to RGB.

    Indices 0-15 use the standard table, 16-231 the 6x6x6 color cube and
    232-255 the grayscale ramp.

    Raises:
        InvalidColorFormat: If index is not an int in 0-255
    """
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index <= 255:
        raise InvalidColorFormat(f"invalid ANSI code {index!r} - must be 0-255")

    if index < 16:
        return ANSI_STANDARD_COLORS[index]

    if index < 232:
        idx = index - 16
        r, g, b = idx // 36, (idx % 36) // 6, idx % 6
        return (_cube_value(r), _cube_value(g), _cube_value(b))

    gray = (index - 232) * 10 + 8
    return (gray, gray, gray)


def _cube_value(level: int) -> int:
    return 0 if level == 0 else 55 + 40 * level


def _distance(a: Tuple[int, int, int], b: Tuple[int, int, int]) -> int:
    return (a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2 + (a[2] - b[2]) ** 2


def _nearest_level(value: int) -> int:
    return min(range(6), key=lambda i: abs(_CUBE_LEVELS[i] - value))


def rgb_to_ansi256(r: int, g: int, b: int) -> int:
    """Find the nearest color in the 256-color palette.

    Both the color cube (16-231) and the grayscale ramp (232-255) are
    considered; the closer candidate wins, ties going to the cube.
    """
    levels = (_nearest_level(r), _nearest_level(g), _nearest_level(b))
    cube_index = 16 + 36 * levels[0] + 6 * levels[1] + levels[2]
    cube_rgb = ansi_to_rgb(cube_index)

    gray = (r + g + b) // 3
    gray_step = min(23, max(0, round((gray - 8) / 10)))
    gray_index = 232 + gray_step
    gray_rgb = ansi_to_rgb(gray_index)

    target = (r, g, b)
    if _distance(target, gray_rgb) < _distance(target, cube_rgb):
        return gray_index
    return cube_index


def rgb_to_ansi16(r: int, g: int, b: int) -> int:
    """Find the nearest of the 16 standard colors, returned as index 0-15."""
    target = (r, g, b)
    return min(range(16), key=lambda i: _distance(target, ANSI_STANDARD_COLORS[i]))


def color_to_ansi(
    color: ColorDefinition,
    background: bool = False,
    capability: TerminalCapability = TerminalCapability.TRUECOLOR,
) -> str:
    """Build the escape sequence that selects ``color``.

    Args:
        color: Color to emit
        background: Emit a background sequence instead of a foreground one
        capability: Target terminal capability; colors are downgraded to fit

    Returns:
        ANSI escape sequence string
    """
    capability = TerminalCapability(capability)
    r, g, b = color.as_tuple()

    if capability == TerminalCapability.TRUECOLOR:
        return f"\x1b[{48 if background else 38};2;{r};{g};{b}m"

    if capability == TerminalCapability.COLOR_256:
        return f"\x1b[{48 if background else 38};5;{rgb_to_ansi256(r, g, b)}m"

    if capability == TerminalCapability.COLOR_16:
        index = rgb_to_ansi16(r, g, b)
        if index < 8:
            code = (40 if background else 30) + index
        else:
            code = (100 if background else 90) + index - 8
        return f"\x1b[{code}m"

    # Monochrome: black or white only
    light = (r + g + b) // 3 > 128
    if background:
        return "\x1b[47m" if light else "\x1b[40m"
    return "\x1b[37m" if light else "\x1b[30m"


def present_shapes(data: Mapping[str, Any]) -> List[str]:
    """List which color input shapes a mapping declares."""
    shapes = []
    if "hex" in data:
        shapes.append("hex")
    if "rgb" in data:
        shapes.append("rgb")
    if any(key in data for key in ("r", "g", "b")):
        shapes.append("r/g/b")
    if "ansi" in data:
        shapes.append("ansi")
    if "name" in data:
        shapes.append("name")
    return shapes


def _channel(value: Any, channel: str, label: Optional[str]) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 255:
        raise InvalidColorFormat(f"invalid {channel} value {value!r} - must be 0-255", label)
    return value


def parse_color(
    data: Any,
    registry: Optional["NamedColorRegistry"] = None,
    label: Optional[str] = None,
) -> ColorDefinition:
    """Parse a color input into a ``ColorDefinition``.

    Exactly one of ``hex``, ``rgb``, ``r``/``g``/``b``, ``ansi`` or ``name``
    must be present. Named references are looked up in ``registry``.

    Raises:
        InvalidColorFormat: On a missing, ambiguous or malformed shape, or an
            unknown named reference
    """
    if not isinstance(data, Mapping):
        raise InvalidColorFormat("color must be an object", label)

    shapes = present_shapes(data)
    if not shapes:
        raise InvalidColorFormat(
            "must have at least one valid format (hex, rgb array, r/g/b object, ansi, or name)",
            label,
        )
    if len(shapes) > 1:
        raise InvalidColorFormat(
            "multiple color formats specified - use only one format per color", label
        )

    shape = shapes[0]
    if shape == "hex":
        try:
            r, g, b = hex_to_rgb(data["hex"])
        except InvalidColorFormat as e:
            raise InvalidColorFormat(str(e), label) from e
        return ColorDefinition(r=r, g=g, b=b)

    if shape == "rgb":
        values = data["rgb"]
        if not isinstance(values, (list, tuple)):
            raise InvalidColorFormat("rgb must be an array", label)
        if len(values) != 3:
            raise InvalidColorFormat("rgb array must have exactly 3 values", label)
        r, g, b = (_channel(v, c, label) for v, c in zip(values, ("red", "green", "blue")))
        return ColorDefinition(r=r, g=g, b=b)

    if shape == "r/g/b":
        missing = [key for key in ("r", "g", "b") if key not in data]
        if missing:
            raise InvalidColorFormat("r, g, b must all be numbers", label)
        return ColorDefinition(
            r=_channel(data["r"], "red", label),
            g=_channel(data["g"], "green", label),
            b=_channel(data["b"], "blue", label),
        )

    if shape == "ansi":
        try:
            r, g, b = ansi_to_rgb(data["ansi"])
        except InvalidColorFormat as e:
            raise InvalidColorFormat(str(e), label) from e
        return ColorDefinition(r=r, g=g, b=b)

    alias = data["name"]
    if not isinstance(alias, str) or not alias.strip():
        raise InvalidColorFormat("name must be a non-empty string", label)
    if registry is None:
        raise InvalidColorFormat(f"unknown named color '{alias}'", label)
    try:
        return registry.resolve(alias)
    except NotFound as e:
        raise InvalidColorFormat(f"unknown named color '{alias}'", label) from e


def color_to_document(color: ColorDefinition) -> Dict[str, int]:
    """Serialize a color the way saved theme files store it."""
    return {"r": color.r, "g": color.g, "b": color.b}


def calculate_luminance(r: int, g: int, b: int) -> float:
    """Calculate relative luminance of an RGB color.

    Uses the WCAG formula for luminance calculation.
    """
    def gamma_correct(value: int) -> float:
        normalized = value / 255.0
        if normalized <= 0.03928:
            return normalized / 12.92
        return ((normalized + 0.055) / 1.055) ** 2.4

    return 0.2126 * gamma_correct(r) + 0.7152 * gamma_correct(g) + 0.0722 * gamma_correct(b)


def calculate_contrast_ratio(color1: ColorDefinition, color2: ColorDefinition) -> float:
    """Calculate WCAG contrast ratio between two colors.

    Returns:
        Contrast ratio 1.0-21.0 (higher is more contrast)
    """
    lum1 = calculate_luminance(*color1.as_tuple())
    lum2 = calculate_luminance(*color2.as_tuple())

    # Ensure lighter color is in numerator
    if lum1 < lum2:
        lum1, lum2 = lum2, lum1

    return (lum1 + 0.05) / (lum2 + 0.05)


def meets_wcag_contrast(fg: ColorDefinition, bg: ColorDefinition, level: str = "AA") -> bool:
    """Check if a color combination meets WCAG 'AA' (4.5:1) or 'AAA' (7:1)."""
    ratio = calculate_contrast_ratio(fg, bg)
    if level == "AAA":
        return ratio >= 7.0
    return ratio >= 4.5


# Foreground/background slot pairs checked for readability
CONTRAST_PAIRS = (
    ("text", "background"),
    ("textSecondary", "background"),
    ("text", "surface"),
    ("textInverse", "primary"),
    ("success", "background"),
    ("warning", "background"),
    ("error", "background"),
    ("info", "background"),
)


def validate_color_accessibility(palette: Palette) -> List[str]:
    """Validate color accessibility in a palette.

    Returns:
        List of accessibility warnings, empty when every pair is readable
    """
    warnings = []
    for fg_key, bg_key in CONTRAST_PAIRS:
        fg = palette.get(fg_key)
        bg = palette.get(bg_key)
        if fg is None or bg is None:
            continue
        if not meets_wcag_contrast(fg, bg, "AA"):
            ratio = calculate_contrast_ratio(fg, bg)
            warnings.append(
                f"Low contrast between {fg_key} and {bg_key}: "
                f"{ratio:.1f}:1 (recommended 4.5:1+)"
            )
    return warnings
