"""termtheme Theme Engine Package.

This package turns JSON or YAML theme documents into fully resolved color
models with support for theme inheritance, imports, named colors, palette
validation, terminal capability detection and escape code generation.
"""

from .cache import ThemeCache
from .colors import (
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
from .encoder import get_theme_preview, theme_to_ansi_codes
from .engine import CollectionLoadReport, ThemeEngine
from .named_colors import NamedColorRegistry
from .parser import DocumentFormat, DocumentShape, detect_format, detect_shape, parse_document
from .resolver import ResolutionContext, ThemeResolver
from .schema import (
    # Core models
    ColorDefinition,
    Palette,
    ThemeDefinition,
    ThemeCollection,

    # Enums
    ColorMode,
    TerminalCapability,

    # Defaults
    DEFAULT_SEMANTIC_MAP,
    REQUIRED_SEMANTIC_ROLES,
    REQUIRED_SLOTS,
)
from .sources import FileSystemSource, MappingSource, ThemeSource
from .validator import (
    sanitize_theme_name,
    validate_collection,
    validate_color,
    validate_palette,
    validate_semantic,
    validate_theme,
)

__all__ = [
    # Main classes
    "ThemeEngine",
    "CollectionLoadReport",
    "ThemeCache",
    "NamedColorRegistry",
    "ThemeResolver",
    "ResolutionContext",

    # Sources
    "ThemeSource",
    "FileSystemSource",
    "MappingSource",

    # Schema models
    "ColorDefinition",
    "Palette",
    "ThemeDefinition",
    "ThemeCollection",
    "DEFAULT_SEMANTIC_MAP",
    "REQUIRED_SEMANTIC_ROLES",
    "REQUIRED_SLOTS",

    # Enums
    "ColorMode",
    "TerminalCapability",
    "DocumentFormat",
    "DocumentShape",

    # Parsing and validation
    "parse_document",
    "detect_format",
    "detect_shape",
    "validate_color",
    "validate_palette",
    "validate_semantic",
    "validate_theme",
    "validate_collection",
    "sanitize_theme_name",

    # Colors
    "RESET",
    "parse_color",
    "ansi_to_rgb",
    "hex_to_rgb",
    "rgb_to_hex",
    "rgb_to_ansi256",
    "rgb_to_ansi16",
    "color_to_ansi",
    "detect_terminal_capability",
    "calculate_contrast_ratio",
    "meets_wcag_contrast",
    "validate_color_accessibility",

    # Encoding
    "theme_to_ansi_codes",
    "get_theme_preview",
]
