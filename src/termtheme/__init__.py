"""termtheme - theme resolution and color management for terminal interfaces."""

__version__ = "0.1.0"
__author__ = "termtheme developers"

from .errors import (
    CyclicInheritance,
    InvalidColorFormat,
    MalformedDocument,
    NotFound,
    ThemeError,
    ThemeLoadError,
    UnresolvedReference,
    ValidationFailed,
)
from .theme_engine import (
    ColorDefinition,
    Palette,
    ThemeDefinition,
    ThemeEngine,
    theme_to_ansi_codes,
)

__all__ = [
    "ThemeEngine",
    "ThemeDefinition",
    "Palette",
    "ColorDefinition",
    "theme_to_ansi_codes",
    "ThemeError",
    "MalformedDocument",
    "ValidationFailed",
    "UnresolvedReference",
    "InvalidColorFormat",
    "NotFound",
    "CyclicInheritance",
    "ThemeLoadError",
    "__version__",
]
