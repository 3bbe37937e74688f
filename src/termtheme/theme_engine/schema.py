"""Theme schema definitions for the termtheme engine.

This module defines the Pydantic models that hold resolved theme data: single
colors, palettes with their default-backed slots, semantic role mappings and
complete theme definitions. Raw documents are checked by ``validator`` before
any of these models are built from them.
"""

from typing import Dict, Any, Optional, List, Tuple
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ColorMode(str, Enum):
    """How a theme prefers its colors to be emitted"""
    RGB = "rgb"
    ANSI = "ansi"
    AUTO = "auto"


class TerminalCapability(str, Enum):
    """Terminal color capabilities"""
    TRUECOLOR = "truecolor"
    COLOR_256 = "256"
    COLOR_16 = "16"
    MONOCHROME = "monochrome"


class ColorDefinition(BaseModel):
    """A resolved 24-bit color"""

    model_config = ConfigDict(frozen=True)

    r: int = Field(..., ge=0, le=255, description="Red channel")
    g: int = Field(..., ge=0, le=255, description="Green channel")
    b: int = Field(..., ge=0, le=255, description="Blue channel")

    @property
    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def __str__(self) -> str:
        return self.hex


def rgb(r: int, g: int, b: int) -> ColorDefinition:
    """Shorthand constructor used for palette defaults."""
    return ColorDefinition(r=r, g=g, b=b)


class Palette(BaseModel):
    """Color palette with a fixed set of default-backed slots.

    Documents address slots by their camelCase key (``textSecondary``); the
    snake_case field name is accepted as well. Theme authors may add any
    other slot name, which lands in ``custom``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    # Primary colors
    primary: ColorDefinition = rgb(99, 102, 241)
    primary_dark: ColorDefinition = rgb(79, 70, 229)
    primary_light: ColorDefinition = rgb(129, 140, 248)

    # Secondary colors
    secondary: ColorDefinition = rgb(16, 185, 129)
    secondary_dark: ColorDefinition = rgb(5, 150, 105)
    secondary_light: ColorDefinition = rgb(52, 211, 153)

    # Background and surface colors
    background: ColorDefinition = rgb(17, 24, 39)
    background_alt: ColorDefinition = rgb(31, 41, 55)
    surface: ColorDefinition = rgb(55, 65, 81)
    surface_alt: ColorDefinition = rgb(75, 85, 99)

    # Text colors
    text: ColorDefinition = rgb(249, 250, 251)
    text_secondary: ColorDefinition = rgb(209, 213, 219)
    text_muted: ColorDefinition = rgb(156, 163, 175)
    text_inverse: ColorDefinition = rgb(17, 24, 39)

    # Border colors
    border: ColorDefinition = rgb(75, 85, 99)
    border_focus: ColorDefinition = rgb(99, 102, 241)
    border_hover: ColorDefinition = rgb(107, 114, 128)

    # Status colors
    success: ColorDefinition = rgb(34, 197, 94)
    warning: ColorDefinition = rgb(251, 191, 36)
    error: ColorDefinition = rgb(239, 68, 68)
    info: ColorDefinition = rgb(59, 130, 246)

    # Interactive state colors
    hover: ColorDefinition = rgb(67, 56, 202)
    active: ColorDefinition = rgb(55, 48, 163)
    disabled: ColorDefinition = rgb(107, 114, 128)

    # Shadow colors
    shadow: ColorDefinition = rgb(0, 0, 0)
    shadow_light: ColorDefinition = rgb(31, 41, 55)

    # Theme-specific slots outside the fixed set
    custom: Dict[str, ColorDefinition] = Field(default_factory=dict)

    @classmethod
    def slot_fields(cls) -> List[str]:
        """Field names of the fixed slots, in declaration order."""
        return [name for name in cls.model_fields if name != "custom"]

    @classmethod
    def field_for(cls, slot: str) -> Optional[str]:
        """Map a camelCase or snake_case slot name to its field name."""
        if slot in cls.model_fields and slot != "custom":
            return slot
        return _KEY_TO_FIELD.get(slot)

    @classmethod
    def from_slots(cls, colors: Dict[str, ColorDefinition]) -> "Palette":
        """Build a palette from document-keyed colors, routing unknown keys to ``custom``."""
        fixed: Dict[str, ColorDefinition] = {}
        custom: Dict[str, ColorDefinition] = {}
        for key, color in colors.items():
            field_name = cls.field_for(key)
            if field_name:
                fixed[field_name] = color
            else:
                custom[key] = color
        if custom:
            return cls(custom=custom, **fixed)
        return cls(**fixed)

    def get(self, slot: str) -> Optional[ColorDefinition]:
        field_name = self.field_for(slot)
        if field_name:
            return getattr(self, field_name)
        return self.custom.get(slot)

    def has_slot(self, slot: str) -> bool:
        return self.get(slot) is not None

    def slots(self) -> Dict[str, ColorDefinition]:
        """All slots keyed by document key, custom slots last."""
        result = {to_camel(name): getattr(self, name) for name in self.slot_fields()}
        result.update(self.custom)
        return result

    def explicit_slots(self) -> Dict[str, ColorDefinition]:
        """Only the slots that were given explicitly when this palette was built."""
        result = {
            to_camel(name): getattr(self, name)
            for name in self.slot_fields()
            if name in self.model_fields_set
        }
        result.update(self.custom)
        return result

    def overlay(self, other: "Palette") -> "Palette":
        """Return a copy of this palette with ``other``'s explicit slots on top.

        The override is shallow and slot-by-slot; slots ``other`` merely
        inherited from the defaults do not replace values here.
        """
        data: Dict[str, Any] = {name: getattr(self, name) for name in self.slot_fields()}
        for name in self.slot_fields():
            if name in other.model_fields_set:
                data[name] = getattr(other, name)
        custom = dict(self.custom)
        custom.update(other.custom)
        return Palette(custom=custom, **data)


_KEY_TO_FIELD: Dict[str, str] = {to_camel(name): name for name in Palette.slot_fields()}

REQUIRED_SLOTS: Tuple[str, ...] = ("primary", "background", "text", "border")

REQUIRED_SEMANTIC_ROLES: Tuple[str, ...] = (
    "panelBackground",
    "panelBorder",
    "panelTitle",
    "panelContent",
)

DEFAULT_SEMANTIC_MAP: Dict[str, str] = {
    "panelBackground": "surface",
    "panelBorder": "border",
    "panelTitle": "text",
    "panelContent": "textSecondary",
    "panelShadow": "shadow",
    "buttonBackground": "primary",
    "buttonBorder": "primaryDark",
    "buttonText": "textInverse",
    "buttonHover": "hover",
    "inputBackground": "backgroundAlt",
    "inputBorder": "border",
    "inputText": "text",
    "inputFocus": "borderFocus",
    "progressBackground": "surface",
    "progressFill": "primary",
    "progressText": "text",
}


def default_semantic_map() -> Dict[str, str]:
    return dict(DEFAULT_SEMANTIC_MAP)


class ThemeDefinition(BaseModel):
    """Complete, self-contained theme"""

    model_config = ConfigDict(frozen=True)

    # Metadata
    name: str = Field(..., description="Theme name")
    description: str = ""
    version: Optional[str] = None
    author: Optional[str] = None
    mode: ColorMode = ColorMode.RGB

    # Colors
    palette: Palette = Field(default_factory=Palette)
    semantic: Dict[str, str] = Field(default_factory=default_semantic_map)

    # Inheritance references as declared in the source document
    extends: Optional[str] = None
    imports: List[str] = Field(default_factory=list)

    # Cache key this theme was resolved under
    source: Optional[str] = None

    def semantic_color(self, role: str) -> Optional[ColorDefinition]:
        """Resolve a semantic role through the palette."""
        slot = self.semantic.get(role)
        if slot is None:
            return None
        return self.palette.get(slot)

    def color(self, key: str) -> Optional[ColorDefinition]:
        """Look up a semantic role first, then a palette slot."""
        return self.semantic_color(key) or self.palette.get(key)


class ThemeCollection(BaseModel):
    """Ordered set of resolved themes loaded from one collection document"""

    version: Optional[str] = None
    themes: List[ThemeDefinition] = Field(default_factory=list)
    named_colors: Dict[str, ColorDefinition] = Field(default_factory=dict)
    source: Optional[str] = None

    def names(self) -> List[str]:
        return [theme.name for theme in self.themes]

    def get(self, name: str) -> Optional[ThemeDefinition]:
        for theme in self.themes:
            if theme.name == name:
                return theme
        return None

