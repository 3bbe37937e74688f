"""Structural and semantic validation of theme documents.

Every function here returns a list of human readable error strings and never
raises; an empty list means the document is valid. Checks always run to
completion so a caller can report every problem at once.
"""

import re
from typing import Any, List, Mapping, Optional

from .colors import present_shapes
from .schema import Palette, REQUIRED_SEMANTIC_ROLES, REQUIRED_SLOTS

THEME_NAME_RE = re.compile(r"^[a-zA-Z0-9_-]+$")

VALID_MODES = ("rgb", "ansi", "auto")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_channel(errors: List[str], label: str, channel: str, value: Any) -> None:
    if not _is_int(value) or not 0 <= value <= 255:
        errors.append(f"Color '{label}': invalid {channel} value {value!r} - must be 0-255")


def validate_color(color: Any, label: str) -> List[str]:
    """Validate a single color input.

    Args:
        color: Color input as found in the document
        label: Slot or alias name used in every message

    Returns:
        List of validation errors
    """
    errors: List[str] = []

    if not isinstance(color, Mapping):
        return [f"Color '{label}' must be an object"]

    has_valid_format = False

    if "hex" in color:
        value = color["hex"]
        if not isinstance(value, str):
            errors.append(f"Color '{label}': hex must be a string")
        elif not re.fullmatch(r"#?[0-9A-Fa-f]{6}", value):
            errors.append(
                f"Color '{label}': invalid hex format '{value}' - must be #RRGGBB or RRGGBB"
            )
        else:
            has_valid_format = True

    if "rgb" in color:
        value = color["rgb"]
        if not isinstance(value, (list, tuple)):
            errors.append(f"Color '{label}': rgb must be an array")
        elif len(value) != 3:
            errors.append(f"Color '{label}': rgb array must have exactly 3 values")
        else:
            before = len(errors)
            for channel, channel_value in zip(("red", "green", "blue"), value):
                _check_channel(errors, label, channel, channel_value)
            has_valid_format = has_valid_format or len(errors) == before

    if any(key in color for key in ("r", "g", "b")):
        values = [color.get(key) for key in ("r", "g", "b")]
        if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values):
            errors.append(f"Color '{label}': r, g, b must all be numbers")
        else:
            before = len(errors)
            for channel, channel_value in zip(("red", "green", "blue"), values):
                _check_channel(errors, label, channel, channel_value)
            has_valid_format = has_valid_format or len(errors) == before

    if "ansi" in color:
        value = color["ansi"]
        if not _is_int(value) or not 0 <= value <= 255:
            errors.append(f"Color '{label}': invalid ANSI code {value!r} - must be 0-255")
        else:
            has_valid_format = True

    if "name" in color:
        value = color["name"]
        if not isinstance(value, str):
            errors.append(f"Color '{label}': name must be a string")
        elif not value.strip():
            errors.append(f"Color '{label}': name cannot be empty")
        else:
            has_valid_format = True

    if not has_valid_format:
        errors.append(
            f"Color '{label}': must have at least one valid format "
            f"(hex, rgb array, r/g/b object, ansi, or name)"
        )

    if len(present_shapes(color)) > 1:
        errors.append(
            f"Color '{label}': multiple color formats specified - use only one format per color"
        )

    return errors


def validate_palette(palette: Any, require_slots: bool = True) -> List[str]:
    """Validate a palette block.

    Args:
        palette: Palette mapping from the document
        require_slots: Enforce the required slots; themes with a parent
            inherit them and pass False

    Returns:
        List of validation errors
    """
    if not isinstance(palette, Mapping):
        return ["Palette must be an object"]

    errors: List[str] = []
    if require_slots:
        for required in REQUIRED_SLOTS:
            if required not in palette:
                errors.append(f"Missing required color: {required}")

    for slot, color in palette.items():
        if not isinstance(slot, str):
            errors.append(f"Palette key {slot!r} must be a string")
            continue
        errors.extend(validate_color(color, slot))

    return errors


def validate_semantic(semantic: Any, palette: Any, deferred: bool = False) -> List[str]:
    """Validate a semantic mapping block.

    Fixed palette slots always exist thanks to their defaults, so only
    references to custom slots are checked against the local palette. When
    ``deferred`` is set (the theme extends or imports others) those
    references are left for the resolver, which sees the merged palette.

    Returns:
        List of validation errors
    """
    if semantic is None:
        return []
    if not isinstance(semantic, Mapping):
        return ["Semantic mappings must be an object"]

    errors: List[str] = []
    for required in REQUIRED_SEMANTIC_ROLES:
        if not semantic.get(required):
            errors.append(f"Missing required semantic mapping: {required}")

    local_slots = palette if isinstance(palette, Mapping) else {}
    for role, slot in semantic.items():
        if not isinstance(role, str):
            errors.append(f"Semantic role {role!r} must be a string")
            continue
        if not isinstance(slot, str):
            errors.append(f"Semantic mapping '{role}' must be a string")
            continue
        if Palette.field_for(slot) or slot in local_slots or deferred:
            continue
        errors.append(f"Semantic mapping '{role}' references unknown palette color '{slot}'")

    return errors


def validate_theme(theme: Any) -> List[str]:
    """Validate a single theme document.

    Returns:
        List of validation errors
    """
    if not isinstance(theme, Mapping):
        return ["Theme must be an object"]

    errors: List[str] = []

    # Name validation
    name = theme.get("name")
    if name is None or name == "":
        errors.append("Theme must have a name")
    elif not isinstance(name, str):
        errors.append("Theme name must be a string")
    elif not name.strip():
        errors.append("Theme name cannot be empty")
    elif not THEME_NAME_RE.match(name):
        errors.append("Theme name can only contain letters, numbers, underscores, and hyphens")

    # Description validation
    description = theme.get("description")
    if description is None or description == "":
        errors.append("Theme must have a description")
    elif not isinstance(description, str):
        errors.append("Theme description must be a string")
    elif not description.strip():
        errors.append("Theme description cannot be empty")

    # Optional metadata
    if theme.get("version") is not None and not isinstance(theme["version"], str):
        errors.append("Theme version must be a string")
    if theme.get("author") is not None and not isinstance(theme["author"], str):
        errors.append("Theme author must be a string")
    if theme.get("mode") is not None and theme["mode"] not in VALID_MODES:
        errors.append("Invalid color mode - must be rgb, ansi, or auto")

    has_parent = "extends" in theme
    has_imports = bool(theme.get("imports"))

    # Palette and semantic mappings
    palette = theme.get("palette")
    if palette is None and has_parent:
        palette = {}
    errors.extend(validate_palette(palette, require_slots=not has_parent))
    errors.extend(validate_semantic(theme.get("semantic"), palette,
                                    deferred=has_parent or has_imports))

    # Extends validation
    if has_parent:
        extends = theme["extends"]
        if not isinstance(extends, str):
            errors.append("Theme extends must be a string path")
        elif not extends.strip():
            errors.append("Theme extends path cannot be empty")

    # Imports validation
    if "imports" in theme and theme["imports"] is not None:
        imports = theme["imports"]
        if not isinstance(imports, list):
            errors.append("Theme imports must be an array")
        else:
            for index, import_path in enumerate(imports):
                if not isinstance(import_path, str):
                    errors.append(f"Theme import at index {index} must be a string")
                elif not import_path.strip():
                    errors.append(f"Theme import at index {index} cannot be empty")

    return errors


def validate_collection(collection: Any) -> List[str]:
    """Validate a theme collection document.

    Per-theme errors are prefixed with the theme's 1-based position.

    Returns:
        List of validation errors
    """
    if not isinstance(collection, Mapping):
        return ["Theme collection must be an object"]

    errors: List[str] = []

    if collection.get("version") is not None and not isinstance(collection["version"], str):
        errors.append("Collection version must be a string")

    themes = collection.get("themes")
    if themes is None:
        errors.append("Collection must have a themes array")
    elif not isinstance(themes, list):
        errors.append("Collection themes must be an array")
    elif not themes:
        errors.append("Collection must contain at least one theme")
    else:
        for index, theme in enumerate(themes):
            for error in validate_theme(theme):
                errors.append(f"Theme {index + 1}: {error}")

        duplicates = find_duplicate_names(themes)
        if duplicates:
            errors.append(f"Duplicate theme names found: {', '.join(duplicates)}")

    named = collection.get("namedColors")
    if named is not None:
        if not isinstance(named, Mapping):
            errors.append("Named colors must be an object")
        else:
            for alias, color in named.items():
                if not isinstance(alias, str):
                    errors.append(f"Named color alias {alias!r} must be a string")
                    continue
                errors.extend(validate_color(color, f"named.{alias}"))

    return errors


def find_duplicate_names(themes: List[Any]) -> List[str]:
    """Names that occur more than once, in order of first repetition."""
    seen = set()
    duplicates: List[str] = []
    for theme in themes:
        if not isinstance(theme, Mapping):
            continue
        name = theme.get("name")
        if not isinstance(name, str) or not name:
            continue
        if name in seen and name not in duplicates:
            duplicates.append(name)
        seen.add(name)
    return duplicates


def sanitize_theme_name(name: Optional[str]) -> str:
    """Normalize an arbitrary string into a valid theme name.

    Lowercases, replaces invalid characters with hyphens and collapses runs.

    Raises:
        ValueError: If the input is not a string or nothing usable remains
    """
    if not isinstance(name, str):
        raise ValueError("Theme name must be a string")

    sanitized = re.sub(r"[^a-z0-9_-]", "-", name.strip().lower())
    sanitized = re.sub(r"-+", "-", sanitized).strip("-")

    if not sanitized:
        raise ValueError("Theme name cannot be empty after sanitization")
    return sanitized
