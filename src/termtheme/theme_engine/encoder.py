"""Conversion of resolved themes into terminal escape code tables."""

from typing import Dict, Optional

from .colors import RESET, color_to_ansi, detect_terminal_capability
from .schema import ColorMode, TerminalCapability, ThemeDefinition

MODE_CAPABILITIES = {
    ColorMode.RGB: TerminalCapability.TRUECOLOR,
    ColorMode.ANSI: TerminalCapability.COLOR_256,
}

PREVIEW_SLOTS = ("primary", "secondary", "success", "warning", "error", "info")


def capability_for(theme: ThemeDefinition,
                   capability: Optional[TerminalCapability] = None) -> TerminalCapability:
    """Pick the output capability: explicit value, else the theme's mode.

    ``auto`` themes without an explicit value fall back to
    ``detect_terminal_capability()``, which reads the environment and stdout.
    """
    if capability is not None:
        return TerminalCapability(capability)
    if theme.mode in MODE_CAPABILITIES:
        return MODE_CAPABILITIES[theme.mode]
    return detect_terminal_capability()


def theme_to_ansi_codes(theme: ThemeDefinition,
                        capability: Optional[TerminalCapability] = None) -> Dict[str, str]:
    """Build the escape code table for a resolved theme.

    Every palette slot yields ``<slot>`` and ``<slot>_bg``; every semantic
    role yields ``<role>`` and ``<role>_bg`` through the slot it maps to.
    ``reset`` is always present.

    The result depends only on the arguments, except for an ``auto`` theme
    with no ``capability``: that case detects the terminal.

    Args:
        theme: Resolved theme
        capability: Target capability; derived from the theme mode when None

    Returns:
        Mapping of code names to escape sequences
    """
    capability = capability_for(theme, capability)
    codes: Dict[str, str] = {}

    for slot, color in theme.palette.slots().items():
        codes[slot] = color_to_ansi(color, False, capability)
        codes[f"{slot}_bg"] = color_to_ansi(color, True, capability)

    for role in theme.semantic:
        color = theme.semantic_color(role)
        if color is None:
            continue
        codes[role] = color_to_ansi(color, False, capability)
        codes[f"{role}_bg"] = color_to_ansi(color, True, capability)

    codes["reset"] = RESET
    return codes


def get_theme_preview(theme: ThemeDefinition,
                      capability: Optional[TerminalCapability] = None) -> str:
    """Render a short colored preview: header, swatches and a sample panel."""
    capability = capability_for(theme, capability)

    def fg(key: str) -> str:
        return color_to_ansi(theme.color(key), False, capability)

    def bg(key: str) -> str:
        return color_to_ansi(theme.color(key), True, capability)

    lines = [
        f"Theme: {fg('primary')}{theme.name}{RESET} - {theme.description}",
        f"Mode: {theme.mode.value}",
        "",
    ]

    for slot in PREVIEW_SLOTS:
        lines.append(f"{bg(slot)}  {RESET} {fg(slot)}{slot}{RESET}")

    lines.append("")
    width = max(len(theme.name) + 4, 24)
    border = fg("panelBorder") + bg("panelBackground")
    lines.append(f"{border}+{'-' * width}+{RESET}")
    lines.append(
        f"{border}|{RESET}{bg('panelBackground')}{fg('panelTitle')}"
        f" {theme.name.ljust(width - 1)}{RESET}{border}|{RESET}"
    )
    lines.append(
        f"{border}|{RESET}{bg('panelBackground')}{fg('panelContent')}"
        f" {'Sample panel content'.ljust(width - 1)}{RESET}{border}|{RESET}"
    )
    lines.append(f"{border}+{'-' * width}+{RESET}")

    return "\n".join(lines)
