"""Cache of fully resolved themes."""

import logging
import threading
from typing import Dict, List, Optional

from .named_colors import NamedColorRegistry
from .schema import ThemeDefinition

logger = logging.getLogger(__name__)


def member_key(path: str, name: str) -> str:
    """Cache key of a theme inside a collection file."""
    return f"{path}#{name}"


class ThemeCache:
    """Maps canonical keys to resolved, immutable themes.

    Keys are absolute file paths, or ``<path>#<name>`` for collection
    members. Clearing the cache also clears the attached named color
    registry so no alias outlives the themes that defined it.
    """

    def __init__(self, registry: Optional[NamedColorRegistry] = None):
        self._themes: Dict[str, ThemeDefinition] = {}
        self._registry = registry
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[ThemeDefinition]:
        theme = self._themes.get(key)
        if theme is not None:
            logger.debug(f"Theme cache hit: {key}")
        return theme

    def put(self, key: str, theme: ThemeDefinition) -> None:
        with self._lock:
            self._themes[key] = theme
        logger.debug(f"Cached theme '{theme.name}' under {key}")

    def invalidate(self, path: str) -> int:
        """Drop the entry for ``path`` and for every collection member in it."""
        prefix = f"{path}#"
        with self._lock:
            stale = [key for key in self._themes if key == path or key.startswith(prefix)]
            for key in stale:
                del self._themes[key]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cached themes for {path}")
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._themes.clear()
            if self._registry is not None:
                self._registry.clear()
        logger.debug("Theme cache cleared")

    def keys(self) -> List[str]:
        return list(self._themes)

    def __contains__(self, key: object) -> bool:
        return key in self._themes

    def __len__(self) -> int:
        return len(self._themes)
