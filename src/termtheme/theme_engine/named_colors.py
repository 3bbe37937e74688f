"""Registry of named color aliases.

Collections may declare ``namedColors`` that any theme can reference with
``{"name": "alias"}``; imported themes expose their slots as
``<theme>.<slot>`` aliases. Import aliases live in a scope created with
``scoped()`` so they are only visible to the theme that imported them.
"""

import logging
import threading
from collections import ChainMap
from typing import Any, List, Mapping, Optional

from ..errors import InvalidColorFormat, NotFound
from .colors import parse_color
from .schema import ColorDefinition

logger = logging.getLogger(__name__)


class NamedColorRegistry:
    """Alias to color lookup table with optional parent scopes."""

    def __init__(self, parent: Optional["NamedColorRegistry"] = None):
        self._parent = parent
        if parent is None:
            self._colors: ChainMap = ChainMap({})
            self._lock = threading.RLock()
        else:
            # Reads fall through to the parent, writes land in the new map
            self._colors = parent._colors.new_child()
            self._lock = parent._lock

    def scoped(self) -> "NamedColorRegistry":
        """Create a child registry that reads through to this one."""
        return NamedColorRegistry(parent=self)

    def register(self, alias: str, color: ColorDefinition) -> None:
        with self._lock:
            existing = self._colors.get(alias)
            if existing == color:
                return
            if existing is not None:
                logger.warning(
                    f"Named color '{alias}' redefined: {existing.hex} -> {color.hex}"
                )
            self._colors.maps[0][alias] = color

    def register_many(self, colors: Mapping[str, Any]) -> int:
        """Parse and register a collection's ``namedColors`` block.

        Entries that fail to parse are logged and skipped.

        Returns:
            Number of aliases registered
        """
        count = 0
        for alias, value in colors.items():
            try:
                color = parse_color(value, self, label=f"named.{alias}")
            except InvalidColorFormat as e:
                logger.warning(f"Skipping named color '{alias}': {e}")
                continue
            self.register(alias, color)
            count += 1
        return count

    def resolve(self, alias: str) -> ColorDefinition:
        try:
            return self._colors[alias]
        except KeyError:
            raise NotFound(f"Named color '{alias}' not found") from None

    def get(self, alias: str) -> Optional[ColorDefinition]:
        return self._colors.get(alias)

    def aliases(self) -> List[str]:
        return sorted(self._colors)

    def clear(self) -> None:
        """Drop aliases registered at this scope."""
        with self._lock:
            self._colors.maps[0].clear()

    def __contains__(self, alias: object) -> bool:
        return alias in self._colors

    def __len__(self) -> int:
        return len(self._colors)
