"""Core theme engine for the termtheme package.

This module provides the ThemeEngine class: the entry point that reads theme
documents through a ``ThemeSource``, validates and resolves them, keeps the
resolved results in a ``ThemeCache`` and turns them into escape code tables.
"""

import json
import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from ..errors import CyclicInheritance, NotFound, ThemeError, ThemeLoadError
from .cache import ThemeCache, member_key
from .colors import color_to_document, validate_color_accessibility
from .encoder import get_theme_preview, theme_to_ansi_codes
from .named_colors import NamedColorRegistry
from .parser import DocumentFormat, DocumentShape, detect_format, detect_shape, parse_document
from .resolver import DEFAULT_MAX_DEPTH, ResolutionContext, ThemeLoader, ThemeResolver
from .schema import ColorMode, TerminalCapability, ThemeCollection, ThemeDefinition
from .sources import FileSystemSource, ThemeSource, canonical_path

logger = logging.getLogger(__name__)


@dataclass
class CollectionLoadReport:
    """Outcome of loading a collection: what loaded and what did not."""

    collection: ThemeCollection
    errors: List[str] = field(default_factory=list)
    total: int = 0

    @property
    def themes(self) -> List[ThemeDefinition]:
        return self.collection.themes

    @property
    def loaded(self) -> int:
        return len(self.collection.themes)

    @property
    def complete(self) -> bool:
        return not self.errors

    def summary(self) -> str:
        return f"loaded {self.loaded}/{self.total} themes"


class ThemeEngine(ThemeLoader):
    """Loads, resolves and caches themes."""

    def __init__(self, source: Optional[ThemeSource] = None,
                 capability: Optional[TerminalCapability] = None,
                 max_inheritance_depth: int = DEFAULT_MAX_DEPTH,
                 warn_low_contrast: bool = False):
        """Initialize the theme engine.

        Args:
            source: Where documents are read from (defaults to the filesystem)
            capability: Output capability for themes in ``auto`` mode; detected
                from the terminal when None
            max_inheritance_depth: Longest extends/imports chain allowed
            warn_low_contrast: Log accessibility warnings for resolved themes
        """
        self.source = source or FileSystemSource()
        self.registry = NamedColorRegistry()
        self.cache = ThemeCache(self.registry)
        self.resolver = ThemeResolver(self, self.registry, max_inheritance_depth)
        self.capability = TerminalCapability(capability) if capability else None
        self.warn_low_contrast = warn_low_contrast

        # Held for a whole top-level load so clear_cache() never runs mid-resolution
        self._load_lock = threading.RLock()

        logger.debug(f"ThemeEngine initialized with capability: {self.capability or 'auto'}")

    @classmethod
    def from_config(cls, config, source: Optional[ThemeSource] = None) -> "ThemeEngine":
        """Create theme engine from an ``EngineConfig``.

        Args:
            config: Engine configuration object

        Returns:
            ThemeEngine instance
        """
        return cls(
            source=source,
            capability=getattr(config, "capability", None),
            max_inheritance_depth=getattr(config, "max_inheritance_depth", DEFAULT_MAX_DEPTH),
            warn_low_contrast=getattr(config, "warn_low_contrast", False),
        )

    # Loading

    def load_theme(self, path: Union[str, Path]) -> ThemeDefinition:
        """Load a single theme file.

        For a collection file the first theme is returned.

        Raises:
            NotFound: The file does not exist
            MalformedDocument: The file could not be decoded
            ValidationFailed: The document broke one or more rules
            CyclicInheritance: The theme's references form a cycle
        """
        path = canonical_path(path)
        with self._load_lock:
            try:
                if path not in self.cache and not self.source.exists(path):
                    raise NotFound(f"Theme file not found: {path}")
                return self.load_path(path, ResolutionContext.root(path, os.path.dirname(path)))
            except ThemeError as e:
                logger.error(f"Error loading theme '{path}': {e}")
                raise

    def load_collection(self, path: Union[str, Path]) -> List[ThemeDefinition]:
        """Load every theme of a collection file.

        Themes that fail are reported in a warning; the rest are returned.

        Raises:
            ThemeLoadError: No theme in the collection could be loaded
        """
        report = self.load_collection_report(path)
        if not report.themes:
            raise ThemeLoadError(
                f"No valid themes found in collection {report.collection.source}", report.errors
            )
        if report.errors:
            logger.warning(
                f"Successfully {report.summary()} from {report.collection.source}. "
                f"{len(report.errors)} themes had errors:\n" + "\n".join(report.errors)
            )
        return report.themes

    def load_collection_report(self, path: Union[str, Path]) -> CollectionLoadReport:
        """Load a collection and report per-theme failures instead of raising.

        Document level problems (missing file, decode or validation errors)
        still raise.
        """
        path = canonical_path(path)
        with self._load_lock:
            if not self.source.exists(path):
                raise NotFound(f"Theme collection file not found: {path}")
            text = self.source.read_text(path)
            document = parse_document(text, DocumentShape.COLLECTION, detect_format(path), path)
            named = document.get("namedColors") or {}
            self.registry.register_many(named)
            siblings = self._siblings(document)

            themes: List[ThemeDefinition] = []
            errors: List[str] = []
            for index, theme_doc in enumerate(document["themes"]):
                key = member_key(path, theme_doc["name"])
                context = ResolutionContext.root(key, os.path.dirname(path), siblings, path)
                try:
                    themes.append(self.load_member(path, theme_doc, siblings, context))
                except ThemeError as e:
                    message = f"Theme {index + 1} ({theme_doc['name']}): {e}"
                    logger.warning(message)
                    errors.append(message)

            collection = ThemeCollection(
                version=document.get("version"),
                themes=themes,
                named_colors={alias: self.registry.get(alias) for alias in named
                              if alias in self.registry},
                source=path,
            )
            return CollectionLoadReport(collection, errors, len(document["themes"]))

    # ThemeLoader interface used by the resolver

    def load_path(self, path: str, context: ResolutionContext) -> ThemeDefinition:
        cached = self.cache.get(path)
        if cached is not None:
            return cached

        text = self.source.read_text(path)
        document = parse_document(text, None, detect_format(path), path)

        if detect_shape(document) == DocumentShape.COLLECTION:
            self.registry.register_many(document.get("namedColors") or {})
            first = document["themes"][0]
            key = member_key(path, first["name"])
            if key in context.resolving:
                raise CyclicInheritance(context.chain + (key,))
            siblings = self._siblings(document)
            member_context = context.enter(key, os.path.dirname(path), siblings, path)
            theme = self.load_member(path, first, siblings, member_context)
        else:
            theme = self._resolved(self.resolver.resolve(document, context))
        self.cache.put(path, theme)
        return theme

    def load_member(self, collection_path: str, document: Mapping[str, Any],
                    siblings: Mapping[str, Mapping[str, Any]],
                    context: ResolutionContext) -> ThemeDefinition:
        cached = self.cache.get(context.key)
        if cached is not None:
            return cached
        theme = self._resolved(self.resolver.resolve(document, context))
        self.cache.put(context.key, theme)
        return theme

    @staticmethod
    def _siblings(document: Mapping[str, Any]) -> Dict[str, Mapping[str, Any]]:
        return {theme["name"]: theme for theme in document["themes"]}

    def _resolved(self, theme: ThemeDefinition) -> ThemeDefinition:
        if self.warn_low_contrast:
            for warning in validate_color_accessibility(theme.palette):
                logger.warning(f"Theme '{theme.name}': {warning}")
        return theme

    # Output

    def capability_for(self, theme: ThemeDefinition) -> Optional[TerminalCapability]:
        """Configured capability for ``auto`` themes; None lets the encoder decide."""
        if theme.mode == ColorMode.AUTO:
            return self.capability
        return None

    def get_ansi_codes(self, theme: ThemeDefinition,
                       capability: Optional[TerminalCapability] = None) -> Dict[str, str]:
        return theme_to_ansi_codes(theme, capability or self.capability_for(theme))

    def preview(self, theme: ThemeDefinition,
                capability: Optional[TerminalCapability] = None) -> str:
        return get_theme_preview(theme, capability or self.capability_for(theme))

    def clear_cache(self) -> None:
        """Clear resolved themes and named colors."""
        with self._load_lock:
            self.cache.clear()
        logger.debug("Theme engine cache cleared")

    # Saving

    @staticmethod
    def theme_to_document(theme: ThemeDefinition) -> Dict[str, Any]:
        """Self-contained document form of a resolved theme."""
        document: Dict[str, Any] = {
            "name": theme.name,
            "description": theme.description,
        }
        if theme.version is not None:
            document["version"] = theme.version
        if theme.author is not None:
            document["author"] = theme.author
        document["mode"] = theme.mode.value
        document["palette"] = {
            slot: color_to_document(color) for slot, color in theme.palette.slots().items()
        }
        document["semantic"] = dict(theme.semantic)
        return document

    def save_theme_to_file(self, theme: ThemeDefinition, path: Union[str, Path]) -> None:
        """Write a resolved theme as JSON or YAML, chosen by file suffix."""
        path = canonical_path(path)
        document = self.theme_to_document(theme)
        if detect_format(path) == DocumentFormat.YAML:
            text = yaml.safe_dump(document, sort_keys=False)
        else:
            text = json.dumps(document, indent=2) + "\n"

        Path(path).parent.mkdir(parents=True, exist_ok=True)
        Path(path).write_text(text, encoding="utf-8")

        with self._load_lock:
            self.cache.invalidate(path)
        logger.info(f"Saved theme '{theme.name}' to {path}")
