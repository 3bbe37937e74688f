"""Inheritance resolution for validated theme documents.

A theme may name a parent with ``extends`` and pull other themes' colors in
through ``imports``. The resolver walks those references, merges palettes and
semantic maps, and produces a self-contained ``ThemeDefinition``.

Cross-file problems degrade: an unreadable parent falls back to the default
palette and a broken import is skipped, each with a logged warning. Cycles
are the exception and always raise ``CyclicInheritance``.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Mapping, Optional, Tuple

from ..errors import CyclicInheritance, InvalidColorFormat, ThemeError, UnresolvedReference
from .cache import member_key
from .colors import parse_color
from .named_colors import NamedColorRegistry
from .schema import ColorMode, Palette, ThemeDefinition, default_semantic_map
from .sources import canonical_path

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32


@dataclass(frozen=True)
class ResolutionContext:
    """Where a document came from and which themes are mid-resolution.

    ``resolving`` holds the keys of every theme on the current path from the
    top-level load down to this document; ``chain`` is the same path in order.
    """

    key: str
    base_dir: str
    siblings: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    collection_path: Optional[str] = None
    resolving: FrozenSet[str] = frozenset()
    chain: Tuple[str, ...] = ()

    @classmethod
    def root(cls, key: str, base_dir: str,
             siblings: Optional[Mapping[str, Mapping[str, Any]]] = None,
             collection_path: Optional[str] = None) -> "ResolutionContext":
        return cls(key, base_dir, siblings or {}, collection_path, frozenset([key]), (key,))

    def enter(self, key: str, base_dir: str,
              siblings: Optional[Mapping[str, Mapping[str, Any]]] = None,
              collection_path: Optional[str] = None) -> "ResolutionContext":
        """Context for a referenced document, one level deeper."""
        return ResolutionContext(
            key=key,
            base_dir=base_dir,
            siblings=siblings or {},
            collection_path=collection_path,
            resolving=self.resolving | {key},
            chain=self.chain + (key,),
        )

    @property
    def depth(self) -> int:
        return len(self.chain)


class ThemeLoader:
    """What the resolver needs from whoever owns files and the cache."""

    def load_path(self, path: str, context: ResolutionContext) -> ThemeDefinition:
        """Load the theme at ``path`` (cache first); ``context`` is already entered for it."""
        raise NotImplementedError

    def load_member(self, collection_path: str, document: Mapping[str, Any],
                    siblings: Mapping[str, Mapping[str, Any]],
                    context: ResolutionContext) -> ThemeDefinition:
        """Load a theme of an already parsed collection (cache first)."""
        raise NotImplementedError


class ThemeResolver:
    """Turns validated theme documents into resolved themes."""

    def __init__(self, loader: ThemeLoader, registry: NamedColorRegistry,
                 max_depth: int = DEFAULT_MAX_DEPTH):
        self.loader = loader
        self.registry = registry
        self.max_depth = max_depth

    def resolve(self, document: Mapping[str, Any], context: ResolutionContext) -> ThemeDefinition:
        """Resolve one validated theme document.

        Args:
            document: Theme document that passed ``validate_theme``
            context: Origin of the document and the themes being resolved above it

        Returns:
            Fully merged, immutable theme

        Raises:
            CyclicInheritance: A reference leads back to a theme being resolved
            UnresolvedReference: A semantic role names a slot the merged palette lacks
        """
        name = document["name"]
        logger.debug(f"Resolving theme '{name}' ({context.key})")

        base = Palette()
        extends = document.get("extends")
        if extends:
            try:
                parent = self._load_reference(extends, context)
                base = parent.palette
                logger.debug(f"Theme '{name}' extends '{parent.name}'")
            except CyclicInheritance:
                raise
            except ThemeError as e:
                logger.warning(f"Failed to extend theme '{extends}' for '{name}': {e}")

        scope = self.registry.scoped()
        for reference in document.get("imports") or []:
            try:
                imported = self._load_reference(reference, context)
            except CyclicInheritance:
                raise
            except ThemeError as e:
                logger.warning(f"Failed to import theme '{reference}' for '{name}': {e}")
                continue
            for slot, color in imported.palette.slots().items():
                scope.register(f"{imported.name}.{slot}", color)

        own = {}
        for slot, value in (document.get("palette") or {}).items():
            try:
                own[slot] = parse_color(value, scope, label=slot)
            except InvalidColorFormat as e:
                logger.warning(f"Skipping color in theme '{name}': {e}")

        palette = base.overlay(Palette.from_slots(own))

        semantic = default_semantic_map()
        semantic.update(document.get("semantic") or {})
        unresolved = [
            f"Semantic mapping '{role}' references unknown palette color '{slot}'"
            for role, slot in semantic.items()
            if not palette.has_slot(slot)
        ]
        if unresolved:
            raise UnresolvedReference(unresolved, context.key)

        return ThemeDefinition(
            name=name,
            description=document.get("description", ""),
            version=document.get("version"),
            author=document.get("author"),
            mode=ColorMode(document.get("mode") or ColorMode.RGB),
            palette=palette,
            semantic=semantic,
            extends=extends,
            imports=list(document.get("imports") or []),
            source=context.key,
        )

    def _load_reference(self, reference: str, context: ResolutionContext) -> ThemeDefinition:
        # Sibling theme names take precedence over relative paths
        if context.collection_path and reference in context.siblings:
            key = member_key(context.collection_path, reference)
            self._check_cycle(key, context)
            child = context.enter(key, context.base_dir, context.siblings, context.collection_path)
            return self.loader.load_member(
                context.collection_path, context.siblings[reference], context.siblings, child
            )

        path = canonical_path(reference, context.base_dir)
        self._check_cycle(path, context)
        return self.loader.load_path(path, context.enter(path, os.path.dirname(path)))

    def _check_cycle(self, key: str, context: ResolutionContext) -> None:
        if key in context.resolving:
            raise CyclicInheritance(context.chain + (key,))
        if context.depth >= self.max_depth:
            raise CyclicInheritance(
                context.chain + (key,),
                reason=f"Theme inheritance deeper than {self.max_depth} levels",
            )
