"""Exception hierarchy for the termtheme engine.

Validation problems are accumulated and raised together as a single
``ValidationFailed``; cross-file resolution problems (a missing parent or
import) are logged and degraded instead of raised. See ``resolver`` for the
lenient side of that policy.
"""

from typing import List, Optional, Sequence


class ThemeError(Exception):
    """Base class for all theme engine errors."""


class MalformedDocument(ThemeError, ValueError):
    """Raised when a theme document cannot be decoded."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


class ValidationFailed(ThemeError, ValueError):
    """Raised when a theme document breaks one or more rules.

    Carries the complete list of violations so callers can report every
    problem in one pass.
    """

    def __init__(self, errors: Sequence[str], source: Optional[str] = None,
                 summary: str = "Theme validation failed"):
        self.errors: List[str] = list(errors)
        self.source = source
        header = f"{summary} ({source})" if source else summary
        super().__init__(header + ":\n" + "\n".join(f"  - {e}" for e in self.errors))


class UnresolvedReference(ValidationFailed):
    """Raised when a semantic role points at a slot the merged palette lacks."""

    def __init__(self, errors: Sequence[str], source: Optional[str] = None):
        super().__init__(errors, source, summary="Unresolved theme references")


class InvalidColorFormat(ThemeError, ValueError):
    """Raised for malformed, ambiguous or unresolvable color input."""

    def __init__(self, message: str, label: Optional[str] = None):
        self.label = label
        super().__init__(f"Color '{label}': {message}" if label else message)


class NotFound(ThemeError, LookupError):
    """Raised when a theme file or named color alias does not exist."""

    def __init__(self, what: str):
        self.what = what
        super().__init__(what)


class CyclicInheritance(ThemeError):
    """Raised when an extends/imports chain revisits a theme."""

    def __init__(self, chain: Sequence[str], reason: str = "Cyclic theme inheritance"):
        self.chain: List[str] = list(chain)
        super().__init__(f"{reason}: {' -> '.join(self.chain)}")


class ThemeLoadError(ThemeError):
    """Raised when no theme in a collection could be loaded."""

    def __init__(self, message: str, errors: Sequence[str] = ()):
        self.errors: List[str] = list(errors)
        if self.errors:
            message = message + ":\n" + "\n".join(self.errors)
        super().__init__(message)
