"""Where theme documents are read from.

The engine never opens files itself; it asks a ``ThemeSource``. The default
``FileSystemSource`` reads from disk and ``MappingSource`` serves documents
held in memory, which is handy for embedding themes in an application.
"""

import os
from pathlib import Path
from typing import Dict, Optional, Union

from ..errors import MalformedDocument, NotFound

PathLike = Union[str, Path]


def canonical_path(path: PathLike, base_dir: Optional[PathLike] = None) -> str:
    """Absolute, normalized form of ``path`` used as a cache key."""
    path = os.path.expanduser(str(path))
    if base_dir is not None and not os.path.isabs(path):
        path = os.path.join(str(base_dir), path)
    return os.path.normpath(os.path.abspath(path))


class ThemeSource:
    """Interface for reading theme document text."""

    def read_text(self, path: str) -> str:
        raise NotImplementedError

    def exists(self, path: str) -> bool:
        raise NotImplementedError


class FileSystemSource(ThemeSource):
    """Reads UTF-8 theme documents from the local filesystem."""

    def read_text(self, path: str) -> str:
        try:
            return Path(path).read_text(encoding="utf-8")
        except FileNotFoundError:
            raise NotFound(f"Theme file not found: {path}") from None
        except IsADirectoryError:
            raise NotFound(f"Theme path is a directory: {path}") from None
        except UnicodeDecodeError as e:
            raise MalformedDocument(f"Invalid UTF-8: {e}", path) from e
        except OSError as e:
            raise NotFound(f"Cannot read theme file {path}: {e.strerror or e}") from e

    def exists(self, path: str) -> bool:
        return Path(path).is_file()


class MappingSource(ThemeSource):
    """Serves theme documents from an in-memory ``{path: text}`` mapping.

    Keys are canonicalized the same way the engine canonicalizes paths, so
    relative names resolve against the current directory.
    """

    def __init__(self, documents: Optional[Dict[PathLike, str]] = None):
        self._documents: Dict[str, str] = {}
        for path, text in (documents or {}).items():
            self.add(path, text)

    def add(self, path: PathLike, text: str) -> str:
        key = canonical_path(path)
        self._documents[key] = text
        return key

    def read_text(self, path: str) -> str:
        try:
            return self._documents[canonical_path(path)]
        except KeyError:
            raise NotFound(f"Theme file not found: {path}") from None

    def exists(self, path: str) -> bool:
        return canonical_path(path) in self._documents
