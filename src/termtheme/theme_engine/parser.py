"""Decoding of theme documents from JSON or YAML text.

The parser only turns text into plain Python mappings and decides whether a
document is a single theme or a collection. Rule checking is delegated to
``validator``; ``parse_theme`` and ``parse_collection`` combine the two and
only return documents that passed every check.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..errors import MalformedDocument, ValidationFailed
from .validator import validate_collection, validate_theme


class DocumentShape(str, Enum):
    """Top-level layout of a theme document"""
    THEME = "theme"
    COLLECTION = "collection"


class DocumentFormat(str, Enum):
    """Serialization format of a theme document"""
    JSON = "json"
    YAML = "yaml"


_SUFFIX_FORMATS = {
    ".json": DocumentFormat.JSON,
    ".yaml": DocumentFormat.YAML,
    ".yml": DocumentFormat.YAML,
}


def detect_format(path: Union[str, Path]) -> DocumentFormat:
    """Pick the document format from a file suffix; unknown suffixes mean JSON."""
    return _SUFFIX_FORMATS.get(Path(path).suffix.lower(), DocumentFormat.JSON)


def detect_shape(document: Any) -> DocumentShape:
    if isinstance(document, dict) and "themes" in document:
        return DocumentShape.COLLECTION
    return DocumentShape.THEME


def decode(text: str, fmt: Union[str, DocumentFormat] = DocumentFormat.JSON,
           source: Optional[str] = None) -> Any:
    """Decode JSON or YAML text into Python objects.

    Raises:
        MalformedDocument: If the text is not valid for the format
    """
    fmt = DocumentFormat(fmt)
    if fmt == DocumentFormat.YAML:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise MalformedDocument(f"Invalid YAML: {e}", source) from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedDocument(f"Invalid JSON: {e}", source) from e


def parse_document(text: str, shape: Union[str, DocumentShape, None] = None,
                   fmt: Union[str, DocumentFormat] = DocumentFormat.JSON,
                   source: Optional[str] = None) -> Dict[str, Any]:
    """Decode and validate a theme or collection document.

    Args:
        text: Raw document text
        shape: Expected shape; detected from the content when None
        fmt: ``json`` or ``yaml``
        source: Label used in error messages (usually the file path)

    Returns:
        The decoded document, guaranteed to satisfy every validation rule

    Raises:
        MalformedDocument: Text could not be decoded
        ValidationFailed: Document decoded but broke one or more rules
    """
    document = decode(text, fmt, source)
    if shape is None:
        shape = detect_shape(document)
    if DocumentShape(shape) == DocumentShape.COLLECTION:
        return parse_collection(document, source)
    return parse_theme(document, source)


def parse_theme(document: Any, source: Optional[str] = None) -> Dict[str, Any]:
    errors = validate_theme(document)
    if errors:
        raise ValidationFailed(errors, source)
    return document


def parse_collection(document: Any, source: Optional[str] = None) -> Dict[str, Any]:
    errors = validate_collection(document)
    if errors:
        raise ValidationFailed(errors, source, summary="Theme collection validation failed")
    return document
