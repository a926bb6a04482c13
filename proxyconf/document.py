"""
Configuration document decoding with per-field definedness tracking.

The loader needs to know whether a field was actually written by the author
or merely absent, so decoding yields both the raw tree and a
``DocumentMetadata`` that answers ``is_defined("origins", name, "cache_name")``.

Supported formats: YAML (default), JSON and TOML.

Usage:
    from proxyconf.document import parse_document

    doc, md = parse_document(b"origins:\\n  web:\\n    origin_url: http://a\\n")
    md.is_defined("origins", "web", "origin_url")   # True
    md.is_defined("origins", "web", "cache_name")   # False
"""
import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from .errors import ConfigParseError

log = logging.getLogger(__name__)

FORMAT_YAML = "yaml"
FORMAT_JSON = "json"
FORMAT_TOML = "toml"

_SUFFIX_FORMATS = {
    ".yaml": FORMAT_YAML,
    ".yml": FORMAT_YAML,
    ".json": FORMAT_JSON,
    ".toml": FORMAT_TOML,
}

_MISSING = object()


class DocumentMetadata:
    """Answers whether a key path was explicitly present in the source document."""

    def __init__(self, document: Optional[Dict[str, Any]] = None):
        self._document = document or {}

    def lookup(self, *keys: Union[str, int]) -> Any:
        node: Any = self._document
        for key in keys:
            if isinstance(node, dict):
                if key not in node:
                    return _MISSING
                node = node[key]
            elif isinstance(node, list) and isinstance(key, int):
                if key < 0 or key >= len(node):
                    return _MISSING
                node = node[key]
            else:
                return _MISSING
        return node

    def is_defined(self, *keys: Union[str, int]) -> bool:
        """True when every step of the key path exists in the document."""
        return self.lookup(*keys) is not _MISSING

    def keys(self) -> List[Tuple[Union[str, int], ...]]:
        """All defined key paths, depth first."""
        found: List[Tuple[Union[str, int], ...]] = []

        def walk(node: Any, prefix: Tuple[Union[str, int], ...]):
            if isinstance(node, dict):
                items = node.items()
            elif isinstance(node, list):
                items = enumerate(node)
            else:
                return
            for key, value in items:
                path = prefix + (key,)
                found.append(path)
                walk(value, path)

        walk(self._document, ())
        return found


def detect_format(path: Optional[Union[str, Path]], default: str = FORMAT_YAML) -> str:
    if not path:
        return default
    return _SUFFIX_FORMATS.get(Path(path).suffix.lower(), default)


def parse_document(data: Union[bytes, str], doc_format: str = FORMAT_YAML,
                   source: Optional[str] = None) -> Tuple[Dict[str, Any], DocumentMetadata]:
    """
    Decode a configuration document.

    Args:
        data: Raw document bytes or text
        doc_format: One of ``yaml``, ``json`` or ``toml``
        source: Optional path used in error messages

    Returns:
        Tuple of the decoded mapping and its definedness metadata

    Raises:
        ConfigParseError: if the document is malformed or its root is not a mapping
    """
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ConfigParseError(f"config document {source or '<bytes>'} is not valid utf-8: {e}",
                                   source) from e
    else:
        text = data

    where = source or "<document>"
    try:
        if doc_format == FORMAT_YAML:
            document = yaml.safe_load(text)
        elif doc_format == FORMAT_JSON:
            document = json.loads(text) if text.strip() else None
        elif doc_format == FORMAT_TOML:
            document = tomllib.loads(text)
        else:
            raise ConfigParseError(f"unsupported config format [{doc_format}] for {where}", source)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"invalid YAML in {where}: {e}", source) from e
    except json.JSONDecodeError as e:
        raise ConfigParseError(f"invalid JSON in {where}: {e}", source) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"invalid TOML in {where}: {e}", source) from e

    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ConfigParseError(f"config root must be a mapping in {where}", source)

    log.debug("document.parsed source=%s format=%s sections=%d", where, doc_format, len(document))
    return document, DocumentMetadata(document)
