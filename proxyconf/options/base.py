"""
Shared helpers for option-section dataclasses.

Field metadata understood here:
- ``derived``: computed during load, never read from or written to a document
- ``shared``: copied by reference when cloning (callables, compiled rewriters)
- ``key``: document key when it differs from the attribute name
"""
import copy
from dataclasses import field, fields
from typing import Any, Dict, List

DERIVED: Dict[str, Any] = {"derived": True}
SHARED_DERIVED: Dict[str, Any] = {"derived": True, "shared": True}


def derived(default=None, shared: bool = False, default_factory=None):
    """Declare a field that is computed during load rather than decoded."""
    metadata = SHARED_DERIVED if shared else DERIVED
    if default_factory is not None:
        return field(default_factory=default_factory, metadata=metadata, compare=False)
    return field(default=default, metadata=metadata, compare=False)


def doc_key(f) -> str:
    return f.metadata.get("key", f.name)


def document_fields(section) -> List:
    """Dataclass fields that map to document keys."""
    return [f for f in fields(section) if not f.metadata.get("derived")]


def document_keys(section) -> List[str]:
    return [doc_key(f) for f in document_fields(section)]


def _clone_value(value: Any) -> Any:
    if hasattr(value, "clone"):
        return value.clone()
    if isinstance(value, dict):
        return {k: _clone_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_clone_value(v) for v in value]
    return copy.deepcopy(value)


def clone_section(section):
    """Field-by-field deep copy of an option dataclass."""
    values = {}
    for f in fields(section):
        value = getattr(section, f.name)
        if f.metadata.get("shared"):
            values[f.name] = value
        else:
            values[f.name] = _clone_value(value)
    return type(section)(**values)


def plain(value: Any) -> Any:
    """Convert option values into plain serializable structures."""
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, dict):
        return {str(k): plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [plain(v) for v in value]
    return value


def section_to_dict(section) -> Dict[str, Any]:
    return {doc_key(f): plain(getattr(section, f.name)) for f in document_fields(section)}
