"""Per-origin path route options."""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from .. import defaults as d
from ..lookups import CollapsedForwardingType, PathMatchType
from .base import clone_section, derived, section_to_dict

# Document keys recorded in PathOptions.custom when the author set them
PATH_MEMBERS = (
    "path", "match_type", "handler", "methods", "cache_key_params",
    "cache_key_headers", "cache_key_form_fields", "default_ttl_secs",
    "request_headers", "request_params", "response_headers", "response_code",
    "response_body", "no_metrics", "collapsed_forwarding", "req_rewriter_name",
)


def path_key(path: str, methods: Sequence[str]) -> str:
    """Composite route key: the pattern followed by its methods, dash separated."""
    return path + "-" + "-".join(methods)


@dataclass
class PathOptions:
    """One route in an origin's path table."""
    path: str = "/"
    match_type_name: str = field(default=d.DEFAULT_PATH_MATCH_TYPE_NAME,
                                 metadata={"key": "match_type"})
    handler_name: str = field(default="", metadata={"key": "handler"})
    methods: List[str] = field(default_factory=lambda: list(d.DEFAULT_PATH_METHODS))
    cache_key_params: List[str] = field(default_factory=list)
    cache_key_headers: List[str] = field(default_factory=list)
    cache_key_form_fields: List[str] = field(default_factory=list)
    default_ttl_secs: int = 0
    request_headers: Dict[str, str] = field(default_factory=dict)
    request_params: Dict[str, str] = field(default_factory=dict)
    response_headers: Dict[str, str] = field(default_factory=dict)
    response_code: int = 0
    response_body: str = ""
    no_metrics: bool = False
    collapsed_forwarding_name: str = field(default=d.DEFAULT_COLLAPSED_FORWARDING_NAME,
                                           metadata={"key": "collapsed_forwarding"})
    req_rewriter_name: str = ""

    match_type: PathMatchType = derived(PathMatchType.EXACT)
    collapsed_forwarding_type: CollapsedForwardingType = derived(CollapsedForwardingType.BASIC)
    response_body_bytes: bytes = derived(b"")
    has_custom_response_body: bool = derived(False)
    custom: List[str] = derived(default_factory=list)
    handler: Optional[Callable[..., Any]] = derived(None, shared=True)
    key_hasher: Optional[Callable[..., Any]] = derived(None, shared=True)
    req_rewriter: Optional[tuple] = derived(None, shared=True)

    @property
    def key(self) -> str:
        return path_key(self.path, self.methods)

    def clone(self) -> "PathOptions":
        return clone_section(self)

    def to_dict(self) -> Dict[str, Any]:
        return section_to_dict(self)
