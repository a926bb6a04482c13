"""Origin (upstream backend) options."""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .. import defaults as d
from ..errors import ConfigValueError
from ..lookups import EvictionMethod
from .base import clone_section, derived, section_to_dict
from .paths import PathOptions
from .rule import RuleOptions
from .tls import TLSOptions

ORIGIN_TYPE_RULE = "rule"

_RESTRICTED_ORIGIN_NAMES = {"", "frontend"}
_ORIGIN_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]+$")


def validate_origin_name(name: str) -> None:
    """Raise ConfigValueError if ``name`` cannot be used as an origin name."""
    if name in _RESTRICTED_ORIGIN_NAMES or not _ORIGIN_NAME_PATTERN.match(name):
        raise ConfigValueError(f"invalid origin name [{name}]", section="origins", name=name)


@dataclass
class OriginOptions:
    """
    One backend target definition.

    Instances are rebuilt from defaults on every load; the loader copies only
    fields the document explicitly set.
    """
    origin_type: str = ""
    origin_url: str = ""
    hosts: List[str] = field(default_factory=list)
    is_default: bool = False
    path_routing_disabled: bool = False
    require_tls: bool = False
    forwarded_headers: str = d.DEFAULT_FORWARDED_HEADERS
    cache_name: str = d.DEFAULT_ORIGIN_CACHE_NAME
    cache_key_prefix: str = ""
    compressable_types: List[str] = field(default_factory=lambda: list(d.DEFAULT_COMPRESSABLE_TYPES))
    timeout_secs: int = d.DEFAULT_ORIGIN_TIMEOUT_SECS
    max_idle_conns: int = d.DEFAULT_MAX_IDLE_CONNS
    keep_alive_timeout_secs: int = d.DEFAULT_KEEP_ALIVE_TIMEOUT_SECS
    timeseries_retention_factor: int = d.DEFAULT_ORIGIN_TRF
    timeseries_eviction_method_name: str = field(default=d.DEFAULT_ORIGIN_TEM_NAME,
                                                 metadata={"key": "timeseries_eviction_method"})
    timeseries_ttl_secs: int = d.DEFAULT_TIMESERIES_TTL_SECS
    max_ttl_secs: int = d.DEFAULT_MAX_TTL_SECS
    fastforward_ttl_secs: int = d.DEFAULT_FAST_FORWARD_TTL_SECS
    fast_forward_disable: bool = False
    backfill_tolerance_secs: int = d.DEFAULT_BACKFILL_TOLERANCE_SECS
    paths: Dict[str, PathOptions] = field(default_factory=dict)
    negative_cache_name: str = d.DEFAULT_ORIGIN_NEGATIVE_CACHE_NAME
    tracing_config_name: str = field(default=d.DEFAULT_TRACING_CONFIG_NAME,
                                     metadata={"key": "tracing_name"})
    health_check_upstream_path: str = d.DEFAULT_HEALTH_CHECK_PATH
    health_check_verb: str = d.DEFAULT_HEALTH_CHECK_VERB
    health_check_query: str = d.DEFAULT_HEALTH_CHECK_QUERY
    health_check_headers: Dict[str, str] = field(default_factory=dict)
    max_object_size_bytes: int = d.DEFAULT_MAX_OBJECT_SIZE_BYTES
    revalidation_factor: float = d.DEFAULT_REVALIDATION_FACTOR
    multipart_ranges_disabled: bool = False
    dearticulate_upstream_ranges: bool = False
    tls: Optional[TLSOptions] = None
    rule_name: str = ""
    req_rewriter_name: str = ""

    name: str = derived("")
    timeseries_eviction_method: EvictionMethod = derived(EvictionMethod.OLDEST)
    rule_options: Optional[RuleOptions] = derived(None)
    req_rewriter: Optional[tuple] = derived(None, shared=True)

    @property
    def is_rule_type(self) -> bool:
        return self.origin_type == ORIGIN_TYPE_RULE

    def clone(self) -> "OriginOptions":
        return clone_section(self)

    def to_dict(self) -> Dict[str, Any]:
        return section_to_dict(self)
