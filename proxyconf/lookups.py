"""
Static name-to-enum lookup tables used while decoding configuration.

Unknown names are handled by the caller: match types fall back to ``exact``,
cache types keep their default id, collapsed-forwarding names are rejected.
"""
from enum import Enum
from typing import Dict


class EvictionMethod(Enum):
    """Timeseries eviction methods."""
    OLDEST = 0
    LRU = 1

    def __str__(self) -> str:
        return self.name.lower()


class CacheType(Enum):
    """Cache backend types."""
    MEMORY = 0
    FILESYSTEM = 1
    REDIS = 2
    BBOLT = 3
    BADGER = 4

    def __str__(self) -> str:
        return self.name.lower()


class PathMatchType(Enum):
    """How a path route pattern is matched against a request path."""
    EXACT = 0
    PREFIX = 1

    def __str__(self) -> str:
        return self.name.lower()


class CollapsedForwardingType(Enum):
    """Collapsed (coalesced) upstream request forwarding modes."""
    BASIC = 0
    PROGRESSIVE = 1

    def __str__(self) -> str:
        return self.name.lower()


class TracerType(Enum):
    """Distributed tracing exporter types."""
    NONE = 0
    STDOUT = 1
    JAEGER = 2
    ZIPKIN = 3

    def __str__(self) -> str:
        return self.name.lower()


def _names(enum_cls) -> Dict[str, Enum]:
    return {str(member): member for member in enum_cls}


EVICTION_METHOD_NAMES: Dict[str, EvictionMethod] = _names(EvictionMethod)
CACHE_TYPE_NAMES: Dict[str, CacheType] = _names(CacheType)
PATH_MATCH_TYPE_NAMES: Dict[str, PathMatchType] = _names(PathMatchType)
COLLAPSED_FORWARDING_NAMES: Dict[str, CollapsedForwardingType] = _names(CollapsedForwardingType)
TRACER_TYPE_NAMES: Dict[str, TracerType] = _names(TracerType)
