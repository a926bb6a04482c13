"""Option sections assembled into a proxy configuration."""
from .cache import (
    BACKEND_SECTIONS,
    BadgerOptions,
    BBoltOptions,
    CacheOptions,
    FilesystemOptions,
    IndexOptions,
    RedisOptions,
)
from .negative_cache import NegativeCacheConfig
from .origin import ORIGIN_TYPE_RULE, OriginOptions, validate_origin_name
from .paths import PATH_MEMBERS, PathOptions, path_key
from .reload import ReloadOptions
from .rewriter import RewriterOptions
from .rule import RuleCaseOptions, RuleOptions
from .tls import TLSOptions
from .tracing import JaegerOptions, StdoutOptions, TracingOptions

__all__ = [
    "BACKEND_SECTIONS",
    "BadgerOptions",
    "BBoltOptions",
    "CacheOptions",
    "FilesystemOptions",
    "IndexOptions",
    "JaegerOptions",
    "NegativeCacheConfig",
    "ORIGIN_TYPE_RULE",
    "OriginOptions",
    "PATH_MEMBERS",
    "PathOptions",
    "RedisOptions",
    "ReloadOptions",
    "RewriterOptions",
    "RuleCaseOptions",
    "RuleOptions",
    "StdoutOptions",
    "TLSOptions",
    "TracingOptions",
    "path_key",
    "validate_origin_name",
]
