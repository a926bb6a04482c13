"""
Sparse-overlay defaulting of configuration sections.

Every section entry starts from a freshly defaulted options instance; only
fields the document explicitly defines are copied across. A field the author
left out therefore keeps the engine default instead of whatever zero value a
plain decode would produce.

The active-cache set built while processing origins is returned to the caller
and handed to ``process_caching_configs``, which drops every cache no origin
uses before spending any work on it.
"""
import dataclasses
import datetime
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

from . import defaults as d
from .document import DocumentMetadata
from .errors import ConfigReferenceError, ConfigValueError
from .lookups import (
    CACHE_TYPE_NAMES,
    COLLAPSED_FORWARDING_NAMES,
    EVICTION_METHOD_NAMES,
    PATH_MATCH_TYPE_NAMES,
    TRACER_TYPE_NAMES,
    CacheType,
    CollapsedForwardingType,
    PathMatchType,
)
from .options import (
    BACKEND_SECTIONS,
    PATH_MEMBERS,
    CacheOptions,
    OriginOptions,
    PathOptions,
    RuleCaseOptions,
    RuleOptions,
    TLSOptions,
    TracingOptions,
    path_key,
)
from .options.base import doc_key, document_fields, document_keys
from .rewriter import RewriteInstructions

log = logging.getLogger(__name__)

KeyPath = Tuple[Union[str, int], ...]


def _where(path: KeyPath) -> str:
    return ".".join(str(p) for p in path)


def _type_error(path: KeyPath, expected: str, value: Any) -> ConfigValueError:
    return ConfigValueError(
        f"invalid value for [{_where(path)}]: expected {expected}, got {type(value).__name__}",
        section=str(path[0]), name=_where(path[1:]))


def coerce_value(current: Any, value: Any, path: KeyPath) -> Any:
    """Check a document value against the type of the default it replaces."""
    if isinstance(current, bool):
        if isinstance(value, bool):
            return value
        raise _type_error(path, "boolean", value)
    if isinstance(current, int):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        raise _type_error(path, "integer", value)
    if isinstance(current, float):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        raise _type_error(path, "number", value)
    if isinstance(current, str):
        if isinstance(value, str):
            return value
        raise _type_error(path, "string", value)
    if isinstance(current, list):
        if isinstance(value, list):
            return [_scalar_text(v, path + (i,)) for i, v in enumerate(value)]
        raise _type_error(path, "list", value)
    if isinstance(current, dict):
        if isinstance(value, dict):
            return {str(k): _scalar_text(v, path + (k,)) for k, v in value.items()}
        raise _type_error(path, "mapping", value)
    return value


def _scalar_text(value: Any, path: KeyPath) -> str:
    # collection fields hold strings; dates and numbers keep their document spelling
    if isinstance(value, (Mapping, list)) or value is None:
        raise _type_error(path, "string", value)
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


def mapping_at(metadata: DocumentMetadata, path: KeyPath) -> Mapping[str, Any]:
    value = metadata.lookup(*path) if metadata.is_defined(*path) else None
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise _type_error(path, "mapping", value)
    return value


def warn_unknown_keys(section, metadata: DocumentMetadata, path: KeyPath,
                      warnings: Optional[List[str]]) -> None:
    """Record document keys under ``path`` that the section does not recognize."""
    if warnings is None:
        return
    allowed = set(document_keys(section))
    for key in mapping_at(metadata, path):
        if key not in allowed:
            message = f"unrecognized key [{_where(path + (key,))}] was ignored"
            warnings.append(message)


def overlay_section(target, metadata: DocumentMetadata, path: KeyPath,
                    skip: Iterable[str] = ()) -> None:
    """
    Copy explicitly defined document values onto a defaulted section.

    Nested dataclass sub-sections are overlaid recursively. An explicit null
    leaves the default in place.

    Args:
        target: Option dataclass pre-populated with defaults
        metadata: Definedness oracle for the parsed document
        path: Key path of ``target`` within the document
        skip: Document keys the caller handles itself
    """
    skipped = set(skip)
    for f in document_fields(target):
        key = doc_key(f)
        if key in skipped or not metadata.is_defined(*path, key):
            continue
        value = metadata.lookup(*path, key)
        if value is None:
            continue
        current = getattr(target, f.name)
        if dataclasses.is_dataclass(current):
            if not isinstance(value, Mapping):
                raise _type_error(path + (key,), "mapping", value)
            overlay_section(current, metadata, path + (key,))
            continue
        setattr(target, f.name, coerce_value(current, value, path + (key,)))


def _resolve_rewriter(name: str, compiled: Mapping[str, RewriteInstructions],
                      message: str, section: str, owner: str) -> RewriteInstructions:
    try:
        return compiled[name]
    except KeyError:
        raise ConfigReferenceError(message, section=section, name=owner, reference=name) from None


def _path_entries(raw_paths: Any, where: KeyPath) -> List[Tuple[Union[str, int], Any]]:
    if isinstance(raw_paths, Mapping):
        return list(raw_paths.items())
    if isinstance(raw_paths, list):
        return list(enumerate(raw_paths))
    raise _type_error(where, "mapping or list of paths", raw_paths)


def process_path_config(origin_key: Any, label: Union[str, int], metadata: DocumentMetadata,
                        compiled: Mapping[str, RewriteInstructions],
                        warnings: Optional[List[str]] = None) -> PathOptions:
    """Build one path route entry of an origin."""
    prefix: KeyPath = ("origins", origin_key, "paths", label)
    origin_name = str(origin_key)
    if not isinstance(metadata.lookup(*prefix), Mapping):
        raise _type_error(prefix, "mapping", metadata.lookup(*prefix))

    p = PathOptions()
    overlay_section(p, metadata, prefix)
    warn_unknown_keys(p, metadata, prefix, warnings)

    if metadata.is_defined(*prefix, "req_rewriter_name") and p.req_rewriter_name:
        p.req_rewriter = _resolve_rewriter(
            p.req_rewriter_name, compiled,
            f"invalid rewriter name [{p.req_rewriter_name}] in path [{label}] "
            f"of origin config [{origin_name}]",
            section="origins", owner=origin_name)

    if not p.methods:
        p.methods = list(d.DEFAULT_PATH_METHODS)

    p.custom = [pm for pm in PATH_MEMBERS if metadata.is_defined(*prefix, pm)]

    if metadata.is_defined(*prefix, "response_body"):
        p.response_body_bytes = p.response_body.encode("utf-8")
        p.has_custom_response_body = True

    if metadata.is_defined(*prefix, "collapsed_forwarding"):
        cf = COLLAPSED_FORWARDING_NAMES.get(p.collapsed_forwarding_name.lower())
        if cf is None:
            raise ConfigValueError(
                f"invalid collapsed_forwarding name [{p.collapsed_forwarding_name}] "
                f"in path [{label}] of origin config [{origin_name}]",
                section="origins", name=origin_name)
        p.collapsed_forwarding_type = cf
        p.collapsed_forwarding_name = str(cf)
    else:
        p.collapsed_forwarding_type = CollapsedForwardingType.BASIC

    p.match_type = PATH_MATCH_TYPE_NAMES.get(p.match_type_name.lower(), PathMatchType.EXACT)
    p.match_type_name = str(p.match_type)
    return p


def process_origin_config(key: Any, metadata: DocumentMetadata, origin_count: int,
                          compiled: Mapping[str, RewriteInstructions],
                          warnings: Optional[List[str]] = None) -> OriginOptions:
    """Build one origin from defaults plus the fields its document entry defines."""
    prefix: KeyPath = ("origins", key)
    name = str(key)
    mapping_at(metadata, prefix)

    oc = OriginOptions()
    oc.name = name
    overlay_section(oc, metadata, prefix, skip=("paths", "tls"))
    warn_unknown_keys(oc, metadata, prefix, warnings)

    if metadata.is_defined(*prefix, "req_rewriter_name") and oc.req_rewriter_name:
        oc.req_rewriter = _resolve_rewriter(
            oc.req_rewriter_name, compiled,
            f"invalid rewriter name [{oc.req_rewriter_name}] in origin config [{name}]",
            section="origins", owner=name)

    # a lone origin is the default unless the author said otherwise
    if origin_count == 1 and not metadata.is_defined(*prefix, "is_default"):
        oc.is_default = True

    if metadata.is_defined(*prefix, "timeseries_eviction_method"):
        oc.timeseries_eviction_method_name = oc.timeseries_eviction_method_name.lower()
        method = EVICTION_METHOD_NAMES.get(oc.timeseries_eviction_method_name)
        if method is not None:
            oc.timeseries_eviction_method = method

    if metadata.is_defined(*prefix, "paths") and metadata.lookup(*prefix, "paths") is not None:
        for label, _ in _path_entries(metadata.lookup(*prefix, "paths"), prefix + ("paths",)):
            p = process_path_config(key, label, metadata, compiled, warnings)
            route_key = path_key(p.path, p.methods)
            if route_key in oc.paths and warnings is not None:
                warnings.append(f"path route [{route_key}] is defined more than once in origin config [{name}]")
            oc.paths[route_key] = p

    if metadata.is_defined(*prefix, "tls") and metadata.lookup(*prefix, "tls") is not None:
        oc.tls = TLSOptions()
        overlay_section(oc.tls, metadata, prefix + ("tls",))
        warn_unknown_keys(oc.tls, metadata, prefix + ("tls",), warnings)

    return oc


def process_origin_configs(names: Iterable[Any], metadata: DocumentMetadata,
                           compiled: Mapping[str, RewriteInstructions],
                           warnings: Optional[List[str]] = None
                           ) -> Tuple[Dict[str, OriginOptions], Set[str]]:
    """
    Build every origin and collect the caches they use.

    Returns:
        Tuple of origins keyed by name and the set of active cache names
    """
    names = list(names)
    origins: Dict[str, OriginOptions] = {}
    active_caches: Set[str] = set()
    for name in names:
        oc = process_origin_config(name, metadata, len(names), compiled, warnings)
        active_caches.add(oc.cache_name)
        origins[oc.name] = oc
    log.debug("config.origins_processed count=%d active_caches=%s", len(origins), sorted(active_caches))
    return origins, active_caches


def _process_redis(cc: CacheOptions, metadata: DocumentMetadata, prefix: KeyPath,
                   warnings: Optional[List[str]]) -> None:
    redis_path = prefix + ("redis",)
    overlay_section(cc.redis, metadata, redis_path)
    cc.redis.client_type = cc.redis.client_type.lower()

    has_endpoint = metadata.is_defined(*redis_path, "endpoint")
    has_endpoints = metadata.is_defined(*redis_path, "endpoints")
    message = None
    if cc.redis.client_type == "standard":
        if has_endpoints and not has_endpoint:
            message = ("'standard' redis type configured, but 'endpoints' value is provided "
                       "instead of 'endpoint'")
    elif has_endpoint and not has_endpoints:
        message = (f"'{cc.redis.client_type}' redis type configured, but 'endpoint' value is "
                   f"provided instead of 'endpoints'")
    if message and warnings is not None:
        warnings.append(message)
        log.debug("config.redis_endpoint_mismatch cache=%s client_type=%s", cc.name, cc.redis.client_type)


def process_cache_config(key: Any, metadata: DocumentMetadata,
                         warnings: Optional[List[str]] = None) -> CacheOptions:
    """Build one cache and enforce its index backoff invariants."""
    prefix: KeyPath = ("caches", key)
    name = str(key)
    mapping_at(metadata, prefix)
    cc = CacheOptions()
    cc.name = name
    overlay_section(cc, metadata, prefix, skip=("index",) + tuple(BACKEND_SECTIONS.values()))
    warn_unknown_keys(cc, metadata, prefix, warnings)

    if metadata.is_defined(*prefix, "cache_type"):
        cc.cache_type = cc.cache_type.lower()
        cache_type = CACHE_TYPE_NAMES.get(cc.cache_type)
        if cache_type is not None:
            cc.cache_type_id = cache_type
        elif warnings is not None:
            warnings.append(f"unknown cache_type [{cc.cache_type}] in cache config [{name}]")

    overlay_section(cc.index, metadata, prefix + ("index",))
    idx = cc.index
    if idx.max_size_bytes > 0 and idx.max_size_backoff_bytes > idx.max_size_bytes:
        raise ConfigValueError(
            f"max_size_backoff_bytes can't be larger than max_size_bytes in cache config [{name}]",
            section="caches", name=name)
    if idx.max_size_objects > 0 and idx.max_size_backoff_objects > idx.max_size_objects:
        raise ConfigValueError(
            f"max_size_backoff_objects can't be larger than max_size_objects in cache config [{name}]",
            section="caches", name=name)

    for cache_type, section in BACKEND_SECTIONS.items():
        if cache_type != cc.cache_type_id:
            if metadata.is_defined(*prefix, section) and warnings is not None:
                warnings.append(f"[{section}] options in cache config [{name}] are ignored "
                                f"for cache_type [{cc.cache_type}]")
            continue
        if cache_type == CacheType.REDIS:
            _process_redis(cc, metadata, prefix, warnings)
        else:
            overlay_section(getattr(cc, section), metadata, prefix + (section,))
    return cc


def process_caching_configs(names: Iterable[Any], metadata: DocumentMetadata, active_caches: Set[str],
                            warnings: Optional[List[str]] = None) -> Dict[str, CacheOptions]:
    """
    Prune caches no origin references, then build the rest.

    Must run after ``process_origin_configs`` produced ``active_caches``.
    """
    caches: Dict[str, CacheOptions] = {}
    for key in names:
        name = str(key)
        if name not in active_caches:
            log.info("config.cache_pruned cache=%s reason=unreferenced", name)
            continue
        caches[name] = process_cache_config(key, metadata, warnings)
    return caches


def process_tracing_configs(names: Iterable[Any], metadata: DocumentMetadata,
                            warnings: Optional[List[str]] = None) -> Dict[str, TracingOptions]:
    configs: Dict[str, TracingOptions] = {}
    for key in names:
        name = str(key)
        prefix: KeyPath = ("tracing", key)
        mapping_at(metadata, prefix)
        o = TracingOptions()
        o.name = name
        overlay_section(o, metadata, prefix)
        warn_unknown_keys(o, metadata, prefix, warnings)
        o.tracer_type = o.tracer_type.lower()
        tracer = TRACER_TYPE_NAMES.get(o.tracer_type)
        if tracer is None:
            raise ConfigValueError(f"invalid tracer_type [{o.tracer_type}] in tracing config [{name}]",
                                   section="tracing", name=name)
        o.tracer_type_id = tracer
        configs[name] = o
    return configs


def process_rule_configs(names: Iterable[Any], metadata: DocumentMetadata,
                         warnings: Optional[List[str]] = None) -> Dict[str, RuleOptions]:
    rules: Dict[str, RuleOptions] = {}
    for key in names:
        name = str(key)
        prefix: KeyPath = ("rules", key)
        mapping_at(metadata, prefix)
        r = RuleOptions()
        r.name = name
        overlay_section(r, metadata, prefix, skip=("cases",))
        warn_unknown_keys(r, metadata, prefix, warnings)
        for case_name in mapping_at(metadata, prefix + ("cases",)):
            case = RuleCaseOptions()
            overlay_section(case, metadata, prefix + ("cases", case_name))
            r.cases[str(case_name)] = case
        rules[name] = r
    return rules
