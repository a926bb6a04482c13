"""
Cross-section validation run after every section has been defaulted.

Checks are ordered and the first failure aborts the load with an error that
names the offending section entry and the reference it could not resolve.
"""
import logging
from typing import Mapping, Optional

from .errors import ConfigReferenceError, ConfigValueError, TLSConfigError
from .options import (
    CacheOptions,
    NegativeCacheConfig,
    OriginOptions,
    RuleOptions,
    TracingOptions,
    validate_origin_name,
)
from .rewriter import RewriteInstructions

log = logging.getLogger(__name__)


def validate_config_mappings(origins: Mapping[str, OriginOptions],
                             caches: Mapping[str, CacheOptions],
                             rules: Optional[Mapping[str, RuleOptions]]) -> None:
    """
    Validate origin names and their cache or rule references.

    Rule-typed origins are checked against ``rules`` only and get the matched
    rule bound onto ``rule_options``; every other origin is checked against
    ``caches`` only.
    """
    rules = rules or {}
    for name, oc in origins.items():
        validate_origin_name(name)

        if oc.is_rule_type:
            rule = rules.get(oc.rule_name)
            if rule is None:
                raise ConfigReferenceError(
                    f"invalid rule name [{oc.rule_name}] provided in origin config [{name}]",
                    section="origins", name=name, reference=oc.rule_name)
            rule.name = oc.rule_name
            oc.rule_options = rule
        elif oc.cache_name not in caches:
            raise ConfigReferenceError(
                f"invalid cache name [{oc.cache_name}] provided in origin config [{name}]",
                section="origins", name=name, reference=oc.cache_name)


def validate_origin_sections(origins: Mapping[str, OriginOptions],
                             negative_caches: Mapping[str, NegativeCacheConfig],
                             tracing: Mapping[str, TracingOptions]) -> None:
    for name, oc in origins.items():
        if oc.negative_cache_name not in negative_caches:
            raise ConfigReferenceError(
                f"invalid negative cache name [{oc.negative_cache_name}] provided in origin config [{name}]",
                section="origins", name=name, reference=oc.negative_cache_name)
        if oc.tracing_config_name not in tracing:
            raise ConfigReferenceError(
                f"invalid tracing name [{oc.tracing_config_name}] provided in origin config [{name}]",
                section="origins", name=name, reference=oc.tracing_config_name)


def validate_rule_rewriters(rules: Optional[Mapping[str, RuleOptions]],
                            compiled: Mapping[str, RewriteInstructions]) -> None:
    for name, rule in (rules or {}).items():
        for rewriter_name in rule.rewriter_names():
            if rewriter_name not in compiled:
                raise ConfigReferenceError(
                    f"invalid rewriter name [{rewriter_name}] in rule config [{name}]",
                    section="rules", name=name, reference=rewriter_name)


def validate_negative_caches(negative_caches: Mapping[str, NegativeCacheConfig]) -> None:
    """Response codes must be integer HTTP error statuses and TTLs non-negative integers."""
    for name, nc in negative_caches.items():
        for code, ttl in nc.items():
            try:
                status = int(code)
            except (TypeError, ValueError):
                status = 0
            if status < 400 or status >= 600:
                raise ConfigValueError(
                    f"invalid response code [{code}] in negative cache config [{name}]",
                    section="negative_caches", name=name)
            if isinstance(ttl, bool) or not isinstance(ttl, int) or ttl < 0:
                raise ConfigValueError(
                    f"invalid ttl [{ttl}] for response code [{code}] in negative cache config [{name}]",
                    section="negative_caches", name=name)


def validate_tls_configs(origins: Mapping[str, OriginOptions]) -> bool:
    """
    Validate each origin's TLS options.

    Returns:
        True if any origin has a complete serving certificate, meaning the
        TLS listener must be enabled
    """
    serve_tls = False
    for name, oc in origins.items():
        if oc.tls is None:
            continue
        try:
            if oc.tls.validate():
                serve_tls = True
        except TLSConfigError as e:
            raise TLSConfigError(f"{e} in origin config [{name}]") from e
    log.debug("config.tls_validated serve_tls=%s", serve_tls)
    return serve_tls

