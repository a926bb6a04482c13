"""
Runtime configuration for the proxy/cache service.

Loading turns a document into a validated configuration in one pass:
parse -> overlay defaults per section -> cross-reference validation. A load
either completes or raises; the object being loaded is never the one other
components are reading, so a failed load leaves the live configuration alone.

Features:
- Sparse-overlay defaulting (absent fields keep engine defaults)
- Unused cache pruning and cross-section reference checks
- Rate-limited, thread-safe staleness detection for hot reload
- Deep, independent clones
- Redacted rendering that never leaks passwords or Authorization headers

Usage:
    from proxyconf.config import load_config

    config = load_config("/etc/proxy/proxy.yaml")
    if config.is_stale():
        config = load_config(config.config_file_path)

    print(config)   # redacted JSON
"""
import json
import logging
import os
import socket
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

from . import defaults as d
from .document import DocumentMetadata, detect_format, parse_document
from .errors import ConfigError, ConfigParseError, ConfigValueError
from .metrics import record_load, record_staleness_check
from .options import (
    CacheOptions,
    NegativeCacheConfig,
    OriginOptions,
    ReloadOptions,
    RewriterOptions,
    RuleOptions,
    TracingOptions,
)
from .options.base import clone_section, derived, document_fields, section_to_dict
from .overlay import (
    mapping_at,
    overlay_section,
    process_caching_configs,
    process_origin_configs,
    process_rule_configs,
    process_tracing_configs,
)
from .rewriter import RewriteInstructions, RewriterCompiler, build_rewriter_options, compile_rewriters
from .validation import (
    validate_config_mappings,
    validate_negative_caches,
    validate_origin_sections,
    validate_rule_rewriters,
    validate_tls_configs,
)

log = logging.getLogger(__name__)

PPROF_SERVER_NAMES = ("metrics", "reload", "both", "off")
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL"}

# header names whose values are masked when rendering a configuration
SENSITIVE_HEADERS = frozenset({"Authorization"})


def _monotonic() -> float:
    return time.monotonic()


@dataclass
class MainConfig:
    """General settings plus the bookkeeping used for staleness checks."""
    instance_id: int = 0
    config_handler_path: str = d.DEFAULT_CONFIG_HANDLER_PATH
    ping_handler_path: str = d.DEFAULT_PING_HANDLER_PATH
    reload_handler_path: str = d.DEFAULT_RELOAD_HANDLER_PATH
    health_handler_path: str = d.DEFAULT_HEALTH_HANDLER_PATH
    pprof_server: str = d.DEFAULT_PPROF_SERVER_NAME
    server_name: str = field(default_factory=socket.gethostname)

    config_file_path: str = derived("")
    # st_mtime_ns of the source document when it was loaded
    config_last_modified: Optional[int] = derived(None)
    # monotonic time before which the file is not re-examined
    config_rate_limit_time: float = derived(0.0)
    staleness_check_lock: threading.Lock = derived(default_factory=threading.Lock)

    def clone(self) -> "MainConfig":
        values = {f.name: getattr(self, f.name) for f in document_fields(self)}
        mc = MainConfig(**values)
        with self.staleness_check_lock:
            mc.config_file_path = self.config_file_path
            mc.config_last_modified = self.config_last_modified
            mc.config_rate_limit_time = self.config_rate_limit_time
        return mc

    def to_dict(self) -> Dict[str, Any]:
        return section_to_dict(self)


@dataclass
class FrontendConfig:
    """Main HTTP listener settings."""
    listen_address: str = d.DEFAULT_PROXY_LISTEN_ADDRESS
    listen_port: int = d.DEFAULT_PROXY_LISTEN_PORT
    tls_listen_address: str = d.DEFAULT_TLS_PROXY_LISTEN_ADDRESS
    tls_listen_port: int = d.DEFAULT_TLS_PROXY_LISTEN_PORT
    connections_limit: int = 0
    # at least one origin has a usable certificate and key
    serve_tls: bool = field(default=False, metadata={"derived": True})

    def clone(self) -> "FrontendConfig":
        return clone_section(self)

    def to_dict(self) -> Dict[str, Any]:
        return section_to_dict(self)


@dataclass
class LoggingConfig:
    log_file: str = d.DEFAULT_LOG_FILE
    log_level: str = d.DEFAULT_LOG_LEVEL

    def clone(self) -> "LoggingConfig":
        return clone_section(self)

    def to_dict(self) -> Dict[str, Any]:
        return section_to_dict(self)


@dataclass
class MetricsConfig:
    listen_address: str = d.DEFAULT_METRICS_LISTEN_ADDRESS
    listen_port: int = d.DEFAULT_METRICS_LISTEN_PORT

    def clone(self) -> "MetricsConfig":
        return clone_section(self)

    def to_dict(self) -> Dict[str, Any]:
        return section_to_dict(self)


@dataclass
class Resources:
    """Process-wide runtime handles; never serialized, never shared across clones."""
    quit_event: threading.Event = field(default_factory=threading.Event)
    metadata: Optional[DocumentMetadata] = None


def hide_authorization_credentials(headers: Optional[Dict[str, str]]) -> None:
    """Mask sensitive header values in place."""
    if not headers:
        return
    for name in headers:
        if name in SENSITIVE_HEADERS:
            headers[name] = d.REDACTED_VALUE


class Config:
    """
    Root configuration aggregate.

    A new instance holds engine defaults for every section. ``load_document``
    or ``load_file`` populates it from a document; callers should load into a
    fresh instance and only publish it once loading succeeded.
    """

    def __init__(self):
        self.main = MainConfig()
        self.origins: Dict[str, OriginOptions] = {"default": OriginOptions(name="default")}
        self.caches: Dict[str, CacheOptions] = {"default": CacheOptions(name="default")}
        self.frontend = FrontendConfig()
        self.logging = LoggingConfig()
        self.metrics = MetricsConfig()
        self.tracing_configs: Dict[str, TracingOptions] = {"default": TracingOptions(name="default")}
        self.negative_cache_configs: Dict[str, NegativeCacheConfig] = {"default": NegativeCacheConfig()}
        self.rules: Optional[Dict[str, RuleOptions]] = None
        self.request_rewriters: Optional[Dict[str, RewriterOptions]] = None
        self.reload_config = ReloadOptions()

        self.resources = Resources()
        self.compiled_rewriters: Dict[str, RewriteInstructions] = {}
        self.loader_warnings: List[str] = []

        self._active_caches: Set[str] = set()
        self.provided_origin_url = ""
        self.provided_origin_type = ""

    @classmethod
    def defaults(cls) -> "Config":
        """A configuration built from engine defaults only."""
        config = cls()
        config.set_defaults(DocumentMetadata())
        return config

    @property
    def active_caches(self) -> Set[str]:
        return set(self._active_caches)

    @property
    def config_file_path(self) -> str:
        """Path of the document this configuration was loaded from, if any."""
        return self.main.config_file_path

    def load_file(self, path: Union[str, Path], doc_format: Optional[str] = None,
                  rewriter_compiler: RewriterCompiler = compile_rewriters) -> None:
        """Load from a document on disk; the format follows the file suffix unless given."""
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            self.set_defaults(DocumentMetadata())
            raise ConfigParseError(f"unable to read config file {path}: {e}", str(path)) from e
        self.load_document(data, doc_format=doc_format, source_path=path,
                           rewriter_compiler=rewriter_compiler)

    def load_document(self, data: Union[bytes, str], doc_format: Optional[str] = None,
                      source_path: Optional[Union[str, Path]] = None,
                      rewriter_compiler: RewriterCompiler = compile_rewriters) -> None:
        """
        Populate this configuration from a document.

        Args:
            data: Raw document
            doc_format: ``yaml``, ``json`` or ``toml``; detected from ``source_path`` if omitted
            source_path: File the document came from, used for staleness checks
            rewriter_compiler: Compiles the ``request_rewriters`` section

        Raises:
            ConfigError: on any structural, referential or invariant failure. A
                malformed document leaves this instance holding defaults only.
        """
        source = str(source_path) if source_path else None
        doc_format = doc_format or detect_format(source_path)
        try:
            _, metadata = parse_document(data, doc_format, source=source)
        except ConfigParseError:
            self.set_defaults(DocumentMetadata())
            raise

        self.set_defaults(metadata, rewriter_compiler)

        if source:
            self.main.config_file_path = source
            self.main.config_last_modified = self.check_file_last_modified()

    def set_defaults(self, metadata: DocumentMetadata,
                     rewriter_compiler: RewriterCompiler = compile_rewriters) -> None:
        """Overlay the document onto defaults and validate the result."""
        self.resources.metadata = metadata
        warnings = self.loader_warnings

        overlay_section(self.main, metadata, ("main",))
        overlay_section(self.frontend, metadata, ("frontend",))
        overlay_section(self.logging, metadata, ("logging",))
        overlay_section(self.metrics, metadata, ("metrics",))
        overlay_section(self.reload_config, metadata, ("reloading",))

        self._process_pprof_config()
        self._process_logging_config()

        if metadata.is_defined("request_rewriters"):
            self.request_rewriters = build_rewriter_options(mapping_at(metadata, ("request_rewriters",)))
        if self.request_rewriters is not None:
            self.compiled_rewriters = rewriter_compiler(self.request_rewriters)

        if metadata.is_defined("rules"):
            self.rules = process_rule_configs(mapping_at(metadata, ("rules",)), metadata, warnings)

        self.origins, self._active_caches = process_origin_configs(
            self._section_names(metadata, "origins", self.origins),
            metadata, self.compiled_rewriters, warnings)
        if not metadata.is_defined("origins"):
            self._apply_provided_origin()

        self.tracing_configs = process_tracing_configs(
            self._section_names(metadata, "tracing", self.tracing_configs, merge=True),
            metadata, warnings)

        self.caches = process_caching_configs(
            self._section_names(metadata, "caches", self.caches),
            metadata, self._active_caches, warnings)

        for name in mapping_at(metadata, ("negative_caches",)):
            self.negative_cache_configs[str(name)] = NegativeCacheConfig(
                (str(code), ttl) for code, ttl in mapping_at(metadata, ("negative_caches", name)).items())

        validate_config_mappings(self.origins, self.caches, self.rules)
        validate_rule_rewriters(self.rules, self.compiled_rewriters)
        validate_origin_sections(self.origins, self.negative_cache_configs, self.tracing_configs)
        validate_negative_caches(self.negative_cache_configs)
        if validate_tls_configs(self.origins):
            self.frontend.serve_tls = True

        for warning in warnings:
            log.warning("config.loader_warning message=%s", warning)

    @staticmethod
    def _section_names(metadata: DocumentMetadata, section: str, current: Dict[str, Any],
                       merge: bool = False) -> List[Any]:
        # document keys are returned as parsed; YAML may yield ints or bools
        if not metadata.is_defined(section):
            return list(current)
        keys = list(mapping_at(metadata, (section,)))
        if merge:
            named = {str(k) for k in keys}
            keys = [n for n in current if n not in named] + keys
        return keys

    def _apply_provided_origin(self) -> None:
        oc = self.origins.get("default")
        if oc is None:
            return
        if self.provided_origin_url:
            oc.origin_url = self.provided_origin_url
        if self.provided_origin_type:
            oc.origin_type = self.provided_origin_type

    def _process_pprof_config(self) -> None:
        if self.main.pprof_server == "":
            self.main.pprof_server = d.DEFAULT_PPROF_SERVER_NAME
        elif self.main.pprof_server not in PPROF_SERVER_NAMES:
            raise ConfigValueError(
                f"invalid pprof server name [{self.main.pprof_server}]", section="main", name="pprof_server")

    def _process_logging_config(self) -> None:
        level = self.logging.log_level.upper()
        if level not in VALID_LOG_LEVELS:
            log.warning("config.invalid_log_level level=%s valid=%s using_default=%s",
                        level, sorted(VALID_LOG_LEVELS), d.DEFAULT_LOG_LEVEL)
            self.loader_warnings.append(
                f"invalid log_level [{self.logging.log_level}], using {d.DEFAULT_LOG_LEVEL}")
            level = d.DEFAULT_LOG_LEVEL
        self.logging.log_level = level

    def check_file_last_modified(self) -> Optional[int]:
        """Modification time (ns) of the source document, or None if unavailable."""
        if not self.main.config_file_path:
            return None
        try:
            return os.stat(self.main.config_file_path).st_mtime_ns
        except OSError as e:
            log.debug("config.stat_failed path=%s error=%s", self.main.config_file_path, str(e))
            return None

    def is_stale(self) -> bool:
        """
        True if the source document changed since this configuration was loaded.

        The file is examined at most once per ``reloading.rate_limit_secs``;
        calls in between return False without touching the filesystem. An
        unreadable file is reported as not stale.
        """
        main = self.main
        with main.staleness_check_lock:
            if not main.config_file_path:
                return False
            now = _monotonic()
            if now < main.config_rate_limit_time:
                record_staleness_check("rate_limited")
                return False
            main.config_rate_limit_time = now + self.reload_config.rate_limit_secs

            mtime = self.check_file_last_modified()
            if mtime is None:
                log.warning("config.staleness_check_failed path=%s", main.config_file_path)
                record_staleness_check("unreadable")
                return False
            stale = mtime != main.config_last_modified
            record_staleness_check("stale" if stale else "fresh")
            if stale:
                log.info("config.file_changed path=%s", main.config_file_path)
            return stale

    def clone(self) -> "Config":
        """Deep, independent copy with fresh runtime resources."""
        nc = Config()
        nc.main = self.main.clone()
        nc.frontend = self.frontend.clone()
        nc.logging = self.logging.clone()
        nc.metrics = self.metrics.clone()
        nc.reload_config = self.reload_config.clone()
        nc.resources = Resources()

        nc.origins = {k: v.clone() for k, v in self.origins.items()}
        nc.caches = {k: v.clone() for k, v in self.caches.items()}
        nc.negative_cache_configs = {k: v.clone() for k, v in self.negative_cache_configs.items()}
        nc.tracing_configs = {k: v.clone() for k, v in self.tracing_configs.items()}

        if self.rules:
            nc.rules = {k: v.clone() for k, v in self.rules.items()}
        if self.request_rewriters:
            nc.request_rewriters = {k: v.clone() for k, v in self.request_rewriters.items()}

        nc.compiled_rewriters = dict(self.compiled_rewriters)
        nc.loader_warnings = list(self.loader_warnings)
        nc._active_caches = set(self._active_caches)
        nc.provided_origin_url = self.provided_origin_url
        nc.provided_origin_type = self.provided_origin_type
        return nc

    def to_dict(self, redact_sensitive: bool = True) -> Dict[str, Any]:
        """
        Serializable view of the configuration, built from a clone.

        Args:
            redact_sensitive: Mask passwords and Authorization headers

        Returns:
            Configuration as plain dictionaries and lists
        """
        cp = self.clone()

        for oc in cp.origins.values():
            for p in oc.paths.values():
                p.handler = None
                p.key_hasher = None
            if redact_sensitive:
                hide_authorization_credentials(oc.health_check_headers)
                for p in oc.paths.values():
                    hide_authorization_credentials(p.request_headers)
                    hide_authorization_credentials(p.response_headers)

        if redact_sensitive:
            for cc in cp.caches.values():
                if cc.redis.password:
                    cc.redis.password = d.REDACTED_VALUE
            for tc in cp.tracing_configs.values():
                if tc.collector_pass:
                    tc.collector_pass = d.REDACTED_VALUE

        out: Dict[str, Any] = {
            "main": cp.main.to_dict(),
            "origins": {k: v.to_dict() for k, v in cp.origins.items()},
            "caches": {k: v.to_dict() for k, v in cp.caches.items()},
            "frontend": cp.frontend.to_dict(),
            "logging": cp.logging.to_dict(),
            "metrics": cp.metrics.to_dict(),
            "tracing": {k: v.to_dict() for k, v in cp.tracing_configs.items()},
            "negative_caches": {k: v.to_dict() for k, v in cp.negative_cache_configs.items()},
            "reloading": cp.reload_config.to_dict(),
        }
        if cp.rules is not None:
            out["rules"] = {k: v.to_dict() for k, v in cp.rules.items()}
        if cp.request_rewriters is not None:
            out["request_rewriters"] = {k: v.to_dict() for k, v in cp.request_rewriters.items()}
        return out

    def __str__(self) -> str:
        """String representation with sensitive data redacted."""
        return json.dumps(self.to_dict(redact_sensitive=True), indent=2)

    def __repr__(self) -> str:
        return (f"Config(path={self.main.config_file_path!r}, origins={len(self.origins)}, "
                f"caches={len(self.caches)})")


def load_config(path: Optional[Union[str, Path]] = None, data: Optional[Union[bytes, str]] = None,
                doc_format: Optional[str] = None, origin_url: str = "", origin_type: str = "",
                rewriter_compiler: RewriterCompiler = compile_rewriters) -> Config:
    """
    Build a new, fully validated configuration.

    Args:
        path: Document on disk; read unless ``data`` is given
        data: Document contents; ``path`` is still recorded for staleness checks
        doc_format: Explicit document format
        origin_url: Upstream URL for the built-in default origin when the document defines none
        origin_type: Origin type for the built-in default origin when the document defines none
        rewriter_compiler: Compiles the ``request_rewriters`` section

    Returns:
        The loaded Config

    Raises:
        ConfigError: if the document cannot be loaded; nothing is published
    """
    config = Config()
    config.provided_origin_url = origin_url
    config.provided_origin_type = origin_type
    try:
        if data is not None:
            config.load_document(data, doc_format=doc_format, source_path=path,
                                 rewriter_compiler=rewriter_compiler)
        elif path is not None:
            config.load_file(path, doc_format=doc_format, rewriter_compiler=rewriter_compiler)
        else:
            config.set_defaults(DocumentMetadata(), rewriter_compiler)
    except ConfigError as e:
        record_load(success=False)
        log.error("config.load_failed path=%s error=%s", path, str(e))
        raise
    record_load(success=True)
    log.info("config.loaded path=%s origins=%d caches=%d warnings=%d",
             path, len(config.origins), len(config.caches), len(config.loader_warnings))
    return config


def setup_logging(logging_config: LoggingConfig) -> None:
    """Configure the root logger from a ``logging`` section."""
    level = getattr(logging, logging_config.log_level.upper(), logging.INFO)
    fmt = "%(asctime)s %(levelname)s %(name)s %(message)s"
    if logging_config.log_file:
        logging.basicConfig(level=level, format=fmt, filename=logging_config.log_file, force=True)
    else:
        logging.basicConfig(level=level, format=fmt, force=True)
    log.info("logging.configured level=%s file=%s", logging_config.log_level,
             logging_config.log_file or "<stderr>")
