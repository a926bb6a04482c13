"""
proxyconf: authoritative runtime configuration for a proxying/caching service.

Loads a YAML, JSON or TOML document, fills unset fields from engine defaults,
validates references between sections, detects on-disk changes for hot
reload and renders redacted snapshots.
"""
from .config import (
    Config,
    FrontendConfig,
    LoggingConfig,
    MainConfig,
    MetricsConfig,
    Resources,
    load_config,
    setup_logging,
)
from .document import DocumentMetadata, parse_document
from .errors import (
    ConfigError,
    ConfigParseError,
    ConfigReferenceError,
    ConfigValueError,
    RewriterCompileError,
    TLSConfigError,
)
from .reload import ConfigReloader, get_config, get_reloader, reset_config

__version__ = "0.1.0"

__all__ = [
    "Config",
    "ConfigError",
    "ConfigParseError",
    "ConfigReferenceError",
    "ConfigReloader",
    "ConfigValueError",
    "DocumentMetadata",
    "FrontendConfig",
    "LoggingConfig",
    "MainConfig",
    "MetricsConfig",
    "Resources",
    "RewriterCompileError",
    "TLSConfigError",
    "get_config",
    "get_reloader",
    "load_config",
    "parse_document",
    "reset_config",
    "setup_logging",
]
