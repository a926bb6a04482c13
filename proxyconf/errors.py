"""
Error types raised while loading and validating proxy configuration.

Every error names the section and key that failed so hand-authored documents
can be debugged without guessing. All of them derive from ``ConfigError``,
which is a ``ValueError`` so callers that only care about "bad input" can
catch the builtin.
"""
from typing import Optional


class ConfigError(ValueError):
    """Base class for configuration load failures."""


class ConfigParseError(ConfigError):
    """Raised when the document cannot be decoded or has the wrong shape."""
    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class ConfigReferenceError(ConfigError):
    """Raised when a section references a name that does not exist."""
    def __init__(self, message: str, section: str, name: str, reference: str):
        super().__init__(message)
        self.section = section
        self.name = name
        self.reference = reference


class ConfigValueError(ConfigError):
    """Raised when a value violates a numeric or logical invariant."""
    def __init__(self, message: str, section: Optional[str] = None,
                 name: Optional[str] = None):
        super().__init__(message)
        self.section = section
        self.name = name


class RewriterCompileError(ConfigError):
    """Raised when a request rewriter cannot be compiled."""
    def __init__(self, message: str, rewriter: str):
        super().__init__(message)
        self.rewriter = rewriter


class TLSConfigError(ConfigError):
    """Raised when an origin's TLS options are incomplete or unreadable."""
