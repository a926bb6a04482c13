"""In-process configuration reloading options."""
from dataclasses import dataclass
from typing import Any, Dict

from .. import defaults as d
from .base import clone_section, section_to_dict


@dataclass
class ReloadOptions:
    listen_address: str = d.DEFAULT_RELOAD_LISTEN_ADDRESS
    listen_port: int = d.DEFAULT_RELOAD_LISTEN_PORT
    handler_path: str = d.DEFAULT_RELOAD_HANDLER_PATH
    drain_timeout_secs: int = d.DEFAULT_DRAIN_TIMEOUT_SECS
    # minimum seconds between on-disk staleness checks
    rate_limit_secs: int = d.DEFAULT_RATE_LIMIT_SECS

    def clone(self) -> "ReloadOptions":
        return clone_section(self)

    def to_dict(self) -> Dict[str, Any]:
        return section_to_dict(self)
