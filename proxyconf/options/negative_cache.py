"""Negative cache options: response status code to TTL seconds."""
from typing import Dict


class NegativeCacheConfig(dict):
    """Maps an upstream response code (as a string key) to a cache TTL in seconds."""

    def clone(self) -> "NegativeCacheConfig":
        return NegativeCacheConfig(self)

    def to_dict(self) -> Dict[str, int]:
        return dict(self)
