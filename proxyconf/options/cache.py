"""Cache backend options."""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .. import defaults as d
from ..lookups import CacheType
from .base import clone_section, derived, section_to_dict


class _Section:
    def clone(self):
        return clone_section(self)

    def to_dict(self) -> Dict[str, Any]:
        return section_to_dict(self)


@dataclass
class IndexOptions(_Section):
    """Index tuning shared by the local cache backends."""
    reap_interval_secs: int = d.DEFAULT_CACHE_INDEX_REAP_INTERVAL_SECS
    flush_interval_secs: int = d.DEFAULT_CACHE_INDEX_FLUSH_INTERVAL_SECS
    max_size_bytes: int = d.DEFAULT_CACHE_MAX_SIZE_BYTES
    max_size_backoff_bytes: int = d.DEFAULT_CACHE_MAX_SIZE_BACKOFF_BYTES
    max_size_objects: int = d.DEFAULT_CACHE_MAX_SIZE_OBJECTS
    max_size_backoff_objects: int = d.DEFAULT_CACHE_MAX_SIZE_BACKOFF_OBJECTS


@dataclass
class RedisOptions(_Section):
    client_type: str = d.DEFAULT_REDIS_CLIENT_TYPE
    protocol: str = d.DEFAULT_REDIS_PROTOCOL
    endpoint: str = d.DEFAULT_REDIS_ENDPOINT
    endpoints: List[str] = field(default_factory=lambda: [d.DEFAULT_REDIS_ENDPOINT])
    sentinel_master: str = ""
    password: str = ""
    db: int = 0
    max_retries: int = 0
    min_retry_backoff_ms: int = 0
    max_retry_backoff_ms: int = 0
    dial_timeout_ms: int = 0
    read_timeout_ms: int = 0
    write_timeout_ms: int = 0
    pool_size: int = 0
    min_idle_conns: int = 0
    max_conn_age_ms: int = 0
    pool_timeout_ms: int = 0
    idle_timeout_ms: int = 0
    idle_check_frequency_ms: int = 0


@dataclass
class FilesystemOptions(_Section):
    cache_path: str = d.DEFAULT_CACHE_PATH


@dataclass
class BBoltOptions(_Section):
    filename: str = d.DEFAULT_BBOLT_FILE
    bucket: str = d.DEFAULT_BBOLT_BUCKET


@dataclass
class BadgerOptions(_Section):
    directory: str = d.DEFAULT_CACHE_PATH
    value_directory: str = d.DEFAULT_CACHE_PATH


# backend sub-section name for each cache type that has one
BACKEND_SECTIONS = {
    CacheType.REDIS: "redis",
    CacheType.FILESYSTEM: "filesystem",
    CacheType.BBOLT: "bbolt",
    CacheType.BADGER: "badger",
}


@dataclass
class CacheOptions(_Section):
    """One cache backend definition."""
    cache_type: str = d.DEFAULT_CACHE_TYPE
    index: IndexOptions = field(default_factory=IndexOptions)
    redis: RedisOptions = field(default_factory=RedisOptions)
    filesystem: FilesystemOptions = field(default_factory=FilesystemOptions)
    bbolt: BBoltOptions = field(default_factory=BBoltOptions)
    badger: BadgerOptions = field(default_factory=BadgerOptions)

    name: str = derived("")
    cache_type_id: CacheType = derived(CacheType.MEMORY)
