import pytest

from proxyconf import defaults as d
from proxyconf.errors import ConfigValueError
from proxyconf.lookups import CacheType


def test_unreferenced_cache_is_pruned(load_yaml):
    config = load_yaml("""
        origins:
          web:
            cache_name: fast
        caches:
          fast:
            cache_type: memory
          unused:
            cache_type: redis
    """)
    assert set(config.caches) == {"fast"}
    assert config.active_caches == {"fast"}


def test_pruned_cache_is_never_validated(load_yaml):
    config = load_yaml("""
        origins:
          web:
            cache_name: fast
        caches:
          fast: {}
          broken:
            index:
              max_size_bytes: 10
              max_size_backoff_bytes: 20
    """)
    assert "broken" not in config.caches


def test_cache_shared_by_two_origins_is_kept_once(load_yaml):
    config = load_yaml("""
        origins:
          a:
            cache_name: shared
          b:
            cache_name: shared
        caches:
          shared: {}
    """)
    assert list(config.caches) == ["shared"]


def test_rule_origin_still_activates_its_cache(load_yaml):
    config = load_yaml("""
        rules:
          route:
            input_source: header
            input_key: X-Tenant
        origins:
          web:
            origin_type: rule
            rule_name: route
            cache_name: fast
        caches:
          fast: {}
          spare: {}
    """)
    assert set(config.caches) == {"fast"}
    assert config.origins["web"].rule_options is config.rules["route"]


def test_cache_defaults_fill_index(load_yaml):
    config = load_yaml("""
        origins:
          web:
            cache_name: c1
        caches:
          c1:
            index:
              reap_interval_secs: 9
    """)
    cc = config.caches["c1"]
    assert cc.name == "c1"
    assert cc.cache_type_id is CacheType.MEMORY
    assert cc.index.reap_interval_secs == 9
    assert cc.index.flush_interval_secs == d.DEFAULT_CACHE_INDEX_FLUSH_INTERVAL_SECS
    assert cc.index.max_size_bytes == d.DEFAULT_CACHE_MAX_SIZE_BYTES


def test_byte_backoff_larger_than_cap_names_cache(load_yaml):
    with pytest.raises(ConfigValueError) as exc:
        load_yaml("""
            origins:
              web:
                cache_name: small
            caches:
              small:
                index:
                  max_size_bytes: 100
                  max_size_backoff_bytes: 200
        """)
    assert str(exc.value) == "max_size_backoff_bytes can't be larger than max_size_bytes in cache config [small]"
    assert exc.value.name == "small"


def test_object_backoff_larger_than_cap_names_cache(load_yaml):
    with pytest.raises(ConfigValueError, match=r"max_size_backoff_objects .* \[objs\]"):
        load_yaml("""
            origins:
              web:
                cache_name: objs
            caches:
              objs:
                index:
                  max_size_objects: 10
                  max_size_backoff_objects: 11
        """)


def test_unbounded_object_count_allows_default_backoff(load_yaml):
    config = load_yaml("""
        origins:
          web: {}
        caches:
          default:
            index:
              max_size_objects: 0
    """)
    assert config.caches["default"].index.max_size_backoff_objects == d.DEFAULT_CACHE_MAX_SIZE_BACKOFF_OBJECTS


def test_redis_backend_overlay_and_endpoint_warning(load_yaml):
    config = load_yaml("""
        origins:
          web:
            cache_name: r
        caches:
          r:
            cache_type: REDIS
            redis:
              endpoints: [redis-a:6379, redis-b:6379]
              password: hunter2
    """)
    cc = config.caches["r"]
    assert cc.cache_type == "redis"
    assert cc.cache_type_id is CacheType.REDIS
    assert cc.redis.password == "hunter2"
    assert cc.redis.protocol == d.DEFAULT_REDIS_PROTOCOL
    assert ("'standard' redis type configured, but 'endpoints' value is provided instead of 'endpoint'"
            in config.loader_warnings)


def test_redis_cluster_with_single_endpoint_warns(load_yaml):
    config = load_yaml("""
        origins:
          web:
            cache_name: r
        caches:
          r:
            cache_type: redis
            redis:
              client_type: cluster
              endpoint: redis:6379
    """)
    assert ("'cluster' redis type configured, but 'endpoint' value is provided instead of 'endpoints'"
            in config.loader_warnings)


def test_unselected_backend_section_is_ignored(load_yaml):
    config = load_yaml("""
        origins:
          web:
            cache_name: fs
        caches:
          fs:
            cache_type: filesystem
            filesystem:
              cache_path: /var/cache/proxy
            redis:
              password: unused
    """)
    cc = config.caches["fs"]
    assert cc.filesystem.cache_path == "/var/cache/proxy"
    assert cc.redis.password == ""
    assert any("[redis] options in cache config [fs] are ignored" in w for w in config.loader_warnings)


def test_unknown_cache_type_is_tolerated(load_yaml):
    config = load_yaml("""
        origins:
          web:
            cache_name: odd
        caches:
          odd:
            cache_type: memcached
    """)
    assert config.caches["odd"].cache_type_id is CacheType.MEMORY
    assert any("memcached" in w for w in config.loader_warnings)


def test_rule_only_deployment_keeps_default_cache(load_yaml):
    config = load_yaml("""
        rules:
          route: {}
        origins:
          web:
            origin_type: rule
            rule_name: route
    """)
    assert list(config.caches) == ["default"]
    assert config.active_caches == {"default"}


def test_numeric_cache_name_keeps_its_fields(load_yaml):
    config = load_yaml("""
        origins:
          web:
            cache_name: "7"
        caches:
          7:
            index:
              reap_interval_secs: 9
    """)
    assert config.caches["7"].name == "7"
    assert config.caches["7"].index.reap_interval_secs == 9
