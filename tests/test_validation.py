import pytest

from proxyconf.errors import ConfigReferenceError, ConfigValueError, TLSConfigError
from proxyconf.options import OriginOptions, TLSOptions, validate_origin_name
from proxyconf.validation import validate_negative_caches, validate_tls_configs


def test_rule_origin_binds_rule_options(load_yaml):
    config = load_yaml("""
        rules:
          tenant:
            input_source: header
            input_key: X-Tenant
            cases:
              a:
                matches: [alpha]
                next_route: alpha-origin
        origins:
          web:
            origin_type: rule
            rule_name: tenant
    """)
    oc = config.origins["web"]
    assert oc.rule_options is config.rules["tenant"]
    assert oc.rule_options.name == "tenant"
    assert oc.rule_options.cases["a"].matches == ["alpha"]
    assert oc.rule_options.max_rule_executions == 16


def test_rule_origin_with_missing_rule_names_origin_and_rule(load_yaml):
    with pytest.raises(ConfigReferenceError) as exc:
        load_yaml("""
            origins:
              web:
                origin_type: rule
                rule_name: nope
        """)
    assert str(exc.value) == "invalid rule name [nope] provided in origin config [web]"
    assert exc.value.name == "web"
    assert exc.value.reference == "nope"


def test_rule_origin_is_not_checked_against_caches(load_yaml):
    config = load_yaml("""
        rules:
          r: {}
        origins:
          web:
            origin_type: rule
            rule_name: r
            cache_name: does-not-exist
    """)
    assert "web" in config.origins


def test_missing_cache_names_origin_and_cache(load_yaml):
    with pytest.raises(ConfigReferenceError) as exc:
        load_yaml("""
            origins:
              web:
                cache_name: ghost
        """)
    assert str(exc.value) == "invalid cache name [ghost] provided in origin config [web]"


def test_rule_rewriter_references_must_exist(load_yaml):
    with pytest.raises(ConfigReferenceError, match=r"\[missing\] in rule config \[r\]"):
        load_yaml("""
            rules:
              r:
                ingress_req_rewriter_name: missing
            origins:
              web: {}
        """)


@pytest.mark.parametrize("name", ["frontend", "", "has space", "slash/name"])
def test_invalid_origin_names(name):
    with pytest.raises(ConfigValueError):
        validate_origin_name(name)


def test_valid_origin_names():
    for name in ("web", "web-1", "a.b_c"):
        validate_origin_name(name)


def test_reserved_origin_name_fails_load(load_yaml):
    with pytest.raises(ConfigValueError, match=r"invalid origin name \[frontend\]"):
        load_yaml("""
            origins:
              frontend: {}
        """)


def test_negative_cache_and_tracing_references(load_yaml):
    with pytest.raises(ConfigReferenceError, match="negative cache name"):
        load_yaml("""
            origins:
              web:
                negative_cache_name: nc
        """)
    with pytest.raises(ConfigReferenceError, match="tracing name"):
        load_yaml("""
            origins:
              web:
                tracing_name: tr
        """)


def test_negative_caches_merge_over_default(load_yaml):
    config = load_yaml("""
        negative_caches:
          short:
            404: 5
            503: 1
        origins:
          web:
            negative_cache_name: short
    """)
    assert set(config.negative_cache_configs) == {"default", "short"}
    assert config.negative_cache_configs["short"] == {"404": 5, "503": 1}


@pytest.mark.parametrize("codes", [{"200": 5}, {"600": 5}, {"teapot": 5}, {"404": -1}, {"404": "5"}])
def test_invalid_negative_cache_entries(codes):
    from proxyconf.options import NegativeCacheConfig

    with pytest.raises(ConfigValueError):
        validate_negative_caches({"nc": NegativeCacheConfig(codes)})


def test_tracing_configs_merge_and_unknown_tracer_fails(load_yaml):
    config = load_yaml("""
        tracing:
          jt:
            tracer_type: Jaeger
            collector_url: http://jaeger:14268
        origins:
          web:
            tracing_name: jt
    """)
    assert set(config.tracing_configs) == {"default", "jt"}
    assert config.tracing_configs["jt"].tracer_type == "jaeger"
    assert config.tracing_configs["jt"].service_name == "proxyconf"

    with pytest.raises(ConfigValueError, match="tracer_type"):
        load_yaml("""
            tracing:
              bad:
                tracer_type: carrier-pigeon
        """)


def test_tls_pair_enables_listener(tmp_path, write_doc):
    from proxyconf.config import load_config

    cert = tmp_path / "cert.pem"
    key = tmp_path / "key.pem"
    cert.write_text("cert")
    key.write_text("key")
    path = write_doc(f"""
        origins:
          secure:
            tls:
              full_chain_cert_path: {cert}
              private_key_path: {key}
    """)
    config = load_config(path)
    assert config.frontend.serve_tls is True


def test_tls_half_configured_fails_with_origin(load_yaml):
    with pytest.raises(TLSConfigError, match=r"origin config \[secure\]"):
        load_yaml("""
            origins:
              secure:
                tls:
                  full_chain_cert_path: /nonexistent/cert.pem
        """)


def test_tls_missing_file(tmp_path):
    cert = tmp_path / "cert.pem"
    cert.write_text("cert")
    oc = OriginOptions(name="x", tls=TLSOptions(full_chain_cert_path=str(cert),
                                                private_key_path=str(tmp_path / "missing.pem")))
    with pytest.raises(TLSConfigError, match="private_key_path"):
        validate_tls_configs({"x": oc})


def test_no_tls_keeps_listener_off():
    assert validate_tls_configs({"a": OriginOptions(name="a")}) is False
    assert validate_tls_configs({"a": OriginOptions(name="a", tls=TLSOptions())}) is False
