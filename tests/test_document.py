import pytest

from proxyconf.document import DocumentMetadata, detect_format, parse_document
from proxyconf.errors import ConfigParseError


def test_is_defined_distinguishes_absent_from_explicit():
    _, md = parse_document(b"origins:\n  web:\n    origin_url: http://a\n    is_default: false\n")
    assert md.is_defined("origins", "web", "origin_url")
    assert md.is_defined("origins", "web", "is_default")
    assert not md.is_defined("origins", "web", "cache_name")
    assert not md.is_defined("caches")


def test_explicit_null_counts_as_defined():
    _, md = parse_document("main:\n  server_name: ~\n")
    assert md.is_defined("main", "server_name")
    assert md.lookup("main", "server_name") is None


def test_list_indexes_are_walked():
    doc, md = parse_document("origins:\n  web:\n    paths:\n      - path: /a\n      - path: /b\n")
    assert md.is_defined("origins", "web", "paths", 1, "path")
    assert not md.is_defined("origins", "web", "paths", 2)
    assert not md.is_defined("origins", "web", "paths", "0")
    assert doc["origins"]["web"]["paths"][0]["path"] == "/a"


def test_keys_lists_every_path():
    _, md = parse_document("a:\n  b: 1\n  c: [x]\n")
    assert set(md.keys()) == {("a",), ("a", "b"), ("a", "c"), ("a", "c", 0)}


def test_empty_document_is_empty_mapping():
    doc, md = parse_document(b"")
    assert doc == {}
    assert md.keys() == []


def test_json_and_toml_documents():
    _, md = parse_document('{"caches": {"mem": {"cache_type": "memory"}}}', "json")
    assert md.is_defined("caches", "mem", "cache_type")

    _, md = parse_document('[origins.web]\norigin_url = "http://a"\n', "toml")
    assert md.lookup("origins", "web", "origin_url") == "http://a"


@pytest.mark.parametrize("data, doc_format", [
    ("origins: [unterminated", "yaml"),
    ("{not json", "json"),
    ("= nope", "toml"),
    ("- just\n- a list\n", "yaml"),
    ("origins: {}", "ini"),
])
def test_malformed_documents_raise_parse_error(data, doc_format):
    with pytest.raises(ConfigParseError):
        parse_document(data, doc_format, source="proxy.conf")


def test_detect_format_by_suffix():
    assert detect_format("/etc/proxy.yml") == "yaml"
    assert detect_format("/etc/proxy.JSON") == "json"
    assert detect_format("proxy.toml") == "toml"
    assert detect_format("proxy.conf") == "yaml"
    assert detect_format(None) == "yaml"


def test_empty_metadata_defines_nothing():
    md = DocumentMetadata()
    assert not md.is_defined("main")
    assert md.is_defined()
