"""Metadata Resolver — filename, format hint and docker services.

Tests cover:
    - missing meta → MissingMetadataError (404)
    - file splits on the last dot; export used when file has no extension
    - non-string fields → InvalidMetadataError
    - docker kind binds ordered service names
    - meta exposed only as a nested object
"""

import pytest

from hclrender.core.errors import InvalidMetadataError, MissingMetadataError
from hclrender.core.resolve_metadata import resolve_metadata, split_file_name


def test_missing_meta_is_not_found():
    with pytest.raises(MissingMetadataError) as exc_info:
        resolve_metadata({"a": 1})
    assert exc_info.value.http_status == 404
    assert exc_info.value.message == "Missing meta object"


def test_file_with_extension_sets_format_hint():
    metadata = resolve_metadata({"meta": {"file": "app.config.toml", "export": "json"}})
    assert metadata.file == "app.config"
    assert metadata.export == "toml"


def test_file_without_extension_uses_export():
    assert split_file_name("compose", "yml") == ("compose", "yml")
    assert split_file_name(None, "json") == (None, "json")


def test_non_string_file_is_invalid():
    with pytest.raises(InvalidMetadataError) as exc_info:
        resolve_metadata({"meta": {"file": 3}})
    assert exc_info.value.field_name == "file"
    assert exc_info.value.http_status == 500


def test_docker_kind_binds_service_names():
    document = {
        "meta": {"kind": "docker"},
        "services": {"web": {}, "db": {}, "cache": {}},
    }
    bindings = resolve_metadata(document).as_bindings()
    assert bindings["services"] == ["web", "db", "cache"]


def test_docker_kind_without_services_binds_empty_list():
    assert resolve_metadata({"meta": {"kind": "docker"}}).service_names == []


def test_meta_is_exposed_nested_only():
    bindings = resolve_metadata({"meta": {"file": "x.json", "owner": "ops"}}).as_bindings()
    assert bindings == {"meta": {"file": "x.json", "owner": "ops"}}
