"""Configuration — config.hcl settings block merged with HCLRENDER_* env.

Tests cover:
    - values read from the settings block
    - environment overrides the file
    - missing file falls back to defaults
    - malformed file / invalid values raise ConfigurationError
"""

import pytest

from hclrender.config import CONFIG_PATH_ENV, load_settings, read_config_file
from hclrender.core.errors import ConfigurationError


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.hcl"
    monkeypatch.setenv(CONFIG_PATH_ENV, str(path))
    return path


def test_reads_settings_block(config_file, tmp_path):
    config_file.write_text(f'''
        settings {{
          listen      = "0.0.0.0:9000"
          storage     = "{tmp_path}"
          vault_url   = "http://vault:8200/"
          vault_token = "s.abc"
          error_format = "json"
        }}
    ''')
    settings = load_settings()
    assert settings.listen == "0.0.0.0:9000"
    assert settings.host == "0.0.0.0"
    assert settings.port == 9000
    assert settings.storage == tmp_path
    assert settings.vault_url == "http://vault:8200"
    assert settings.error_format == "json"


def test_environment_overrides_file(config_file, monkeypatch):
    config_file.write_text('settings {\n  listen = "0.0.0.0:9000"\n}\n')
    monkeypatch.setenv("HCLRENDER_LISTEN", "127.0.0.1:7000")
    assert load_settings().listen == "127.0.0.1:7000"


def test_missing_file_uses_defaults(config_file):
    assert read_config_file(config_file) == {}
    settings = load_settings()
    assert settings.listen == "127.0.0.1:8080"
    assert settings.error_format == "text"


def test_unparseable_file_is_configuration_error(config_file):
    config_file.write_text("settings {\n")
    with pytest.raises(ConfigurationError):
        load_settings()


@pytest.mark.parametrize("overrides", [
    {"listen": "nope"},
    {"listen": "host:99999"},
    {"error_format": "xml"},
    {"http_timeout_seconds": 0},
])
def test_invalid_values_are_configuration_errors(config_file, overrides):
    with pytest.raises(ConfigurationError):
        load_settings(**overrides)
