"""Application Configuration — config.hcl `settings` block + environment via pydantic-settings.

Invariants:
    - Source priority: init kwargs > HCLRENDER_* env > .env > config.hcl
    - get_settings() is cached (lru_cache): single instance per process
    - An unparseable config.hcl or an invalid value raises at startup, never per request
    - A missing config.hcl is not an error: defaults and env still apply

Design Decisions:
    - pydantic-settings over hand-rolled merging: validation, coercion, .env support
    - config.hcl read through the same HCL engine as documents (one parser)
    - Path overridable with HCLRENDER_CONFIG so tests and containers can relocate it
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import ValidationError, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from hclrender.core.errors import ConfigurationError, DocumentParseError
from hclrender.infrastructure.hcl_engine import parse_document

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "HCLRENDER_CONFIG"
DEFAULT_CONFIG_PATH = "config.hcl"
SETTINGS_BLOCK = "settings"


def config_path() -> Path:
    return Path(os.environ.get(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH))


def read_config_file(path: Path) -> dict[str, Any]:
    """Return the `settings` block of an HCL config file ({} when absent)."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Cannot read config {path}: {e}") from e
    try:
        document = parse_document(text)
    except DocumentParseError as e:
        raise ConfigurationError(f"Cannot parse config {path}: {e.message}") from e

    block = document.get(SETTINGS_BLOCK, {})
    if not isinstance(block, dict):
        raise ConfigurationError(
            f"Cannot parse config {path}: '{SETTINGS_BLOCK}' must be a single block",
        )
    return block


class HclConfigSource(PydanticBaseSettingsSource):
    """Settings source backed by the `settings { ... }` block of config.hcl."""

    def __init__(self, settings_cls: type[BaseSettings], path: Path):
        super().__init__(settings_cls)
        self.path = path
        self._values = read_config_file(path)
        unknown = sorted(set(self._values) - set(settings_cls.model_fields))
        if unknown:
            logger.warning(f"Ignoring unknown settings in {path}: {', '.join(unknown)}")

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return self._values.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return {
            name: value for name, value in self._values.items()
            if name in self.settings_cls.model_fields
        }


class Settings(BaseSettings):
    """Process settings, loaded once."""

    model_config = SettingsConfigDict(
        env_prefix="HCLRENDER_", env_file=".env", case_sensitive=False, extra="ignore",
    )

    # Server
    listen: str = "127.0.0.1:8080"
    storage: Path = Path("storage")

    # Secret backend
    vault_url: str | None = None
    vault_token: str | None = None

    # Remote calls
    http_timeout_seconds: float = 30.0

    # Errors
    error_format: Literal["text", "json"] = "text"

    # Observability
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @field_validator("listen")
    @classmethod
    def check_listen(cls, v: str) -> str:
        """listen must be host:port with a numeric port."""
        host, sep, port = v.rpartition(":")
        if not sep or not host or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError(f"listen must be host:port, got '{v}'")
        return v

    @field_validator("http_timeout_seconds")
    @classmethod
    def check_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be positive")
        return v

    @field_validator("vault_url")
    @classmethod
    def strip_vault_url(cls, v: str | None) -> str | None:
        return v.rstrip("/") if v else v

    @property
    def host(self) -> str:
        return self.listen.rpartition(":")[0]

    @property
    def port(self) -> int:
        return int(self.listen.rpartition(":")[2])

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            HclConfigSource(settings_cls, config_path()),
        )


def load_settings(**overrides: Any) -> Settings:
    """Build Settings, turning validation failures into ConfigurationError."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


@lru_cache
def get_settings() -> Settings:
    return load_settings()
