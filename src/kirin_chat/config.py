"""Configuration loading and validation for the Kirin chat front-end."""

from __future__ import annotations

from copy import deepcopy
import logging
import os
from pathlib import Path
import re
from typing import Any
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .controller import DEFAULT_GREETING, DEFAULT_MODEL, DEFAULT_SYSTEM_PROMPT
from .exceptions import ConfigValidationError

import tomllib  # stdlib since Python 3.11 (project requires >=3.11)

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "kirin-chat"
CONFIG_PATH = CONFIG_DIR / "config.toml"

HEX_COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")
VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _required_string(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("Expected a string value.")
    normalized = value.strip()
    if not normalized:
        raise ValueError("String value must not be empty.")
    return normalized


class AppConfig(BaseModel):
    """Application metadata."""

    title: str = "Kirin"

    @field_validator("title", mode="before")
    @classmethod
    def _validate_non_empty_string(cls, value: Any) -> str:
        return _required_string(value)


class BackendConfig(BaseModel):
    """Assistant backend endpoint and turn settings."""

    host: str = "http://localhost:8888"
    model: str = DEFAULT_MODEL
    stream: bool = True
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    greeting: str = DEFAULT_GREETING
    threads_path: str = "/v1/threads"
    chat_path: str = "/api/chat"
    connect_timeout: float = Field(default=10.0, gt=0, le=600)

    @field_validator("host", mode="before")
    @classmethod
    def _validate_host(cls, value: Any) -> str:
        return _required_string(value).rstrip("/")

    @field_validator("model", mode="before")
    @classmethod
    def _validate_model(cls, value: Any) -> str:
        return _required_string(value)

    @field_validator("system_prompt", "greeting", mode="before")
    @classmethod
    def _normalize_text(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Expected a string value.")
        return value.strip()

    @field_validator("threads_path", "chat_path", mode="before")
    @classmethod
    def _validate_path(cls, value: Any) -> str:
        normalized = _required_string(value)
        if not normalized.startswith("/"):
            raise ValueError("Endpoint paths must start with '/'.")
        return normalized


class SecurityConfig(BaseModel):
    """Security policy for remote host access."""

    allow_remote_hosts: bool = False
    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "::1"]

    @field_validator("allowed_hosts", mode="before")
    @classmethod
    def _validate_allowed_hosts(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            raise ValueError("allowed_hosts must be a list.")
        normalized_hosts = [
            item.strip().lower()
            for item in value
            if isinstance(item, str) and item.strip()
        ]
        if not normalized_hosts:
            raise ValueError("allowed_hosts must contain at least one host.")
        return normalized_hosts


class UIConfig(BaseModel):
    """Visual settings for Textual rendering."""

    show_timestamps: bool = True
    placeholder: str = "Type prompt here"
    theme_color: str = "#8dd4e8"

    @field_validator("theme_color", mode="before")
    @classmethod
    def _validate_hex_color(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Expected a string value.")
        normalized = value.strip()
        if not HEX_COLOR_PATTERN.match(normalized):
            raise ValueError("Color must use #RGB or #RRGGBB format.")
        return normalized


class KeybindsConfig(BaseModel):
    """Keyboard action mapping."""

    send_message: str = "ctrl+enter"
    abort_response: str = "escape"
    quit: str = "ctrl+q"

    @field_validator("*", mode="before")
    @classmethod
    def _validate_keybind(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Keybind must be a string.")
        return value.strip()


class LoggingConfig(BaseModel):
    """Logging behavior and output destinations."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = "~/.local/state/kirin-chat/app.log"

    @field_validator("level", mode="before")
    @classmethod
    def _validate_level(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Logging level must be a string.")
        normalized = value.strip().upper()
        if normalized not in VALID_LOG_LEVELS:
            raise ValueError(f"Unsupported log level {normalized!r}.")
        return normalized

    @field_validator("log_file_path", mode="before")
    @classmethod
    def _validate_log_file_path(cls, value: Any) -> str:
        return _required_string(value)


class Config(BaseModel):
    """Root configuration model for all sections."""

    model_config = ConfigDict(populate_by_name=True)
    app: AppConfig = AppConfig()
    backend: BackendConfig = BackendConfig()
    security: SecurityConfig = SecurityConfig()
    ui: UIConfig = UIConfig()
    keybinds: KeybindsConfig = KeybindsConfig()
    logging: LoggingConfig = LoggingConfig()

    @model_validator(mode="after")
    def _validate_security_policy(self) -> Config:
        parsed = urlparse(self.backend.host)
        scheme = parsed.scheme.lower()
        hostname = (parsed.hostname or "").strip().lower()

        if scheme not in {"http", "https"}:
            raise ValueError("backend.host must use http or https scheme.")
        if not hostname:
            raise ValueError("backend.host must include a hostname.")
        if not self.security.allow_remote_hosts and hostname not in set(
            self.security.allowed_hosts
        ):
            raise ValueError(
                "backend.host is not in security.allowed_hosts while allow_remote_hosts is false."
            )
        return self


DEFAULT_CONFIG: dict[str, dict[str, Any]] = Config().model_dump(by_alias=True)


def ensure_config_dir(config_dir: Path | None = None) -> Path:
    """Ensure that the config directory exists and return its path."""
    directory = config_dir or CONFIG_DIR
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        LOGGER.warning("Unable to create config directory %s: %s", directory, exc)
    return directory


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override values onto base values."""
    merged: dict[str, Any] = deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _enforce_private_permissions(path: Path) -> None:
    """Best-effort enforcement of private file permissions on POSIX systems."""
    if os.name != "posix" or not path.exists():
        return
    try:
        path.chmod(0o600)
    except OSError as exc:
        LOGGER.warning("Unable to enforce 0600 permissions for %s: %s", path, exc)


def _validate_config(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Validate merged config and fall back to safe defaults when possible."""
    try:
        config = Config.model_validate(raw)
        return config.model_dump(by_alias=True)
    except ValidationError as exc:
        LOGGER.warning("Configuration validation failed, using safe defaults: %s", exc)
        return deepcopy(DEFAULT_CONFIG)
    except Exception as exc:  # noqa: BLE001 - unexpected model construction failure.
        raise ConfigValidationError(f"Unable to validate configuration: {exc}") from exc


def load_config(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """Load configuration from TOML, merge with defaults, and validate.

    The optional ``config_path`` argument is intended for tests and the
    ``--config`` command-line flag.
    """
    target_path = config_path or CONFIG_PATH
    ensure_config_dir(target_path.parent)

    raw_data: dict[str, Any] = {}
    if target_path.exists():
        _enforce_private_permissions(target_path)
        try:
            raw_data = tomllib.loads(target_path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as exc:
            LOGGER.warning("Failed to parse config at %s: %s", target_path, exc)
            raw_data = {}

    return _validate_config(_deep_merge(DEFAULT_CONFIG, raw_data))
