"""Configuration loading and validation for the LinguaTerm chat TUI."""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
import re
from typing import Any
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .exceptions import ConfigValidationError

import tomllib  # stdlib since Python 3.11 (project requires >=3.11)

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "linguaterm"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_BASE_URL = "https://router.huggingface.co/v1"
DEFAULT_MODEL = "Qwen/Qwen2.5-72B-Instruct"
DEFAULT_API_KEY_ENV = "HF_API_KEY"
DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful language translation assistant. "
    "You provide expert translation skills, formal and informal when asked, "
    "and understand slang that is commonly used. "
    "Stay 100% focused on translation at all times. "
    "Understand what language the user is speaking to you."
)
DEFAULT_TEMPLATE_TEXT = "Translate [text] to French"
DEFAULT_WELCOME_TEXT = (
    "Welcome! Type something to translate, or press \"Use template\" to start "
    "from a prompt."
)

ENV_VAR_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _require_non_empty(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("Expected a string value.")
    normalized = value.strip()
    if not normalized:
        raise ValueError("String value must not be empty.")
    return normalized


class AppConfig(BaseModel):
    """Application metadata."""

    title: str = "LinguaTerm"

    @field_validator("title", mode="before")
    @classmethod
    def _validate_non_empty_string(cls, value: Any) -> str:
        return _require_non_empty(value)


class InferenceConfig(BaseModel):
    """Hosted inference endpoint, fixed generation parameters, and credential source."""

    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    max_tokens: int = Field(default=250, ge=1, le=4096)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    timeout: int = Field(default=120, ge=1, le=3600)
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    api_key: str = ""
    api_key_env: str = DEFAULT_API_KEY_ENV

    @field_validator("base_url", "model", "system_prompt", mode="before")
    @classmethod
    def _validate_required_string(cls, value: Any) -> str:
        return _require_non_empty(value)

    @field_validator("api_key", mode="before")
    @classmethod
    def _normalize_api_key(cls, value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValueError("api_key must be a string.")
        return value.strip()

    @field_validator("api_key_env", mode="before")
    @classmethod
    def _validate_env_name(cls, value: Any) -> str:
        normalized = _require_non_empty(value)
        if not ENV_VAR_PATTERN.match(normalized):
            raise ValueError(f"Invalid environment variable name {normalized!r}.")
        return normalized

    @model_validator(mode="after")
    def _validate_base_url(self) -> InferenceConfig:
        parsed = urlparse(self.base_url)
        if parsed.scheme.lower() != "https":
            raise ValueError("inference.base_url must use the https scheme.")
        if not parsed.hostname:
            raise ValueError("inference.base_url must include a hostname.")
        self.base_url = self.base_url.rstrip("/")
        return self


class UIConfig(BaseModel):
    """Widget text and rendering settings."""

    welcome_text: str = DEFAULT_WELCOME_TEXT
    template_text: str = DEFAULT_TEMPLATE_TEXT
    show_timestamps: bool = True
    stream_chunk_size: int = Field(default=8, ge=1, le=1024)

    @field_validator("welcome_text", "template_text", mode="before")
    @classmethod
    def _validate_text(cls, value: Any) -> str:
        return _require_non_empty(value)


class KeybindsConfig(BaseModel):
    """Keyboard action mapping."""

    send_message: str = "ctrl+s"
    use_template: str = "ctrl+t"
    clear_transcript: str = "ctrl+n"
    copy_last_message: str = "ctrl+o"
    quit: str = "ctrl+q"

    @field_validator("*", mode="before")
    @classmethod
    def _validate_keybind(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Keybind must be a string.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("Keybind must not be empty.")
        return normalized


class LoggingConfig(BaseModel):
    """Logging behavior and output destinations."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = "~/.local/state/linguaterm/app.log"

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
        if not isinstance(value, str):
            raise ValueError("log_file_path must be a string.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("log_file_path must not be empty.")
        return normalized


class Config(BaseModel):
    """Root configuration model for all sections."""

    app: AppConfig = AppConfig()
    inference: InferenceConfig = InferenceConfig()
    ui: UIConfig = UIConfig()
    keybinds: KeybindsConfig = KeybindsConfig()
    logging: LoggingConfig = LoggingConfig()


DEFAULT_CONFIG: dict[str, dict[str, Any]] = Config().model_dump(by_alias=True)


@dataclass(frozen=True)
class InferenceSettings:
    """Immutable inference settings handed to the chat session at construction.

    The credential is resolved exactly once, when the settings are built, so
    nothing downstream reads the process environment.
    """

    api_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    max_tokens: int = 250
    temperature: float = 0.7
    timeout: int = 120
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    api_key_env: str = DEFAULT_API_KEY_ENV

    @property
    def has_credential(self) -> bool:
        """Return True when a non-blank access token is configured."""
        return bool(self.api_key.strip())

    @classmethod
    def from_config(
        cls,
        config: dict[str, Any],
        environ: Mapping[str, str] | None = None,
    ) -> InferenceSettings:
        """Build settings from the [inference] section and the environment.

        ``inference.api_key`` wins over the environment variable named by
        ``inference.api_key_env``.
        """
        env = os.environ if environ is None else environ
        inference_cfg = config.get("inference", {})
        api_key_env = str(inference_cfg.get("api_key_env", DEFAULT_API_KEY_ENV))
        api_key = str(inference_cfg.get("api_key") or "").strip()
        if not api_key:
            api_key = str(env.get(api_key_env, "") or "").strip()
        return cls(
            api_key=api_key,
            base_url=str(inference_cfg.get("base_url", DEFAULT_BASE_URL)),
            model=str(inference_cfg.get("model", DEFAULT_MODEL)),
            max_tokens=int(inference_cfg.get("max_tokens", 250)),
            temperature=float(inference_cfg.get("temperature", 0.7)),
            timeout=int(inference_cfg.get("timeout", 120)),
            system_prompt=str(
                inference_cfg.get("system_prompt", DEFAULT_SYSTEM_PROMPT)
            ),
            api_key_env=api_key_env,
        )


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
    """Best-effort enforcement of private file permissions on POSIX systems.

    The config file may hold an API key.
    """
    if os.name != "posix" or not path.exists():
        return
    try:
        path.chmod(0o600)
    except OSError as exc:
        LOGGER.warning("Unable to enforce 0600 permissions for %s: %s", path, exc)


def _safe_default_config() -> dict[str, dict[str, Any]]:
    """Return a deep copy of validated default config data."""
    return deepcopy(DEFAULT_CONFIG)


def _validate_config(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Validate merged config and fallback to safe defaults when possible."""
    try:
        config = Config.model_validate(raw)
        return config.model_dump(by_alias=True)
    except ValidationError as exc:
        LOGGER.warning("Configuration validation failed, using safe defaults: %s", exc)
        return _safe_default_config()
    except Exception as exc:  # noqa: BLE001 - unexpected model construction failure.
        raise ConfigValidationError(f"Unable to validate configuration: {exc}") from exc


def load_config(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """
    Load configuration from TOML, merge with defaults, and validate.

    The optional ``config_path`` argument is intended for tests and tooling.
    Only the default location gets its directory created.
    """
    target_path = config_path or CONFIG_PATH
    if config_path is None:
        ensure_config_dir(target_path.parent)

    raw_data: dict[str, Any] = {}
    if target_path.exists():
        _enforce_private_permissions(target_path)
        try:
            raw_data = tomllib.loads(target_path.read_text(encoding="utf-8"))
        except (
            Exception
        ) as exc:  # noqa: BLE001 - we must not crash on invalid user config.
            LOGGER.warning("Failed to parse config at %s: %s", target_path, exc)
            raw_data = {}

    merged = (
        _deep_merge(DEFAULT_CONFIG, raw_data)
        if isinstance(raw_data, dict)
        else _safe_default_config()
    )
    return _validate_config(merged)
