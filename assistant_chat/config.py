"""Configuration loading and validation for the assistant chat TUI."""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
import logging
import os
from pathlib import Path
import re
import tomllib
from typing import Any
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    field_validator,
)

from .exceptions import ConfigValidationError

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "assistant-chat"
CONFIG_PATH = CONFIG_DIR / "config.toml"

HEX_COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")
ENV_VAR_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}

DEFAULT_SYSTEM_PROMPT = (
    "You are a friendly, concise assistant. Answer clearly, use short "
    "paragraphs, wrap code in fenced blocks with a language tag and use "
    "**bold** sparingly for emphasis."
)
DEFAULT_UNAVAILABLE_NOTICE = (
    "The assistant is not available right now: no API key is configured. "
    "Set the key in your config file or environment and try again."
)
DEFAULT_FAILURE_NOTICE = (
    "Sorry, something went wrong while contacting the assistant. "
    "Please try again in a moment."
)


def _non_empty_string(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("Expected a string value.")
    normalized = value.strip()
    if not normalized:
        raise ValueError("String value must not be empty.")
    return normalized


class AppConfig(BaseModel):
    """Application metadata."""

    title: str = "Assistant Chat"

    @field_validator("title", mode="before")
    @classmethod
    def _validate_title(cls, value: Any) -> str:
        return _non_empty_string(value)


class CompletionConfig(BaseModel):
    """Completion endpoint, credentials and sampling settings."""

    endpoint: str = "https://api.groq.com/openai/v1/chat/completions"
    model: str = "llama-3.3-70b-versatile"
    api_key: str = ""
    api_key_env: str = "ASSISTANT_CHAT_API_KEY"
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1024, ge=1, le=131_072)
    top_p: float = Field(default=1.0, gt=0.0, le=1.0)
    timeout: int = Field(default=60, ge=1, le=3600)
    retries: int = Field(default=0, ge=0, le=10)
    retry_backoff_seconds: float = Field(default=0.5, ge=0.0, le=60.0)
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    unavailable_notice: str = DEFAULT_UNAVAILABLE_NOTICE
    failure_notice: str = DEFAULT_FAILURE_NOTICE

    @field_validator(
        "endpoint",
        "model",
        "system_prompt",
        "unavailable_notice",
        "failure_notice",
        mode="before",
    )
    @classmethod
    def _validate_required_string(cls, value: Any) -> str:
        return _non_empty_string(value)

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
        normalized = _non_empty_string(value)
        if not ENV_VAR_PATTERN.match(normalized):
            raise ValueError(f"Invalid environment variable name {normalized!r}.")
        return normalized

    @field_validator("endpoint")
    @classmethod
    def _validate_endpoint(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme.lower() not in {"http", "https"}:
            raise ValueError("completion.endpoint must use http or https scheme.")
        if not (parsed.hostname or "").strip():
            raise ValueError("completion.endpoint must include a hostname.")
        return value


class UserConfig(BaseModel):
    """Current-user descriptor shown next to user messages."""

    display_name: str = "You"
    avatar: str = ""

    @field_validator("display_name", mode="before")
    @classmethod
    def _validate_display_name(cls, value: Any) -> str:
        return _non_empty_string(value)

    @field_validator("avatar", mode="before")
    @classmethod
    def _normalize_avatar(cls, value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValueError("avatar must be a string.")
        return value.strip()


class UIConfig(BaseModel):
    """Message colours, timestamps and the code highlighting theme."""

    user_message_color: str = "#7aa2f7"
    assistant_message_color: str = "#9ece6a"
    show_timestamps: bool = True
    code_theme: str = "monokai"

    @field_validator("user_message_color", "assistant_message_color", mode="before")
    @classmethod
    def _validate_hex_color(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Expected a string value.")
        normalized = value.strip()
        if not HEX_COLOR_PATTERN.match(normalized):
            raise ValueError("Color must use #RGB or #RRGGBB format.")
        return normalized

    @field_validator("code_theme", mode="before")
    @classmethod
    def _validate_code_theme(cls, value: Any) -> str:
        return _non_empty_string(value)


class KeybindsConfig(BaseModel):
    """Key for each app action; blank leaves the action unbound."""

    send_message: str = "ctrl+enter"
    new_conversation: str = "ctrl+n"
    quit: str = "ctrl+q"
    scroll_up: str = "ctrl+k"
    scroll_down: str = "ctrl+j"
    show_help: str = "f1"
    copy_last_message: str = "ctrl+y"

    @field_validator("*", mode="before")
    @classmethod
    def _validate_keybind(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Keybind must be a string.")
        return value.strip()


class LoggingConfig(BaseModel):
    """Log level, format and optional log file."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = "~/.local/state/assistant-chat/app.log"

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
        return _non_empty_string(value)


class Config(BaseModel):
    """Whole config file, one model per TOML table."""

    app: AppConfig = AppConfig()
    completion: CompletionConfig = CompletionConfig()
    user: UserConfig = UserConfig()
    ui: UIConfig = UIConfig()
    keybinds: KeybindsConfig = KeybindsConfig()
    logging: LoggingConfig = LoggingConfig()


DEFAULT_CONFIG: dict[str, dict[str, Any]] = Config().model_dump()


def ensure_config_dir(config_dir: Path | None = None) -> Path:
    """Create *config_dir* (default ``~/.config/assistant-chat``) if missing."""
    target = config_dir or CONFIG_DIR
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        LOGGER.warning("Cannot create config directory %s: %s", target, exc)
    return target


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return *base* with *override* laid on top, section by section."""
    result = deepcopy(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = _deep_merge(current, value)
        else:
            result[key] = value
    return result


def _enforce_private_permissions(path: Path) -> None:
    # The file may hold an API key.
    if os.name != "posix" or not path.exists():
        return
    try:
        path.chmod(0o600)
    except OSError as exc:
        LOGGER.warning("Cannot restrict permissions on %s: %s", path, exc)


def _validate_config(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Validate *raw*; any invalid value means the whole file is ignored."""
    try:
        return Config.model_validate(raw).model_dump()
    except ValidationError as exc:
        LOGGER.warning(
            "config.invalid",
            extra={"event": "config.invalid", "error_count": exc.error_count()},
        )
        return deepcopy(DEFAULT_CONFIG)
    except Exception as exc:  # noqa: BLE001 - surfaced as a domain error.
        raise ConfigValidationError(f"Unable to validate configuration: {exc}") from exc


def _read_toml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    _enforce_private_permissions(path)
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        LOGGER.warning(
            "config.unreadable",
            extra={"event": "config.unreadable", "path": str(path), "error": str(exc)},
        )
        return {}
    return data


def load_config(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """Return the validated configuration as plain dicts, one per section.

    Values in the TOML file at *config_path* (default
    ``~/.config/assistant-chat/config.toml``) override the defaults. A
    missing, unreadable or invalid file yields the defaults.
    """
    path = config_path or CONFIG_PATH
    ensure_config_dir(path.parent)
    return _validate_config(_deep_merge(DEFAULT_CONFIG, _read_toml(path)))


def resolve_api_key(
    config: dict[str, dict[str, Any]],
    environ: Mapping[str, str] | None = None,
) -> str:
    """Return the API key from the config, else from the environment.

    An empty string means no credential is available.
    """
    completion_cfg = config.get("completion", {})
    explicit = str(completion_cfg.get("api_key") or "").strip()
    if explicit:
        return explicit
    env_name = str(completion_cfg.get("api_key_env") or "")
    if not env_name:
        return ""
    env = os.environ if environ is None else environ
    return str(env.get(env_name, "")).strip()
