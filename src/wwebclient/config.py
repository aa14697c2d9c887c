"""Configuration management for the WhatsApp Web REST client."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

_DEFAULT_BASE_URL = "http://localhost:3000"


@dataclass
class ClientConfig:
    """Connection and caching settings for the wwebjs-api container.

    ``base_url`` is the only required value. The API key is sent as the
    ``x-api-key`` header when set, and ``default_session_id`` is used by
    every call that does not name a session explicitly.
    """

    base_url: str = _DEFAULT_BASE_URL
    api_key: str = ""
    default_session_id: str = "default"
    timeout: float = 30
    enable_cache: bool = False
    cache_component: str = "memory"
    cache_duration: int = 300

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url.strip())


@dataclass
class LoggingConfig:
    """Configuration for logging system."""

    level: str = "INFO"
    log_dir: str = ""
    json_format: bool = False
    rotate_daily: bool = True


@dataclass
class WebConfig:
    """Settings for the room list endpoints."""

    default_session_id: str = "default"
    page_size: int = 20


@dataclass
class AppConfig:
    """Top-level configuration."""

    client: ClientConfig = field(default_factory=ClientConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    web: WebConfig = field(default_factory=WebConfig)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the config to a JSON-compatible dictionary."""
        return {
            "client": {
                "base_url": self.client.base_url,
                "api_key": self.client.api_key,
                "default_session_id": self.client.default_session_id,
                "timeout": self.client.timeout,
                "enable_cache": self.client.enable_cache,
                "cache_component": self.client.cache_component,
                "cache_duration": self.client.cache_duration,
            },
            "logging": {
                "level": self.logging.level,
                "log_dir": self.logging.log_dir,
                "json_format": self.logging.json_format,
                "rotate_daily": self.logging.rotate_daily,
            },
            "web": {
                "default_session_id": self.web.default_session_id,
                "page_size": self.web.page_size,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        """Build config from a dictionary, keeping defaults for missing keys."""
        config = cls()

        client_data = data.get("client", {})
        if isinstance(client_data, dict):
            config.client = ClientConfig(
                base_url=str(client_data.get("base_url", config.client.base_url)),
                api_key=str(client_data.get("api_key") or config.client.api_key),
                default_session_id=str(
                    client_data.get("default_session_id", config.client.default_session_id)
                ),
                timeout=float(client_data.get("timeout", config.client.timeout)),
                enable_cache=bool(client_data.get("enable_cache", config.client.enable_cache)),
                cache_component=str(client_data.get("cache_component", config.client.cache_component)),
                cache_duration=int(client_data.get("cache_duration", config.client.cache_duration)),
            )

        logging_data = data.get("logging", {})
        if isinstance(logging_data, dict):
            config.logging = LoggingConfig(
                level=str(logging_data.get("level", config.logging.level)),
                log_dir=str(logging_data.get("log_dir", config.logging.log_dir)),
                json_format=bool(logging_data.get("json_format", config.logging.json_format)),
                rotate_daily=bool(logging_data.get("rotate_daily", config.logging.rotate_daily)),
            )

        web_data = data.get("web", {})
        if isinstance(web_data, dict):
            config.web = WebConfig(
                default_session_id=str(web_data.get("default_session_id", config.web.default_session_id)),
                page_size=int(web_data.get("page_size", config.web.page_size)),
            )

        return config

    @classmethod
    def from_json_file(cls, file_path: str | Path) -> AppConfig:
        """Load config from a JSON file."""
        path = Path(file_path)
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Expected JSON object in {path}")
        return cls.from_dict(data)

    def to_json_file(self, file_path: str | Path) -> None:
        """Write config to a JSON file."""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    def apply_env(self, environ: Mapping[str, str] | None = None) -> AppConfig:
        """Override settings from ``WWEBJS_*`` environment variables."""
        env = os.environ if environ is None else environ
        if env.get("WWEBJS_BASE_URL"):
            self.client.base_url = env["WWEBJS_BASE_URL"]
        if env.get("WWEBJS_API_KEY"):
            self.client.api_key = env["WWEBJS_API_KEY"]
        if env.get("WWEBJS_SESSION_ID"):
            self.client.default_session_id = env["WWEBJS_SESSION_ID"]
            self.web.default_session_id = env["WWEBJS_SESSION_ID"]
        if env.get("WWEBJS_TIMEOUT"):
            self.client.timeout = float(env["WWEBJS_TIMEOUT"])
        if env.get("WWEBJS_ENABLE_CACHE"):
            self.client.enable_cache = env["WWEBJS_ENABLE_CACHE"].lower() in {"1", "true", "yes"}
        if env.get("WWEBJS_LOG_LEVEL"):
            self.logging.level = env["WWEBJS_LOG_LEVEL"]
        return self

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppConfig:
        """Build config from defaults plus environment overrides."""
        return cls().apply_env(environ)
