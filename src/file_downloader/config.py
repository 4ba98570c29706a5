"""
Service configuration

All settings are read from the environment. Durations accept plain seconds
("5", "2.5") or Go-style duration strings ("5s", "1m30s", "250ms") so the
deployment manifests shared with the other platform services keep working.
"""

import logging
import re
from typing import Any, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: Any) -> float:
    """Convert a duration value to seconds."""
    if isinstance(value, (int, float)):
        return float(value)

    text = str(value).strip()
    if not text:
        raise ValueError("empty duration")

    try:
        return float(text)
    except ValueError:
        pass

    position = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()

    if position != len(text):
        raise ValueError(f"invalid duration: {text!r}")
    return total


class Config(BaseSettings):
    """Configuration for the file downloader service."""

    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    bind_addr: str = Field(default=":23400", validation_alias=AliasChoices("bind_addr", "BIND_ADDR"))
    cors_allowed_origins: str = Field(
        default="*", validation_alias=AliasChoices("cors_allowed_origins", "CORS_ALLOWED_ORIGINS")
    )
    shutdown_timeout: float = Field(
        default=5.0, validation_alias=AliasChoices("shutdown_timeout", "SHUTDOWN_TIMEOUT")
    )
    health_check_critical_timeout: float = Field(
        default=90.0,
        validation_alias=AliasChoices("health_check_critical_timeout", "HEALTHCHECK_CRITICAL_TIMEOUT"),
    )
    health_check_interval: float = Field(
        default=30.0,
        validation_alias=AliasChoices("health_check_interval", "HEALTHCHECK_INTERVAL"),
    )
    table_renderer_host: str = Field(
        default="http://localhost:23300",
        validation_alias=AliasChoices("table_renderer_host", "TABLE_RENDERER_HOST"),
    )
    api_router_url: str = Field(
        default="http://localhost:23200/v1",
        validation_alias=AliasChoices("api_router_url", "API_ROUTER_URL"),
    )
    http_timeout: float = Field(default=30.0, validation_alias=AliasChoices("http_timeout", "HTTP_TIMEOUT"))
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("log_level", "LOG_LEVEL"))

    @field_validator(
        "shutdown_timeout",
        "health_check_critical_timeout",
        "health_check_interval",
        "http_timeout",
        mode="before",
    )
    @classmethod
    def _parse_duration(cls, value: Any) -> float:
        return parse_duration(value)

    @field_validator("table_renderer_host", "api_router_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @classmethod
    def get(cls) -> "Config":
        """Return the process-wide configuration, loading it on first use."""
        global _config
        if _config is None:
            _config = cls()
        return _config

    @classmethod
    def reset(cls) -> None:
        """Forget the cached configuration so the next get() re-reads the environment."""
        global _config
        _config = None

    def host_and_port(self) -> tuple[str, int]:
        """Split bind_addr into a host and a port. An empty host binds all interfaces."""
        host, sep, port = self.bind_addr.rpartition(":")
        if not sep:
            raise ValueError(f"invalid bind address: {self.bind_addr!r}")
        return host or "0.0.0.0", int(port)

    def log(self) -> None:
        """Write every configuration value to the log."""
        logger.info("configuration: %s", self.model_dump())


_config: Optional[Config] = None
