from __future__ import annotations

import logging
import re
from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


class ConfigError(Exception):
    """Raised when the environment cannot be turned into valid settings."""


def parse_duration(value: object) -> float:
    """Parse a duration such as ``5s``, ``250ms`` or ``1m30s`` into seconds.

    Bare numbers are taken as seconds.
    """

    if isinstance(value, bool):
        raise ValueError(f"invalid duration {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = str(value).strip()
        try:
            seconds = float(text)
        except ValueError:
            seconds = _parse_duration_units(text)
    if seconds < 0:
        raise ValueError(f"invalid duration {value!r}: must not be negative")
    return seconds


def _parse_duration_units(text: str) -> float:
    sign = 1.0
    if text[:1] in {"+", "-"}:
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
    if not text:
        raise ValueError("invalid duration: empty")

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos != len(text):
        raise ValueError(f"invalid duration {text!r}")
    return sign * total


def split_host_port(address: str) -> tuple[str, int]:
    """Split ``host:port`` (or ``[v6host]:port``) into its parts."""

    host, sep, port = address.rpartition(":")
    if not sep or not port:
        raise ValueError(f"address {address!r}: missing port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ValueError(f"address {address!r}: too many colons")
    if not port.isdigit() or not 0 <= int(port) <= 65535:
        raise ValueError(f"address {address!r}: invalid port")
    return host, int(port)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    server_address: str = Field(default="0.0.0.0:3000", alias="SERVER_ADDRESS")
    server_read_timeout: float = Field(default=5.0, alias="SERVER_READ_TIMEOUT")
    server_write_timeout: float = Field(default=15.0, alias="SERVER_WRITE_TIMEOUT")

    redis_address: str = Field(default="0.0.0.0:6379", alias="REDIS_ADDRESS")
    redis_password: str = Field(alias="REDIS_PASSWORD")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("server_read_timeout", "server_write_timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value: object) -> float:
        return parse_duration(value)

    @field_validator("server_address", "redis_address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        split_host_port(value)
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @property
    def server_bind(self) -> tuple[str, int]:
        return split_host_port(self.server_address)

    @property
    def redis_bind(self) -> tuple[str, int]:
        return split_host_port(self.redis_address)

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


def load_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigError(f"parsing config: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
