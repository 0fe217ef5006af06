"""
Single place for server defaults and the runtime ServerConfig.
Change the constants here to alter what the CLI falls back to when a setting is not given.
"""

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_PORT = 3000
DEFAULT_PROTOCOL = "http"
# Bind address; HOXY_HOST=127.0.0.1 keeps the server off the LAN
DEFAULT_HOST = os.environ.get("HOXY_HOST", "0.0.0.0")

INDEX_FILE = "index.html"
RELOAD_MESSAGE = "reload"

# watchfiles groups raw events arriving within this window into one batch
WATCH_DEBOUNCE_MS = int(os.environ.get("HOXY_WATCH_DEBOUNCE_MS", "50"))

CERT_COMMON_NAME = "localhost"
CERT_VALID_DAYS = 365


class ServerConfig(BaseModel):
    """Immutable server settings, built once before the transport starts."""

    model_config = ConfigDict(frozen=True)

    port: int = DEFAULT_PORT
    protocol: Literal["http", "https"] = DEFAULT_PROTOCOL
    live_reload: bool = False
    cors: bool = False
    spa: bool = False
    root: Path
    host: str = DEFAULT_HOST
    open_browser: bool = True

    @field_validator("port")
    @classmethod
    def _check_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError(f"port must be between 1 and 65535, got {value}")
        return value

    @field_validator("protocol", mode="before")
    @classmethod
    def _normalize_protocol(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("root")
    @classmethod
    def _check_root(cls, value: Path) -> Path:
        root = value.expanduser().resolve()
        if not root.is_dir():
            raise ValueError(f"root is not a directory: {root}")
        return root

    @property
    def is_https(self) -> bool:
        return self.protocol == "https"

    def local_url(self) -> str:
        return f"{self.protocol}://localhost:{self.port}"
