"""
Runtime settings, read from the environment after loading ``.env``.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

DEFAULT_STORAGE_PATH = os.path.join(".", "data", "todos.json")
DEFAULT_SERVER_NAME = "todo_mcp_server"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}
TRANSPORTS = ("stdio", "sse", "streamable-http")


@dataclass
class Settings:
    storage_path: str = DEFAULT_STORAGE_PATH
    log_level: str = "info"
    server_name: str = DEFAULT_SERVER_NAME
    transport: str = "stdio"
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    def __post_init__(self):
        try:
            self.port = int(self.port)
        except (TypeError, ValueError):
            raise ValueError(f"PORT must be an integer, got {self.port!r}") from None
        if not 0 < self.port < 65536:
            raise ValueError(f"PORT must be between 1 and 65535, got {self.port}")
        if not self.host.strip():
            raise ValueError("HOST must not be empty")
        self.log_level = self.log_level.strip().lower()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")
        self.transport = self.transport.strip().lower()
        if self.transport not in TRANSPORTS:
            raise ValueError(f"MCP_TRANSPORT must be one of {', '.join(TRANSPORTS)}, got {self.transport!r}")
        if not self.storage_path.strip():
            raise ValueError("TODO_STORAGE_PATH must not be empty")

    @property
    def logging_level(self) -> int:
        return LOG_LEVELS[self.log_level]


def load_settings(env: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> Settings:
    if env is None:
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))  # reads .env into environment variables
        env = os.environ
    return Settings(
        storage_path=env.get("TODO_STORAGE_PATH") or DEFAULT_STORAGE_PATH,
        log_level=env.get("LOG_LEVEL") or "info",
        server_name=env.get("TODO_SERVER_NAME") or DEFAULT_SERVER_NAME,
        transport=env.get("MCP_TRANSPORT") or "stdio",
        host=env.get("HOST") or DEFAULT_HOST,
        port=env.get("PORT") or DEFAULT_PORT,
    )
