import logging
import os

import pytest

from todo_config import DEFAULT_STORAGE_PATH, Settings, load_settings


def test_defaults():
    settings = load_settings(env={})
    assert settings.storage_path == DEFAULT_STORAGE_PATH
    assert settings.log_level == "info"
    assert settings.transport == "stdio"
    assert settings.server_name == "todo_mcp_server"
    assert settings.host == "127.0.0.1"
    assert settings.port == 3000


def test_values_from_env():
    settings = load_settings(env={
        "TODO_STORAGE_PATH": "/var/lib/todos.json",
        "LOG_LEVEL": "WARN",
        "MCP_TRANSPORT": "sse",
        "TODO_SERVER_NAME": "my todos",
        "HOST": "0.0.0.0",
        "PORT": "8123",
    })
    assert settings.storage_path == "/var/lib/todos.json"
    assert settings.logging_level == logging.WARNING
    assert settings.transport == "sse"
    assert settings.server_name == "my todos"
    assert settings.host == "0.0.0.0"
    assert settings.port == 8123


def test_dotenv_file_is_loaded(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("TODO_STORAGE_PATH=from-dotenv.json\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TODO_STORAGE_PATH", raising=False)

    try:
        assert load_settings().storage_path == "from-dotenv.json"
    finally:
        os.environ.pop("TODO_STORAGE_PATH", None)


@pytest.mark.parametrize("kwargs", [
    {"log_level": "verbose"},
    {"transport": "carrier-pigeon"},
    {"storage_path": "  "},
    {"port": "eighty"},
    {"port": 0},
    {"port": 70000},
    {"host": ""},
])
def test_invalid_settings(kwargs):
    with pytest.raises(ValueError):
        Settings(**kwargs)
