import asyncio
import json

from server import create_server, parse_args
from todo_config import Settings


def make_server(tmp_path):
    return create_server(Settings(storage_path=str(tmp_path / "todos.json")))


def test_create_server_initializes_document(tmp_path):
    make_server(tmp_path)
    doc = json.loads((tmp_path / "todos.json").read_text(encoding="utf-8"))
    assert doc["todos"] == []


def test_tools_are_registered(tmp_path):
    mcp = make_server(tmp_path)
    tools = asyncio.run(mcp.list_tools())
    assert {t.name for t in tools} == {
        "create_todo", "list_todos", "get_todo", "update_todo",
        "complete_todo", "delete_todo", "search_todos",
    }


def test_resources_are_registered(tmp_path):
    mcp = make_server(tmp_path)
    resources = asyncio.run(mcp.list_resources())
    assert {str(r.uri) for r in resources} == {"todo://todos", "todo://categories", "todo://tags"}


def test_read_categories_resource(tmp_path):
    mcp = make_server(tmp_path)
    contents = list(asyncio.run(mcp.read_resource("todo://categories")))
    assert json.loads(contents[0].content) == ["personal", "work", "shopping", "health"]


def test_parse_args():
    args = parse_args([
        "--storage-path", "x.json", "--log-level", "debug", "--transport", "sse",
        "--host", "0.0.0.0", "-p", "8123",
    ])
    assert args.storage_path == "x.json"
    assert args.log_level == "debug"
    assert args.transport == "sse"
    assert args.host == "0.0.0.0"
    assert args.port == 8123


def test_port_reaches_fastmcp(tmp_path):
    mcp = create_server(Settings(storage_path=str(tmp_path / "todos.json"), host="0.0.0.0", port=8123))
    assert mcp.settings.host == "0.0.0.0"
    assert mcp.settings.port == 8123
