# Import dependencies

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import Any, List, Optional

from mcp.server.fastmcp import FastMCP

from todo_config import LOG_LEVELS, TRANSPORTS, Settings, load_settings
from todo_dispatcher import OperationDispatcher
from todo_resources import RESOURCE_URIS, ResourceProvider
from todo_store import TodoStore

logger = logging.getLogger(__name__)


def _present(**kwargs: Any) -> dict[str, Any]:
    # FastMCP passes None for omitted optional arguments
    return {k: v for k, v in kwargs.items() if v is not None}


def create_server(settings: Settings) -> FastMCP:
    """Build a FastMCP server backed by the todo document at ``settings.storage_path``."""
    store = TodoStore(settings.storage_path)
    store.initialize()
    dispatcher = OperationDispatcher(store)
    resources = ResourceProvider(store)

    mcp = FastMCP(settings.server_name, host=settings.host, port=settings.port)

    @mcp.tool()
    def create_todo(
        title: str,
        description: Optional[str] = None,
        priority: Optional[str] = None,
        dueDate: Optional[str] = None,
        category: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> dict[str, Any]:
        """
        Create a new todo.

        Args:
          title: Todo title (required, non-empty).
          description: Optional longer text.
          priority: "high", "medium" or "low" (default "medium").
          dueDate: Optional ISO 8601 date or datetime, e.g. "2026-01-15".
          category: Optional category; new categories are added to the known list.
          tags: Optional list of tags; new tags are added to the known list.

        Returns:
          The created todo as a dict.
        """
        return dispatcher.dispatch("create_todo", _present(
            title=title, description=description, priority=priority,
            dueDate=dueDate, category=category, tags=tags,
        ))

    @mcp.tool()
    def list_todos(
        completed: Optional[bool] = None,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        tags: Optional[List[str]] = None,
        tagMatch: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """
        List todos in insertion order, optionally filtered.

        Args:
          completed: Only completed (True) or open (False) todos.
          category: Only todos in this category.
          priority: Only todos with this priority.
          tags: Only todos carrying these tags.
          tagMatch: "any" (default) matches todos with at least one tag, "all" requires every tag.
        """
        return dispatcher.dispatch("list_todos", _present(
            completed=completed, category=category, priority=priority,
            tags=tags, tagMatch=tagMatch,
        ))

    @mcp.tool()
    def get_todo(id: str) -> dict[str, Any]:
        """Fetch a single todo by id."""
        return dispatcher.dispatch("get_todo", {"id": id})

    @mcp.tool()
    def update_todo(
        id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        completed: Optional[bool] = None,
        priority: Optional[str] = None,
        dueDate: Optional[str] = None,
        category: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> dict[str, Any]:
        """
        Update fields of a todo. Omitted fields keep their value.

        Args:
          id: todo id
          description, dueDate, category: "" clears the field.
          tags: replaces the todo's tags.

        Returns:
          The updated todo dict.
        """
        return dispatcher.dispatch("update_todo", _present(
            id=id, title=title, description=description, completed=completed,
            priority=priority, dueDate=dueDate, category=category, tags=tags,
        ))

    @mcp.tool()
    def complete_todo(id: str, completed: bool = True) -> dict[str, Any]:
        """Mark a todo as completed (or open again with completed=False)."""
        return dispatcher.dispatch("complete_todo", {"id": id, "completed": completed})

    @mcp.tool()
    def delete_todo(id: str) -> dict[str, Any]:
        """
        Delete a todo by id.

        Returns:
          {"deleted": True, "id": <id>}
        """
        return dispatcher.dispatch("delete_todo", {"id": id})

    @mcp.tool()
    def search_todos(
        query: str = "",
        completed: Optional[bool] = None,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        tags: Optional[List[str]] = None,
        tagMatch: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """
        Case-insensitive search in title and description. An empty query
        matches everything; filters are combined with the text match.
        """
        return dispatcher.dispatch("search_todos", _present(
            query=query, completed=completed, category=category,
            priority=priority, tags=tags, tagMatch=tagMatch,
        ))

    @mcp.resource(RESOURCE_URIS["todos"], name="all todos", mime_type="application/json")
    def all_todos_resource() -> str:
        """Every todo in the collection."""
        return json.dumps(resources.all_todos(), ensure_ascii=False, indent=2)

    @mcp.resource(RESOURCE_URIS["categories"], name="categories", mime_type="application/json")
    def categories_resource() -> str:
        """Known todo categories."""
        return json.dumps(resources.categories(), ensure_ascii=False)

    @mcp.resource(RESOURCE_URIS["tags"], name="tags", mime_type="application/json")
    def tags_resource() -> str:
        """Known todo tags."""
        return json.dumps(resources.tags(), ensure_ascii=False)

    logger.info("Serving todos from %s", store.path)
    return mcp


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="MCP todo server")
    parser.add_argument("--storage-path", help="Path of the todo JSON document")
    parser.add_argument("--log-level", choices=sorted(LOG_LEVELS), help="Logging level")
    parser.add_argument("--transport", choices=TRANSPORTS, help="MCP transport")
    parser.add_argument("--host", help="Bind address for the sse and streamable-http transports")
    parser.add_argument("-p", "--port", type=int, help="Port for the sse and streamable-http transports")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    overrides = {
        "storage_path": args.storage_path,
        "log_level": args.log_level,
        "transport": args.transport,
        "host": args.host,
        "port": args.port,
    }
    settings = replace(load_settings(), **_present(**overrides))

    # stdout carries the stdio transport
    logging.basicConfig(
        level=settings.logging_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    mcp = create_server(settings)
    mcp.run(transport=settings.transport)


if __name__ == "__main__":
    main()
