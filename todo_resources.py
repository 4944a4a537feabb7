from typing import Any

from todo_store import TodoStore

RESOURCE_URIS = {
    "todos": "todo://todos",
    "categories": "todo://categories",
    "tags": "todo://tags",
}


class ResourceProvider:
    """Read-only views of the document, each a projection of one snapshot."""

    def __init__(self, store: TodoStore):
        self.store = store

    def all_todos(self) -> list[dict[str, Any]]:
        return [t.to_dict() for t in self.store.snapshot().todos]

    def categories(self) -> list[str]:
        return list(self.store.snapshot().categories)

    def tags(self) -> list[str]:
        return list(self.store.snapshot().tags)
