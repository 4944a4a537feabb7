"""
Maps named operations (the MCP tools) onto the store and query engine.

Each operation has an argument structure that is validated in full before
the store is touched. Wire names are camelCase (``dueDate``, ``tagMatch``).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from todo_errors import TodoError, UnsupportedOperationError, ValidationError
from todo_models import Priority, dedupe, parse_timestamp
from todo_query import TAG_MATCH_MODES, TodoFilter, filter_todos, search_todos
from todo_store import TodoStore

logger = logging.getLogger(__name__)


# ---- argument validation helpers ----

def _check_keys(args: Any, allowed: tuple) -> dict[str, Any]:
    if args is None:
        return {}
    if not isinstance(args, dict):
        raise ValidationError("arguments must be an object", field="arguments")
    for key in args:
        if key not in allowed:
            raise ValidationError(f"unexpected argument: {key}", field=key)
    return args


def _text(args: dict, name: str, required: bool = False) -> Optional[str]:
    value = args.get(name)
    if value is None:
        if required:
            raise ValidationError(f"{name} is required", field=name)
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string", field=name)
    value = value.strip()
    if required and not value:
        raise ValidationError(f"{name} must be a non-empty string", field=name)
    return value


def _clearable_text(args: dict, name: str) -> Optional[str]:
    # Empty string means "no value"
    return _text(args, name) or None


def _flag(args: dict, name: str) -> Optional[bool]:
    value = args.get(name)
    if value is not None and not isinstance(value, bool):
        raise ValidationError(f"{name} must be a boolean", field=name)
    return value


def _priority(args: dict, name: str = "priority") -> Optional[str]:
    value = _text(args, name)
    if value is None:
        return None
    value = value.lower()
    if value not in Priority.values():
        raise ValidationError(
            f"{name} must be one of {', '.join(Priority.values())}", field=name
        )
    return value


def _due_date(args: dict, name: str = "dueDate") -> Optional[str]:
    value = _clearable_text(args, name)
    if value is None:
        return None
    try:
        parse_timestamp(value)
    except ValueError:
        raise ValidationError(f"{name} must be an ISO 8601 date or datetime", field=name) from None
    return value


def _tags(args: dict, name: str = "tags") -> Optional[list[str]]:
    value = args.get(name)
    if value is None:
        return None
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{name} must be a list of strings", field=name)
    tags = []
    for tag in value:
        if not isinstance(tag, str) or not tag.strip():
            raise ValidationError(f"{name} must contain non-empty strings", field=name)
        tags.append(tag.strip())
    return dedupe(tags)


def _tag_match(args: dict) -> str:
    value = _text(args, "tagMatch") or "any"
    value = value.lower()
    if value not in TAG_MATCH_MODES:
        raise ValidationError("tagMatch must be 'any' or 'all'", field="tagMatch")
    return value


# ---- per-operation argument structures ----

@dataclass
class CreateTodoArgs:
    title: str
    description: Optional[str] = None
    priority: str = Priority.MEDIUM.value
    due_date: Optional[str] = None
    category: Optional[str] = None
    tags: list[str] = field(default_factory=list)

    ALLOWED = ("title", "description", "priority", "dueDate", "category", "tags")

    @classmethod
    def parse(cls, arguments: Any) -> "CreateTodoArgs":
        args = _check_keys(arguments, cls.ALLOWED)
        return cls(
            title=_text(args, "title", required=True),
            description=_clearable_text(args, "description"),
            priority=_priority(args) or Priority.MEDIUM.value,
            due_date=_due_date(args),
            category=_clearable_text(args, "category"),
            tags=_tags(args) or [],
        )

    def fields(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "due_date": self.due_date,
            "category": self.category,
            "tags": self.tags,
        }


@dataclass
class TodoIdArgs:
    id: str

    ALLOWED = ("id",)

    @classmethod
    def parse(cls, arguments: Any) -> "TodoIdArgs":
        args = _check_keys(arguments, cls.ALLOWED)
        return cls(id=_text(args, "id", required=True))


@dataclass
class UpdateTodoArgs:
    """Only keys present in the call are changed. Empty strings clear
    ``description``, ``dueDate`` and ``category``."""

    id: str
    changes: dict[str, Any] = field(default_factory=dict)

    ALLOWED = ("id", "title", "description", "completed", "priority", "dueDate", "category", "tags")

    @classmethod
    def parse(cls, arguments: Any) -> "UpdateTodoArgs":
        args = _check_keys(arguments, cls.ALLOWED)
        todo_id = _text(args, "id", required=True)
        changes: dict[str, Any] = {}
        if args.get("title") is not None:
            changes["title"] = _text(args, "title", required=True)
        if "description" in args:
            changes["description"] = _clearable_text(args, "description")
        if args.get("completed") is not None:
            changes["completed"] = _flag(args, "completed")
        if args.get("priority") is not None:
            changes["priority"] = _priority(args)
        if "dueDate" in args:
            changes["due_date"] = _due_date(args)
        if "category" in args:
            changes["category"] = _clearable_text(args, "category")
        if "tags" in args:
            changes["tags"] = _tags(args) or []
        return cls(id=todo_id, changes=changes)


@dataclass
class CompleteTodoArgs:
    id: str
    completed: bool = True

    ALLOWED = ("id", "completed")

    @classmethod
    def parse(cls, arguments: Any) -> "CompleteTodoArgs":
        args = _check_keys(arguments, cls.ALLOWED)
        completed = _flag(args, "completed")
        return cls(
            id=_text(args, "id", required=True),
            completed=True if completed is None else completed,
        )


@dataclass
class ListTodosArgs:
    criteria: TodoFilter

    ALLOWED = ("completed", "category", "priority", "tags", "tagMatch")

    @classmethod
    def parse(cls, arguments: Any) -> "ListTodosArgs":
        args = _check_keys(arguments, cls.ALLOWED)
        return cls(criteria=_filter_from(args))


@dataclass
class SearchTodosArgs:
    query: str
    criteria: TodoFilter

    ALLOWED = ("query",) + ListTodosArgs.ALLOWED

    @classmethod
    def parse(cls, arguments: Any) -> "SearchTodosArgs":
        args = _check_keys(arguments, cls.ALLOWED)
        query = args.get("query")
        if query is not None and not isinstance(query, str):
            raise ValidationError("query must be a string", field="query")
        # Substring semantics: whitespace in the query is significant
        return cls(query=query or "", criteria=_filter_from(args))


def _filter_from(args: dict) -> TodoFilter:
    return TodoFilter(
        completed=_flag(args, "completed"),
        category=_text(args, "category") or None,
        priority=_priority(args),
        tags=_tags(args) or [],
        tag_match=_tag_match(args),
    )


# ---- dispatcher ----

class OperationDispatcher:
    """Single entry point from the protocol layer into the todo core."""

    def __init__(self, store: TodoStore):
        self.store = store
        self._operations: dict[str, Callable[[Any], Any]] = {
            "create_todo": self.create_todo,
            "list_todos": self.list_todos,
            "get_todo": self.get_todo,
            "update_todo": self.update_todo,
            "complete_todo": self.complete_todo,
            "delete_todo": self.delete_todo,
            "search_todos": self.search_todos,
        }

    @property
    def operation_names(self) -> list[str]:
        return list(self._operations)

    def dispatch(self, operation: str, arguments: Any = None) -> Any:
        handler = self._operations.get(operation)
        if handler is None:
            logger.warning("Rejected unknown operation %r", operation)
            raise UnsupportedOperationError(operation)
        logger.debug("Dispatching %s", operation)
        try:
            return handler(arguments)
        except TodoError as e:
            logger.warning("%s failed: %s", operation, e)
            raise

    def handle(self, request: dict[str, Any]) -> dict[str, Any]:
        """Answer ``{operationName, arguments}`` with ``{result}`` or an error dict."""
        try:
            if not isinstance(request, dict):
                raise ValidationError("request must be an object", field="request")
            name = request.get("operationName")
            if not isinstance(name, str):
                raise ValidationError("operationName must be a string", field="operationName")
            return {"result": self.dispatch(name, request.get("arguments"))}
        except TodoError as e:
            return e.to_dict()

    # ---- operations ----

    def create_todo(self, arguments: Any) -> dict[str, Any]:
        args = CreateTodoArgs.parse(arguments)
        return self.store.create(args.fields()).to_dict()

    def get_todo(self, arguments: Any) -> dict[str, Any]:
        args = TodoIdArgs.parse(arguments)
        return self.store.get(args.id).to_dict()

    def update_todo(self, arguments: Any) -> dict[str, Any]:
        args = UpdateTodoArgs.parse(arguments)
        return self.store.update(args.id, args.changes).to_dict()

    def complete_todo(self, arguments: Any) -> dict[str, Any]:
        args = CompleteTodoArgs.parse(arguments)
        return self.store.complete(args.id, args.completed).to_dict()

    def delete_todo(self, arguments: Any) -> dict[str, Any]:
        args = TodoIdArgs.parse(arguments)
        self.store.delete(args.id)
        return {"deleted": True, "id": args.id}

    def list_todos(self, arguments: Any) -> list[dict[str, Any]]:
        args = ListTodosArgs.parse(arguments)
        return [t.to_dict() for t in filter_todos(self.store.snapshot(), args.criteria)]

    def search_todos(self, arguments: Any) -> list[dict[str, Any]]:
        args = SearchTodosArgs.parse(arguments)
        found = search_todos(self.store.snapshot(), args.query, args.criteria)
        return [t.to_dict() for t in found]
