"""
Data model for the todo document: items, priorities, snapshots and the
seed document written on first run.
"""

import copy
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

DOCUMENT_VERSION = "1.0.0"

SEED_CATEGORIES = ["personal", "work", "shopping", "health"]
SEED_TAGS = ["urgent", "important", "quick", "meeting", "review"]


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def values(cls) -> list[str]:
        return [p.value for p in cls]


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 date or datetime. A trailing ``Z`` means UTC."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def dedupe(values) -> list[str]:
    seen: list[str] = []
    for v in values:
        if v not in seen:
            seen.append(v)
    return seen


@dataclass
class TodoItem:
    id: str
    title: str
    description: Optional[str] = None
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    due_date: Optional[str] = None
    category: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
            "priority": self.priority.value,
            "dueDate": self.due_date,
            "category": self.category,
            "tags": list(self.tags),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "TodoItem":
        # Older documents may lack optional fields
        created = str(d.get("createdAt") or "") or now_iso()
        return cls(
            id=str(d["id"]),
            title=str(d.get("title", "")),
            description=d.get("description"),
            completed=bool(d.get("completed", False)),
            priority=Priority(d.get("priority") or Priority.MEDIUM.value),
            due_date=d.get("dueDate"),
            category=d.get("category"),
            tags=dedupe(d.get("tags") or []),
            created_at=created,
            updated_at=str(d.get("updatedAt") or "") or created,
        )

    def same_as(self, other: "TodoItem") -> bool:
        """Field equality with tags compared as a set."""
        mine, theirs = asdict(self), asdict(other)
        mine["tags"], theirs["tags"] = set(self.tags), set(other.tags)
        return mine == theirs


@dataclass(frozen=True)
class Snapshot:
    todos: tuple
    categories: tuple
    tags: tuple
    metadata: dict

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Snapshot":
        return cls(
            todos=tuple(TodoItem.from_dict(t) for t in document.get("todos", [])),
            categories=tuple(document.get("categories", [])),
            tags=tuple(document.get("tags", [])),
            metadata=copy.deepcopy(document.get("metadata", {})),
        )

    def find(self, todo_id: str) -> Optional[TodoItem]:
        for item in self.todos:
            if item.id == todo_id:
                return item
        return None


def new_document() -> dict[str, Any]:
    stamp = now_iso()
    return {
        "todos": [],
        "categories": list(SEED_CATEGORIES),
        "tags": list(SEED_TAGS),
        "metadata": {
            "version": DOCUMENT_VERSION,
            "created": stamp,
            "lastModified": stamp,
        },
    }
