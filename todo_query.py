"""
Read-only filtering and text search over a store snapshot.

Tag filtering matches any of the requested tags unless ``tag_match`` is
``"all"``. Results always keep the collection's insertion order.
"""

from dataclasses import dataclass, field
from typing import Optional

from todo_errors import ValidationError
from todo_models import Priority, Snapshot, TodoItem

TAG_MATCH_MODES = ("any", "all")


@dataclass
class TodoFilter:
    completed: Optional[bool] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    tag_match: str = "any"

    def validate(self) -> None:
        if self.priority is not None and self.priority not in Priority.values():
            raise ValidationError(
                f"priority must be one of {', '.join(Priority.values())}", field="priority"
            )
        if self.tag_match not in TAG_MATCH_MODES:
            raise ValidationError("tagMatch must be 'any' or 'all'", field="tagMatch")

    def matches(self, item: TodoItem) -> bool:
        if self.completed is not None and item.completed != self.completed:
            return False
        if self.category is not None and item.category != self.category:
            return False
        if self.priority is not None and item.priority.value != self.priority:
            return False
        if self.tags:
            wanted = set(self.tags)
            have = set(item.tags)
            if self.tag_match == "all":
                return wanted <= have
            return bool(wanted & have)
        return True


def filter_todos(snapshot: Snapshot, criteria: Optional[TodoFilter] = None) -> list[TodoItem]:
    criteria = criteria or TodoFilter()
    criteria.validate()
    return [item for item in snapshot.todos if criteria.matches(item)]


def _text_matches(item: TodoItem, needle: str) -> bool:
    if needle in item.title.lower():
        return True
    return bool(item.description) and needle in item.description.lower()


def search_todos(
    snapshot: Snapshot, query: str, criteria: Optional[TodoFilter] = None
) -> list[TodoItem]:
    """Case-insensitive substring search on title and description.

    An empty query matches every item. ``criteria``, when given, is ANDed
    with the text match.
    """
    needle = (query or "").lower()
    items = filter_todos(snapshot, criteria)
    if not needle:
        return items
    return [item for item in items if _text_matches(item, needle)]
