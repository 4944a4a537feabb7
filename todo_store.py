"""
Durable store for the todo document.

The whole collection lives in one JSON file. Every operation re-reads the
file under a lock, applies its change to that private copy and writes the
document back with a temp-file-then-replace, so a failed write never touches
the previous durable copy and callers never see an uncommitted mutation.
"""

import json
import logging
import os
import threading
import uuid
from typing import Any, Optional

from todo_errors import NotFoundError, PersistenceError, ValidationError
from todo_models import DOCUMENT_VERSION, Priority, Snapshot, TodoItem, dedupe, new_document, now_iso

logger = logging.getLogger(__name__)

# Fields a caller may set; id and timestamps are store-managed
MUTABLE_FIELDS = ("title", "description", "completed", "priority", "due_date", "category", "tags")
STORE_MANAGED = ("id", "created_at", "updated_at")


class JsonFileBackend:
    """Reads and atomically replaces a single JSON document on disk."""

    def __init__(self, path: str):
        self.path = os.path.abspath(path)

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def read_whole(self) -> Optional[dict[str, Any]]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError(f"{self.path} does not contain a todo document")
        return data

    def write_whole_atomically(self, document: dict[str, Any]) -> None:
        tmp_path = self.path + ".tmp"
        try:
            os.makedirs(os.path.dirname(self.path), exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            try:
                os.remove(tmp_path)
            except FileNotFoundError:
                pass
            except OSError:
                logger.warning("Could not remove temp file %s", tmp_path)
            raise PersistenceError(f"cannot write {self.path}: {e}") from e


def _normalize_document(data: dict[str, Any], path: str) -> dict[str, Any]:
    # Shape safety for hand-edited or older files
    if not isinstance(data.get("todos"), list):
        data["todos"] = []
    for position, entry in enumerate(data["todos"]):
        if not isinstance(entry, dict) or not isinstance(entry.get("id"), str) or not entry["id"]:
            raise PersistenceError(f"{path} contains a malformed todo at position {position}")
        try:
            TodoItem.from_dict(entry)
        except (TypeError, ValueError) as e:
            raise PersistenceError(
                f"{path} contains a malformed todo {entry['id']}: {e}"
            ) from e
    for key in ("categories", "tags"):
        if not isinstance(data.get(key), list):
            data[key] = []
    meta = data.get("metadata")
    if not isinstance(meta, dict):
        meta = data["metadata"] = {}
    # created is never invented here; only a write may stamp it
    meta.setdefault("version", DOCUMENT_VERSION)
    return data


class TodoStore:
    """Sole owner of the todo document."""

    def __init__(self, backend):
        if isinstance(backend, (str, os.PathLike)):
            backend = JsonFileBackend(os.fspath(backend))
        self._backend = backend
        self._lock = threading.RLock()

    @property
    def path(self) -> str:
        return self._backend.path

    def initialize(self) -> bool:
        """Create the seed document if none exists. Returns True if created."""
        with self._lock:
            if self._backend.read_whole() is not None:
                return False
            self._backend.write_whole_atomically(new_document())
            logger.info("Initialized todo document at %s", self.path)
            return True

    # ---- reads ----

    def snapshot(self) -> Snapshot:
        with self._lock:
            return Snapshot.from_document(self._load())

    def list(self) -> list[TodoItem]:
        return list(self.snapshot().todos)

    def get(self, todo_id: str) -> TodoItem:
        item = self.snapshot().find(todo_id)
        if item is None:
            raise NotFoundError(todo_id)
        return item

    # ---- writes ----

    def create(self, fields: dict[str, Any]) -> TodoItem:
        _reject_unknown(fields)
        title = fields.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("title must be a non-empty string", field="title")

        with self._lock:
            document = self._load()
            existing = {t.get("id") for t in document["todos"]}
            todo_id = uuid.uuid4().hex
            while todo_id in existing:
                todo_id = uuid.uuid4().hex

            stamp = now_iso()
            item = TodoItem(id=todo_id, title=title.strip(), created_at=stamp, updated_at=stamp)
            _apply(item, {k: v for k, v in fields.items() if k != "title"})
            _register_labels(document, item)
            document["todos"].append(item.to_dict())
            self._commit(document, stamp)

        logger.info("Created todo %s", item.id)
        return item

    def update(self, todo_id: str, changes: dict[str, Any]) -> TodoItem:
        _reject_unknown(changes)
        if "title" in changes:
            title = changes["title"]
            if not isinstance(title, str) or not title.strip():
                raise ValidationError("title must be a non-empty string", field="title")

        with self._lock:
            document = self._load()
            index = _index_of(document, todo_id)
            current = TodoItem.from_dict(document["todos"][index])
            updated = TodoItem.from_dict(current.to_dict())
            _apply(updated, changes)
            if updated.same_as(current):
                # Nothing changed; not an error and not a write
                return current

            stamp = now_iso()
            updated.updated_at = max(stamp, updated.created_at)
            _register_labels(document, updated)
            document["todos"][index] = updated.to_dict()
            self._commit(document, stamp)

        logger.info("Updated todo %s (%s)", todo_id, ", ".join(sorted(changes)))
        return updated

    def complete(self, todo_id: str, completed: bool = True) -> TodoItem:
        return self.update(todo_id, {"completed": completed})

    def delete(self, todo_id: str) -> None:
        with self._lock:
            document = self._load()
            index = _index_of(document, todo_id)
            del document["todos"][index]
            self._commit(document, now_iso())
        logger.info("Deleted todo %s", todo_id)

    # ---- internals ----

    def _load(self) -> dict[str, Any]:
        data = self._backend.read_whole()
        if data is None:
            return new_document()
        return _normalize_document(data, self.path)

    def _commit(self, document: dict[str, Any], stamp: str) -> None:
        document["metadata"].setdefault("created", stamp)
        document["metadata"]["lastModified"] = stamp
        try:
            self._backend.write_whole_atomically(document)
        except PersistenceError:
            logger.error("Write to %s failed; durable state unchanged", self.path)
            raise


def _reject_unknown(fields: dict[str, Any]) -> None:
    for key in fields:
        if key in STORE_MANAGED:
            raise ValidationError(f"{key} is managed by the store and cannot be set", field=key)
        if key not in MUTABLE_FIELDS:
            raise ValidationError(f"unknown field: {key}", field=key)


def _apply(item: TodoItem, changes: dict[str, Any]) -> None:
    for key, value in changes.items():
        if key == "title":
            value = value.strip()
        elif key == "priority":
            try:
                value = Priority(value)
            except ValueError:
                raise ValidationError(
                    f"priority must be one of {', '.join(Priority.values())}", field="priority"
                ) from None
        elif key == "tags":
            value = dedupe(value or [])
        elif key == "completed":
            value = bool(value)
        setattr(item, key, value)


def _register_labels(document: dict[str, Any], item: TodoItem) -> None:
    if item.category and item.category not in document["categories"]:
        document["categories"].append(item.category)
    for tag in item.tags:
        if tag not in document["tags"]:
            document["tags"].append(tag)


def _index_of(document: dict[str, Any], todo_id: str) -> int:
    for i, t in enumerate(document["todos"]):
        if t.get("id") == todo_id:
            return i
    raise NotFoundError(todo_id)
