from typing import Any, Optional


class TodoError(Exception):
    """Base class for every failure the todo core reports to a caller."""

    kind = "TodoError"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"errorKind": self.kind, "message": self.message}
        if self.field is not None:
            out["field"] = self.field
        return out


class ValidationError(TodoError):
    kind = "ValidationError"


class NotFoundError(TodoError):
    kind = "NotFoundError"

    def __init__(self, todo_id: str):
        super().__init__(f"todo {todo_id} not found", field="id")
        self.todo_id = todo_id


class PersistenceError(TodoError):
    kind = "PersistenceError"


class UnsupportedOperationError(TodoError):
    kind = "UnsupportedOperationError"

    def __init__(self, operation: str):
        super().__init__(f"unsupported operation: {operation}")
        self.operation = operation
