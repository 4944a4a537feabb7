import pytest

from todo_dispatcher import OperationDispatcher
from todo_store import TodoStore


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "data" / "todos.json"


@pytest.fixture
def store(store_path):
    s = TodoStore(store_path)
    s.initialize()
    return s


@pytest.fixture
def dispatcher(store):
    return OperationDispatcher(store)
