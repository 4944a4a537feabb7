import pytest

from todo_errors import ValidationError
from todo_models import Priority, Snapshot, TodoItem
from todo_query import TodoFilter, filter_todos, search_todos


def make_item(todo_id, title, **kwargs):
    return TodoItem(id=todo_id, title=title, created_at="t", updated_at="t", **kwargs)


@pytest.fixture
def snapshot():
    todos = (
        make_item("1", "Buy milk", category="shopping", tags=["quick"]),
        make_item("2", "Finish slides", description="Quarterly MILK numbers", category="work",
                  priority=Priority.HIGH, tags=["meeting", "urgent"]),
        make_item("3", "Call dentist", category="health", completed=True, tags=["urgent"]),
        make_item("4", "Review PR", category="work", completed=True, priority=Priority.LOW,
                  tags=["review"]),
        make_item("5", "Team sync", category="work", tags=["meeting"]),
    )
    return Snapshot(todos=todos, categories=(), tags=(), metadata={})


def ids(items):
    return [t.id for t in items]


def test_no_criteria_returns_everything_in_order(snapshot):
    assert ids(filter_todos(snapshot)) == ["1", "2", "3", "4", "5"]
    assert ids(filter_todos(snapshot, TodoFilter())) == ["1", "2", "3", "4", "5"]


def test_combined_predicates(snapshot):
    result = filter_todos(snapshot, TodoFilter(completed=False, category="work"))
    assert ids(result) == ["2", "5"]


def test_priority_filter(snapshot):
    assert ids(filter_todos(snapshot, TodoFilter(priority="high"))) == ["2"]
    assert ids(filter_todos(snapshot, TodoFilter(priority="medium"))) == ["1", "3", "5"]


def test_tags_match_any_by_default(snapshot):
    result = filter_todos(snapshot, TodoFilter(tags=["urgent", "review"]))
    assert ids(result) == ["2", "3", "4"]


def test_tags_match_all(snapshot):
    result = filter_todos(snapshot, TodoFilter(tags=["urgent", "meeting"], tag_match="all"))
    assert ids(result) == ["2"]


def test_unknown_priority_rejected(snapshot):
    with pytest.raises(ValidationError) as exc:
        filter_todos(snapshot, TodoFilter(priority="critical"))
    assert exc.value.field == "priority"


def test_unknown_tag_match_rejected(snapshot):
    with pytest.raises(ValidationError) as exc:
        filter_todos(snapshot, TodoFilter(tag_match="some"))
    assert exc.value.field == "tagMatch"


def test_search_is_case_insensitive_on_title_and_description(snapshot):
    assert ids(search_todos(snapshot, "milk")) == ["1", "2"]
    assert ids(search_todos(snapshot, "DENTIST")) == ["3"]
    assert search_todos(snapshot, "bread") == []


def test_empty_query_matches_everything(snapshot):
    assert ids(search_todos(snapshot, "")) == ["1", "2", "3", "4", "5"]


def test_whitespace_in_query_is_significant(snapshot):
    assert ids(search_todos(snapshot, "milk ")) == ["2"]
    assert ids(search_todos(snapshot, " milk")) == ["1", "2"]
    assert search_todos(snapshot, "  ") == []


def test_search_and_filter_are_anded(snapshot):
    result = search_todos(snapshot, "milk", TodoFilter(category="work"))
    assert ids(result) == ["2"]


def test_query_does_not_mutate_snapshot(snapshot):
    before = [t.to_dict() for t in snapshot.todos]
    filter_todos(snapshot, TodoFilter(completed=True))
    search_todos(snapshot, "sync")
    assert [t.to_dict() for t in snapshot.todos] == before
