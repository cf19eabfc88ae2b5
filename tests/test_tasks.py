"""Unit tests for task stores and the board."""
from datetime import date

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError

from flowboard.tasks import (
    Task,
    TaskCreate,
    TaskNotFoundError,
    TaskPriority,
    TaskStatus,
    TaskStore,
    TaskStoreError,
    TaskUpdate,
    create_task_store,
)
from flowboard.tasks.in_memory import InMemoryTaskStore
from flowboard.tasks.sqlite import SQLiteTaskStore


@pytest.fixture(params=["memory", "sqlite"])
def empty_store(request, tmp_path) -> TaskStore:
    """Return an unconnected empty store of each backend."""
    if request.param == "sqlite":
        return create_task_store("sqlite", path=tmp_path / "tasks.db")
    return create_task_store("memory")


class TestTaskModels:
    """Tests for task data models."""

    def test_task_defaults(self):
        """Test creating a task with only a title."""
        task = Task(title="Write report")

        assert task.status == TaskStatus.TODO
        assert task.priority == TaskPriority.MEDIUM
        assert task.position == 0
        assert task.id

    def test_task_requires_title(self):
        """Test that an empty title fails validation."""
        with pytest.raises(ValidationError):
            Task(title="")

    def test_context_line(self):
        """Test the one-line chat context summary."""
        task = Task(title="Write report", priority=TaskPriority.HIGH, category="Work")
        assert task.to_context_line() == "[todo] Write report (high priority, Work)"

        task = Task(title="Review PR", status=TaskStatus.IN_PROGRESS)
        assert task.to_context_line() == "[in_progress] Review PR (medium priority)"

    def test_update_keeps_only_set_fields(self):
        """Test that omitted fields are not part of the change set."""
        assert TaskUpdate(status="done").changes() == {"status": TaskStatus.DONE}
        assert TaskUpdate(category=None).changes() == {"category": None}

    @pytest.mark.parametrize("updates", [
        {"status": "archived"},
        {"priority": "urgent"},
        {"title": ""},
        {"title": None},
        {"position": -1},
        {"owner": "sam"},
    ])
    def test_update_rejects_invalid(self, updates):
        """Test that unknown fields and bad values are rejected."""
        with pytest.raises(ValidationError):
            TaskUpdate.model_validate(updates)

    def test_create_rejects_unknown_fields(self):
        """Test that TaskCreate does not accept extra fields."""
        with pytest.raises(ValidationError):
            TaskCreate(title="x", position=3)

    @given(st.text())
    def test_status_validation(self, value: str):
        """Property test: Only the four statuses are accepted."""
        if value in ("todo", "in_progress", "done", "completed"):
            assert TaskStatus(value) in TaskStatus
        else:
            with pytest.raises(ValueError):
                TaskStatus(value)


class TestTaskStore:
    """Tests shared by every TaskStore backend."""

    def test_task_store_is_abstract(self):
        """Test that TaskStore cannot be instantiated directly."""
        with pytest.raises(TypeError):
            TaskStore()  # type: ignore

    def test_factory_rejects_unknown_backend(self):
        """Test that the factory names the supported backends."""
        with pytest.raises(ValueError, match="memory, sqlite"):
            create_task_store("postgres")

    def test_factory_backend_types(self, tmp_path):
        """Test that the factory builds the requested backend."""
        assert isinstance(create_task_store(), InMemoryTaskStore)
        sqlite_store = create_task_store("sqlite", path=tmp_path / "t.db")
        assert isinstance(sqlite_store, SQLiteTaskStore)
        assert sqlite_store.backend_type == "sqlite"

    @pytest.mark.asyncio
    async def test_create_assigns_column_position(self, empty_store):
        """Test that new tasks go to the end of their status column."""
        async with empty_store as store:
            first = await store.create_task(TaskCreate(title="A"))
            second = await store.create_task(TaskCreate(title="B"))
            other = await store.create_task(TaskCreate(title="C", status=TaskStatus.IN_PROGRESS))

            assert (first.position, second.position, other.position) == (0, 1, 0)
            assert first.status == TaskStatus.TODO
            assert first.priority == TaskPriority.MEDIUM
            assert [t.title for t in await store.list_tasks()] == ["A", "C", "B"]

    @pytest.mark.asyncio
    async def test_update_is_partial(self, empty_store):
        """Test that only the given fields change."""
        async with empty_store as store:
            task = await store.create_task(TaskCreate(
                title="Write report", category="Work", due_date=date(2026, 3, 1)
            ))

            updated = await store.update_task(task.id, {"status": "done", "priority": "high"})

            assert updated.status == TaskStatus.DONE
            assert updated.priority == TaskPriority.HIGH
            assert updated.title == "Write report"
            assert updated.category == "Work"
            assert updated.due_date == date(2026, 3, 1)
            assert updated.created_at == task.created_at

    @pytest.mark.asyncio
    async def test_update_missing_task(self, empty_store):
        """Test that updating an unknown id raises TaskNotFoundError."""
        async with empty_store as store:
            with pytest.raises(TaskNotFoundError) as exc_info:
                await store.update_task("nope", {"status": "done"})
            assert exc_info.value.task_id == "nope"

    @pytest.mark.asyncio
    async def test_update_invalid_value(self, empty_store):
        """Test that a bad value is rejected without changing the task."""
        async with empty_store as store:
            task = await store.create_task(TaskCreate(title="A"))

            with pytest.raises(ValidationError):
                await store.update_task(task.id, {"status": "archived"})

            assert (await store.list_tasks())[0].status == TaskStatus.TODO

    @pytest.mark.asyncio
    async def test_delete(self, empty_store):
        """Test deleting a task and deleting it again."""
        async with empty_store as store:
            task = await store.create_task(TaskCreate(title="A"))

            await store.delete_task(task.id)
            assert await store.list_tasks() == []

            with pytest.raises(TaskNotFoundError):
                await store.delete_task(task.id)

    @pytest.mark.asyncio
    async def test_sqlite_persists_across_connections(self, tmp_path):
        """Test that the SQLite board survives a reconnect."""
        path = tmp_path / "board.db"
        async with SQLiteTaskStore(path) as store:
            created = await store.create_task(TaskCreate(
                title="Persist me", priority=TaskPriority.HIGH, due_date=date(2026, 1, 31)
            ))

        async with SQLiteTaskStore(path) as store:
            tasks = await store.list_tasks()

        assert len(tasks) == 1
        assert tasks[0].id == created.id
        assert tasks[0].priority == TaskPriority.HIGH
        assert tasks[0].due_date == date(2026, 1, 31)

    @pytest.mark.asyncio
    async def test_sqlite_requires_connection(self, tmp_path):
        """Test that using an unconnected SQLite store fails clearly."""
        with pytest.raises(TaskStoreError, match="not connected"):
            await SQLiteTaskStore(tmp_path / "x.db").list_tasks()


class TestTaskBoard:
    """Tests for TaskBoard."""

    @pytest.mark.asyncio
    async def test_refresh_loads_snapshot(self, board):
        """Test that refresh orders tasks by position."""
        tasks = await board.refresh()
        assert [t.id for t in tasks] == ["1", "2", "3"]
        assert board.tasks is not board.tasks

    @pytest.mark.asyncio
    async def test_move_to_other_column(self, board, store):
        """Test that a drop sets status and bottom-of-column position."""
        await board.refresh()

        moved = await board.move_task("1", "in_progress")

        assert store.updates == [("1", {"status": TaskStatus.IN_PROGRESS, "position": 1})]
        assert moved.status == TaskStatus.IN_PROGRESS
        assert board.get_task("1").status == TaskStatus.IN_PROGRESS

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["todo", "completed", "archived"])
    async def test_move_ignored(self, board, store, status):
        """Test that same-column and non-column drops touch nothing."""
        await board.refresh()

        assert await board.move_task("1", status) is None
        assert store.updates == []

    @pytest.mark.asyncio
    async def test_move_unknown_task(self, board, store):
        """Test that dropping an unknown card is a no-op."""
        await board.refresh()

        assert await board.move_task("missing", TaskStatus.DONE) is None
        assert store.updates == []

    @pytest.mark.asyncio
    async def test_add_task(self, board):
        """Test that a new task lands at the bottom of its column."""
        await board.refresh()

        task = await board.add_task("Plan sprint", priority=TaskPriority.HIGH, category="Work")

        assert task.position == 2
        assert board.tasks[-1].title == "Plan sprint"

    @pytest.mark.asyncio
    async def test_add_invalid_task_notifies(self, board, notifications):
        """Test that a rejected task becomes an error notification."""
        assert await board.add_task("") is None
        assert notifications[0].title == "Error adding task"

    @pytest.mark.asyncio
    async def test_delete_missing_notifies(self, board, notifications):
        """Test that deleting an unknown id is reported, not raised."""
        await board.refresh()

        assert await board.delete_task("missing") is False
        assert notifications[0].title == "Error deleting task"
        assert len(board.tasks) == 3

    @pytest.mark.asyncio
    async def test_update_failure_notifies(self, board, notifications):
        """Test that an invalid update is reported, not raised."""
        await board.refresh()

        assert await board.update_task("1", {"priority": "urgent"}) is None
        assert notifications[0].title == "Error updating task"

    @pytest.mark.asyncio
    async def test_filter_tasks(self, board):
        """Test searching titles and categories and filtering by priority."""
        await board.refresh()

        assert [t.id for t in board.filter_tasks(search="REPORT")] == ["1"]
        assert [t.id for t in board.filter_tasks(search="personal")] == ["3"]
        assert [t.id for t in board.filter_tasks(priority=TaskPriority.MEDIUM)] == ["2"]
        assert len(board.filter_tasks()) == 3

    @pytest.mark.asyncio
    async def test_task_context(self, board):
        """Test the chat context serialization."""
        await board.refresh()

        assert board.task_context().splitlines() == [
            "[todo] Write report (high priority, Work)",
            "[in_progress] Review PR (medium priority)",
            "[todo] Buy groceries (low priority, Personal)",
        ]
        assert [t.id for t in board.column(TaskStatus.TODO)] == ["1", "3"]
