"""In-memory task store backend.

Simple dict-based storage for session-only boards.
Data is lost when the application exits.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from .base import TaskNotFoundError, TaskStore
from .models import Task, TaskCreate, TaskUpdate


class InMemoryTaskStore(TaskStore):
    """In-memory task store (session-only).

    Suitable for single-session use or testing.
    """

    def __init__(self, tasks: Iterable[Task] | None = None):
        self._tasks: dict[str, Task] = {task.id: task for task in tasks or ()}

    async def connect(self) -> None:
        """Initialize store (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close store (no-op for in-memory)."""
        pass

    async def list_tasks(self) -> list[Task]:
        # sorted() is stable, so ties keep insertion order
        return sorted(self._tasks.values(), key=lambda task: task.position)

    async def create_task(self, data: TaskCreate) -> Task:
        position = sum(1 for task in self._tasks.values() if task.status == data.status)
        task = Task(**data.model_dump(), position=position)
        self._tasks[task.id] = task
        return task

    async def update_task(self, task_id: str, updates: Mapping[str, Any]) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)

        changes = TaskUpdate.model_validate(dict(updates)).changes()
        updated = task.model_copy(update={**changes, "updated_at": datetime.utcnow()})
        self._tasks[task_id] = updated
        return updated

    async def delete_task(self, task_id: str) -> None:
        if self._tasks.pop(task_id, None) is None:
            raise TaskNotFoundError(task_id)

    @property
    def backend_type(self) -> str:
        return "memory"
