"""Abstract base class for task store backends.

This module defines the interface for task persistence.
The abstraction hides:
- Storage format (SQLite rows, in-process objects)
- Persistence mechanism (file, in-memory)
- Connection management
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from .models import Task, TaskCreate


class TaskStoreError(RuntimeError):
    """A task store operation failed."""


class TaskNotFoundError(TaskStoreError):
    """No task exists with the requested id."""

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class TaskStore(ABC):
    """Abstract task store.

    Provides a unified interface for listing and mutating tasks across
    different storage backends.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store gracefully."""

    @abstractmethod
    async def list_tasks(self) -> list[Task]:
        """Return all tasks ordered by position."""

    @abstractmethod
    async def create_task(self, data: TaskCreate) -> Task:
        """Create a task.

        The new task is placed at the end of its status column, i.e. its
        position is the number of tasks already in that status.
        """

    @abstractmethod
    async def update_task(self, task_id: str, updates: Mapping[str, Any]) -> Task:
        """Apply a partial update to a task.

        Args:
            task_id: Id of the task to change
            updates: Field name to new value; validated against ``TaskUpdate``

        Returns:
            The updated task

        Raises:
            TaskNotFoundError: If no task has this id
            pydantic.ValidationError: If a field or value is not accepted
        """

    @abstractmethod
    async def delete_task(self, task_id: str) -> None:
        """Delete a task.

        Raises:
            TaskNotFoundError: If no task has this id
        """

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "TaskStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()
