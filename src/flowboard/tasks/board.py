"""Board service over a task store.

Keeps the current task snapshot, refetches it after every successful
mutation and turns store failures into notifications, so callers never
have to handle persistence errors themselves.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from ..notifications import Notification, NotificationLevel, NotifyCallback, ignore_notification
from .base import TaskStore, TaskStoreError
from .models import BOARD_COLUMNS, Task, TaskCreate, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

# Failures the board reports instead of raising
_STORE_FAILURES = (TaskStoreError, ValidationError, OSError)


class TaskBoard:
    """The board as the user sees it.

    Hidden design decisions:
    - Snapshot refresh policy (refetch after success, never optimistic)
    - How drops onto columns translate into status and position
    - Task context serialization for the chat assistant
    """

    def __init__(self, store: TaskStore, notify: NotifyCallback | None = None):
        """Initialize the board.

        Args:
            store: Connected task store
            notify: Callback receiving user-visible notifications
        """
        self._store = store
        self._notify = notify or ignore_notification
        self._tasks: list[Task] = []

    @property
    def store(self) -> TaskStore:
        return self._store

    @property
    def tasks(self) -> list[Task]:
        """Current snapshot, ordered by position."""
        return list(self._tasks)

    def _report_failure(self, title: str, error: Exception) -> None:
        logger.warning("%s: %s", title, error)
        self._notify(Notification(
            title=title,
            description=str(error),
            level=NotificationLevel.ERROR,
        ))

    async def refresh(self) -> list[Task]:
        """Reload the snapshot from the store."""
        try:
            self._tasks = await self._store.list_tasks()
        except _STORE_FAILURES as e:
            self._report_failure("Error loading tasks", e)
        return self.tasks

    async def add_task(
        self,
        title: str,
        description: str | None = None,
        status: TaskStatus = TaskStatus.TODO,
        priority: TaskPriority = TaskPriority.MEDIUM,
        category: str | None = None,
        due_date: Any = None,
    ) -> Task | None:
        """Create a task at the end of its column.

        Returns:
            The created task, or None if the store rejected it
        """
        try:
            data = TaskCreate(
                title=title,
                description=description,
                status=status,
                priority=priority,
                category=category,
                due_date=due_date,
            )
            task = await self._store.create_task(data)
        except _STORE_FAILURES as e:
            self._report_failure("Error adding task", e)
            return None
        await self.refresh()
        return task

    async def update_task(self, task_id: str, updates: Mapping[str, Any]) -> Task | None:
        """Apply a partial update.

        Returns:
            The updated task, or None on failure
        """
        try:
            task = await self._store.update_task(task_id, updates)
        except _STORE_FAILURES as e:
            self._report_failure("Error updating task", e)
            return None
        await self.refresh()
        return task

    async def delete_task(self, task_id: str) -> bool:
        """Delete a task. Returns True if it was deleted."""
        try:
            await self._store.delete_task(task_id)
        except _STORE_FAILURES as e:
            self._report_failure("Error deleting task", e)
            return False
        await self.refresh()
        return True

    async def move_task(self, task_id: str, status: TaskStatus | str) -> Task | None:
        """Handle a card dropped onto a column.

        Only board columns are drop targets. Dropping a card onto the
        column it is already in, or dropping an unknown card, does nothing.
        The card goes to the bottom of the target column.

        Returns:
            The moved task, or None if nothing was moved
        """
        try:
            target = TaskStatus(status)
        except ValueError:
            logger.debug("Ignoring drop onto unknown column %r", status)
            return None
        if target not in BOARD_COLUMNS:
            logger.debug("Ignoring drop onto non-column status %s", target.value)
            return None

        task = self.get_task(task_id)
        if task is None or task.status == target:
            return None

        position = len(self.column(target))
        return await self.update_task(task_id, {"status": target, "position": position})

    def get_task(self, task_id: str) -> Task | None:
        """Find a task in the snapshot by id."""
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def column(self, status: TaskStatus) -> list[Task]:
        """Tasks in one status, in position order."""
        return [task for task in self._tasks if task.status == status]

    def filter_tasks(
        self,
        search: str = "",
        priority: TaskPriority | None = None
    ) -> list[Task]:
        """Filter the snapshot the way the board's search bar does.

        Args:
            search: Case-insensitive substring of the title or category
            priority: Only keep tasks with this priority

        Returns:
            Matching tasks in position order
        """
        result = self._tasks
        if search:
            needle = search.lower()
            result = [
                task for task in result
                if needle in task.title.lower()
                or (task.category is not None and needle in task.category.lower())
            ]
        if priority is not None:
            result = [task for task in result if task.priority == priority]
        return list(result)

    def task_context(self) -> str:
        """Serialize the snapshot as chat context, one line per task."""
        return "\n".join(task.to_context_line() for task in self._tasks)
