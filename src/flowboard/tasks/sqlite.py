"""SQLite task store backend.

Provides persistent task storage in a single SQLite database file.
Uses aiosqlite for async access.
"""

from collections.abc import Mapping
from datetime import date, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from ..config import DEFAULT_DB_PATH
from .base import TaskNotFoundError, TaskStore, TaskStoreError
from .models import Task, TaskCreate, TaskPriority, TaskStatus, TaskUpdate

_COLUMNS = (
    "id, title, description, status, priority, category, "
    "due_date, position, created_at, updated_at"
)


def _row_to_task(row: aiosqlite.Row | tuple) -> Task:
    (
        task_id, title, description, status, priority, category,
        due_date, position, created_at, updated_at,
    ) = row
    return Task(
        id=task_id,
        title=title,
        description=description,
        status=TaskStatus(status),
        priority=TaskPriority(priority),
        category=category,
        due_date=date.fromisoformat(due_date) if due_date else None,
        position=position,
        created_at=datetime.fromisoformat(created_at),
        updated_at=datetime.fromisoformat(updated_at),
    )


def _to_column(value: Any) -> Any:
    """Convert a model value into something SQLite can bind."""
    if isinstance(value, (TaskStatus, TaskPriority)):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class SQLiteTaskStore(TaskStore):
    """SQLite-backed task store.

    Stores tasks in a SQLite database file so the board survives restarts.
    """

    def __init__(self, path: str | Path = DEFAULT_DB_PATH):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the database and create the schema if needed."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._create_schema()

    async def _create_schema(self) -> None:
        await self._db.execute("""
            CREATE TABLE IF NOT EXISTS tasks (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                description TEXT,
                status TEXT NOT NULL DEFAULT 'todo',
                priority TEXT NOT NULL DEFAULT 'medium',
                category TEXT,
                due_date TEXT,
                position INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        await self._db.execute("""
            CREATE INDEX IF NOT EXISTS idx_tasks_status_position
            ON tasks(status, position)
        """)

        await self._db.commit()

    @property
    def _db(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise TaskStoreError("SQLite task store is not connected")
        return self._connection

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def list_tasks(self) -> list[Task]:
        # rowid breaks position ties in insertion order
        async with self._db.execute(
            f"SELECT {_COLUMNS} FROM tasks ORDER BY position ASC, rowid ASC"
        ) as cursor:
            rows = await cursor.fetchall()
        return [_row_to_task(row) for row in rows]

    async def _get_task(self, task_id: str) -> Task:
        async with self._db.execute(
            f"SELECT {_COLUMNS} FROM tasks WHERE id = ?",
            (task_id,)
        ) as cursor:
            row = await cursor.fetchone()
        if row is None:
            raise TaskNotFoundError(task_id)
        return _row_to_task(row)

    async def create_task(self, data: TaskCreate) -> Task:
        async with self._db.execute(
            "SELECT COUNT(*) FROM tasks WHERE status = ?",
            (data.status.value,)
        ) as cursor:
            row = await cursor.fetchone()
            position = row[0]

        task = Task(**data.model_dump(), position=position)

        await self._db.execute(f"""
            INSERT INTO tasks ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            task.id,
            task.title,
            task.description,
            task.status.value,
            task.priority.value,
            task.category,
            _to_column(task.due_date),
            task.position,
            task.created_at.isoformat(),
            task.updated_at.isoformat(),
        ))
        await self._db.commit()
        return task

    async def update_task(self, task_id: str, updates: Mapping[str, Any]) -> Task:
        changes = TaskUpdate.model_validate(dict(updates)).changes()
        await self._get_task(task_id)

        changes["updated_at"] = datetime.utcnow()
        # Column names come from TaskUpdate's fixed field set, never from input
        assignments = ", ".join(f"{name} = ?" for name in changes)
        await self._db.execute(
            f"UPDATE tasks SET {assignments} WHERE id = ?",
            (*(_to_column(value) for value in changes.values()), task_id)
        )
        await self._db.commit()
        return await self._get_task(task_id)

    async def delete_task(self, task_id: str) -> None:
        cursor = await self._db.execute(
            "DELETE FROM tasks WHERE id = ?",
            (task_id,)
        )
        await self._db.commit()
        if cursor.rowcount == 0:
            raise TaskNotFoundError(task_id)

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
