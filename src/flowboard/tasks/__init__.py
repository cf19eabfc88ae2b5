"""Task persistence and board module for flowboard.

The chat core only reads task snapshots and requests changes through
``TaskStore``; it never creates task identity itself.
"""

from .base import TaskNotFoundError, TaskStore, TaskStoreError
from .board import TaskBoard
from .factory import create_task_store
from .models import BOARD_COLUMNS, Task, TaskCreate, TaskPriority, TaskStatus, TaskUpdate

__all__ = [
    "BOARD_COLUMNS",
    "Task",
    "TaskBoard",
    "TaskCreate",
    "TaskNotFoundError",
    "TaskPriority",
    "TaskStatus",
    "TaskStore",
    "TaskStoreError",
    "TaskUpdate",
    "create_task_store",
]
