"""
FlowBoard: a Kanban task board with a streaming chat assistant.

The assistant reads the board as plain-text context and edits it by
embedding fenced ``action`` blocks in its replies. Each package hides one
design decision: ``tasks`` hides persistence, ``llm`` hides the model
provider, ``chat`` hides the wire protocol and action handling.
"""

__version__ = "0.1.0"

from .notifications import Notification, NotificationLevel
from .tasks import (
    Task,
    TaskBoard,
    TaskPriority,
    TaskStatus,
    TaskStore,
    create_task_store,
)

__all__ = [
    "Notification",
    "NotificationLevel",
    "Task",
    "TaskBoard",
    "TaskPriority",
    "TaskStatus",
    "TaskStore",
    "create_task_store",
]
