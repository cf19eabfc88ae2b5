"""Data models for board tasks.

These models define the structure of a task and of the inputs that create
or modify one, independent of the storage backend used.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TaskStatus(str, Enum):
    """Workflow status of a task."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    """Priority of a task."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Statuses that have a column on the board (valid drop targets)
BOARD_COLUMNS: tuple[TaskStatus, ...] = (
    TaskStatus.TODO,
    TaskStatus.IN_PROGRESS,
    TaskStatus.DONE,
)


class Task(BaseModel):
    """A card on the board."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str = Field(min_length=1, description="Task title shown on the card")
    description: str | None = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    category: str | None = None
    due_date: date | None = None
    position: int = Field(default=0, ge=0, description="Order within the status column")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def to_context_line(self) -> str:
        """Summarize the task as one line of chat context.

        Example: ``[todo] Write report (high priority, Work)``
        """
        details = f"{self.priority.value} priority"
        if self.category:
            details += f", {self.category}"
        return f"[{self.status.value}] {self.title} ({details})"


class TaskCreate(BaseModel):
    """Fields accepted when creating a task."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1)
    description: str | None = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    category: str | None = None
    due_date: date | None = None


class TaskUpdate(BaseModel):
    """Partial set of fields to change on an existing task.

    Only fields explicitly present in the input are applied.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    category: str | None = None
    due_date: date | None = None
    position: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def reject_null_required(self) -> "TaskUpdate":
        """Fields a task cannot be without may be omitted but not nulled."""
        for name in ("title", "status", "priority", "position"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller set."""
        return self.model_dump(exclude_unset=True)
