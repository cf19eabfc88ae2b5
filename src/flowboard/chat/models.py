"""Data structures for the chat module."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ActionKind(str, Enum):
    """Board mutations the assistant can request."""

    EDIT_TASK = "edit_task"
    DELETE_TASK = "delete_task"


class Action(BaseModel):
    """A board mutation parsed out of assistant text.

    Attributes:
        kind: What to do with the target task
        target_title: Title of the task to act on, as written by the assistant
        updates: Field name to new value (edit only)
    """

    model_config = ConfigDict(frozen=True)

    kind: ActionKind
    target_title: str = Field(min_length=1)
    updates: dict[str, Any] = Field(default_factory=dict)

    def to_record(self) -> dict[str, Any]:
        """Serialize back to the record shape used inside action blocks."""
        record: dict[str, Any] = {"type": self.kind.value, "task_title": self.target_title}
        if self.updates:
            record["updates"] = dict(self.updates)
        return record


class OutcomeStatus(str, Enum):
    """How an action ended."""

    APPLIED = "applied"
    NOT_FOUND = "not_found"
    SKIPPED = "skipped"
    FAILED = "failed"


class ActionOutcome(BaseModel):
    """Result of executing one action."""

    action: Action
    status: OutcomeStatus
    task_id: str | None = None
    error: str | None = None


class SessionState(str, Enum):
    """Lifecycle of one chat request/response cycle."""

    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    FINALIZING = "finalizing"


class ReplyStatus(str, Enum):
    """What the chat backend answered with."""

    STREAMING = "streaming"
    RATE_LIMITED = "rate_limited"
    QUOTA_EXHAUSTED = "quota_exhausted"
