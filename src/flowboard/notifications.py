"""User-visible notifications.

Board and chat operations never raise into the caller for expected
failures; they report through a notification callback instead.
"""

from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class NotificationLevel(str, Enum):
    """Severity of a notification."""

    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class Notification(BaseModel):
    """A short message surfaced to the user."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(description="Headline, e.g. 'Task updated'")
    description: str = Field(default="", description="Detail line")
    level: NotificationLevel = NotificationLevel.INFO

    def __str__(self) -> str:
        if self.description:
            return f"{self.title}: {self.description}"
        return self.title


NotifyCallback = Callable[[Notification], None]


def ignore_notification(notification: Notification) -> None:
    """Default callback that drops notifications."""
