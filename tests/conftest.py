"""Pytest configuration and shared fixtures."""
import asyncio
import os
from collections.abc import Mapping, Sequence
from contextlib import asynccontextmanager
from typing import Any

import pytest

from flowboard.chat import ChatBackend, ChatReply, ReplyStatus
from flowboard.llm import ChatMessage
from flowboard.notifications import Notification
from flowboard.server.sse import DONE_EVENT, encode_delta
from flowboard.tasks import Task, TaskBoard, TaskPriority, TaskStatus, TaskStoreError
from flowboard.tasks.in_memory import InMemoryTaskStore


def sse_body(*deltas: str, done: bool = True) -> bytes:
    """Encode deltas the way the chat gateway streams them."""
    body = "".join(encode_delta(delta) for delta in deltas)
    if done:
        body += DONE_EVENT
    return body.encode("utf-8")


class RecordingTaskStore(InMemoryTaskStore):
    """In-memory store that records mutations and can be told to fail."""

    def __init__(self, tasks=None, fail_ids: Sequence[str] = ()):
        super().__init__(tasks)
        self.fail_ids = set(fail_ids)
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self.deletes: list[str] = []

    async def update_task(self, task_id: str, updates: Mapping[str, Any]) -> Task:
        self.updates.append((task_id, dict(updates)))
        if task_id in self.fail_ids:
            raise TaskStoreError("disk full")
        return await super().update_task(task_id, updates)

    async def delete_task(self, task_id: str) -> None:
        self.deletes.append(task_id)
        if task_id in self.fail_ids:
            raise TaskStoreError("disk full")
        await super().delete_task(task_id)


class FakeChatBackend(ChatBackend):
    """Chat backend answering from canned chunks.

    A chunk that is an exception instance is raised instead of yielded,
    which simulates a connection dropping mid-stream. When ``hold`` is set,
    the body pauses after its first chunk until the event is set.
    """

    def __init__(
        self,
        chunks: Sequence[bytes | Exception] = (),
        status: ReplyStatus = ReplyStatus.STREAMING,
        open_error: Exception | None = None,
        hold: asyncio.Event | None = None,
    ):
        self.chunks = list(chunks)
        self.status = status
        self.open_error = open_error
        self.hold = hold
        self.requests: list[tuple[list[ChatMessage], str]] = []

    @asynccontextmanager
    async def open_stream(self, messages, task_context):
        self.requests.append((list(messages), task_context))
        if self.open_error is not None:
            raise self.open_error
        if self.status is not ReplyStatus.STREAMING:
            yield ChatReply(status=self.status)
            return
        yield ChatReply.streaming(self._body())

    async def _body(self):
        for index, chunk in enumerate(self.chunks):
            if index == 1 and self.hold is not None:
                await self.hold.wait()
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "openai": os.getenv("OPENAI_API_KEY"),
        "deepseek": os.getenv("DEEPSEEK_API_KEY")
    }


@pytest.fixture
def sample_tasks():
    """Return a small board: two todo cards and one in progress."""
    return [
        Task(
            id="1",
            title="Write report",
            status=TaskStatus.TODO,
            priority=TaskPriority.HIGH,
            category="Work",
            position=0,
        ),
        Task(
            id="2",
            title="Review PR",
            status=TaskStatus.IN_PROGRESS,
            priority=TaskPriority.MEDIUM,
            position=0,
        ),
        Task(
            id="3",
            title="Buy groceries",
            status=TaskStatus.TODO,
            priority=TaskPriority.LOW,
            category="Personal",
            position=1,
        ),
    ]


@pytest.fixture
def store(sample_tasks):
    """Return a recording in-memory store seeded with the sample tasks."""
    return RecordingTaskStore(sample_tasks)


@pytest.fixture
def notifications():
    """Return a list that collects notifications."""
    received: list[Notification] = []
    return received


@pytest.fixture
def board(store, notifications):
    """Return a board over the sample store (call ``refresh`` before use)."""
    return TaskBoard(store, notify=notifications.append)
