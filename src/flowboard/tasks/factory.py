"""Factory for creating task store backends."""

from typing import Any

from .base import TaskStore


def create_task_store(
    backend: str = "memory",
    **kwargs: Any
) -> TaskStore:
    """Create a task store backend.

    Args:
        backend: Backend type ("memory" or "sqlite")
        **kwargs: Backend-specific configuration
            For sqlite:
                - path: str | Path (default: ./flowboard.db)
            For memory:
                - tasks: Iterable[Task] to seed the board with

    Returns:
        TaskStore instance (not yet connected)

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "memory":
        from .in_memory import InMemoryTaskStore
        return InMemoryTaskStore(**kwargs)

    elif backend == "sqlite":
        from .sqlite import SQLiteTaskStore
        return SQLiteTaskStore(**kwargs)

    raise ValueError(
        f"Unsupported task store backend: {backend}. "
        f"Supported backends: memory, sqlite"
    )
