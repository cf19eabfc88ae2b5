"""Provider factory functions for CLI.

Centralizes creation of the task store, LLM provider and chat backend from
environment variables. Hides configuration details from command
implementations.
"""

import os

from rich.console import Console

from ..chat import ChatBackend, HttpChatBackend
from ..config import DEFAULT_CHAT_URL, DEFAULT_DB_PATH, DEFAULT_TASK_STORE
from ..llm import LLMProvider, create_llm_provider
from ..tasks import TaskStore, create_task_store

# Default console for output
_console = Console()


def get_task_store() -> TaskStore:
    """Create task store from environment variables.

    Returns:
        Task store instance (not yet connected)

    Environment variables:
        FLOWBOARD_STORE: Backend type (memory, sqlite; default: sqlite)
        FLOWBOARD_DB_PATH: SQLite database file (default: ./flowboard.db)
    """
    backend = os.getenv("FLOWBOARD_STORE", DEFAULT_TASK_STORE).lower()
    if backend == "sqlite":
        return create_task_store("sqlite", path=os.getenv("FLOWBOARD_DB_PATH", DEFAULT_DB_PATH))
    return create_task_store(backend)


def get_llm(console: Console | None = None) -> LLMProvider | None:
    """Create LLM provider from environment variables.

    Args:
        console: Optional Rich console for output

    Returns:
        LLM provider instance, or None if not configured

    Environment variables:
        LLM_PROVIDER: Provider type (openai, deepseek; default: deepseek)
        OPENAI_API_KEY: OpenAI API key (for openai provider)
        OPENAI_CHAT_MODEL: OpenAI model (default: gpt-4o-mini)
        OPENAI_BASE_URL: Optional Chat Completions compatible gateway
        DEEPSEEK_API_KEY: DeepSeek API key (for deepseek provider)
    """
    con = console or _console
    llm_provider = os.getenv("LLM_PROVIDER", "deepseek").lower()

    if llm_provider == "openai":
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            con.print("[yellow]Warning: OPENAI_API_KEY not set, chat gateway disabled[/yellow]")
            return None
        model = os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini")
        base_url = os.getenv("OPENAI_BASE_URL") or None
        return create_llm_provider("openai", api_key=api_key, model=model, base_url=base_url)

    elif llm_provider == "deepseek":
        api_key = os.getenv("DEEPSEEK_API_KEY")
        if not api_key:
            con.print("[yellow]Warning: DEEPSEEK_API_KEY not set, chat gateway disabled[/yellow]")
            return None
        return create_llm_provider("deepseek", api_key=api_key)

    else:
        con.print(f"[red]Error: Unknown LLM provider: {llm_provider}[/red]")
        return None


def get_chat_backend(url: str | None = None) -> ChatBackend:
    """Create the chat backend client.

    Args:
        url: Chat endpoint; overrides FLOWBOARD_CHAT_URL

    Environment variables:
        FLOWBOARD_CHAT_URL: Chat gateway endpoint (default: http://127.0.0.1:8000/chat)
        FLOWBOARD_API_KEY: Optional bearer token sent with each request
    """
    return HttpChatBackend(
        url or os.getenv("FLOWBOARD_CHAT_URL", DEFAULT_CHAT_URL),
        api_key=os.getenv("FLOWBOARD_API_KEY") or None,
    )
