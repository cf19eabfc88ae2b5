"""Prompt management module.

Externalizes prompts to text files for easy customization.
Prompts can be overridden by placing files in the working directory.
"""

from functools import lru_cache
from pathlib import Path
from string import Template

# Default prompts directory (package location)
_PROMPTS_DIR = Path(__file__).parent

NO_TASKS_SECTION = "The user has no tasks yet."


@lru_cache(maxsize=16)
def load_prompt(name: str) -> str:
    """Load a prompt from file.

    Search order:
    1. Current working directory: ./prompts/{name}.txt
    2. Package prompts directory: flowboard/prompts/{name}.txt

    Args:
        name: Prompt name (without .txt extension)

    Returns:
        Prompt text content

    Raises:
        FileNotFoundError: If prompt file not found in any location
    """
    filename = f"{name}.txt"

    # Check working directory first (allows user overrides)
    local_path = Path.cwd() / "prompts" / filename
    if local_path.exists():
        return local_path.read_text(encoding="utf-8")

    package_path = _PROMPTS_DIR / filename
    if package_path.exists():
        return package_path.read_text(encoding="utf-8")

    raise FileNotFoundError(
        f"Prompt '{name}' not found. Searched:\n"
        f"  - {local_path}\n"
        f"  - {package_path}"
    )


def build_system_prompt(task_context: str = "") -> str:
    """Render the chat assistant system prompt for a board.

    Args:
        task_context: One line per task, as produced by ``TaskBoard.task_context``

    Returns:
        System prompt with the task list (or a no-tasks note) filled in
    """
    if task_context.strip():
        task_section = f"Here are the user's current tasks:\n{task_context}\n"
    else:
        task_section = NO_TASKS_SECTION
    # $-placeholders keep the JSON braces in the prompt literal
    return Template(load_prompt("chat_assistant")).safe_substitute(
        task_section=task_section
    )


def clear_cache() -> None:
    """Clear the prompt cache (useful after modifying prompt files)."""
    load_prompt.cache_clear()


__all__ = [
    "NO_TASKS_SECTION",
    "load_prompt",
    "build_system_prompt",
    "clear_cache",
]
