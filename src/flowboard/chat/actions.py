"""Action block parsing.

The assistant requests board changes by embedding fenced blocks tagged
``action`` whose body is a JSON record:

    ```action
    {"type": "edit_task", "task_title": "Write report", "updates": {"status": "done"}}
    ```

Blocks are machine instructions: they are executed after the reply
completes and never shown in the transcript.
"""

import json
import logging
import re
from collections.abc import Callable, Mapping
from typing import Any

from ..config import ACTION_FENCE_TAG
from .models import Action, ActionKind

logger = logging.getLogger(__name__)

FENCE = "```"

# A complete block: opening fence + tag, body, closing fence
ACTION_BLOCK_RE = re.compile(
    rf"{FENCE}{ACTION_FENCE_TAG}\b(.*?){FENCE}",
    re.DOTALL,
)

# An opened block whose closing fence has not streamed in yet
PENDING_ACTION_BLOCK_RE = re.compile(
    rf"{FENCE}{ACTION_FENCE_TAG}\b.*\Z",
    re.DOTALL,
)

TitleExtractor = Callable[[Mapping[str, Any]], str | None]


def _field(name: str) -> TitleExtractor:
    def extract(record: Mapping[str, Any]) -> str | None:
        value = record.get(name)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    extract.__name__ = f"extract_{name}"
    return extract


# Keys the assistant uses for the target title, highest priority first
TITLE_EXTRACTORS: tuple[TitleExtractor, ...] = (
    _field("task_title"),
    _field("title"),
    _field("name"),
    _field("task_name"),
)


def resolve_title(record: Mapping[str, Any]) -> str | None:
    """Return the first non-empty title alias in priority order."""
    for extractor in TITLE_EXTRACTORS:
        title = extractor(record)
        if title is not None:
            return title
    return None


def record_to_action(record: Any) -> Action | None:
    """Validate a decoded action record.

    Returns:
        The action, or None if the record has an unknown type or no title
    """
    if not isinstance(record, dict):
        return None
    try:
        kind = ActionKind(record.get("type"))
    except ValueError:
        return None

    title = resolve_title(record)
    if title is None:
        return None

    updates = record.get("updates")
    if not isinstance(updates, dict):
        updates = {}
    return Action(kind=kind, target_title=title, updates=updates)


def parse_actions(text: str) -> list[Action]:
    """Extract actions from assistant text, in the order they appear.

    Blocks whose body is not valid JSON, or whose record is not a
    recognized action, are skipped.
    """
    actions: list[Action] = []
    for match in ACTION_BLOCK_RE.finditer(text):
        body = match.group(1).strip()
        try:
            record = json.loads(body)
        except json.JSONDecodeError:
            logger.debug("Dropping malformed action block: %r", body[:200])
            continue
        action = record_to_action(record)
        if action is None:
            logger.debug("Dropping unrecognized action record: %r", record)
            continue
        actions.append(action)
    return actions


def strip_actions(text: str) -> str:
    """Remove all action blocks, including one still being streamed."""
    text = ACTION_BLOCK_RE.sub("", text)
    text = PENDING_ACTION_BLOCK_RE.sub("", text)
    return text.strip()


def render_action_block(action: Action) -> str:
    """Serialize an action as a fenced block the parser reads back."""
    return f"{FENCE}{ACTION_FENCE_TAG}\n{json.dumps(action.to_record())}\n{FENCE}"


def hold_partial_fence(text: str) -> str:
    """Drop a trailing fragment that may still grow into an action fence.

    While a reply streams, text ending in a backtick or a partial opener
    such as ``"```ac"`` cannot be shown yet: the next delta decides whether
    it starts an action block.
    """
    opener = FENCE + ACTION_FENCE_TAG
    for size in range(min(len(opener), len(text)), 0, -1):
        if text.endswith(opener[:size]):
            return text[:-size].rstrip()
    return text
