"""Chat assistant module for flowboard.

Streams assistant replies from the chat backend, keeps the transcript free
of action blocks, and applies the actions once a reply completes.
"""

from .actions import parse_actions, render_action_block, strip_actions
from .buffer import ConversationBuffer
from .client import ChatBackend, ChatBackendError, ChatReply, HttpChatBackend
from .executor import ActionExecutor, find_task_by_title
from .models import (
    Action,
    ActionKind,
    ActionOutcome,
    OutcomeStatus,
    ReplyStatus,
    SessionState,
)
from .session import ChatSession
from .stream import FrameKind, StreamDecoder, StreamFrame, classify_line, iter_deltas

__all__ = [
    "Action",
    "ActionExecutor",
    "ActionKind",
    "ActionOutcome",
    "ChatBackend",
    "ChatBackendError",
    "ChatReply",
    "ChatSession",
    "ConversationBuffer",
    "FrameKind",
    "HttpChatBackend",
    "OutcomeStatus",
    "ReplyStatus",
    "SessionState",
    "StreamDecoder",
    "StreamFrame",
    "classify_line",
    "find_task_by_title",
    "iter_deltas",
    "parse_actions",
    "render_action_block",
    "strip_actions",
]
