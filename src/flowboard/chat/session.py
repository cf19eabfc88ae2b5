"""Chat session controller.

Drives one request/response cycle at a time:

    idle -> sending -> streaming -> finalizing -> idle

Rate-limit and quota replies skip straight from sending to finalizing.
Any failure appends a fixed apology to the transcript and returns to idle.
"""

import logging
from collections.abc import Callable

from ..config import (
    CONNECTION_FALLBACK_MESSAGE,
    QUOTA_EXHAUSTED_MESSAGE,
    RATE_LIMITED_MESSAGE,
)
from ..llm.models import ChatMessage
from ..notifications import NotifyCallback
from ..tasks import TaskBoard
from .actions import parse_actions
from .buffer import ConversationBuffer
from .client import ChatBackend
from .executor import ActionExecutor
from .models import ActionOutcome, OutcomeStatus, ReplyStatus, SessionState
from .stream import iter_deltas

logger = logging.getLogger(__name__)

_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.IDLE: frozenset({SessionState.SENDING}),
    SessionState.SENDING: frozenset({SessionState.STREAMING, SessionState.FINALIZING, SessionState.IDLE}),
    SessionState.STREAMING: frozenset({SessionState.FINALIZING, SessionState.IDLE}),
    SessionState.FINALIZING: frozenset({SessionState.IDLE}),
}

_CANNED_REPLIES = {
    ReplyStatus.RATE_LIMITED: RATE_LIMITED_MESSAGE,
    ReplyStatus.QUOTA_EXHAUSTED: QUOTA_EXHAUSTED_MESSAGE,
}


class ChatSession:
    """One chat panel's conversation with the assistant.

    Hidden design decisions:
    - Re-entrancy guard (one request in flight)
    - When actions are extracted and executed
    - How failures degrade into transcript messages
    """

    def __init__(
        self,
        backend: ChatBackend,
        board: TaskBoard,
        notify: NotifyCallback | None = None,
        on_update: Callable[[ChatMessage], None] | None = None,
        on_state_change: Callable[[SessionState], None] | None = None,
    ):
        """Initialize the session.

        Args:
            backend: Chat backend to send requests to
            board: Board supplying task context and receiving actions
            notify: Callback for action notifications
            on_update: Called with the assistant message after every delta
            on_state_change: Called with each new state
        """
        self._backend = backend
        self._board = board
        self._buffer = ConversationBuffer(on_update=on_update)
        self._executor = ActionExecutor(board.store, notify)
        self._on_state_change = on_state_change
        self._state = SessionState.IDLE
        self._last_outcomes: list[ActionOutcome] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def busy(self) -> bool:
        """True while a request is in flight."""
        return self._state is not SessionState.IDLE

    @property
    def messages(self) -> list[ChatMessage]:
        return self._buffer.messages

    @property
    def buffer(self) -> ConversationBuffer:
        return self._buffer

    @property
    def last_outcomes(self) -> list[ActionOutcome]:
        """Outcomes of the actions run at the end of the latest reply."""
        return list(self._last_outcomes)

    def _transition(self, new_state: SessionState) -> None:
        if new_state not in _TRANSITIONS[self._state]:
            raise RuntimeError(
                f"Invalid chat session transition: {self._state.value} -> {new_state.value}"
            )
        logger.debug("Session %s -> %s", self._state.value, new_state.value)
        self._state = new_state
        if self._on_state_change is not None:
            self._on_state_change(new_state)

    async def submit(self, text: str) -> bool:
        """Send a user message and process the assistant's reply.

        Returns:
            False if the input was blank or a request is already in flight
            (nothing is sent or recorded), True otherwise
        """
        if not text.strip() or self.busy:
            return False

        self._transition(SessionState.SENDING)
        self._last_outcomes = []
        self._buffer.append_user(text)
        try:
            async with self._backend.open_stream(
                self._buffer.messages, self._board.task_context()
            ) as reply:
                canned = _CANNED_REPLIES.get(reply.status)
                if canned is not None:
                    logger.warning("Chat backend answered %s", reply.status.value)
                    self._transition(SessionState.FINALIZING)
                    self._buffer.append_notice(canned)
                    return True

                self._transition(SessionState.STREAMING)
                async for delta in iter_deltas(reply.body):
                    self._buffer.apply_delta(delta)

            self._transition(SessionState.FINALIZING)
            await self._finalize()
        except Exception:
            logger.exception("Chat request failed")
            self._buffer.append_notice(CONNECTION_FALLBACK_MESSAGE)
        finally:
            self._transition(SessionState.IDLE)
        return True

    async def _finalize(self) -> None:
        """Show the completed reply, then run the actions embedded in it."""
        self._buffer.finish()
        actions = parse_actions(self._buffer.raw_text)
        if not actions:
            return

        self._last_outcomes = await self._executor.execute(actions, self._board.tasks)
        if any(outcome.status is OutcomeStatus.APPLIED for outcome in self._last_outcomes):
            await self._board.refresh()
