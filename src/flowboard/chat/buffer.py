"""Conversation buffer for an in-flight assistant reply."""

from collections.abc import Callable

from ..llm.models import ChatMessage
from .actions import hold_partial_fence, strip_actions

USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"


class ConversationBuffer:
    """Message list plus the raw text of the reply being streamed.

    The raw accumulator is the single source of truth for the reply; the
    transcript only ever holds its display copy, with action blocks
    stripped out. While streaming, a trailing fragment that could still
    open an action block is held back until ``finish`` shows the reply
    as received.
    """

    def __init__(
        self,
        messages: list[ChatMessage] | None = None,
        on_update: Callable[[ChatMessage], None] | None = None
    ):
        """Initialize the buffer.

        Args:
            messages: Existing transcript to continue
            on_update: Called with the assistant message after every upsert
        """
        self._messages: list[ChatMessage] = list(messages or [])
        self._raw = ""
        self._shown: str | None = None
        self._on_update = on_update

    @property
    def messages(self) -> list[ChatMessage]:
        """Copy of the transcript, oldest first."""
        return list(self._messages)

    @property
    def raw_text(self) -> str:
        """Everything received for the current reply, action blocks included."""
        return self._raw

    @property
    def display_text(self) -> str:
        """The current reply with complete and pending action blocks removed."""
        return strip_actions(self._raw)

    def append_user(self, content: str) -> ChatMessage:
        """Append a user message and reset the reply accumulator."""
        message = ChatMessage(role=USER_ROLE, content=content)
        self._messages.append(message)
        self._raw = ""
        self._shown = None
        return message

    def apply_delta(self, delta: str) -> ChatMessage:
        """Append a delta to the reply and upsert its display copy.

        Returns:
            The assistant message now at the end of the transcript
        """
        self._raw += delta
        return self._upsert(hold_partial_fence(self.display_text))

    def finish(self) -> ChatMessage | None:
        """Show the completed reply, including any text held back while streaming.

        Returns:
            The updated assistant message, or None if nothing changed
        """
        shown = self.display_text
        if shown == self._shown or (self._shown is None and not shown):
            return None
        return self._upsert(shown)

    def append_notice(self, text: str) -> ChatMessage:
        """End the reply with a fixed notice after whatever was shown so far.

        A half-streamed action block is dropped so the notice stays visible.
        """
        shown = hold_partial_fence(self.display_text)
        self._raw = f"{shown}\n\n{text}" if shown else text
        return self._upsert(self._raw)

    def _upsert(self, content: str) -> ChatMessage:
        message = ChatMessage(role=ASSISTANT_ROLE, content=content)
        if self._messages and self._messages[-1].role == ASSISTANT_ROLE:
            self._messages[-1] = message
        else:
            self._messages.append(message)
        self._shown = content
        if self._on_update is not None:
            self._on_update(message)
        return message

    def clear(self) -> None:
        self._messages.clear()
        self._raw = ""
        self._shown = None

    def __len__(self) -> int:
        return len(self._messages)
