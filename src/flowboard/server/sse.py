"""Event-stream framing for chat completion deltas.

Produces the exact frames ``flowboard.chat.stream`` consumes.
"""

import json

from ..config import STREAM_DATA_PREFIX, STREAM_DONE_SENTINEL

DONE_EVENT = f"{STREAM_DATA_PREFIX}{STREAM_DONE_SENTINEL}\n\n"


def encode_delta(content: str) -> str:
    """Wrap a text delta as one ``data:`` event."""
    payload = {"choices": [{"index": 0, "delta": {"content": content}}]}
    return f"{STREAM_DATA_PREFIX}{json.dumps(payload, ensure_ascii=False)}\n\n"
