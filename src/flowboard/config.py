"""Configuration constants.

Centralizes wire-protocol markers and user-facing canned messages.
Environment-driven settings are read in ``flowboard.cli.providers``.
"""

# Event-stream wire format
STREAM_DATA_PREFIX = "data: "
STREAM_DONE_SENTINEL = "[DONE]"
STREAM_ENCODING = "utf-8"

# Fence tag marking assistant command blocks
ACTION_FENCE_TAG = "action"

# Canned assistant replies
CONNECTION_FALLBACK_MESSAGE = "Sorry, I couldn't connect. Please try again."
RATE_LIMITED_MESSAGE = "Rate limited. Please wait a moment and try again."
QUOTA_EXHAUSTED_MESSAGE = "AI credits depleted. Please add funds to continue."

# HTTP statuses the chat backend uses for its error envelopes
HTTP_STATUS_RATE_LIMITED = 429
HTTP_STATUS_PAYMENT_REQUIRED = 402

# Chat backend defaults
DEFAULT_CHAT_URL = "http://127.0.0.1:8000/chat"
DEFAULT_SERVER_HOST = "127.0.0.1"
DEFAULT_SERVER_PORT = 8000

# Task store defaults
DEFAULT_TASK_STORE = "sqlite"
DEFAULT_DB_PATH = "./flowboard.db"

# Log output
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
