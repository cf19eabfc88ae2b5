"""Chat gateway server for flowboard."""

from .app import ChatRequest, create_app

__all__ = ["ChatRequest", "create_app"]
