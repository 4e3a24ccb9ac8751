"""ssage: incremental keyword ranking for conversations."""

from __future__ import annotations

from .config import Configuration, Settings
from .engine import KeywordEngine
from .store import KeywordStore
from .weight import MAX_THRESHOLD, MIN_THRESHOLD, Weight

__all__ = [
    "Configuration",
    "Settings",
    "KeywordEngine",
    "KeywordStore",
    "Weight",
    "MIN_THRESHOLD",
    "MAX_THRESHOLD",
    "ConversationRegistry",
    "create_app",
]


def __getattr__(name: str):  # pragma: no cover - small helper
    if name == "ConversationRegistry":
        from .sessions import ConversationRegistry

        return ConversationRegistry
    if name == "create_app":
        from .app import create_app

        return create_app
    raise AttributeError(f"module 'ssage' has no attribute {name}")
