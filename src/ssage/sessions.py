"""Per-conversation engine registry with serialized access."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import TYPE_CHECKING, List, Tuple

from .config import Configuration
from .engine import KeywordEngine
from .weight import Weight

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from .observability import MetricsRecorder

logger = logging.getLogger(__name__)


class ConversationNotFoundError(KeyError):
    """Raised when a conversation id has no engine."""


class ConversationRegistry:
    """Hand out one :class:`KeywordEngine` per conversation id.

    Engines are created lazily by ``feed``. Once ``max_conversations`` is
    exceeded the least recently used conversation is dropped.
    """

    def __init__(
        self,
        configuration: Configuration | None = None,
        *,
        max_conversations: int = 1024,
        metrics: "MetricsRecorder" | None = None,
    ) -> None:
        if max_conversations < 1:
            raise ValueError("max_conversations must be at least 1")
        self._configuration = configuration or Configuration()
        self._max_conversations = max_conversations
        self._metrics = metrics
        self._engines: OrderedDict[str, KeywordEngine] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._engines)

    def __contains__(self, conversation_id: object) -> bool:
        with self._lock:
            return conversation_id in self._engines

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    def conversation_ids(self) -> List[str]:
        with self._lock:
            return list(self._engines)

    def feed(self, conversation_id: str, message: str) -> str:
        with self._lock:
            engine = self._engines.get(conversation_id)
            if engine is None:
                engine = self._create_engine(conversation_id)
            else:
                self._engines.move_to_end(conversation_id)
            return engine.feed(message)

    def summary(self, conversation_id: str) -> str:
        with self._lock:
            return self._require(conversation_id).feed_empty()

    def ranked_summary(self, conversation_id: str) -> List[Tuple[str, Weight]]:
        with self._lock:
            return self._require(conversation_id).summary()

    def keywords(self, conversation_id: str) -> List[Tuple[str, Weight]]:
        with self._lock:
            return self._require(conversation_id).keywords()

    def weight_of(self, conversation_id: str, keyword: str) -> Weight | None:
        with self._lock:
            return self._require(conversation_id).weight_of(keyword)

    def prioritize(self, conversation_id: str, keyword: str) -> bool:
        with self._lock:
            return self._require(conversation_id).prioritize_keyword(keyword)

    def trivialize(self, conversation_id: str, keyword: str) -> bool:
        with self._lock:
            return self._require(conversation_id).trivialize_keyword(keyword)

    def adjust_keyword(self, conversation_id: str, keyword: str, *, raise_weight: bool) -> Weight | None:
        """Prioritize or trivialize ``keyword`` and return its new weight.

        Returns ``None`` when the conversation has never seen the keyword.
        """

        with self._lock:
            engine = self._require(conversation_id)
            if raise_weight:
                changed = engine.prioritize_keyword(keyword)
            else:
                changed = engine.trivialize_keyword(keyword)
            return engine.weight_of(keyword) if changed else None

    def reset(self, conversation_id: str) -> bool:
        """Forget a conversation. Returns ``False`` if it was never fed."""

        with self._lock:
            removed = self._engines.pop(conversation_id, None) is not None
        if removed:
            logger.info("conversation.reset conversation=%s", conversation_id)
            if self._metrics:
                self._metrics.increment("registry.resets")
        return removed

    def _require(self, conversation_id: str) -> KeywordEngine:
        engine = self._engines.get(conversation_id)
        if engine is None:
            raise ConversationNotFoundError(conversation_id)
        self._engines.move_to_end(conversation_id)
        return engine

    def _create_engine(self, conversation_id: str) -> KeywordEngine:
        engine = KeywordEngine(self._configuration, metrics=self._metrics, conversation_id=conversation_id)
        self._engines[conversation_id] = engine
        logger.info("conversation.created conversation=%s", conversation_id)
        while len(self._engines) > self._max_conversations:
            evicted, _ = self._engines.popitem(last=False)
            logger.info("conversation.evicted conversation=%s", evicted)
            if self._metrics:
                self._metrics.increment("registry.evictions")
        if self._metrics:
            self._metrics.set_gauge("registry.conversations", len(self._engines))
        return engine


__all__ = ["ConversationNotFoundError", "ConversationRegistry"]
