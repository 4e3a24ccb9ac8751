"""Conversation-wide keyword weighting engine."""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING, List, Tuple

from .config import Configuration
from .extract import extract_ranked, rank_keywords
from .normalize import normalize_message, split_words
from .store import KeywordStore
from .weight import WEIGHT_INCREMENT, Weight

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from .observability import MetricsRecorder

logger = logging.getLogger(__name__)


class KeywordEngine:
    """Accumulate keyword weights across the messages of one conversation.

    Each ``feed`` call ranks the words of a single message against what the
    engine has learned so far, then folds that message back into the global
    store. Instances are not thread-safe; share them through
    :class:`ssage.sessions.ConversationRegistry` when several callers need one.

    Example::

        engine = KeywordEngine()
        engine.feed("hi! this is just a sample message with distinct words.")
        engine.prioritize_keyword("message")
        engine.feed("just a message")  # -> "message just"
    """

    def __init__(
        self,
        configuration: Configuration | None = None,
        *,
        metrics: "MetricsRecorder" | None = None,
        conversation_id: str | None = None,
    ) -> None:
        self._configuration = configuration or Configuration()
        self._conversation_id = conversation_id
        self._keywords = KeywordStore()
        self._history: deque[str] = deque(maxlen=self._configuration.history_limit)
        self._metrics = metrics

    def __len__(self) -> int:
        return len(self._keywords)

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    @property
    def history(self) -> tuple[str, ...]:
        """Normalized messages in the order they were fed. Never used for ranking."""

        return tuple(self._history)

    def feed(self, message: str) -> str:
        """Rank the keywords of ``message`` and learn from it.

        Returns the message's keywords, heaviest first, separated by spaces.
        """

        normalized = normalize_message(message)
        local = self._weigh_message(split_words(normalized))

        window = len(normalized) * self._configuration.take_words_percentage // 100
        output = extract_ranked(local, self._configuration, window)

        self._keywords.merge_max(local)
        self._history.append(normalized)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "keyword.feed chars=%s words=%s window=%s known=%s output=%r",
                len(normalized),
                len(local),
                window,
                len(self._keywords),
                output,
            )
        metrics = self._metrics
        if metrics:
            metrics.increment("engine.messages")
            metrics.set_gauge("engine.keywords", len(self._keywords), conversation=self._conversation_id)
        return output

    def feed_empty(self) -> str:
        """Summarize the whole conversation without consuming a message."""

        return extract_ranked(self._keywords, self._configuration, self._configuration.take_words_max)

    def prioritize_keyword(self, keyword: str) -> bool:
        return self._change_weight(keyword, WEIGHT_INCREMENT)

    def trivialize_keyword(self, keyword: str) -> bool:
        return self._change_weight(keyword, -WEIGHT_INCREMENT)

    def weight_of(self, keyword: str) -> Weight | None:
        return self._keywords.get(keyword)

    def keywords(self) -> List[Tuple[str, Weight]]:
        """Every known keyword in ranked order, unfiltered."""

        return self._keywords.ranked()

    def summary(self) -> List[Tuple[str, Weight]]:
        """Structured counterpart of :meth:`feed_empty`."""

        return rank_keywords(self._keywords, self._configuration, self._configuration.take_words_max)

    def _change_weight(self, keyword: str, delta: int) -> bool:
        changed = self._keywords.adjust(keyword, delta)
        if changed:
            logger.debug("keyword.adjust word=%s delta=%s weight=%s", keyword, delta, self._keywords.get(keyword))
        else:
            logger.debug("keyword.adjust.unknown word=%s delta=%s", keyword, delta)
        return changed

    def _weigh_message(self, words: List[str]) -> KeywordStore:
        weighted = KeywordStore()
        for word in words:
            weighted.adjust(word, WEIGHT_INCREMENT, insert_if_missing=True)

        # Known words carry their learned weight; unseen ones lose a point.
        # Each distinct spelling counts, so "Rust rust" is adjusted twice.
        for word in dict.fromkeys(words):
            known = self._keywords.get(word)
            weighted.adjust(word, known.value if known is not None else -WEIGHT_INCREMENT)
        return weighted


__all__ = ["KeywordEngine"]
