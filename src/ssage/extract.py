"""Ranked extraction of keywords from a weighted store."""

from __future__ import annotations

from typing import List, Tuple

from .config import Configuration
from .store import KeywordStore
from .weight import Weight


def resolve_window(limit: int, configuration: Configuration) -> int:
    """Clamp a requested window to the configured floor and ``take_words_max``.

    The floor is checked first, so a floor above ``take_words_max`` wins.
    """

    floor = configuration.window_floor
    if limit < floor:
        return floor
    if limit > configuration.take_words_max:
        return configuration.take_words_max
    return limit


def rank_keywords(
    store: KeywordStore,
    configuration: Configuration,
    limit: int | None = None,
) -> List[Tuple[str, Weight]]:
    """Return eligible ``(word, weight)`` pairs, heaviest first."""

    eligible = [
        (word, weight)
        for word, weight in store.ranked()
        if weight.value >= configuration.threshold and len(word) >= configuration.min_word_length
    ]
    if limit is None:
        return eligible
    return eligible[: resolve_window(limit, configuration)]


def extract_ranked(
    store: KeywordStore,
    configuration: Configuration,
    limit: int | None = None,
) -> str:
    return " ".join(word for word, _ in rank_keywords(store, configuration, limit))


__all__ = ["extract_ranked", "rank_keywords", "resolve_window"]
