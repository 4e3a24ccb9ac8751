from __future__ import annotations

import pytest

from ssage.config import Configuration
from ssage.extract import extract_ranked, rank_keywords, resolve_window
from ssage.store import KeywordStore
from ssage.weight import Weight


def _sample_store() -> KeywordStore:
    return KeywordStore(
        [
            ("alpha", Weight(3)),
            ("be", Weight(5)),
            ("gamma", Weight(1)),
            ("delta", Weight(3)),
            ("omega", Weight(2)),
        ]
    )


def test_extract_filters_threshold_and_short_words() -> None:
    configuration = Configuration(threshold=2)

    assert extract_ranked(_sample_store(), configuration) == "alpha delta omega"
    pairs = rank_keywords(_sample_store(), configuration)
    assert all(weight.value >= 2 and len(word) >= 4 for word, weight in pairs)


def test_extract_small_window_uses_legacy_floor() -> None:
    configuration = Configuration(threshold=2)

    assert extract_ranked(_sample_store(), configuration, limit=1) == "alpha delta omega"


def test_extract_small_window_with_count_floor() -> None:
    configuration = Configuration(threshold=2, take_words_min=1, legacy_window_floor=False)

    assert extract_ranked(_sample_store(), configuration, limit=1) == "alpha"
    assert extract_ranked(_sample_store(), configuration, limit=0) == "alpha"


def test_extract_empty_store_returns_empty_string() -> None:
    assert extract_ranked(KeywordStore(), Configuration(), limit=10) == ""


@pytest.mark.parametrize(("limit", "expected"), [(0, 4), (3, 4), (4, 4), (10, 10), (30, 30), (31, 30), (500, 30)])
def test_resolve_window_default_bounds(limit: int, expected: int) -> None:
    assert resolve_window(limit, Configuration()) == expected


def test_resolve_window_floor_checked_before_maximum() -> None:
    configuration = Configuration(take_words_min=1, take_words_max=3, min_word_length=5)

    assert resolve_window(2, configuration) == 5
    assert resolve_window(10, configuration) == 3


def test_extract_caps_at_take_words_max() -> None:
    store = KeywordStore((f"word{chr(97 + index)}", Weight(2)) for index in range(10))
    configuration = Configuration(take_words_min=1, take_words_max=5, min_word_length=2)

    assert len(extract_ranked(store, configuration, limit=8).split()) == 5
