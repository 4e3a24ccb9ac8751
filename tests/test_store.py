from __future__ import annotations

from ssage.store import KeywordStore
from ssage.weight import MAX_THRESHOLD, MIN_THRESHOLD, Weight


def test_store_is_case_insensitive_and_keeps_first_spelling() -> None:
    store = KeywordStore()
    store.upsert("Message", Weight(2))
    store.upsert("MESSAGE", Weight(5))

    assert len(store) == 1
    assert "message" in store
    assert store.get("mEsSaGe") == Weight(5)
    assert store.items_list() == [("Message", Weight(5))]


def test_adjust_unknown_word_without_insert_returns_false() -> None:
    store = KeywordStore()

    assert store.adjust("ghost", 1) is False
    assert "ghost" not in store
    assert len(store) == 0


def test_adjust_inserts_with_delta_or_minimum() -> None:
    store = KeywordStore()

    assert store.adjust("rise", 3, insert_if_missing=True)
    assert store.adjust("fall", -1, insert_if_missing=True)

    assert store.get("rise") == Weight(3)
    assert store.get("fall") == Weight(MIN_THRESHOLD)


def test_adjust_saturates_existing_entries() -> None:
    store = KeywordStore([("word", Weight(19))])

    store.adjust("word", 10)
    assert store.get("word") == Weight(MAX_THRESHOLD)

    store.adjust("WORD", -40)
    assert store.get("word") == Weight(MIN_THRESHOLD)


def test_merge_max_keeps_higher_weights_and_appends_new_words() -> None:
    base = KeywordStore([("alpha", Weight(5)), ("beta", Weight(2))])
    incoming = KeywordStore([("ALPHA", Weight(3)), ("Beta", Weight(4)), ("gamma", Weight(1))])

    base.merge_max(incoming)

    assert base.items_list() == [("alpha", Weight(5)), ("beta", Weight(4)), ("gamma", Weight(1))]


def test_ranked_orders_by_weight_then_insertion() -> None:
    store = KeywordStore(
        [("one", Weight(1)), ("three", Weight(3)), ("also-one", Weight(1)), ("two", Weight(2)), ("tri", Weight(3))]
    )

    assert [word for word, _ in store.ranked()] == ["three", "tri", "two", "one", "also-one"]


def test_copy_is_independent() -> None:
    store = KeywordStore([("keep", Weight(2))])
    clone = store.copy()
    clone.adjust("keep", 5)

    assert store.get("keep") == Weight(2)
    assert clone.get("keep") == Weight(7)
