"""Case-insensitive keyword container ordered by weight."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple

from .weight import MIN_THRESHOLD, Weight


def keyword_key(word: str) -> str:
    return word.casefold()


@dataclass(slots=True)
class _KeywordEntry:
    word: str
    weight: Weight


class KeywordStore:
    """Map words to weights, comparing words case-insensitively.

    The first stored spelling of a word is the one reported back. Entries keep
    their first insertion order, which is also the tie-break used when
    ``ranked`` orders equal weights.
    """

    def __init__(self, entries: Iterable[Tuple[str, Weight]] | None = None) -> None:
        self._entries: dict[str, _KeywordEntry] = {}
        for word, weight in entries or []:
            self.upsert(word, weight)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and keyword_key(word) in self._entries

    def __iter__(self) -> Iterator[Tuple[str, Weight]]:
        return self.items()

    def __repr__(self) -> str:
        return f"KeywordStore({self.items_list()!r})"

    def get(self, word: str) -> Weight | None:
        entry = self._entries.get(keyword_key(word))
        return entry.weight if entry is not None else None

    def upsert(self, word: str, weight: Weight) -> None:
        """Insert ``word`` or replace its weight, keeping its original spelling."""

        key = keyword_key(word)
        entry = self._entries.get(key)
        if entry is None:
            self._entries[key] = _KeywordEntry(word=word, weight=weight)
        else:
            entry.weight = weight

    def adjust(self, word: str, delta: int, *, insert_if_missing: bool = False) -> bool:
        """Shift the weight of ``word`` by ``delta``, saturating at the bounds.

        Unknown words are inserted only when ``insert_if_missing`` is set: a
        non-negative delta becomes the starting weight, a negative one starts
        at the minimum. Returns ``False`` when the word was unknown and left
        out.
        """

        entry = self._entries.get(keyword_key(word))
        if entry is not None:
            entry.weight = entry.weight.adjusted(delta)
            return True
        if not insert_if_missing:
            return False
        initial = delta if delta >= 0 else MIN_THRESHOLD
        self._entries[keyword_key(word)] = _KeywordEntry(word=word, weight=Weight(initial))
        return True

    def merge_max(self, other: "KeywordStore") -> None:
        """Fold ``other`` in, keeping the higher weight for shared words."""

        for word, weight in other.items():
            current = self.get(word)
            if current is None or weight > current:
                self.upsert(word, weight)

    def items(self) -> Iterator[Tuple[str, Weight]]:
        for entry in self._entries.values():
            yield entry.word, entry.weight

    def items_list(self) -> List[Tuple[str, Weight]]:
        return list(self.items())

    def ranked(self) -> List[Tuple[str, Weight]]:
        """Return entries by descending weight; ties keep insertion order."""

        return sorted(self.items(), key=lambda item: -item[1].value)

    def copy(self) -> "KeywordStore":
        return KeywordStore(self.items())


__all__ = ["KeywordStore", "keyword_key"]
