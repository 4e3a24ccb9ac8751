"""Character filtering and splitting for incoming messages."""

from __future__ import annotations

import re
from typing import List

# ASCII letters plus the Latin-1 Supplement block from U+00C0 to U+00FF.
_NON_WORD_CHAR_RE = re.compile(r"[^A-Za-zÀ-ÿ]")


def normalize_message(text: str) -> str:
    """Replace every non-letter character with a space.

    Characters map one to one, so the result has the same length as ``text``.
    Casing is left untouched; keyword comparison folds case later.
    """

    if not text:
        return ""
    return _NON_WORD_CHAR_RE.sub(" ", text)


def split_words(text: str) -> List[str]:
    return text.split()


__all__ = ["normalize_message", "split_words"]
