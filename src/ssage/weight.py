"""Bounded keyword priority values."""

from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering
from typing import Final

MIN_THRESHOLD: Final[int] = 1
MAX_THRESHOLD: Final[int] = 20
WEIGHT_INCREMENT: Final[int] = 1


def clamp_weight(value: int) -> int:
    """Saturate ``value`` into ``[MIN_THRESHOLD, MAX_THRESHOLD]``."""

    if value < MIN_THRESHOLD:
        return MIN_THRESHOLD
    if value > MAX_THRESHOLD:
        return MAX_THRESHOLD
    return value


@total_ordering
@dataclass(slots=True, frozen=True)
class Weight:
    """Integer importance score that never leaves the configured bounds."""

    value: int = MIN_THRESHOLD

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", clamp_weight(int(self.value)))

    def __int__(self) -> int:
        return self.value

    def __lt__(self, other: object) -> bool:
        if isinstance(other, Weight):
            return self.value < other.value
        if isinstance(other, int):
            return self.value < other
        return NotImplemented

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Weight):
            return self.value == other.value
        if isinstance(other, int):
            return self.value == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)

    def adjusted(self, delta: int) -> "Weight":
        return Weight(self.value + delta)


__all__ = [
    "MAX_THRESHOLD",
    "MIN_THRESHOLD",
    "WEIGHT_INCREMENT",
    "Weight",
    "clamp_weight",
]
