from __future__ import annotations

import pytest

from ssage.weight import MAX_THRESHOLD, MIN_THRESHOLD, Weight, clamp_weight


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(-5, MIN_THRESHOLD), (0, MIN_THRESHOLD), (1, 1), (7, 7), (20, 20), (21, MAX_THRESHOLD), (10_000, MAX_THRESHOLD)],
)
def test_clamp_weight_saturates(raw: int, expected: int) -> None:
    assert clamp_weight(raw) == expected


def test_weight_construction_is_clamped() -> None:
    assert Weight(0).value == MIN_THRESHOLD
    assert Weight(99).value == MAX_THRESHOLD
    assert Weight().value == MIN_THRESHOLD


def test_weight_adjusted_never_leaves_bounds() -> None:
    weight = Weight(19)
    for _ in range(5):
        weight = weight.adjusted(1)
    assert weight == Weight(MAX_THRESHOLD)

    for _ in range(50):
        weight = weight.adjusted(-3)
    assert weight == MIN_THRESHOLD


def test_weight_ordering_and_int_comparison() -> None:
    assert Weight(2) < Weight(3)
    assert Weight(5) >= Weight(5)
    assert Weight(4) > 3
    assert int(Weight(6)) == 6
    assert sorted([Weight(3), Weight(1), Weight(2)]) == [Weight(1), Weight(2), Weight(3)]
    assert len({Weight(2), Weight(2)}) == 1
