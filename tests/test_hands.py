from __future__ import annotations

import pytest

from rangetrainer.data.hands import (
    ALL_HANDS,
    OFFSUIT_HANDS,
    POCKET_PAIRS,
    SUITED_HANDS,
    hand_name,
    is_offsuit,
    is_pocket_pair,
    is_suited,
)


def test_universe_has_169_unique_hands():
    assert len(ALL_HANDS) == 169
    assert len(set(ALL_HANDS)) == 169
    assert len(POCKET_PAIRS) == 13
    assert len(SUITED_HANDS) == 78
    assert len(OFFSUIT_HANDS) == 78
    assert set(ALL_HANDS) == set(POCKET_PAIRS) | set(SUITED_HANDS) | set(OFFSUIT_HANDS)


def test_grid_layout():
    assert hand_name(0, 0) == "AA"
    assert hand_name(0, 1) == "AKs"
    assert hand_name(1, 0) == "AKo"
    assert hand_name(12, 12) == "22"
    assert ALL_HANDS[:3] == ("AA", "AKs", "AQs")
    with pytest.raises(ValueError):
        hand_name(13, 0)


def test_hand_shape_helpers():
    assert is_pocket_pair("77")
    assert not is_pocket_pair("76s")
    assert is_suited("76s") and not is_offsuit("76s")
    assert is_offsuit("K2o")
