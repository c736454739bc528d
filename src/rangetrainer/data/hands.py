from __future__ import annotations

from typing import Final

# Grid order: row/column 0 is the ace, 12 is the deuce.
RANKS: Final = "AKQJT98765432"
GRID_SIZE: Final = len(RANKS)


def hand_name(row: int, col: int) -> str:
    """Return the hand in a 13x13 grid cell.

    The diagonal holds pocket pairs, cells above it suited hands and cells below
    it offsuit hands; the higher rank is always written first (``AKs``, ``AKo``).
    """

    if not (0 <= row < GRID_SIZE and 0 <= col < GRID_SIZE):
        raise ValueError(f"grid cell ({row}, {col}) out of range")
    if row == col:
        return RANKS[row] * 2
    if col > row:
        return f"{RANKS[row]}{RANKS[col]}s"
    return f"{RANKS[col]}{RANKS[row]}o"


ALL_HANDS: Final[tuple[str, ...]] = tuple(hand_name(row, col) for row in range(GRID_SIZE) for col in range(GRID_SIZE))

POCKET_PAIRS: Final[tuple[str, ...]] = tuple(rank * 2 for rank in RANKS)
SUITED_HANDS: Final[tuple[str, ...]] = tuple(
    f"{RANKS[row]}{RANKS[col]}s" for row in range(GRID_SIZE) for col in range(row + 1, GRID_SIZE)
)
OFFSUIT_HANDS: Final[tuple[str, ...]] = tuple(
    f"{RANKS[col]}{RANKS[row]}o" for row in range(1, GRID_SIZE) for col in range(row)
)


def is_pocket_pair(hand: str) -> bool:
    return len(hand) == 2 and hand[0] == hand[1]


def is_suited(hand: str) -> bool:
    return hand.endswith("s")


def is_offsuit(hand: str) -> bool:
    return hand.endswith("o")


__all__ = [
    "ALL_HANDS",
    "GRID_SIZE",
    "OFFSUIT_HANDS",
    "POCKET_PAIRS",
    "RANKS",
    "SUITED_HANDS",
    "hand_name",
    "is_offsuit",
    "is_pocket_pair",
    "is_suited",
]
