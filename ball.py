"""
ball.py

Role:
    The ten balls of a nine-ball rack and their canonical starting positions.

Data model:
    - BALL is an IntEnum: CUE (the unperturbed primary ball) and ONE..NINE.
    - CANONICAL_BITS holds the base (x, y, z) of every ball as IEEE-754
      binary32 bit patterns. These are the exact values the game uses; they
      are stored as bits, never re-derived from decimal literals.
    - CANONICAL_POSITIONS is the same table viewed as a (10, 3) float32 array.

Coordinates:
    y is up. Every ball rests on the bed with its centre at y = ball radius
    (0x40383958 == 2.8785). The rack apex (ONE) sits at x = 50, the cue ball
    at x = -50.
"""

from enum import IntEnum

import numpy as np


class BALL(IntEnum):
    CUE = 0
    ONE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9


NUMBERED = tuple(b for b in BALL if b is not BALL.CUE)

CANONICAL_BITS = np.array([
    [0xc2480000, 0x40383958, 0x00000000],  # CUE
    [0x42480000, 0x40383958, 0x00000000],  # ONE
    [0x42920e56, 0x40383958, 0x00000000],  # TWO
    [0x42760e56, 0x40383958, 0x40b83958],  # THREE
    [0x42760e56, 0x40383958, 0xc0b83958],  # FOUR
    [0x425f072b, 0x40383958, 0x40383958],  # FIVE
    [0x425f072b, 0x40383958, 0xc0383958],  # SIX
    [0x42868ac0, 0x40383958, 0x40383958],  # SEVEN
    [0x42868ac0, 0x40383958, 0xc0383958],  # EIGHT
    [0x42760e56, 0x40383958, 0x00000000],  # NINE
], dtype=np.uint32)

CANONICAL_POSITIONS = CANONICAL_BITS.view(np.float32)
CANONICAL_POSITIONS.setflags(write=False)


def float_bits(values):
    """Reinterpret float32 values as their uint32 bit patterns."""
    return np.asarray(values, dtype=np.float32).view(np.uint32)
