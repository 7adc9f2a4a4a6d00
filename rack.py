"""
rack.py

Role:
    Deterministic rack generator. Maps a 32-bit seed to the ten starting
    positions the game would produce for that seed.

Algorithm:
    - RANDOM_FLOAT is the game's LCG: state = state * 0x10DCD + 1 (mod 2**32).
      Each draw returns ((state >> 16) & 0xFFFF) / 65536 as a float32, i.e.
      a value in [0, 1) with 16 bits of resolution.
    - RACK copies the cue ball unchanged, then for ONE..NINE in order draws
      x then z from one shared generator and offsets the base position by
      draw * 0.28785 - 0.143925 on each axis. y is never touched.

Notes:
    - All arithmetic after the draw is binary32 (numpy.float32 scalars), so
      the positions match the console bit-for-bit. Do not mix in Python
      floats: float64 intermediates round differently.
    - Draw order is part of the contract. Reordering draws changes every
      later ball's offset.
"""

import numpy as np

from ball import BALL, CANONICAL_POSITIONS, NUMBERED

LCG_MULTIPLIER = 0x10DCD
LCG_INCREMENT = 1
SEED_MASK = 0xFFFFFFFF

OFFSET_SCALE = np.float32(0.28785)
OFFSET_BIAS = np.float32(0.143925)
_DRAW_DIVISOR = np.float32(0x10000)


class RANDOM_FLOAT:
    """The game's float PRNG. Owns its 32-bit state; one instance per rack."""

    def __init__(self, seed: int):
        self.state = int(seed) & SEED_MASK

    def Random(self) -> np.float32:
        self.state = (self.state * LCG_MULTIPLIER + LCG_INCREMENT) & SEED_MASK
        return np.float32((self.state >> 16) & 0xFFFF) / _DRAW_DIVISOR


def rack_offset(draw: np.float32) -> np.float32:
    """Offset applied to one axis for one draw, in [-0.143925, 0.143925)."""
    return np.float32(draw) * OFFSET_SCALE - OFFSET_BIAS


class RACK:
    """Ten ball positions for one seed.

    Constructed once per trial, written into the simulation, then dropped.
    """

    def __init__(self, seed: int):
        self.seed = int(seed) & SEED_MASK
        self.rng = RANDOM_FLOAT(self.seed)
        self.positions = CANONICAL_POSITIONS.copy()
        self.offsets = np.zeros((len(BALL), 2), dtype=np.float32)

        for ball in NUMBERED:
            offset_x = rack_offset(self.rng.Random())
            offset_z = rack_offset(self.rng.Random())
            self.offsets[ball] = (offset_x, offset_z)
            self.positions[ball, 0] = self.positions[ball, 0] + offset_x
            self.positions[ball, 2] = self.positions[ball, 2] + offset_z

        self.positions.setflags(write=False)
        self.offsets.setflags(write=False)

    def Get_Ball(self, ball) -> np.ndarray:
        return self.positions[int(ball)]

    def Bits(self) -> np.ndarray:
        """(10, 3) uint32 bit patterns of the positions."""
        return self.positions.view(np.uint32)

    def Layout(self):
        """Ordered (BALL, (x, y, z)) pairs."""
        return [(b, tuple(self.positions[b])) for b in BALL]

    def __eq__(self, other):
        if not isinstance(other, RACK):
            return NotImplemented
        return np.array_equal(self.Bits(), other.Bits())

    def __repr__(self):
        return f"RACK(seed={self.seed:#010x})"


def generate(seed: int) -> RACK:
    return RACK(seed)
