"""
settle.py

Role:
    Decide the single moment a break has finished and hand the resolved
    counts to the search engine, exactly once per trial.

Two interchangeable strategies:
    IDLE_DETECTOR  poll-based. Fed one Observation per frame; fires once the
                   table has looked identical (y ignored) for `threshold`
                   comparisons in a row, i.e. threshold + 1 identical samples.
                   Needs nothing but memory reads.
    TRAP_DETECTOR  trap-based. The host calls back when the game reaches the
                   end-of-shot instruction; the detector fires on the first
                   callback after Arm(). No debouncing.

Both return a ShotResolved carrying one count per numbered ball.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import numpy as np

from errors import ConfigurationError


@dataclass(frozen=True)
class ShotResolved:
    counts: tuple  # nine ints, balls ONE..NINE


@dataclass(frozen=True, eq=False)
class Observation:
    """Positions (10, 3) float32 with y zeroed, plus the ten resolved counts."""

    positions: np.ndarray
    counts: tuple

    @classmethod
    def Normalized(cls, positions, counts) -> "Observation":
        pos = np.array(positions, dtype=np.float32).reshape(-1, 3)
        pos[:, 1] = np.float32(0.0)
        pos.setflags(write=False)
        return cls(pos, tuple(int(n) for n in counts))

    def numbered_counts(self) -> tuple:
        return self.counts[1:]

    def __eq__(self, other):
        # Bitwise, like a memcmp of the raw state: -0.0 != 0.0, NaN == NaN.
        if not isinstance(other, Observation):
            return NotImplemented
        return self.counts == other.counts and np.array_equal(
            self.positions.view(np.uint32), other.positions.view(np.uint32)
        )


class IDLE_DETECTOR:
    """Idle-frame settle detector.

    idle_count goes to -1 after firing so the next sample (the freshly
    written rack) restarts the count instead of re-firing.
    """

    strategy = "poll"

    def __init__(self, threshold: int = 3):
        if int(threshold) < 1:
            raise ConfigurationError(f"idle threshold must be >= 1, got {threshold}")
        self.threshold = int(threshold)
        self.idle_count = 0
        self.last_observation: Optional[Observation] = None

    def Arm(self) -> None:
        # Nothing to do: the next differing sample resets the count.
        pass

    def Observe(self, obs: Observation) -> Optional[ShotResolved]:
        if self.last_observation is not None and obs == self.last_observation:
            self.idle_count += 1
        else:
            self.idle_count = 0
        self.last_observation = obs

        if self.idle_count >= self.threshold:
            self.idle_count = -1
            return ShotResolved(obs.numbered_counts())
        return None


class TRAP_DETECTOR:
    """Breakpoint settle detector: armed/triggered, nothing else."""

    strategy = "trap"

    def __init__(self):
        self.armed = False

    def Arm(self) -> None:
        self.armed = True

    def Trap(self, counts) -> Optional[ShotResolved]:
        if not self.armed:
            if os.getenv("SIM_DEBUG", "0") == "1":
                print("[SETTLE] trap while disarmed, ignored", flush=True)
            return None
        self.armed = False
        return ShotResolved(tuple(int(n) for n in counts))


def Make_Detector(strategy: str, threshold: int = 3):
    if strategy == "poll":
        return IDLE_DETECTOR(threshold)
    if strategy == "trap":
        return TRAP_DETECTOR()
    raise ConfigurationError(f"unknown settle strategy {strategy!r}")
