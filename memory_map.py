"""
memory_map.py

Role:
    Object -> address table for one game target, plus the codecs that turn
    racks and observations into host memory reads/writes.

Layout (per ball):
    position_addresses[i] + 0 : x  (float32)
    position_addresses[i] + 4 : y  (float32)
    position_addresses[i] + 8 : z  (float32)
    count_addresses[i]        : resolved count (unsigned, count_size bytes)

The core never hard-codes addresses; it is handed a MemoryMap built from
constants.py (see MemoryMap.From_Constants) and validated in Init().
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

import constants as c
from ball import BALL, NUMBERED
from errors import ConfigurationError
from settle import Observation

POSITION_SIZE = 12
ADDRESS_LIMIT = 1 << 32
_STRATEGIES = ("poll", "trap")
_BASELINE_MODES = ("checkpoint", "region")


@dataclass(frozen=True)
class MemoryMap:
    position_addresses: tuple
    count_addresses: tuple
    count_size: int = 1
    byte_order: str = "big"
    trap_address: Optional[int] = None
    region_base: Optional[int] = None
    region_size: Optional[int] = None

    @classmethod
    def From_Constants(cls, consts=c) -> "MemoryMap":
        region_size = int(getattr(consts, "REGION_SIZE", 0) or 0)
        return cls(
            position_addresses=tuple(int(a) for a in consts.POSITION_ADDRESSES),
            count_addresses=tuple(int(a) for a in consts.COUNT_ADDRESSES),
            count_size=int(consts.COUNT_SIZE),
            byte_order=str(consts.BYTE_ORDER),
            trap_address=getattr(consts, "TRAP_ADDRESS", None),
            region_base=getattr(consts, "REGION_BASE", None) if region_size else None,
            region_size=region_size or None,
        )

    # ── validation ───────────────────────────────────────────────────────

    def Validate(self, strategy: str = "poll", baseline_mode: str = "checkpoint") -> None:
        """Raise ConfigurationError if this map cannot drive the search."""
        if strategy not in _STRATEGIES:
            raise ConfigurationError(f"unknown settle strategy {strategy!r}")
        if baseline_mode not in _BASELINE_MODES:
            raise ConfigurationError(f"unknown baseline mode {baseline_mode!r}")
        for name, table in (("position", self.position_addresses), ("count", self.count_addresses)):
            if len(table) != len(BALL):
                raise ConfigurationError(f"{name} table has {len(table)} entries, expected {len(BALL)}")
        if self.count_size not in (1, 2, 4):
            raise ConfigurationError(f"count size must be 1, 2 or 4 bytes, got {self.count_size}")
        if self.byte_order not in ("big", "little"):
            raise ConfigurationError(f"byte order must be 'big' or 'little', got {self.byte_order!r}")

        spans = [(a, POSITION_SIZE, f"position[{i}]") for i, a in enumerate(self.position_addresses)]
        spans += [(a, self.count_size, f"count[{i}]") for i, a in enumerate(self.count_addresses)]
        for addr, size, label in spans:
            if addr < 0 or addr + size > ADDRESS_LIMIT:
                raise ConfigurationError(f"{label} at {addr:#x} is outside the 32-bit address space")
        ordered = sorted(spans)
        for (a0, s0, l0), (a1, _, l1) in zip(ordered, ordered[1:]):
            if a0 + s0 > a1:
                raise ConfigurationError(f"{l0} overlaps {l1}")

        if strategy == "trap" and self.trap_address is None:
            raise ConfigurationError("trap strategy needs a trap address")
        if baseline_mode == "region":
            if self.region_base is None or not self.region_size:
                raise ConfigurationError("region baseline needs REGION_BASE and REGION_SIZE")
            lo, hi = self.region_base, self.region_base + self.region_size
            if lo < 0 or hi > ADDRESS_LIMIT:
                raise ConfigurationError("baseline region is outside the 32-bit address space")
            for i, a in enumerate(self.position_addresses):
                if a < lo or a + POSITION_SIZE > hi:
                    raise ConfigurationError(f"position[{i}] at {a:#x} is not inside the baseline region")

    # ── codecs ───────────────────────────────────────────────────────────

    @property
    def float_dtype(self) -> np.dtype:
        return np.dtype(">f4" if self.byte_order == "big" else "<f4")

    def Encode_Position(self, xyz) -> bytes:
        return np.asarray(xyz, dtype=np.float32).astype(self.float_dtype).tobytes()

    def Decode_Position(self, raw: bytes) -> np.ndarray:
        return np.frombuffer(raw, dtype=self.float_dtype, count=3).astype(np.float32)

    def Decode_Count(self, raw: bytes) -> int:
        return int.from_bytes(raw[: self.count_size], self.byte_order, signed=False)

    def Encode_Count(self, n: int) -> bytes:
        return int(n).to_bytes(self.count_size, self.byte_order, signed=False)

    # ── host I/O ─────────────────────────────────────────────────────────

    def Write_Rack(self, host, rack) -> None:
        """Poke x, y and z of every numbered ball. The cue ball is left alone."""
        for ball in NUMBERED:
            host.write_memory(self.position_addresses[ball], self.Encode_Position(rack.Get_Ball(ball)))

    def Read_Positions(self, host) -> np.ndarray:
        out = np.empty((len(BALL), 3), dtype=np.float32)
        for ball in BALL:
            out[ball] = self.Decode_Position(host.read_memory(self.position_addresses[ball], POSITION_SIZE))
        return out

    def Read_Counts(self, host, balls: Sequence = NUMBERED) -> tuple:
        return tuple(
            self.Decode_Count(host.read_memory(self.count_addresses[b], self.count_size)) for b in balls
        )

    def Read_Observation(self, host) -> Observation:
        return Observation.Normalized(self.Read_Positions(host), self.Read_Counts(host, BALL))
