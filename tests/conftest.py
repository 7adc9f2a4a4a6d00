import os
import sys
from pathlib import Path

import pytest

PROJECT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT))
os.environ.setdefault("HEADLESS", "1")

from ball import BALL, NUMBERED, CANONICAL_POSITIONS
from errors import AccessError, CheckpointError
from memory_map import MemoryMap

BASELINE = "baseline"
BEST = "best"
TRAP = 0x8000


def small_map(**overrides):
    kw = dict(
        position_addresses=tuple(0x1000 + 0x20 * i for i in range(10)),
        count_addresses=tuple(0x1000 + 0x20 * i + 0x10 for i in range(10)),
        count_size=1,
        byte_order="big",
        trap_address=TRAP,
        region_base=0x1000,
        region_size=0x200,
    )
    kw.update(overrides)
    return MemoryMap(**kw)


class FakeHost:
    """Byte-addressed memory with named slots; the test plays the physics."""

    def __init__(self, memory_map):
        self.mm = memory_map
        self.base = 0x1000
        self.memory = bytearray(0x200)
        self.slots = {}
        self.saves = []
        self.loads = []
        self.tick_callbacks = []
        self.traps = {}
        self.fail_save = set()
        self.fail_load = set()
        self.fail_access = False
        for ball in BALL:
            self.write_memory(memory_map.position_addresses[ball],
                              memory_map.Encode_Position(CANONICAL_POSITIONS[ball]))

    def _offset(self, address, size):
        off = address - self.base
        if self.fail_access or off < 0 or off + size > len(self.memory):
            raise AccessError(address, size, "fake host")
        return off

    def read_memory(self, address, size):
        off = self._offset(address, size)
        return bytes(self.memory[off:off + size])

    def write_memory(self, address, data):
        off = self._offset(address, len(data))
        self.memory[off:off + len(data)] = data

    def save_checkpoint(self, slot):
        if slot in self.fail_save:
            raise CheckpointError(slot, "disk full")
        self.slots[slot] = bytes(self.memory)
        self.saves.append(slot)

    def load_checkpoint(self, slot):
        if slot in self.fail_load or slot not in self.slots:
            raise CheckpointError(slot, "cannot load")
        self.memory[:] = self.slots[slot]
        self.loads.append(slot)

    def set_trap(self, address, callback):
        self.traps[address] = callback

    def on_tick(self, callback):
        self.tick_callbacks.append(callback)

    # test-side "physics"

    def tick(self):
        for cb in list(self.tick_callbacks):
            cb(self)

    def trap(self):
        self.traps[self.mm.trap_address](self, self.mm.trap_address)

    def set_counts(self, counts):
        for ball, n in zip(NUMBERED, counts):
            self.write_memory(self.mm.count_addresses[ball], self.mm.Encode_Count(n))

    def sink(self, score):
        """Make this trial's break sink `score` balls (ONE, TWO, ... first)."""
        self.set_counts([1 if i < score else 0 for i in range(9)])

    def positions(self):
        return self.mm.Read_Positions(self)


@pytest.fixture
def memory_map():
    return small_map()


@pytest.fixture
def host(memory_map):
    return FakeHost(memory_map)
