"""
host.py

The contract between the seed search and whatever runs the physics.

A host owns the simulation and drives the search: it calls back into the
engine once per frame (on_tick) or when a trap address is hit (set_trap),
one callback at a time. Every operation below is synchronous and must
complete inside that callback.

Implementations:
    simulation.SIMULATION   pybullet reference table (this repo)
    tests/conftest.py       scripted in-memory host used by the tests

Failures are reported as errors.AccessError / errors.CheckpointError.
"""

from typing import Callable, Protocol


class HOST(Protocol):
    def read_memory(self, address: int, size: int) -> bytes: ...

    def write_memory(self, address: int, data: bytes) -> None: ...

    def save_checkpoint(self, slot) -> None: ...

    def load_checkpoint(self, slot) -> None: ...

    def set_trap(self, address: int, callback: Callable[["HOST", int], None]) -> None: ...

    def on_tick(self, callback: Callable[["HOST"], None]) -> None: ...


def print_report(message: str) -> None:
    print("[SCORE]", message, flush=True)
