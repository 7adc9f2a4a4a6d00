import dataclasses

import numpy as np
import pytest

import constants as c
from ball import BALL, CANONICAL_POSITIONS, NUMBERED
from errors import AccessError, CheckpointError, ConfigurationError
from memory_map import MemoryMap
from rack import generate
from search import SEARCH_ENGINE
from settle import IDLE_DETECTOR, TRAP_DETECTOR


@pytest.fixture
def sim():
    from simulation import SIMULATION
    s = SIMULATION()
    yield s
    s.Disconnect()


def test_mirror_starts_at_the_canonical_rack(sim):
    got = sim.memory_map.Read_Positions(sim)
    assert np.allclose(got, CANONICAL_POSITIONS, atol=1e-4)
    assert sim.memory_map.Read_Counts(sim) == (0,) * 9


def test_write_moves_bodies_and_checkpoint_rolls_back(sim):
    mm = sim.memory_map
    before = sim.read_memory(mm.position_addresses[BALL.ONE], 12)
    sim.save_checkpoint(1)
    rack = generate(1234)
    mm.Write_Rack(sim, rack)
    assert np.allclose(sim.Ball_Positions()[1:], rack.positions[1:], atol=1e-4)

    sim.load_checkpoint(1)
    assert sim.read_memory(mm.position_addresses[BALL.ONE], 12) == before
    assert np.allclose(sim.Ball_Positions(), CANONICAL_POSITIONS, atol=1e-4)


def test_count_writes_reach_the_table(sim):
    mm = sim.memory_map
    sim.write_memory(mm.count_addresses[BALL.FIVE], mm.Encode_Count(2))
    assert sim.counts[BALL.FIVE] == 2
    assert mm.Read_Counts(sim)[BALL.FIVE - 1] == 2


def test_access_outside_the_map_fails(sim):
    with pytest.raises(AccessError):
        sim.read_memory(0x10, 4)
    with pytest.raises(AccessError):
        sim.write_memory(sim.base + len(sim.mirror) - 2, b"\x00" * 4)


def test_unknown_slot_fails(sim):
    with pytest.raises(CheckpointError):
        sim.load_checkpoint(42)


def test_trap_only_at_the_end_of_shot_address(sim):
    with pytest.raises(ConfigurationError):
        sim.set_trap(c.TRAP_ADDRESS + 4, lambda host, address: None)


def test_trap_address_comes_from_the_memory_map():
    from simulation import SIMULATION
    mm = dataclasses.replace(MemoryMap.From_Constants(), trap_address=0x80001234)
    s = SIMULATION(mm)
    try:
        s.set_trap(0x80001234, lambda host, address: None)
        assert 0x80001234 in s.traps
        with pytest.raises(ConfigurationError):
            s.set_trap(c.TRAP_ADDRESS, lambda host, address: None)
    finally:
        s.Disconnect()


def test_settled_table_reads_back_identical(sim):
    sim.Run(until=lambda: sim.at_rest, max_frames=20000)
    assert sim.at_rest
    mm = sim.memory_map
    first = mm.Read_Observation(sim)
    raw = [sim.read_memory(a, 12) for a in mm.position_addresses]
    for _ in range(5):
        sim.Step()
        assert sim.at_rest
        assert mm.Read_Observation(sim) == first
        assert [sim.read_memory(a, 12) for a in mm.position_addresses] == raw


@pytest.mark.parametrize("strategy", ["trap", "poll"])
def test_one_break_end_to_end(sim, strategy):
    detector = TRAP_DETECTOR() if strategy == "trap" else IDLE_DETECTOR(3)
    engine = SEARCH_ENGINE(sim, MemoryMap.From_Constants(), detector, reporter=None, stop_after=1)
    engine.Init(origin_seed=7)
    frames = sim.Run(until=lambda: not engine.running, max_frames=20000)
    assert engine.running is False
    assert frames < 20000
    assert engine.result.trials == 1
    assert engine.seed == 8
    # back on the baseline: nothing sunk, cue at its start position
    assert sim.memory_map.Read_Counts(sim) == (0,) * len(NUMBERED)
    assert np.allclose(sim.Ball_Positions()[BALL.CUE], CANONICAL_POSITIONS[BALL.CUE], atol=1e-4)
