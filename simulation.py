"""
simulation.py

Role:
    PyBullet reference host. Lets search.py run end to end without the
    console emulator by exposing the same primitives the emulator does.

What it provides (see host.HOST):
    - read_memory / write_memory over a byte mirror of the memory map.
      Before each frame's callbacks the ten ball bodies are encoded into the
      mirror (float32, map byte order); a write into a position block moves
      the matching body, a write into a count cell sets that ball's count.
    - save_checkpoint / load_checkpoint via p.saveState()/p.restoreState(),
      together with the counts and parked flags, which live outside Bullet.
      With CHECKPOINT_DIR set every save also writes slot<N>.bullet.
    - on_tick callbacks once per frame (SUBSTEPS physics steps).
    - set_trap at the map's trap address: raised once per trial, on the
      first frame on which every ball still on the table is at rest.

Table rules:
    - A ball whose centre enters a pocket circle is sunk: its count goes up
      by one and it is parked on the tray below the table.
    - A ball that leaves the table any other way is parked without a count.
    - A ball slower than SLEEP_SPEED is stopped dead (linear and angular) and
      pinned to the pose it had when it first slowed down; parked balls are
      pinned to their tray spot. The contact solver keeps nudging resting
      bodies by ~1e-12, so without the pin a settled table would never read
      back bit-identical frame after frame.

Env vars:
    HEADLESS        : 1/true => DIRECT; otherwise GUI
    SIM_DEBUG       : print per-event debug lines
    CHECKPOINT_DIR  : directory for durable .bullet snapshots
"""

import math
import os
import time
from pathlib import Path

import numpy as np
import pybullet as p

import constants as c
from ball import BALL
from errors import AccessError, CheckpointError, ConfigurationError
from memory_map import POSITION_SIZE, MemoryMap
from world import POCKETS, WORLD, park_position

import signal

signal.signal(signal.SIGINT, signal.default_int_handler)


def _debug(*args):
    if os.getenv("SIM_DEBUG", "0") == "1":
        print("[SIM]", *args, flush=True)


class SIMULATION:
    """Owns one PyBullet connection and one WORLD; hosts a seed search."""

    def __init__(self, memory_map: MemoryMap = None):
        """Connect to PyBullet (GUI or DIRECT), configure physics, then build the WORLD."""
        use_gui = os.getenv('HEADLESS', '').lower() not in ('1', 'true', 'yes', 'on')
        self.use_gui = use_gui
        self.physicsClient = p.connect(p.GUI if use_gui else p.DIRECT)
        if use_gui:
            try:
                p.configureDebugVisualizer(p.COV_ENABLE_GUI, 0)
                p.resetDebugVisualizerCamera(cameraDistance=260, cameraYaw=0, cameraPitch=-89,
                                             cameraTargetPosition=[0, 0, 0])
            except Exception as e:
                _debug('suppressed exception:', repr(e))

        p.setGravity(0, c.GRAVITY_Y, 0)
        p.setTimeStep(c.DT)

        self.memory_map = memory_map or MemoryMap.From_Constants()
        self.trap_address = self.memory_map.trap_address
        self.world = WORLD()

        spans = [(a, POSITION_SIZE) for a in self.memory_map.position_addresses]
        spans += [(a, self.memory_map.count_size) for a in self.memory_map.count_addresses]
        if self.memory_map.region_base is not None and self.memory_map.region_size:
            spans.append((self.memory_map.region_base, self.memory_map.region_size))
        self.base = min(a for a, _ in spans)
        self.mirror = bytearray(max(a + s for a, s in spans) - self.base)

        self.counts = [0] * len(BALL)
        self.parked = [False] * len(BALL)
        self.rest_poses = [None] * len(BALL)
        self.count_limit = (1 << (8 * self.memory_map.count_size)) - 1
        self.slots = {}
        self.tick_callbacks = []
        self.traps = {}
        self.trap_pending = True
        self.frame = 0
        self.at_rest = False

        self.Sync_Mirror()

    # ── memory ───────────────────────────────────────────────────────────

    def _offset(self, address, size):
        off = int(address) - self.base
        if off < 0 or off + size > len(self.mirror):
            raise AccessError(address, size, "outside the mapped table memory")
        return off

    def read_memory(self, address, size):
        off = self._offset(address, size)
        return bytes(self.mirror[off:off + size])

    def write_memory(self, address, data):
        data = bytes(data)
        off = self._offset(address, len(data))
        self.mirror[off:off + len(data)] = data
        self._Apply_Write(int(address), len(data))

    def _Apply_Write(self, address, size):
        mm = self.memory_map
        end = address + size
        for ball in BALL:
            a = mm.position_addresses[ball]
            if a < end and address < a + POSITION_SIZE:
                pos = mm.Decode_Position(self.read_memory(a, POSITION_SIZE))
                try:
                    p.resetBasePositionAndOrientation(self.world.ballIds[ball], pos.tolist(), [0, 0, 0, 1])
                except p.error as e:
                    raise AccessError(a, POSITION_SIZE, str(e))
                self.parked[ball] = False
                self.rest_poses[ball] = None
            a = mm.count_addresses[ball]
            if a < end and address < a + mm.count_size:
                self.counts[ball] = mm.Decode_Count(self.read_memory(a, mm.count_size))

    def Sync_Mirror(self):
        mm = self.memory_map
        for ball in BALL:
            pos, _ = p.getBasePositionAndOrientation(self.world.ballIds[ball])
            off = mm.position_addresses[ball] - self.base
            self.mirror[off:off + POSITION_SIZE] = mm.Encode_Position(pos)
            off = mm.count_addresses[ball] - self.base
            self.mirror[off:off + mm.count_size] = mm.Encode_Count(self.counts[ball])

    # ── checkpoints ──────────────────────────────────────────────────────

    def _slot_file(self, slot):
        if not c.CHECKPOINT_DIR:
            return None
        return Path(c.CHECKPOINT_DIR) / f"slot{slot}.bullet"

    def save_checkpoint(self, slot):
        try:
            state_id = p.saveState()
            path = self._slot_file(slot)
            if path is not None:
                path.parent.mkdir(parents=True, exist_ok=True)
                p.saveBullet(str(path))
        except (p.error, OSError) as e:
            raise CheckpointError(slot, str(e))
        old = self.slots.get(slot)
        if old is not None:
            try:
                p.removeState(old[0])
            except p.error as e:
                _debug('removeState failed:', repr(e))
        self.slots[slot] = (state_id, list(self.counts), list(self.parked))
        _debug('saved slot', slot, 'state', state_id)

    def load_checkpoint(self, slot):
        saved = self.slots.get(slot)
        try:
            if saved is not None:
                state_id, counts, parked = saved
                p.restoreState(stateId=state_id)
                self.counts = list(counts)
                self.parked = list(parked)
            else:
                path = self._slot_file(slot)
                if path is None or not path.exists():
                    raise CheckpointError(slot, "no such slot")
                p.restoreState(fileName=str(path))
                self.counts = [0] * len(BALL)
                self.parked = [False] * len(BALL)
        except p.error as e:
            raise CheckpointError(slot, str(e))
        self.rest_poses = [None] * len(BALL)
        self.trap_pending = True
        self.at_rest = False
        self.Sync_Mirror()
        _debug('loaded slot', slot)

    # ── callbacks ────────────────────────────────────────────────────────

    def on_tick(self, callback):
        self.tick_callbacks.append(callback)

    def set_trap(self, address, callback):
        if self.trap_address is None:
            raise ConfigurationError("the memory map has no trap address")
        if address != self.trap_address:
            raise ConfigurationError(
                f"the reference table only signals end of shot at {self.trap_address:#010x}, not {address:#010x}"
            )
        self.traps[address] = callback

    # ── physics ──────────────────────────────────────────────────────────

    def Park(self, ball, sunk):
        body = self.world.ballIds[ball]
        p.resetBasePositionAndOrientation(body, park_position(ball), [0, 0, 0, 1])
        p.resetBaseVelocity(body, [0, 0, 0], [0, 0, 0])
        self.parked[ball] = True
        self.rest_poses[ball] = None
        if sunk:
            self.counts[ball] = min(self.counts[ball] + 1, self.count_limit)
        _debug('ball', int(ball), 'sunk' if sunk else 'off table', 'frame', self.frame)

    def Step(self):
        """Advance one frame and update pockets, rest state and the mirror."""
        for _ in range(c.SUBSTEPS):
            p.stepSimulation()
        self.frame += 1

        r = c.BALL_RADIUS
        at_rest = True
        for ball in BALL:
            body = self.world.ballIds[ball]
            if self.parked[ball]:
                p.resetBasePositionAndOrientation(body, park_position(ball), [0, 0, 0, 1])
                p.resetBaseVelocity(body, [0, 0, 0], [0, 0, 0])
                continue
            (x, y, z), _ = p.getBasePositionAndOrientation(body)
            if any(math.hypot(x - px, z - pz) < c.POCKET_RADIUS for px, pz in POCKETS) and y > -r:
                self.Park(ball, sunk=True)
                continue
            if y < -4.0 * r:
                self.Park(ball, sunk=False)
                continue
            (vx, vy, vz), _ = p.getBaseVelocity(body)
            if math.hypot(vx, vz) < c.SLEEP_SPEED:
                if self.rest_poses[ball] is None:
                    self.rest_poses[ball] = p.getBasePositionAndOrientation(body)
                else:
                    p.resetBasePositionAndOrientation(body, *self.rest_poses[ball])
                p.resetBaseVelocity(body, [0, 0, 0], [0, 0, 0])
            else:
                self.rest_poses[ball] = None
                at_rest = False

        self.at_rest = at_rest
        self.Sync_Mirror()

    def Run(self, until=None, max_frames=None):
        """Step frames and deliver callbacks until `until()` is true or max_frames pass."""
        n = 0
        while max_frames is None or n < max_frames:
            self.Step()
            n += 1
            if self.at_rest and self.trap_pending:
                self.trap_pending = False
                cb = self.traps.get(self.trap_address)
                if cb is not None:
                    cb(self, self.trap_address)
            for cb in list(self.tick_callbacks):
                cb(self)
            if until is not None and until():
                break
            if self.use_gui and c.SLEEP_TIME:
                time.sleep(c.SLEEP_TIME)
        return n

    def Ball_Positions(self):
        return np.array([p.getBasePositionAndOrientation(b)[0] for b in self.world.ballIds], dtype=np.float32)

    def Disconnect(self):
        try:
            p.disconnect(self.physicsClient)
        except p.error as e:
            _debug('disconnect failed:', repr(e))
