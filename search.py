#!/usr/bin/env python3
"""
search.py

Brute-force seed search for the best nine-ball break.

Role:
    SEARCH_ENGINE is the controller. The host (emulator or the pybullet table
    in simulation.py) calls it every frame (poll strategy) or when the
    end-of-shot trap fires (trap strategy). Each trial:

        restore baseline -> write RACK(seed) -> host runs the break
        -> settle detector fires -> score, maybe save best slot
        -> restore baseline -> seed += 1 -> next trial

States:
    UNINITIALIZED -> READY -> AWAITING_RESOLUTION -> RESOLVED -> RESTORED
    -> (AWAITING_RESOLUTION ...). The loop never ends on its own; the host is
    stopped from outside, or `stop_after` trials have been scored.

Errors:
    AccessError and a failed baseline restore propagate (a trial that did not
    start from the baseline cannot be scored). A failed best-slot save is
    reported and the search goes on.

Usage:
    python3 search.py                      # poll strategy, seed 0, forever
    python3 search.py --strategy trap --trials 500
    python3 search.py --resume artifacts/traces/search.jsonl
"""

from __future__ import annotations

import argparse
import os
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

import constants as c
from errors import CheckpointError, ConfigurationError
from host import print_report
from memory_map import MemoryMap
from rack import SEED_MASK, generate
from score import SEARCH_RESULT, evaluate
from settle import Make_Detector


class SearchState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    AWAITING_RESOLUTION = "awaiting_resolution"
    RESOLVED = "resolved"
    RESTORED = "restored"


class SEARCH_ENGINE:
    """Owns the seed counter, the baseline and the best result for one search."""

    def __init__(
        self,
        host,
        memory_map: MemoryMap,
        detector,
        reporter: Optional[Callable[[str], None]] = print_report,
        trace=None,
        baseline_mode: str = "checkpoint",
        baseline_slot=11,
        best_slot=10,
        start_slot=-1,
        stop_after: Optional[int] = None,
    ):
        self.host = host
        self.memory_map = memory_map
        self.detector = detector
        self.reporter = reporter
        self.trace = trace
        self.baseline_mode = baseline_mode
        self.baseline_slot = baseline_slot
        self.best_slot = best_slot
        self.start_slot = start_slot
        self.stop_after = stop_after

        self.state = SearchState.UNINITIALIZED
        self.seed = 0
        self.result = SEARCH_RESULT(0)
        self.baseline_region: Optional[bytes] = None
        self.baseline_positions = None
        self.running = False
        self.trials_this_run = 0

    @classmethod
    def From_Constants(cls, host, consts=c, strategy=None, memory_map=None, **kwargs) -> "SEARCH_ENGINE":
        """Engine configured from constants.py; keyword arguments win."""
        kwargs.setdefault("baseline_mode", consts.BASELINE_MODE)
        kwargs.setdefault("baseline_slot", consts.BASELINE_SLOT)
        kwargs.setdefault("best_slot", consts.BEST_SLOT)
        kwargs.setdefault("start_slot", consts.START_SLOT)
        detector = Make_Detector(strategy or consts.STRATEGY, consts.IDLE_THRESHOLD)
        if memory_map is None:
            memory_map = MemoryMap.From_Constants(consts)
        return cls(host, memory_map, detector, **kwargs)

    # ── setup ────────────────────────────────────────────────────────────

    def Init(self, origin_seed: int = 0, resume=None) -> None:
        """Validate, capture the baseline, hook the host and start seed `origin_seed`.

        resume: optional (next_seed, best_score, best_seed) from a previous run;
        it overrides origin_seed.
        """
        self.memory_map.Validate(self.detector.strategy, self.baseline_mode)
        if self.baseline_mode == "checkpoint" and self.baseline_slot == self.best_slot:
            raise ConfigurationError(f"baseline and best result share slot {self.best_slot!r}")
        if self.start_slot is not None and self.start_slot != -1 and self.start_slot == self.best_slot:
            raise ConfigurationError(f"start slot and best result share slot {self.best_slot!r}")

        if self.start_slot is not None and self.start_slot != -1:
            self.host.load_checkpoint(self.start_slot)
        self.Capture_Baseline()

        self.seed = int(origin_seed) & SEED_MASK
        self.result = SEARCH_RESULT(self.seed)
        if resume is not None:
            next_seed, best_score, best_seed = resume
            self.seed = int(next_seed) & SEED_MASK
            self.result.Resume(best_score, best_seed)
            print(f"[SEARCH] resuming at seed {self.seed:#010x}, best {best_score} @ {best_seed:#010x}", flush=True)
        self.state = SearchState.READY
        self.running = True
        self.trials_this_run = 0

        if self.detector.strategy == "trap":
            self.host.set_trap(self.memory_map.trap_address, self.Trap)
        else:
            self.host.on_tick(self.Tick)

        print(f"[SEARCH] init: strategy={self.detector.strategy} baseline={self.baseline_mode} "
              f"seed={self.seed:#010x}", flush=True)
        self.Begin_Trial()

    def Capture_Baseline(self) -> None:
        if self.baseline_mode == "region":
            self.baseline_region = bytes(
                self.host.read_memory(self.memory_map.region_base, self.memory_map.region_size)
            )
        else:
            self.host.save_checkpoint(self.baseline_slot)
        self.baseline_positions = self.memory_map.Read_Positions(self.host)

    def Restore_Baseline(self) -> None:
        if self.baseline_mode == "region":
            self.host.write_memory(self.memory_map.region_base, self.baseline_region)
        else:
            self.host.load_checkpoint(self.baseline_slot)

    # ── trial loop ───────────────────────────────────────────────────────

    def Begin_Trial(self) -> None:
        rack = generate(self.seed)
        self.memory_map.Write_Rack(self.host, rack)
        self.detector.Arm()
        self.state = SearchState.AWAITING_RESOLUTION
        if os.getenv("SIM_DEBUG", "0") == "1":
            print(f"[SEARCH] trial seed={self.seed:#010x}", flush=True)

    def Tick(self, host=None) -> None:
        """Per-frame host callback (poll strategy)."""
        if self.state is not SearchState.AWAITING_RESOLUTION:
            return
        event = self.detector.Observe(self.memory_map.Read_Observation(self.host))
        if event is not None:
            self.Handle_Resolution(event)

    def Trap(self, host=None, address=None) -> None:
        """Breakpoint host callback (trap strategy)."""
        if self.state is not SearchState.AWAITING_RESOLUTION:
            return
        event = self.detector.Trap(self.memory_map.Read_Counts(self.host))
        if event is not None:
            self.Handle_Resolution(event)

    def Handle_Resolution(self, event) -> None:
        self.state = SearchState.RESOLVED
        seed = self.seed
        score = evaluate(event.counts)
        improved = self.result.Record(seed, score)
        if improved:
            self.Save_Best()

        self.Report(f"SCORE: {score}, SEED: {seed:#010x} | BEST: {self.result.best_score}")
        self.Report(" ".join(str(n) for n in event.counts) + f" - {score} {seed}")
        if self.trace is not None:
            self.trace.trial(seed, event.counts, score, self.result.best_score, self.result.best_seed, improved)

        self.Restore_Baseline()
        self.state = SearchState.RESTORED
        self.seed = (seed + 1) & SEED_MASK
        self.trials_this_run += 1

        if self.stop_after is not None and self.trials_this_run >= self.stop_after:
            self.running = False
            return
        self.Begin_Trial()

    def Save_Best(self) -> None:
        try:
            self.host.save_checkpoint(self.best_slot)
        except CheckpointError as e:
            msg = f"best result {self.result.best_score} @ {self.seed:#010x} not saved: {e}"
            print("[WARN]", msg, flush=True)
            if self.trace is not None:
                self.trace.warning(msg, seed=self.seed)
            return
        print(f"[BEST] {self.result.best_score} @ seed {self.seed:#010x} -> slot {self.best_slot}", flush=True)

    def Report(self, message: str) -> None:
        if self.reporter is None:
            return
        try:
            self.reporter(message)
        except Exception as e:
            if os.getenv("SIM_DEBUG", "0") == "1":
                print("[WARN]", __name__, "reporter failed:", repr(e), flush=True)


def main(argv=None):
    ap = argparse.ArgumentParser(description="Search break seeds on the pybullet reference table.")
    ap.add_argument("--strategy", choices=["poll", "trap"], default=c.STRATEGY)
    ap.add_argument("--origin", type=lambda s: int(s, 0), default=c.ORIGIN_SEED)
    ap.add_argument("--trials", type=int, default=None, help="stop after N trials (default: run forever)")
    ap.add_argument("--trace", default=c.TRACE_OUT)
    ap.add_argument("--resume", default=None, help="continue from the last trial of a trace file")
    ap.add_argument("--gui", action="store_true")
    args = ap.parse_args(argv)

    if args.gui:
        os.environ["HEADLESS"] = "0"
    else:
        os.environ.setdefault("HEADLESS", "1")

    from simulation import SIMULATION
    from telemetry.trace import TraceWriter, resume_point

    resume = None
    if args.resume:
        resume = resume_point(Path(args.resume))
        if resume is None:
            print(f"[WARN] no trials in {args.resume}; starting at {args.origin:#010x}", flush=True)

    memory_map = MemoryMap.From_Constants()
    sim = SIMULATION(memory_map)
    trace = TraceWriter(
        Path(args.trace),
        run_meta={"strategy": args.strategy, "origin": args.origin, "baseline_mode": c.BASELINE_MODE},
        append=bool(args.resume) and Path(args.trace) == Path(args.resume),
    )
    engine = SEARCH_ENGINE.From_Constants(
        sim,
        strategy=args.strategy,
        memory_map=memory_map,
        trace=trace,
        stop_after=args.trials,
    )
    try:
        engine.Init(args.origin, resume=resume)
        sim.Run(until=lambda: not engine.running, max_frames=c.MAX_FRAMES or None)
    except KeyboardInterrupt:
        print("\n[SEARCH] interrupted", flush=True)
    finally:
        trace.close()
        sim.Disconnect()

    r = engine.result
    print(f"[SEARCH] {engine.trials_this_run} trials, best {r.best_score} @ seed {r.best_seed:#010x}", flush=True)


if __name__ == "__main__":
    main()
