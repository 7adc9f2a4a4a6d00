#!/usr/bin/env python3
"""
replay_seed.py

Print the rack a seed produces: float positions, the offsets applied, and the
raw big-endian words that get poked into the console's memory. Handy for
checking a best seed against the emulator by hand.

Usage:
    python3 tools/replay_seed.py 0x1a2b
    python3 tools/replay_seed.py 17 --compare 18
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np

PROJECT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT))

import constants as c
from ball import BALL
from rack import generate


def rack_rows(seed: int):
    rack = generate(seed)
    bits = rack.Bits()
    rows = []
    for ball in BALL:
        x, y, z = (float(v) for v in rack.Get_Ball(ball))
        dx, dz = (float(v) for v in rack.offsets[ball])
        addr = c.POSITION_ADDRESSES[ball]
        words = " ".join(f"{int(w):08x}" for w in bits[ball])
        rows.append((ball.name, x, y, z, dx, dz, addr, words))
    return rows


def cmd_show(seed: int):
    print(f"seed {seed:#010x}")
    print(f"{'ball':<6}{'x':>12}{'y':>10}{'z':>12}{'dx':>11}{'dz':>11}  {'address':<11} words")
    for name, x, y, z, dx, dz, addr, words in rack_rows(seed):
        print(f"{name:<6}{x:12.6f}{y:10.4f}{z:12.6f}{dx:+11.6f}{dz:+11.6f}  {addr:#010x}  {words}")


def cmd_compare(a: int, b: int):
    ra, rb = generate(a), generate(b)
    d = np.abs(ra.positions - rb.positions)
    print(f"{a:#010x} vs {b:#010x}: max |dx|={d[:, 0].max():.6f} max |dz|={d[:, 2].max():.6f}"
          f" identical={ra == rb}")


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("seed", type=lambda s: int(s, 0))
    ap.add_argument("--compare", type=lambda s: int(s, 0), default=None)
    args = ap.parse_args()
    cmd_show(args.seed)
    if args.compare is not None:
        print()
        cmd_compare(args.seed, args.compare)


if __name__ == "__main__":
    main()
