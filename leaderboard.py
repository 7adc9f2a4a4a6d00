#!/usr/bin/env python3
"""
leaderboard.py

Top seeds of a seed-search trace, best score first (ties: earliest seed).

Usage:
    python3 leaderboard.py artifacts/traces/search.jsonl --top 20
"""

import argparse
import sys
from collections import Counter
from pathlib import Path

PROJECT = Path(__file__).resolve().parent
sys.path.insert(0, str(PROJECT))

from telemetry.trace import iter_trials


def rank(trials, top=20):
    """Sort by score descending, then by trial order; keep the first `top`."""
    indexed = list(enumerate(trials))
    indexed.sort(key=lambda it: (-int(it[1]["score"]), it[0]))
    return [t for _, t in indexed[:top]]


def print_leaderboard(trials, top=20):
    print("=" * 60)
    print(f"TOP {top} BREAKS")
    print("=" * 60)
    print(f"{'#':>3}  {'Score':>5}  {'Seed':<12} Counts (1-9)")
    print("-" * 60)
    for i, r in enumerate(rank(trials, top), 1):
        counts = " ".join(str(n) for n in r["counts"])
        print(f"{i:3d}  {r['score']:5d}  {int(r['seed']):#010x}   {counts}")

    dist = Counter(int(t["score"]) for t in trials)
    print(f"\n{'=' * 60}")
    print("SCORE BREAKDOWN")
    print("=" * 60)
    for score in sorted(dist, reverse=True):
        print(f"  {score:2d}: {dist[score]:6d}  ({dist[score] / len(trials) * 100:.1f}%)")


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("trace")
    ap.add_argument("--top", type=int, default=20)
    args = ap.parse_args()

    trials = list(iter_trials(Path(args.trace)))
    print(f"Total breaks: {len(trials)}\n")
    if not trials:
        return
    print_leaderboard(trials, args.top)


if __name__ == "__main__":
    main()
