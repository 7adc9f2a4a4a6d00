#!/usr/bin/env python3
"""
analyze.py

Plots for a seed-search trace (see telemetry/trace.py).

Outputs:
    artifacts/plots/break_fig01_score_histogram.png
    artifacts/plots/break_fig02_best_of_n.png
    artifacts/plots/break_fig03_ball_sink_rate.png

Usage:
    python3 analyze.py artifacts/traces/search.jsonl
"""

import argparse
import sys
from pathlib import Path

import numpy as np

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

PROJECT = Path(__file__).resolve().parent
sys.path.insert(0, str(PROJECT))

from telemetry.trace import iter_trials

PLOT_DIR = PROJECT / "artifacts" / "plots"


def clean_ax(ax):
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)

def save_fig(fig, name, plot_dir=PLOT_DIR):
    plot_dir.mkdir(parents=True, exist_ok=True)
    path = plot_dir / name
    fig.savefig(path, dpi=100, bbox_inches="tight")
    plt.close(fig)
    print(f"  WROTE {path}")
    return path


def load_arrays(trace_path):
    """Seeds, scores and the (n, 9) count matrix of every trial in a trace."""
    seeds, scores, counts = [], [], []
    for ev in iter_trials(trace_path):
        seeds.append(int(ev["seed"]))
        scores.append(int(ev["score"]))
        counts.append([int(n) for n in ev["counts"]])
    return (np.array(seeds, dtype=np.int64),
            np.array(scores, dtype=np.int64),
            np.array(counts, dtype=np.int64).reshape(-1, 9))


def plot_all(trace_path, plot_dir=PLOT_DIR):
    seeds, scores, counts = load_arrays(trace_path)
    n = len(scores)
    if n == 0:
        print(f"[WARN] no trials in {trace_path}", flush=True)
        return []
    written = []

    # Fig 1: Score histogram
    fig, ax = plt.subplots(figsize=(7, 5))
    bins = np.arange(0, max(int(scores.max()), 9) + 2) - 0.5
    ax.hist(scores, bins=bins, color="#55A868", edgecolor="white", alpha=0.85)
    ax.axvline(np.median(scores), color="red", lw=1.2, ls="--",
               label=f"median={np.median(scores):.1f}")
    ax.set_xlabel("Balls sunk on the break")
    ax.set_ylabel("Count")
    ax.set_title(f"Break Score Distribution (n={n})")
    ax.legend(fontsize=9)
    clean_ax(ax)
    fig.tight_layout()
    written.append(save_fig(fig, "break_fig01_score_histogram.png", plot_dir))

    # Fig 2: Best-of-N curve
    fig, ax = plt.subplots(figsize=(8, 5))
    best_so_far = np.maximum.accumulate(scores)
    ax.step(np.arange(1, n + 1), best_so_far, where="post", color="#4C72B0", lw=1.5)
    best_i = int(np.argmax(scores))
    ax.axvline(best_i + 1, color="red", lw=1, ls="--",
               label=f"best {scores[best_i]} @ seed {seeds[best_i]:#010x}")
    ax.set_xlabel("Number of trials")
    ax.set_ylabel("Best score so far")
    ax.set_title("Seed Search: Best-of-N Curve")
    ax.legend(fontsize=9)
    clean_ax(ax)
    fig.tight_layout()
    written.append(save_fig(fig, "break_fig02_best_of_n.png", plot_dir))

    # Fig 3: How often each ball drops
    fig, ax = plt.subplots(figsize=(7, 5))
    rate = (counts > 0).mean(axis=0)
    ax.bar(np.arange(1, 10), rate, color="#C44E52", alpha=0.85)
    ax.set_xticks(np.arange(1, 10))
    ax.set_xlabel("Ball")
    ax.set_ylabel("Fraction of breaks sunk")
    ax.set_title("Per-Ball Sink Rate")
    clean_ax(ax)
    fig.tight_layout()
    written.append(save_fig(fig, "break_fig03_ball_sink_rate.png", plot_dir))

    return written


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("trace")
    ap.add_argument("--out", default=str(PLOT_DIR))
    args = ap.parse_args()
    plot_all(Path(args.trace), Path(args.out))


if __name__ == "__main__":
    main()
