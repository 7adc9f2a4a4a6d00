"""telemetry.trace

Helpers for writing and reading the JSONL trace produced by a seed search.

Record types:
    {"type": "meta", ...}      once, at the start of a run
    {"type": "trial", "seed", "counts", "score", "best_score", "best_seed", "improved"}
    {"type": "warning", "message", "seed"}
"""

from __future__ import annotations
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple


@dataclass
class TraceWriter:
    path: Path
    run_meta: Optional[Dict[str, Any]] = None
    append: bool = False

    def __post_init__(self):
        self.path = Path(self.path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.f = self.path.open("a" if self.append else "w", encoding="utf-8")
        if self.run_meta is not None:
            self.write({"type": "meta", **self.run_meta})

    def write(self, event: Dict[str, Any]) -> None:
        self.f.write(json.dumps(event, ensure_ascii=False) + "\n")
        self.f.flush()

    def trial(self, seed: int, counts, score: int, best_score: int, best_seed: int, improved: bool) -> None:
        self.write({
            "type": "trial",
            "seed": int(seed),
            "counts": [int(n) for n in counts],
            "score": int(score),
            "best_score": int(best_score),
            "best_seed": int(best_seed),
            "improved": bool(improved),
        })

    def warning(self, message: str, seed: Optional[int] = None) -> None:
        self.write({"type": "warning", "message": str(message), "seed": seed})

    def close(self) -> None:
        try:
            self.f.close()
        except Exception:
            pass


def iter_trace(path: Path) -> Iterable[Dict[str, Any]]:
    with Path(path).open("r", encoding="utf-8") as f:
        for ln, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                ev = json.loads(line)
            except json.JSONDecodeError:
                print(f"[WARN] JSON decode failed at {path}:{ln}", file=sys.stderr, flush=True)
                continue
            yield ev


def iter_trials(path: Path) -> Iterable[Dict[str, Any]]:
    for ev in iter_trace(path):
        if ev.get("type") == "trial":
            yield ev


def resume_point(path: Path) -> Optional[Tuple[int, int, int]]:
    """(next_seed, best_score, best_seed) after the last trial in a trace, or None."""
    last = None
    for ev in iter_trials(path):
        last = ev
    if last is None:
        return None
    next_seed = (int(last["seed"]) + 1) & 0xFFFFFFFF
    return next_seed, int(last["best_score"]), int(last["best_seed"])
