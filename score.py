"""
score.py

Role:
    Score a resolved break and keep the best (seed, score) seen so far.

Rules:
    - score = sum of the nine numbered balls' resolved counts.
    - Only a strictly higher score replaces the best; the first seed to reach
      a score keeps it. best_score never decreases.
"""

from ball import NUMBERED


def evaluate(counts) -> int:
    counts = tuple(int(n) for n in counts)
    if len(counts) != len(NUMBERED):
        raise ValueError(f"expected {len(NUMBERED)} counts, got {len(counts)}")
    if any(n < 0 for n in counts):
        raise ValueError(f"resolved counts must be non-negative: {counts}")
    return sum(counts)


class SEARCH_RESULT:
    def __init__(self, origin_seed: int = 0):
        self.best_score = 0
        self.best_seed = int(origin_seed)
        self.trials = 0

    def Resume(self, best_score: int, best_seed: int) -> None:
        self.best_score = int(best_score)
        self.best_seed = int(best_seed)

    def Record(self, seed: int, score: int) -> bool:
        """Count one trial; return True if it is a new best."""
        self.trials += 1
        if score > self.best_score:
            self.best_score = int(score)
            self.best_seed = int(seed)
            return True
        return False

    def __repr__(self):
        return f"SEARCH_RESULT(best_score={self.best_score}, best_seed={self.best_seed:#010x}, trials={self.trials})"
