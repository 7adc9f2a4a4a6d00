from pathlib import Path

import analyze
import leaderboard
from telemetry.trace import TraceWriter, iter_trace, iter_trials, resume_point


def write_trials(path, scores, start=0, **kw):
    trace = TraceWriter(path, **kw)
    best_score, best_seed = 0, start
    for i, score in enumerate(scores):
        seed = start + i
        improved = score > best_score
        if improved:
            best_score, best_seed = score, seed
        counts = [1] * score + [0] * (9 - score)
        trace.trial(seed, counts, score, best_score, best_seed, improved)
    trace.close()


def test_meta_then_trials(tmp_path):
    path = tmp_path / "deep" / "trace.jsonl"
    write_trials(path, [2, 5], run_meta={"strategy": "poll"})
    events = list(iter_trace(path))
    assert events[0] == {"type": "meta", "strategy": "poll"}
    assert [ev["score"] for ev in iter_trials(path)] == [2, 5]


def test_bad_lines_are_skipped(tmp_path, capsys):
    path = tmp_path / "trace.jsonl"
    write_trials(path, [1])
    with path.open("a", encoding="utf-8") as f:
        f.write("{not json\n\n")
    assert len(list(iter_trace(path))) == 1
    assert "[WARN]" in capsys.readouterr().err


def test_resume_point_follows_last_trial(tmp_path):
    path = tmp_path / "trace.jsonl"
    write_trials(path, [3, 7, 4], start=10)
    assert resume_point(path) == (13, 7, 11)


def test_resume_point_of_empty_trace(tmp_path):
    path = tmp_path / "trace.jsonl"
    TraceWriter(path, run_meta={"origin": 0}).close()
    assert resume_point(path) is None


def test_resume_point_wraps_seed(tmp_path):
    path = tmp_path / "trace.jsonl"
    write_trials(path, [1], start=0xFFFFFFFF)
    assert resume_point(path) == (0, 1, 0xFFFFFFFF)


def test_append_mode_keeps_earlier_trials(tmp_path):
    path = tmp_path / "trace.jsonl"
    write_trials(path, [1, 2])
    write_trials(path, [3], start=2, append=True)
    assert [ev["seed"] for ev in iter_trials(path)] == [0, 1, 2]


def test_warning_record(tmp_path):
    path = tmp_path / "trace.jsonl"
    trace = TraceWriter(path)
    trace.warning("slot busy", seed=4)
    trace.close()
    assert list(iter_trace(path)) == [{"type": "warning", "message": "slot busy", "seed": 4}]


def test_rank_breaks_ties_by_trial_order():
    trials = [{"seed": s, "score": sc} for s, sc in [(5, 2), (6, 4), (7, 4), (8, 1)]]
    assert [t["seed"] for t in leaderboard.rank(trials, top=3)] == [6, 7, 5]


def test_plot_all_writes_three_figures(tmp_path):
    path = tmp_path / "trace.jsonl"
    write_trials(path, [0, 3, 1, 6, 2])
    written = analyze.plot_all(path, tmp_path / "plots")
    assert [Path(p).name for p in written] == [
        "break_fig01_score_histogram.png",
        "break_fig02_best_of_n.png",
        "break_fig03_ball_sink_rate.png",
    ]
    assert all(Path(p).stat().st_size > 0 for p in written)


def test_plot_all_without_trials(tmp_path):
    path = tmp_path / "trace.jsonl"
    TraceWriter(path, run_meta={}).close()
    assert analyze.plot_all(path, tmp_path / "plots") == []
