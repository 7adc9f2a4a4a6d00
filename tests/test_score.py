import pytest

from score import SEARCH_RESULT, evaluate


def test_score_is_sum_of_nine_counts():
    assert evaluate((1, 0, 1, 1, 0, 0, 0, 0, 1)) == 4
    assert evaluate([0] * 9) == 0


def test_score_rejects_bad_counts():
    with pytest.raises(ValueError):
        evaluate((1, 2, 3))
    with pytest.raises(ValueError):
        evaluate((0, 0, 0, 0, -1, 0, 0, 0, 0))


def test_best_tracking_is_monotonic_and_ignores_ties():
    result = SEARCH_RESULT(origin_seed=0)
    best_scores, changed_at = [], []
    for i, score in enumerate([3, 5, 2, 7, 7, 6]):
        if result.Record(seed=i, score=score):
            changed_at.append(i)
        best_scores.append(result.best_score)
    assert best_scores == [3, 5, 5, 7, 7, 7]
    assert changed_at == [0, 1, 3]
    assert result.best_seed == 3
    assert result.trials == 6


def test_zero_score_never_replaces_origin():
    result = SEARCH_RESULT(origin_seed=40)
    assert result.Record(40, 0) is False
    assert result.Record(41, 0) is False
    assert (result.best_score, result.best_seed) == (0, 40)


def test_resume_keeps_previous_best():
    result = SEARCH_RESULT()
    result.Resume(best_score=6, best_seed=0x99)
    assert result.Record(0x100, 6) is False
    assert result.Record(0x101, 7) is True
    assert result.best_seed == 0x101
