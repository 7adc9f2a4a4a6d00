import numpy as np
import pytest

from ball import CANONICAL_POSITIONS
from errors import ConfigurationError
from settle import IDLE_DETECTOR, TRAP_DETECTOR, Make_Detector, Observation, ShotResolved

COUNTS = (0, 1, 0, 1, 0, 0, 0, 0, 1, 0)


def obs(shift=0.0, y=None, counts=COUNTS):
    pos = CANONICAL_POSITIONS.copy()
    pos[:, 0] += np.float32(shift)
    if y is not None:
        pos[:, 1] = np.float32(y)
    return Observation.Normalized(pos, counts)


def test_y_is_zeroed_before_comparison():
    a, b = obs(y=2.8785), obs(y=-40.0)
    assert np.all(a.positions[:, 1] == 0.0)
    assert a == b


def test_counts_take_part_in_comparison():
    assert obs() != obs(counts=(0,) * 10)


def test_comparison_is_bitwise():
    a = Observation.Normalized(np.zeros((10, 3), dtype=np.float32), (0,) * 10)
    neg = np.zeros((10, 3), dtype=np.float32)
    neg[0, 0] = -0.0
    assert a != Observation.Normalized(neg, (0,) * 10)


def test_four_identical_samples_fire_once():
    det = IDLE_DETECTOR(threshold=3)
    samples = [obs(), obs(), obs(), obs(), obs(shift=1.0)]
    events = [det.Observe(s) for s in samples]
    fired = [i for i, e in enumerate(events) if e is not None]
    assert fired == [3]
    assert events[3] == ShotResolved(COUNTS[1:])


def test_three_identical_samples_do_not_fire():
    det = IDLE_DETECTOR()
    assert [det.Observe(s) for s in (obs(), obs(), obs(), obs(shift=0.5))] == [None] * 4


def test_motion_resets_idle_count():
    det = IDLE_DETECTOR()
    seq = [obs(), obs(), obs(), obs(shift=0.1), obs(shift=0.1), obs(shift=0.1)]
    assert all(det.Observe(s) is None for s in seq)
    assert det.idle_count == 2
    assert det.Observe(obs(shift=0.1)) is not None


def test_idle_count_goes_negative_after_firing():
    det = IDLE_DETECTOR()
    for _ in range(4):
        event = det.Observe(obs())
    assert event is not None
    assert det.idle_count == -1
    # still identical: restarts from zero instead of firing again
    assert det.Observe(obs()) is None
    assert det.idle_count == 0
    assert [det.Observe(obs()) for _ in range(2)] == [None, None]
    assert det.Observe(obs()) is not None


def test_threshold_must_be_positive():
    with pytest.raises(ConfigurationError):
        IDLE_DETECTOR(threshold=0)


def test_trap_fires_only_when_armed():
    det = TRAP_DETECTOR()
    assert det.Trap((1,) * 9) is None
    det.Arm()
    assert det.Trap((1, 0, 0, 0, 0, 0, 0, 0, 2)) == ShotResolved((1, 0, 0, 0, 0, 0, 0, 0, 2))
    assert det.Trap((1,) * 9) is None


def test_make_detector_selects_strategy():
    assert isinstance(Make_Detector("poll", 5), IDLE_DETECTOR)
    assert Make_Detector("poll", 5).threshold == 5
    assert isinstance(Make_Detector("trap"), TRAP_DETECTOR)
    with pytest.raises(ConfigurationError):
        Make_Detector("psychic")
