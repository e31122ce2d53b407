import numpy as np

from backpropnets.core.change import Change


def test_new_change_is_zero_and_shaped():
    change = Change.zeros(3, 2)
    assert change.shape == (3, 2)
    assert change.biases.shape == (3,)
    assert change.is_zero()
    assert change.samples == 0


def test_accumulate_sums_without_averaging():
    change = Change.zeros(2, 3, dtype=np.float64)
    errors = np.array([1.0, -2.0])
    previous = np.array([0.5, 1.0, 2.0])
    change.accumulate(errors, previous)
    change.accumulate(errors, previous)
    assert change.samples == 2
    assert np.allclose(change.weights, 2 * np.outer(errors, previous))
    assert np.allclose(change.biases, 2 * errors)
    assert not change.is_zero()
