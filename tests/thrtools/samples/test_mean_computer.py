import pytest
import numpy as np

from thrtools.samples.mean_computer import (
    trimean,
    middle,
    sigma1,
    sigma2,
    max_value,
    mean_registry,
    get_mean_computer,
)


@pytest.mark.parametrize("values, expected", [
    ([1.0, 2.0, 3.0, 4.0, 5.0], 3.0),
    ([1.0, 2.0, 3.0, 10.0], 3.25),
    ([5.0, 1.0, 1.05], 2.025),
    ([3.0, 1.0, 2.0, 5.0, 4.0], 3.0),
])
def test_trimean(values, expected):
    assert trimean(values) == pytest.approx(expected)


def test_middle():
    assert middle([1.0, 2.0, 3.0, 10.0]) == pytest.approx(2.5)
    assert middle([2.0, 2.0, 2.0]) == 2.0
    assert middle([4.0, 0.0, 5.0, 6.0, 100.0]) == pytest.approx(5.0)


def test_sigma():
    values = [1.0]*9 + [20.0]
    assert sigma2(values) == pytest.approx(1.0)
    assert sigma1(values) == pytest.approx(1.0)

    values = [1.0, 2.0, 3.0, 4.0, 5.0]
    assert sigma1(values) == pytest.approx(3.0)
    assert sigma2(values) == pytest.approx(3.0)

    # identical values never leave an empty list
    assert sigma1([0.1, 0.1, 0.1]) == pytest.approx(0.1)


def test_max_value():
    assert max_value([1.0, 5.0, 2.0]) == 5.0
    assert max_value([1.0, 3.0]) == 3.0
    assert np.isnan(max_value([]))


@pytest.mark.parametrize("name", ["TRIMEAN", "MIDDLE", "SIGMA1", "SIGMA2"])
def test_short_lists(name):

    fcn = mean_registry[name]
    assert np.isnan(fcn([]))
    assert fcn([2.5]) == 2.5
    assert fcn([1.0, 3.0]) == 2.0


def test_get_mean_computer():
    assert get_mean_computer("TRIMEAN") is trimean
    assert get_mean_computer("max") is max_value
    assert set(mean_registry) == {"TRIMEAN", "MIDDLE", "SIGMA1", "SIGMA2", "MAX"}

    with pytest.raises(ValueError, match="MEDIAN"):
        get_mean_computer("MEDIAN")
