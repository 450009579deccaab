import pytest
import numpy as np

from thrtools.util.validation.check import (
    check_number,
    check_cutoffs,
    parse_flag,
    parse_float,
)

# ----------------------------------------------------------------------------
# test check_number
# ----------------------------------------------------------------------------

@pytest.mark.parametrize("value, kwargs, expected", [
    (5, {}, 5.0),
    (5.5, {"cast_type": int}, 5),
    ("1.2", {}, 1.2),
    (None, {"allow_none": True}, None),
    (0, {"min_allowed": 0}, 0.0),
    (10, {"max_allowed": 10}, 10.0),
    (0.1, {"min_allowed": 0, "inclusive_min": False}, 0.1),
])
def test_check_number_success(value, kwargs, expected):
    assert check_number(value, **kwargs) == expected


@pytest.mark.parametrize("value, kwargs, match", [
    (None, {"param_name": "alert"}, "alert cannot be None"),
    ([1, 2], {}, "Value must be a scalar"),
    ("abc", {}, "could not convert"),
    (np.nan, {}, "NaN"),
    (-1, {"min_allowed": 0}, "must be >= 0"),
    (0, {"min_allowed": 0, "inclusive_min": False}, "must be > 0"),
    (11, {"max_allowed": 10}, "must be <= 10"),
    (10, {"max_allowed": 10, "inclusive_max": False}, "must be < 10"),
])
def test_check_number_failures(value, kwargs, match):
    with pytest.raises(ValueError, match=match):
        check_number(value, **kwargs)

# ----------------------------------------------------------------------------
# test check_cutoffs
# ----------------------------------------------------------------------------

def test_check_cutoffs():
    assert check_cutoffs("1.2,2.0,4.0") == [1.2, 2.0, 4.0]
    assert check_cutoffs(" 1.2, 2 ") == [1.2, 2.0]
    assert check_cutoffs([0.5, 1]) == [0.5, 1.0]


@pytest.mark.parametrize("cutoffs, match", [
    ("", "at least one"),
    ("2.0,1.2", "strictly increasing"),
    ("1.2,1.2", "strictly increasing"),
    ("0,1.2", "must be > 0"),
    ("-1", "must be > 0"),
    ("1.2,x", "could not convert"),
])
def test_check_cutoffs_failures(cutoffs, match):
    with pytest.raises(ValueError, match=match):
        check_cutoffs(cutoffs)

# ----------------------------------------------------------------------------
# test parse_flag / parse_float
# ----------------------------------------------------------------------------

@pytest.mark.parametrize("value, expected", [
    ("Y", True),
    ("yes", True),
    (" TRUE ", True),
    ("1", True),
    ("x", True),
    ("", False),
    ("N", False),
    ("0", False),
    (None, False),
])
def test_parse_flag(value, expected):
    assert parse_flag(value) is expected


def test_parse_float():
    assert parse_float("1.5") == 1.5
    assert parse_float(" 2 ") == 2.0
    assert np.isnan(parse_float(""))
    assert np.isnan(parse_float(None))
    with pytest.raises(ValueError, match="abc"):
        parse_float("abc")
