import pytest
import pandas as pd

from thrtools.util.dataframe.check_columns import check_columns, MissingColumnError


def test_check_columns_ok():
    df = pd.DataFrame({"strain_lower": [], "Thr": [], "Growth": []})
    check_columns(df, ["Thr", "Growth"])


def test_check_columns_missing():
    df = pd.DataFrame({"strain_lower": [], "Thr": []})

    with pytest.raises(MissingColumnError) as e:
        check_columns(df, ["Thr", "Growth", "Suspect"])

    assert e.value.missing == ["Growth", "Suspect"]
    msg = str(e.value)
    assert "Growth" in msg
    assert "Suspect" in msg
    assert "Thr" not in msg


def test_missing_column_error_is_value_error():
    with pytest.raises(ValueError):
        check_columns(pd.DataFrame({"a": [1]}), ["b"])
