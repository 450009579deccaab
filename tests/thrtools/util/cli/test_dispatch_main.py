import pytest
from unittest.mock import MagicMock

from thrtools.util.cli.dispatch_main import dispatch_main


def test_dispatch_to_command():

    cmd = MagicMock(return_value="done")
    result = dispatch_main({"thrfix": cmd}, argv=["thrfix", "a", "--b", "1"])

    assert result == "done"
    cmd.assert_called_once_with(["a", "--b", "1"])


def test_dispatch_invalid_command():

    cmd = MagicMock()
    with pytest.raises(SystemExit) as e:
        dispatch_main({"thrfix": cmd, "bigrun": cmd}, argv=["frobnicate"])

    # sys.exit with a string gives a non-zero status
    assert e.value.code != 0
    assert "frobnicate" in str(e.value.code)
    assert "bigrun" in str(e.value.code)
    cmd.assert_not_called()


def test_dispatch_no_command():

    with pytest.raises(SystemExit) as e:
        dispatch_main({"thrfix": MagicMock()}, argv=[])

    assert e.value.code != 0
    assert "usage" in str(e.value.code)


def test_dispatch_help(capsys):

    cmd = MagicMock()
    assert dispatch_main({"thrfix": cmd}, argv=["--help"]) is None

    out = capsys.readouterr().out
    assert "thrfix" in out
    cmd.assert_not_called()


def test_dispatch_uses_sys_argv(mocker):

    cmd = MagicMock(return_value=1)
    mocker.patch("sys.argv", ["thrtools", "bigrun", "x"])

    assert dispatch_main({"bigrun": cmd}) == 1
    cmd.assert_called_once_with(["x"])
