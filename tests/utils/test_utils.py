import logging

from pytest import raises

from sliceview.utils import assert_type, log_exception, logger, round_half_up


def test_round_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(1.5) == 2
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2
    assert round_half_up(-0.5) == 0
    assert round_half_up(-0.51) == -1
    assert isinstance(round_half_up(3.0), int)


def test_assert_type():
    assert_type("foo", 3, int)
    assert_type("foo", 3, str, int)
    assert_type("foo", None, None, int)

    with raises(TypeError) as err:
        assert_type("foo", "bar", int)
    assert "'foo'" in str(err.value)
    assert "int" in str(err.value)

    with raises(TypeError) as err:
        assert_type("foo", 3.0, None, int)
    assert "or None" in str(err.value)


def test_log_exception(caplog):
    with caplog.at_level(logging.ERROR, logger="sliceview"):
        for _ in range(3):
            with log_exception("Error in test"):
                raise ValueError("this specific test failure")

    messages = [r.getMessage() for r in caplog.records if r.name == logger.name]
    assert len(messages) == 3
    assert messages[0] == "Error in test"
    # Repeated errors are summarized on one line, with a count
    assert "this specific test failure" in messages[1]
    assert messages[2].endswith("(3)")


def test_version():
    import sliceview

    assert sliceview.version_info[:3] == (0, 1, 0)
    assert sliceview.__version__.startswith("0.1.0")
