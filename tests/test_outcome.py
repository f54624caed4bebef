import pytest

from cfixture import outcome


def test_fail_raises_failure_with_message():
    with pytest.raises(outcome.TestFailure) as info:
        outcome.fail("This Test Should Fail")
    assert info.value.message == "This Test Should Fail"
    assert str(info.value) == "This Test Should Fail"


def test_ignore_raises_ignored_with_message():
    with pytest.raises(outcome.TestIgnored) as info:
        outcome.ignore("This Test Should Be Ignored")
    assert info.value.message == "This Test Should Be Ignored"


def test_failure_is_not_caught_as_ignored():
    caught = []
    with pytest.raises(outcome.TestFailure):
        try:
            outcome.fail("boom")
        except outcome.TestIgnored as exc:
            caught.append(exc)
    assert caught == []


def test_ignored_is_not_an_assertion():
    with pytest.raises(outcome.TestIgnored):
        try:
            outcome.ignore("skip me")
        except AssertionError:
            pytest.fail("ignore must not look like a failed assertion")


def test_failure_records_line():
    exc = outcome.TestFailure("Too many pointers set", line=42)
    assert exc.line == 42
    assert exc.message == "Too many pointers set"
    assert outcome.TestFailure("x").line is None