import io
from types import SimpleNamespace

import pytest

from cfixture.options import FixtureOptions, parse_options
from cfixture.outcome import fail, ignore
from cfixture.runner import FixtureRunner, TestGroup, unity_main

UNKNOWN_COMMAND = ["testrunner.exe", "-v", "-g", "groupname", "-n", "testname",
                   "-r", "98", "-z"]


def make_template_group(state):
    group = TestGroup("mygroup")

    @group.setup
    def _setup():
        state["data"] = 0

    @group.teardown
    def _teardown():
        state["data"] = -1

    @group.test
    def test1():
        if state["data"] != 0:
            fail("Expected 0")

    @group.test
    def test2():
        if state["data"] != 0:
            fail("Expected 0")
        state["data"] = 5

    @group.test
    def test3():
        state["data"] = 7
        if state["data"] != 7:
            fail("Expected 7")

    return group


def test_template_group_passes_and_teardown_runs():
    state = {"data": -1}
    group = make_template_group(state)
    runner = FixtureRunner(FixtureOptions(), io.StringIO())
    group.run(runner)
    assert runner.number_of_tests == 3
    assert runner.failures == 0
    assert state["data"] == -1
    assert group.test_names == ["test1", "test2", "test3"]


def test_default_output_prints_dots():
    stream = io.StringIO()
    runner = FixtureRunner(FixtureOptions(), stream)
    make_template_group({"data": -1}).run(runner)
    assert stream.getvalue() == "..."


def test_verbose_output_names_each_test():
    stream = io.StringIO()
    runner = FixtureRunner(FixtureOptions(verbose=True), stream)
    make_template_group({"data": -1}).run(runner)
    assert stream.getvalue().splitlines() == [
        "TEST(mygroup, test1) PASS",
        "TEST(mygroup, test2) PASS",
        "TEST(mygroup, test3) PASS",
    ]


def test_silent_output_is_empty():
    stream = io.StringIO()
    runner = FixtureRunner(FixtureOptions(silent=True), stream)
    make_template_group({"data": -1}).run(runner)
    assert stream.getvalue() == ""
    assert runner.number_of_tests == 3


def test_pointer_setting_is_restored_after_test():
    holder = SimpleNamespace(pointer1=None, pointer2=2, pointer3=3)
    runner = FixtureRunner(FixtureOptions(), io.StringIO())
    seen = {}

    def body():
        runner.set_pointer(holder, "pointer1", "int1")
        runner.set_pointer(holder, "pointer2", "int2")
        runner.set_pointer(holder, "pointer3", "int3")
        runner.set_pointer(holder, "pointer1", "int4")
        seen["values"] = (holder.pointer1, holder.pointer2, holder.pointer3)

    runner.run_test(None, body, None, "UnityFixture", "PointerSetting")
    assert seen["values"] == ("int4", "int2", "int3")
    assert (holder.pointer1, holder.pointer2, holder.pointer3) == (None, 2, 3)
    assert runner.failures == 0


def test_too_many_pointers_fails_and_restores_the_rest():
    values = {f"p{i}": i for i in range(6)}
    stream = io.StringIO()
    runner = FixtureRunner(FixtureOptions(), stream)

    def body():
        for key in values:
            runner.set_pointer(values, key, "new")

    runner.run_test(None, body, None, "g", "n")
    assert runner.failures == 1
    assert "Too many pointers set" in stream.getvalue()
    assert values == {f"p{i}": i for i in range(6)}


def test_conclude_increments_fail_and_ignore_counts():
    runner = FixtureRunner(FixtureOptions(), io.StringIO())
    runner.current_failed = True
    runner.conclude()
    assert runner.current_failed is False
    runner.current_ignored = True
    runner.conclude()
    assert runner.failures == 1
    assert runner.ignores == 1
    assert runner.current_ignored is False


def test_failing_test_still_runs_teardown():
    stream = io.StringIO()
    runner = FixtureRunner(FixtureOptions(), stream)
    calls = []

    runner.run_test(lambda: calls.append("setup"),
                    lambda: fail("boom"),
                    lambda: calls.append("teardown"),
                    "g", "t")
    assert calls == ["setup", "teardown"]
    assert runner.failures == 1
    assert "TEST(g, t):FAIL: boom" in stream.getvalue()


def test_ignore_inside_body_counts_as_ignored():
    runner = FixtureRunner(FixtureOptions(), io.StringIO())
    runner.run_test(None, lambda: ignore("later"), None, "g", "t")
    assert runner.ignores == 1
    assert runner.failures == 0


def test_unexpected_exception_counts_as_failure():
    runner = FixtureRunner(FixtureOptions(), io.StringIO())

    def body():
        raise KeyError("missing")

    runner.run_test(None, body, None, "g", "t")
    assert runner.failures == 1


def test_ignore_decorator_does_not_run_body():
    stream = io.StringIO()
    group = TestGroup("UnityCommandOptions")
    ran = []

    @group.ignore
    def TestShouldBeIgnored():
        ran.append(True)
        fail("This test should not run!")

    runner = FixtureRunner(FixtureOptions(), stream)
    group.run(runner)
    assert ran == []
    assert runner.ignores == 1
    assert runner.number_of_tests == 1
    assert runner.failures == 0
    assert stream.getvalue() == "!"


def test_group_filter_really_filters():
    options = parse_options(UNKNOWN_COMMAND[:4])
    runner = FixtureRunner(options, io.StringIO())
    runner.ignore_test("non-matching", None)
    assert runner.number_of_tests == 0
    assert runner.ignores == 0


def test_name_filter_selects_substring():
    runner = FixtureRunner(FixtureOptions(name_filter="2"), io.StringIO())
    make_template_group({"data": -1}).run(runner)
    assert runner.number_of_tests == 1


@pytest.mark.parametrize("count", [3, 5])
def test_group_or_name_filter_without_string_fails(count):
    assert unity_main(UNKNOWN_COMMAND[:count], None, io.StringIO()) == 1


def test_unity_main_runs_groups_and_reports_summary():
    state = {"data": -1}
    group = make_template_group(state)
    stream = io.StringIO()
    result = unity_main(["prog"], group.run, stream)
    output = stream.getvalue()
    assert result == 0
    assert output.startswith("Unity test run 1 of 1\n...\n")
    assert "3 Tests 0 Failures 0 Ignored" in output
    assert output.endswith("OK\n")


def test_unity_main_repeats_runs():
    group = make_template_group({"data": -1})
    stream = io.StringIO()
    assert unity_main(["prog", "-r", "3"], group.run, stream) == 0
    output = stream.getvalue()
    assert "Unity test run 1 of 3" in output
    assert "Unity test run 3 of 3" in output
    assert output.count("3 Tests 0 Failures 0 Ignored") == 3


def test_unity_main_returns_failure_count():
    group = TestGroup("broken")

    @group.test
    def first():
        fail("first")

    @group.test
    def second():
        fail("second")

    @group.test
    def third():
        pass

    stream = io.StringIO()
    assert unity_main(["prog"], group.run, stream) == 2
    assert stream.getvalue().endswith("FAIL\n")
    assert "3 Tests 2 Failures 0 Ignored" in stream.getvalue()