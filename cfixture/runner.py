"""Running grouped fixture tests with setup, teardown and pointer restoration."""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, TextIO

from cfixture.options import FixtureOptions, OptionError, parse_options
from cfixture.outcome import TestFailure, TestIgnored
from cfixture.pointers import PointerStore

TestFunction = Callable[[], Any]

_SEPARATOR = "-----------------------"


class FixtureRunner:
    """Runs fixture tests, counts results and writes progress to a stream."""

    def __init__(self, options: FixtureOptions | None = None,
                 stream: TextIO | None = None) -> None:
        self.options = options if options is not None else FixtureOptions()
        self.stream = stream if stream is not None else sys.stdout
        self.pointers = PointerStore()
        self.number_of_tests = 0
        self.failures = 0
        self.ignores = 0
        self.current_failed = False
        self.current_ignored = False
        self._current_name: str | None = None

    def _write(self, text: str) -> None:
        self.stream.write(text)

    def _report(self, status: str, message: str) -> None:
        prefix = self._current_name or ""
        line = f"{prefix}:{status}"
        if message:
            line += f": {message}"
        self._write(line)

    def _protect(self, *steps: TestFunction | None) -> None:
        """Run the given steps in order, skipping absent ones, recording the
        first failure or ignore that stops them."""
        try:
            for step in steps:
                if step is not None:
                    step()
        except TestIgnored as exc:
            self.current_ignored = True
            self._report("IGNORE", exc.message)
        except TestFailure as exc:
            self.current_failed = True
            self._report("FAIL", exc.message)
        except Exception as exc:  # an unexpected error fails the test
            self.current_failed = True
            self._report("FAIL", f"Unhandled exception {type(exc).__name__}: {exc}")

    def run_test(self, setup: TestFunction | None, body: TestFunction,
                 teardown: TestFunction | None, group: str, name: str,
                 printable_name: str | None = None) -> None:
        """Run one test if it passes the filters: setup and body, then teardown."""
        if not self.options.selects(group, name):
            return
        if printable_name is None:
            printable_name = f"TEST({group}, {name})"
        self._current_name = printable_name
        if self.options.verbose:
            self._write(printable_name)
            self._current_name = None
        elif not self.options.silent:
            self._write(".")

        self.number_of_tests += 1
        self.pointers.reset()

        self._protect(setup, body)
        self._protect(teardown)
        self._protect(self.pointers.undo_all)
        self.conclude()

    def ignore_test(self, group: str | None, name: str | None,
                    printable_name: str | None = None) -> None:
        """Count a test as ignored, without running it, if it passes the filters."""
        if not self.options.selects(group, name):
            return
        self.number_of_tests += 1
        self.ignores += 1
        if self.options.verbose:
            if printable_name is None:
                printable_name = f"IGNORE_TEST({group}, {name})"
            self._write(printable_name + "\n")
        elif not self.options.silent:
            self._write("!")

    def conclude(self) -> None:
        """Count the outcome of the current test and clear its state."""
        if self.current_ignored:
            self.ignores += 1
            self._write("\n")
        elif not self.current_failed:
            if self.options.verbose:
                self._write(" PASS\n")
        else:
            self.failures += 1
            self._write("\n")
        self.current_failed = False
        self.current_ignored = False
        self._current_name = None

    def set_pointer(self, target: Any, attribute: Any, value: Any) -> None:
        """Replace a value for the rest of the current test; restored after teardown."""
        self.pointers.set(target, attribute, value)

    def _begin(self) -> None:
        self.number_of_tests = 0
        self.failures = 0
        self.ignores = 0
        self.current_failed = False
        self.current_ignored = False
        self._current_name = None

    def _end(self) -> None:
        self._write(f"\n{_SEPARATOR}\n")
        self._write(f"{self.number_of_tests} Tests {self.failures} Failures "
                    f"{self.ignores} Ignored \n")
        self._write("OK\n" if self.failures == 0 else "FAIL\n")

    def run(self, run_all_tests: Callable[[FixtureRunner], Any] | None,
            program_name: str = "") -> int:
        """Run every test as many times as asked; return the last run's failures."""
        self.program_name = program_name
        repeat = self.options.repeat_count
        for run_number in range(repeat):
            self._begin()
            self._write(f"Unity test run {run_number + 1} of {repeat}\n")
            if run_all_tests is not None:
                run_all_tests(self)
            if not self.options.verbose:
                self._write("\n")
            self._end()
        return self.failures


@dataclass
class _Entry:
    name: str
    body: TestFunction
    ignored: bool


class TestGroup:
    """A named set of tests sharing one setup and one teardown."""

    __test__ = False

    def __init__(self, name: str) -> None:
        self.name = name
        self._setup: TestFunction | None = None
        self._teardown: TestFunction | None = None
        self._entries: list[_Entry] = []

    def setup(self, func: TestFunction) -> TestFunction:
        """Register the function run before each test of the group."""
        self._setup = func
        return func

    def teardown(self, func: TestFunction) -> TestFunction:
        """Register the function run after each test of the group."""
        self._teardown = func
        return func

    def test(self, func: TestFunction) -> TestFunction:
        """Register a test, named after the function."""
        self._entries.append(_Entry(func.__name__, func, False))
        return func

    def ignore(self, func: TestFunction) -> TestFunction:
        """Register a test that is counted as ignored and never run."""
        self._entries.append(_Entry(func.__name__, func, True))
        return func

    @property
    def test_names(self) -> list[str]:
        """Names of the registered tests, in registration order."""
        return [entry.name for entry in self._entries]

    def run(self, runner: FixtureRunner) -> None:
        """Run the group's tests in the order they were registered."""
        for entry in self._entries:
            if entry.ignored:
                runner.ignore_test(self.name, entry.name,
                                   f"IGNORE_TEST({self.name}, {entry.name})")
            else:
                runner.run_test(self._setup, entry.body, self._teardown,
                                self.name, entry.name,
                                f"TEST({self.name}, {entry.name})")


def unity_main(argv: Sequence[str] | None = None,
               run_all_tests: Callable[[FixtureRunner], Any] | None = None,
               stream: TextIO | None = None) -> int:
    """Parse the command line and run the tests; return the failure count.

    Returns 1 when the command line is malformed.
    """
    if argv is None:
        argv = sys.argv
    try:
        options = parse_options(argv)
    except OptionError:
        return 1
    runner = FixtureRunner(options, stream)
    program_name = argv[0] if argv else ""
    return runner.run(run_all_tests, program_name)