# cfixture

A small fixture-style test harness: named test groups with setup and
teardown, a runner that filters tests by group and name and repeats whole
runs, restoration of attributes changed during a test, and a guarded
allocator that catches leaks and buffer overruns in simulated memory.

## Install

```
pip install .
pip install ".[test]"   # with pytest, to run the package's own tests
```

## Writing tests

```python
import sys

from cfixture.outcome import fail
from cfixture.runner import TestGroup, unity_main

state = {"data": -1}
mygroup = TestGroup("mygroup")

@mygroup.setup
def _setup():
    state["data"] = 0

@mygroup.teardown
def _teardown():
    state["data"] = -1

@mygroup.test
def test1():
    if state["data"] != 0:
        fail("expected 0")

@mygroup.ignore
def not_ready():
    fail("this test should not run")

def run_all_tests(runner):
    mygroup.run(runner)

if __name__ == "__main__":
    sys.exit(unity_main(sys.argv, run_all_tests, sys.stdout))
```

`TestGroup.test` and `TestGroup.ignore` register functions under their own
names; `TestGroup.run(runner)` runs them in registration order.

Inside a test, `cfixture.outcome.fail(message)` raises `TestFailure` and
`cfixture.outcome.ignore(message)` raises `TestIgnored`. Any other exception
that escapes setup, the test body or teardown also fails the test. If setup
or the body stops, teardown still runs, and so does the restoration of
values set with `set_pointer`.

`unity_main(argv, run_all_tests, stream)` parses the argument list, runs the
tests through a `FixtureRunner` and returns the number of failed tests in the
last run, or 1 when the argument list is malformed. Each run ends with a
summary such as `3 Tests 0 Failures 1 Ignored` followed by `OK` or `FAIL`.

## Command-line options

The argument list is read by `cfixture.options.parse_options`, whose first
item is the program name:

| option      | effect                                                    |
|-------------|-----------------------------------------------------------|
| `-v`        | verbose: print each test's name and `PASS`                |
| `-s`        | silent: no progress characters                            |
| `-g TEXT`   | run only groups whose name contains `TEXT`                |
| `-n TEXT`   | run only tests whose name contains `TEXT`                 |
| `-r [N]`    | repeat the whole run `N` times (2 when `N` is left out)   |

Unknown options are ignored. A `-g` or `-n` with no value after it raises
`OptionError`. The result is a `FixtureOptions`, whose `selects(group, name)`
applies both filters.

Without `-v`, a passing test prints `.` and an ignored one prints `!`.

## Restoring attributes

`FixtureRunner.set_pointer(target, attribute, value)` sets an attribute (or
an item, when `target` is a mutable mapping) for the rest of the current test
and puts back the old value after teardown.
`cfixture.pointers.PointerStore` does the same outside a runner: it holds at
most `capacity` changes (5 by default), raises `TestFailure("Too many
pointers set")` beyond that, and `undo_all` restores them newest first.

## Guarded allocation

`cfixture.memory.GuardedAllocator` hands out `Block` objects. Given a
`heap_size`, blocks come from one fixed heap that is released only from its
end; without it, each block has its own memory. Each block carries guard
bytes before and after its data; `free` and `realloc` raise `TestFailure`
when a guard was overwritten, and `end_test` raises `TestFailure("This test
leaks!")` when blocks are still live. `fail_after(n)` lets `n` more
allocations succeed and then makes them fail, for testing out-of-memory
paths. `malloc`, `calloc` and `realloc` return `None` when allocation fails.

```python
from cfixture.memory import GuardedAllocator

heap = GuardedAllocator(256)
heap.start_test()
block = heap.malloc(10)
block[0] = 0x41
heap.free(block)
heap.end_test()
```

## What it does not do

There is no installed command and no test discovery: a test program builds
its groups, calls `unity_main` itself, and decides what to do with the
returned count. There is no assertion library beyond `fail` and `ignore`;
tests check their own conditions.