"""Command-line options that control a fixture test run."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from typing import Sequence

_LEADING_DIGITS = re.compile(r"[0-9]+")


class OptionError(ValueError):
    """Raised when the command line cannot be understood."""


@dataclass
class FixtureOptions:
    """Settings for a run: verbosity, filters and repeat count."""

    verbose: bool = False
    silent: bool = False
    repeat_count: int = 1
    name_filter: str | None = None
    group_filter: str | None = None

    def selects(self, group: str | None, name: str | None) -> bool:
        """Tell whether a test passes both the group and the name filter."""
        return _matches(self.group_filter, group) and _matches(self.name_filter, name)


def _matches(pattern: str | None, value: str | None) -> bool:
    if pattern is None:
        return True
    return value is not None and pattern in value


def parse_options(argv: Sequence[str] | None = None) -> FixtureOptions:
    """Parse a command line whose first item is the program name.

    ``-v`` verbose, ``-s`` silent, ``-g GROUP`` and ``-n NAME`` filter by
    substring, ``-r [COUNT]`` repeats (twice when no count follows).
    Unknown arguments are ignored.
    """
    if argv is None:
        argv = sys.argv
    options = FixtureOptions()
    args = iter(list(argv)[1:])
    pending: str | None = None

    while True:
        if pending is not None:
            arg, pending = pending, None
        else:
            arg = next(args, None)
            if arg is None:
                break
        if arg == "-v":
            options.verbose = True
        elif arg == "-s":
            options.silent = True
        elif arg in ("-g", "-n"):
            value = next(args, None)
            if value is None:
                raise OptionError(f"option {arg} requires a value")
            if arg == "-g":
                options.group_filter = value
            else:
                options.name_filter = value
        elif arg == "-r":
            options.repeat_count = 2
            following = next(args, None)
            if following is not None:
                digits = _LEADING_DIGITS.match(following)
                if digits:
                    options.repeat_count = int(digits.group())
                else:
                    pending = following
    return options