"""Parsing of sampler map dumps printed by bpftrace."""

from __future__ import annotations

import re
import sys
from collections.abc import Iterator
from pathlib import Path

ArgKey = tuple[int, str, int, int]

_PATTERN = re.compile(
    r"@sampler(\d+)_([a-zA-Z0-9]+)_arg(\d+)\[(\d+)\]: (\d+)", re.ASCII
)

_INT_MAX = 2**31 - 1
_LLONG_MAX = 2**63 - 1


class LogParser:
    """Accumulates sampler counts keyed by (sampler id, function, arg number, value)."""

    def __init__(self) -> None:
        self.arg_counts: dict[ArgKey, int] = {}

    def _record(self, match: re.Match[str]) -> None:
        sampler_id = int(match[1])
        function_name = match[2]
        arg_number = int(match[3])
        arg_value = int(match[4])
        count = int(match[5])
        if (
            sampler_id > _INT_MAX
            or arg_number > _INT_MAX
            or count > _INT_MAX
            or arg_value > _LLONG_MAX
        ):
            print(
                f"Error converting log values: out of range -> {match[0]}",
                file=sys.stderr,
            )
            return
        key = (sampler_id, function_name, arg_number, arg_value)
        self.arg_counts[key] = self.arg_counts.get(key, 0) + count

    def parse_string(self, data: str) -> None:
        """Record every sampler entry found anywhere in ``data``."""
        for match in _PATTERN.finditer(data):
            self._record(match)

    def parse_file(self, filename: str | Path) -> None:
        """Record the first sampler entry of each line of a log file."""
        with open(filename, encoding="utf-8", errors="replace") as handle:
            for line in handle:
                match = _PATTERN.search(line.rstrip("\n"))
                if match is not None:
                    self._record(match)

    def _result_lines(self) -> Iterator[str]:
        for (sid, func, argno, value), count in sorted(self.arg_counts.items()):
            yield f"sampler{sid}_{func}_arg{argno}[{value}]: {count}\n"

    def format_results(self) -> str:
        """Return the accumulated counts, one line per key, in key order."""
        return "".join(self._result_lines())

    def print_results(self) -> None:
        """Write the accumulated counts to standard output."""
        out = sys.stdout
        for line in self._result_lines():
            out.write(line)
        out.flush()