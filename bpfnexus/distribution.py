"""Histogram binning of sampled argument values and rare-value conditions."""

from __future__ import annotations

import math
import sys
from collections.abc import Iterator, Mapping

GroupKey = tuple[int, str, int]
Bin = tuple[int, int]


def num_bins(count: int) -> int:
    """Number of bins for ``count`` samples by Sturges' rule, at least one."""
    if count < 1:
        return 1
    return max(int(math.log2(count)) + 1, 1)


def _find_bin(bins: list[Bin], value: int) -> Bin | None:
    last = len(bins) - 1
    for index, (start, end) in enumerate(bins):
        upper_ok = value <= end if index == last else value < end
        if start <= value and upper_ok:
            return (start, end)
    return None


class DistributionCalculator:
    """Keeps per-(sampler, function, argument) histograms of observed values."""

    def __init__(self) -> None:
        self.distributions: dict[GroupKey, list[tuple[Bin, int]]] = {}

    def compute_distribution(
        self, arg_counts: Mapping[tuple[int, str, int, int], int]
    ) -> None:
        """Rebuild the histogram of every group present in ``arg_counts``."""
        grouped: dict[GroupKey, dict[int, int]] = {}
        for (sampler_id, func, arg_number, value), count in arg_counts.items():
            if count <= 0:
                continue
            values = grouped.setdefault((sampler_id, func, arg_number), {})
            values[value] = values.get(value, 0) + count

        for key, values in grouped.items():
            total = sum(values.values())
            bin_count = num_bins(total)
            low, high = min(values), max(values)
            width = float(high - low) / bin_count

            bins: list[Bin] = []
            for index in range(bin_count):
                start = int(low + index * width)
                end = high if index == bin_count - 1 else int(start + width)
                bins.append((start, end))

            counts: dict[Bin, int] = {}
            for value, count in values.items():
                found = _find_bin(bins, value)
                if found is not None:
                    counts[found] = counts.get(found, 0) + count

            self.distributions[key] = sorted(counts.items())

    def _distribution_lines(self) -> Iterator[str]:
        for (sampler_id, func, arg_number), bins in sorted(self.distributions.items()):
            yield f"sampler{sampler_id}_{func}_arg{arg_number} Distribution:\n"
            for (start, end), count in bins:
                yield f"  ({start}, {end}): {count}\n"
            yield "\n"

    def format_distributions(self) -> str:
        """Return a readable listing of every histogram."""
        return "".join(self._distribution_lines())

    def print_distributions(self) -> None:
        """Write every histogram to standard output."""
        out = sys.stdout
        for line in self._distribution_lines():
            out.write(line)
        out.flush()

    def rare_arg_condition(self, sampler_id: int, func_name: str, arg_number: int) -> str:
        """Build a bpftrace condition matching the least populated tenth of the bins.

        Returns an empty string when no histogram exists for the key.
        """
        bins = self.distributions.get((sampler_id, func_name, arg_number))
        if not bins:
            return ""
        rare_count = max(math.ceil(len(bins) * 0.1), 1)
        rarest = sorted(bins, key=lambda item: item[1])[:rare_count]

        var = f"arg{arg_number}"
        conditions = []
        for (start, end), _ in rarest:
            if start == end:
                conditions.append(f"({var} == {start})")
            else:
                conditions.append(f"({var} >= {start} && {var} <= {end})")
        return " || ".join(conditions)