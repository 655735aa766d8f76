import pytest

from bpfnexus.distribution import DistributionCalculator, num_bins


@pytest.mark.parametrize("k", range(0, 12))
def test_num_bins_powers_of_two(k):
    assert num_bins(2**k) == k + 1


def test_num_bins_never_below_one():
    assert num_bins(0) == 1
    assert num_bins(1) == 1


def test_num_bins_monotonic():
    results = [num_bins(n) for n in range(1, 500)]
    assert results == sorted(results)


def test_single_value_makes_one_degenerate_bin():
    calc = DistributionCalculator()
    calc.compute_distribution({(1, "ioctl", 1, 5): 4})
    assert calc.distributions[(1, "ioctl", 1)] == [((5, 5), 4)]
    assert calc.rare_arg_condition(1, "ioctl", 1) == "(arg1 == 5)"


def test_two_values_split_into_two_bins():
    calc = DistributionCalculator()
    calc.compute_distribution({(0, "f", 2, 0): 5, (0, "f", 2, 10): 1})
    assert calc.distributions[(0, "f", 2)] == [((0, 5), 5), ((5, 10), 1)]
    assert calc.rare_arg_condition(0, "f", 2) == "(arg2 >= 5 && arg2 <= 10)"


def test_missing_group_gives_empty_condition():
    calc = DistributionCalculator()
    calc.compute_distribution({(0, "f", 2, 0): 1})
    assert calc.rare_arg_condition(0, "f", 3) == ""
    assert calc.rare_arg_condition(9, "f", 2) == ""


def test_groups_are_kept_apart():
    calc = DistributionCalculator()
    calc.compute_distribution({(0, "f", 1, 3): 2, (1, "f", 1, 8): 6, (0, "g", 1, 4): 1})
    assert set(calc.distributions) == {(0, "f", 1), (1, "f", 1), (0, "g", 1)}
    assert calc.distributions[(1, "f", 1)] == [((8, 8), 6)]


def test_counts_never_exceed_samples_and_bins_sorted():
    arg_counts = {(2, "w", 1, value): (value % 3) + 1 for value in range(0, 200, 7)}
    calc = DistributionCalculator()
    calc.compute_distribution(arg_counts)
    bins = calc.distributions[(2, "w", 1)]
    assert sum(count for _, count in bins) <= sum(arg_counts.values())
    assert [b for b, _ in bins] == sorted(b for b, _ in bins)
    assert all(start <= end for (start, end), _ in bins)
    assert len(bins) <= num_bins(sum(arg_counts.values()))


def test_non_positive_counts_ignored():
    calc = DistributionCalculator()
    calc.compute_distribution({(0, "f", 1, 3): 0})
    assert calc.distributions == {}


def test_recompute_replaces_group():
    calc = DistributionCalculator()
    calc.compute_distribution({(0, "f", 1, 3): 2})
    calc.compute_distribution({(0, "f", 1, 7): 1})
    assert calc.distributions[(0, "f", 1)] == [((7, 7), 1)]


def test_format_and_print_distributions(capsys):
    calc = DistributionCalculator()
    calc.compute_distribution({(1, "ioctl", 1, 5): 4})
    text = calc.format_distributions()
    assert text == "sampler1_ioctl_arg1 Distribution:\n  (5, 5): 4\n\n"
    calc.print_distributions()
    assert capsys.readouterr().out == text


def test_rare_condition_parts_are_joined_with_or():
    arg_counts = {(3, "h", 4, value): 1 + value for value in range(0, 2000, 3)}
    calc = DistributionCalculator()
    calc.compute_distribution(arg_counts)
    condition = calc.rare_arg_condition(3, "h", 4)
    parts = condition.split(" || ")
    assert len(parts) >= 1
    assert all(part.startswith("(arg4 ") and part.endswith(")") for part in parts)