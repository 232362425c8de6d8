"""Tests for the PMF algebra helpers."""

import math

import pytest

from damage_core.data import Die
from damage_core.pmf import (
    best_of_two,
    cdf,
    chance_at_least,
    convolve,
    convolve_many,
    die_pmf,
    greater_than,
    mean,
    merge,
    scale,
    shift,
    std_dev,
    tie_chance,
    total_mass,
    variance,
)


def _assert_pmf_equal(actual, expected):
    assert set(actual) == set(expected)
    for value, probability in expected.items():
        assert actual[value] == pytest.approx(probability)


def _samples():
    return [
        die_pmf(Die.D4),
        convolve(die_pmf(Die.D6), die_pmf(Die.D8)),
        shift(die_pmf(Die.D20), 3),
        {0: 0.4, 7: 0.35, 12: 0.25},
    ]


def test_die_pmf_is_uniform_over_faces():
    pmf = die_pmf(Die.D6)

    assert sorted(pmf) == [1, 2, 3, 4, 5, 6]
    assert all(p == pytest.approx(1 / 6) for p in pmf.values())
    assert total_mass(pmf) == pytest.approx(1.0)


def test_convolve_accumulates_colliding_sums():
    two_d6 = convolve(die_pmf(Die.D6), die_pmf(Die.D6))

    assert min(two_d6) == 2
    assert max(two_d6) == 12
    assert two_d6[7] == pytest.approx(6 / 36)
    assert two_d6[2] == pytest.approx(1 / 36)
    assert total_mass(two_d6) == pytest.approx(1.0)


@pytest.mark.parametrize("a", _samples())
@pytest.mark.parametrize("b", _samples())
def test_convolve_is_commutative(a, b):
    _assert_pmf_equal(convolve(a, b), convolve(b, a))


def test_convolve_many_of_nothing_is_the_identity():
    assert convolve_many([]) == {0: 1.0}
    d8 = die_pmf(Die.D8)
    _assert_pmf_equal(convolve(convolve_many([]), d8), d8)


def test_convolve_many_folds_left():
    d4, d6, d8 = die_pmf(Die.D4), die_pmf(Die.D6), die_pmf(Die.D8)

    _assert_pmf_equal(convolve_many([d4, d6, d8]), convolve(convolve(d4, d6), d8))
    _assert_pmf_equal(convolve_many([d4]), d4)


def test_scale_and_shift():
    pmf = {1: 0.5, 3: 0.5}

    assert scale(pmf, 0.2) == pytest.approx({1: 0.1, 3: 0.1})
    assert shift(pmf, 4) == {5: 0.5, 7: 0.5}


def test_merge_sums_mass_per_value():
    merged = merge({0: 0.25, 2: 0.25}, {2: 0.25, 5: 0.25})

    _assert_pmf_equal(merged, {0: 0.25, 2: 0.5, 5: 0.25})


def test_best_of_two_takes_the_higher_roll():
    _assert_pmf_equal(best_of_two({1: 0.5, 2: 0.5}), {1: 0.25, 2: 0.75})
    assert total_mass(best_of_two(die_pmf(Die.D20))) == pytest.approx(1.0)


@pytest.mark.parametrize("pmf", _samples())
def test_best_of_two_never_lowers_the_mean(pmf):
    assert mean(best_of_two(pmf)) >= mean(pmf)


def test_moments_of_a_d6():
    pmf = die_pmf(Die.D6)

    assert mean(pmf) == pytest.approx(3.5)
    assert variance(pmf) == pytest.approx(35 / 12)
    assert std_dev(pmf) == pytest.approx(math.sqrt(35 / 12))


@pytest.mark.parametrize("pmf", _samples())
@pytest.mark.parametrize("offset", [0, 1, 9])
def test_mean_shifts_linearly(pmf, offset):
    assert mean(shift(pmf, offset)) == pytest.approx(mean(pmf) + offset)
    assert variance(shift(pmf, offset)) == pytest.approx(variance(pmf))


def test_greater_than_excludes_ties():
    d6 = die_pmf(Die.D6)

    assert greater_than(d6, d6) == pytest.approx(15 / 36)
    assert tie_chance(d6, d6) == pytest.approx(6 / 36)


@pytest.mark.parametrize("a", _samples())
@pytest.mark.parametrize("b", _samples())
def test_greater_than_complement(a, b):
    total = greater_than(a, b) + greater_than(b, a) + tie_chance(a, b)

    assert total == pytest.approx(1.0)


def test_chance_at_least():
    d6 = die_pmf(Die.D6)

    assert chance_at_least(d6, 5) == pytest.approx(2 / 6)
    assert chance_at_least(d6, 0) == pytest.approx(1.0)
    assert chance_at_least(d6, 7) == 0


@pytest.mark.parametrize("pmf", _samples())
def test_cdf_is_monotonic_and_ends_at_one(pmf):
    result = cdf(pmf)
    values = [value for value, _ in result]
    cumulative = [probability for _, probability in result]

    assert values == sorted(set(values))
    assert all(b >= a for a, b in zip(cumulative, cumulative[1:]))
    assert cumulative[-1] == pytest.approx(1.0)


def test_cdf_of_empty_pmf_is_empty():
    assert cdf({}) == []
