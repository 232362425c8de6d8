"""Algebra over discrete probability mass functions keyed by integer damage."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from functools import reduce
from itertools import accumulate

from .data import CumulativeDistribution, Die, ProbabilityMassFunction

# Distribution of a sum with no terms: all mass on zero.
IDENTITY: ProbabilityMassFunction = {0: 1.0}


def die_pmf(die: Die | int) -> ProbabilityMassFunction:
    """Return the uniform distribution over the faces ``1..sides`` of ``die``."""

    sides = int(die)
    return {face: 1.0 / sides for face in range(1, sides + 1)}


def convolve(a: ProbabilityMassFunction, b: ProbabilityMassFunction) -> ProbabilityMassFunction:
    """Return the distribution of ``X + Y`` for independent ``X ~ a`` and ``Y ~ b``."""

    result: ProbabilityMassFunction = {}
    for x, px in a.items():
        for y, py in b.items():
            result[x + y] = result.get(x + y, 0.0) + px * py
    return result


def convolve_many(pmfs: Iterable[ProbabilityMassFunction]) -> ProbabilityMassFunction:
    """Left-fold ``convolve`` over ``pmfs``.

    An empty input yields the convolution identity ``{0: 1.0}``, so a build with
    no attacks and an attack with no dice both resolve to "zero damage, certainly".
    """

    return reduce(convolve, pmfs, dict(IDENTITY))


def scale(pmf: ProbabilityMassFunction, factor: float) -> ProbabilityMassFunction:
    """Multiply every probability by ``factor``."""

    return {value: probability * factor for value, probability in pmf.items()}


def shift(pmf: ProbabilityMassFunction, offset: int) -> ProbabilityMassFunction:
    """Add ``offset`` to every outcome value."""

    return {value + offset: probability for value, probability in pmf.items()}


def merge(*pmfs: ProbabilityMassFunction) -> ProbabilityMassFunction:
    """Sum probability mass per outcome value across ``pmfs``."""

    result: ProbabilityMassFunction = {}
    for pmf in pmfs:
        for value, probability in pmf.items():
            result[value] = result.get(value, 0.0) + probability
    return result


def best_of_two(pmf: ProbabilityMassFunction) -> ProbabilityMassFunction:
    """Return the distribution of ``max(X, Y)`` for ``X, Y`` drawn independently from ``pmf``."""

    result: ProbabilityMassFunction = {}
    for x, px in pmf.items():
        for y, py in pmf.items():
            top = x if x >= y else y
            result[top] = result.get(top, 0.0) + px * py
    return result


def total_mass(pmf: ProbabilityMassFunction) -> float:
    return math.fsum(pmf.values())


def mean(pmf: ProbabilityMassFunction) -> float:
    return sum(value * probability for value, probability in pmf.items())


def variance(pmf: ProbabilityMassFunction) -> float:
    centre = mean(pmf)
    return sum((value - centre) ** 2 * probability for value, probability in pmf.items())


def std_dev(pmf: ProbabilityMassFunction) -> float:
    return math.sqrt(variance(pmf))


def greater_than(a: ProbabilityMassFunction, b: ProbabilityMassFunction) -> float:
    """Return ``P(A > B)`` for independent ``A ~ a`` and ``B ~ b``.

    Ties count for neither side; see ``tie_chance``.
    """

    probability = 0.0
    for a_value, a_probability in a.items():
        for b_value, b_probability in b.items():
            if a_value > b_value:
                probability += a_probability * b_probability
    return probability


def tie_chance(a: ProbabilityMassFunction, b: ProbabilityMassFunction) -> float:
    """Return ``P(A == B)`` for independent ``A ~ a`` and ``B ~ b``."""

    return sum(probability * b.get(value, 0.0) for value, probability in a.items())


def chance_at_least(pmf: ProbabilityMassFunction, threshold: int) -> float:
    """Return the probability mass on outcomes ``>= threshold``."""

    return sum(probability for value, probability in pmf.items() if value >= threshold)


def cdf(pmf: ProbabilityMassFunction) -> CumulativeDistribution:
    """Return ``(value, cumulative probability)`` pairs in ascending value order."""

    ordered: Sequence[tuple[int, float]] = sorted(pmf.items())
    running = accumulate(probability for _, probability in ordered)
    return [(value, cumulative) for (value, _), cumulative in zip(ordered, running)]
