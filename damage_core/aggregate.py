"""Combine a build's attacks into one turn of damage and derive its statistics."""

from __future__ import annotations

from .attack import attack_pmf
from .data import AC_RANGE, ProbabilityMassFunction
from .models import Build, Stats
from .pmf import cdf, chance_at_least, convolve_many, mean, std_dev


def build_pmf(build: Build, ac: int) -> ProbabilityMassFunction:
    """Return the damage distribution of every attack in ``build`` landing against ``ac``."""

    return convolve_many(
        attack_pmf(attack, ac, build.crit_enabled, build.savage) for attack in build.attacks
    )


def calc_build_stats(build: Build, sim_ac: int, desired_min_dmg: int) -> Stats:
    """Compute the statistics bundle for ``build`` at ``sim_ac``.

    ``greater_then_chance`` needs the opposing build and is left at zero for the
    coordinator to fill in.
    """

    pmf = build_pmf(build, sim_ac)
    return Stats(
        pmf=pmf,
        cdf=cdf(pmf),
        mean=mean(pmf),
        std_dev=std_dev(pmf),
        greater_then_chance=0.0,
        min_dmg_chance=chance_at_least(pmf, desired_min_dmg),
    )


def calc_build_means(build: Build) -> list[float]:
    """Return the mean turn damage of ``build`` for each AC of the survey range, ascending."""

    return [mean(build_pmf(build, ac)) for ac in AC_RANGE]
