"""High-level entry points used by the UI and callers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from time import perf_counter
from typing import Optional

from .aggregate import calc_build_means, calc_build_stats
from .data import DEFAULT_MIN_DMG, DEFAULT_SIM_AC
from .models import Attack, Build, Stats
from .pmf import greater_than, tie_chance
from .workers import Coordinator


def default_attack() -> Attack:
    """Return the attack a new build row starts from."""

    return Attack()


def default_build() -> Build:
    """Return a single-attack build with crits enabled."""

    return Build(attacks=[default_attack()], savage=False, crit_enabled=True)


@dataclass
class ComparisonResult:
    """Both builds' statistics evaluated against the same AC and threshold."""

    stats_a: Stats
    stats_b: Stats
    tie_chance: float
    means_a: Optional[list[float]]
    means_b: Optional[list[float]]
    compute_seconds: float


def compare_builds(
    build_a: Build,
    build_b: Build,
    sim_ac: int = DEFAULT_SIM_AC,
    desired_min_dmg: int = DEFAULT_MIN_DMG,
    include_means: bool = False,
) -> ComparisonResult:
    """Compute both builds' statistics synchronously, cross-comparison included.

    Parameters
    ----------
    build_a, build_b:
        The builds to compare.
    sim_ac:
        Armor class both builds attack.
    desired_min_dmg:
        Threshold for ``Stats.min_dmg_chance``.
    include_means:
        Also run the mean-per-AC survey for both builds.

    Raises
    ------
    ValueError
        If ``desired_min_dmg`` is negative.
    """

    if desired_min_dmg < 0:
        raise ValueError("Desired minimum damage must be non-negative.")

    compute_start = perf_counter()
    stats_a = calc_build_stats(build_a, sim_ac, desired_min_dmg)
    stats_b = calc_build_stats(build_b, sim_ac, desired_min_dmg)
    stats_a, stats_b = (
        replace(stats_a, greater_then_chance=greater_than(stats_a.pmf, stats_b.pmf)),
        replace(stats_b, greater_then_chance=greater_than(stats_b.pmf, stats_a.pmf)),
    )
    means_a = calc_build_means(build_a) if include_means else None
    means_b = calc_build_means(build_b) if include_means else None
    compute_seconds = perf_counter() - compute_start

    return ComparisonResult(
        stats_a=stats_a,
        stats_b=stats_b,
        tie_chance=tie_chance(stats_a.pmf, stats_b.pmf),
        means_a=means_a,
        means_b=means_b,
        compute_seconds=compute_seconds,
    )


def make_coordinator(
    build_a: Optional[Build] = None,
    build_b: Optional[Build] = None,
    sim_ac: int = DEFAULT_SIM_AC,
    desired_min_dmg: int = DEFAULT_MIN_DMG,
) -> Coordinator:
    """Factory that keeps the UI decoupled from the worker classes."""

    return Coordinator(
        build_a if build_a is not None else default_build(),
        build_b if build_b is not None else default_build(),
        sim_ac=sim_ac,
        desired_min_dmg=desired_min_dmg,
    )
