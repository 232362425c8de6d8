"""Damage distribution engine: PMF algebra, attack resolution, and background workers."""

from .aggregate import build_pmf, calc_build_means, calc_build_stats
from .api import (
    ComparisonResult,
    compare_builds,
    default_attack,
    default_build,
    make_coordinator,
)
from .attack import attack_pmf, damage_pmf, hit_chance
from .data import (
    AC_MAX,
    AC_MIN,
    AC_RANGE,
    CRIT_CHANCE,
    DEFAULT_MIN_DMG,
    DEFAULT_SIM_AC,
    DIE_ORDER,
    POLL_INTERVAL_SECONDS,
    CumulativeDistribution,
    Die,
    ProbabilityMassFunction,
)
from .frames import (
    PERCENTILE_MARKERS,
    cdf_percentile,
    cdf_step_frame,
    means_frame,
    percentile_frame,
    pmf_frame,
)
from .models import Attack, Build, Stats
from .workers import (
    ComputeJob,
    ComputeResult,
    Coordinator,
    ResultKind,
    Side,
    WorkerClosedError,
    WorkerError,
    WorkerFaultError,
)

__all__ = [
    "AC_MAX",
    "AC_MIN",
    "AC_RANGE",
    "CRIT_CHANCE",
    "DEFAULT_MIN_DMG",
    "DEFAULT_SIM_AC",
    "DIE_ORDER",
    "PERCENTILE_MARKERS",
    "POLL_INTERVAL_SECONDS",
    "Attack",
    "Build",
    "ComparisonResult",
    "ComputeJob",
    "ComputeResult",
    "Coordinator",
    "CumulativeDistribution",
    "Die",
    "ProbabilityMassFunction",
    "ResultKind",
    "Side",
    "Stats",
    "WorkerClosedError",
    "WorkerError",
    "WorkerFaultError",
    "attack_pmf",
    "build_pmf",
    "calc_build_means",
    "calc_build_stats",
    "cdf_percentile",
    "cdf_step_frame",
    "compare_builds",
    "damage_pmf",
    "default_attack",
    "default_build",
    "hit_chance",
    "make_coordinator",
    "means_frame",
    "percentile_frame",
    "pmf_frame",
]
