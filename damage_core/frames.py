"""Tabular views of distributions, shaped for the UI charts."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

import numpy as np
import pandas as pd

from .data import AC_RANGE, CumulativeDistribution, ProbabilityMassFunction

PERCENTILE_MARKERS: Final[tuple[float, ...]] = (0.25, 0.75, 0.95)


def pmf_frame(pmf: ProbabilityMassFunction) -> pd.DataFrame:
    """Return ``damage``/``probability`` rows sorted by damage."""

    ordered = sorted(pmf.items())
    return pd.DataFrame(
        {
            "damage": np.array([value for value, _ in ordered], dtype=int),
            "probability": np.array([probability for _, probability in ordered], dtype=float),
        }
    )


def cdf_step_frame(cdf: CumulativeDistribution) -> pd.DataFrame:
    """Return the corner points of the CDF drawn as a step line.

    The line starts at zero probability on the smallest outcome, holds each
    cumulative value until the next outcome, and ends on the last outcome.
    """

    if not cdf:
        return pd.DataFrame({"damage": pd.Series(dtype=int), "probability": pd.Series(dtype=float)})

    points: list[tuple[int, float]] = [(cdf[0][0], 0.0)]
    for (x1, y1), (x2, _) in zip(cdf, cdf[1:]):
        points.append((x1, y1))
        points.append((x2, y1))
    points.append(cdf[-1])
    return pd.DataFrame(points, columns=["damage", "probability"])


def cdf_percentile(cdf: CumulativeDistribution, quantile: float) -> int:
    """Return the smallest damage whose cumulative probability reaches ``quantile``.

    Returns 0 when the CDF is empty or never reaches the quantile.
    """

    for value, cumulative in cdf:
        if cumulative >= quantile:
            return value
    return 0


def percentile_frame(
    cdf: CumulativeDistribution,
    quantiles: Sequence[float] = PERCENTILE_MARKERS,
) -> pd.DataFrame:
    """Return one ``label``/``damage`` row per quantile marker."""

    return pd.DataFrame(
        {
            "label": [f"{round(q * 100)}th percentile" for q in quantiles],
            "damage": [cdf_percentile(cdf, q) for q in quantiles],
        }
    )


def means_frame(means: Sequence[float]) -> pd.DataFrame:
    """Return ``ac``/``mean`` rows for a mean-per-AC survey.

    Raises
    ------
    ValueError
        If ``means`` is neither empty nor one value per AC of the survey range.
    """

    if means and len(means) != len(AC_RANGE):
        raise ValueError(f"Expected {len(AC_RANGE)} means, received {len(means)}")
    acs = list(AC_RANGE) if means else []
    return pd.DataFrame({"ac": np.array(acs, dtype=int), "mean": np.array(means, dtype=float)})
