"""Tests for the high-level comparison helpers."""

import pytest

from damage_core.api import compare_builds, default_attack, default_build, make_coordinator
from damage_core.data import AC_RANGE, Die
from damage_core.models import Attack, Build
from damage_core.workers import Side


def test_default_build_matches_default_attack():
    build = default_build()

    assert build.attacks == [default_attack()]
    assert build.crit_enabled and not build.savage
    assert default_attack().dice[Die.D4] == 2
    assert default_attack().dice[Die.D8] == 1


def test_compare_builds_fills_in_cross_chances():
    strong = Build(attacks=[Attack(ab=10, flat=6, dice={Die.D10: 2})])
    weak = Build(attacks=[Attack(ab=4, flat=1, dice={Die.D4: 1})])

    result = compare_builds(strong, weak, sim_ac=16, desired_min_dmg=10)

    assert result.stats_a.greater_then_chance > result.stats_b.greater_then_chance
    total = (
        result.stats_a.greater_then_chance
        + result.stats_b.greater_then_chance
        + result.tie_chance
    )
    assert total == pytest.approx(1.0)
    assert result.means_a is None and result.means_b is None
    assert result.compute_seconds >= 0.0


def test_compare_builds_with_means():
    result = compare_builds(default_build(), Build(), include_means=True)

    assert len(result.means_a) == len(AC_RANGE)
    assert result.means_b == [0.0] * len(AC_RANGE)
    assert result.stats_b.pmf == {0: 1.0}


def test_compare_builds_rejects_negative_threshold():
    with pytest.raises(ValueError):
        compare_builds(default_build(), default_build(), desired_min_dmg=-2)


def test_make_coordinator_uses_default_builds():
    with make_coordinator(sim_ac=12, desired_min_dmg=3) as coordinator:
        assert coordinator.build(Side.A) == default_build()
        assert coordinator.build(Side.A) is not coordinator.build(Side.B)
        assert coordinator.sim_ac == 12
        assert coordinator.wait_until_settled(timeout=30)
