"""Tests for attack and build validation and editing helpers."""

import pytest

from damage_core.data import DIE_ORDER, Die
from damage_core.models import Attack, Build, Stats


def test_attack_dice_are_canonical_and_complete():
    attack = Attack(ab=3, flat=1, dice={Die.D20: 1, 6: 2})

    assert list(attack.dice) == list(DIE_ORDER)
    assert attack.dice == {Die.D4: 0, Die.D6: 2, Die.D8: 0, Die.D10: 0, Die.D20: 1}


@pytest.mark.parametrize(
    "kwargs",
    [
        {"flat": -1},
        {"dice": {Die.D4: -2}},
        {"dice": {7: 1}},
    ],
)
def test_attack_rejects_invalid_values(kwargs):
    with pytest.raises(ValueError):
        Attack(**kwargs)


def test_default_attack_average_damage():
    # 5 flat + 2d4 + 1d8
    assert Attack().average_damage() == pytest.approx(14.5)


def test_dice_instances_expand_counts():
    attack = Attack(dice={Die.D4: 2, Die.D10: 1})

    assert attack.dice_instances() == [Die.D4, Die.D4, Die.D10]
    assert attack.dice_instances(2) == [Die.D4] * 4 + [Die.D10] * 2


def test_with_count_returns_a_copy():
    attack = Attack(dice={Die.D6: 1})

    updated = attack.with_count(Die.D6, 3)

    assert updated.dice[Die.D6] == 3
    assert attack.dice[Die.D6] == 1


def test_build_clone_is_independent():
    build = Build(attacks=[Attack()], savage=True)

    clone = build.clone()
    build.attacks[0].dice[Die.D4] = 9
    build.attacks.append(Attack())

    assert clone == Build(attacks=[Attack()], savage=True)
    assert clone.attacks[0] is not build.attacks[0]


def test_add_attack_copies_the_last_row():
    build = Build(attacks=[Attack(ab=7, flat=2, dice={Die.D8: 3})])

    added = build.add_attack()

    assert added == build.attacks[0]
    assert added is not build.attacks[0]
    added.dice[Die.D8] = 1
    assert build.attacks[0].dice[Die.D8] == 3


def test_add_attack_to_empty_build_uses_default():
    build = Build()

    build.add_attack()

    assert build.attacks == [Attack()]


def test_remove_attack():
    build = Build(attacks=[Attack(ab=1), Attack(ab=2)])

    removed = build.remove_attack(0)

    assert removed.ab == 1
    assert [attack.ab for attack in build.attacks] == [2]


def test_empty_stats_placeholder():
    stats = Stats.empty()

    assert stats.pmf == {}
    assert stats.cdf == []
    assert stats.mean == 0.0
