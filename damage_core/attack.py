"""Resolve a single attack into its damage distribution against a fixed AC."""

from __future__ import annotations

from .data import CRIT_CHANCE, D20_FACES, ProbabilityMassFunction
from .models import Attack
from .pmf import best_of_two, convolve_many, die_pmf, merge, scale, shift


def hit_chance(ab: int, ac: int) -> float:
    """Return the chance that ``d20 + ab`` hits ``ac``.

    A natural 1 always misses and a natural 20 always hits, whatever the
    modifier, so the result lies in ``[1/20, 19/20]``.
    """

    def hits(roll: int) -> bool:
        if roll == 1:
            return False
        if roll == D20_FACES:
            return True
        return roll + ab >= ac

    return sum(1 for roll in range(1, D20_FACES + 1) if hits(roll)) / D20_FACES


def damage_pmf(attack: Attack, *, critical: bool = False, savage: bool = False) -> ProbabilityMassFunction:
    """Return the damage distribution of one landed attack.

    Parameters
    ----------
    attack:
        Attack definition providing the dice pool and flat bonus.
    critical:
        Roll every die twice; the flat bonus is applied once.
    savage:
        Roll the damage twice and keep the higher total.
    """

    multiplier = 2 if critical else 1
    rolled = convolve_many(die_pmf(die) for die in attack.dice_instances(multiplier))
    pmf = shift(rolled, attack.flat)
    if savage:
        pmf = best_of_two(pmf)
    return pmf


def attack_pmf(attack: Attack, ac: int, crit_enabled: bool, savage: bool) -> ProbabilityMassFunction:
    """Return the complete miss/hit/crit damage distribution of ``attack`` against ``ac``."""

    chance = hit_chance(attack.ab, ac)
    crit_chance = CRIT_CHANCE if crit_enabled else 0.0
    split_hit_chance = chance - crit_chance

    branches = [scale(damage_pmf(attack, savage=savage), split_hit_chance)]
    if crit_chance > 0.0:
        branches.append(scale(damage_pmf(attack, critical=True, savage=savage), crit_chance))
    branches.append({0: 1.0 - chance})  # a miss deals nothing
    return merge(*branches)
