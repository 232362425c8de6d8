"""Dataclasses shared across the resolver, aggregator, and worker modules."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from .data import (
    DEFAULT_ATTACK_BONUS,
    DEFAULT_DICE,
    DEFAULT_FLAT_DAMAGE,
    DIE_ORDER,
    CumulativeDistribution,
    DiceCounts,
    Die,
    ProbabilityMassFunction,
)


def normalize_dice(dice: Mapping[Die | int, int]) -> DiceCounts:
    """Return a die-count mapping with one entry per die type in canonical order.

    Parameters
    ----------
    dice:
        Mapping from die (or its face count) to the number of dice rolled on a hit.
        Missing die types default to zero.

    Raises
    ------
    ValueError
        If a key is not a supported die or a count is negative.
    """

    counts: DiceCounts = {die: 0 for die in DIE_ORDER}
    for key, count in dice.items():
        try:
            die = Die(key)
        except ValueError as exc:
            raise ValueError(f"Unknown die '{key}'") from exc
        count = int(count)
        if count < 0:
            raise ValueError(f"Die count for {die.label} must be non-negative, received {count}")
        counts[die] = count
    return counts


@dataclass
class Attack:
    """One attack action: a d20 roll against AC followed by a damage roll on a hit."""

    ab: int = DEFAULT_ATTACK_BONUS
    flat: int = DEFAULT_FLAT_DAMAGE
    dice: DiceCounts = field(default_factory=lambda: dict(DEFAULT_DICE))

    def __post_init__(self) -> None:
        self.ab = int(self.ab)
        self.flat = int(self.flat)
        if self.flat < 0:
            raise ValueError(f"Flat damage must be non-negative, received {self.flat}")
        self.dice = normalize_dice(self.dice)

    def dice_instances(self, multiplier: int = 1) -> list[Die]:
        """Expand the dice pool into one entry per physical die, in canonical order."""

        instances: list[Die] = []
        for die, count in self.dice.items():
            instances.extend([die] * (count * multiplier))
        return instances

    def average_damage(self) -> float:
        """Expected damage of a normal hit."""

        return self.flat + sum(count * (die + 1) / 2.0 for die, count in self.dice.items())

    def with_count(self, die: Die | int, count: int) -> Attack:
        """Return a copy with the count for ``die`` replaced."""

        dice = dict(self.dice)
        dice[Die(die)] = count
        return replace(self, dice=dice)


@dataclass
class Build:
    """A character's full attack routine for one turn."""

    attacks: list[Attack] = field(default_factory=list)
    savage: bool = False
    crit_enabled: bool = True

    def clone(self) -> Build:
        """Return an independent value copy safe to hand to another thread."""

        return Build(
            attacks=[replace(attack, dice=dict(attack.dice)) for attack in self.attacks],
            savage=self.savage,
            crit_enabled=self.crit_enabled,
        )

    def add_attack(self) -> Attack:
        """Append a copy of the last attack (or a default one) and return it."""

        if self.attacks:
            last = self.attacks[-1]
            attack = replace(last, dice=dict(last.dice))
        else:
            attack = Attack()
        self.attacks.append(attack)
        return attack

    def remove_attack(self, index: int) -> Attack:
        return self.attacks.pop(index)


@dataclass
class Stats:
    """Computed snapshot for one build at one simulated AC."""

    pmf: ProbabilityMassFunction
    cdf: CumulativeDistribution
    mean: float
    std_dev: float
    greater_then_chance: float
    min_dmg_chance: float

    @classmethod
    def empty(cls) -> Stats:
        """Placeholder shown before the first result arrives."""

        return cls(
            pmf={},
            cdf=[],
            mean=0.0,
            std_dev=0.0,
            greater_then_chance=0.0,
            min_dmg_chance=0.0,
        )
