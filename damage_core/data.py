"""Domain constants, die definitions, and shared type aliases."""

from __future__ import annotations

from enum import IntEnum
from typing import Final


class Die(IntEnum):
    """Polyhedral die, valued by its face count."""

    D4 = 4
    D6 = 6
    D8 = 8
    D10 = 10
    D20 = 20

    @property
    def label(self) -> str:
        return self.name


DIE_ORDER: Final[tuple[Die, ...]] = (Die.D4, Die.D6, Die.D8, Die.D10, Die.D20)

# Armor class survey range, inclusive-exclusive.
AC_MIN: Final[int] = 10
AC_MAX: Final[int] = 24
AC_RANGE: Final[range] = range(AC_MIN, AC_MAX)

D20_FACES: Final[int] = 20
CRIT_CHANCE: Final[float] = 1.0 / D20_FACES

DEFAULT_SIM_AC: Final[int] = 18
DEFAULT_MIN_DMG: Final[int] = 15

DEFAULT_ATTACK_BONUS: Final[int] = 10
DEFAULT_FLAT_DAMAGE: Final[int] = 5
DEFAULT_DICE: Final[dict[Die, int]] = {
    Die.D4: 2,
    Die.D6: 0,
    Die.D8: 1,
    Die.D10: 0,
    Die.D20: 0,
}

# Seconds between coordinator ticks in the UI.
POLL_INTERVAL_SECONDS: Final[float] = 0.25

ProbabilityMassFunction = dict[int, float]
CumulativeDistribution = list[tuple[int, float]]
DiceCounts = dict[Die, int]
