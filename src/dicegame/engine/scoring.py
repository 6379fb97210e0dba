"""
Second Chance Dice - Scoring Engine

Pure functions that turn a roll into a base score plus a combination bonus.
Two bonus rules exist and each is a stateless class:

BonusRichScoring (used by the second-chance rulesets):
    - One die showing 6: +1
    - Two or more dice: every 6 adds +1 (stacking)
    - Any other face shown 2-5 times: face × (count - 1)

SingleSixScoring (used by the final-round ruleset):
    - Exactly one 6 among the dice: +1
    - Any face shown 2-5 times, including a repeated 6: face × (count - 1)

The base score is always the sum of the faces.
"""

from collections import Counter
from typing import Sequence

from dicegame.engine.base import (
    DiceRoll,
    ScoringBreakdown,
    ScoringCategory,
    ScoringResult,
)
from dicegame.engine.validators import validate_dice_values


_MATCH_CATEGORIES = {
    2: ScoringCategory.PAIR,
    3: ScoringCategory.THREE_OF_A_KIND,
    4: ScoringCategory.FOUR_OF_A_KIND,
    5: ScoringCategory.FIVE_OF_A_KIND,
}

_MATCH_LABELS = {
    2: "Pair of",
    3: "Three",
    4: "Four",
    5: "Five",
}


def _values_of(dice: Sequence[int] | DiceRoll) -> tuple[int, ...]:
    if isinstance(dice, DiceRoll):
        return dice.values
    return validate_dice_values(dice)


def _match_bonus(face: int, count: int) -> ScoringBreakdown | None:
    """Bonus for one face value shown more than once, or None."""
    if count not in _MATCH_CATEGORIES:
        return None
    points = face * (count - 1)
    return ScoringBreakdown(
        category=_MATCH_CATEGORIES[count],
        face=face,
        count=count,
        points=points,
        description=f"{_MATCH_LABELS[count]} {face}s: +{points}",
    )


def _six_bonus(count: int, points: int) -> ScoringBreakdown:
    if count == 1:
        description = f"Six bonus: +{points}"
    else:
        description = f"{count} sixes: +{points}"
    return ScoringBreakdown(
        category=ScoringCategory.SIX_BONUS,
        face=6,
        count=count,
        points=points,
        description=description,
    )


def _result(values: tuple[int, ...], breakdown: list[ScoringBreakdown]) -> ScoringResult:
    return ScoringResult(
        base_score=sum(values),
        bonus=sum(item.points for item in breakdown),
        breakdown=tuple(breakdown),
    )


class BonusRichScoring:
    """
    Multi-die bonus rule where every six counts.

    All methods are class methods operating on immutable data.
    """

    SIX_BONUS_PER_DIE = 1

    @classmethod
    def calculate_score(cls, dice: Sequence[int] | DiceRoll) -> ScoringResult:
        """
        Calculate base score and bonus for a roll.

        Args:
            dice: Dice values to score (sequence or DiceRoll)

        Returns:
            ScoringResult with the face sum, bonus and bonus breakdown
        """
        values = _values_of(dice)
        breakdown: list[ScoringBreakdown] = []

        if len(values) == 1:
            if values[0] == 6:
                breakdown.append(_six_bonus(1, cls.SIX_BONUS_PER_DIE))
            return _result(values, breakdown)

        counts = Counter(values)
        if counts[6]:
            breakdown.append(_six_bonus(counts[6], counts[6] * cls.SIX_BONUS_PER_DIE))

        for face in sorted(counts):
            if face == 6:
                continue
            item = _match_bonus(face, counts[face])
            if item is not None:
                breakdown.append(item)

        return _result(values, breakdown)


class SingleSixScoring:
    """
    Bonus rule where a six only pays when it is the lone six of the roll.

    All methods are class methods operating on immutable data.
    """

    SINGLE_SIX_BONUS = 1

    @classmethod
    def calculate_score(cls, dice: Sequence[int] | DiceRoll) -> ScoringResult:
        """
        Calculate base score and bonus for a roll.

        Repeated sixes fall through to the ordinary multiplicity bonus.
        """
        values = _values_of(dice)
        counts = Counter(values)
        breakdown: list[ScoringBreakdown] = []

        if counts[6] == 1:
            breakdown.append(_six_bonus(1, cls.SINGLE_SIX_BONUS))

        for face in sorted(counts):
            item = _match_bonus(face, counts[face])
            if item is not None:
                breakdown.append(item)

        return _result(values, breakdown)
