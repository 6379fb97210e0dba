"""
Second Chance Dice - Rule-Set Variants

Each RulesetVersion bundles a scoring strategy with the way a lost
gamble is settled and whether players may call a vote for a second
chance.

    final_round            single-six bonus, floored at 0, no votes
    second_chance          bonus-rich scoring, negative scores, votes
    second_chance_floored  bonus-rich scoring, floored at 0, votes
"""

from dataclasses import dataclass
from typing import Protocol, Sequence

from dicegame.engine.base import DiceRoll, GambleOutcome, RulesetVersion, ScoringResult
from dicegame.engine.scoring import BonusRichScoring, SingleSixScoring


DEFAULT_RULESET = RulesetVersion.SECOND_CHANCE

GAMBLE_MULTIPLIER = 2


class ScoringStrategy(Protocol):
    def calculate_score(self, dice: Sequence[int] | DiceRoll) -> ScoringResult: ...


@dataclass(frozen=True)
class Ruleset:
    """
    Scoring and gamble settlement for one rule-set version.

    Attributes:
        version: The version this ruleset implements
        scoring: Strategy used for every roll
        floor_at_zero: Whether a lost gamble can leave a negative score
        votes_enabled: Whether players may request a second-chance vote
    """
    version: RulesetVersion
    scoring: type[ScoringStrategy]
    floor_at_zero: bool
    votes_enabled: bool

    def score(self, dice: Sequence[int] | DiceRoll) -> ScoringResult:
        return self.scoring.calculate_score(dice)

    def resolve_gamble(
        self,
        initial_score: int,
        reroll_total: int,
        score_before_turn: int,
    ) -> GambleOutcome:
        """
        Settle a second-chance reroll.

        The reroll wins only when it strictly beats the first roll. The
        first roll's points are discarded either way; the turn's result is
        the pre-turn score plus or minus twice the reroll.

        Args:
            initial_score: Total of the first roll of the turn
            reroll_total: Total (base + bonus) of the reroll
            score_before_turn: Player's score before the first roll

        Returns:
            GambleOutcome with the nominal delta and the settled score
        """
        won = reroll_total > initial_score
        delta = GAMBLE_MULTIPLIER * reroll_total if won else -GAMBLE_MULTIPLIER * reroll_total
        final_score = score_before_turn + delta
        if self.floor_at_zero:
            final_score = max(0, final_score)
        return GambleOutcome(won=won, delta=delta, final_score=final_score)


_RULESETS: dict[RulesetVersion, Ruleset] = {
    RulesetVersion.FINAL_ROUND: Ruleset(
        version=RulesetVersion.FINAL_ROUND,
        scoring=SingleSixScoring,
        floor_at_zero=True,
        votes_enabled=False,
    ),
    RulesetVersion.SECOND_CHANCE: Ruleset(
        version=RulesetVersion.SECOND_CHANCE,
        scoring=BonusRichScoring,
        floor_at_zero=False,
        votes_enabled=True,
    ),
    RulesetVersion.SECOND_CHANCE_FLOORED: Ruleset(
        version=RulesetVersion.SECOND_CHANCE_FLOORED,
        scoring=BonusRichScoring,
        floor_at_zero=True,
        votes_enabled=True,
    ),
}


def get_ruleset(version: RulesetVersion | str = DEFAULT_RULESET) -> Ruleset:
    """Look up the ruleset for a version (enum or its string value)."""
    return _RULESETS[RulesetVersion(version)]
