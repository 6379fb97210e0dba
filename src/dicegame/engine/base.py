"""
Second Chance Dice - Game Engine Base Classes

This module defines the foundational data structures and enums used throughout
the game engine. Records handed to the view layer are frozen dataclasses and
are replaced, never mutated, on every transition so snapshots stay intact.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Sequence


DIE_FACES = 6
ROSTER_SIZE = 4


class WinCondition(Enum):
    """How the end of the game is decided."""
    ROUNDS = "rounds"
    SCORE = "score"


class RulesetVersion(Enum):
    """Named rule-set variants; see ``dicegame.engine.rulesets``."""
    FINAL_ROUND = "final_round"
    SECOND_CHANCE = "second_chance"
    SECOND_CHANCE_FLOORED = "second_chance_floored"


class Phase(Enum):
    """States of the turn/round state machine."""
    NOT_STARTED = auto()
    AWAITING_ROLL = auto()
    ROLLING = auto()
    SCORE_APPLIED = auto()
    SECOND_CHANCE_OFFERED = auto()
    AWAITING_SECOND_ROLL = auto()
    GAME_OVER = auto()
    EXITED = auto()


class PendingPrompt(Enum):
    """Prompt the view layer must show before play can continue."""
    NONE = "none"
    SECOND_CHANCE = "second_chance"
    VOTE = "vote"


class VoteChoice(Enum):
    YES = "yes"
    NO = "no"


class ScoringCategory(Enum):
    """Categories of bonus combinations."""
    SIX_BONUS = auto()
    PAIR = auto()
    THREE_OF_A_KIND = auto()
    FOUR_OF_A_KIND = auto()
    FIVE_OF_A_KIND = auto()


@dataclass(frozen=True)
class ScoringBreakdown:
    """
    A single bonus component within a roll.

    Attributes:
        category: The type of bonus combination
        face: Face value the bonus is awarded for
        count: How many dice showed that face
        points: Bonus points awarded for this combination
        description: Human-readable description
    """
    category: ScoringCategory
    face: int
    count: int
    points: int
    description: str


@dataclass(frozen=True)
class ScoringResult:
    """
    Complete scoring result for a dice roll.

    Attributes:
        base_score: Sum of the face values
        bonus: Combination bonus on top of the base score
        breakdown: Individual bonus components, in report order
    """
    base_score: int
    bonus: int
    breakdown: tuple[ScoringBreakdown, ...] = ()

    @property
    def total(self) -> int:
        return self.base_score + self.bonus

    @property
    def bonus_message(self) -> str:
        """Bonus descriptions joined for display; empty when no bonus."""
        return " | ".join(item.description for item in self.breakdown)

    def __str__(self) -> str:
        lines = [f"Total: {self.total} points ({self.base_score} + {self.bonus} bonus)"]
        for item in self.breakdown:
            lines.append(f"  - {item.description}")
        return "\n".join(lines)


@dataclass(frozen=True)
class DiceRoll:
    """
    Immutable representation of a dice roll.

    Attributes:
        values: Tuple of dice face values
    """
    values: tuple[int, ...]

    def __post_init__(self) -> None:
        """Validate dice values are within valid range."""
        for value in self.values:
            if not (1 <= value <= DIE_FACES):
                raise ValueError(
                    f"Invalid die value {value}. "
                    f"Must be between 1 and {DIE_FACES}."
                )

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index: int) -> int:
        return self.values[index]

    @classmethod
    def from_sequence(cls, values: Sequence[int]) -> "DiceRoll":
        """Create a DiceRoll from any sequence type."""
        return cls(values=tuple(values))


@dataclass(frozen=True)
class TurnRecord:
    """Score and bonus of the first roll of one completed turn."""
    score: int
    bonus: int


@dataclass(frozen=True)
class Player:
    """
    One seat of the four-seat roster.

    Attributes:
        name: Display name
        is_cpu: Whether the CPU policy plays this seat
        score: Running total; may be negative under non-floored rulesets
        history: One entry per completed turn
        second_chance_history: Signed point deltas from gambles
        score_history: Score snapshot after each completed turn, starting at 0
        last_vote_initiated_round: Round of the last vote request, 0 if never
    """
    name: str
    is_cpu: bool = False
    score: int = 0
    history: tuple[TurnRecord, ...] = ()
    second_chance_history: tuple[int, ...] = ()
    score_history: tuple[int, ...] = (0,)
    last_vote_initiated_round: int = 0

    @property
    def total_bonus(self) -> int:
        return sum(entry.bonus for entry in self.history)

    @property
    def main_score(self) -> int:
        """Score without the accumulated combination bonuses."""
        return self.score - self.total_bonus

    @property
    def second_chance_successes(self) -> int:
        return sum(1 for delta in self.second_chance_history if delta > 0)


@dataclass(frozen=True)
class TurnState:
    """
    Whose turn it is and where the game is in its round structure.

    Attributes:
        current_player_index: Seat that acts next
        dice_values: Faces currently shown on the table
        is_rolling: True while dice are settling
        current_round: Round counter, starting at 1
        round_start_player_index: Seat whose turn marks a round boundary
    """
    current_player_index: int
    dice_values: tuple[int, ...]
    is_rolling: bool = False
    current_round: int = 1
    round_start_player_index: int = 0


@dataclass(frozen=True)
class SecondChanceInfo:
    """
    Pending gamble for the current turn.

    Attributes:
        initial_score: Total (base + bonus) of the first roll
        player_index: Seat that made the roll
        score_before_turn: Seat's score before the first roll of this turn
    """
    initial_score: int
    player_index: int
    score_before_turn: int


@dataclass(frozen=True)
class GambleOutcome:
    """Result of resolving a second-chance reroll."""
    won: bool
    delta: int
    final_score: int

