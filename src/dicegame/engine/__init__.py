"""
Second Chance Dice Game Engine.

Pure Python game logic with zero UI dependencies.
Handles dice rolling, scoring, the second-chance gamble and vote,
turn/round advancement and game-over detection.
"""

from dicegame.engine.base import (
    DiceRoll,
    GambleOutcome,
    PendingPrompt,
    Phase,
    Player,
    RulesetVersion,
    ScoringBreakdown,
    ScoringCategory,
    ScoringResult,
    SecondChanceInfo,
    TurnRecord,
    TurnState,
    VoteChoice,
    WinCondition,
)
from dicegame.engine.cpu import CpuPolicy
from dicegame.engine.game_settings import GameSettings
from dicegame.engine.rng import RandomSourceUnavailableError, SecureRandomSource, random_int
from dicegame.engine.rulesets import Ruleset, get_ruleset
from dicegame.engine.scoring import BonusRichScoring, SingleSixScoring
from dicegame.engine.session import GameSession
from dicegame.engine.snapshot import GameSnapshot
from dicegame.engine.voting import VoteInfo, VoteOutcome

__all__ = [
    # Data Classes
    "DiceRoll",
    "GambleOutcome",
    "GameSettings",
    "GameSnapshot",
    "Player",
    "ScoringBreakdown",
    "ScoringResult",
    "SecondChanceInfo",
    "TurnRecord",
    "TurnState",
    "VoteInfo",
    # Enums
    "PendingPrompt",
    "Phase",
    "RulesetVersion",
    "ScoringCategory",
    "VoteChoice",
    "VoteOutcome",
    "WinCondition",
    # Engines
    "BonusRichScoring",
    "CpuPolicy",
    "GameSession",
    "Ruleset",
    "SingleSixScoring",
    "get_ruleset",
    # Randomness
    "RandomSourceUnavailableError",
    "SecureRandomSource",
    "random_int",
]
