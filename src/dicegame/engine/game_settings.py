"""
Second Chance Dice - Game Settings

Immutable per-game settings supplied by the caller. Validation runs when
the model is built, before any session state exists.
"""

from typing import Sequence

from pydantic import BaseModel, field_validator

from dicegame.engine.base import ROSTER_SIZE, RulesetVersion, WinCondition
from dicegame.engine.rulesets import DEFAULT_RULESET
from dicegame.engine.validators import (
    validate_dice_count,
    validate_player_count,
    validate_player_names,
    validate_target_score,
)


class GameSettings(BaseModel):
    """Settings for one game; immutable for the game's lifetime."""

    num_players: int = 1
    player_names: tuple[str, ...]
    num_dice: int = 2
    win_condition: WinCondition = WinCondition.ROUNDS
    win_value: int = 10
    ruleset: RulesetVersion = DEFAULT_RULESET

    model_config = {"frozen": True}

    @field_validator("num_players")
    @classmethod
    def _check_num_players(cls, value: int) -> int:
        return validate_player_count(value)

    @field_validator("player_names")
    @classmethod
    def _check_player_names(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return validate_player_names(value)

    @field_validator("num_dice")
    @classmethod
    def _check_num_dice(cls, value: int) -> int:
        return validate_dice_count(value)

    @field_validator("win_value")
    @classmethod
    def _check_win_value(cls, value: int) -> int:
        return validate_target_score(value)

    @property
    def cpu_count(self) -> int:
        return ROSTER_SIZE - self.num_players

    def is_cpu(self, index: int) -> bool:
        """Seats at or beyond ``num_players`` are played by the CPU."""
        return index >= self.num_players

    @classmethod
    def create(
        cls,
        num_players: int = 1,
        names: Sequence[str] = (),
        num_dice: int = 2,
        win_condition: WinCondition | str = WinCondition.ROUNDS,
        win_value: int = 10,
        ruleset: RulesetVersion | str | None = None,
    ) -> "GameSettings":
        """
        Build settings for the four-seat roster from the human names.

        Human seats take the supplied name or fall back to "Player N";
        the remaining seats are named "CPU N".
        """
        validate_player_count(num_players)
        player_names = []
        for i in range(ROSTER_SIZE):
            if i < num_players:
                supplied = names[i] if i < len(names) else ""
                player_names.append(supplied.strip() or f"Player {i + 1}")
            else:
                player_names.append(f"CPU {i + 1}")

        if ruleset is None:
            from dicegame.config import get_settings

            ruleset = get_settings().default_ruleset

        return cls(
            num_players=num_players,
            player_names=tuple(player_names),
            num_dice=num_dice,
            win_condition=WinCondition(win_condition),
            win_value=win_value,
            ruleset=RulesetVersion(ruleset),
        )
