"""
Second Chance Dice - Read-Only Game Snapshot

The view layer never touches session internals; it reads a frozen
GameSnapshot taken after each transition.
"""

from dataclasses import dataclass

from dicegame.engine.base import (
    PendingPrompt,
    Phase,
    Player,
    SecondChanceInfo,
    TurnState,
)
from dicegame.engine.game_settings import GameSettings
from dicegame.engine.rulesets import get_ruleset
from dicegame.engine.voting import VoteInfo, cooldown_remaining


@dataclass(frozen=True)
class GameSnapshot:
    """
    Immutable view of the whole game at one instant.

    Attributes:
        settings: Settings of the running game (None before the first game)
        phase: Current state-machine phase
        players: The four seats, in seat order
        turn: Turn and round bookkeeping
        winners: Seat indices sharing the top score once the game is over
        current_message: Status line for the current turn
        pending_prompt: Prompt the view must resolve before play continues
        bonus_message: Bonus toast for the last roll, cleared after a delay
        second_chance_info: Pending gamble for the current turn
        vote: Open second-chance vote
        automatic_second_chance_active: Second chance switched on by the win condition
        player_initiated_second_chance_active: Second chance switched on by a vote
        second_chance_end_index: Seat at which the voted second chance expires
    """
    settings: GameSettings | None
    phase: Phase
    players: tuple[Player, ...]
    turn: TurnState
    winners: tuple[int, ...] = ()
    current_message: str = ""
    pending_prompt: PendingPrompt = PendingPrompt.NONE
    bonus_message: str = ""
    second_chance_info: SecondChanceInfo | None = None
    vote: VoteInfo | None = None
    automatic_second_chance_active: bool = False
    player_initiated_second_chance_active: bool = False
    second_chance_end_index: int | None = None

    @property
    def game_over(self) -> bool:
        return self.phase is Phase.GAME_OVER

    @property
    def is_active(self) -> bool:
        """True while turns are still being played."""
        return self.phase not in (Phase.NOT_STARTED, Phase.GAME_OVER, Phase.EXITED)

    @property
    def second_chance_active(self) -> bool:
        return (
            self.automatic_second_chance_active
            or self.player_initiated_second_chance_active
        )

    @property
    def awaiting_second_roll(self) -> bool:
        return self.phase is Phase.AWAITING_SECOND_ROLL

    @property
    def current_player(self) -> Player | None:
        if not self.players:
            return None
        return self.players[self.turn.current_player_index]

    @property
    def winning_players(self) -> tuple[Player, ...]:
        return tuple(self.players[i] for i in self.winners)

    def vote_cooldown_remaining(self, index: int) -> int:
        """Rounds before seat ``index`` may request another vote."""
        return cooldown_remaining(self.players[index], self.turn.current_round)

    def can_request_vote(self, index: int) -> bool:
        """
        Whether seat ``index`` may ask for a second-chance vote right now.

        Only the seat to act, before its first roll, off cooldown, with no
        vote open and no second chance already running.
        """
        if self.settings is None or not get_ruleset(self.settings.ruleset).votes_enabled:
            return False
        if not 0 <= index < len(self.players):
            return False
        return (
            self.phase is Phase.AWAITING_ROLL
            and index == self.turn.current_player_index
            and self.vote is None
            and not self.second_chance_active
            and self.vote_cooldown_remaining(index) == 0
        )

    def standings(self) -> list[int]:
        """Seat indices with winners first, each group by score descending."""
        def order(i: int) -> tuple[bool, int]:
            return (i not in self.winners, -self.players[i].score)

        return sorted(range(len(self.players)), key=order)
