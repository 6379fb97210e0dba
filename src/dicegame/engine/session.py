"""
Second Chance Dice - Turn/Round State Machine

GameSession owns the whole game: whose turn it is, round counting, the
second-chance gamble, the second-chance vote and the end of the game.
The view layer drives it with commands and reads GameSnapshot values.

Turn flow:
    AWAITING_ROLL -> ROLLING -> SCORE_APPLIED -> next turn
                                 |
                 (second chance) SECOND_CHANCE_OFFERED
                                 |-- decline -> next turn
                                 '-- accept  -> AWAITING_SECOND_ROLL
                                                -> ROLLING -> SCORE_APPLIED
                                                -> next turn

Every delayed step (dice settling, score reveal, bonus toast, CPU think
time, CPU ballots) goes through the injected scheduler. Each callback
re-checks its precondition when it fires, and commands issued in the
wrong phase are ignored, so duplicate or stale triggers are harmless.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Callable

from dicegame.engine.base import (
    ROSTER_SIZE,
    DiceRoll,
    PendingPrompt,
    Phase,
    Player,
    ScoringResult,
    SecondChanceInfo,
    TurnRecord,
    TurnState,
    VoteChoice,
    WinCondition,
)
from dicegame.engine.cpu import CpuPolicy
from dicegame.engine.game_settings import GameSettings
from dicegame.engine.rng import RandomSource, get_secure_source, random_int, roll_dice
from dicegame.engine.rulesets import Ruleset, get_ruleset
from dicegame.engine.snapshot import GameSnapshot
from dicegame.engine.voting import VoteInfo, VoteOutcome, cast_vote, open_vote
from dicegame.realtime.events import EventPayload, GameEvent, is_terminal_event
from dicegame.realtime.scheduler import ImmediateScheduler, Scheduler

if TYPE_CHECKING:
    from dicegame.config import Settings

logger = logging.getLogger(__name__)

Listener = Callable[[EventPayload], None]

# Automatic second chance in score mode starts at 80% of the target
_AUTO_SECOND_CHANCE_NUMERATOR = 4
_AUTO_SECOND_CHANCE_DENOMINATOR = 5


class GameSession:
    """Single owner of all mutable game state.

    Args:
        scheduler: Pacing scheduler (defaults to ImmediateScheduler)
        dice_source: Random source for dice and the opening seat
            (defaults to the secure OS source)
        cpu_policy: Decisions for CPU seats (defaults to settings-driven policy)
        settings: Application settings (defaults to ``get_settings()``)
    """

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        *,
        dice_source: RandomSource | None = None,
        cpu_policy: CpuPolicy | None = None,
        settings: Settings | None = None,
    ) -> None:
        if settings is None:
            from dicegame.config import get_settings

            settings = get_settings()
        self._config = settings
        self._scheduler = scheduler if scheduler is not None else ImmediateScheduler()
        self._dice_source = dice_source if dice_source is not None else get_secure_source()
        self._cpu = cpu_policy if cpu_policy is not None else CpuPolicy.from_settings(settings)
        self._listeners: list[Listener] = []

        self._game: GameSettings | None = None
        self._ruleset: Ruleset | None = None
        self._generation = 0
        self._reset()

    def _reset(self) -> None:
        self._phase = Phase.NOT_STARTED
        self._players: tuple[Player, ...] = ()
        self._turn = TurnState(current_player_index=0, dice_values=())
        self._second_chance_info: SecondChanceInfo | None = None
        self._vote: VoteInfo | None = None
        self._vote_counter = 0
        self._auto_active = False
        self._player_initiated_active = False
        self._second_chance_end_index: int | None = None
        self._winners: tuple[int, ...] = ()
        self._message = ""
        self._bonus_message = ""
        self._serial = 0
        self._toast_serial = 0

    # -- Listeners -------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        """Register a callback invoked after every transition."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: GameEvent, player_index: int | None = None, **data) -> None:
        payload = EventPayload(event=event, player_index=player_index, data=data)
        level = logging.INFO if is_terminal_event(event) else logging.DEBUG
        logger.log(level, "%s player=%s %s", event.name, player_index, data)
        for listener in list(self._listeners):
            try:
                listener(payload)
            except Exception:
                logger.exception("Listener failed while handling %s", event.name)

    # -- Read side -------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self._phase

    def snapshot(self) -> GameSnapshot:
        """Immutable projection of the current state."""
        if self._phase is Phase.SECOND_CHANCE_OFFERED:
            prompt = PendingPrompt.SECOND_CHANCE
        elif self._vote is not None:
            prompt = PendingPrompt.VOTE
        else:
            prompt = PendingPrompt.NONE
        return GameSnapshot(
            settings=self._game,
            phase=self._phase,
            players=self._players,
            turn=self._turn,
            winners=self._winners,
            current_message=self._message,
            pending_prompt=prompt,
            bonus_message=self._bonus_message,
            second_chance_info=self._second_chance_info,
            vote=self._vote,
            automatic_second_chance_active=self._auto_active,
            player_initiated_second_chance_active=self._player_initiated_active,
            second_chance_end_index=self._second_chance_end_index,
        )

    # -- Commands from the view layer ------------------------------------

    def start_game(self, settings: GameSettings) -> GameSnapshot:
        """
        Start a new game, discarding any game in progress.

        Args:
            settings: Validated settings for the new game

        Returns:
            Snapshot of the opening state
        """
        self._generation += 1
        self._reset()
        self._game = settings
        self._ruleset = get_ruleset(settings.ruleset)
        self._players = tuple(
            Player(name=name, is_cpu=settings.is_cpu(i))
            for i, name in enumerate(settings.player_names)
        )
        first = random_int(0, ROSTER_SIZE - 1, self._dice_source)
        self._turn = TurnState(
            current_player_index=first,
            dice_values=(1,) * settings.num_dice,
            current_round=1,
            round_start_player_index=first,
        )
        self._set_phase(Phase.AWAITING_ROLL)
        self._refresh_automatic_second_chance()
        self._message = self._turn_message()
        logger.info(
            "Game started: %d human(s), %d dice, %s=%d, ruleset=%s, first=%s",
            settings.num_players,
            settings.num_dice,
            settings.win_condition.value,
            settings.win_value,
            settings.ruleset.value,
            self._players[first].name,
        )
        self._emit(GameEvent.GAME_STARTED, first)
        self._schedule_cpu_action()
        return self.snapshot()

    def request_roll(self) -> bool:
        """Roll for the current human seat. Returns False if ignored."""
        if not self._is_human_turn():
            return False
        return self._roll()

    def decide_second_chance(self, accept: bool) -> bool:
        """Accept or decline the offered gamble for the current human seat."""
        if not self._is_human_turn():
            return False
        return self._decide_second_chance(accept)

    def request_vote(self, player_index: int) -> bool:
        """Ask the table for a second chance on behalf of a human seat."""
        if not self._is_human_seat(player_index):
            return False
        return self._request_vote(player_index)

    def cast_vote(self, player_index: int, choice: VoteChoice | str) -> bool:
        """Cast a human seat's ballot on the open vote."""
        if not self._is_human_seat(player_index) or self._vote is None:
            return False
        return self._cast_vote(player_index, VoteChoice(choice))

    def exit_game(self) -> None:
        """Abandon the game; later commands and timers are ignored."""
        if self._phase in (Phase.NOT_STARTED, Phase.EXITED):
            return
        self._generation += 1
        self._vote = None
        self._set_phase(Phase.EXITED)
        self._emit(GameEvent.GAME_EXITED)

    # -- Guards ----------------------------------------------------------

    @property
    def _in_play(self) -> bool:
        return self._phase not in (Phase.NOT_STARTED, Phase.GAME_OVER, Phase.EXITED)

    def _is_human_seat(self, index: int) -> bool:
        return self._in_play and 0 <= index < len(self._players) and not self._players[index].is_cpu

    def _is_human_turn(self) -> bool:
        return self._is_human_seat(self._turn.current_player_index)

    def _set_phase(self, phase: Phase) -> None:
        self._phase = phase
        self._serial += 1

    def _later(self, delay: float, func: Callable, *args) -> None:
        """Schedule ``func`` unless the game is replaced or exited first."""
        generation = self._generation

        def callback() -> None:
            if generation != self._generation or self._phase is Phase.EXITED:
                return
            func(*args)

        self._scheduler.after(delay, callback)

    # -- Rolling and scoring ---------------------------------------------

    def _roll(self) -> bool:
        if self._phase not in (Phase.AWAITING_ROLL, Phase.AWAITING_SECOND_ROLL):
            logger.debug("Roll ignored in phase %s", self._phase.name)
            return False
        if self._vote is not None:
            logger.debug("Roll ignored while a vote is open")
            return False

        dice = roll_dice(self._game.num_dice, self._dice_source)
        self._turn = replace(self._turn, is_rolling=True)
        self._set_phase(Phase.ROLLING)
        self._emit(GameEvent.STATE_UPDATED, self._turn.current_player_index)
        self._later(self._config.dice_settle_delay, self._settle_roll, dice)
        return True

    def _settle_roll(self, dice: DiceRoll) -> None:
        if self._phase is not Phase.ROLLING:
            return
        result = self._ruleset.score(dice)
        self._turn = replace(self._turn, dice_values=dice.values, is_rolling=False)
        self._show_bonus(result.bonus_message)

        if self._second_chance_info is not None:
            self._settle_gamble(dice, result)
        else:
            self._settle_first_roll(dice, result)

    def _settle_first_roll(self, dice: DiceRoll, result: ScoringResult) -> None:
        index = self._turn.current_player_index
        player = self._players[index]
        offer = self._second_chance_active
        was_below_target = self._all_below_target()

        self._replace_player(index, replace(
            player,
            score=player.score + result.total,
            history=player.history + (TurnRecord(score=result.base_score, bonus=result.bonus),),
        ))
        self._mark_first_to_target(index, was_below_target)
        self._refresh_automatic_second_chance()
        self._message = f"{player.name} scored {result.total}!"

        events = [
            self._dice_rolled_event(dice, result),
            (GameEvent.SCORE_APPLIED, {"total": result.total}),
        ]
        if offer:
            self._second_chance_info = SecondChanceInfo(
                initial_score=result.total,
                player_index=index,
                score_before_turn=player.score,
            )
            self._set_phase(Phase.SECOND_CHANCE_OFFERED)
            events.append((GameEvent.SECOND_CHANCE_OFFERED, {"initial_score": result.total}))
        else:
            self._set_phase(Phase.SCORE_APPLIED)

        if not self._emit_in_order(index, events):
            return
        if offer:
            self._schedule_cpu_action()
        else:
            self._later(self._config.score_reveal_delay, self._end_turn)

    def _settle_gamble(self, dice: DiceRoll, result: ScoringResult) -> None:
        info = self._second_chance_info
        index = info.player_index
        player = self._players[index]
        was_below_target = self._all_below_target()

        outcome = self._ruleset.resolve_gamble(
            info.initial_score, result.total, info.score_before_turn
        )
        self._replace_player(index, replace(
            player,
            score=outcome.final_score,
            second_chance_history=player.second_chance_history + (outcome.delta,),
        ))
        self._mark_first_to_target(index, was_below_target)
        self._refresh_automatic_second_chance()
        if outcome.won:
            self._message = f"{player.name} won {outcome.delta} points with the second chance!"
        else:
            self._message = f"{player.name} lost {-outcome.delta} points with the second chance!"
        self._set_phase(Phase.SCORE_APPLIED)

        events = [
            self._dice_rolled_event(dice, result),
            (GameEvent.SECOND_CHANCE_RESOLVED, {
                "won": outcome.won,
                "delta": outcome.delta,
                "score": outcome.final_score,
            }),
        ]
        if self._emit_in_order(index, events):
            self._later(self._config.score_reveal_delay, self._end_turn)

    @staticmethod
    def _dice_rolled_event(dice: DiceRoll, result: ScoringResult) -> tuple[GameEvent, dict]:
        return GameEvent.DICE_ROLLED, {
            "dice": dice.values,
            "base_score": result.base_score,
            "bonus": result.bonus,
        }

    def _emit_in_order(self, index: int, events: list[tuple[GameEvent, dict]]) -> bool:
        """Emit events for an applied transition.

        Returns False if a listener moved the game on, in which case the
        remaining events are stale and are not sent.
        """
        mark = (self._generation, self._serial)
        for event, data in events:
            if (self._generation, self._serial) != mark:
                return False
            self._emit(event, index, **data)
        return (self._generation, self._serial) == mark

    def _show_bonus(self, message: str) -> None:
        if not message:
            return
        self._bonus_message = message
        self._toast_serial += 1
        self._later(self._config.bonus_toast_duration, self._expire_bonus, self._toast_serial)

    def _expire_bonus(self, toast_serial: int) -> None:
        if toast_serial != self._toast_serial:
            return
        self._bonus_message = ""
        self._emit(GameEvent.STATE_UPDATED)

    # -- Second chance ---------------------------------------------------

    @property
    def _second_chance_active(self) -> bool:
        return self._auto_active or self._player_initiated_active

    def _decide_second_chance(self, accept: bool) -> bool:
        if self._phase is not Phase.SECOND_CHANCE_OFFERED:
            logger.debug("Second-chance decision ignored in phase %s", self._phase.name)
            return False
        index = self._turn.current_player_index
        if accept:
            self._message = f"{self._players[index].name} chose a second chance!"
            self._set_phase(Phase.AWAITING_SECOND_ROLL)
            self._emit(GameEvent.SECOND_CHANCE_ACCEPTED, index)
            self._schedule_cpu_action()
        else:
            self._emit(GameEvent.SECOND_CHANCE_DECLINED, index)
            self._end_turn()
        return True

    def _refresh_automatic_second_chance(self) -> None:
        """Re-derive the automatic second chance from rounds or scores.

        Sticky once on in rounds mode; follows the scores in score mode.
        """
        if not self._in_play:
            return
        game = self._game
        if game.win_condition is WinCondition.ROUNDS:
            active = self._auto_active or self._turn.current_round >= game.win_value
        else:
            threshold = game.win_value * _AUTO_SECOND_CHANCE_NUMERATOR
            active = any(
                p.score * _AUTO_SECOND_CHANCE_DENOMINATOR >= threshold for p in self._players
            )
        if active != self._auto_active:
            logger.debug("Automatic second chance %s", "on" if active else "off")
            self._auto_active = active

    # -- Score target bookkeeping ----------------------------------------

    def _all_below_target(self) -> bool:
        return all(p.score < self._game.win_value for p in self._players)

    def _mark_first_to_target(self, index: int, was_below_target: bool) -> None:
        """Give the remaining seats one final lap after the first seat reaches the target."""
        if self._game.win_condition is not WinCondition.SCORE or not was_below_target:
            return
        if self._players[index].score >= self._game.win_value:
            self._turn = replace(self._turn, round_start_player_index=index)
            logger.info("%s reached the target first; final lap begins", self._players[index].name)

    def _replace_player(self, index: int, player: Player) -> None:
        self._players = tuple(
            player if i == index else p for i, p in enumerate(self._players)
        )

    # -- Turn and round advancement --------------------------------------

    def _end_turn(self) -> None:
        if self._phase not in (Phase.SCORE_APPLIED, Phase.SECOND_CHANCE_OFFERED):
            return
        index = self._turn.current_player_index
        player = self._players[index]
        self._replace_player(index, replace(
            player, score_history=player.score_history + (player.score,)
        ))
        self._second_chance_info = None

        next_index = (index + 1) % len(self._players)
        if self._player_initiated_active and next_index == self._second_chance_end_index:
            self._player_initiated_active = False
            self._second_chance_end_index = None

        round_advanced = False
        if next_index == self._turn.round_start_player_index:
            if self._win_condition_met():
                self._finish_game()
                return
            round_advanced = True

        self._turn = replace(
            self._turn,
            current_player_index=next_index,
            is_rolling=False,
            current_round=self._turn.current_round + (1 if round_advanced else 0),
        )
        self._refresh_automatic_second_chance()
        self._message = self._turn_message()
        self._set_phase(Phase.AWAITING_ROLL)
        if round_advanced:
            self._emit(GameEvent.ROUND_ADVANCED, next_index, round=self._turn.current_round)
        self._emit(GameEvent.TURN_ADVANCED, next_index)
        self._schedule_cpu_action()

    def _win_condition_met(self) -> bool:
        game = self._game
        if game.win_condition is WinCondition.ROUNDS:
            return self._auto_active and self._turn.current_round >= game.win_value
        return any(p.score >= game.win_value for p in self._players)

    def _finish_game(self) -> None:
        top = max(p.score for p in self._players)
        self._winners = tuple(i for i, p in enumerate(self._players) if p.score == top)
        names = [self._players[i].name for i in self._winners]
        if len(names) > 1:
            self._message = f"Tie between {' and '.join(names)}!"
        else:
            self._message = f"{names[0]} wins!"
        self._turn = replace(self._turn, is_rolling=False)
        self._set_phase(Phase.GAME_OVER)
        self._emit(GameEvent.GAME_WON, winners=self._winners, top_score=top)

    def _turn_message(self) -> str:
        name = self._players[self._turn.current_player_index].name
        if self._auto_active:
            return f"Final round! {name}'s turn"
        return f"{name}'s turn"

    # -- Second-chance vote ----------------------------------------------

    def _request_vote(self, index: int) -> bool:
        if not self.snapshot().can_request_vote(index):
            logger.debug("Vote request from seat %d ignored", index)
            return False

        player = self._players[index]
        self._replace_player(index, replace(
            player, last_vote_initiated_round=self._turn.current_round
        ))
        self._vote_counter += 1
        vote = open_vote(index, self._vote_counter)
        self._vote = vote
        self._serial += 1
        self._message = f"{player.name} requested a second chance."
        self._emit(GameEvent.VOTE_REQUESTED, index, vote_id=vote.vote_id)

        # Ballots may run as soon as they are scheduled and close the vote
        cpu_voters = [
            voter for voter, seat in enumerate(self._players)
            if seat.is_cpu and not vote.has_voted(voter)
        ]
        for voter in cpu_voters:
            self._later(self._cpu.vote_delay(), self._cpu_cast_vote, voter, vote.vote_id)
        return True

    def _cast_vote(self, index: int, choice: VoteChoice) -> bool:
        vote = self._vote
        if vote is None or vote.has_voted(index):
            return False
        self._vote = cast_vote(vote, index, choice)
        self._emit(GameEvent.VOTE_CAST, index, choice=choice.value)
        self._resolve_vote(vote.vote_id)
        return True

    def _cpu_cast_vote(self, index: int, vote_id: int) -> None:
        vote = self._vote
        if vote is None or vote.vote_id != vote_id or vote.has_voted(index):
            return
        self._cast_vote(index, self._cpu.cast_vote())

    def _resolve_vote(self, vote_id: int) -> None:
        vote = self._vote
        if vote is None or vote.vote_id != vote_id:
            # already settled by a ballot cast from a listener
            return
        outcome = vote.outcome
        if outcome is VoteOutcome.PENDING:
            return

        self._vote = None
        self._serial += 1
        if outcome is VoteOutcome.ACCEPTED:
            self._player_initiated_active = True
            self._second_chance_end_index = vote.requester_index
            self._message = "Second chance request accepted!"
            logger.info("Vote %d accepted (%d yes)", vote.vote_id, vote.yes_votes)
            self._emit(GameEvent.VOTE_ACCEPTED, vote.requester_index)
        else:
            self._message = "Second chance request rejected."
            logger.info("Vote %d rejected (%d no)", vote.vote_id, vote.no_votes)
            self._emit(GameEvent.VOTE_REJECTED, vote.requester_index)
        self._schedule_cpu_action()

    # -- CPU seats -------------------------------------------------------

    def _schedule_cpu_action(self) -> None:
        if not self._in_play or not self._players[self._turn.current_player_index].is_cpu:
            return
        self._later(self._config.cpu_think_delay, self._cpu_act, self._serial)

    def _cpu_act(self, serial: int) -> None:
        if serial != self._serial or self._vote is not None:
            return
        index = self._turn.current_player_index
        player = self._players[index]
        if not player.is_cpu:
            return

        if self._phase is Phase.SECOND_CHANCE_OFFERED:
            self._decide_second_chance(self._cpu.accept_second_chance())
        elif self._phase is Phase.AWAITING_ROLL:
            wants_vote = self.snapshot().can_request_vote(index) and self._cpu.should_request_vote(
                player, self._players, self._turn.current_round, self._second_chance_active
            )
            if not (wants_vote and self._request_vote(index)):
                self._roll()
        elif self._phase is Phase.AWAITING_SECOND_ROLL:
            self._roll()
