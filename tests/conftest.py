"""
Second Chance Dice - Test Configuration and Fixtures

Common fixtures and test data for all test modules.
"""

from typing import Callable, Iterable

import pytest

from dicegame.config import Settings
from dicegame.engine import CpuPolicy, GameSession, GameSettings
from dicegame.engine.base import PendingPrompt, VoteChoice
from dicegame.realtime import VirtualClockScheduler


class ScriptedDice:
    """Random source that replays a fixed list of values.

    The first value is normally the opening seat (0-3); the rest are die
    faces in the order they are rolled.
    """

    def __init__(self, values: Iterable[int], default: int | None = None) -> None:
        self.values = list(values)
        self.default = default
        self.calls: list[tuple[int, int]] = []

    def randint(self, low: int, high: int) -> int:
        self.calls.append((low, high))
        if self.values:
            value = self.values.pop(0)
        elif self.default is not None:
            value = self.default
        else:
            raise AssertionError("ScriptedDice ran out of values")
        assert low <= value <= high, f"scripted {value} outside [{low}, {high}]"
        return value


# =============================================================================
# SCORING TEST DATA
# =============================================================================

@pytest.fixture
def bonus_rich_rolls() -> dict[str, tuple[tuple[int, ...], int, int]]:
    """
    Roll patterns under the bonus-rich rule.

    Returns:
        Dict mapping name to (dice_values, expected_base, expected_bonus)
    """
    return {
        "single_six": ((6,), 6, 1),
        "single_five": ((5,), 5, 0),
        "two_sixes_two_threes": ((6, 6, 3, 3), 18, 5),
        "one_six_among_two": ((6, 2), 8, 1),
        "pair_of_ones": ((1, 1), 2, 1),
        "three_fours": ((4, 4, 4), 12, 8),
        "four_twos": ((2, 2, 2, 2), 8, 6),
        "five_fives": ((5, 5, 5, 5, 5), 25, 20),
        "five_sixes": ((6, 6, 6, 6, 6), 30, 5),
        "two_pairs": ((1, 1, 2, 2, 3), 9, 3),
        "no_bonus": ((1, 2, 3, 4, 5), 15, 0),
    }


@pytest.fixture
def single_six_rolls() -> dict[str, tuple[tuple[int, ...], int, int]]:
    """Roll patterns under the single-six rule."""
    return {
        "single_six": ((6,), 6, 1),
        "one_six_among_three": ((6, 2, 3), 11, 1),
        "two_sixes": ((6, 6), 12, 6),
        "three_sixes": ((6, 6, 6), 18, 12),
        "two_sixes_two_threes": ((6, 6, 3, 3), 18, 9),
        "one_six_and_pair": ((6, 4, 4), 14, 5),
        "no_bonus": ((1, 2, 3, 4, 5), 15, 0),
    }


# =============================================================================
# SESSION FIXTURES
# =============================================================================

@pytest.fixture
def app_settings() -> Settings:
    """Application settings with the stock pacing delays."""
    return Settings(
        cpu_think_delay=1.5,
        dice_settle_delay=0.7,
        score_reveal_delay=1.0,
        bonus_toast_duration=2.0,
        cpu_vote_delay_min=1.0,
        cpu_vote_delay_max=2.5,
    )


@pytest.fixture
def clock() -> VirtualClockScheduler:
    return VirtualClockScheduler()


@pytest.fixture
def make_session(app_settings, clock) -> Callable[..., GameSession]:
    """Factory for sessions on the virtual clock with scripted dice."""

    def factory(
        dice: Iterable[int] = (),
        *,
        default: int | None = None,
        accept: float = 0.0,
        vote_yes: float = 1.0,
        vote_request: float = 0.0,
        seed: int = 7,
        scheduler=None,
    ) -> GameSession:
        import random

        policy = CpuPolicy(
            random.Random(seed),
            accept_probability=accept,
            vote_yes_probability=vote_yes,
            vote_request_probability=vote_request,
        )
        session = GameSession(
            scheduler if scheduler is not None else clock,
            dice_source=ScriptedDice(dice, default=default),
            cpu_policy=policy,
            settings=app_settings,
        )
        return session

    return factory


@pytest.fixture
def four_humans() -> Callable[..., GameSettings]:
    """Settings factory for an all-human table."""

    def factory(**overrides) -> GameSettings:
        params = {
            "num_players": 4,
            "names": ("Ana", "Ben", "Cy", "Dee"),
            "num_dice": 1,
            "win_condition": "rounds",
            "win_value": 10,
            "ruleset": "second_chance",
        }
        params.update(overrides)
        return GameSettings.create(**params)

    return factory


def play_human_turn(session: GameSession, clock: VirtualClockScheduler, accept: bool = False) -> None:
    """Roll for the current human seat and settle the whole turn."""
    assert session.request_roll()
    clock.run_until_idle()
    if session.snapshot().pending_prompt is PendingPrompt.SECOND_CHANCE:
        assert session.decide_second_chance(accept)
        clock.run_until_idle()
        if accept:
            assert session.request_roll()
            clock.run_until_idle()


def drive_to_end(
    session: GameSession,
    clock: VirtualClockScheduler,
    accept: bool = False,
    vote: VoteChoice = VoteChoice.NO,
    max_steps: int = 10_000,
) -> None:
    """Play human seats with a fixed strategy until the game ends."""
    for _ in range(max_steps):
        clock.run_until_idle()
        snap = session.snapshot()
        if snap.game_over:
            return
        if snap.vote is not None:
            for i, player in enumerate(snap.players):
                if not player.is_cpu and not snap.vote.has_voted(i):
                    session.cast_vote(i, vote)
        elif snap.pending_prompt is PendingPrompt.SECOND_CHANCE:
            session.decide_second_chance(accept)
        else:
            session.request_roll()
    raise AssertionError("game did not finish")


@pytest.fixture
def play_turn(clock) -> Callable[..., None]:
    """Settle one human turn on the shared virtual clock."""

    def run(session: GameSession, accept: bool = False) -> None:
        play_human_turn(session, clock, accept)

    return run


@pytest.fixture
def drive(clock) -> Callable[..., None]:
    """Play a session to its end on the shared virtual clock."""

    def run(session: GameSession, **kwargs) -> None:
        drive_to_end(session, clock, **kwargs)

    return run
