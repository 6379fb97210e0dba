"""
Second Chance Dice - Second-Chance Vote Tests

Vote requests, ballots from human and CPU seats, outcomes, the lap-long
voted second chance and the request cooldown.
"""

import pytest

from dicegame.engine import GameSettings
from dicegame.engine.base import PendingPrompt, VoteChoice
from dicegame.realtime import GameEvent, ImmediateScheduler


@pytest.fixture
def solo():
    """One human (seat 0) and three CPU seats."""
    return GameSettings.create(num_players=1, names=["Ana"], num_dice=1, ruleset="second_chance")


class TestRequestVote:
    """Tests for who may request a vote and when."""

    def test_opens_vote(self, make_session, four_humans):
        events = []
        session = make_session([0])
        session.subscribe(events.append)
        session.start_game(four_humans())
        assert session.snapshot().can_request_vote(0)
        assert session.request_vote(0)

        snap = session.snapshot()
        assert snap.pending_prompt is PendingPrompt.VOTE
        assert snap.vote.requester_index == 0
        assert snap.vote.yes_votes == 1
        assert snap.players[0].last_vote_initiated_round == 1
        assert snap.current_message == "Ana requested a second chance."
        assert events[-1].event is GameEvent.VOTE_REQUESTED

    def test_roll_blocked_while_vote_open(self, make_session, four_humans):
        session = make_session([0])
        session.start_game(four_humans())
        session.request_vote(0)
        assert not session.request_roll()

    def test_only_current_seat(self, make_session, four_humans):
        session = make_session([0])
        session.start_game(four_humans())
        assert not session.snapshot().can_request_vote(1)
        assert not session.request_vote(1)

    def test_second_request_ignored(self, make_session, four_humans):
        session = make_session([0])
        session.start_game(four_humans())
        assert session.request_vote(0)
        assert not session.request_vote(0)

    def test_disabled_by_final_round_ruleset(self, make_session, four_humans):
        session = make_session([0])
        session.start_game(four_humans(ruleset="final_round"))
        assert not session.snapshot().can_request_vote(0)
        assert not session.request_vote(0)

    def test_not_during_automatic_second_chance(self, make_session, four_humans):
        session = make_session([0])
        session.start_game(four_humans(win_value=1))
        assert not session.request_vote(0)

    def test_not_after_rolling(self, make_session, four_humans):
        session = make_session([0, 3])
        session.start_game(four_humans())
        session.request_roll()
        assert not session.request_vote(0)

    def test_cpu_seat_cannot_be_driven(self, make_session, solo):
        session = make_session([1], default=2)
        session.start_game(solo)
        assert not session.request_vote(1)


class TestHumanBallots:
    """Tests for manual ballots on an all-human table."""

    def test_rejected_on_two_no(self, make_session, four_humans):
        events = []
        session = make_session([0])
        session.subscribe(events.append)
        session.start_game(four_humans())
        session.request_vote(0)

        assert session.cast_vote(1, "no")
        assert not session.cast_vote(1, "yes")
        assert not session.cast_vote(0, VoteChoice.NO)
        assert session.snapshot().vote is not None

        assert session.cast_vote(2, VoteChoice.NO)
        snap = session.snapshot()
        assert snap.vote is None
        assert snap.pending_prompt is PendingPrompt.NONE
        assert not snap.player_initiated_second_chance_active
        assert snap.current_message == "Second chance request rejected."
        assert events[-1].event is GameEvent.VOTE_REJECTED
        assert not session.cast_vote(3, "yes")

    def test_accepted_on_three_yes(self, make_session, four_humans):
        session = make_session([0])
        session.start_game(four_humans())
        session.request_vote(0)
        session.cast_vote(1, "no")
        session.cast_vote(2, "yes")
        assert session.snapshot().vote is not None
        session.cast_vote(3, "yes")

        snap = session.snapshot()
        assert snap.player_initiated_second_chance_active
        assert snap.second_chance_end_index == 0
        assert snap.current_message == "Second chance request accepted!"

    def test_invalid_choice(self, make_session, four_humans):
        session = make_session([0])
        session.start_game(four_humans())
        session.request_vote(0)
        with pytest.raises(ValueError):
            session.cast_vote(1, "maybe")

    def test_ballot_without_vote_ignored(self, make_session, four_humans):
        session = make_session([0])
        session.start_game(four_humans())
        assert not session.cast_vote(1, "yes")

    def test_bad_ballot_without_vote_ignored(self, make_session, four_humans):
        session = make_session([0])
        session.start_game(four_humans())
        assert not session.cast_vote(1, "maybe")

    def test_exit_closes_vote(self, make_session, four_humans):
        session = make_session([0])
        session.start_game(four_humans())
        session.request_vote(0)
        session.exit_game()
        assert session.snapshot().vote is None
        assert not session.cast_vote(1, "yes")


class TestCpuBallots:
    """Tests for ballots cast by CPU seats after a delay."""

    @pytest.mark.parametrize("vote_yes, accepted", [(1.0, True), (0.0, False)])
    def test_immediate_ballots_settle_vote(self, make_session, solo, vote_yes, accepted):
        events = []
        session = make_session([0], vote_yes=vote_yes, scheduler=ImmediateScheduler())
        session.subscribe(events.append)
        session.start_game(solo)

        assert session.request_vote(0)
        snap = session.snapshot()
        assert snap.vote is None
        assert snap.player_initiated_second_chance_active is accepted
        assert sum(e.event is GameEvent.VOTE_CAST for e in events) == 2
        outcome = GameEvent.VOTE_ACCEPTED if accepted else GameEvent.VOTE_REJECTED
        assert [e.event for e in events].count(outcome) == 1

    def test_accepted_window_lasts_one_lap(self, make_session, clock, solo, play_turn):
        events = []
        session = make_session([0], default=2, vote_yes=1.0)
        session.subscribe(events.append)
        session.start_game(solo)
        session.request_vote(0)
        clock.run_until_idle()

        snap = session.snapshot()
        assert snap.vote is None
        assert snap.player_initiated_second_chance_active
        casts = [e for e in events if e.event is GameEvent.VOTE_CAST]
        assert len(casts) == 2

        play_turn(session)
        snap = session.snapshot()
        offers = [e.player_index for e in events if e.event is GameEvent.SECOND_CHANCE_OFFERED]
        assert offers == [0, 1, 2, 3]
        assert not snap.player_initiated_second_chance_active
        assert snap.second_chance_end_index is None
        assert snap.turn.current_round == 2
        assert snap.turn.current_player_index == 0
        assert [p.score for p in snap.players] == [2, 2, 2, 2]

    def test_ballots_wait_for_delay(self, make_session, clock, solo):
        session = make_session([0], vote_yes=1.0)
        session.start_game(solo)
        session.request_vote(0)
        clock.advance(0.9)
        assert session.snapshot().vote.yes_votes == 1
        clock.advance(1.7)
        assert session.snapshot().vote is None

    def test_rejected_by_cpus(self, make_session, clock, solo, play_turn):
        session = make_session([0], default=2, vote_yes=0.0)
        session.start_game(solo)
        session.request_vote(0)
        clock.run_until_idle()
        snap = session.snapshot()
        assert not snap.second_chance_active
        assert snap.current_message == "Second chance request rejected."

        events = []
        session.subscribe(events.append)
        play_turn(session)
        assert GameEvent.SECOND_CHANCE_OFFERED not in [e.event for e in events]

    def test_cpu_requests_vote_when_trailing(self, make_session, clock, solo):
        events = []
        session = make_session([0, 6], default=1, vote_request=1.0, vote_yes=1.0)
        session.subscribe(events.append)
        session.start_game(solo)
        session.request_roll()
        clock.run_until_idle()

        requests = [e.player_index for e in events if e.event is GameEvent.VOTE_REQUESTED]
        assert requests == [1]
        assert GameEvent.VOTE_ACCEPTED in [e.event for e in events]
        snap = session.snapshot()
        assert snap.turn.current_round == 2
        assert snap.turn.current_player_index == 0
        assert snap.player_initiated_second_chance_active
        assert snap.second_chance_end_index == 1
        assert snap.players[1].last_vote_initiated_round == 1

    def test_human_ballot_counts_with_cpus(self, make_session, clock, solo):
        session = make_session([0, 6], default=1, vote_request=1.0, vote_yes=0.0)
        session.start_game(solo)
        session.request_roll()
        clock.advance(3.5)
        snap = session.snapshot()
        assert snap.vote is not None
        assert snap.vote.requester_index == 1
        assert session.cast_vote(0, "no")
        assert session.snapshot().vote.no_votes == 1
        clock.run_until_idle()
        assert not session.snapshot().player_initiated_second_chance_active


class TestCooldown:
    """Tests for the nine-round request cooldown."""

    def test_cooldown_counts_rounds(self, make_session, four_humans, play_turn):
        session = make_session([0], default=1)
        session.start_game(four_humans(win_value=20))
        session.request_vote(0)
        session.cast_vote(1, "no")
        session.cast_vote(2, "no")

        for current_round in range(1, 10):
            snap = session.snapshot()
            assert snap.turn.current_round == current_round
            assert snap.vote_cooldown_remaining(0) == 10 - current_round
            assert not snap.can_request_vote(0)
            for _ in range(4):
                play_turn(session)

        snap = session.snapshot()
        assert snap.turn.current_round == 10
        assert snap.vote_cooldown_remaining(0) == 0
        assert snap.can_request_vote(0)

    def test_cooldown_after_accepted_vote(self, make_session, clock, solo, play_turn):
        session = make_session([0], default=2, vote_yes=1.0)
        session.start_game(solo)
        session.request_vote(0)
        clock.run_until_idle()
        play_turn(session)
        assert session.snapshot().vote_cooldown_remaining(0) == 8
