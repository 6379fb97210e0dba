"""
Second Chance Dice - Second-Chance Vote Protocol

A player may ask the table to switch on the second chance for one full
lap. The requester votes yes automatically; every other seat votes once.
The vote is counted against the full four-seat roster:

    - 3 or more yes votes: accepted
    - 2 or more no votes: rejected

The two outcomes are mutually exclusive on a four-seat roster and final
once reached. A player who asked may not ask again for 9 rounds.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from dicegame.engine.base import Player, VoteChoice


YES_VOTES_TO_ACCEPT = 3
NO_VOTES_TO_REJECT = 2
VOTE_COOLDOWN_ROUNDS = 9


class VoteOutcome(Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class VoteInfo:
    """
    An open vote.

    Attributes:
        requester_index: Seat that asked for the second chance
        votes: Seat index to vote, including the requester's own yes
        vote_id: Distinguishes successive votes within one game
    """
    requester_index: int
    votes: Mapping[int, VoteChoice] = field(default_factory=lambda: MappingProxyType({}))
    vote_id: int = 0

    @property
    def yes_votes(self) -> int:
        return sum(1 for choice in self.votes.values() if choice is VoteChoice.YES)

    @property
    def no_votes(self) -> int:
        return sum(1 for choice in self.votes.values() if choice is VoteChoice.NO)

    @property
    def outcome(self) -> VoteOutcome:
        if self.yes_votes >= YES_VOTES_TO_ACCEPT:
            return VoteOutcome.ACCEPTED
        if self.no_votes >= NO_VOTES_TO_REJECT:
            return VoteOutcome.REJECTED
        return VoteOutcome.PENDING

    def has_voted(self, index: int) -> bool:
        return index in self.votes


def open_vote(requester_index: int, vote_id: int = 0) -> VoteInfo:
    """Start a vote with the requester's own yes already recorded."""
    return VoteInfo(
        requester_index=requester_index,
        votes=MappingProxyType({requester_index: VoteChoice.YES}),
        vote_id=vote_id,
    )


def cast_vote(vote: VoteInfo, voter_index: int, choice: VoteChoice | str) -> VoteInfo:
    """
    Record one ballot and return the updated vote.

    A seat's first ballot is final, and a decided vote accepts no more
    ballots; in both cases the vote is returned unchanged.
    """
    if vote.has_voted(voter_index) or vote.outcome is not VoteOutcome.PENDING:
        return vote
    votes = dict(vote.votes)
    votes[voter_index] = VoteChoice(choice)
    return VoteInfo(
        requester_index=vote.requester_index,
        votes=MappingProxyType(votes),
        vote_id=vote.vote_id,
    )


def cooldown_remaining(player: Player, current_round: int) -> int:
    """Rounds left before the player may request another vote (0 = ready)."""
    if player.last_vote_initiated_round == 0:
        return 0
    elapsed = current_round - player.last_vote_initiated_round
    return max(0, VOTE_COOLDOWN_ROUNDS - elapsed)


def is_on_cooldown(player: Player, current_round: int) -> bool:
    return cooldown_remaining(player, current_round) > 0
