"""
Second Chance Dice - CPU Policy

Decision functions for computer-controlled seats. Decisions are
stochastic but reproducible: they only draw from the injected
``random.Random``, never from the secure dice source.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Sequence

from dicegame.engine.base import Player, VoteChoice
from dicegame.engine.voting import is_on_cooldown

if TYPE_CHECKING:
    from dicegame.config import Settings


class CpuPolicy:
    """
    Stateless CPU decisions over the current game state.

    Attributes:
        rng: Seedable random generator for all decisions
        accept_probability: Chance to accept an offered second chance
        vote_yes_probability: Chance to vote yes on another seat's request
        vote_request_probability: Per-turn chance to request a vote when eligible
        vote_delay_range: (min, max) seconds before a CPU ballot is cast
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        *,
        accept_probability: float = 0.5,
        vote_yes_probability: float = 0.6,
        vote_request_probability: float = 0.15,
        vote_delay_range: tuple[float, float] = (1.0, 2.5),
    ) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.accept_probability = accept_probability
        self.vote_yes_probability = vote_yes_probability
        self.vote_request_probability = vote_request_probability
        self.vote_delay_range = vote_delay_range

    @classmethod
    def from_settings(cls, settings: Settings) -> CpuPolicy:
        """Build a policy from the application settings."""
        return cls(
            random.Random(settings.cpu_rng_seed),
            accept_probability=settings.cpu_accept_probability,
            vote_yes_probability=settings.cpu_vote_yes_probability,
            vote_request_probability=settings.cpu_vote_request_probability,
            vote_delay_range=(settings.cpu_vote_delay_min, settings.cpu_vote_delay_max),
        )

    def accept_second_chance(self) -> bool:
        """Coin flip on an offered gamble."""
        return self.rng.random() < self.accept_probability

    def should_request_vote(
        self,
        player: Player,
        players: Sequence[Player],
        current_round: int,
        second_chance_active: bool,
    ) -> bool:
        """
        Decide whether to ask the table for a second chance this turn.

        Only a seat that is off cooldown, strictly behind the leader and
        not already playing under a second chance is eligible.
        """
        if second_chance_active or is_on_cooldown(player, current_round):
            return False
        leader_score = max(p.score for p in players)
        if player.score >= leader_score:
            return False
        return self.rng.random() < self.vote_request_probability

    def cast_vote(self) -> VoteChoice:
        """Agreeable ballot, independent of other decisions."""
        if self.rng.random() < self.vote_yes_probability:
            return VoteChoice.YES
        return VoteChoice.NO

    def vote_delay(self) -> float:
        """Seconds to wait before casting a ballot."""
        low, high = self.vote_delay_range
        return self.rng.uniform(low, high)
