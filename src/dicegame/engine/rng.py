"""
Second Chance Dice - Random Number Service

Dice faces and the opening seat are drawn from the operating system's
secure random source. CPU decisions use an ordinary seedable
``random.Random`` instead (see ``dicegame.engine.cpu``).
"""

from __future__ import annotations

import logging
import os
import secrets
from functools import lru_cache
from typing import Protocol

from dicegame.engine.base import DIE_FACES, DiceRoll

logger = logging.getLogger(__name__)


class RandomSourceUnavailableError(RuntimeError):
    """Raised when no secure randomness can be obtained from the OS."""


class RandomSource(Protocol):
    """Anything that can draw a uniform integer in an inclusive range."""

    def randint(self, low: int, high: int) -> int: ...


class SecureRandomSource:
    """Uniform integers backed by ``secrets`` (OS entropy).

    The OS source is probed on construction so a missing entropy
    source fails at startup rather than on the first roll.
    """

    def __init__(self) -> None:
        try:
            os.urandom(1)
        except NotImplementedError as exc:
            raise RandomSourceUnavailableError(
                "No secure random source is available on this platform."
            ) from exc
        logger.debug("Secure random source initialised")

    def randint(self, low: int, high: int) -> int:
        """Return a uniformly distributed integer in [low, high]."""
        if high < low:
            raise ValueError(f"Empty range: [{low}, {high}].")
        return low + secrets.randbelow(high - low + 1)


@lru_cache(maxsize=1)
def get_secure_source() -> SecureRandomSource:
    """Process-wide secure source."""
    return SecureRandomSource()


def random_int(low: int, high: int, source: RandomSource | None = None) -> int:
    """Uniform integer in [low, high], secure unless a source is injected."""
    if source is None:
        source = get_secure_source()
    return source.randint(low, high)


def roll_dice(count: int, source: RandomSource | None = None) -> DiceRoll:
    """
    Roll the specified number of six-sided dice.

    Args:
        count: Number of dice to roll
        source: Optional injected random source (for testing)

    Returns:
        DiceRoll with random values
    """
    values = tuple(random_int(1, DIE_FACES, source) for _ in range(count))
    return DiceRoll(values=values)
