"""
Second Chance Dice - Game Event Definitions

Event types and payloads delivered to view-layer listeners after each
state-machine transition.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class GameEvent(Enum):
    """Events that can occur during a game."""

    GAME_STARTED = auto()
    DICE_ROLLED = auto()
    SCORE_APPLIED = auto()
    SECOND_CHANCE_OFFERED = auto()
    SECOND_CHANCE_ACCEPTED = auto()
    SECOND_CHANCE_DECLINED = auto()
    SECOND_CHANCE_RESOLVED = auto()
    VOTE_REQUESTED = auto()
    VOTE_CAST = auto()
    VOTE_ACCEPTED = auto()
    VOTE_REJECTED = auto()
    TURN_ADVANCED = auto()
    ROUND_ADVANCED = auto()
    GAME_WON = auto()
    GAME_EXITED = auto()
    STATE_UPDATED = auto()


@dataclass
class EventPayload:
    """Wrapper for game event data."""

    event: GameEvent
    player_index: int | None = None
    data: dict[str, Any] = field(default_factory=dict)


# Events after which the view should surface a prompt
_PROMPT_EVENTS = frozenset({
    GameEvent.SECOND_CHANCE_OFFERED,
    GameEvent.VOTE_REQUESTED,
})

# Events that end or replace the current game
_TERMINAL_EVENTS = frozenset({
    GameEvent.GAME_WON,
    GameEvent.GAME_EXITED,
})


def is_prompt_event(event: GameEvent) -> bool:
    """True if the event opens a prompt the view must show."""
    return event in _PROMPT_EVENTS


def is_terminal_event(event: GameEvent) -> bool:
    """True if no further events follow for this game."""
    return event in _TERMINAL_EVENTS
