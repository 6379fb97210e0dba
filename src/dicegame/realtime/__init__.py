"""
Second Chance Dice Pacing and Events.

Schedulers for time-delayed transitions and the event vocabulary
delivered to view-layer listeners.
"""

from dicegame.realtime.events import EventPayload, GameEvent
from dicegame.realtime.scheduler import (
    AsyncioScheduler,
    ImmediateScheduler,
    Scheduler,
    VirtualClockScheduler,
)

__all__ = [
    "AsyncioScheduler",
    "EventPayload",
    "GameEvent",
    "ImmediateScheduler",
    "Scheduler",
    "VirtualClockScheduler",
]
