"""Second Chance Dice: turn/round state machine and scoring engine."""

from dicegame.engine import GameSession, GameSettings, GameSnapshot

__version__ = "0.1.0"

__all__ = ["GameSession", "GameSettings", "GameSnapshot", "__version__"]
