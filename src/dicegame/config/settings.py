"""
Second Chance Dice - Application Settings

Loads configuration from environment variables using Pydantic Settings.
Covers the default rule-set, the pacing delays that stand in for
animations, and the CPU policy probabilities.
"""

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings

from dicegame.engine.base import RulesetVersion


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # Rules
    default_ruleset: RulesetVersion = RulesetVersion.SECOND_CHANCE

    # Pacing (seconds)
    cpu_think_delay: float = 1.5
    dice_settle_delay: float = 0.7
    score_reveal_delay: float = 1.0
    bonus_toast_duration: float = 2.0
    cpu_vote_delay_min: float = 1.0
    cpu_vote_delay_max: float = 2.5

    # CPU policy
    cpu_accept_probability: float = 0.5
    cpu_vote_yes_probability: float = 0.6
    cpu_vote_request_probability: float = 0.15
    cpu_rng_seed: int | None = None

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @model_validator(mode="after")
    def _check_ranges(self) -> "Settings":
        for name in (
            "cpu_think_delay",
            "dice_settle_delay",
            "score_reveal_delay",
            "bonus_toast_duration",
            "cpu_vote_delay_min",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative.")
        if self.cpu_vote_delay_max < self.cpu_vote_delay_min:
            raise ValueError("cpu_vote_delay_max must be >= cpu_vote_delay_min.")
        for name in (
            "cpu_accept_probability",
            "cpu_vote_yes_probability",
            "cpu_vote_request_probability",
        ):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1.")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached singleton settings instance."""
    return Settings()
