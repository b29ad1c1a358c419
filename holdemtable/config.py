"""
Table configuration.

Settings are validated with pydantic before they touch a running game; a
bad value raises ``ConfigurationError`` and leaves the current settings in
place.
"""

from typing import Optional
from pydantic import BaseModel, Field, ValidationError, model_validator

from holdemtable.core.rules import (
    DEFAULT_SMALL_BLIND, DEFAULT_BIG_BLIND, DEFAULT_STARTING_CHIPS,
    DEFAULT_PLAYER_COUNT, DEFAULT_BET_UNIT, DEFAULT_BOT_DELAY,
    MIN_PLAYERS, MAX_PLAYERS,
)


class ConfigurationError(ValueError):
    """Invalid blind, chip or player-count settings."""


class TableConfig(BaseModel):
    """Blinds, stacks and seating for one table."""
    small_blind: int = Field(gt=0, default=DEFAULT_SMALL_BLIND)
    big_blind: int = Field(gt=0, default=DEFAULT_BIG_BLIND)
    starting_chips: int = Field(gt=0, default=DEFAULT_STARTING_CHIPS)
    player_count: int = Field(ge=MIN_PLAYERS, le=MAX_PLAYERS, default=DEFAULT_PLAYER_COUNT)
    bet_unit: int = Field(gt=0, default=DEFAULT_BET_UNIT)
    bot_delay: float = Field(ge=0, default=DEFAULT_BOT_DELAY, description="Seconds before a bot acts")
    human_seat: int = Field(ge=0, default=0)
    human_name: str = "You"
    seed: Optional[int] = Field(default=None, description="Seed for the shuffle and the bots")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_table(self) -> "TableConfig":
        if self.big_blind < self.small_blind:
            raise ValueError("big blind cannot be smaller than the small blind")
        if self.starting_chips < self.big_blind:
            raise ValueError("starting chips must cover the big blind")
        if self.human_seat >= self.player_count:
            raise ValueError("human seat must be one of the table's seats")
        return self

    @classmethod
    def build(cls, **settings) -> "TableConfig":
        """Validate settings, raising ConfigurationError instead of ValidationError."""
        try:
            return cls(**settings)
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e

    def updated(self, **changes) -> "TableConfig":
        """A validated copy with some settings changed."""
        return self.build(**{**self.model_dump(), **changes})
