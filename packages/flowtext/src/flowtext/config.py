"""
Timing configuration for the text reveal engines.

This module provides:
- AnimationConfig: Frozen timing/cursor settings for SequencedTypewriter
- RevealConfig: Frozen rate settings for StaggeredTokenReveal
- StreamConfig: Frozen frame throttle for StreamingTypewriter
- FlowTextSettings: Environment-driven defaults (FLOWTEXT_ prefix)

Units:
- Typewriter speeds, delays and pauses are milliseconds
- cursor_blink_duration is seconds (one half-period of the blink)
- tokens_per_second is a rate; the reveal timeline is in seconds
- stream_frame_interval is seconds

Non-positive durations are clamped to zero instead of being rejected.
Replacing a config on a running engine is a full reset of that engine.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

# Characters after which typing pauses longer
WORD_BOUNDARY_CHARS = frozenset(" ,.")
WORD_BOUNDARY_FACTOR = 3


class FlowTextSettings(BaseSettings):
    """Default engine settings.

    All settings can be overridden via environment variables with
    FLOWTEXT_ prefix. For example:
        FLOWTEXT_TYPING_SPEED=20
        FLOWTEXT_TOKENS_PER_SECOND=40
        FLOWTEXT_LOG_LEVEL=DEBUG
    """

    # Typewriter timing (milliseconds)
    typing_speed: float = 50.0
    deleting_speed: float = 30.0
    initial_delay: float = 0.0
    pause_duration: float = 1500.0

    # Cursor
    show_cursor: bool = True
    cursor_character: str = "|"
    cursor_blink_duration: float = 0.5  # seconds

    # Token reveal
    tokens_per_second: float = 20.0

    # Streaming catch-up (seconds between display updates)
    stream_frame_interval: float = 0.032

    log_level: str = "WARNING"

    model_config = {"env_prefix": "FLOWTEXT_"}


class AnimationConfig(BaseModel):
    """
    Timing configuration for one SequencedTypewriter run.

    Immutable: a new run is started by replacing the whole config, never
    by mutating it.

    Example:
        config = AnimationConfig(typing_speed=30, pause_duration=4000, loop=True)
        config.typing_delay_for(",")  # 90.0 before jitter
    """

    model_config = ConfigDict(frozen=True)

    typing_speed: float = Field(
        default=50.0, description="Base delay between typed characters (ms)"
    )
    deleting_speed: float = Field(
        default=30.0, description="Base delay between deleted characters (ms)"
    )
    initial_delay: float = Field(
        default=0.0, description="Delay before the first character (ms)"
    )
    pause_duration: float = Field(
        default=1500.0, description="Hold time on a fully typed string (ms)"
    )
    loop: bool = Field(
        default=False, description="Restart from the first string after the last"
    )
    typing_jitter: float = Field(
        default=0.6, description="Jitter ratio for typing delays (wider)"
    )
    deleting_jitter: float = Field(
        default=0.4, description="Jitter ratio for deleting delays (narrower)"
    )
    show_cursor: bool = Field(default=True, description="Run the cursor blink")
    cursor_character: str = Field(default="|", description="Cursor glyph")
    cursor_blink_duration: float = Field(
        default=0.5, description="Seconds between cursor visibility toggles"
    )

    @field_validator(
        "typing_speed",
        "deleting_speed",
        "initial_delay",
        "pause_duration",
        "typing_jitter",
        "deleting_jitter",
        "cursor_blink_duration",
    )
    @classmethod
    def _clamp_non_negative(cls, value: float) -> float:
        return max(0.0, value)

    def typing_delay_for(self, char: str) -> float:
        """
        Base (pre-jitter) delay after typing a character.

        Spaces, commas and periods get three times the typing speed to
        approximate natural pacing at word and sentence boundaries.

        Args:
            char: Character that was just appended

        Returns:
            Base delay in milliseconds
        """
        if char in WORD_BOUNDARY_CHARS:
            return self.typing_speed * WORD_BOUNDARY_FACTOR
        return self.typing_speed

    @classmethod
    def from_settings(cls, settings: FlowTextSettings, **overrides) -> AnimationConfig:
        """Build a config from environment settings plus explicit overrides."""
        values = {
            "typing_speed": settings.typing_speed,
            "deleting_speed": settings.deleting_speed,
            "initial_delay": settings.initial_delay,
            "pause_duration": settings.pause_duration,
            "show_cursor": settings.show_cursor,
            "cursor_character": settings.cursor_character,
            "cursor_blink_duration": settings.cursor_blink_duration,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class RevealConfig(BaseModel):
    """Rate configuration for StaggeredTokenReveal."""

    model_config = ConfigDict(frozen=True)

    tokens_per_second: float = Field(
        default=20.0, description="Requested base reveal rate"
    )
    transition_duration: float = Field(
        default=0.2, description="Per-token opacity/offset settle time (s)"
    )

    @field_validator("tokens_per_second", "transition_duration")
    @classmethod
    def _clamp_non_negative(cls, value: float) -> float:
        return max(0.0, value)

    @classmethod
    def from_settings(cls, settings: FlowTextSettings, **overrides) -> RevealConfig:
        values = {"tokens_per_second": settings.tokens_per_second}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class StreamConfig(BaseModel):
    """Frame throttle for StreamingTypewriter."""

    model_config = ConfigDict(frozen=True)

    frame_interval: float = Field(
        default=0.032, description="Minimum seconds between display updates"
    )

    @field_validator("frame_interval")
    @classmethod
    def _clamp_non_negative(cls, value: float) -> float:
        return max(0.0, value)

    @classmethod
    def from_settings(cls, settings: FlowTextSettings, **overrides) -> StreamConfig:
        values = {"frame_interval": settings.stream_frame_interval}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
